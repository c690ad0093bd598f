"""
Services module - Business logic layer.

Services orchestrate database access, permission checks and the
writing assistant. Routes call into services; services never touch
HTTP objects.
"""
from collabdocs.services.user_service import UserService, get_user_service
from collabdocs.services.document_service import DocumentService, get_document_service
from collabdocs.services.project_service import ProjectService, get_project_service
from collabdocs.services.keybinding_service import KeybindingService, get_keybinding_service
from collabdocs.services.preference_service import PreferenceService, get_preference_service
from collabdocs.services.credit_service import CreditService, get_credit_service
from collabdocs.services.assistant_service import AssistantService, get_assistant_service

__all__ = [
    "UserService",
    "get_user_service",
    "DocumentService",
    "get_document_service",
    "ProjectService",
    "get_project_service",
    "KeybindingService",
    "get_keybinding_service",
    "PreferenceService",
    "get_preference_service",
    "CreditService",
    "get_credit_service",
    "AssistantService",
    "get_assistant_service",
]
