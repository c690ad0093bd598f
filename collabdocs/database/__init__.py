"""
Database module - PostgreSQL (pgvector) access layer.

This module handles:
- Database connection management
- ORM models
- Table creation and default seeding
"""
from collabdocs.database.connection import DatabaseConnection, get_database, reset_database
from collabdocs.database.models import (
    Base,
    User,
    Document,
    DocumentPermission,
    Project,
    ProjectPermission,
    DocumentProject,
    Command,
    UserKeybinding,
    DefaultPreference,
    UserPreference,
    UserBackground,
    WritingSession,
    WritingMessage,
)
from collabdocs.database.seed import seed_defaults
from collabdocs.database.init_db import init_tables, drop_tables, wipe_and_reinitialize

__all__ = [
    # Connection
    "DatabaseConnection",
    "get_database",
    "reset_database",
    # Models
    "Base",
    "User",
    "Document",
    "DocumentPermission",
    "Project",
    "ProjectPermission",
    "DocumentProject",
    "Command",
    "UserKeybinding",
    "DefaultPreference",
    "UserPreference",
    "UserBackground",
    "WritingSession",
    "WritingMessage",
    # Init
    "seed_defaults",
    "init_tables",
    "drop_tables",
    "wipe_and_reinitialize",
]
