"""
API Routes module - Endpoint definitions.

Each file in this module defines routes for a specific domain:
- health.py      : Health check endpoints
- users.py       : Accounts, login cookie, profile image, usage
- documents.py   : Documents, sharing, star/trash
- projects.py    : Projects and their documents
- keybindings.py : Editor commands and keybinding overrides
- preferences.py : Preferences and background image
- assistant.py   : Writing assistant (RAG chat and commands)
- database.py    : Connectivity test and guarded wipe
"""
from collabdocs.api.routes.health import router as health_router
from collabdocs.api.routes.users import router as users_router
from collabdocs.api.routes.documents import router as documents_router
from collabdocs.api.routes.projects import router as projects_router
from collabdocs.api.routes.keybindings import router as keybindings_router
from collabdocs.api.routes.preferences import router as preferences_router
from collabdocs.api.routes.assistant import router as assistant_router
from collabdocs.api.routes.database import router as database_router

__all__ = [
    "health_router",
    "users_router",
    "documents_router",
    "projects_router",
    "keybindings_router",
    "preferences_router",
    "assistant_router",
    "database_router",
]
