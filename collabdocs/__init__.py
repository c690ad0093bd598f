"""
collabdocs - collaborative document-editing backend.

This package contains all application source code organized by responsibility:
- api/       : FastAPI routes and HTTP handling
- core/      : Configuration, logging, security and cross-cutting utilities
- services/  : Business logic (users, documents, projects, assistant, ...)
- llm/       : LLM integration and prompt management
- rag/       : Embeddings, vector retrieval and prompt budgeting
- database/  : SQLAlchemy models, connection and seeding
- models/    : Pydantic models for request/response schemas
"""
__version__ = "0.4.0"
