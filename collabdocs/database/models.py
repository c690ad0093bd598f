"""
Database Models - SQLAlchemy ORM models.

Tables:
- users                           : accounts, AI credits, profile image
- documents                       : document text plus its pgvector embedding
- document_permissions            : (document, user) -> viewer | editor | owner
- projects / project_permissions  : same sharing model for projects
- document_projects               : which project a document belongs to
- commands / user_keybindings     : editor commands and per-user overrides
- default_preferences / user_preferences / user_backgrounds
- writing_assistant_sessions / writing_assistant_messages
"""
from datetime import datetime
from typing import Any, Dict

from pgvector.sqlalchemy import Vector
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    LargeBinary,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship

from collabdocs.core.config import get_settings

Base = declarative_base()

EMBEDDING_DIMENSION = get_settings().embedding_dimension

ROLE_CHECK = "role IN ('viewer', 'editor', 'owner')"


def _iso(value: datetime):
    return value.isoformat() if value else None


# ============================================================
# Users
# ============================================================

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    ai_credits = Column(Integer, nullable=False, default=0)
    profile_image = Column(LargeBinary, nullable=True)
    profile_image_content_type = Column(String(100), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self) -> Dict[str, Any]:
        """Public profile; never includes the password hash."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
        }


# ============================================================
# Documents
# ============================================================

class Document(Base):
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, default="Untitled Document")
    content = Column(Text, nullable=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    is_starred = Column(Boolean, nullable=False, default=False)
    is_trashed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    embedding = Column(Vector(EMBEDDING_DIMENSION), nullable=True)
    embedding_updated_at = Column(DateTime, nullable=True)
    # Content length when the embedding was computed
    embedding_content_length = Column(Integer, nullable=True)

    permissions = relationship(
        "DocumentPermission",
        back_populates="document",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "content": self.content,
            "user_id": self.user_id,
            "owner_id": self.user_id,
            "is_starred": self.is_starred,
            "is_trashed": self.is_trashed,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class DocumentPermission(Base):
    __tablename__ = "document_permissions"
    __table_args__ = (CheckConstraint(ROLE_CHECK, name="ck_document_permissions_role"),)

    document_id = Column(Integer, ForeignKey("documents.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True)
    role = Column(String(20), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    document = relationship("Document", back_populates="permissions")
    user = relationship("User")


# ============================================================
# Projects
# ============================================================

class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, default="Untitled Project")
    description = Column(Text, nullable=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    is_starred = Column(Boolean, nullable=False, default=False)
    is_trashed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    permissions = relationship(
        "ProjectPermission",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "user_id": self.user_id,
            "owner_id": self.user_id,
            "is_starred": self.is_starred,
            "is_trashed": self.is_trashed,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class ProjectPermission(Base):
    __tablename__ = "project_permissions"
    __table_args__ = (CheckConstraint(ROLE_CHECK, name="ck_project_permissions_role"),)

    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True)
    role = Column(String(20), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    project = relationship("Project", back_populates="permissions")
    user = relationship("User")


class DocumentProject(Base):
    """A document belongs to at most one project."""
    __tablename__ = "document_projects"

    document_id = Column(Integer, ForeignKey("documents.id", ondelete="CASCADE"), primary_key=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)


# ============================================================
# Keybindings
# ============================================================

class Command(Base):
    __tablename__ = "commands"

    command_id = Column(Integer, primary_key=True, autoincrement=True)
    command_name = Column(String(100), nullable=False, unique=True)
    command_description = Column(Text, nullable=False, default="")
    default_keybinding = Column(String(64), nullable=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "command_id": self.command_id,
            "command_name": self.command_name,
            "command_description": self.command_description,
            "default_keybinding": self.default_keybinding,
        }


class UserKeybinding(Base):
    __tablename__ = "user_keybindings"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    command_id = Column(Integer, ForeignKey("commands.command_id", ondelete="CASCADE"), primary_key=True)
    keybinding = Column(String(64), nullable=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "command_id": self.command_id,
            "keybinding": self.keybinding,
        }


# ============================================================
# Preferences
# ============================================================

class DefaultPreference(Base):
    __tablename__ = "default_preferences"

    preference_id = Column(Integer, primary_key=True, autoincrement=True)
    preference_name = Column(String(100), nullable=False, unique=True)
    preference_value = Column(Text, nullable=False)
    preference_description = Column(Text, nullable=False, default="")


class UserPreference(Base):
    __tablename__ = "user_preferences"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    preference_id = Column(
        Integer, ForeignKey("default_preferences.preference_id", ondelete="CASCADE"), primary_key=True
    )
    preference_value = Column(Text, nullable=False)


class UserBackground(Base):
    __tablename__ = "user_backgrounds"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    image_data = Column(LargeBinary, nullable=False)
    content_type = Column(String(100), nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


# ============================================================
# Writing assistant
# ============================================================

class WritingSession(Base):
    """
    A conversation with the writing assistant.

    Optionally linked to a document; that document is always placed
    first in the retrieval context.
    """
    __tablename__ = "writing_assistant_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    document_id = Column(Integer, ForeignKey("documents.id", ondelete="SET NULL"), nullable=True)
    title = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    messages = relationship(
        "WritingMessage",
        back_populates="session",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="WritingMessage.id",
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "document_id": self.document_id,
            "title": self.title,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class WritingMessage(Base):
    __tablename__ = "writing_assistant_messages"
    __table_args__ = (
        CheckConstraint("role IN ('user', 'assistant', 'system')", name="ck_writing_messages_role"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(
        Integer, ForeignKey("writing_assistant_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role = Column(String(20), nullable=False)
    content = Column(Text, nullable=False)
    embedding = Column(Vector(EMBEDDING_DIMENSION), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    session = relationship("WritingSession", back_populates="messages")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "session_id": self.session_id,
            "role": self.role,
            "content": self.content,
            "created_at": _iso(self.created_at),
        }
