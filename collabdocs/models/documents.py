"""
Request and response models for documents and projects.

Timestamps may be supplied by the client (the editor keeps its own
clock for offline edits); the server fills them in otherwise.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class DocumentCreate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=255, description="Defaults to 'Untitled Document'")
    content: Optional[str] = Field(default=None)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DocumentUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=255)
    content: Optional[str] = None
    updated_at: Optional[datetime] = None


class DocumentResponse(BaseModel):
    id: int
    name: str
    content: Optional[str] = None
    user_id: int
    owner_id: int
    is_starred: bool = False
    is_trashed: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DocumentProjectResponse(BaseModel):
    """Project a document belongs to; both fields null when unassigned."""
    project_id: Optional[int] = None
    project_name: Optional[str] = None


class ProjectCreate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=255, description="Defaults to 'Untitled Project'")
    description: Optional[str] = None


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None


class ProjectResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    user_id: int
    owner_id: int
    is_starred: bool = False
    is_trashed: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
