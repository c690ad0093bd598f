"""
Shared response models.

Mutating endpoints answer with the envelope
    {"result": {"success": true, ...}}
built by result().
"""
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


def result(success: bool = True, **extra: Any) -> Dict[str, Any]:
    """Build the {"result": {...}} envelope."""
    body = {"success": success}
    body.update(extra)
    return {"result": body}


class HealthResponse(BaseModel):
    """Response model for the /health endpoint."""
    status: str = Field(default="healthy")
    version: str
    database: Optional[str] = Field(default=None, description="Database status (readiness only)")
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class ErrorResponse(BaseModel):
    """Standard error response model."""
    error: str
    message: str
    details: Optional[str] = None


class PermissionGrant(BaseModel):
    """Body for granting or changing a role on a document or project."""
    user_id: int = Field(..., description="User receiving the role")
    role: str = Field(..., description="viewer, editor or owner", examples=["editor"])


class PermissionEntry(BaseModel):
    """A user's role on a resource, joined with their profile."""
    user_id: int
    name: str
    email: str
    role: str
