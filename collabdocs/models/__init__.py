"""
Models module - Pydantic schemas for data validation.

This module defines:
- Request models: Input validation for API endpoints
- Response models: Output formatting for API responses
"""
from collabdocs.models.common import (
    result,
    HealthResponse,
    ErrorResponse,
    PermissionGrant,
    PermissionEntry,
)

__all__ = [
    "result",
    "HealthResponse",
    "ErrorResponse",
    "PermissionGrant",
    "PermissionEntry",
]
