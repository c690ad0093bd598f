"""Request and response models for the users API."""
from typing import Optional

from pydantic import BaseModel, Field


class SignupRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, examples=["Ada Lovelace"])
    email: str = Field(..., min_length=3, max_length=255, examples=["ada@example.com"])
    password: str = Field(..., min_length=1, max_length=255)


class LoginRequest(BaseModel):
    email: str = Field(..., description="Account email")
    password: str = Field(..., description="Account password")


class UpdateUserRequest(BaseModel):
    """All fields are replaced; omitted fields keep their current value."""
    name: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=255)


class UserResponse(BaseModel):
    id: int
    name: str
    email: str


class StorageResponse(BaseModel):
    """Document storage used by the caller."""
    bytes: int
    formatted_bytes: str = Field(..., description="Human readable size, e.g. '12.4 KB'")
    kb: float
    mb: float
    limit_bytes: int
    percentage: float = Field(..., description="Share of the storage quota in use (0-100)")


class CreditsResponse(BaseModel):
    user_id: int
    ai_credits: int
