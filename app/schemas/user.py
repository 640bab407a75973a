"""
User Schemas
Pydantic models for user records.
"""

from datetime import datetime

from pydantic import Field

from app.schemas.base import CamelModel


class UserCreate(CamelModel):
    """Data required to register a user."""
    email: str = Field(min_length=3)
    first_name: str
    last_name: str


class UserResponse(CamelModel):
    """Schema for user response."""
    id: str
    email: str
    first_name: str
    last_name: str
    created_at: datetime
    updated_at: datetime
