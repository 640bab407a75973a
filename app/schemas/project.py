"""
Project Schemas
Pydantic models for project API requests, patches and responses.
"""

from datetime import datetime
from typing import Optional, Dict, Any
from enum import Enum

from pydantic import Field, model_validator

from app.schemas.base import CamelModel


class ProjectType(str, Enum):
    """Content type a project targets."""
    MOVIE = "movie"
    MUSIC = "music"
    VOICE = "voice"
    ANALYSIS = "analysis"


class ProjectStatus(str, Enum):
    """Project lifecycle status."""
    DRAFT = "draft"
    GENERATING = "generating"
    COMPLETED = "completed"
    ERROR = "error"


_REQUIRED_FIELDS = {"title", "type", "status", "progress"}


class ProjectCreate(CamelModel):
    """Client payload for creating a project. Owner is the current user."""
    title: str = Field(min_length=1, max_length=255)
    type: ProjectType
    description: Optional[str] = None
    quality: Optional[str] = None
    duration: Optional[str] = None
    settings: Optional[Dict[str, Any]] = None


class ProjectPatch(CamelModel):
    """
    Fields a project update may change.
    
    Only fields explicitly present in the payload are merged.
    """
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    type: Optional[ProjectType] = None
    status: Optional[ProjectStatus] = None
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    quality: Optional[str] = None
    duration: Optional[str] = None
    content: Optional[Any] = None
    settings: Optional[Dict[str, Any]] = None
    
    @model_validator(mode="after")
    def check_progress_status(self):
        if (
            self.progress == 100
            and self.status is not None
            and self.status != ProjectStatus.COMPLETED
        ):
            raise ValueError("progress can only be 100 for a completed project")
        return self
    
    def changes(self) -> Dict[str, Any]:
        """Explicitly set fields, keyed by attribute name."""
        data = self.model_dump(exclude_unset=True)
        # An explicit null only clears the optional columns
        return {k: v for k, v in data.items() if v is not None or k not in _REQUIRED_FIELDS}


class ProjectResponse(CamelModel):
    """Schema for project response."""
    id: int
    user_id: str
    title: str
    description: Optional[str] = None
    type: ProjectType
    status: ProjectStatus = ProjectStatus.DRAFT
    progress: int = 0
    quality: Optional[str] = None
    duration: Optional[str] = None
    content: Optional[Any] = None
    settings: Optional[Dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime
