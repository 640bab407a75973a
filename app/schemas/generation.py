"""
Generation Schemas
Pydantic models for generation records and the per-type start requests.
"""

from datetime import datetime
from typing import Optional, Dict, Any, List
from enum import Enum

from pydantic import Field

from app.schemas.base import CamelModel
from app.schemas.project import ProjectType


class GenerationStatus(str, Enum):
    """Generation job status."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


ACTIVE_STATUSES = (GenerationStatus.PENDING, GenerationStatus.PROCESSING)
TERMINAL_STATUSES = (GenerationStatus.COMPLETED, GenerationStatus.ERROR)


class GenerationCreate(CamelModel):
    """Internal data used to open a generation record."""
    project_id: int
    user_id: str
    type: ProjectType
    prompt: str
    model: str
    status: GenerationStatus = GenerationStatus.PENDING
    progress: int = Field(default=0, ge=0, le=100)


class GenerationPatch(CamelModel):
    """Fields the generation lifecycle may change."""
    status: Optional[GenerationStatus] = None
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    result: Optional[Any] = None
    error: Optional[str] = None
    
    def changes(self) -> Dict[str, Any]:
        data = self.model_dump(exclude_unset=True)
        return {k: v for k, v in data.items() if v is not None or k in ("result", "error")}


class GenerationResponse(CamelModel):
    """Schema for generation response."""
    id: int
    project_id: int
    user_id: str
    type: ProjectType
    prompt: str
    model: str
    status: GenerationStatus
    progress: int = 0
    result: Optional[Any] = None
    error: Optional[str] = None
    created_at: datetime
    completed_at: Optional[datetime] = None


class MovieGenerateRequest(CamelModel):
    """Start a movie production plan."""
    project_id: int
    script: str = Field(min_length=1)
    genre: str = "drama"
    quality: str = "1080p"
    duration: str = "60"
    audio_enhancement: List[str] = []


class MusicGenerateRequest(CamelModel):
    """Start a music production plan."""
    project_id: int
    lyrics: str = Field(min_length=1)
    genre: str = "pop"
    style: str = "modern"
    duration: str = "180"


class VoiceGenerateRequest(CamelModel):
    """Start a voice synthesis plan."""
    project_id: int
    text: str = Field(min_length=1)
    voice: str = "neutral"
    style: str = "conversational"
    speed: float = Field(default=1.0, gt=0, le=4)


class AnalysisGenerateRequest(CamelModel):
    """Start a content analysis."""
    project_id: int
    content: str = Field(min_length=1)
    analysis_type: str = "comprehensive"


class StartGenerationResponse(CamelModel):
    """Returned immediately when a generation job is launched."""
    generation: GenerationResponse


class CancelGenerationResponse(CamelModel):
    id: int
    cancelled: bool
