# Pydantic schemas package
from app.schemas.user import UserCreate, UserResponse
from app.schemas.project import (
    ProjectType, ProjectStatus, ProjectCreate, ProjectPatch, ProjectResponse
)
from app.schemas.generation import (
    GenerationStatus, GenerationCreate, GenerationPatch, GenerationResponse,
    MovieGenerateRequest, MusicGenerateRequest, VoiceGenerateRequest, AnalysisGenerateRequest,
    StartGenerationResponse, CancelGenerationResponse, ACTIVE_STATUSES, TERMINAL_STATUSES
)
from app.schemas.events import EventType, EventMessage

__all__ = [
    "UserCreate", "UserResponse",
    "ProjectType", "ProjectStatus", "ProjectCreate", "ProjectPatch", "ProjectResponse",
    "GenerationStatus", "GenerationCreate", "GenerationPatch", "GenerationResponse",
    "MovieGenerateRequest", "MusicGenerateRequest", "VoiceGenerateRequest", "AnalysisGenerateRequest",
    "StartGenerationResponse", "CancelGenerationResponse", "ACTIVE_STATUSES", "TERMINAL_STATUSES",
    "EventType", "EventMessage",
]
