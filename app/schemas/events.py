"""
Event Schemas
Messages pushed to connected observers over the event stream.
"""

from typing import Any
from enum import Enum

from pydantic import BaseModel


class EventType(str, Enum):
    """Kinds of state-change events."""
    PROJECT_CREATED = "project_created"
    PROJECT_UPDATED = "project_updated"
    PROJECT_DELETED = "project_deleted"
    GENERATION_STARTED = "generation_started"
    GENERATION_PROGRESS = "generation_progress"
    GENERATION_COMPLETED = "generation_completed"
    GENERATION_ERROR = "generation_error"


class EventMessage(BaseModel):
    """Wire shape of a pushed event."""
    type: EventType
    data: Any
