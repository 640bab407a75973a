"""
Entity Store
Repository of users, projects and generations.

`BaseStore` is the contract used by the API and the generation runner.
`MemoryStore` keeps everything in keyed dicts for the lifetime of the process;
`app.services.sql_store.SqlStore` backs the same contract with SQLAlchemy.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from app.schemas.generation import (
    ACTIVE_STATUSES,
    GenerationCreate,
    GenerationPatch,
    GenerationResponse,
    GenerationStatus,
)
from app.schemas.project import ProjectCreate, ProjectPatch, ProjectResponse, ProjectStatus
from app.schemas.user import UserCreate, UserResponse

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _snapshot(model):
    """Detached copy, so callers never hold the stored instance."""
    return model.model_copy(deep=True) if model is not None else None


class DuplicateEmailError(ValueError):
    """Raised when a user is created with an email that is already taken."""


class InvalidProjectStateError(ValueError):
    """Raised when an update would leave a project at 100% without being completed."""


def check_project_state(status, progress: int) -> None:
    """A project reaches 100% only once it is completed."""
    if progress == 100 and status != ProjectStatus.COMPLETED:
        raise InvalidProjectStateError("progress can only be 100 for a completed project")


class BaseStore(ABC):
    """
    Storage contract.
    
    Lookups return None (or False for deletes) when an id is unknown;
    they never raise for a missing entity.
    """
    
    def __init__(self, clock: Optional[Clock] = None, stamp_completed_on_error: bool = False):
        self._now = clock or utcnow
        self.stamp_completed_on_error = stamp_completed_on_error
    
    def _completed_at_for(self, status, previous: Optional[datetime]) -> Optional[datetime]:
        """completedAt after a merge that may have changed status."""
        if status == GenerationStatus.COMPLETED:
            return self._now()
        if status == GenerationStatus.ERROR and self.stamp_completed_on_error:
            return self._now()
        return previous
    
    # Users
    @abstractmethod
    def get_user(self, user_id: str) -> Optional[UserResponse]: ...
    
    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[UserResponse]: ...
    
    @abstractmethod
    def create_user(self, data: UserCreate, user_id: Optional[str] = None) -> UserResponse: ...
    
    def ensure_user(self, user_id: str, data: UserCreate) -> UserResponse:
        """Return the user with this id, creating it on first call."""
        user = self.get_user(user_id)
        if user is None:
            user = self.create_user(data, user_id=user_id)
            logger.info(f"Seeded user {user_id} <{data.email}>")
        return user
    
    # Projects
    @abstractmethod
    def get_projects(self, user_id: str) -> List[ProjectResponse]: ...
    
    @abstractmethod
    def get_project(self, project_id: int) -> Optional[ProjectResponse]: ...
    
    @abstractmethod
    def create_project(self, data: ProjectCreate, user_id: str) -> ProjectResponse: ...
    
    @abstractmethod
    def update_project(self, project_id: int, patch: ProjectPatch) -> Optional[ProjectResponse]: ...
    
    @abstractmethod
    def delete_project(self, project_id: int) -> bool: ...
    
    # Generations
    @abstractmethod
    def get_generations(
        self,
        user_id: str,
        project_id: Optional[int] = None,
        status: Optional[GenerationStatus] = None,
    ) -> List[GenerationResponse]: ...
    
    @abstractmethod
    def get_generation(self, generation_id: int) -> Optional[GenerationResponse]: ...
    
    @abstractmethod
    def create_generation(self, data: GenerationCreate) -> GenerationResponse: ...
    
    @abstractmethod
    def update_generation(
        self, generation_id: int, patch: GenerationPatch
    ) -> Optional[GenerationResponse]: ...
    
    @abstractmethod
    def get_active_generations(self, user_id: str) -> List[GenerationResponse]: ...
    
    def close(self) -> None:
        """Release any resources held by the store."""


class MemoryStore(BaseStore):
    """In-process store. Mutations are atomic between await points."""
    
    def __init__(self, clock: Optional[Clock] = None, stamp_completed_on_error: bool = False):
        super().__init__(clock=clock, stamp_completed_on_error=stamp_completed_on_error)
        self._users: Dict[str, UserResponse] = {}
        self._projects: Dict[int, ProjectResponse] = {}
        self._generations: Dict[int, GenerationResponse] = {}
        self._next_project_id = 1
        self._next_generation_id = 1
    
    def get_user(self, user_id: str) -> Optional[UserResponse]:
        return _snapshot(self._users.get(user_id))
    
    def get_user_by_email(self, email: str) -> Optional[UserResponse]:
        return _snapshot(next((u for u in self._users.values() if u.email == email), None))
    
    def create_user(self, data: UserCreate, user_id: Optional[str] = None) -> UserResponse:
        if self.get_user_by_email(data.email) is not None:
            raise DuplicateEmailError(f"Email already registered: {data.email}")
        now = self._now()
        user = UserResponse(
            id=user_id or f"user-{uuid.uuid4().hex[:12]}",
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )
        self._users[user.id] = user
        return _snapshot(user)
    
    def get_projects(self, user_id: str) -> List[ProjectResponse]:
        projects = [p for p in self._projects.values() if p.user_id == user_id]
        ordered = sorted(projects, key=lambda p: (p.updated_at, p.id), reverse=True)
        return [_snapshot(p) for p in ordered]
    
    def get_project(self, project_id: int) -> Optional[ProjectResponse]:
        return _snapshot(self._projects.get(project_id))
    
    def create_project(self, data: ProjectCreate, user_id: str) -> ProjectResponse:
        now = self._now()
        project = ProjectResponse(
            id=self._next_project_id,
            user_id=user_id,
            status=ProjectStatus.DRAFT,
            progress=0,
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )
        self._next_project_id += 1
        self._projects[project.id] = project
        return _snapshot(project)
    
    def update_project(self, project_id: int, patch: ProjectPatch) -> Optional[ProjectResponse]:
        project = self._projects.get(project_id)
        if project is None:
            return None
        merged = {**project.model_dump(), **patch.changes()}
        check_project_state(merged["status"], merged["progress"])
        merged["updated_at"] = self._now()
        project = ProjectResponse.model_validate(merged)
        self._projects[project_id] = project
        return _snapshot(project)
    
    def delete_project(self, project_id: int) -> bool:
        # Generations of the project are kept
        return self._projects.pop(project_id, None) is not None
    
    def get_generations(
        self,
        user_id: str,
        project_id: Optional[int] = None,
        status: Optional[GenerationStatus] = None,
    ) -> List[GenerationResponse]:
        generations = [
            g for g in self._generations.values()
            if g.user_id == user_id
            and (project_id is None or g.project_id == project_id)
            and (status is None or g.status == status)
        ]
        ordered = sorted(generations, key=lambda g: (g.created_at, g.id), reverse=True)
        return [_snapshot(g) for g in ordered]
    
    def get_generation(self, generation_id: int) -> Optional[GenerationResponse]:
        return _snapshot(self._generations.get(generation_id))
    
    def create_generation(self, data: GenerationCreate) -> GenerationResponse:
        generation = GenerationResponse(
            id=self._next_generation_id,
            created_at=self._now(),
            completed_at=None,
            **data.model_dump(),
        )
        self._next_generation_id += 1
        self._generations[generation.id] = generation
        return _snapshot(generation)
    
    def update_generation(
        self, generation_id: int, patch: GenerationPatch
    ) -> Optional[GenerationResponse]:
        generation = self._generations.get(generation_id)
        if generation is None:
            return None
        changes = patch.changes()
        merged = {**generation.model_dump(), **changes}
        merged["completed_at"] = self._completed_at_for(
            changes.get("status"), generation.completed_at
        )
        generation = GenerationResponse.model_validate(merged)
        self._generations[generation_id] = generation
        return _snapshot(generation)
    
    def get_active_generations(self, user_id: str) -> List[GenerationResponse]:
        return [g for g in self.get_generations(user_id) if g.status in ACTIVE_STATUSES]
