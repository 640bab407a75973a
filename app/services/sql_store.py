"""
SQL Entity Store
SQLAlchemy-backed implementation of the store contract.
Tables: users, projects, generations (JSON columns for content/settings/result).
"""

import logging
import uuid
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from app.models import Generation, Project, User
from app.schemas.generation import (
    ACTIVE_STATUSES,
    GenerationCreate,
    GenerationPatch,
    GenerationResponse,
    GenerationStatus,
)
from app.schemas.project import ProjectCreate, ProjectPatch, ProjectResponse, ProjectStatus
from app.schemas.user import UserCreate, UserResponse
from app.services.store import BaseStore, Clock, DuplicateEmailError, check_project_state

logger = logging.getLogger(__name__)


def _column_values(data: Dict[str, Any]) -> Dict[str, Any]:
    """Enum members -> their stored string values."""
    return {k: v.value if isinstance(v, Enum) else v for k, v in data.items()}


class SqlStore(BaseStore):
    """Store backed by a relational database. One session per operation."""
    
    def __init__(
        self,
        session_factory: sessionmaker,
        clock: Optional[Clock] = None,
        stamp_completed_on_error: bool = False,
    ):
        super().__init__(clock=clock, stamp_completed_on_error=stamp_completed_on_error)
        self._session_factory = session_factory
    
    # Users
    def get_user(self, user_id: str) -> Optional[UserResponse]:
        with self._session_factory() as db:
            user = db.get(User, user_id)
            return UserResponse.model_validate(user) if user else None
    
    def get_user_by_email(self, email: str) -> Optional[UserResponse]:
        with self._session_factory() as db:
            user = db.query(User).filter(User.email == email).first()
            return UserResponse.model_validate(user) if user else None
    
    def create_user(self, data: UserCreate, user_id: Optional[str] = None) -> UserResponse:
        now = self._now()
        with self._session_factory() as db:
            user = User(
                id=user_id or f"user-{uuid.uuid4().hex[:12]}",
                created_at=now,
                updated_at=now,
                **data.model_dump(),
            )
            db.add(user)
            try:
                db.commit()
            except IntegrityError as e:
                db.rollback()
                raise DuplicateEmailError(f"Email already registered: {data.email}") from e
            return UserResponse.model_validate(user)
    
    # Projects
    def get_projects(self, user_id: str) -> List[ProjectResponse]:
        with self._session_factory() as db:
            rows = (
                db.query(Project)
                .filter(Project.user_id == user_id)
                .order_by(Project.updated_at.desc(), Project.id.desc())
                .all()
            )
            return [ProjectResponse.model_validate(p) for p in rows]
    
    def get_project(self, project_id: int) -> Optional[ProjectResponse]:
        with self._session_factory() as db:
            project = db.get(Project, project_id)
            return ProjectResponse.model_validate(project) if project else None
    
    def create_project(self, data: ProjectCreate, user_id: str) -> ProjectResponse:
        now = self._now()
        with self._session_factory() as db:
            project = Project(
                user_id=user_id,
                status=ProjectStatus.DRAFT.value,
                progress=0,
                created_at=now,
                updated_at=now,
                **_column_values(data.model_dump()),
            )
            db.add(project)
            db.commit()
            db.refresh(project)
            return ProjectResponse.model_validate(project)
    
    def update_project(self, project_id: int, patch: ProjectPatch) -> Optional[ProjectResponse]:
        with self._session_factory() as db:
            project = db.get(Project, project_id)
            if not project:
                return None
            changes = _column_values(patch.changes())
            check_project_state(
                changes.get("status", project.status), changes.get("progress", project.progress)
            )
            for field, value in changes.items():
                setattr(project, field, value)
            project.updated_at = self._now()
            db.commit()
            db.refresh(project)
            return ProjectResponse.model_validate(project)
    
    def delete_project(self, project_id: int) -> bool:
        with self._session_factory() as db:
            project = db.get(Project, project_id)
            if not project:
                return False
            db.delete(project)
            db.commit()
            return True
    
    # Generations
    def get_generations(
        self,
        user_id: str,
        project_id: Optional[int] = None,
        status: Optional[GenerationStatus] = None,
    ) -> List[GenerationResponse]:
        with self._session_factory() as db:
            query = db.query(Generation).filter(Generation.user_id == user_id)
            if project_id is not None:
                query = query.filter(Generation.project_id == project_id)
            if status is not None:
                query = query.filter(Generation.status == GenerationStatus(status).value)
            rows = query.order_by(Generation.created_at.desc(), Generation.id.desc()).all()
            return [GenerationResponse.model_validate(g) for g in rows]
    
    def get_generation(self, generation_id: int) -> Optional[GenerationResponse]:
        with self._session_factory() as db:
            generation = db.get(Generation, generation_id)
            return GenerationResponse.model_validate(generation) if generation else None
    
    def create_generation(self, data: GenerationCreate) -> GenerationResponse:
        with self._session_factory() as db:
            generation = Generation(
                created_at=self._now(),
                completed_at=None,
                **_column_values(data.model_dump()),
            )
            db.add(generation)
            db.commit()
            db.refresh(generation)
            return GenerationResponse.model_validate(generation)
    
    def update_generation(
        self, generation_id: int, patch: GenerationPatch
    ) -> Optional[GenerationResponse]:
        with self._session_factory() as db:
            generation = db.get(Generation, generation_id)
            if not generation:
                return None
            changes = patch.changes()
            for field, value in _column_values(changes).items():
                setattr(generation, field, value)
            generation.completed_at = self._completed_at_for(
                changes.get("status"), generation.completed_at
            )
            db.commit()
            db.refresh(generation)
            return GenerationResponse.model_validate(generation)
    
    def get_active_generations(self, user_id: str) -> List[GenerationResponse]:
        with self._session_factory() as db:
            rows = (
                db.query(Generation)
                .filter(
                    Generation.user_id == user_id,
                    Generation.status.in_([s.value for s in ACTIVE_STATUSES]),
                )
                .order_by(Generation.created_at.desc(), Generation.id.desc())
                .all()
            )
            return [GenerationResponse.model_validate(g) for g in rows]
    
    def close(self) -> None:
        bind = self._session_factory.kw.get("bind")
        if bind is not None:
            bind.dispose()
