"""
Generation Service
Starts and cancels generation jobs on behalf of the API routes.
"""

import logging
from typing import Optional

from app.schemas.events import EventType
from app.schemas.generation import GenerationCreate, GenerationResponse
from app.schemas.project import ProjectPatch, ProjectStatus, ProjectType
from app.services.events import EventBroadcaster
from app.services.store import BaseStore
from app.workers.executor import JobExecutor
from app.workers.generator import GenerationRunner

logger = logging.getLogger(__name__)


class GenerationService:
    """Opens generation records and hands them to the executor."""
    
    def __init__(
        self,
        store: BaseStore,
        broadcaster: EventBroadcaster,
        executor: JobExecutor,
        runner: GenerationRunner,
        model_name: str,
    ):
        self.store = store
        self.broadcaster = broadcaster
        self.executor = executor
        self.runner = runner
        self.model_name = model_name
    
    async def start(self, kind: ProjectType, request, user_id: str) -> Optional[GenerationResponse]:
        """
        Create a pending generation and launch its job without awaiting it.
        
        `request` is one of the *GenerateRequest schemas. Returns None when
        the referenced project does not exist.
        """
        project = self.store.get_project(request.project_id)
        if project is None:
            return None
        
        profile = self.runner.profiles[kind]
        inputs = request.model_dump(exclude={"project_id"})
        
        generation = self.store.create_generation(
            GenerationCreate(
                project_id=project.id,
                user_id=user_id,
                type=kind,
                prompt=inputs[profile.prompt_field],
                model=self.model_name,
            )
        )
        self.store.update_project(
            project.id, ProjectPatch(status=ProjectStatus.GENERATING, progress=0)
        )
        await self.broadcaster.broadcast(EventType.GENERATION_STARTED, generation)
        
        self.executor.submit(
            generation.id,
            self.runner.run(generation.id, inputs),
            on_cancel=lambda: self.runner.abort(generation.id),
        )
        logger.info(f"Started {kind.value} generation {generation.id} for project {project.id}")
        return generation
    
    def cancel(self, generation_id: int) -> Optional[bool]:
        """None if the generation is unknown, else whether a running job was cancelled."""
        if self.store.get_generation(generation_id) is None:
            return None
        return self.executor.cancel(generation_id)
