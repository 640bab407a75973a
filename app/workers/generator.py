"""
Generator Worker
Runs one generation job: pending -> processing -> completed | error.

Every content type follows the same pipeline:
1. Mark the job processing at the type's starting progress
2. Build the type-specific prompt
3. Call the model once
4. Report the near-terminal checkpoint and parse the JSON answer
5. Finalize the generation and its project

Each progress change is persisted and then broadcast, so observers see
`generation_progress` events strictly before the single terminal event.
"""

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from app.schemas.events import EventType
from app.schemas.generation import (
    TERMINAL_STATUSES,
    GenerationPatch,
    GenerationResponse,
    GenerationStatus,
)
from app.schemas.project import ProjectPatch, ProjectStatus, ProjectType
from app.services.events import EventBroadcaster
from app.services.store import BaseStore, InvalidProjectStateError
from app.workers.base import ResultParseError
from app.workers.profiles import GenerationProfile

logger = logging.getLogger(__name__)

CANCELLED_MESSAGE = "Generation cancelled"


def parse_result(content: Optional[str], strict: bool = False) -> Any:
    """
    Decode the model's answer.
    
    Lenient mode maps empty or malformed content to an empty object.
    Strict mode raises ResultParseError unless the answer is a JSON object.
    """
    if not content or not content.strip():
        if strict:
            raise ResultParseError("Model returned an empty response")
        return {}
    try:
        result = json.loads(content)
    except json.JSONDecodeError as e:
        if strict:
            raise ResultParseError(f"Model returned invalid JSON: {e}") from e
        logger.warning(f"Unparseable model response ({len(content)} chars), using empty result")
        return {}
    if strict and not isinstance(result, dict):
        raise ResultParseError("Model response is not a JSON object")
    return result


class GenerationRunner:
    """
    Parameterized state machine shared by all content types.
    
    `llm` is any object with `async complete_json(system_prompt, user_prompt) -> str`.
    """
    
    def __init__(
        self,
        store: BaseStore,
        broadcaster: EventBroadcaster,
        llm,
        profiles: Mapping[ProjectType, GenerationProfile],
        strict_parsing: bool = False,
    ):
        self.store = store
        self.broadcaster = broadcaster
        self.llm = llm
        self.profiles = profiles
        self.strict_parsing = strict_parsing
    
    async def run(self, generation_id: int, inputs: Dict[str, Any]) -> Optional[GenerationResponse]:
        """Drive one job to a terminal state. Never raises except on cancellation."""
        generation = self.store.get_generation(generation_id)
        if generation is None:
            logger.error(f"[Generation {generation_id}] not found, nothing to run")
            return None
        
        profile = self.profiles[generation.type]
        start_time = datetime.now(timezone.utc)
        logger.info(f"[START] {generation.type.value} generation {generation_id} (project {generation.project_id})")
        
        try:
            await self._update_progress(
                generation_id, profile.start_progress, GenerationStatus.PROCESSING
            )
            
            user_prompt = profile.build_user_prompt(inputs)
            content = await self.llm.complete_json(profile.system_prompt, user_prompt)
            
            await self._update_progress(generation_id, profile.checkpoint_progress)
            result = parse_result(content, strict=self.strict_parsing)
            
            final = await self._complete(generation_id, result)
        except asyncio.CancelledError:
            await self.abort(generation_id)
            raise
        except Exception as e:
            logger.error(f"[ERROR] generation {generation_id}: {e}")
            return await self._fail(generation_id, str(e) or e.__class__.__name__)
        
        duration = (datetime.now(timezone.utc) - start_time).total_seconds()
        logger.info(f"[COMPLETE] generation {generation_id} | Duration: {duration:.2f}s")
        return final
    
    async def abort(self, generation_id: int, message: str = CANCELLED_MESSAGE) -> Optional[GenerationResponse]:
        """Record a cancelled job as failed unless it already reached a terminal state."""
        current = self.store.get_generation(generation_id)
        if current is None or current.status in TERMINAL_STATUSES:
            return None
        logger.info(f"[CANCELLED] generation {generation_id}")
        return await self._fail(generation_id, message)
    
    async def _update_progress(
        self, generation_id: int, progress: int, status: Optional[GenerationStatus] = None
    ) -> Optional[GenerationResponse]:
        changes = {"progress": progress}
        if status is not None:
            changes["status"] = status
        generation = self.store.update_generation(generation_id, GenerationPatch(**changes))
        if generation is not None:
            await self.broadcaster.broadcast(EventType.GENERATION_PROGRESS, generation)
        return generation
    
    async def _complete(self, generation_id: int, result: Any) -> Optional[GenerationResponse]:
        generation = self.store.update_generation(
            generation_id,
            GenerationPatch(status=GenerationStatus.COMPLETED, progress=100, result=result),
        )
        if generation is None:
            logger.warning(f"[Generation {generation_id}] vanished before completion")
            return None
        
        project = self.store.update_project(
            generation.project_id,
            ProjectPatch(status=ProjectStatus.COMPLETED, progress=100, content=result),
        )
        if project is None:
            logger.warning(
                f"[Generation {generation_id}] project {generation.project_id} no longer exists"
            )
        
        await self.broadcaster.broadcast(EventType.GENERATION_COMPLETED, generation)
        return generation
    
    async def _fail(self, generation_id: int, message: str) -> Optional[GenerationResponse]:
        generation = self.store.update_generation(
            generation_id,
            GenerationPatch(status=GenerationStatus.ERROR, error=message),
        )
        if generation is None:
            logger.warning(f"[Generation {generation_id}] vanished before recording error")
            return None
        
        # Project progress is left where it was
        try:
            self.store.update_project(generation.project_id, ProjectPatch(status=ProjectStatus.ERROR))
        except InvalidProjectStateError:
            logger.warning(
                f"[Generation {generation_id}] project {generation.project_id} is already complete, status kept"
            )
        
        await self.broadcaster.broadcast(EventType.GENERATION_ERROR, generation)
        return generation
