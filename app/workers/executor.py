"""
Job Executor
Lightweight in-process executor: one asyncio task per generation job.

The request layer submits and forgets; the executor keeps the handles so jobs
can be cancelled, awaited on shutdown, and observed through completion hooks.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Optional, Set

logger = logging.getLogger(__name__)

CompletionHook = Callable[[int, asyncio.Task], None]
CancelHandler = Callable[[], Awaitable]


class JobExecutor:
    """Tracks in-flight job tasks by id."""
    
    def __init__(self):
        self._tasks: Dict[int, asyncio.Task] = {}
        self._hooks: List[CompletionHook] = []
        self._cleanups: Set[asyncio.Task] = set()
    
    @property
    def running_count(self) -> int:
        return len(self._tasks)
    
    def on_complete(self, hook: CompletionHook) -> None:
        """Register a callback run when any job task finishes."""
        self._hooks.append(hook)
    
    def submit(
        self, job_id: int, coro: Awaitable, on_cancel: Optional[CancelHandler] = None
    ) -> asyncio.Task:
        """
        Schedule `coro` on the running loop and return its task.
        
        `on_cancel` is awaited after the task ends cancelled, including when it
        was cancelled before its first step and `coro` never ran.
        """
        if job_id in self._tasks:
            raise ValueError(f"Job {job_id} is already running")
        task = asyncio.create_task(coro, name=f"generation-{job_id}")
        self._tasks[job_id] = task
        task.add_done_callback(lambda t: self._finished(job_id, t, on_cancel))
        logger.debug(f"Submitted job {job_id} ({self.running_count} in flight)")
        return task
    
    def _finished(
        self, job_id: int, task: asyncio.Task, on_cancel: Optional[CancelHandler] = None
    ) -> None:
        if self._tasks.get(job_id) is task:
            del self._tasks[job_id]
        if task.cancelled():
            if on_cancel is not None:
                self._schedule_cleanup(job_id, on_cancel)
        elif task.exception() is not None:
            exc = task.exception()
            logger.error(f"[Unexpected] job {job_id} crashed: {exc!r}", exc_info=exc)
        for hook in list(self._hooks):
            try:
                hook(job_id, task)
            except Exception as e:
                logger.error(f"Completion hook failed for job {job_id}: {e}")
    
    def _schedule_cleanup(self, job_id: int, on_cancel: CancelHandler) -> None:
        cleanup = asyncio.ensure_future(on_cancel())
        self._cleanups.add(cleanup)
        
        def _done(t: asyncio.Task) -> None:
            self._cleanups.discard(t)
            if not t.cancelled() and t.exception() is not None:
                logger.error(f"Cancel handler failed for job {job_id}: {t.exception()!r}")
        
        cleanup.add_done_callback(_done)
    
    def is_running(self, job_id: int) -> bool:
        return job_id in self._tasks
    
    def cancel(self, job_id: int) -> bool:
        """Request cancellation. Returns False when no such job is in flight."""
        task = self._tasks.get(job_id)
        if task is None or task.done():
            return False
        task.cancel()
        logger.info(f"Cancellation requested for job {job_id}")
        return True
    
    async def drain(self) -> None:
        """Wait until every in-flight job and cancel handler (including ones started meanwhile) is done."""
        while self._tasks or self._cleanups:
            pending = list(self._tasks.values()) + list(self._cleanups)
            await asyncio.gather(*pending, return_exceptions=True)
    
    async def shutdown(self) -> None:
        """Cancel all jobs and wait for them and their cancel handlers to settle."""
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        if tasks:
            logger.info(f"Cancelling {len(tasks)} in-flight job(s)")
        await self.drain()
