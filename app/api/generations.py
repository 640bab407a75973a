"""
Generations API Routes
Generation history, active jobs, and cancellation.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.deps import get_current_user_id, get_generation_service, get_store
from app.schemas.generation import (
    CancelGenerationResponse,
    GenerationResponse,
    GenerationStatus,
)
from app.services.generations import GenerationService
from app.services.store import BaseStore

router = APIRouter()


@router.get("", response_model=List[GenerationResponse])
async def list_generations(
    project_id: Optional[int] = Query(default=None, alias="projectId"),
    generation_status: Optional[GenerationStatus] = Query(default=None, alias="status"),
    user_id: str = Depends(get_current_user_id),
    store: BaseStore = Depends(get_store),
):
    """List generations, newest first, with optional filters."""
    return store.get_generations(user_id, project_id=project_id, status=generation_status)


@router.get("/active", response_model=List[GenerationResponse])
async def list_active_generations(
    user_id: str = Depends(get_current_user_id),
    store: BaseStore = Depends(get_store),
):
    """Pending and processing generations, newest first."""
    return store.get_active_generations(user_id)


@router.get("/{generation_id}", response_model=GenerationResponse)
async def read_generation(generation_id: int, store: BaseStore = Depends(get_store)):
    generation = store.get_generation(generation_id)
    if not generation:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Generation not found")
    return generation


@router.post(
    "/{generation_id}/cancel",
    response_model=CancelGenerationResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def cancel_generation(
    generation_id: int,
    service: GenerationService = Depends(get_generation_service),
):
    cancelled = service.cancel(generation_id)
    if cancelled is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Generation not found")
    if not cancelled:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Generation is not running",
        )
    return CancelGenerationResponse(id=generation_id, cancelled=True)
