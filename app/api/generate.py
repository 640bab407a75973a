"""
Generation API Routes
One start endpoint per content type. Each returns the new generation
immediately; the model call runs in the background.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_current_user_id, get_generation_service
from app.schemas.generation import (
    AnalysisGenerateRequest,
    MovieGenerateRequest,
    MusicGenerateRequest,
    StartGenerationResponse,
    VoiceGenerateRequest,
)
from app.schemas.project import ProjectType
from app.services.generations import GenerationService

router = APIRouter()


async def _start(kind: ProjectType, request, service: GenerationService, user_id: str):
    generation = await service.start(kind, request, user_id)
    if generation is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return StartGenerationResponse(generation=generation)


@router.post("/movie", response_model=StartGenerationResponse)
async def generate_movie(
    request: MovieGenerateRequest,
    user_id: str = Depends(get_current_user_id),
    service: GenerationService = Depends(get_generation_service),
):
    """Start a movie production plan from a script."""
    return await _start(ProjectType.MOVIE, request, service, user_id)


@router.post("/music", response_model=StartGenerationResponse)
async def generate_music(
    request: MusicGenerateRequest,
    user_id: str = Depends(get_current_user_id),
    service: GenerationService = Depends(get_generation_service),
):
    """Start a music production plan from lyrics."""
    return await _start(ProjectType.MUSIC, request, service, user_id)


@router.post("/voice", response_model=StartGenerationResponse)
async def generate_voice(
    request: VoiceGenerateRequest,
    user_id: str = Depends(get_current_user_id),
    service: GenerationService = Depends(get_generation_service),
):
    """Start a voice synthesis plan from text."""
    return await _start(ProjectType.VOICE, request, service, user_id)


@router.post("/analysis", response_model=StartGenerationResponse)
async def generate_analysis(
    request: AnalysisGenerateRequest,
    user_id: str = Depends(get_current_user_id),
    service: GenerationService = Depends(get_generation_service),
):
    """Start a content analysis."""
    return await _start(ProjectType.ANALYSIS, request, service, user_id)
