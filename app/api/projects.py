"""
Projects API Routes
CRUD over the current user's projects. Every change is broadcast.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_broadcaster, get_current_user_id, get_store
from app.schemas.events import EventType
from app.schemas.project import ProjectCreate, ProjectPatch, ProjectResponse
from app.services.events import EventBroadcaster
from app.services.store import BaseStore, InvalidProjectStateError

router = APIRouter()


@router.get("", response_model=List[ProjectResponse])
async def list_projects(
    user_id: str = Depends(get_current_user_id),
    store: BaseStore = Depends(get_store),
):
    """List projects, most recently updated first."""
    return store.get_projects(user_id)


@router.get("/{project_id}", response_model=ProjectResponse)
async def read_project(project_id: int, store: BaseStore = Depends(get_store)):
    project = store.get_project(project_id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    payload: ProjectCreate,
    user_id: str = Depends(get_current_user_id),
    store: BaseStore = Depends(get_store),
    broadcaster: EventBroadcaster = Depends(get_broadcaster),
):
    project = store.create_project(payload, user_id=user_id)
    await broadcaster.broadcast(EventType.PROJECT_CREATED, project)
    return project


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: int,
    payload: ProjectPatch,
    store: BaseStore = Depends(get_store),
    broadcaster: EventBroadcaster = Depends(get_broadcaster),
):
    try:
        project = store.update_project(project_id, payload)
    except InvalidProjectStateError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    await broadcaster.broadcast(EventType.PROJECT_UPDATED, project)
    return project


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: int,
    store: BaseStore = Depends(get_store),
    broadcaster: EventBroadcaster = Depends(get_broadcaster),
):
    """Delete a project. Its generations are kept."""
    if not store.delete_project(project_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    await broadcaster.broadcast(EventType.PROJECT_DELETED, {"id": project_id})
    return None
