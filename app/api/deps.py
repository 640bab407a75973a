"""
API Dependencies
Common dependencies for FastAPI routes. Everything is read from app.state,
where create_app() placed the instances built for this process.
"""

from fastapi import Depends, Request

from app.core.config import Settings
from app.services.events import EventBroadcaster
from app.services.generations import GenerationService
from app.services.store import BaseStore


def get_app_settings(request: Request) -> Settings:
    """Settings the app was created with."""
    return request.app.state.settings


def get_store(request: Request) -> BaseStore:
    """Get the entity store."""
    return request.app.state.store


def get_broadcaster(request: Request) -> EventBroadcaster:
    return request.app.state.broadcaster


def get_generation_service(request: Request) -> GenerationService:
    return request.app.state.generation_service


def get_current_user_id(settings: Settings = Depends(get_app_settings)) -> str:
    """No auth: every request acts as the seeded demo user."""
    return settings.DEFAULT_USER_ID
