"""
AI Content Studio API
FastAPI Backend Entry Point
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import auth, events, generate, generations, projects
from app.core.config import Settings, get_settings
from app.core.database import create_db_engine, create_session_factory, init_db
from app.core.logging import setup_logging
from app.schemas.user import UserCreate
from app.services.events import EventBroadcaster
from app.services.generations import GenerationService
from app.services.groq_llm import GroqLLMService
from app.services.sql_store import SqlStore
from app.services.store import BaseStore, MemoryStore
from app.workers.executor import JobExecutor
from app.workers.generator import GenerationRunner
from app.workers.profiles import build_profiles

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def build_store(settings: Settings) -> BaseStore:
    """Store for the configured backend."""
    if settings.STORAGE_BACKEND == "sql":
        engine = create_db_engine(settings.DATABASE_URL)
        init_db(engine)
        store = SqlStore(
            create_session_factory(engine),
            stamp_completed_on_error=settings.STAMP_COMPLETED_AT_ON_ERROR,
        )
    else:
        store = MemoryStore(stamp_completed_on_error=settings.STAMP_COMPLETED_AT_ON_ERROR)
    return store


def seed_default_user(store: BaseStore, settings: Settings) -> None:
    """No auth: a single demo user owns everything."""
    store.ensure_user(
        settings.DEFAULT_USER_ID,
        UserCreate(
            email=settings.DEFAULT_USER_EMAIL,
            first_name=settings.DEFAULT_USER_FIRST_NAME,
            last_name=settings.DEFAULT_USER_LAST_NAME,
        ),
    )


def build_llm(settings: Settings) -> GroqLLMService:
    return GroqLLMService(
        api_key=settings.GROQ_API_KEY,
        model=settings.GROQ_MODEL,
        temperature=settings.GROQ_TEMPERATURE,
        max_tokens=settings.GROQ_MAX_TOKENS,
        timeout=settings.GENERATION_TIMEOUT,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info(f"Starting {app.state.settings.APP_NAME} ({app.state.settings.STORAGE_BACKEND} storage)")
    yield
    logger.info(f"Shutting down {app.state.settings.APP_NAME}...")
    await app.state.executor.shutdown()
    close = getattr(app.state.llm, "close", None)
    if close is not None:
        await close()
    app.state.store.close()


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[BaseStore] = None,
    llm=None,
) -> FastAPI:
    """
    Build the application and its collaborators.
    
    `store` and `llm` may be injected (tests, alternative backends);
    otherwise they are built from settings.
    """
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)
    
    app = FastAPI(
        title=settings.APP_NAME,
        description="Content studio: projects and AI-backed generation jobs with live progress",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    
    store = store or build_store(settings)
    seed_default_user(store, settings)
    llm = llm or build_llm(settings)
    broadcaster = EventBroadcaster()
    executor = JobExecutor()
    runner = GenerationRunner(
        store=store,
        broadcaster=broadcaster,
        llm=llm,
        profiles=build_profiles(settings.PROGRESS_CHECKPOINTS),
        strict_parsing=settings.STRICT_RESULT_PARSING,
    )
    
    app.state.settings = settings
    app.state.store = store
    app.state.llm = llm
    app.state.broadcaster = broadcaster
    app.state.executor = executor
    app.state.runner = runner
    app.state.generation_service = GenerationService(
        store=store,
        broadcaster=broadcaster,
        executor=executor,
        runner=runner,
        model_name=getattr(llm, "model", settings.GROQ_MODEL),
    )
    
    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    
    # Include routers
    app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
    app.include_router(projects.router, prefix="/api/projects", tags=["Projects"])
    app.include_router(generations.router, prefix="/api/generations", tags=["Generations"])
    app.include_router(generate.router, prefix="/api/generate", tags=["Generate"])
    app.include_router(events.router, tags=["Events"])
    
    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.error(f"[ERROR] {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
    
    @app.get("/health", tags=["Health"])
    async def health_check():
        """Service status for monitoring."""
        status = {
            "status": "healthy",
            "version": VERSION,
            "environment": {
                "storage": settings.STORAGE_BACKEND,
                "model": app.state.generation_service.model_name,
            },
            "services": {
                "jobs_in_flight": executor.running_count,
                "websocket_clients": broadcaster.connection_count,
            },
        }
        
        try:
            store.get_user(settings.DEFAULT_USER_ID)
            status["services"]["store"] = "ok"
        except Exception as e:
            status["services"]["store"] = f"error: {str(e)}"
            status["status"] = "degraded"
        
        return status
    
    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint."""
        return {
            "message": f"{settings.APP_NAME}",
            "docs": "/docs",
            "health": "/health",
        }
    
    return app


app = create_app()
