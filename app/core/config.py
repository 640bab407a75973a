"""
Application Configuration
Loads settings from environment variables.
"""

from typing import Dict, List, Tuple
from pydantic_settings import BaseSettings
from pydantic import field_validator
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    # App
    APP_NAME: str = "AI Content Studio API"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    
    # Storage backend: "memory" (default, process lifetime) or "sql"
    STORAGE_BACKEND: str = "memory"
    
    # Database - only used when STORAGE_BACKEND == "sql"
    DATABASE_URL: str = "sqlite:///./studio.db"
    
    # LLM for content plans (Groq)
    GROQ_API_KEY: str = ""
    GROQ_MODEL: str = "llama-3.3-70b-versatile"
    GROQ_TEMPERATURE: float = 0.7
    GROQ_MAX_TOKENS: int = 4096
    
    # Upper bound on a single model call (seconds)
    GENERATION_TIMEOUT: float = 120.0
    
    # Demo user (no auth)
    DEFAULT_USER_ID: str = "standalone-user"
    DEFAULT_USER_EMAIL: str = "user@aistudio.local"
    DEFAULT_USER_FIRST_NAME: str = "AI Studio"
    DEFAULT_USER_LAST_NAME: str = "User"
    
    # Generation lifecycle policies
    STAMP_COMPLETED_AT_ON_ERROR: bool = False
    STRICT_RESULT_PARSING: bool = False
    
    # (initial, near-terminal) progress per content type
    PROGRESS_CHECKPOINTS: Dict[str, Tuple[int, int]] = {
        "movie": (10, 80),
        "music": (15, 85),
        "voice": (20, 90),
        "analysis": (25, 95),
    }
    
    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]
    
    @field_validator('GROQ_API_KEY', mode='before')
    @classmethod
    def strip_api_keys(cls, v):
        """Strip whitespace and newlines from API keys loaded from secrets."""
        if isinstance(v, str):
            return v.strip()
        return v
    
    @field_validator('STORAGE_BACKEND')
    @classmethod
    def check_backend(cls, v):
        v = v.lower()
        if v not in ("memory", "sql"):
            raise ValueError(f"Unsupported storage backend: {v}")
        return v
    
    @field_validator('PROGRESS_CHECKPOINTS')
    @classmethod
    def check_checkpoints(cls, v):
        missing = {"movie", "music", "voice", "analysis"} - set(v)
        if missing:
            raise ValueError(f"Missing progress checkpoints for: {', '.join(sorted(missing))}")
        for kind, (start, checkpoint) in v.items():
            if not 0 <= start <= checkpoint < 100:
                raise ValueError(
                    f"Checkpoints for '{kind}' must satisfy 0 <= start <= checkpoint < 100"
                )
        return v
    
    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
