# Database models package
from app.models.user import User
from app.models.project import Project
from app.models.generation import Generation

__all__ = [
    "User",
    "Project",
    "Generation",
]
