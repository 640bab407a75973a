"""
Project Model
Database model for user-owned content projects.
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, JSON

from app.core.database import Base


class Project(Base):
    """Content project (movie, music, voice, analysis)."""
    
    __tablename__ = "projects"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, nullable=False, index=True)
    
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String, nullable=False)  # movie, music, voice, analysis
    
    # Status: draft, generating, completed, error
    status = Column(String, nullable=False, default="draft")
    progress = Column(Integer, nullable=False, default=0)
    
    quality = Column(String, nullable=True)  # 8k, 4k, imax, 1080p, 720p
    duration = Column(String, nullable=True)
    content = Column(JSON, nullable=True)  # Generated content plan
    settings = Column(JSON, nullable=True)
    
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
