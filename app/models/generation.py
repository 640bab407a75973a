"""
Generation Model
Database model for AI generation jobs.
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, JSON

from app.core.database import Base


class Generation(Base):
    """One model invocation attempt tied to a project."""
    
    __tablename__ = "generations"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    # No FK constraint: generations outlive their project on delete
    project_id = Column(Integer, nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    
    type = Column(String, nullable=False)
    prompt = Column(Text, nullable=False)
    model = Column(String, nullable=False)
    
    # Status: pending, processing, completed, error
    status = Column(String, nullable=False, default="pending", index=True)
    progress = Column(Integer, nullable=False, default=0)
    
    result = Column(JSON, nullable=True)
    error = Column(Text, nullable=True)
    
    created_at = Column(DateTime(timezone=True), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
