"""
User Model
Database model for studio users.
"""

from sqlalchemy import Column, String, DateTime

from app.core.database import Base


class User(Base):
    """Studio user. A single demo user exists in the absence of auth."""
    
    __tablename__ = "users"
    
    id = Column(String, primary_key=True)
    email = Column(String, nullable=False, unique=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
