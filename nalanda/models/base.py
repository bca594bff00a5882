"""
Base model for all models.
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer

from nalanda.db.session import Base


class BaseModel(Base):
    """
    Base class for all models.
    Provides common fields and functionality.
    """
    __abstract__ = True

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
