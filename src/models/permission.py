"""Permission database model."""

import uuid

from sqlalchemy import Column, DateTime, String
from sqlalchemy.sql import func

from .base import Base


class PermissionModel(Base):
    """A named permission; gates which resources a role can see."""

    __tablename__ = "permissions"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, unique=True, nullable=False)
    code = Column(String, nullable=True)  # e.g. 'user:read'
    description = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
