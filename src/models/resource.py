"""Resource database models.

A resource is a navigable menu entry whose visibility is gated by
permissions.
"""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .base import Base


class ResourceModel(Base):
    """Menu/resource database model."""

    __tablename__ = "resources"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    title = Column(String, nullable=True)
    path = Column(String, nullable=True)
    icon = Column(String, nullable=True)
    type = Column(String, nullable=False, default="menu")  # 'menu', 'page', 'action'
    parent_id = Column(
        String, ForeignKey("resources.id", ondelete="SET NULL"), nullable=True
    )
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    permissions = relationship(
        "ResourcePermissionModel",
        back_populates="resource",
        cascade="all, delete-orphan",
    )


class ResourcePermissionModel(Base):
    __tablename__ = "resource_permissions"

    resource_id = Column(
        String, ForeignKey("resources.id", ondelete="CASCADE"), primary_key=True
    )
    permission_id = Column(
        String, ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True
    )

    resource = relationship("ResourceModel", back_populates="permissions")
    permission = relationship("PermissionModel")
