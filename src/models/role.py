"""Role database models."""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .base import Base


class RoleModel(Base):
    """A named set of permissions that can be granted to users."""

    __tablename__ = "roles"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, unique=True, nullable=False)
    description = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    permissions = relationship(
        "RolePermissionModel",
        back_populates="role",
        cascade="all, delete-orphan",
    )


class RolePermissionModel(Base):
    __tablename__ = "role_permissions"

    role_id = Column(
        String, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True
    )
    permission_id = Column(
        String, ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True
    )

    role = relationship("RoleModel", back_populates="permissions")
    permission = relationship("PermissionModel")
