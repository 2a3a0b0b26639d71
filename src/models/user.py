"""User database model.

This module defines the User database model and the user-role join table
using SQLAlchemy.
"""

import uuid

from sqlalchemy import Column, Date, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .base import Base


class UserModel(Base):
    """User database model."""

    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    email = Column(String, unique=True, index=True, nullable=False)
    password = Column(String, nullable=True)  # bcrypt hash
    name = Column(String, nullable=True)
    display_name = Column(String, nullable=True)
    avatar = Column(String, nullable=True)
    gender = Column(String, nullable=True)
    birthday = Column(Date, nullable=True)
    email_verified_at = Column(DateTime(timezone=True), nullable=True)
    login_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    accounts = relationship(
        "AccountModel",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    roles = relationship(
        "UserRoleModel",
        back_populates="user",
        cascade="all, delete-orphan",
    )


class UserRoleModel(Base):
    """Link between a user and one of their roles."""

    __tablename__ = "user_roles"

    user_id = Column(
        String, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    role_id = Column(
        String, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("UserModel", back_populates="roles")
    role = relationship("RoleModel")
