"""User schema definitions.

This module defines request DTOs and the projections returned by the user
service: the public ``User`` projection, the ``UserFull`` view with roles,
permissions and resources, and the ``UserProfile`` view.
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Columns returned by every user-returning operation except find_user.
# The password hash is never part of it.
USER_COLUMNS = (
    "id",
    "email",
    "name",
    "display_name",
    "avatar",
    "gender",
    "birthday",
    "email_verified_at",
    "login_at",
    "created_at",
    "updated_at",
)


class CreateUserRequest(BaseModel):
    email: str = Field(description="Unique email address.", min_length=3)
    password: str = Field(description="Plain text password.", min_length=6)
    password1: Optional[str] = Field(
        default=None, description="Password confirmation; never persisted."
    )
    name: Optional[str] = None
    display_name: Optional[str] = None
    avatar: Optional[str] = None
    gender: Optional[str] = None
    birthday: Optional[date] = None

    @model_validator(mode="after")
    def check_password_confirmation(self) -> "CreateUserRequest":
        if self.password1 is not None and self.password1 != self.password:
            raise ValueError("password and password1 do not match")
        return self


class UpdateUserRequest(BaseModel):
    """Partial user patch. Only fields explicitly set are applied."""

    email: Optional[str] = None
    password: Optional[str] = None
    password1: Optional[str] = None
    name: Optional[str] = None
    display_name: Optional[str] = None
    avatar: Optional[str] = None
    gender: Optional[str] = None
    birthday: Optional[date] = None
    login_at: Optional[datetime] = None


class User(BaseModel):
    """Public user projection."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: Optional[str] = None
    display_name: Optional[str] = None
    avatar: Optional[str] = None
    gender: Optional[str] = None
    birthday: Optional[date] = None
    email_verified_at: Optional[datetime] = None
    login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Role(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Permission(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    code: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Resource(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    title: Optional[str] = None
    path: Optional[str] = None
    icon: Optional[str] = None
    type: str = "menu"
    parent_id: Optional[str] = None
    sort_order: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserFull(User):
    """User row with its roles, effective permissions and visible resources.

    ``permissions`` is the flat list of every permission of every role, so a
    permission shared by two roles appears twice.
    """

    password: Optional[str] = None
    roles: List[Role] = Field(default_factory=list)
    role_names: List[str] = Field(default_factory=list)
    permissions: List[Permission] = Field(default_factory=list)
    permission_names: List[str] = Field(default_factory=list)
    resources: List[Resource] = Field(default_factory=list)


class UserProfile(BaseModel):
    """Profile view of a user; excludes the password and raw role objects."""

    id: str
    name: Optional[str] = None
    display_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    role_names: List[str] = Field(default_factory=list)
    permission_names: List[str] = Field(default_factory=list)
    email: str
    email_verified_at: Optional[datetime] = None
    avatar: Optional[str] = None
    gender: Optional[str] = None
    birthday: Optional[date] = None
    login_at: Optional[datetime] = None


class VerifyEmailRequest(BaseModel):
    email: str
