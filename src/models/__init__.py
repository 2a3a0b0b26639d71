"""Database models.

Importing this package registers every model with ``Base.metadata``.
"""

from .base import Base
from .user import UserModel, UserRoleModel
from .account import AccountModel
from .role import RoleModel, RolePermissionModel
from .permission import PermissionModel
from .resource import ResourceModel, ResourcePermissionModel

__all__ = [
    "Base",
    "UserModel",
    "UserRoleModel",
    "AccountModel",
    "RoleModel",
    "RolePermissionModel",
    "PermissionModel",
    "ResourceModel",
    "ResourcePermissionModel",
]
