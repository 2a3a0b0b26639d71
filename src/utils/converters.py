"""Conversion helpers between database models and API schemas."""

from typing import List

from models.account import AccountModel
from models.permission import PermissionModel
from models.resource import ResourceModel
from models.role import RoleModel
from models.user import UserModel
from schemas.account import Account
from schemas.user import USER_COLUMNS, Permission, Resource, Role, User


def model_to_user(model: UserModel) -> User:
    """Project a user row onto the allow-listed columns."""
    return User(**{column: getattr(model, column) for column in USER_COLUMNS})


def model_to_role(model: RoleModel) -> Role:
    return Role.model_validate(model)


def model_to_permission(model: PermissionModel) -> Permission:
    return Permission.model_validate(model)


def model_to_resource(model: ResourceModel) -> Resource:
    return Resource.model_validate(model)


def models_to_resources(models: List[ResourceModel]) -> List[Resource]:
    return [model_to_resource(m) for m in models]


def model_to_account(model: AccountModel) -> Account:
    return Account.model_validate(model)
