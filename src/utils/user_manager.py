"""User management utilities.

This module provides user account management: creation with password
hashing and default role assignment, lookups, paginated listing, profile
projection, email verification, and resolution of a user's roles,
permissions and visible resources.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import pytz
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

import config
from core.exceptions import (
    ConfigurationError,
    UserAlreadyExistsError,
    UserConflictError,
    UserNotFoundError,
    ValidationError,
)
from models.account import AccountModel
from models.resource import ResourceModel, ResourcePermissionModel
from models.role import RoleModel, RolePermissionModel
from models.user import UserModel, UserRoleModel
from schemas.account import Account, CreateAccountRequest, UpdateAccountRequest
from schemas.query import ListQuery, ListQueryResult
from schemas.user import (
    USER_COLUMNS,
    CreateUserRequest,
    Resource,
    UpdateUserRequest,
    User,
    UserFull,
    UserProfile,
)
from utils.account_manager import AccountManager
from utils.converters import (
    model_to_permission,
    model_to_role,
    model_to_user,
    models_to_resources,
)
from utils.password import salt_and_hash_password, verify_password
from utils.query import build_find_many_params

logger = logging.getLogger(__name__)

# Keys accepted by find_user; both are unique columns
USER_UNIQUE_KEYS = ("id", "email")

# Text columns matched by a list query keyword
USER_SEARCHABLE_COLUMNS = ("email", "name", "display_name")


def _is_duplicate_email(error: IntegrityError) -> bool:
    """Whether an integrity error is the unique constraint on users.email."""
    message = str(error.orig).lower()
    return "unique" in message and "users.email" in message


class UserManager:
    """Manages user data persistence and operations using SQLAlchemy."""

    def __init__(
        self,
        db: Session,
        account_manager: Optional[AccountManager] = None,
        default_role_id: Optional[str] = None,
    ):
        """Initialize UserManager.

        Args:
            db: SQLAlchemy Session.
            account_manager: Manager used for provider account updates.
                Defaults to one bound to the same session.
            default_role_id: Role attached to every new user. Defaults to
                DEFAULT_ROLE_ID from config.
        """
        self.db = db
        self.account_manager = account_manager or AccountManager(db)
        self.default_role_id = default_role_id or config.DEFAULT_ROLE_ID

    def create(self, new_user: CreateUserRequest, account: CreateAccountRequest) -> User:
        """Create a user together with a provider account and the default role.

        The user row, the account row and the role link are written in one
        transaction.

        Args:
            new_user: New user data, including the plain text password.
            account: Provider account to link to the user.

        Returns:
            Created User projection.

        Raises:
            UserAlreadyExistsError: If the email is already registered.
            ConfigurationError: If the default role does not exist.
        """
        if self.find_by_email(new_user.email):
            logger.warning("Rejected duplicate user: %s", new_user.email)
            raise UserAlreadyExistsError(new_user.email)

        role = self.db.get(RoleModel, self.default_role_id)
        if role is None:
            raise ConfigurationError(
                f"Default role '{self.default_role_id}' does not exist"
            )

        user_data = new_user.model_dump(exclude={"password1"})
        user_data["password"] = salt_and_hash_password(new_user.password)

        model = UserModel(**user_data)
        model.accounts.append(AccountModel(**account.model_dump()))
        model.roles.append(UserRoleModel(role=role))

        # Two concurrent requests can both pass the email check; the unique
        # constraint catches the second one.
        try:
            self.db.add(model)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if _is_duplicate_email(e):
                raise UserAlreadyExistsError(new_user.email) from e
            raise
        self.db.refresh(model)

        logger.info("Created user: %s (role=%s)", model.email, self.default_role_id)
        return model_to_user(model)

    def find_all(self, query: ListQuery) -> ListQueryResult[User]:
        """List users matching a list query.

        Args:
            query: Pagination, filters, sort and keyword.

        Returns:
            A page of users and the total number of matching rows.
        """
        params = build_find_many_params(
            UserModel,
            query,
            searchable=USER_SEARCHABLE_COLUMNS,
            allowed=USER_COLUMNS,
        )
        models = params.apply(self.db.query(UserModel)).all()
        total = params.apply_where(self.db.query(UserModel)).count()

        return ListQueryResult[User](
            items=[model_to_user(m) for m in models],
            total=total,
            page=query.page,
            limit=query.limit,
        )

    def find_one(self, id: str) -> Optional[User]:
        model = self.db.get(UserModel, id)
        if model:
            return model_to_user(model)
        return None

    def find_by_email(self, email: str) -> Optional[User]:
        model = self.db.query(UserModel).filter(UserModel.email == email).first()
        if model:
            return model_to_user(model)
        return None

    def find_user(
        self, where: Dict[str, Any], include_resources: bool = True
    ) -> Optional[UserFull]:
        """Find a user with roles, permissions and visible resources.

        Args:
            where: A single unique key, ``{"id": ...}`` or ``{"email": ...}``.
            include_resources: Whether to resolve the visible resources.

        Returns:
            UserFull (including the password hash), or None if no user
            matches.

        Raises:
            ValidationError: If ``where`` is not exactly one unique key.
        """
        if len(where) != 1 or not set(where) <= set(USER_UNIQUE_KEYS):
            raise ValidationError(
                f"find_user expects exactly one of {USER_UNIQUE_KEYS}, got {sorted(where)}"
            )

        model = (
            self.db.query(UserModel)
            .options(
                selectinload(UserModel.roles)
                .selectinload(UserRoleModel.role)
                .selectinload(RoleModel.permissions)
                .selectinload(RolePermissionModel.permission)
            )
            .filter_by(**where)
            .first()
        )
        if not model:
            return None

        roles = [user_role.role for user_role in model.roles]
        # Not deduplicated: roles sharing a permission contribute it once each
        permissions = [
            role_permission.permission
            for role in roles
            for role_permission in role.permissions
        ]

        user = UserFull(
            **{column: getattr(model, column) for column in USER_COLUMNS},
            password=model.password,
            roles=[model_to_role(role) for role in roles],
            role_names=[role.name for role in roles],
            permissions=[model_to_permission(p) for p in permissions],
            permission_names=[p.name for p in permissions],
            resources=[],
        )

        if include_resources:
            user.resources = self._parse_user_resources(user)

        return user

    def find_by_email_x(self, email: str, include_resources: bool = True) -> Optional[UserFull]:
        return self.find_user({"email": email}, include_resources)

    def find_by_id_x(self, id: str, include_resources: bool = True) -> Optional[UserFull]:
        return self.find_user({"id": id}, include_resources)

    def update(self, id: str, patch: UpdateUserRequest) -> User:
        """Apply a partial update to a user.

        A non-empty ``password`` is always stored hashed. When ``password1``
        is supplied it must equal ``password``.

        Args:
            id: User ID.
            patch: Fields to change; unset fields are left alone.

        Returns:
            Updated User projection.

        Raises:
            ValidationError: If ``id`` is blank, ``email`` is set to an
                empty value, or the password confirmation does not match.
            UserNotFoundError: If no such user exists.
            UserAlreadyExistsError: If the new email is taken.
        """
        if not id or not id.strip():
            raise ValidationError("Invalid parameters: user id is required")

        data = patch.model_dump(exclude_unset=True)
        if "email" in data and not data["email"]:
            raise ValidationError("Invalid parameters: email cannot be empty")
        password1 = data.pop("password1", None)
        password = data.pop("password", None)
        if password1 is not None and password1 != password:
            raise ValidationError("password and password1 do not match")
        if password:
            data["password"] = salt_and_hash_password(password)

        model = self.db.get(UserModel, id)
        if not model:
            raise UserNotFoundError(id)

        for key, value in data.items():
            setattr(model, key, value)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if _is_duplicate_email(e):
                raise UserAlreadyExistsError(data["email"]) from e
            raise
        self.db.refresh(model)

        logger.info("Updated user: %s (fields=%s)", id, sorted(data))
        return model_to_user(model)

    def remove(self, id: str) -> User:
        """Hard-delete a user and its accounts and role links.

        Returns:
            Projection of the deleted row.

        Raises:
            UserNotFoundError: If no such user exists.
        """
        model = self.db.get(UserModel, id)
        if not model:
            raise UserNotFoundError(id)

        deleted = model_to_user(model)
        self.db.delete(model)
        self.db.commit()
        logger.info("Deleted user: %s", id)
        return deleted

    def verify_email(self, email: str) -> User:
        """Mark a user's email as verified.

        Verifying an already verified email returns the user unchanged.

        Raises:
            UserConflictError: If no user has that email.
        """
        user = self.find_by_email(email)
        if not user:
            raise UserConflictError("User not found")

        if user.email_verified_at:
            return user

        model = self.db.get(UserModel, user.id)
        model.email_verified_at = datetime.now(pytz.utc)
        self.db.commit()
        self.db.refresh(model)
        logger.info("Verified email: %s", email)
        return model_to_user(model)

    def find_user_resources(self, email: str) -> ListQueryResult[Resource]:
        """Get the resources visible to a user, as a single page.

        Args:
            email: User email.

        Raises:
            UserNotFoundError: If no user has that email.
        """
        user = self.find_by_email_x(email)
        if not user:
            raise UserNotFoundError(email)

        items = user.resources or []
        return ListQueryResult[Resource](
            items=items,
            total=len(items),
            page=1,
            limit=len(items),
        )

    def _parse_user_resources(self, user: UserFull) -> List[Resource]:
        """Find the resources gated by any of the user's permissions.

        Each matching resource is returned once, ordered by sort_order.
        """
        permission_ids = [permission.id for permission in user.permissions or []]
        if not permission_ids:
            return []

        models = (
            self.db.query(ResourceModel)
            .filter(
                ResourceModel.permissions.any(
                    ResourcePermissionModel.permission_id.in_(permission_ids)
                )
            )
            .order_by(ResourceModel.sort_order.asc(), ResourceModel.id.asc())
            .all()
        )
        return models_to_resources(models)

    def get_user_profile_by_email(self, email: str) -> UserProfile:
        return self._get_user_profile({"email": email})

    def get_user_profile_by_id(self, id: str) -> UserProfile:
        return self._get_user_profile({"id": id})

    def _get_user_profile(self, where: Dict[str, Any]) -> UserProfile:
        user = self.find_user(where, include_resources=False)
        if not user:
            raise UserNotFoundError(next(iter(where.values())))

        return UserProfile(
            id=user.id,
            name=user.name,
            display_name=user.display_name,
            created_at=user.created_at,
            updated_at=user.updated_at,
            role_names=user.role_names,
            permission_names=user.permission_names,
            email=user.email,
            email_verified_at=user.email_verified_at,
            avatar=user.avatar,
            gender=user.gender,
            birthday=user.birthday,
            login_at=user.login_at,
        )

    def authenticate(self, email: str, password: str) -> Optional[UserFull]:
        """Check credentials and stamp the login time.

        Returns:
            UserFull on success, None if the email is unknown or the password
            does not match.
        """
        user = self.find_by_email_x(email, include_resources=False)
        if not user or not verify_password(password, user.password):
            logger.warning("Failed login for: %s", email)
            return None
        user.login_at = self.touch_login(user.id).login_at
        return user

    def touch_login(self, id: str) -> User:
        model = self.db.get(UserModel, id)
        if not model:
            raise UserNotFoundError(id)
        model.login_at = datetime.now(pytz.utc)
        self.db.commit()
        self.db.refresh(model)
        return model_to_user(model)

    def get_item_cache_key(self, *id_parts: str) -> str:
        """Build the cache key for a user item, e.g. ``user:u1:p2``."""
        return f"{config.USER_CACHE_KEY_PREFIX}:{':'.join(id_parts)}"

    def update_account(
        self,
        provider: str,
        provider_account_id: str,
        patch: UpdateAccountRequest,
    ) -> Account:
        return self.account_manager.update(provider, provider_account_id, patch)
