from __future__ import annotations

import os

# Must be set before config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DEFAULT_ROLE_ID", "role-user")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from models import (
    Base,
    PermissionModel,
    ResourceModel,
    ResourcePermissionModel,
    RoleModel,
    RolePermissionModel,
)
from schemas.account import CreateAccountRequest
from schemas.user import CreateUserRequest
from utils.user_manager import UserManager


@pytest.fixture()
def db() -> Session:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def rbac(db: Session) -> dict:
    """Seed roles, permissions and resources.

    role-user -> p1; role-admin -> p1, p2; role-auditor -> p3.
    r1 requires p1, r2 requires p3, r3 requires p2.
    """
    permissions = {
        key: PermissionModel(id=key, name=f"perm-{key}", code=f"{key}:read")
        for key in ("p1", "p2", "p3")
    }
    roles = {
        "user": RoleModel(id="role-user", name="user"),
        "admin": RoleModel(id="role-admin", name="admin"),
        "auditor": RoleModel(id="role-auditor", name="auditor"),
    }
    db.add_all(list(permissions.values()) + list(roles.values()))
    db.flush()

    grants = [("user", "p1"), ("admin", "p1"), ("admin", "p2"), ("auditor", "p3")]
    for role_key, permission_key in grants:
        db.add(
            RolePermissionModel(
                role_id=roles[role_key].id,
                permission_id=permissions[permission_key].id,
            )
        )

    resources = {
        "r1": ResourceModel(id="r1", name="dashboard", path="/dashboard", sort_order=1),
        "r2": ResourceModel(id="r2", name="audit-log", path="/audit", sort_order=2),
        "r3": ResourceModel(id="r3", name="settings", path="/settings", sort_order=3),
    }
    db.add_all(resources.values())
    db.flush()
    for resource_key, permission_key in [("r1", "p1"), ("r2", "p3"), ("r3", "p2")]:
        db.add(
            ResourcePermissionModel(
                resource_id=resources[resource_key].id,
                permission_id=permissions[permission_key].id,
            )
        )
    db.commit()
    return {"roles": roles, "permissions": permissions, "resources": resources}


@pytest.fixture()
def manager(db: Session, rbac: dict) -> UserManager:
    return UserManager(db, default_role_id="role-user")


def make_user(
    manager: UserManager,
    email: str = "alice@example.com",
    password: str = "Sup3rSecret!",
    **fields,
):
    new_user = CreateUserRequest(email=email, password=password, password1=password, **fields)
    account = CreateAccountRequest(provider_account_id=email)
    return manager.create(new_user, account)


@pytest.fixture()
def create_user(manager: UserManager):
    def _create(email: str = "alice@example.com", **fields):
        return make_user(manager, email=email, **fields)

    return _create
