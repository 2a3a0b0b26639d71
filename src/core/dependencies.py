"""Dependency injection module for FastAPI.

This module provides dependency injection functions for FastAPI routes.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

import config
from core.database import get_db
from utils import account_manager
from utils import user_manager


def get_account_manager(db: Session = Depends(get_db)) -> account_manager.AccountManager:
    """Get AccountManager instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        AccountManager instance.
    """
    return account_manager.AccountManager(db)


def get_user_manager(
    db: Session = Depends(get_db),
    accounts: account_manager.AccountManager = Depends(get_account_manager),
) -> user_manager.UserManager:
    """Get UserManager instance with request-scoped DB session.

    Args:
        db: Database session.
        accounts: AccountManager bound to the same session.

    Returns:
        UserManager instance.
    """
    return user_manager.UserManager(
        db, account_manager=accounts, default_role_id=config.DEFAULT_ROLE_ID
    )


# Type aliases for dependency injection
AccountManagerDep = Annotated[
    account_manager.AccountManager, Depends(get_account_manager)
]
UserManagerDep = Annotated[
    user_manager.UserManager, Depends(get_user_manager)
]
