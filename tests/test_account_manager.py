from __future__ import annotations

import pytest

from core.exceptions import AccountNotFoundError
from schemas.account import UpdateAccountRequest
from utils.account_manager import AccountManager


def test_find_and_list_accounts(manager, db, create_user) -> None:
    user = create_user()
    accounts = AccountManager(db)

    found = accounts.find("credentials", "alice@example.com")
    assert found is not None
    assert found.user_id == user.id
    assert accounts.find("github", "alice@example.com") is None

    listed = accounts.list_for_user(user.id)
    assert [a.id for a in listed] == [found.id]
    assert accounts.list_for_user("missing") == []


def test_update_only_touches_set_fields(manager, db, create_user) -> None:
    create_user()
    accounts = AccountManager(db)
    accounts.update("credentials", "alice@example.com", UpdateAccountRequest(scope="a", token_type="bearer"))

    updated = accounts.update("credentials", "alice@example.com", UpdateAccountRequest(scope="b"))

    assert updated.scope == "b"
    assert updated.token_type == "bearer"


def test_update_missing_account(db) -> None:
    with pytest.raises(AccountNotFoundError):
        AccountManager(db).update("github", "nope", UpdateAccountRequest(scope="x"))
