from __future__ import annotations

import pytest
from sqlalchemy.orm import Session

import main
from main import cmd_check_password, ensure_default_role, parse_args
from models import RoleModel
from utils.user_manager import UserManager


def test_ensure_default_role_is_idempotent(db: Session) -> None:
    first = ensure_default_role(db, "role-user")
    second = ensure_default_role(db, "role-user")

    assert first.id == second.id == "role-user"
    assert db.query(RoleModel).count() == 1


def test_parse_create_user_args() -> None:
    args = parse_args(["create-user", "alice@example.com", "--display-name", "Alice"])

    assert args.command == "create-user"
    assert args.email == "alice@example.com"
    assert args.display_name == "Alice"
    assert args.name is None


@pytest.fixture()
def cli_session(monkeypatch: pytest.MonkeyPatch, db: Session) -> Session:
    monkeypatch.setattr(main, "SessionLocal", lambda: db)
    return db


def test_check_password_records_login(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture,
    cli_session: Session,
    manager: UserManager,
    create_user,
) -> None:
    user = create_user()
    monkeypatch.setattr(main.getpass, "getpass", lambda prompt="": "Sup3rSecret!")

    exit_code = cmd_check_password(parse_args(["check-password", " Alice@Example.com "]))

    assert exit_code == 0
    assert "Password OK for <alice@example.com>" in capsys.readouterr().out
    assert manager.find_one(user.id).login_at is not None


def test_check_password_rejects_wrong_password(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture,
    cli_session: Session,
    manager: UserManager,
    create_user,
) -> None:
    user = create_user()
    monkeypatch.setattr(main.getpass, "getpass", lambda prompt="": "wrong-pass")

    exit_code = cmd_check_password(parse_args(["check-password", "alice@example.com"]))

    assert exit_code == 1
    assert "Invalid email or password." in capsys.readouterr().err
    assert manager.find_one(user.id).login_at is None
