"""User management routes."""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from core.dependencies import UserManagerDep
from core.exceptions import (
    ConflictError,
    NotFoundError,
    UserServiceError,
    ValidationError,
)
from schemas.account import Account, CreateAccountRequest, UpdateAccountRequest
from schemas.query import ListQuery, ListQueryResult
from schemas.user import (
    CreateUserRequest,
    Resource,
    UpdateUserRequest,
    User,
    UserProfile,
    VerifyEmailRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["User"])


def _to_http_error(exc: UserServiceError) -> HTTPException:
    if isinstance(exc, ConflictError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, ValidationError):
        code = status.HTTP_400_BAD_REQUEST
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=str(exc))


@router.post("", response_model=User, status_code=status.HTTP_201_CREATED, summary="Create user")
def create_user(req: CreateUserRequest, user_manager: UserManagerDep) -> User:
    """Register a user with email/password credentials.

    A credentials account keyed by the email is linked to the new user.
    """
    account = CreateAccountRequest(
        type="credentials",
        provider="credentials",
        provider_account_id=req.email,
    )
    try:
        return user_manager.create(req, account)
    except UserServiceError as exc:
        raise _to_http_error(exc) from exc


@router.get("", response_model=ListQueryResult[User], summary="List users")
def list_users(
    user_manager: UserManagerDep,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    sort: Optional[str] = None,
    keyword: Optional[str] = None,
    email: Optional[str] = None,
    gender: Optional[str] = None,
) -> ListQueryResult[User]:
    filters = {}
    if email is not None:
        filters["email"] = email
    if gender is not None:
        filters["gender"] = gender
    query_args = {"page": page, "filters": filters, "sort": sort, "keyword": keyword}
    if limit is not None:
        query_args["limit"] = limit
    try:
        query = ListQuery(**query_args)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        )
    try:
        return user_manager.find_all(query)
    except UserServiceError as exc:
        raise _to_http_error(exc) from exc


@router.post("/verify-email", response_model=User, summary="Verify user email")
def verify_email(req: VerifyEmailRequest, user_manager: UserManagerDep) -> User:
    try:
        return user_manager.verify_email(req.email)
    except UserServiceError as exc:
        raise _to_http_error(exc) from exc


@router.get(
    "/by-email/{email}/resources",
    response_model=ListQueryResult[Resource],
    summary="List resources visible to a user",
)
def list_user_resources(email: str, user_manager: UserManagerDep) -> ListQueryResult[Resource]:
    try:
        return user_manager.find_user_resources(email)
    except UserServiceError as exc:
        raise _to_http_error(exc) from exc


@router.patch(
    "/accounts/{provider}/{provider_account_id}",
    response_model=Account,
    summary="Update provider account",
)
def update_account(
    provider: str,
    provider_account_id: str,
    req: UpdateAccountRequest,
    user_manager: UserManagerDep,
) -> Account:
    try:
        return user_manager.update_account(provider, provider_account_id, req)
    except UserServiceError as exc:
        raise _to_http_error(exc) from exc


@router.get("/{user_id}", response_model=User, summary="Get user")
def get_user(user_id: str, user_manager: UserManagerDep) -> User:
    user = user_manager.find_one(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


@router.get("/{user_id}/profile", response_model=UserProfile, summary="Get user profile")
def get_user_profile(user_id: str, user_manager: UserManagerDep) -> UserProfile:
    try:
        return user_manager.get_user_profile_by_id(user_id)
    except UserServiceError as exc:
        raise _to_http_error(exc) from exc


@router.patch("/{user_id}", response_model=User, summary="Update user")
def update_user(user_id: str, req: UpdateUserRequest, user_manager: UserManagerDep) -> User:
    try:
        return user_manager.update(user_id, req)
    except UserServiceError as exc:
        raise _to_http_error(exc) from exc


@router.delete("/{user_id}", response_model=User, summary="Delete user")
def delete_user(user_id: str, user_manager: UserManagerDep) -> User:
    try:
        user = user_manager.remove(user_id)
    except UserServiceError as exc:
        raise _to_http_error(exc) from exc
    logger.info("User deleted via API: %s", user_id)
    return user
