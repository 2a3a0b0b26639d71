"""Custom exception classes for the user account service.

This module defines application-specific exceptions following Google Python
Style Guide. The HTTP layer maps each error kind (conflict, not found,
validation) to a status code.
"""


class UserServiceError(Exception):
    """Base exception for all user account service errors."""

    pass


class ConflictError(UserServiceError):
    """Raised when an operation conflicts with existing data."""

    pass


class NotFoundError(UserServiceError):
    """Raised when a requested entity cannot be found."""

    pass


class ValidationError(UserServiceError):
    """Raised when input parameters fail validation."""

    pass


class ConfigurationError(UserServiceError):
    """Raised when there is a configuration error."""

    pass


class UserAlreadyExistsError(ConflictError):
    """Raised when trying to create a user whose email is taken."""

    def __init__(self, email: str):
        """Initialize the exception.

        Args:
            email: The email that is already registered.
        """
        self.email = email
        super().__init__(f"User '{email}' already exists")


class UserConflictError(ConflictError):
    """Raised when a user-level operation targets a missing user.

    Email verification reports an unknown email as a conflict rather than
    a missing resource.
    """

    pass


class UserNotFoundError(NotFoundError):
    """Raised when a requested user cannot be found."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"User '{key}' not found")


class AccountNotFoundError(NotFoundError):
    """Raised when a provider account cannot be found."""

    def __init__(self, provider: str, provider_account_id: str):
        self.provider = provider
        self.provider_account_id = provider_account_id
        super().__init__(
            f"Account '{provider}:{provider_account_id}' not found"
        )
