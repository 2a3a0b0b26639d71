"""Password hashing utilities.

bcrypt is used directly; passwords longer than bcrypt's 72-byte limit are
truncated before hashing and verification.
"""

import logging
from typing import Optional, Union

import bcrypt

from config import BCRYPT_ROUNDS

logger = logging.getLogger(__name__)

BCRYPT_MAX_BYTES = 72


def _to_bytes(password: Union[str, bytes]) -> bytes:
    if isinstance(password, bytes):
        password_bytes = password
    else:
        password_bytes = str(password).encode("utf-8")
    if len(password_bytes) > BCRYPT_MAX_BYTES:
        logger.warning(
            "Password exceeds %d bytes (%d bytes), truncating",
            BCRYPT_MAX_BYTES,
            len(password_bytes),
        )
        password_bytes = password_bytes[:BCRYPT_MAX_BYTES]
    return password_bytes


def salt_and_hash_password(password: Union[str, bytes], rounds: Optional[int] = None) -> str:
    """Hash a password with a freshly generated bcrypt salt.

    Args:
        password: Plain text password.
        rounds: Bcrypt cost factor. Defaults to BCRYPT_ROUNDS.

    Returns:
        Hashed password (bcrypt hash string).
    """
    salt = bcrypt.gensalt(rounds=rounds or BCRYPT_ROUNDS)
    return bcrypt.hashpw(_to_bytes(password), salt).decode("utf-8")


def verify_password(plain_password: Union[str, bytes], hashed_password: Optional[str]) -> bool:
    """Verify a password against a bcrypt hash.

    Args:
        plain_password: Plain text password to verify.
        hashed_password: Bcrypt hash string to verify against.

    Returns:
        True if password matches, False otherwise.
    """
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(_to_bytes(plain_password), hashed_password.encode("utf-8"))
    except ValueError as e:
        # Stored value is not a bcrypt hash
        logger.error("Password verification error: %s", e)
        return False
