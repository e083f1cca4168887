"""
Password hashing utilities using bcrypt.

The salt is generated per password and stored inside the bcrypt hash itself,
so credentials only need a single password_hash column.
"""

import bcrypt

from shared.config.logging import get_logger
from shared.config.settings import settings

logger = get_logger(__name__)

BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")
# bcrypt only looks at the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password to hash.

    Returns:
        Hashed password string (includes salt and cost factor), e.g. "$2b$12$...".

    Raises:
        ValueError: If the password is longer than bcrypt can handle.
    """
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(encoded, salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """
    Verify a password against its hash.

    Non-bcrypt hashes are rejected: there is no plaintext fallback.
    """
    if not hashed_password or not hashed_password.startswith(BCRYPT_PREFIXES):
        logger.warning("SECURITY: Non-bcrypt password hash found during verification")
        return False

    encoded = plain_password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        return False

    return bcrypt.checkpw(encoded, hashed_password.encode("utf-8"))


def needs_rehash(hashed_password: str) -> bool:
    """
    Check if a password hash should be recomputed after a successful login.

    True for non-bcrypt hashes and for hashes made with a different cost factor
    than the one currently configured.
    """
    if not hashed_password.startswith(BCRYPT_PREFIXES):
        return True

    # Format: $2b$<cost>$<salt+hash>
    try:
        rounds = int(hashed_password.split("$")[2])
    except (IndexError, ValueError):
        return True
    return rounds != settings.bcrypt_rounds
