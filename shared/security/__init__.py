"""
Security module: Session tokens, password hashing, rate limiting.
"""

from shared.security.auth import (
    sign_jwt,
    verify_jwt,
    get_bearer_token,
    resolve_session_token,
    generate_secure_token,
)
from shared.security.password import hash_password, verify_password, needs_rehash
from shared.security.rate_limit import (
    limiter,
    rate_limit_exceeded_handler,
)

__all__ = [
    # auth
    "sign_jwt",
    "verify_jwt",
    "get_bearer_token",
    "resolve_session_token",
    "generate_secure_token",
    # password
    "hash_password",
    "verify_password",
    "needs_rehash",
    # rate limiting
    "limiter",
    "rate_limit_exceeded_handler",
]
