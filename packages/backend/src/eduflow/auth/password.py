"""Password hashing utilities.

Learn: Uses bcrypt for secure password hashing. bcrypt automatically
handles salting and its checkpw() compares digests in constant time.
The work factor comes from settings (12 by default, lowered in tests).
"""

import bcrypt

from eduflow.config import settings

_decoy_hash: str | None = None


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a password with bcrypt.

    Passwords are truncated to 72 bytes (bcrypt's limit).
    """
    pw_bytes = password.encode("utf-8")[:72]
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its bcrypt hash. Never raises."""
    try:
        pw_bytes = password.encode("utf-8")[:72]
        return bcrypt.checkpw(pw_bytes, password_hash.encode("utf-8"))
    except (ValueError, TypeError, AttributeError):
        return False


def decoy_hash() -> str:
    """A throwaway hash to compare against when the user doesn't exist.

    Checking a password against it costs the same as a real check, so
    "unknown email" and "wrong password" take the same time.
    """
    global _decoy_hash
    if _decoy_hash is None:
        _decoy_hash = hash_password("eduflow-decoy-password")
    return _decoy_hash
