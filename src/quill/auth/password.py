"""Password hashing utilities.

Learn: Uses bcrypt for secure password hashing. bcrypt automatically
handles salting and is resistant to rainbow table attacks.
The work factor (QUILL_BCRYPT_ROUNDS, default 12) takes ~100ms per hash
on modern hardware.
"""

import bcrypt

from quill.config import settings

# Verified against when the user doesn't exist, so a login for an unknown
# username costs the same bcrypt work as a wrong password.
_DUMMY_HASH = bcrypt.hashpw(
    b"quill-dummy-password", bcrypt.gensalt(rounds=settings.bcrypt_rounds)
)


def hash_password(password: str) -> str:
    """Hash a password with bcrypt.

    Learn: bcrypt includes a random salt automatically and produces
    hashes starting with "$2b$". Passwords are truncated to 72 bytes
    (bcrypt's limit).
    """
    pw_bytes = password.encode("utf-8")[:72]
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its bcrypt hash."""
    try:
        pw_bytes = password.encode("utf-8")[:72]
        return bcrypt.checkpw(pw_bytes, password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def burn_verify(password: str) -> None:
    """Spend one bcrypt verification without a real hash."""
    bcrypt.checkpw(password.encode("utf-8")[:72], _DUMMY_HASH)
