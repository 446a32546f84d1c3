"""Password hashing for provisioned contractor accounts."""

import hashlib
import secrets

PBKDF2_ITERATIONS = 390000


def hash_password(password: str) -> str:
    """
    Return a salted ``pbkdf2_sha256$<iterations>$<salt>$<hex digest>`` string.

    CPU-bound; async callers run it with ``asyncio.to_thread``.
    """
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PBKDF2_ITERATIONS)
    return f"pbkdf2_sha256${PBKDF2_ITERATIONS}${salt}${digest.hex()}"
