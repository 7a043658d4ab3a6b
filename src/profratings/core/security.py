"""
Password hashing helpers for user credential records.

Hashes are stored as ``pbkdf2_sha256$<iterations>$<salt hex>$<digest hex>``.
"""

import hashlib
import hmac
import secrets
from typing import Optional

ALGORITHM = "pbkdf2_sha256"
ITERATIONS = 260000


def hash_password(password: str, salt: Optional[str] = None, iterations: int = ITERATIONS) -> str:
    """Hash a plaintext password with a random (or given) salt."""
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), bytes.fromhex(salt), iterations
    )
    return f"{ALGORITHM}${iterations}${salt}${digest.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plaintext password against a stored hash."""
    try:
        algorithm, iterations, salt, expected = password_hash.split("$")
        rounds = int(iterations)
        bytes.fromhex(salt)
    except ValueError:
        return False

    if algorithm != ALGORITHM:
        return False

    candidate = hash_password(password, salt=salt, iterations=rounds)
    return hmac.compare_digest(candidate.split("$")[-1], expected)
