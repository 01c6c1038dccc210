"""Password hashing and opaque token helpers.

Passwords are stored as ``pbkdf2_sha256$<iterations>$<salt hex>$<hash hex>``
so the work factor can be raised later without invalidating old hashes.
"""

import hashlib
import hmac
import os
import secrets

_ALGORITHM = "pbkdf2_sha256"


def hash_password(password: str, iterations: int = 390_000) -> str:
    """Hash a password with PBKDF2-HMAC-SHA256 and a random 16-byte salt."""
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return f"{_ALGORITHM}${iterations}${salt.hex()}${dk.hex()}"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Constant-time check of a password against a stored hash."""
    try:
        algorithm, iterations, salt_hex, hash_hex = hashed_password.split("$", 3)
        if algorithm != _ALGORITHM:
            return False
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(hash_hex)
        rounds = int(iterations)
    except ValueError:
        return False

    dk = hashlib.pbkdf2_hmac("sha256", plain_password.encode("utf-8"), salt, rounds)
    return hmac.compare_digest(dk, expected)


def generate_secure_token(num_bytes: int = 32) -> str:
    """URL-safe random token (used for document share links)."""
    return secrets.token_urlsafe(num_bytes)
