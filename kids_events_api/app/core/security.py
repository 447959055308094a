"""
Password hashing helpers.

Passwords are hashed with PBKDF2‑HMAC‑SHA256 and a random 16‑byte
salt.  The stored string records the algorithm and iteration count
next to the salt and digest::

    pbkdf2_sha256$100000$<salt hex>$<digest hex>

so the work factor can be raised later without invalidating
existing hashes.
"""

import hashlib
import hmac
import os

ALGORITHM = "pbkdf2_sha256"
ITERATIONS = 100_000


def _digest(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)


def hash_password(password: str, iterations: int = ITERATIONS) -> str:
    """Hash a password for storage.

    Hashing the same password twice gives different strings because
    each call draws a new salt.
    """
    salt = os.urandom(16)
    return f"{ALGORITHM}${iterations}${salt.hex()}${_digest(password, salt, iterations).hex()}"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a plain password against a value produced by ``hash_password``.

    Malformed stored values never match.
    """
    try:
        algorithm, iterations, salt_hex, hash_hex = hashed_password.split("$")
        salt = bytes.fromhex(salt_hex)
        stored_hash = bytes.fromhex(hash_hex)
        rounds = int(iterations)
    except (AttributeError, ValueError):
        return False
    if algorithm != ALGORITHM or rounds <= 0:
        return False
    return hmac.compare_digest(_digest(plain_password, salt, rounds), stored_hash)
