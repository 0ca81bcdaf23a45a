"""User secret hashing.

Hashing is applied at most once per raw secret: values that already carry
a bcrypt signature pass through untouched, so re-running the pipeline on
already-hashed data is a no-op.
"""

from __future__ import annotations

import bcrypt

from core.constants import BCRYPT_ROUNDS, BCRYPT_SIGNATURES, MAX_SECRET_BYTES
from core.errors import MappingError


def is_hashed(secret: str) -> bool:
    """Return whether a secret already carries a bcrypt signature."""
    return secret.startswith(BCRYPT_SIGNATURES)


def hash_secret(secret: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash a raw secret with bcrypt.

    Args:
        secret: Raw secret text.
        rounds: bcrypt cost factor.

    Returns:
        Encoded bcrypt hash string.

    Raises:
        MappingError: If the secret is longer than bcrypt accepts.
    """
    encoded = secret.encode("utf-8")
    if len(encoded) > MAX_SECRET_BYTES:
        raise MappingError(
            f"password is {len(encoded)} bytes; bcrypt accepts at most {MAX_SECRET_BYTES}",
            field_name="Password",
        )
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(encoded, salt).decode("utf-8")


def ensure_hashed(secret: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash a secret unless it is already a bcrypt hash."""
    if is_hashed(secret):
        return secret
    return hash_secret(secret, rounds)


def verify_secret(secret: str, secret_hash: str) -> bool:
    """Check a raw secret against a stored bcrypt hash."""
    return bcrypt.checkpw(secret.encode("utf-8"), secret_hash.encode("utf-8"))
