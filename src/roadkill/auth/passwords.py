"""
Password hashing with bcrypt.

Hashing is CPU-bound, so both operations run in a worker thread to keep the
event loop responsive.
"""

from __future__ import annotations

import asyncio

import bcrypt

from ..core.errors import ValidationError

# bcrypt only considers the first 72 bytes of a password.
MAX_PASSWORD_BYTES = 72


def _hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("ascii")


def _verify(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("ascii"))
    except ValueError:
        # Malformed stored hash or oversized password
        return False


async def hash_password(password: str) -> str:
    if not password:
        raise ValidationError("Password must not be empty")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return await asyncio.to_thread(_hash, password)


async def verify_password(password: str, password_hash: str) -> bool:
    return await asyncio.to_thread(_verify, password, password_hash)
