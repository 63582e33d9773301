"""Salted password hashing for stored accounts."""

from __future__ import annotations

import bcrypt

# bcrypt only looks at the first 72 bytes and newer releases refuse longer input.
MAX_SECRET_BYTES = 72


def _secret(plain: str) -> bytes:
    return plain.encode("utf-8")[:MAX_SECRET_BYTES]


def hash_password(plain: str, *, rounds: int = 12) -> str:
    return bcrypt.hashpw(_secret(plain), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(_secret(plain), hashed.encode("utf-8"))
    except ValueError:
        # Not a bcrypt hash (e.g. a record written by hand), so nothing can match it.
        return False
