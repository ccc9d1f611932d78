"""Password hashing utilities using bcrypt.

Uses the ``bcrypt`` library directly (>=4.0), not passlib.
"""

import bcrypt

_ROUNDS = 12


def hash_password(plain: str) -> str:
    """Hash a plain-text password with a fresh salt. Returns a utf-8 hash string."""
    hashed: bytes = bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=_ROUNDS))
    return hashed.decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Stored hash is not a bcrypt hash
        return False
