"""Password hashing with the ``bcrypt`` library (>=4.0).

passlib is not used: it is unmaintained and breaks against bcrypt >= 4.
"""

import bcrypt


def hash_password(plain: str) -> str:
    """Hash a plain-text password. Returns the bcrypt hash as a utf-8 string."""
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Check a plain-text password against a stored hash.

    A malformed stored hash counts as a mismatch rather than a server error.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False
