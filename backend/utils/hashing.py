# utils/hashing.py
import bcrypt

from config import settings

# Bcrypt only looks at the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72


def get_password_hash(password: str) -> str:
    """Return a salted bcrypt hash of ``password``."""
    password_bytes = password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
    hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS))
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not plain_password or not hashed_password:
        return False
    password_bytes = plain_password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
    try:
        return bcrypt.checkpw(password_bytes, hashed_password.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash (e.g. a legacy plain-text row)
        return False
