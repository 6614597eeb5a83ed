import logging
import bcrypt
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import jwt
from ats_portal.core.config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES

logger = logging.getLogger(__name__)

# bcrypt has a hard 72 byte input limit
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    password_bytes = password.encode("utf-8")
    if len(password_bytes) <= BCRYPT_MAX_BYTES:
        return password_bytes
    logger.warning("Password exceeds 72 bytes, truncating before hashing")
    # Drop a partial trailing UTF-8 sequence left by the cut
    return password_bytes[:BCRYPT_MAX_BYTES].decode("utf-8", errors="ignore").encode("utf-8")


def hash_password(password: str) -> str:
    """
    Hash a password with bcrypt.
    
    Raises:
        ValueError: If the password cannot be hashed
    """
    try:
        return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode("utf-8")
    except (TypeError, ValueError) as e:
        logger.error(f"Password hashing failed: {e}")
        raise ValueError("Invalid password") from e


def verify_password(password: str, hashed: Optional[str]) -> bool:
    """Verify a password against its stored hash. A malformed hash never matches."""
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(password), hashed.encode("utf-8"))
    except (ValueError, TypeError) as e:
        logger.error(f"Password verification failed: {e}")
        return False


def create_access_token(data: dict, expires_delta: timedelta = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
