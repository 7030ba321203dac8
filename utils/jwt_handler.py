from datetime import datetime, timedelta, timezone
from typing import Optional, Dict
from jose import JWTError, jwt

from core.config import settings

ALGORITHM = "HS256"


def create_jwt_token(data: Dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT token with the provided data.

    Args:
        data: Dictionary containing the claims to encode
        expires_delta: Optional expiration time delta, defaults to the
            configured ACCESS_TOKEN_EXPIRE_MINUTES

    Returns:
        Encoded JWT token as string
    """
    to_encode = data.copy()

    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    expire = datetime.now(timezone.utc) + expires_delta

    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_jwt_token(token: str) -> Optional[Dict]:
    """
    Decode and verify a JWT token.

    Args:
        token: JWT token string to decode

    Returns:
        Dictionary containing the decoded claims, or None if invalid
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
