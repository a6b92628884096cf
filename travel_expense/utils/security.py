"""
Security Utilities
JWT encoding and decoding for bearer tokens
"""

from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt

from travel_expense.config.settings import settings
from travel_expense.utils.logger import setup_logger

logger = setup_logger()


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed access token

    Args:
        data: Claims to encode ("sub" must carry the user id)
        expires_delta: Optional lifetime override

    Returns:
        str: Encoded JWT
    """
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """
    Decode and verify a JWT

    Args:
        token: Encoded JWT

    Returns:
        dict: Token claims, or None if the token is invalid or expired
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.warning(f"Token decode failed: {str(e)}")
        return None
