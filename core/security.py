"""
Security utilities for JWT token handling and authentication.

Sessions are issued by the external auth provider; this module only
verifies bearer tokens and exposes the signed-in user id to routers.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

from fastapi import Header
from jose import jwt, JWTError

from .config import get_settings
from .exceptions import AuthenticationError

logger = logging.getLogger(__name__)


def create_access_token(
    data: Dict[str, Any],
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a JWT access token.

    Args:
        data: Payload data to encode in the token
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    settings = get_settings()

    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(days=settings.jwt_expire_days)

    to_encode.update({
        "exp": expire,
        "iat": datetime.now(timezone.utc),
    })

    return jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )


def verify_token(token: str) -> Dict[str, Any]:
    """
    Verify and decode a JWT token.

    Args:
        token: JWT token string

    Returns:
        Decoded payload

    Raises:
        AuthenticationError: If token is invalid or expired
    """
    settings = get_settings()

    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
        return payload
    except JWTError as e:
        raise AuthenticationError(
            message="Invalid or expired token",
            details={"error": str(e)},
        )


def extract_token_from_header(authorization: Optional[str]) -> Optional[str]:
    """
    Extract JWT token from Authorization header.

    Supports "Bearer <token>" format.

    Args:
        authorization: Authorization header value

    Returns:
        Token string or None if not present/invalid format
    """
    if not authorization:
        return None

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None

    return parts[1]


# ============ FastAPI Dependencies ============


async def get_current_user_id(authorization: str | None = Header(None)) -> str | None:
    """
    Get the signed-in user id from the Authorization header.

    Returns None if not authenticated (galleries are browsable anonymously).
    """
    token = extract_token_from_header(authorization)
    if not token:
        return None

    try:
        payload = verify_token(token)
    except AuthenticationError as e:
        logger.warning("JWT verification failed: %s", e.details.get("error"))
        return None

    return payload.get("sub")


async def require_current_user_id(authorization: str | None = Header(None)) -> str:
    """
    Require a signed-in user.

    Raises 401 if not authenticated.
    """
    user_id = await get_current_user_id(authorization)
    if not user_id:
        raise AuthenticationError(message="Authentication required")
    return user_id
