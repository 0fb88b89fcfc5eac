"""
Access tokens.

A session is carried by an HS256 JWT whose ``sub`` claim is the auth user id;
the token is set as the HttpOnly ``token`` cookie by the login route and read
back by `lexadvisor.auth.provider.AuthProvider.get_user`.

Settings used: ``SECRET_KEY``, ``ALGORITHM``, ``ACCESS_TOKEN_EXPIRE_MINUTES``.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from jose import jwt, JWTError

from lexadvisor.database.config.config import settings

logger = logging.getLogger(__name__)


def create_access_token(data: dict) -> str:
    """
    Sign ``data`` as a JWT that expires after ``ACCESS_TOKEN_EXPIRE_MINUTES``.

    Parameters
    ----------
    data : dict
        Claims; ``sub`` must hold the user id.

    Returns
    -------
    str
        The encoded token.
    """
    claims = dict(data)
    now = int(datetime.now(timezone.utc).timestamp())
    claims["exp"] = now + int(settings.ACCESS_TOKEN_EXPIRE_MINUTES) * 60
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: str) -> Optional[str]:
    """Return the ``sub`` claim of a valid, unexpired token, else None."""
    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.info(f"Rejected access token: {e}")
        return None
    return claims.get("sub")
