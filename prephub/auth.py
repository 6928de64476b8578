"""Bearer-token identity for request handlers.

Tokens are JWTs whose ``sub`` claim is the user id. The service trusts the
identity in a valid token without further lookup; issuing tokens for real
users is the job of the platform's auth service.
"""
from __future__ import annotations
import os
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from prephub.errors import AuthenticationError

SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-secret-change-me")
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(
    user_id: str, expires_delta: Optional[timedelta] = None
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    return jwt.encode(
        {"sub": user_id, "token_type": "access_token", "exp": expire},
        SECRET_KEY,
        algorithm=ALGORITHM,
    )


def decode_user_id(token: str) -> Optional[str]:
    """User id carried by ``token``, or None if the token is not valid."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
    user_id = payload.get("sub")
    return str(user_id) if user_id else None


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    """Viewer identity; missing or invalid tokens mean an anonymous viewer."""
    if credentials is None:
        return None
    return decode_user_id(credentials.credentials)


async def get_current_user(
    user_id: Optional[str] = Depends(get_optional_user),
) -> str:
    if user_id is None:
        raise AuthenticationError
    return user_id
