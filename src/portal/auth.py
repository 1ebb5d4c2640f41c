"""
JWT validation and role checks for admin routes.

The member portal issues an HS256-signed JWT at login and the admin UI sends it
in the Authorization header:

    Authorization: Bearer <token>

The token must carry an "id" claim naming an existing user. Admin routes then
additionally require that user's role to be "admin" or "superadmin".
"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from portal.config import ADMIN_ROLES, JWT_SECRET
from portal.db import USER_SK, get_users_table, user_pk

logger = logging.getLogger(__name__)

_security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def protect(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_security),
    users=Depends(get_users_table),
) -> dict:
    """
    Authenticate the caller. Returns the stored user record, password removed.
    """
    if not JWT_SECRET:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="JWT_SECRET not configured",
        )

    if credentials is None:
        raise _unauthorized("Not authorized, no token")

    try:
        payload = jwt.decode(credentials.credentials, JWT_SECRET, algorithms=["HS256"])
    except ExpiredSignatureError:
        raise _unauthorized("Token expired")
    except JWTError:
        raise _unauthorized("Not authorized, token failed")

    user_id = payload.get("id")
    if not user_id:
        raise _unauthorized("Not authorized, token failed")

    user = users.get_item(Key={"PK": user_pk(user_id), "SK": USER_SK}).get("Item")
    if not user:
        raise _unauthorized("Not authorized, user not found")

    user.pop("password", None)
    return user


def require_admin(user: dict = Depends(protect)) -> dict:
    """Authorize the caller: only admins and superadmins get through."""
    if user.get("role") not in ADMIN_ROLES:
        logger.warning("Admin access denied", extra={"user_id": user.get("id")})
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Admin only.",
        )
    return user
