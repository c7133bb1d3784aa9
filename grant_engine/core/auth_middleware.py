"""Authentication dependencies for FastAPI."""

import logging
from typing import Optional
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from grant_engine.core.config import get_settings

logger = logging.getLogger(__name__)

# HTTP Bearer scheme for Authorization header
security = HTTPBearer(auto_error=False)

# System user for admin API key auth
SYSTEM_USER_ID = UUID("00000000-0000-0000-0000-000000000001")


class AuthContext:
    """Context object containing authenticated user info."""

    def __init__(self, user_id: UUID, token: str, email: str | None = None, is_admin: bool = False):
        self.user_id = user_id
        self.token = token
        self.email = email
        self.is_admin = is_admin


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
) -> Optional[AuthContext]:
    """
    Extract and validate the current user from the request.

    Supports two authentication methods:
    1. Supabase JWT tokens (Bearer auth)
    2. Admin API key (X-API-Key header) for internal tools

    Returns None if no valid auth is present.
    """
    admin_key = get_settings().ADMIN_API_KEY
    if x_api_key and admin_key and x_api_key == admin_key:
        logger.debug("Authenticated via admin API key")
        return AuthContext(user_id=SYSTEM_USER_ID, token="api-key", is_admin=True)

    if not credentials:
        return None

    token = credentials.credentials

    try:
        from grant_engine.db.supabase_client import get_supabase

        # Validates the JWT signature and expiration
        auth_response = get_supabase().auth.get_user(token)
        if not auth_response or not auth_response.user:
            return None

        return AuthContext(
            user_id=UUID(auth_response.user.id),
            token=token,
            email=auth_response.user.email,
        )
    except Exception as e:
        logger.warning(f"Auth error: {e}")
        return None


async def require_auth(
    auth: Optional[AuthContext] = Depends(get_current_user),
) -> AuthContext:
    """Require authentication. Raises 401 if not authenticated."""
    if not auth:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return auth
