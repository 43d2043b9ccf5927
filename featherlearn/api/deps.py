"""
FastAPI dependencies for authentication, authorization, and database sessions.
"""

import uuid
from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from featherlearn.database import get_db
from featherlearn.kernel.errors import ForbiddenError, UnauthenticatedError
from featherlearn.kernel.identity.identity_service import IdentityService, role_value
from featherlearn.kernel.identity.jwt import verify_access_token
from featherlearn.kernel.models.user import User, UserRole
from featherlearn.logging_config import bind_user_id

# auto_error=False so a missing header goes through UnauthenticatedError
security = HTTPBearer(auto_error=False)


DbSession = Annotated[AsyncSession, Depends(get_db)]


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: DbSession,
) -> User:
    """Resolve the bearer token to an active user or raise 401."""
    if not credentials:
        raise UnauthenticatedError("Not authenticated")

    payload = verify_access_token(credentials.credentials)
    if not payload:
        raise UnauthenticatedError("Invalid or expired token", code="invalid_token")

    try:
        user_id = uuid.UUID(payload.sub)
    except ValueError:
        raise UnauthenticatedError("Invalid or expired token", code="invalid_token")

    user = await IdentityService(db).get_user_by_id(user_id)
    if not user:
        raise UnauthenticatedError("User not found", code="invalid_token")
    if not user.is_active:
        raise ForbiddenError("User account is disabled", code="account_disabled")

    bind_user_id(user.id)
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


async def require_admin(user: CurrentUser) -> User:
    """Require the current user to be an admin."""
    if role_value(user) != UserRole.ADMIN.value:
        raise ForbiddenError("Admin access required")
    return user


AdminUser = Annotated[User, Depends(require_admin)]


def get_request_id(request: Request) -> Optional[str]:
    """Get request correlation ID (set by RequestIdMiddleware)."""
    return getattr(request.state, "request_id", None)


def get_client_ip(request: Request) -> Optional[str]:
    """Extract client IP from request."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def get_user_agent(request: Request) -> Optional[str]:
    return request.headers.get("User-Agent")
