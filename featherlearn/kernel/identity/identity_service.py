"""
Identity service for account operations.
"""

import uuid
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from featherlearn.kernel.errors import ConflictError, NotFoundError, UnauthenticatedError
from featherlearn.kernel.models.base import enum_value, utcnow
from featherlearn.kernel.models.user import User, UserRole, default_user_settings
from featherlearn.kernel.models.event_log import EventType
from featherlearn.kernel.events.event_store import EventStore
from featherlearn.kernel.identity.password import hash_password, verify_password
from featherlearn.kernel.identity.jwt import AccessToken, JWTManager
from featherlearn.logging_config import get_logger

logger = get_logger(__name__)


def role_value(user: User) -> str:
    return enum_value(user.role)


class IdentityService:
    """
    Service for user identity operations.

    Handles registration, authentication, profile and settings updates and
    account deletion.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.jwt_manager = JWTManager()
        self.event_store = EventStore(session)

    async def register_user(
        self,
        email: str,
        password: str,
        name: str,
        role: UserRole = UserRole.USER,
        ip_address: Optional[str] = None,
    ) -> User:
        """
        Register a new user.

        Raises:
            ConflictError: If the email is already registered
        """
        if await self.get_user_by_email(email):
            raise ConflictError("Email already registered", code="email_taken")

        user = User(
            email=email.lower().strip(),
            password_hash=hash_password(password),
            name=name.strip(),
            role=role,
            settings=default_user_settings(),
            last_active_at=utcnow(),
        )
        self.session.add(user)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.USER_REGISTERED,
            entity_type="user",
            entity_id=user.id,
            user_id=user.id,
            payload={"email": user.email, "role": role_value(user)},
            ip_address=ip_address,
        )
        logger.info("User registered", extra={"new_user": str(user.id)})
        return user

    async def authenticate(
        self,
        email: str,
        password: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> tuple[User, AccessToken]:
        """
        Check credentials and issue an access token.

        Raises:
            UnauthenticatedError: Unknown email, wrong password or inactive account
        """
        user = await self.get_user_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise UnauthenticatedError("Invalid email or password", code="invalid_credentials")
        if not user.is_active:
            raise UnauthenticatedError("Account is disabled", code="account_disabled")

        user.last_active_at = utcnow()
        token = self.issue_token(user)

        await self.event_store.log(
            event_type=EventType.USER_LOGGED_IN,
            entity_type="user",
            entity_id=user.id,
            user_id=user.id,
            payload={"method": "password"},
            ip_address=ip_address,
            user_agent=user_agent,
        )
        return user, token

    def issue_token(self, user: User) -> AccessToken:
        return self.jwt_manager.issue(user.id, user.email, role_value(user))

    async def get_user_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(
            select(User).where(User.email == email.lower().strip())
        )
        return result.scalar_one_or_none()

    async def require_user(self, user_id: uuid.UUID) -> User:
        user = await self.get_user_by_id(user_id)
        if not user or not user.is_active:
            raise NotFoundError("User not found")
        return user

    async def update_profile(
        self,
        user: User,
        changes: Dict[str, Any],
        ip_address: Optional[str] = None,
    ) -> User:
        """
        Apply profile changes (name, bio, profile_uri, email).

        Args:
            user: The account being edited
            changes: Only the fields the client sent
            ip_address: Client IP for audit

        Raises:
            ConflictError: If the new email belongs to another account
        """
        applied: Dict[str, Any] = {}

        if changes.get("email") is not None:
            new_email = changes["email"].lower().strip()
            existing = await self.get_user_by_email(new_email)
            if existing and existing.id != user.id:
                raise ConflictError("Email already in use", code="email_taken")
            user.email = new_email
            applied["email"] = new_email

        for field in ("name", "bio", "profile_uri"):
            if field in changes:
                value = changes[field]
                if isinstance(value, str):
                    value = value.strip()
                setattr(user, field, value)
                applied[field] = value

        if applied:
            await self.event_store.log(
                event_type=EventType.USER_UPDATED,
                entity_type="user",
                entity_id=user.id,
                user_id=user.id,
                payload=applied,
                ip_address=ip_address,
            )
        return user

    async def update_settings(self, user: User, changes: Dict[str, Any]) -> User:
        """Merge partial settings into the stored settings document."""
        merged = dict(user.settings or default_user_settings())
        merged.update({k: v for k, v in changes.items() if v is not None})
        # Reassign so the JSON column is flagged dirty
        user.settings = merged

        await self.event_store.log(
            event_type=EventType.USER_UPDATED,
            entity_type="user",
            entity_id=user.id,
            user_id=user.id,
            payload={"settings": merged},
        )
        return user

    async def delete_user(self, user: User, ip_address: Optional[str] = None) -> None:
        """Delete the account; progress, follows and claims cascade."""
        await self.event_store.log(
            event_type=EventType.USER_DELETED,
            entity_type="user",
            entity_id=user.id,
            user_id=user.id,
            payload={"email": user.email},
            ip_address=ip_address,
        )
        await self.session.delete(user)
        await self.session.flush()
        logger.info("User deleted", extra={"deleted_user": str(user.id)})
