"""
Bearer access tokens (HS256 by default).

Only access tokens are issued; clients sign in again when one expires.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Literal, Optional

from jose import JWTError, jwt
from pydantic import BaseModel
from pydantic import ValidationError as PayloadError

from featherlearn.config import get_settings


class AccessTokenPayload(BaseModel):
    """Decoded access token claims."""

    sub: str  # User ID
    email: str
    role: str
    exp: datetime
    iat: datetime
    jti: str
    type: Literal["access"]


class AccessToken(BaseModel):
    """What login and registration hand back to the client."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds


class JWTManager:

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        access_token_expire_minutes: Optional[int] = None,
    ):
        settings = get_settings()
        self.secret_key = secret_key or settings.secret_key
        self.algorithm = algorithm or settings.algorithm
        self.lifetime = timedelta(
            minutes=access_token_expire_minutes or settings.access_token_expire_minutes
        )

    def issue(
        self,
        user_id: uuid.UUID,
        email: str,
        role: str,
        lifetime: Optional[timedelta] = None,
    ) -> AccessToken:
        """Sign a token for the learner; ``lifetime`` overrides the configured one."""
        lifetime = lifetime if lifetime is not None else self.lifetime
        now = datetime.now(timezone.utc)
        claims = {
            "sub": str(user_id),
            "email": email,
            "role": role,
            "iat": now,
            "exp": now + lifetime,
            "jti": uuid.uuid4().hex,
            "type": "access",
        }
        return AccessToken(
            access_token=jwt.encode(claims, self.secret_key, algorithm=self.algorithm),
            expires_in=int(lifetime.total_seconds()),
        )

    def verify_access_token(self, token: str) -> Optional[AccessTokenPayload]:
        """Decoded claims, or None for a bad signature, expiry or shape."""
        try:
            claims = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
            return AccessTokenPayload.model_validate(claims)
        except (JWTError, PayloadError):
            return None


_jwt_manager: Optional[JWTManager] = None


def get_jwt_manager() -> JWTManager:
    global _jwt_manager
    if _jwt_manager is None:
        _jwt_manager = JWTManager()
    return _jwt_manager


def verify_access_token(token: str) -> Optional[AccessTokenPayload]:
    return get_jwt_manager().verify_access_token(token)
