"""
Identity Core - Authentication and account management.
"""

from featherlearn.kernel.identity.password import PasswordHasher, verify_password, hash_password
from featherlearn.kernel.identity.jwt import (
    JWTManager,
    AccessToken,
    AccessTokenPayload,
    verify_access_token,
)
from featherlearn.kernel.identity.identity_service import IdentityService, role_value

__all__ = [
    "PasswordHasher",
    "verify_password",
    "hash_password",
    "JWTManager",
    "AccessToken",
    "AccessTokenPayload",
    "verify_access_token",
    "IdentityService",
    "role_value",
]
