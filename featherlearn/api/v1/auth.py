"""
Authentication endpoints.
"""

from fastapi import APIRouter, Request, status

from featherlearn.api.deps import DbSession, CurrentUser, get_client_ip, get_user_agent
from featherlearn.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from featherlearn.schemas.user import UserResponse
from featherlearn.kernel.identity.identity_service import IdentityService

router = APIRouter()


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: Request,
    data: RegisterRequest,
    db: DbSession,
):
    """
    Register a new learner account.

    Returns an access token on successful registration.
    """
    identity_service = IdentityService(db)

    user = await identity_service.register_user(
        email=data.email,
        password=data.password,
        name=data.name,
        ip_address=get_client_ip(request),
    )
    token = identity_service.issue_token(user)

    return TokenResponse(
        access_token=token.access_token,
        token_type=token.token_type,
        expires_in=token.expires_in,
        user=UserResponse.model_validate(user),
    )


@router.post("/login", response_model=TokenResponse)
async def login(
    request: Request,
    data: LoginRequest,
    db: DbSession,
):
    """
    Authenticate user and return an access token.
    """
    user, token = await IdentityService(db).authenticate(
        email=data.email,
        password=data.password,
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request),
    )

    return TokenResponse(
        access_token=token.access_token,
        token_type=token.token_type,
        expires_in=token.expires_in,
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(user: CurrentUser):
    """Get current user's profile."""
    return UserResponse.model_validate(user)
