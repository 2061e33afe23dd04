"""Account endpoints: register, login, current user."""

from fastapi import APIRouter, Depends

from blogpress.models.user import (
    CurrentUserResponse,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    User,
    UserPublic,
)
from blogpress.routers.deps import get_current_user
from blogpress.services.auth import authenticate, create_access_token, register_user

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_response(user: User, message: str) -> TokenResponse:
    return TokenResponse(
        message=message,
        token=create_access_token(user.id),
        user=UserPublic.from_user(user),
    )


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(payload: RegisterRequest):
    """Create an account and log it in."""
    user = await register_user(payload)
    return _token_response(user, "User registered successfully")


@router.post("/login", response_model=TokenResponse)
async def login(payload: LoginRequest):
    """Log in with a username or email (sent as ``username`` or ``email``)."""
    user = await authenticate(payload.username, payload.password)
    return _token_response(user, "Login successful")


@router.get("/me", response_model=CurrentUserResponse)
async def me(user: User = Depends(get_current_user)):
    return CurrentUserResponse(user=UserPublic.from_user(user))
