"""User account models."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field

from blogpress.models.common import DEFAULT_AVATAR


class User(BaseModel):
    """Stored user account. Never returned directly (carries the password hash)."""

    id: str
    username: str
    email: str
    password_hash: str
    avatar: str = DEFAULT_AVATAR
    bio: str = ""
    is_admin: bool = False
    created_at: datetime


class UserPublic(BaseModel):
    id: str
    username: str
    avatar: str
    bio: str
    is_admin: bool
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserPublic":
        return cls(**user.model_dump(exclude={"email", "password_hash"}))


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=30, pattern=r"^[A-Za-z0-9_]+$")
    email: str = Field(..., max_length=254, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(..., min_length=6, max_length=128)
    bio: str = Field("", max_length=500)


class LoginRequest(BaseModel):
    """Login with either the username or the email address."""

    username: str = Field(..., validation_alias=AliasChoices("username", "email"))
    password: str


class TokenResponse(BaseModel):
    message: str
    token: str
    token_type: str = "bearer"
    user: UserPublic


class CurrentUserResponse(BaseModel):
    user: UserPublic
