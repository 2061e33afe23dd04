"""User registration, password checks and bearer token handling."""

import logging
import uuid
from datetime import timedelta

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from blogpress.config import get_settings
from blogpress.errors import AuthenticationError, ConflictError
from blogpress.models.common import utcnow
from blogpress.models.user import RegisterRequest, User
from blogpress.services.store import read_snapshot, transaction

logger = logging.getLogger(__name__)

_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return _hasher.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def create_access_token(user_id: str) -> str:
    settings = get_settings()
    now = utcnow()
    payload = {
        "iss": settings.jwt_issuer,
        "sub": user_id,
        "iat": int(now.timestamp()),
        "exp": int(
            (now + timedelta(minutes=settings.access_token_minutes)).timestamp()
        ),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> str:
    """Return the user id carried by ``token``.

    Raises AuthenticationError if the token is malformed, expired or signed
    with a different secret.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
            options={"require": ["exp", "sub"]},
        )
    except jwt.PyJWTError as e:
        logger.info("Rejected bearer token: %s", e)
        raise AuthenticationError("Invalid or expired token")
    return str(payload["sub"])


async def register_user(payload: RegisterRequest, is_admin: bool = False) -> User:
    """Create an account. Usernames and emails are unique case-insensitively."""
    async with transaction() as data:
        if data.find_user(payload.username) is not None:
            raise ConflictError("Username already exists")
        if data.find_user(payload.email) is not None:
            raise ConflictError("Email already registered")
        user = User(
            id=uuid.uuid4().hex,
            username=payload.username,
            email=payload.email.lower(),
            password_hash=hash_password(payload.password),
            bio=payload.bio,
            is_admin=is_admin,
            created_at=utcnow(),
        )
        data.users[user.id] = user

    logger.info("Registered user %s (%s)", user.username, user.id)
    return user


async def authenticate(login: str, password: str) -> User:
    data = await read_snapshot()
    user = data.find_user(login)
    if user is None or not verify_password(password, user.password_hash):
        raise AuthenticationError("Invalid credentials")
    return user


async def get_user(user_id: str) -> User | None:
    data = await read_snapshot()
    return data.users.get(user_id)
