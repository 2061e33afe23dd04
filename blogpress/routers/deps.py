"""Request dependencies resolving the bearer token to the current user."""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from blogpress.errors import AuthenticationError
from blogpress.models.user import User
from blogpress.services.auth import decode_token, get_user

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> User:
    if creds is None or not creds.credentials.strip():
        raise AuthenticationError("Authentication required")
    user = await get_user(decode_token(creds.credentials.strip()))
    if user is None:
        raise AuthenticationError("Unauthorized")
    return user


async def get_optional_user(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> User | None:
    """Like get_current_user, but anonymous (or stale-token) requests get None."""
    if creds is None:
        return None
    try:
        return await get_current_user(creds)
    except AuthenticationError:
        return None
