"""Shared model pieces: author summaries, pagination envelope, like sets."""

import math
from datetime import datetime, timezone
from typing import TypeVar

from pydantic import BaseModel

T = TypeVar("T")

DEFAULT_AVATAR = "https://via.placeholder.com/150"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuthorSummary(BaseModel):
    """Author reference resolved for display."""

    id: str
    username: str
    avatar: str = DEFAULT_AVATAR
    bio: str | None = None


class Pagination(BaseModel):
    """Pagination envelope returned alongside every listing."""

    current: int
    pages: int
    total: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(current=page, pages=math.ceil(total / limit), total=total)


def page_slice(items: list[T], page: int, limit: int) -> list[T]:
    """Return the 1-based ``page`` of ``items`` with ``limit`` entries per page."""
    start = (page - 1) * limit
    return items[start : start + limit]


def toggle_like(likes: set[str], user_id: str) -> bool:
    """Flip ``user_id``'s membership in ``likes``. Returns True if now liked."""
    if user_id in likes:
        likes.discard(user_id)
        return False
    likes.add(user_id)
    return True
