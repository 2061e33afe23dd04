"""Comment data models."""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints, field_serializer

from blogpress.models.common import AuthorSummary, Pagination

CommentContent = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=1000)
]


class Comment(BaseModel):
    """Stored comment. ``parent_comment`` is None for top-level comments."""

    id: str
    content: str
    author: str
    post: str
    parent_comment: str | None = None
    likes: set[str] = set()
    is_edited: bool = False
    created_at: datetime
    updated_at: datetime

    @field_serializer("likes")
    def _serialize_likes(self, likes: set[str]) -> list[str]:
        return sorted(likes)


class CommentCreate(BaseModel):
    content: CommentContent
    post_id: str = Field(..., min_length=1)
    parent_comment_id: str | None = None


class CommentUpdate(BaseModel):
    content: CommentContent


class CommentPublic(BaseModel):
    """Comment as returned by the API, with its author resolved."""

    id: str
    content: str
    author: AuthorSummary
    post: str
    parent_comment: str | None = None
    likes: list[str] = []
    like_count: int = 0
    is_liked: bool | None = None
    is_edited: bool = False
    created_at: datetime
    updated_at: datetime


class CommentThread(CommentPublic):
    """Top-level comment with its direct replies (oldest first)."""

    replies: list[CommentPublic] = []


class CommentIndex(BaseModel):
    comments: list[CommentThread]
    pagination: Pagination


class ReplyIndex(BaseModel):
    replies: list[CommentPublic]
    pagination: Pagination


class CommentResponse(BaseModel):
    """A changed comment together with a confirmation message."""

    message: str
    comment: CommentPublic
