"""Blog post data models."""

import math
from datetime import datetime
from typing import Annotated, Literal

from pydantic import (
    BaseModel,
    Field,
    HttpUrl,
    StringConstraints,
    field_serializer,
    field_validator,
)

from blogpress.models.comment import CommentPublic
from blogpress.models.common import AuthorSummary, Pagination

PostStatus = Literal["draft", "published"]

DEFAULT_FEATURED_IMAGE = "https://via.placeholder.com/800x400"
EXCERPT_LENGTH = 150
WORDS_PER_MINUTE = 200

PostTitle = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)
]
PostContent = Annotated[str, StringConstraints(min_length=10)]
PostExcerpt = Annotated[str, StringConstraints(strip_whitespace=True, max_length=300)]
Tag = Annotated[str, StringConstraints(strip_whitespace=True, max_length=50)]


def derive_excerpt(content: str) -> str:
    """Excerpt used when the author did not write one: a prefix of the content."""
    return content[:EXCERPT_LENGTH]


def compute_read_time(content: str) -> int:
    """Estimated reading time in minutes at 200 words per minute."""
    return math.ceil(len(content.split()) / WORDS_PER_MINUTE)


class Post(BaseModel):
    """Stored blog post."""

    id: str
    title: str
    content: str
    excerpt: str
    author: str
    tags: list[str] = []
    featured_image: str = DEFAULT_FEATURED_IMAGE
    likes: set[str] = set()
    status: PostStatus = "published"
    read_time: int = 0
    created_at: datetime
    updated_at: datetime

    @field_serializer("likes")
    def _serialize_likes(self, likes: set[str]) -> list[str]:
        return sorted(likes)


class PostCreate(BaseModel):
    """Payload for creating a post."""

    title: PostTitle
    content: PostContent
    excerpt: PostExcerpt | None = None
    tags: list[Tag] = []
    featured_image: HttpUrl | None = None
    status: PostStatus = "published"

    @field_validator("tags")
    @classmethod
    def _drop_empty_tags(cls, tags: list[str]) -> list[str]:
        return [t for t in tags if t]


class PostUpdate(BaseModel):
    """Partial update. Only fields present in the request are applied."""

    title: PostTitle | None = None
    content: PostContent | None = None
    excerpt: PostExcerpt | None = None
    tags: list[Tag] | None = None
    featured_image: HttpUrl | None = None
    status: PostStatus | None = None

    @field_validator("tags")
    @classmethod
    def _drop_empty_tags(cls, tags: list[str] | None) -> list[str] | None:
        if tags is None:
            return None
        return [t for t in tags if t]


class PostPublic(BaseModel):
    """Post as returned by the API, with its author resolved."""

    id: str
    title: str
    content: str
    excerpt: str
    author: AuthorSummary
    tags: list[str] = []
    featured_image: str
    likes: list[str] = []
    like_count: int = 0
    is_liked: bool | None = None
    status: PostStatus
    read_time: int
    comment_count: int = 0
    created_at: datetime
    updated_at: datetime


class PostDetail(PostPublic):
    """Single post view including its top-level comments (newest first)."""

    comments: list[CommentPublic] = Field(default_factory=list)


class PostIndex(BaseModel):
    """Paginated post listing."""

    posts: list[PostPublic]
    pagination: Pagination


class PostDetailResponse(BaseModel):
    post: PostDetail


class PostResponse(BaseModel):
    """A changed post together with a confirmation message."""

    message: str
    post: PostPublic
