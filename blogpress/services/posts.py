"""Post operations: filtered listing, CRUD and like toggling."""

import logging
import uuid
from collections import Counter
from typing import Any

from blogpress.errors import ForbiddenError, NotFoundError
from blogpress.models.common import page_slice, toggle_like, utcnow
from blogpress.models.post import (
    DEFAULT_FEATURED_IMAGE,
    Post,
    PostCreate,
    PostDetail,
    PostPublic,
    PostStatus,
    PostUpdate,
    compute_read_time,
    derive_excerpt,
)
from blogpress.services.cascade import delete_post_cascade
from blogpress.services.comments import to_public as comment_to_public
from blogpress.services.comments import top_level_comments
from blogpress.services.store import BlogData, read_snapshot, transaction

logger = logging.getLogger(__name__)


def comment_counts(data: BlogData) -> Counter[str]:
    """Number of comments per post id, counted in one pass."""
    return Counter(c.post for c in data.comments.values())


def to_public(
    post: Post,
    data: BlogData,
    viewer_id: str | None = None,
    counts: Counter[str] | None = None,
) -> PostPublic:
    if counts is None:
        counts = comment_counts(data)
    return PostPublic(
        id=post.id,
        title=post.title,
        content=post.content,
        excerpt=post.excerpt,
        author=data.author_summary(post.author),
        tags=post.tags,
        featured_image=post.featured_image,
        likes=sorted(post.likes),
        like_count=len(post.likes),
        is_liked=(viewer_id in post.likes) if viewer_id else None,
        status=post.status,
        read_time=post.read_time,
        comment_count=counts[post.id],
        created_at=post.created_at,
        updated_at=post.updated_at,
    )


def _matches(
    post: Post,
    status: PostStatus,
    tag: str | None,
    search: str | None,
    author: str | None,
) -> bool:
    if post.status != status:
        return False
    if tag and tag not in post.tags:
        return False
    if author and post.author != author:
        return False
    if search:
        search_lower = search.lower()
        if (
            search_lower not in post.title.lower()
            and search_lower not in post.content.lower()
        ):
            return False
    return True


def _get_post(data: BlogData, post_id: str) -> Post:
    post = data.posts.get(post_id)
    if post is None:
        raise NotFoundError("Post not found")
    return post


def _check_can_modify(post: Post, requester_id: str, is_admin: bool, action: str) -> None:
    if post.author != requester_id and not is_admin:
        logger.warning("User %s denied %s of post %s", requester_id, action, post.id)
        raise ForbiddenError(f"Not authorized to {action} this post")


async def list_posts(
    status: PostStatus = "published",
    tag: str | None = None,
    search: str | None = None,
    author: str | None = None,
    page: int = 1,
    limit: int = 10,
    viewer_id: str | None = None,
) -> tuple[list[PostPublic], int]:
    """Return one page of matching posts (newest first) and the total match count.

    Args:
        status: Exact status to match; public listings only ask for "published".
        tag: Only posts carrying this exact tag.
        search: Case-insensitive substring matched against title and content.
        author: Only posts written by this user id.
        page: 1-based page number.
        limit: Posts per page.
        viewer_id: When given, each post is annotated with ``is_liked``.
    """
    data = await read_snapshot()
    posts = [p for p in data.posts.values() if _matches(p, status, tag, search, author)]
    posts.sort(key=lambda p: p.created_at, reverse=True)
    counts = comment_counts(data)
    page_posts = page_slice(posts, page, limit)
    return [to_public(p, data, viewer_id, counts) for p in page_posts], len(posts)


async def get_post(post_id: str, viewer_id: str | None = None) -> PostDetail:
    """Single post with its author (including bio) and top-level comments."""
    data = await read_snapshot()
    post = _get_post(data, post_id)
    public = to_public(post, data, viewer_id)
    return PostDetail(
        **public.model_dump(exclude={"author"}),
        author=data.author_summary(post.author, with_bio=True),
        comments=[
            comment_to_public(c, data, viewer_id)
            for c in top_level_comments(data, post_id)
        ],
    )


async def create_post(author_id: str, payload: PostCreate) -> PostPublic:
    now = utcnow()
    post = Post(
        id=uuid.uuid4().hex,
        title=payload.title,
        content=payload.content,
        excerpt=payload.excerpt or derive_excerpt(payload.content),
        author=author_id,
        tags=payload.tags,
        featured_image=(
            str(payload.featured_image)
            if payload.featured_image
            else DEFAULT_FEATURED_IMAGE
        ),
        status=payload.status,
        read_time=compute_read_time(payload.content),
        created_at=now,
        updated_at=now,
    )
    async with transaction() as data:
        data.posts[post.id] = post

    logger.info("Created post %s by %s (%s)", post.id, author_id, post.status)
    return to_public(post, data, author_id)


def _apply_patch(post: Post, patch: dict[str, Any]) -> None:
    """Merge ``patch`` into ``post`` and keep the derived fields consistent."""
    old_content = post.content
    excerpt_was_derived = post.excerpt == derive_excerpt(old_content)

    for field, value in patch.items():
        setattr(post, field, value)

    if "content" in patch and post.content != old_content:
        post.read_time = compute_read_time(post.content)
        if "excerpt" not in patch and excerpt_was_derived:
            post.excerpt = derive_excerpt(post.content)
    if not post.excerpt:
        post.excerpt = derive_excerpt(post.content)
    post.updated_at = utcnow()


async def update_post(
    post_id: str, requester_id: str, is_admin: bool, payload: PostUpdate
) -> PostPublic:
    """Apply a partial update. Allowed for the post's author or an admin."""
    patch = {
        k: v
        for k, v in payload.model_dump(mode="json", exclude_unset=True).items()
        if v is not None
    }
    async with transaction() as data:
        post = _get_post(data, post_id)
        _check_can_modify(post, requester_id, is_admin, "update")
        _apply_patch(post, patch)

    logger.info("Updated post %s fields=%s", post_id, sorted(patch))
    return to_public(post, data, requester_id)


async def delete_post(post_id: str, requester_id: str, is_admin: bool) -> int:
    """Delete a post and all of its comments. Returns the number of comments removed."""
    async with transaction() as data:
        post = _get_post(data, post_id)
        _check_can_modify(post, requester_id, is_admin, "delete")
        removed = delete_post_cascade(data, post_id)

    logger.info("Deleted post %s and %d comments", post_id, removed)
    return removed


async def toggle_post_like(post_id: str, user_id: str) -> PostPublic:
    async with transaction() as data:
        post = _get_post(data, post_id)
        toggle_like(post.likes, user_id)
    return to_public(post, data, user_id)
