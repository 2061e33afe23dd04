"""Comment operations: threaded listing, CRUD and like toggling."""

import logging
import uuid

from blogpress.config import get_settings
from blogpress.errors import ForbiddenError, NotFoundError, ValidationFailed
from blogpress.models.comment import Comment, CommentPublic, CommentThread
from blogpress.models.common import page_slice, toggle_like, utcnow
from blogpress.services.cascade import delete_comment_cascade
from blogpress.services.store import BlogData, read_snapshot, transaction

logger = logging.getLogger(__name__)


def to_public(
    comment: Comment, data: BlogData, viewer_id: str | None = None
) -> CommentPublic:
    return CommentPublic(
        id=comment.id,
        content=comment.content,
        author=data.author_summary(comment.author),
        post=comment.post,
        parent_comment=comment.parent_comment,
        likes=sorted(comment.likes),
        like_count=len(comment.likes),
        is_liked=(viewer_id in comment.likes) if viewer_id else None,
        is_edited=comment.is_edited,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
    )


def _direct_replies(data: BlogData, parent_id: str) -> list[Comment]:
    """Direct replies in reading order (oldest first)."""
    replies = [c for c in data.comments.values() if c.parent_comment == parent_id]
    return sorted(replies, key=lambda c: c.created_at)


def top_level_comments(data: BlogData, post_id: str) -> list[Comment]:
    """Top-level comments of a post, newest first."""
    comments = [
        c
        for c in data.comments.values()
        if c.post == post_id and c.parent_comment is None
    ]
    return sorted(comments, key=lambda c: c.created_at, reverse=True)


def _get_comment(data: BlogData, comment_id: str) -> Comment:
    comment = data.comments.get(comment_id)
    if comment is None:
        raise NotFoundError("Comment not found")
    return comment


async def list_top_level(
    post_id: str, page: int = 1, limit: int = 20, viewer_id: str | None = None
) -> tuple[list[CommentThread], int]:
    """Top-level comments of a post, each annotated with its direct replies."""
    data = await read_snapshot()
    comments = top_level_comments(data, post_id)
    threads = [
        CommentThread(
            **to_public(c, data, viewer_id).model_dump(),
            replies=[to_public(r, data, viewer_id) for r in _direct_replies(data, c.id)],
        )
        for c in page_slice(comments, page, limit)
    ]
    return threads, len(comments)


async def list_replies(
    parent_id: str, page: int = 1, limit: int = 10, viewer_id: str | None = None
) -> tuple[list[CommentPublic], int]:
    """Direct replies to a comment, oldest first."""
    data = await read_snapshot()
    replies = _direct_replies(data, parent_id)
    return [to_public(r, data, viewer_id) for r in page_slice(replies, page, limit)], len(
        replies
    )


async def create_comment(
    author_id: str,
    post_id: str,
    content: str,
    parent_comment_id: str | None = None,
) -> CommentPublic:
    """Add a comment to a post, optionally as a reply to another comment."""
    async with transaction() as data:
        if post_id not in data.posts:
            raise NotFoundError("Post not found")
        if parent_comment_id:
            parent = data.comments.get(parent_comment_id)
            if parent is None:
                raise NotFoundError("Parent comment not found")
            if parent.post != post_id:
                raise ValidationFailed(
                    "Parent comment belongs to a different post",
                    [
                        {
                            "field": "parent_comment_id",
                            "message": "Parent comment belongs to a different post",
                        }
                    ],
                )

        now = utcnow()
        comment = Comment(
            id=uuid.uuid4().hex,
            content=content,
            author=author_id,
            post=post_id,
            parent_comment=parent_comment_id or None,
            created_at=now,
            updated_at=now,
        )
        data.comments[comment.id] = comment

    logger.info("Created comment %s on post %s", comment.id, post_id)
    return to_public(comment, data, author_id)


async def update_comment(comment_id: str, requester_id: str, content: str) -> CommentPublic:
    """Edit a comment's content. Only the author may edit, admins included."""
    async with transaction() as data:
        comment = _get_comment(data, comment_id)
        if comment.author != requester_id:
            logger.warning(
                "User %s denied update of comment %s", requester_id, comment_id
            )
            raise ForbiddenError("Not authorized to update this comment")
        comment.content = content
        comment.is_edited = True
        comment.updated_at = utcnow()

    return to_public(comment, data, requester_id)


async def delete_comment(comment_id: str, requester_id: str, is_admin: bool) -> int:
    """Delete a comment and cascade to its replies.

    Returns the number of replies removed with it.
    """
    policy = get_settings().comment_delete_cascade
    async with transaction() as data:
        comment = _get_comment(data, comment_id)
        if comment.author != requester_id and not is_admin:
            logger.warning(
                "User %s denied delete of comment %s", requester_id, comment_id
            )
            raise ForbiddenError("Not authorized to delete this comment")
        removed = delete_comment_cascade(data, comment_id, policy)

    logger.info(
        "Deleted comment %s and %d replies (cascade=%s)", comment_id, removed, policy
    )
    return removed


async def toggle_comment_like(comment_id: str, user_id: str) -> CommentPublic:
    async with transaction() as data:
        comment = _get_comment(data, comment_id)
        toggle_like(comment.likes, user_id)
    return to_public(comment, data, user_id)
