"""Comment endpoints."""

from fastapi import APIRouter, Depends, Query

from blogpress.models.comment import (
    CommentCreate,
    CommentIndex,
    CommentResponse,
    CommentUpdate,
    ReplyIndex,
)
from blogpress.models.common import Pagination
from blogpress.models.user import User
from blogpress.routers.deps import get_current_user, get_optional_user
from blogpress.services.comments import (
    create_comment,
    delete_comment,
    list_replies,
    list_top_level,
    toggle_comment_like,
    update_comment,
)

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("/post/{post_id}", response_model=CommentIndex)
async def list_post_comments(
    post_id: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    user: User | None = Depends(get_optional_user),
):
    """Top-level comments of a post (newest first), each with its direct replies."""
    comments, total = await list_top_level(
        post_id, page=page, limit=limit, viewer_id=user.id if user else None
    )
    return CommentIndex(
        comments=comments, pagination=Pagination.build(page, limit, total)
    )


@router.get("/{comment_id}/replies", response_model=ReplyIndex)
async def list_comment_replies(
    comment_id: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    user: User | None = Depends(get_optional_user),
):
    replies, total = await list_replies(
        comment_id, page=page, limit=limit, viewer_id=user.id if user else None
    )
    return ReplyIndex(replies=replies, pagination=Pagination.build(page, limit, total))


@router.post("", response_model=CommentResponse, status_code=201)
async def add_comment(payload: CommentCreate, user: User = Depends(get_current_user)):
    comment = await create_comment(
        user.id, payload.post_id, payload.content, payload.parent_comment_id
    )
    return CommentResponse(message="Comment added successfully", comment=comment)


@router.put("/{comment_id}", response_model=CommentResponse)
async def edit_comment(
    comment_id: str, payload: CommentUpdate, user: User = Depends(get_current_user)
):
    """Edit a comment. Only its author may do this."""
    comment = await update_comment(comment_id, user.id, payload.content)
    return CommentResponse(message="Comment updated successfully", comment=comment)


@router.delete("/{comment_id}")
async def remove_comment(comment_id: str, user: User = Depends(get_current_user)):
    removed = await delete_comment(comment_id, user.id, user.is_admin)
    return {"message": "Comment deleted successfully", "replies_removed": removed}


@router.post("/{comment_id}/like", response_model=CommentResponse)
async def like_comment(comment_id: str, user: User = Depends(get_current_user)):
    comment = await toggle_comment_like(comment_id, user.id)
    return CommentResponse(message="Comment like toggled successfully", comment=comment)
