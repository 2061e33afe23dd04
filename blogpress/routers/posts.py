"""Blog post endpoints."""

from fastapi import APIRouter, Depends, Query

from blogpress.models.common import Pagination
from blogpress.models.post import (
    PostCreate,
    PostDetailResponse,
    PostIndex,
    PostResponse,
    PostUpdate,
)
from blogpress.models.user import User
from blogpress.routers.deps import get_current_user, get_optional_user
from blogpress.services.posts import (
    create_post,
    delete_post,
    get_post,
    list_posts,
    toggle_post_like,
    update_post,
)

router = APIRouter(prefix="/posts", tags=["posts"])


def _viewer_id(user: User | None) -> str | None:
    return user.id if user else None


@router.get("", response_model=PostIndex)
async def list_published_posts(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    tag: str | None = Query(default=None, description="Only posts with this tag"),
    search: str | None = Query(
        default=None,
        description="Case-insensitive match against title and content",
    ),
    author: str | None = Query(default=None, description="Author user id"),
    user: User | None = Depends(get_optional_user),
):
    """Get published posts, newest first."""
    posts, total = await list_posts(
        status="published",
        tag=tag,
        search=search,
        author=author,
        page=page,
        limit=limit,
        viewer_id=_viewer_id(user),
    )
    return PostIndex(posts=posts, pagination=Pagination.build(page, limit, total))


@router.get("/user/{user_id}", response_model=PostIndex)
async def list_user_posts(
    user_id: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    user: User | None = Depends(get_optional_user),
):
    """Get one author's published posts."""
    posts, total = await list_posts(
        status="published",
        author=user_id,
        page=page,
        limit=limit,
        viewer_id=_viewer_id(user),
    )
    return PostIndex(posts=posts, pagination=Pagination.build(page, limit, total))


@router.get("/{post_id}", response_model=PostDetailResponse)
async def get_post_by_id(post_id: str, user: User | None = Depends(get_optional_user)):
    """Get a single post with its author and top-level comments."""
    post = await get_post(post_id, viewer_id=_viewer_id(user))
    return PostDetailResponse(post=post)


@router.post("", response_model=PostResponse, status_code=201)
async def add_post(payload: PostCreate, user: User = Depends(get_current_user)):
    post = await create_post(user.id, payload)
    return PostResponse(message="Post created successfully", post=post)


@router.put("/{post_id}", response_model=PostResponse)
async def edit_post(
    post_id: str, payload: PostUpdate, user: User = Depends(get_current_user)
):
    """Update a post. Only its author or an admin may do this."""
    post = await update_post(post_id, user.id, user.is_admin, payload)
    return PostResponse(message="Post updated successfully", post=post)


@router.delete("/{post_id}")
async def remove_post(post_id: str, user: User = Depends(get_current_user)):
    """Delete a post together with all of its comments."""
    removed = await delete_post(post_id, user.id, user.is_admin)
    return {"message": "Post deleted successfully", "comments_removed": removed}


@router.post("/{post_id}/like", response_model=PostResponse)
async def like_post(post_id: str, user: User = Depends(get_current_user)):
    """Like the post, or remove the like if the user already liked it."""
    post = await toggle_post_like(post_id, user.id)
    return PostResponse(message="Post like toggled successfully", post=post)
