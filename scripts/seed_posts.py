"""Seed an admin, a demo author and sample posts into the configured store.

Usage:
    python -m scripts.seed_posts
    STORAGE_BACKEND=blob python -m scripts.seed_posts
"""

import asyncio
import logging

from blogpress.config import get_settings
from blogpress.models.comment import CommentCreate
from blogpress.models.post import PostCreate
from blogpress.models.user import RegisterRequest
from blogpress.services.auth import register_user
from blogpress.services.comments import create_comment
from blogpress.services.posts import create_post
from blogpress.services.store import read_snapshot

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

SEED_ADMIN = RegisterRequest(
    username="admin",
    email="admin@example.com",
    password="change-me-now",
    bio="Site administrator",
)

SEED_AUTHOR = RegisterRequest(
    username="demo_writer",
    email="writer@example.com",
    password="demo-password",
    bio="Writes about Python and the web.",
)

SEED_POSTS = [
    PostCreate(
        title="Getting Started with FastAPI",
        content=(
            "FastAPI builds on Starlette and Pydantic to give you request "
            "validation, dependency injection and OpenAPI docs with very little "
            "ceremony. This post walks through a first endpoint, a request model "
            "and a dependency that resolves the current user from a bearer token."
        ),
        tags=["python", "fastapi", "tutorial"],
    ),
    PostCreate(
        title="Why Your Likes Should Be a Set",
        content=(
            "Storing likes as a list invites duplicates and linear scans. A set "
            "keyed by user id makes membership checks constant time and turns a "
            "like into an idempotent insert."
        ),
        tags=["data-modeling"],
    ),
    PostCreate(
        title="Notes for a Future Post",
        content="Draft: outline pagination envelopes and cascade deletes.",
        tags=["drafts"],
        status="draft",
    ),
]


async def main() -> None:
    settings = get_settings()
    print(f"Seeding {settings.storage_backend} store...")
    if settings.storage_backend == "memory":
        print("  Note: the memory store only lives as long as this process.")

    data = await read_snapshot()
    if data.find_user(SEED_ADMIN.username) is not None:
        print("Store already seeded, nothing to do.")
        return

    await register_user(SEED_ADMIN, is_admin=True)
    author = await register_user(SEED_AUTHOR)
    print(f"  Created users: {SEED_ADMIN.username}, {author.username}")

    for payload in SEED_POSTS:
        post = await create_post(author.id, payload)
        print(f"  Created post: {post.title[:60]} ({post.status})")

    first = (await read_snapshot()).posts
    welcome = next(p for p in first.values() if p.status == "published")
    comment = CommentCreate(content="Great introduction, thanks!", post_id=welcome.id)
    await create_comment(author.id, comment.post_id, comment.content)
    print("Done!")


if __name__ == "__main__":
    asyncio.run(main())
