"""Tests for the post service: derived fields, filters, authorization, cascades."""

import math
from datetime import datetime, timedelta, timezone

import pytest

from blogpress.errors import ForbiddenError, NotFoundError
from blogpress.models.post import PostCreate, PostUpdate, compute_read_time, derive_excerpt
from blogpress.services.comments import create_comment
from blogpress.services.posts import (
    create_post,
    delete_post,
    get_post,
    list_posts,
    toggle_post_like,
    update_post,
)


def _words(n: int) -> str:
    return " ".join(f"word{i}" for i in range(n))


async def _backdate(store, post_id: str, minutes: int) -> None:
    """Shift a stored post's created_at so listing order is deterministic."""
    data, etag = await store.load()
    data.posts[post_id].created_at = datetime(2026, 1, 1, tzinfo=timezone.utc) + timedelta(
        minutes=minutes
    )
    await store.save(data, etag)


class TestDerivedFields:
    def test_read_time_rounds_up(self):
        assert compute_read_time(_words(400)) == 2
        assert compute_read_time(_words(401)) == 3
        assert compute_read_time(_words(1)) == 1

    def test_read_time_splits_on_any_whitespace(self):
        assert compute_read_time("one\ntwo\tthree   four") == math.ceil(4 / 200)

    def test_short_content_is_its_own_excerpt(self):
        assert derive_excerpt("Short but valid content") == "Short but valid content"

    def test_long_content_excerpt_is_truncated_prefix(self):
        content = "x" * 500
        excerpt = derive_excerpt(content)
        assert excerpt == "x" * 150
        assert content.startswith(excerpt)
        assert len(excerpt) <= 300

    async def test_create_derives_excerpt_and_read_time(self, alice):
        content = _words(400)
        post = await create_post(alice.id, PostCreate(title="Hello", content=content))

        assert post.read_time == 2
        assert post.excerpt == content[:150]
        assert content.startswith(post.excerpt)
        assert post.status == "published"
        assert post.featured_image == "https://via.placeholder.com/800x400"
        assert post.author.username == "alice"

    async def test_create_keeps_custom_excerpt(self, alice):
        post = await create_post(
            alice.id,
            PostCreate(title="Hello", content=_words(20), excerpt="My own teaser"),
        )
        assert post.excerpt == "My own teaser"

    async def test_content_change_rederives_fields(self, alice):
        post = await create_post(alice.id, PostCreate(title="T", content=_words(50)))
        new_content = "fresh " * 450

        updated = await update_post(
            post.id, alice.id, False, PostUpdate(content=new_content)
        )

        assert updated.read_time == 3
        assert updated.excerpt == derive_excerpt(new_content)

    async def test_content_change_keeps_custom_excerpt(self, alice):
        post = await create_post(
            alice.id, PostCreate(title="T", content=_words(50), excerpt="Teaser")
        )
        updated = await update_post(
            post.id, alice.id, False, PostUpdate(content=_words(60))
        )
        assert updated.excerpt == "Teaser"


class TestListPosts:
    async def test_only_published_posts_are_listed(self, alice):
        await create_post(alice.id, PostCreate(title="Public", content=_words(20)))
        await create_post(
            alice.id, PostCreate(title="Hidden", content=_words(20), status="draft")
        )

        posts, total = await list_posts()
        assert total == 1
        assert [p.title for p in posts] == ["Public"]

    async def test_search_is_case_insensitive_over_title_and_content(self, alice):
        await create_post(alice.id, PostCreate(title="All about FOO", content=_words(20)))
        await create_post(
            alice.id, PostCreate(title="Other", content="nothing but Foobar here")
        )
        await create_post(alice.id, PostCreate(title="Unrelated", content=_words(20)))

        posts, total = await list_posts(search="foo")
        assert total == 2
        assert {p.title for p in posts} == {"All about FOO", "Other"}

    async def test_tag_and_author_filters(self, alice, bob):
        await create_post(
            alice.id, PostCreate(title="A", content=_words(20), tags=["python"])
        )
        await create_post(bob.id, PostCreate(title="B", content=_words(20), tags=["python"]))
        await create_post(bob.id, PostCreate(title="C", content=_words(20), tags=["rust"]))

        _, total = await list_posts(tag="python")
        assert total == 2

        posts, total = await list_posts(tag="python", author=bob.id)
        assert total == 1
        assert posts[0].title == "B"

    async def test_newest_first_with_pagination(self, store, alice):
        ids = []
        for i in range(25):
            post = await create_post(
                alice.id, PostCreate(title=f"Post {i}", content=_words(20))
            )
            ids.append(post.id)
        for minutes, post_id in enumerate(ids):
            await _backdate(store, post_id, minutes)

        page3, total = await list_posts(page=3, limit=10)
        assert total == 25
        assert math.ceil(total / 10) == 3
        assert [p.title for p in page3] == [f"Post {i}" for i in range(4, -1, -1)]

        page1, _ = await list_posts(page=1, limit=10)
        assert page1[0].title == "Post 24"

    async def test_is_liked_annotation_for_viewer(self, alice, bob):
        post = await create_post(alice.id, PostCreate(title="T", content=_words(20)))
        await toggle_post_like(post.id, bob.id)

        as_bob, _ = await list_posts(viewer_id=bob.id)
        as_alice, _ = await list_posts(viewer_id=alice.id)
        anonymous, _ = await list_posts()

        assert as_bob[0].is_liked is True
        assert as_alice[0].is_liked is False
        assert anonymous[0].is_liked is None

    async def test_comment_counts_computed_once_per_listing(self, alice, bob, mocker):
        import blogpress.services.posts as posts_mod

        busy = await create_post(alice.id, PostCreate(title="Busy", content=_words(20)))
        quiet = await create_post(alice.id, PostCreate(title="Quiet", content=_words(20)))
        first = await create_comment(bob.id, busy.id, "one")
        await create_comment(alice.id, busy.id, "two", parent_comment_id=first.id)
        spy = mocker.spy(posts_mod, "comment_counts")

        posts, _ = await list_posts()

        assert {p.id: p.comment_count for p in posts} == {busy.id: 2, quiet.id: 0}
        assert spy.call_count == 1


class TestGetPost:
    async def test_includes_author_bio_and_comments(self, alice, bob):
        post = await create_post(alice.id, PostCreate(title="T", content=_words(20)))
        await create_comment(bob.id, post.id, "First!")

        detail = await get_post(post.id)
        assert detail.author.username == "alice"
        assert detail.author.bio == ""
        assert [c.content for c in detail.comments] == ["First!"]
        assert detail.comment_count == 1

    async def test_missing_post(self, store):
        with pytest.raises(NotFoundError):
            await get_post("does-not-exist")


class TestAuthorization:
    async def test_non_author_update_is_forbidden_and_leaves_post_unchanged(
        self, store, alice, bob
    ):
        post = await create_post(alice.id, PostCreate(title="T", content=_words(20)))
        before = (await store.load())[0].posts[post.id].model_dump_json()

        with pytest.raises(ForbiddenError):
            await update_post(post.id, bob.id, False, PostUpdate(title="Hijacked"))

        after = (await store.load())[0].posts[post.id].model_dump_json()
        assert before == after

    async def test_non_author_delete_is_forbidden(self, store, alice, bob):
        post = await create_post(alice.id, PostCreate(title="T", content=_words(20)))
        with pytest.raises(ForbiddenError):
            await delete_post(post.id, bob.id, False)
        assert post.id in (await store.load())[0].posts

    async def test_admin_may_update_and_delete(self, store, alice, admin):
        post = await create_post(alice.id, PostCreate(title="T", content=_words(20)))

        updated = await update_post(post.id, admin.id, True, PostUpdate(title="Edited"))
        assert updated.title == "Edited"

        await delete_post(post.id, admin.id, True)
        assert post.id not in (await store.load())[0].posts

    async def test_update_missing_post(self, alice):
        with pytest.raises(NotFoundError):
            await update_post("nope", alice.id, False, PostUpdate(title="x"))

    async def test_update_merges_only_provided_fields(self, alice):
        post = await create_post(
            alice.id, PostCreate(title="T", content=_words(20), tags=["a", "b"])
        )
        updated = await update_post(
            post.id, alice.id, False, PostUpdate(status="draft")
        )
        assert updated.status == "draft"
        assert updated.title == "T"
        assert updated.tags == ["a", "b"]


class TestDeleteCascade:
    async def test_delete_removes_every_comment_of_the_post(self, store, alice, bob):
        post = await create_post(alice.id, PostCreate(title="T", content=_words(20)))
        other = await create_post(alice.id, PostCreate(title="O", content=_words(20)))
        top = await create_comment(bob.id, post.id, "top")
        reply = await create_comment(alice.id, post.id, "reply", top.id)
        await create_comment(bob.id, post.id, "deep", reply.id)
        survivor = await create_comment(bob.id, other.id, "elsewhere")

        removed = await delete_post(post.id, alice.id, False)

        data, _ = await store.load()
        assert removed == 3
        assert all(c.post != post.id for c in data.comments.values())
        assert survivor.id in data.comments


class TestToggleLike:
    async def test_toggle_flips_once_and_round_trips(self, alice, bob):
        post = await create_post(alice.id, PostCreate(title="T", content=_words(20)))

        liked = await toggle_post_like(post.id, bob.id)
        assert liked.likes == [bob.id]
        assert liked.like_count == 1
        assert liked.is_liked is True

        unliked = await toggle_post_like(post.id, bob.id)
        assert unliked.likes == []
        assert unliked.is_liked is False

    async def test_likes_from_different_users_accumulate(self, alice, bob):
        post = await create_post(alice.id, PostCreate(title="T", content=_words(20)))
        await toggle_post_like(post.id, alice.id)
        result = await toggle_post_like(post.id, bob.id)
        assert result.like_count == 2

    async def test_like_missing_post(self, alice):
        with pytest.raises(NotFoundError):
            await toggle_post_like("nope", alice.id)
