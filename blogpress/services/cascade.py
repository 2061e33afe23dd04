"""Cascade rules applied when posts or comments are deleted.

Each function mutates a ``BlogData`` snapshot in place. Callers run them inside
the same ``transaction()`` as the primary delete so the whole cascade lands in
one write.
"""

from typing import Literal

from blogpress.services.store import BlogData

CommentCascade = Literal["direct", "subtree"]


def comment_ids_for_post(data: BlogData, post_id: str) -> set[str]:
    return {cid for cid, c in data.comments.items() if c.post == post_id}


def reply_ids(data: BlogData, comment_id: str, policy: CommentCascade) -> set[str]:
    """Ids of replies removed along with ``comment_id`` under ``policy``."""
    children: dict[str, list[str]] = {}
    for cid, c in data.comments.items():
        if c.parent_comment is not None:
            children.setdefault(c.parent_comment, []).append(cid)

    found: set[str] = set()
    frontier = list(children.get(comment_id, []))
    while frontier:
        cid = frontier.pop()
        if cid in found:
            continue
        found.add(cid)
        if policy == "subtree":
            frontier.extend(children.get(cid, []))
    return found


def delete_post_cascade(data: BlogData, post_id: str) -> int:
    """Remove a post and every comment on it. Returns the number of comments removed."""
    doomed = comment_ids_for_post(data, post_id)
    for cid in doomed:
        del data.comments[cid]
    del data.posts[post_id]
    return len(doomed)


def delete_comment_cascade(
    data: BlogData, comment_id: str, policy: CommentCascade = "direct"
) -> int:
    """Remove a comment and its replies per ``policy``. Returns replies removed."""
    doomed = reply_ids(data, comment_id, policy)
    for cid in doomed:
        del data.comments[cid]
    del data.comments[comment_id]
    return len(doomed)
