"""
Post persistence (raw SQL): posts, likes, comments.

Like/comment counts and the viewer's liked flag are computed per query,
never stored on the post row.
"""

from __future__ import annotations

from typing import Any

from core import db

# $1 is always the viewer id (for `is_liked`).
POST_SELECT = """
SELECT
  p.id,
  p.author_id,
  p.content,
  p.image_url,
  p.created_at,
  p.updated_at,
  u.name AS author_name,
  u.avatar AS author_avatar,
  (SELECT count(*) FROM likes l WHERE l.post_id = p.id) AS likes_count,
  (SELECT count(*) FROM comments c WHERE c.post_id = p.id) AS comments_count,
  EXISTS (
    SELECT 1 FROM likes l WHERE l.post_id = p.id AND l.user_id = $1
  ) AS is_liked
FROM posts p
JOIN users u ON u.id = p.author_id
"""

_COMMENT_SELECT = """
SELECT
  c.id,
  c.post_id,
  c.author_id,
  c.content,
  c.created_at,
  u.name AS author_name,
  u.avatar AS author_avatar
FROM comments c
JOIN users u ON u.id = c.author_id
"""


async def get_post(post_id: int, *, viewer_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        POST_SELECT + "WHERE p.id = $2",
        viewer_id,
        post_id,
    )


async def get_post_owner(post_id: int) -> int | None:
    value = await db.fetch_value("SELECT author_id FROM posts WHERE id = $1", post_id)
    return int(value) if value is not None else None


async def create_post(*, author_id: int, content: str, image_url: str | None) -> int:
    row = await db.fetch_one(
        """
        INSERT INTO posts (author_id, content, image_url)
        VALUES ($1, $2, $3)
        RETURNING id
        """,
        author_id,
        content,
        image_url,
    )
    if row is None:
        raise RuntimeError("Failed to create post.")
    return int(row["id"])


async def update_post(
    post_id: int,
    *,
    content: str | None,
    image_url: str | None,
    remove_image: bool = False,
) -> bool:
    row = await db.fetch_one(
        """
        UPDATE posts
        SET content = COALESCE($2, content),
            image_url = CASE WHEN $4 THEN NULL ELSE COALESCE($3, image_url) END,
            updated_at = now()
        WHERE id = $1
        RETURNING id
        """,
        post_id,
        content,
        image_url,
        remove_image,
    )
    return row is not None


async def delete_post(post_id: int) -> bool:
    """
    Delete a post. Likes, comments and post notifications cascade in the schema.
    """
    row = await db.fetch_one("DELETE FROM posts WHERE id = $1 RETURNING id", post_id)
    return row is not None


async def toggle_like(post_id: int, *, user_id: int) -> tuple[bool, int]:
    """
    Flip the (post, user) like. Returns (liked_after_toggle, likes_count).
    """
    async with db.transaction() as conn:
        removed = await conn.fetchrow(
            "DELETE FROM likes WHERE post_id = $1 AND user_id = $2 RETURNING post_id",
            post_id,
            user_id,
        )
        liked = removed is None
        if liked:
            await conn.execute(
                """
                INSERT INTO likes (post_id, user_id)
                VALUES ($1, $2)
                ON CONFLICT (post_id, user_id) DO NOTHING
                """,
                post_id,
                user_id,
            )
        count = await conn.fetchval("SELECT count(*) FROM likes WHERE post_id = $1", post_id)
    return liked, int(count or 0)


async def list_comments(post_id: int) -> list[dict[str, Any]]:
    return await db.fetch_all(
        _COMMENT_SELECT
        + """
        WHERE c.post_id = $1
        ORDER BY c.created_at DESC, c.id DESC
        """,
        post_id,
    )


async def get_comment(comment_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(_COMMENT_SELECT + "WHERE c.id = $1", comment_id)


async def create_comment(*, post_id: int, author_id: int, content: str) -> dict[str, Any]:
    row = await db.fetch_one(
        """
        WITH inserted AS (
          INSERT INTO comments (post_id, author_id, content)
          VALUES ($1, $2, $3)
          RETURNING id, post_id, author_id, content, created_at
        )
        SELECT i.id, i.post_id, i.author_id, i.content, i.created_at,
               u.name AS author_name, u.avatar AS author_avatar
        FROM inserted i
        JOIN users u ON u.id = i.author_id
        """,
        post_id,
        author_id,
        content,
    )
    if row is None:
        raise RuntimeError("Failed to create comment.")
    return row


async def delete_comment(comment_id: int) -> bool:
    row = await db.fetch_one("DELETE FROM comments WHERE id = $1 RETURNING id", comment_id)
    return row is not None
