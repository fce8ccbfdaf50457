"""
Shared fixtures.

Tests run without PostgreSQL: `FakeStore` stands in for the repository
functions and follows the same contract as the SQL (ordering on
(created_at, id), keyset "strictly after", limit).
"""

import itertools
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

import main
from auth import dependencies as auth_dependencies
from feed import repository as feed_repository
from friends import repository as friends_repository
from notifications import repository as notification_repository
from posts import repository as posts_repository
from users import repository as users_repository

BASE_TIME = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

_POST_FUNCTIONS = (
    "get_post",
    "get_post_owner",
    "create_post",
    "update_post",
    "delete_post",
    "toggle_like",
    "list_comments",
    "get_comment",
    "create_comment",
    "delete_comment",
)


class FakeStore:
    def __init__(self):
        self.users = {}
        self.posts = {}
        self.comments = {}
        self.likes = set()
        self.friendships = set()
        self.notifications = []
        self._post_ids = itertools.count(1)
        self._comment_ids = itertools.count(1)

    # -- seeding --------------------------------------------------------

    def add_user(self, user_id, name=None):
        row = {
            "id": user_id,
            "email": f"user{user_id}@example.com",
            "name": name or f"User {user_id}",
            "avatar": None,
            "bio": None,
            "is_active": True,
            "created_at": BASE_TIME,
            "updated_at": BASE_TIME,
        }
        self.users[user_id] = row
        return row

    def add_post(self, author_id, *, created_at=None, content=None):
        post_id = next(self._post_ids)
        created_at = created_at or BASE_TIME + timedelta(minutes=post_id)
        self.posts[post_id] = {
            "id": post_id,
            "author_id": author_id,
            "content": content if content is not None else f"Post {post_id}",
            "image_url": None,
            "created_at": created_at,
            "updated_at": created_at,
        }
        return post_id

    def befriend(self, user_a, user_b):
        self.friendships.add(friends_repository.edge(user_a, user_b))

    def _post_row(self, post, viewer_id):
        author = self.users.get(post["author_id"], {})
        return dict(
            post,
            author_name=author.get("name"),
            author_avatar=author.get("avatar"),
            likes_count=sum(1 for (post_id, _) in self.likes if post_id == post["id"]),
            comments_count=sum(1 for c in self.comments.values() if c["post_id"] == post["id"]),
            is_liked=(post["id"], viewer_id) in self.likes,
        )

    def _comment_row(self, comment):
        author = self.users.get(comment["author_id"], {})
        return dict(comment, author_name=author.get("name"), author_avatar=author.get("avatar"))

    # -- feed.repository ------------------------------------------------

    async def get_post_key(self, post_id):
        post = self.posts.get(post_id)
        if post is None:
            return None
        return {"id": post["id"], "created_at": post["created_at"]}

    async def fetch_page_rows(self, *, viewer_id, sort, limit, author_ids=None, after=None):
        descending = sort == "latest"
        rows = [p for p in self.posts.values() if author_ids is None or p["author_id"] in author_ids]
        rows.sort(key=lambda p: (p["created_at"], p["id"]), reverse=descending)
        if after is not None:
            if descending:
                rows = [p for p in rows if (p["created_at"], p["id"]) < after]
            else:
                rows = [p for p in rows if (p["created_at"], p["id"]) > after]
        return [self._post_row(p, viewer_id) for p in rows[:limit]]

    # -- friends.repository ---------------------------------------------

    async def list_friend_ids(self, user_id):
        return [high if low == user_id else low for (low, high) in self.friendships if user_id in (low, high)]

    # -- users.repository -----------------------------------------------

    async def get_profile(self, user_id):
        return self.users.get(user_id)

    # -- posts.repository -----------------------------------------------

    async def get_post(self, post_id, *, viewer_id):
        post = self.posts.get(post_id)
        return self._post_row(post, viewer_id) if post is not None else None

    async def get_post_owner(self, post_id):
        post = self.posts.get(post_id)
        return post["author_id"] if post is not None else None

    async def create_post(self, *, author_id, content, image_url):
        post_id = self.add_post(author_id, content=content)
        self.posts[post_id]["image_url"] = image_url
        return post_id

    async def update_post(self, post_id, *, content, image_url, remove_image=False):
        post = self.posts.get(post_id)
        if post is None:
            return False
        if content is not None:
            post["content"] = content
        if remove_image:
            post["image_url"] = None
        elif image_url is not None:
            post["image_url"] = image_url
        return True

    async def delete_post(self, post_id):
        if self.posts.pop(post_id, None) is None:
            return False
        self.likes = {(p, u) for (p, u) in self.likes if p != post_id}
        self.comments = {k: c for k, c in self.comments.items() if c["post_id"] != post_id}
        return True

    async def toggle_like(self, post_id, *, user_id):
        key = (post_id, user_id)
        if key in self.likes:
            self.likes.discard(key)
            liked = False
        else:
            self.likes.add(key)
            liked = True
        return liked, sum(1 for (p, _) in self.likes if p == post_id)

    async def list_comments(self, post_id):
        rows = [c for c in self.comments.values() if c["post_id"] == post_id]
        rows.sort(key=lambda c: (c["created_at"], c["id"]), reverse=True)
        return [self._comment_row(c) for c in rows]

    async def get_comment(self, comment_id):
        comment = self.comments.get(comment_id)
        return self._comment_row(comment) if comment is not None else None

    async def create_comment(self, *, post_id, author_id, content):
        comment_id = next(self._comment_ids)
        comment = {
            "id": comment_id,
            "post_id": post_id,
            "author_id": author_id,
            "content": content,
            "created_at": BASE_TIME + timedelta(seconds=comment_id),
        }
        self.comments[comment_id] = comment
        return self._comment_row(comment)

    async def delete_comment(self, comment_id):
        return self.comments.pop(comment_id, None) is not None

    # -- notifications.repository ---------------------------------------

    async def create_notification(self, *, user_id, actor_id, type, message, post_id=None, conn=None):
        row = {
            "id": len(self.notifications) + 1,
            "user_id": user_id,
            "actor_id": actor_id,
            "type": type,
            "post_id": post_id,
            "message": message,
            "read": False,
            "created_at": BASE_TIME,
        }
        self.notifications.append(row)
        return row


@pytest.fixture
def store(monkeypatch):
    fake = FakeStore()
    monkeypatch.setattr(feed_repository, "get_post_key", fake.get_post_key)
    monkeypatch.setattr(feed_repository, "fetch_page_rows", fake.fetch_page_rows)
    monkeypatch.setattr(friends_repository, "list_friend_ids", fake.list_friend_ids)
    monkeypatch.setattr(users_repository, "get_profile", fake.get_profile)
    monkeypatch.setattr(notification_repository, "create_notification", fake.create_notification)
    for name in _POST_FUNCTIONS:
        monkeypatch.setattr(posts_repository, name, getattr(fake, name))
    return fake


@pytest.fixture
def viewer(store):
    return store.add_user(1, "Alice")


@pytest.fixture
def act_as():
    def _act_as(user):
        main.app.dependency_overrides[auth_dependencies.get_current_user] = lambda: user

    yield _act_as
    main.app.dependency_overrides.clear()


@pytest.fixture
def client(act_as, viewer):
    act_as(viewer)
    return TestClient(main.app)


