"""进程内 ``ContentStore`` 实现，供测试与嵌入方使用。"""
from __future__ import annotations

import copy
from itertools import count
from typing import Any, Iterable

from ..core.exceptions import ContentStoreError
from .store import Attachment, Post, User


class InMemoryContentStore:
    """以字典保存文章、用户、元数据与附件。

    元数据按值拷贝读写，模拟宿主存储的序列化边界：调用方修改读出的列表
    不会影响已保存的值。"""

    def __init__(self, site_url: str = "http://example.org") -> None:
        self.site_url = site_url.rstrip("/")
        self._ids = count(1)
        self._posts: dict[int, Post] = {}
        self._post_meta: dict[int, dict[str, Any]] = {}
        self._terms: dict[int, dict[str, list[str]]] = {}
        self._attachments: dict[int, Attachment] = {}
        self._thumbnails: dict[int, int] = {}
        self._users: dict[int, User] = {}
        self._user_meta: dict[int, dict[str, Any]] = {}

    # ---- 装配辅助 -----------------------------------------------------

    def add_post(self, post: Post | None = None, **fields: Any) -> Post:
        """登记一篇文章；未提供 ID 时自动分配。"""

        if post is None:
            post = Post(id=fields.pop("id", None) or self._next_id(), **fields)
        self._posts[post.id] = post
        return post

    def add_user(self, user: User | None = None, **fields: Any) -> User:
        if user is None:
            user = User(id=fields.pop("id", None) or self._next_id(), **fields)
        self._users[user.id] = user
        return user

    def add_attachment(self, parent_id: int, url: str, mime_type: str = "image/jpeg") -> Attachment:
        attachment = Attachment(id=self._next_id(), parent_id=parent_id, url=url, mime_type=mime_type)
        self._attachments[attachment.id] = attachment
        return attachment

    def set_thumbnail(self, post_id: int, attachment_id: int) -> None:
        self._thumbnails[post_id] = attachment_id

    def set_post_terms(self, post_id: int, taxonomy: str, terms: list[str]) -> None:
        self._terms.setdefault(post_id, {})[taxonomy] = list(terms)

    def _next_id(self) -> int:
        taken = self._posts.keys() | self._users.keys() | self._attachments.keys()
        candidate = next(self._ids)
        while candidate in taken:
            candidate = next(self._ids)
        return candidate

    # ---- 文章 -----------------------------------------------------

    def get_post(self, post_id: int) -> Post | None:
        return self._posts.get(post_id)

    def get_posts(self, post_ids: Iterable[int], *, post_type: str | None = None) -> list[Post]:
        posts = [self._posts[pid] for pid in post_ids if pid in self._posts]
        if post_type is not None:
            posts = [post for post in posts if post.post_type == post_type]
        return posts

    def insert_post(
        self,
        *,
        post_type: str,
        status: str,
        title: str,
        content: str,
        terms: dict[str, list[str]] | None = None,
    ) -> int:
        if not title:
            raise ContentStoreError("文章标题不能为空", details={"postType": post_type})
        post = self.add_post(post_type=post_type, status=status, title=title, content=content)
        for taxonomy, names in (terms or {}).items():
            self.set_post_terms(post.id, taxonomy, names)
        return post.id

    def find_posts_by_meta(self, *, post_type: str, any_of: Iterable[tuple[str, Any]]) -> list[Post]:
        criteria = list(any_of)
        matches: list[Post] = []
        for post in self._posts.values():
            if post.post_type != post_type:
                continue
            meta = self._post_meta.get(post.id, {})
            if any(key in meta and meta[key] == value for key, value in criteria):
                matches.append(post)
        return matches

    def get_post_meta(self, post_id: int, key: str, default: Any = None) -> Any:
        meta = self._post_meta.get(post_id, {})
        if key not in meta:
            return default
        return copy.deepcopy(meta[key])

    def update_post_meta(self, post_id: int, key: str, value: Any) -> None:
        self._post_meta.setdefault(post_id, {})[key] = copy.deepcopy(value)

    def get_post_terms(self, post_id: int, taxonomy: str) -> list[str]:
        return list(self._terms.get(post_id, {}).get(taxonomy, []))

    def get_image_attachments(self, post_id: int) -> list[Attachment]:
        return [
            attachment
            for attachment in self._attachments.values()
            if attachment.parent_id == post_id and attachment.mime_type.startswith("image/")
        ]

    def get_thumbnail(self, post_id: int) -> Attachment | None:
        attachment_id = self._thumbnails.get(post_id)
        if attachment_id is None:
            return None
        return self._attachments.get(attachment_id)

    def get_permalink(self, post_id: int) -> str:
        return f"{self.site_url}/?p={post_id}"

    # ---- 用户 -----------------------------------------------------

    def get_user(self, user_id: int) -> User | None:
        return self._users.get(user_id)

    def find_user_by_meta(self, key: str, value: Any) -> User | None:
        for user_id, meta in self._user_meta.items():
            if meta.get(key) == value and user_id in self._users:
                return self._users[user_id]
        return None

    def get_user_meta(self, user_id: int, key: str, default: Any = None) -> Any:
        return copy.deepcopy(self._user_meta.get(user_id, {}).get(key, default))

    def update_user_meta(self, user_id: int, key: str, value: Any) -> None:
        self._user_meta.setdefault(user_id, {})[key] = copy.deepcopy(value)

    def delete_user_meta(self, user_id: int, key: str) -> None:
        self._user_meta.get(user_id, {}).pop(key, None)

    def get_author_posts_url(self, user_id: int) -> str:
        return f"{self.site_url}/?author={user_id}"
