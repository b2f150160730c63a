"""宿主 CMS 协作方接口。

同步核心只通过 :class:`ContentStore` 读写文章、元数据、用户、分类与附件，
不关心宿主的具体存储实现。"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Protocol

ENTITY_POST_TYPE = "entity"
REVISION_POST_TYPE = "revision"
ENTITY_TYPE_TAXONOMY = "entity_type"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class Post:
    """文章记录；实体与普通文章共用同一记录空间，以 ``post_type`` 区分。"""

    id: int
    title: str = ""
    content: str = ""
    author_id: int = 0
    post_type: str = "post"
    status: str = "publish"
    comment_count: int = 0
    parent_id: int | None = None
    date_published: datetime = field(default_factory=_utcnow)
    date_modified: datetime = field(default_factory=_utcnow)

    @property
    def is_entity(self) -> bool:
        return self.post_type == ENTITY_POST_TYPE

    @property
    def is_revision(self) -> bool:
        return self.post_type == REVISION_POST_TYPE


@dataclass(slots=True)
class User:
    id: int
    first_name: str = ""
    last_name: str = ""
    display_name: str = ""
    email: str = ""
    description: str = ""


@dataclass(slots=True)
class Attachment:
    id: int
    parent_id: int
    url: str
    mime_type: str = "image/jpeg"


class ContentStore(Protocol):
    """同步核心依赖的宿主存储能力。"""

    def get_post(self, post_id: int) -> Post | None: ...

    def get_posts(self, post_ids: Iterable[int], *, post_type: str | None = None) -> list[Post]: ...

    def insert_post(
        self,
        *,
        post_type: str,
        status: str,
        title: str,
        content: str,
        terms: dict[str, list[str]] | None = None,
    ) -> int:
        """创建文章并返回 ID，失败时抛出 :class:`ContentStoreError`。"""

    def find_posts_by_meta(self, *, post_type: str, any_of: Iterable[tuple[str, Any]]) -> list[Post]:
        """返回 ``post_type`` 下任一 ``(key, value)`` 元数据精确匹配的文章（逻辑 OR）。"""

    def get_post_meta(self, post_id: int, key: str, default: Any = None) -> Any: ...

    def update_post_meta(self, post_id: int, key: str, value: Any) -> None: ...

    def get_post_terms(self, post_id: int, taxonomy: str) -> list[str]: ...

    def get_image_attachments(self, post_id: int) -> list[Attachment]: ...

    def get_thumbnail(self, post_id: int) -> Attachment | None: ...

    def get_permalink(self, post_id: int) -> str: ...

    def get_user(self, user_id: int) -> User | None: ...

    def find_user_by_meta(self, key: str, value: Any) -> User | None: ...

    def get_user_meta(self, user_id: int, key: str, default: Any = None) -> Any: ...

    def update_user_meta(self, user_id: int, key: str, value: Any) -> None: ...

    def delete_user_meta(self, user_id: int, key: str) -> None: ...

    def get_author_posts_url(self, user_id: int) -> str: ...
