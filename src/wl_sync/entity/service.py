"""实体解析与创建。

文章提交的每个实体标注都会按来源 URI 查找本地实体记录：命中 ``entity_url``
或 ``entity_same_as`` 即复用，否则以草稿状态新建并立即推送到三元组存储。"""
from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

from pydantic import BaseModel

from ..cms.store import ENTITY_POST_TYPE, ENTITY_TYPE_TAXONOMY, ContentStore, Post
from ..core.exceptions import EntityUriCollisionError
from ..core.logging import LoggerFactory
from ..naming.resolver import UriResolver
from ..utils import last_path_segment

ENTITY_URL_KEY = "entity_url"
ENTITY_SAME_AS_KEY = "entity_same_as"

EntityPushCallback = Callable[[int], Awaitable[bool]]


class EntityAnnotation(BaseModel):
    """编辑器随文章一起提交的实体标注。"""

    id: str
    label: str
    type: str | None = None
    description: str = ""


class EntityService:
    """实体记录的查找与创建。

    唯一性依赖"先查后建"，没有存储层约束；并发保存同一新实体时可能产生
    重复记录。"""

    def __init__(
        self,
        store: ContentStore,
        resolver: UriResolver,
        *,
        push_entity: Optional[EntityPushCallback] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """参数：
            store：宿主存储。
            resolver：URI 推导器，用于生成本地实体 URI。
            push_entity：新建实体后调用的回调，通常是 ``SyncService.on_entity_saved``。
            logger：可注入的 logger。"""

        self._store = store
        self._resolver = resolver
        self._push_entity = push_entity
        self._logger = logger or LoggerFactory.create_default_logger(__name__)

    def find_by_uri(self, uri: str) -> list[Post]:
        """返回 ``entity_url`` 或 ``entity_same_as`` 等于 ``uri`` 的全部实体。"""

        return self._store.find_posts_by_meta(
            post_type=ENTITY_POST_TYPE,
            any_of=[(ENTITY_URL_KEY, uri), (ENTITY_SAME_AS_KEY, uri)],
        )

    def entity_url(self, entity_id: int) -> str | None:
        return self._store.get_post_meta(entity_id, ENTITY_URL_KEY) or None

    async def save_entity_post(
        self,
        uri: str,
        label: str,
        type_uri: str | None = None,
        description: str = "",
    ) -> list[Post]:
        """查找或创建实体，返回匹配的全部实体记录。

        已存在时原样返回所有匹配（可能多于一个）；否则新建一条并推送远端。

        异常：
            EntityUriCollisionError：推导出的本地 URI 已属于另一个实体。
            ContentStoreError：宿主存储创建记录失败。"""

        existing = self.find_by_uri(uri)
        if existing:
            if len(existing) > 1:
                self._logger.warning(
                    "来源 URI 命中多个实体 [uri :: %s][ids :: %s]", uri, [post.id for post in existing]
                )
            return existing

        local_uri = self._resolver.entity_uri(uri)
        owners = self._store.find_posts_by_meta(post_type=ENTITY_POST_TYPE, any_of=[(ENTITY_URL_KEY, local_uri)])
        if owners:
            raise EntityUriCollisionError(local_uri, uri, owners[0].id)

        terms = None
        if type_uri:
            terms = {ENTITY_TYPE_TAXONOMY: [last_path_segment(type_uri)]}

        post_id = self._store.insert_post(
            post_type=ENTITY_POST_TYPE,
            status="draft",
            title=label,
            content=description,
            terms=terms,
        )
        self._logger.info("创建实体 [id :: %s][uri :: %s][local uri :: %s]", post_id, uri, local_uri)

        self._store.update_post_meta(post_id, ENTITY_URL_KEY, local_uri)
        if local_uri != uri:
            self._store.update_post_meta(post_id, ENTITY_SAME_AS_KEY, uri)

        if self._push_entity is not None:
            await self._push_entity(post_id)

        post = self._store.get_post(post_id)
        return [post] if post is not None else []
