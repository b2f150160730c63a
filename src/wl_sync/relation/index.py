"""文章与实体之间的双向引用索引。

索引冗余地保存在两端的元数据中：文章的 ``wordlift_related_entities`` 列出
它引用的实体，实体的 ``wordlift_related_posts`` 列出引用它的文章。每次保存
文章时整体重算，而不是逐条增量维护。"""
from __future__ import annotations

import logging
from typing import Iterable

from ..cms.store import ContentStore
from ..core.logging import LoggerFactory

RELATED_ENTITIES_KEY = "wordlift_related_entities"
RELATED_POSTS_KEY = "wordlift_related_posts"


def _as_id_list(value: object) -> list[int]:
    """读取 ID 列表，忽略无法解析为整数的条目。"""

    if not isinstance(value, (list, tuple)):
        return []
    ids: list[int] = []
    for item in value:
        if isinstance(item, bool):
            continue
        if isinstance(item, int):
            ids.append(item)
        elif isinstance(item, str) and item.strip().isdigit():
            ids.append(int(item))
    return ids


class RelationshipIndex:
    """维护文章 ↔ 实体引用列表。

    更新过程不是事务性的：中途失败会留下部分更新的索引。更新内部没有
    ``await``，因此同一事件循环里的并发协程不会交错执行；跨进程的并发
    保存仍可能互相覆盖。"""

    def __init__(self, store: ContentStore, *, logger: logging.Logger | None = None) -> None:
        self._store = store
        self._logger = logger or LoggerFactory.create_default_logger(__name__)

    def related_entity_ids(self, post_id: int) -> list[int]:
        return _as_id_list(self._store.get_post_meta(post_id, RELATED_ENTITIES_KEY))

    def related_post_ids(self, entity_id: int) -> list[int]:
        return _as_id_list(self._store.get_post_meta(entity_id, RELATED_POSTS_KEY))

    def update(self, post_id: int, entity_ids: Iterable[int]) -> list[int]:
        """以 ``entity_ids`` 替换文章的引用集合并同步反向列表，返回去重后的集合。"""

        new_ids = list(dict.fromkeys(int(entity_id) for entity_id in entity_ids))

        for entity_id in self.related_entity_ids(post_id):
            related = [pid for pid in self.related_post_ids(entity_id) if pid != post_id]
            self._store.update_post_meta(entity_id, RELATED_POSTS_KEY, related)

        self._store.update_post_meta(post_id, RELATED_ENTITIES_KEY, new_ids)
        self._logger.debug("更新文章引用 [post id :: %s][entities :: %s]", post_id, new_ids)

        for entity_id in new_ids:
            related = self.related_post_ids(entity_id)
            if post_id not in related:
                related.append(post_id)
            self._store.update_post_meta(entity_id, RELATED_POSTS_KEY, related)

        return new_ids
