"""生命周期事件到三元组存储的同步入口。

宿主在文章保存、用户注册、资料更新、用户删除时调用对应的处理函数。
每个处理函数在一次请求内执行完毕：解析实体、更新引用索引、构建全量替换
语句并等待远端返回。任何平台异常都在这里被记录并收敛为 ``False``，远端
失败不会阻断或回滚宿主的本地保存。"""
from __future__ import annotations

import functools
import logging
from datetime import timezone
from typing import Any, Awaitable, Callable, Iterable, Mapping, Optional, TypeVar, Union

from pydantic import ValidationError

from ..cms.store import ENTITY_TYPE_TAXONOMY, ContentStore, Post
from ..connection.client import RedlinkClient, TripleStoreClient
from ..core.config import Settings
from ..core.exceptions import ErrorCode, PlatformError
from ..core.logging import LoggerFactory
from ..entity.service import ENTITY_SAME_AS_KEY, EntityAnnotation, EntityService
from ..naming.resolver import UriResolver
from ..query.dsl import Triple
from ..query.namespaces import DCTERMS, OWL, RDF, RDFS, SCHEMA
from ..relation.index import RelationshipIndex
from ..transaction.audit import AuditLogger
from ..transaction.manager import ReconcileManager

POST_PREDICATES = [
    str(DCTERMS.references),
    str(SCHEMA.url),
    str(SCHEMA.datePublished),
    str(SCHEMA.dateModified),
    str(SCHEMA.author),
    str(RDF.type),
    str(RDFS.label),
    str(SCHEMA.image),
    str(SCHEMA.interactionCount),
]

AUTHOR_PREDICATES = [
    str(RDF.type),
    str(SCHEMA.name),
    str(SCHEMA.givenName),
    str(SCHEMA.familyName),
    str(SCHEMA.email),
    str(SCHEMA.description),
    str(SCHEMA.url),
]

ENTITY_PREDICATES = [
    str(RDFS.label),
    str(OWL.sameAs),
    str(SCHEMA.description),
    str(SCHEMA.url),
    str(RDF.type),
]

USER_PREDICATES = [
    str(SCHEMA.givenName),
    str(SCHEMA.familyName),
    str(SCHEMA.url),
]

AnnotationInput = Union[EntityAnnotation, Mapping[str, Any]]
_Handler = TypeVar("_Handler", bound=Callable[..., Awaitable[bool]])


def lifecycle_handler(func: _Handler) -> _Handler:
    """将处理函数中的异常记录为错误日志并返回 ``False``，异常不会传到宿主事件。"""

    @functools.wraps(func)
    async def wrapper(self: "SyncService", *args: Any, **kwargs: Any) -> bool:
        try:
            return await func(self, *args, **kwargs)
        except PlatformError as exc:
            self._logger.error("%s 处理失败: %s", func.__name__, exc, extra={"details": exc.details})
            return False
        except Exception as exc:  # noqa: BLE001
            self._logger.error("%s 处理异常: %s", func.__name__, exc, exc_info=True)
            return False

    return wrapper  # type: ignore[return-value]


class SyncService:
    """文章/实体/作者/用户同步触发器。"""

    def __init__(
        self,
        settings: Settings,
        store: ContentStore,
        client: TripleStoreClient,
        *,
        resolver: Optional[UriResolver] = None,
        manager: Optional[ReconcileManager] = None,
        index: Optional[RelationshipIndex] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._settings = settings
        self._store = store
        self._logger = logger or LoggerFactory.create_default_logger(__name__)
        self._resolver = resolver or UriResolver(settings, store, logger=self._logger)
        self._manager = manager or ReconcileManager(client, logger=self._logger)
        self._index = index or RelationshipIndex(store, logger=self._logger)
        self._entities = EntityService(
            store,
            self._resolver,
            push_entity=self.on_entity_saved,
            logger=self._logger,
        )

    @classmethod
    def from_settings(cls, settings: Settings, store: ContentStore) -> "SyncService":
        """按配置装配 Redlink 客户端与可选的审计记录器。"""

        client = RedlinkClient.from_settings(settings.redlink)
        audit_logger = None
        if settings.audit.enabled:
            audit_logger = AuditLogger(settings.audit.dsn, settings.audit.schema_name)
        manager = ReconcileManager(client, audit_logger=audit_logger)
        return cls(settings, store, client, manager=manager)

    @property
    def resolver(self) -> UriResolver:
        return self._resolver

    @property
    def entities(self) -> EntityService:
        return self._entities

    @property
    def index(self) -> RelationshipIndex:
        return self._index

    def bind(self, subscribe: Callable[[str, Callable[..., Awaitable[bool]]], None]) -> None:
        """通过宿主提供的 ``subscribe(event, handler)`` 注册全部生命周期处理函数。"""

        subscribe("save_post", self.on_save_post)
        subscribe("user_register", self.on_user_registered)
        subscribe("profile_update", self.on_profile_updated)
        subscribe("delete_user", self.on_user_deleted)

    # ---- 文章 -----------------------------------------------------

    @lifecycle_handler
    async def on_save_post(
        self,
        post_id: int,
        annotations: Iterable[AnnotationInput] = (),
        *,
        autosave: bool = False,
    ) -> bool:
        """宿主 ``save_post`` 事件入口：跳过自动保存与修订版本，实体额外触发实体同步。"""

        if autosave:
            self._logger.debug("忽略自动保存 [post id :: %s]", post_id)
            return False
        post = self._store.get_post(post_id)
        if post is None:
            self._logger.warning("文章不存在 [post id :: %s]", post_id)
            return False
        if post.is_revision:
            self._logger.debug("忽略修订版本 [post id :: %s]", post_id)
            return False

        ok = True
        if post.is_entity:
            ok = await self.on_entity_saved(post_id)
        return await self.on_post_saved(post_id, annotations) and ok

    @lifecycle_handler
    async def on_post_saved(self, post_id: int, annotations: Iterable[AnnotationInput] = ()) -> bool:
        """同步文章本身及其引用的实体。"""

        post = self._store.get_post(post_id)
        if post is None:
            self._logger.warning("文章不存在 [post id :: %s]", post_id)
            return False

        author_uri = await self.sync_author(post.author_id)
        post_uri = self._resolver.post_uri(post.id)

        entity_ids: list[int] = []
        for annotation in annotations:
            for entity in await self._resolve_annotation(annotation):
                if entity.id not in entity_ids:
                    entity_ids.append(entity.id)
        self._index.update(post.id, entity_ids)

        date_published = post.date_published.isoformat(timespec="seconds")
        date_modified = post.date_modified.astimezone(timezone.utc).isoformat(timespec="seconds")
        triples = [
            Triple.literal(post_uri, str(RDFS.label), post.title),
            Triple.uri(post_uri, str(RDF.type), str(SCHEMA.BlogPosting)),
            Triple.uri(post_uri, str(SCHEMA.url), self._store.get_permalink(post.id)),
            Triple.literal(post_uri, str(SCHEMA.datePublished), date_published),
            Triple.literal(post_uri, str(SCHEMA.dateModified), date_modified),
            Triple.uri(post_uri, str(SCHEMA.author), author_uri),
            Triple.literal(post_uri, str(SCHEMA.interactionCount), f"UserComments:{post.comment_count}"),
        ]
        for image in self._store.get_image_attachments(post.id):
            triples.append(Triple.uri(post_uri, str(SCHEMA.image), image.url))
        for entity_id in entity_ids:
            entity_uri = self._entities.entity_url(entity_id)
            if entity_uri:
                triples.append(Triple.uri(post_uri, str(DCTERMS.references), entity_uri))

        return await self._manager.reconcile(post_uri, POST_PREDICATES, triples, op_type="post.sync")

    async def sync_author(self, author_id: int) -> str:
        """同步作者信息并返回作者 URI，远端失败不影响返回值。"""

        author_uri = self._resolver.author_uri(author_id)
        triples = [Triple.uri(author_uri, str(RDF.type), str(SCHEMA.Person))]
        user = self._store.get_user(author_id)
        if user is not None:
            for predicate, value in (
                (SCHEMA.name, user.display_name),
                (SCHEMA.givenName, user.first_name),
                (SCHEMA.familyName, user.last_name),
                (SCHEMA.email, user.email),
                (SCHEMA.description, user.description),
            ):
                if value:
                    triples.append(Triple.literal(author_uri, str(predicate), value))
            posts_url = self._store.get_author_posts_url(author_id)
            if posts_url:
                triples.append(Triple.uri(author_uri, str(SCHEMA.url), posts_url))

        await self._manager.reconcile(author_uri, AUTHOR_PREDICATES, triples, op_type="author.sync")
        return author_uri

    # ---- 实体 -----------------------------------------------------

    @lifecycle_handler
    async def on_entity_saved(self, entity_id: int) -> bool:
        """同步实体的标签、别名、描述、链接、类型以及与其他实体的双向关系。"""

        post = self._store.get_post(entity_id)
        if post is None:
            self._logger.warning("实体不存在 [entity id :: %s]", entity_id)
            return False

        uri = self._entities.entity_url(entity_id)
        if not uri:
            self._logger.error(
                "实体缺少 URI，跳过同步 [entity id :: %s]",
                entity_id,
                extra={"error_code": ErrorCode.ENTITY_URI_MISSING.value},
            )
            return False

        triples: list[Triple] = []
        same_as = self._store.get_post_meta(entity_id, ENTITY_SAME_AS_KEY) or ""
        for alias in same_as.split("\r\n"):
            if alias:
                triples.append(Triple.uri(uri, str(OWL.sameAs), alias))
        triples.append(Triple.literal(uri, str(RDFS.label), post.title))
        triples.append(Triple.uri(uri, str(SCHEMA.url), self._store.get_permalink(entity_id)))
        if post.content:
            triples.append(Triple.literal(uri, str(SCHEMA.description), post.content))
        for type_name in self._store.get_post_terms(entity_id, ENTITY_TYPE_TAXONOMY):
            triples.append(Triple.uri(uri, str(RDF.type), str(SCHEMA[type_name])))
        for related_id in self._index.related_entity_ids(entity_id):
            related_uri = self._entities.entity_url(related_id)
            if not related_uri:
                continue
            triples.append(Triple.uri(uri, str(DCTERMS.relation), related_uri))
            triples.append(Triple.uri(related_uri, str(DCTERMS.relation), uri))

        return await self._manager.reconcile(uri, ENTITY_PREDICATES, triples, op_type="entity.sync")

    async def _resolve_annotation(self, annotation: AnnotationInput) -> list[Post]:
        """解析单个标注；失败时记录日志并返回空列表，不影响同一文章的其他标注。"""

        if not isinstance(annotation, EntityAnnotation):
            try:
                annotation = EntityAnnotation.model_validate(annotation)
            except ValidationError as exc:
                self._logger.error("忽略格式错误的实体标注: %s", exc)
                return []
        try:
            return await self._entities.save_entity_post(
                annotation.id,
                annotation.label,
                annotation.type,
                annotation.description,
            )
        except PlatformError as exc:
            self._logger.error("实体解析失败 [uri :: %s]: %s", annotation.id, exc, extra={"details": exc.details})
            return []

    # ---- 用户 -----------------------------------------------------

    @lifecycle_handler
    async def on_user_registered(self, user_id: int) -> bool:
        return await self.on_profile_updated(user_id)

    @lifecycle_handler
    async def on_profile_updated(self, user_id: int) -> bool:
        """同步用户的名、姓（站点语言的本地化字面量）与文章列表链接。"""

        user = self._store.get_user(user_id)
        if user is None:
            self._logger.warning("用户不存在 [user id :: %s]", user_id)
            return False
        uri = self._resolver.get_user_uri(user_id)
        if uri is None:
            return False

        language = self._settings.app.site_language
        triples = [
            Triple.localized(uri, str(SCHEMA.givenName), user.first_name, language),
            Triple.localized(uri, str(SCHEMA.familyName), user.last_name, language),
            Triple.uri(uri, str(SCHEMA.url), self._store.get_author_posts_url(user_id)),
        ]
        return await self._manager.reconcile(uri, USER_PREDICATES, triples, op_type="user.sync")

    @lifecycle_handler
    async def on_user_deleted(self, user_id: int) -> bool:
        """从远端移除用户 URI 作为主语或宾语的所有三元组。"""

        uri = self._resolver.get_user_uri(user_id)
        if uri is None:
            self._logger.warning("无法解析待删除用户的 URI [user id :: %s]", user_id)
            return False
        return await self._manager.purge(uri, op_type="user.delete")
