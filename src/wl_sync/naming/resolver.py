"""远端 URI 推导。

文章、作者、实体的 URI 都是配置与本地 ID 的纯函数；用户 URI 首次推导后
写入用户元数据 ``wl_uri`` 并在之后直接复用。"""
from __future__ import annotations

import logging
import uuid

from ..cms.store import ContentStore
from ..core.config import Settings
from ..core.logging import LoggerFactory
from ..utils import last_path_segment, sanitize_uri_path

USER_URI_META_KEY = "wl_uri"


class UriResolver:
    """依据数据集配置生成稳定的对外 URI。"""

    def __init__(self, settings: Settings, store: ContentStore, *, logger: logging.Logger | None = None) -> None:
        self._settings = settings
        self._store = store
        self._logger = logger or LoggerFactory.create_default_logger(__name__)

    @property
    def dataset_base_uri(self) -> str:
        return self._settings.redlink.dataset_base_uri

    def post_uri(self, post_id: int) -> str:
        return f"{self.dataset_base_uri}/post/{post_id}"

    def author_uri(self, author_id: int) -> str:
        return f"{self.dataset_base_uri}/author/{author_id}"

    def entity_uri(self, source_uri: str) -> str:
        """以来源 URI 的最后一段构造本地实体 URI，不检查命名冲突。"""

        return f"{self.dataset_base_uri}/resource/{last_path_segment(source_uri)}"

    def get_user_uri(self, user_id: int) -> str | None:
        """读取用户 URI，尚未设置时推导并保存；用户不存在返回 ``None``。"""

        uri = self._store.get_user_meta(user_id, USER_URI_META_KEY)
        if uri:
            return uri
        uri = self.build_user_uri(user_id)
        if uri is not None:
            self.set_user_uri(user_id, uri)
        return uri

    def set_user_uri(self, user_id: int, uri: str) -> None:
        self._logger.debug("设置用户 URI [user id :: %s][uri :: %s]", user_id, uri)
        self._store.delete_user_meta(user_id, USER_URI_META_KEY)
        self._store.update_user_meta(user_id, USER_URI_META_KEY, uri)

    def build_user_uri(self, user_id: int) -> str | None:
        """为用户推导一个未被占用的 URI。

        候选路径段取自 ``"名 姓"``，两者皆空时使用用户 ID。若候选已被其他用户
        占用，依次追加 ``_1``、``_2`` ...；探测次数达到
        ``naming.user_uri_max_attempts`` 后改用随机后缀。"""

        user = self._store.get_user(user_id)
        if user is None:
            self._logger.warning("推导用户 URI 失败：用户不存在 [user id :: %s]", user_id)
            return None

        if user.first_name or user.last_name:
            name = sanitize_uri_path(f"{user.first_name} {user.last_name}")
        else:
            name = str(user_id)

        base_uri = f"{self.dataset_base_uri}/user/{name}"
        uri = base_uri
        max_attempts = self._settings.naming.user_uri_max_attempts
        attempt = 0
        while self._store.find_user_by_meta(USER_URI_META_KEY, uri) is not None:
            attempt += 1
            if attempt > max_attempts:
                uri = f"{base_uri}_{uuid.uuid4().hex}"
                self._logger.warning(
                    "用户 URI 探测次数耗尽，改用随机后缀 [user id :: %s][uri :: %s]", user_id, uri
                )
                break
            uri = f"{base_uri}_{attempt}"

        self._logger.info("推导用户 URI [user id :: %s][uri :: %s]", user_id, uri)
        return uri
