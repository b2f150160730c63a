"""统一异常与错误码定义。

库内部以异常表达失败，生命周期事件边界（``SyncService``）负责记录日志并
将其收敛为布尔值，保证远端同步失败不会阻断宿主的本地保存。"""
from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """平台错误码。"""

    TRIPLESTORE_CONNECT_ERROR = "TRIPLESTORE_CONNECT_ERROR"
    TRIPLESTORE_TIMEOUT = "TRIPLESTORE_TIMEOUT"
    TRIPLESTORE_UPDATE_ERROR = "TRIPLESTORE_UPDATE_ERROR"
    CONTENT_STORE_ERROR = "CONTENT_STORE_ERROR"
    ENTITY_URI_MISSING = "ENTITY_URI_MISSING"
    ENTITY_URI_COLLISION = "ENTITY_URI_COLLISION"


class PlatformError(Exception):
    """所有平台异常的基类，携带错误码与上下文。"""

    def __init__(self, code: ErrorCode, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"


class ExternalServiceError(PlatformError):
    """三元组存储等外部服务调用失败。"""


class ContentStoreError(PlatformError):
    """宿主 CMS 存储读写失败。"""

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.CONTENT_STORE_ERROR, message, details=details)


class EntityUriCollisionError(PlatformError):
    """不同来源 URI 推导出了同一个本地实体 URI。"""

    def __init__(self, local_uri: str, source_uri: str, owner_id: int) -> None:
        super().__init__(
            ErrorCode.ENTITY_URI_COLLISION,
            "本地实体 URI 已被其他实体占用",
            details={"localUri": local_uri, "sourceUri": source_uri, "ownerId": owner_id},
        )
        self.local_uri = local_uri
        self.source_uri = source_uri
        self.owner_id = owner_id
