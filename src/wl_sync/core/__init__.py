"""平台基础设施：配置、日志、异常与指标。"""
from .config import ConfigManager, Settings
from .exceptions import (
    ContentStoreError,
    EntityUriCollisionError,
    ErrorCode,
    ExternalServiceError,
    PlatformError,
)
from .logging import LoggerFactory

__all__ = [
    "ConfigManager",
    "Settings",
    "LoggerFactory",
    "ErrorCode",
    "PlatformError",
    "ExternalServiceError",
    "ContentStoreError",
    "EntityUriCollisionError",
]
