"""配置模型与加载器。

配置来源优先级（后者覆盖前者）：

1. 模型内置默认值；
2. YAML 文件（``ConfigManager.load(override_path=...)``）；
3. 环境变量，形如 ``WL_SYNC__REDLINK__APPLICATION_KEY=xxx``，双下划线分隔层级。

核心组件只接收显式传入的 :class:`Settings`，不在内部读取全局状态；
``ConfigManager.current()`` 仅供装配层与测试使用。"""
from __future__ import annotations

import os
from pathlib import Path
from threading import Lock
from typing import Any, Mapping, Optional

import yaml
from pydantic import BaseModel, Field

ENV_PREFIX = "WL_SYNC__"


class AppConfig(BaseModel):
    env: str = "dev"
    site_language: str = "en"


class RedlinkConfig(BaseModel):
    """远端三元组存储与数据集命名配置。"""

    api_host: str = "api.redlink.io"
    api_version: str = "1.0-ALPHA"
    data_host: str = "http://data.redlink.io"
    user_id: str = ""
    dataset_id: str = ""
    application_key: str = ""
    timeout: float = Field(default=45.0, gt=0)
    max_redirects: int = Field(default=5, ge=0)
    verify_tls: bool = True
    trace_header: str = "X-Trace-Id"

    @property
    def dataset_base_uri(self) -> str:
        return f"{self.data_host.rstrip('/')}/{self.user_id}/{self.dataset_id}"


class NamingConfig(BaseModel):
    user_uri_max_attempts: int = Field(default=100, ge=1)


class LoggingConfig(BaseModel):
    level: str = "INFO"


class AuditConfig(BaseModel):
    enabled: bool = False
    dsn: str = ""
    schema_name: str = Field(default="public", alias="schema")

    model_config = {"populate_by_name": True}


class Settings(BaseModel):
    app: AppConfig = Field(default_factory=AppConfig)
    redlink: RedlinkConfig = Field(default_factory=RedlinkConfig)
    naming: NamingConfig = Field(default_factory=NamingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    audit: AuditConfig = Field(default_factory=AuditConfig)


class ConfigManager:
    """进程级配置持有者。"""

    _current: Optional["ConfigManager"] = None
    _lock = Lock()

    def __init__(self, settings: Settings, source: str | None = None) -> None:
        self.settings = settings
        self.source = source

    @classmethod
    def load(
        cls,
        override_path: str | None = None,
        *,
        environ: Mapping[str, str] | None = None,
    ) -> "ConfigManager":
        """加载配置并设为当前实例。

        参数：
            override_path：可选 YAML 文件路径，例如 ``"tests/fixtures/config/testing.yaml"``。
            environ：环境变量映射，缺省使用 ``os.environ``。

        异常：
            FileNotFoundError：``override_path`` 指向的文件不存在。
            pydantic.ValidationError：合并后的配置不合法。"""

        data: dict[str, Any] = {}
        if override_path:
            path = Path(override_path)
            with path.open("r", encoding="utf-8") as handle:
                loaded = yaml.safe_load(handle) or {}
            if not isinstance(loaded, dict):
                raise ValueError(f"配置文件顶层必须是映射: {override_path}")
            data = loaded
        _apply_env_overrides(data, os.environ if environ is None else environ)
        manager = cls(Settings.model_validate(data), source=override_path)
        with cls._lock:
            cls._current = manager
        return manager

    @classmethod
    def current(cls) -> "ConfigManager":
        """返回当前配置，尚未加载时使用默认值加载。"""

        with cls._lock:
            manager = cls._current
        if manager is None:
            manager = cls.load()
        return manager

    @classmethod
    def reset(cls) -> None:
        with cls._lock:
            cls._current = None


def _apply_env_overrides(data: dict[str, Any], environ: Mapping[str, str]) -> None:
    """将 ``WL_SYNC__A__B`` 形式的环境变量写入嵌套字典。"""

    for key, value in environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        path = [part.lower() for part in key[len(ENV_PREFIX):].split("__") if part]
        if not path:
            continue
        node = data
        for part in path[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[path[-1]] = value
