"""日志工厂。"""
from __future__ import annotations

import logging
import sys
from threading import Lock

_DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class LoggerFactory:
    """集中创建带统一格式的 ``logging.Logger``。

    组件均允许注入自定义 logger，未注入时通过本工厂获取；测试中可直接使用
    pytest 的 ``caplog`` 断言日志内容。"""

    _configured = False
    _lock = Lock()
    _level = logging.INFO

    @classmethod
    def configure(cls, level: str | int = "INFO", fmt: str = _DEFAULT_FORMAT) -> None:
        """为 ``wl_sync`` 根 logger 安装处理器，可重复调用以调整级别。"""

        with cls._lock:
            root = logging.getLogger("wl_sync")
            cls._level = logging.getLevelName(level) if isinstance(level, str) else level
            root.setLevel(cls._level)
            if not cls._configured:
                handler = logging.StreamHandler(sys.stderr)
                handler.setFormatter(logging.Formatter(fmt))
                root.addHandler(handler)
                cls._configured = True

    @classmethod
    def create_default_logger(cls, name: str) -> logging.Logger:
        """返回指定名称的 logger，首次调用时完成默认配置。"""

        if not cls._configured:
            cls.configure(cls._level)
        return logging.getLogger(name)
