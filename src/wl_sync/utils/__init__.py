"""URI 片段相关的通用工具方法。"""
from __future__ import annotations

import re

_RESERVED = re.compile(r"[;/?:@&=+$,\s]")


def sanitize_uri_path(path: str, char: str = "_") -> str:
    """将 URI 保留字符与空白替换为 ``char``，用于拼接路径段。

    例如 ``"John Doe"`` 转为 ``"John_Doe"``，``"a/b?c"`` 转为 ``"a_b_c"``。"""

    return _RESERVED.sub(char, path)


def last_path_segment(uri: str) -> str:
    """返回 URI 的最后一个路径段，忽略末尾的 ``/``。"""

    return uri.rstrip("/").rsplit("/", 1)[-1]
