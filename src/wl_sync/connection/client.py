"""Redlink 三元组存储 HTTP 客户端封装。

提供 `TripleStoreClient` 协议与 `RedlinkClient` 实现。客户端只负责一件事：
把完整的 SPARQL Update 文本 POST 到数据集的 ``/sparql/update`` 端点。

* 请求级超时（默认 45 秒）与重定向上限（默认 5 次）；
* 失败/成功指标上报；
* 可选 trace id 透传；
* 不做重试：网络错误、超时、非 200 状态统一收敛为 ``False``。"""
from __future__ import annotations

import logging
import time
from typing import Protocol

import httpx

from ..core.config import RedlinkConfig
from ..core.exceptions import ErrorCode, ExternalServiceError
from ..core.logging import LoggerFactory
from ..core.observability import observe_triplestore_failure, observe_triplestore_response


class TripleStoreClient(Protocol):
    """三元组存储客户端最小协议。"""

    async def update(self, query: str, *, trace_id: str | None = None) -> bool:
        """执行 SPARQL UPDATE，仅当远端返回 200 时为 ``True``。"""


class RedlinkClient:
    """与 Redlink ``/data/{dataset}/sparql/update`` 接口交互的 HTTP 客户端。"""

    CONTENT_TYPE = "application/sparql-update; charset=utf-8"

    def __init__(
        self,
        *,
        dataset_id: str,
        application_key: str,
        api_host: str = "api.redlink.io",
        api_version: str = "1.0-ALPHA",
        timeout: float = 45.0,
        max_redirects: int = 5,
        verify_tls: bool = True,
        trace_header: str = "X-Trace-Id",
        logger: logging.Logger | None = None,
    ) -> None:
        """构造客户端。

        参数：
            dataset_id：目标数据集，例如 ``"wordlift"``。
            application_key：应用密钥，作为 ``key`` 查询参数发送，日志中会被遮蔽。
            api_host：API 主机名，默认 ``"api.redlink.io"``。
            api_version：API 版本段，默认 ``"1.0-ALPHA"``。
            timeout：单次请求超时（秒）。
            max_redirects：最多跟随的重定向次数。
            verify_tls：是否校验服务端证书，默认开启。
            trace_header：携带 ``trace_id`` 的请求头名称。
            logger：可注入的 logger，缺省由 :class:`LoggerFactory` 创建。"""

        self.dataset_id = dataset_id
        self.api_host = api_host.strip("/")
        self.api_version = api_version.strip("/")
        self.trace_header = trace_header
        self._application_key = application_key
        self._timeout = timeout
        self._max_redirects = max_redirects
        self._verify_tls = verify_tls
        self._logger = logger or LoggerFactory.create_default_logger(__name__)

    @classmethod
    def from_settings(cls, config: RedlinkConfig, *, logger: logging.Logger | None = None) -> "RedlinkClient":
        """依据 :class:`RedlinkConfig` 创建客户端。"""

        return cls(
            dataset_id=config.dataset_id,
            application_key=config.application_key,
            api_host=config.api_host,
            api_version=config.api_version,
            timeout=config.timeout,
            max_redirects=config.max_redirects,
            verify_tls=config.verify_tls,
            trace_header=config.trace_header,
            logger=logger,
        )

    @property
    def endpoint(self) -> str:
        """不含密钥的更新端点地址。"""

        return f"https://{self.api_host}/{self.api_version}/data/{self.dataset_id}/sparql/update"

    async def update(self, query: str, *, trace_id: str | None = None) -> bool:
        """提交 SPARQL Update，成功（HTTP 200）返回 ``True``，其余情况记录日志并返回 ``False``。"""

        try:
            status_code, duration_ms = await self._execute(query, trace_id=trace_id)
        except ExternalServiceError as exc:
            self._logger.error(
                "三元组存储更新失败: %s",
                exc,
                extra={"trace_id": trace_id, "endpoint": self.endpoint, "details": exc.details},
            )
            self._logger.debug("失败的查询:\n%s", query)
            return False

        self._logger.info(
            "三元组存储更新完成 [status :: %s][durationMs :: %.1f]",
            status_code,
            duration_ms,
            extra={"trace_id": trace_id},
        )
        return True

    # ---- 内部工具 -----------------------------------------------------

    async def _execute(self, query: str, *, trace_id: str | None) -> tuple[int, float]:
        """执行一次 POST；非 200 或传输异常抛出 :class:`ExternalServiceError`。

        返回：二元组 ``(status_code, duration_ms)``。"""

        operation = "update"
        headers = {"Content-Type": self.CONTENT_TYPE}
        if trace_id:
            headers[self.trace_header] = trace_id
        url = str(httpx.URL(self.endpoint, params={"key": self._application_key}))

        self._logger.debug("POST %s\n%s", self.endpoint, query, extra={"trace_id": trace_id})
        start = time.perf_counter()
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                verify=self._verify_tls,
                follow_redirects=self._max_redirects > 0,
                max_redirects=self._max_redirects,
            ) as client:
                response = await client.post(url, content=query.encode("utf-8"), headers=headers)
        except httpx.TimeoutException as exc:
            observe_triplestore_failure(operation, "timeout")
            raise ExternalServiceError(
                ErrorCode.TRIPLESTORE_TIMEOUT,
                "三元组存储请求超时",
                details={"endpoint": self.endpoint, "error": str(exc)},
            ) from exc
        except httpx.HTTPError as exc:
            reason = self._exception_reason(exc)
            observe_triplestore_failure(operation, reason)
            raise ExternalServiceError(
                ErrorCode.TRIPLESTORE_CONNECT_ERROR,
                "三元组存储连接失败",
                details={"endpoint": self.endpoint, "error": str(exc), "reason": reason},
            ) from exc

        duration_ms = (time.perf_counter() - start) * 1000
        status_code = response.status_code
        observe_triplestore_response(operation, status_code, duration_ms / 1000)
        if status_code != 200:
            reason = self._response_reason(status_code)
            observe_triplestore_failure(operation, reason)
            raise ExternalServiceError(
                ErrorCode.TRIPLESTORE_UPDATE_ERROR,
                "三元组存储拒绝更新",
                details={"status": status_code, "message": response.text[:1024], "reason": reason},
            )
        return status_code, duration_ms

    @staticmethod
    def _response_reason(status_code: int) -> str:
        """根据状态码映射统一的失败原因标签。"""

        if status_code >= 500:
            return "server_error"
        if status_code == 429:
            return "rate_limited"
        if status_code >= 400:
            return "client_error"
        return "unexpected_status"

    @staticmethod
    def _exception_reason(exc: Exception) -> str:
        if isinstance(exc, httpx.TooManyRedirects):
            return "too_many_redirects"
        if isinstance(exc, httpx.ConnectError):
            return "connect_error"
        return "transport_error"
