from __future__ import annotations

"""RedlinkClient 单元测试（以 monkeypatch 替换 httpx.AsyncClient）。

覆盖点：
- 端点、密钥参数与请求头
- 非 200 / 连接错误 / 超时统一返回 False，且不重试
- 超时、重定向、证书校验参数透传
- 失败指标上报
"""

from collections import deque

import httpx
import pytest
from prometheus_client import REGISTRY

from wl_sync.connection.client import RedlinkClient

QUERY = 'INSERT DATA { <http://example.org/s> <http://schema.org/name> "名字" . }'


@pytest.fixture()
def client() -> RedlinkClient:
    return RedlinkClient(dataset_id="blog", application_key="test-key")


class _StubAsyncClient:
    """httpx.AsyncClient 的桩，用队列模拟状态码或异常。"""

    def __init__(self, responses: deque | None = None, exc: Exception | None = None) -> None:
        self._responses = responses if responses is not None else deque()
        self._exc = exc
        self.calls: list[tuple[str, bytes, dict[str, str]]] = []

    async def __aenter__(self) -> "_StubAsyncClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def post(self, url: str, *, content: bytes, headers: dict[str, str]) -> httpx.Response:
        self.calls.append((url, content, headers))
        request = httpx.Request("POST", url)
        if self._exc is not None:
            raise self._exc
        if not self._responses:
            raise AssertionError("no stub response configured")
        status, text = self._responses.popleft()
        return httpx.Response(status, text=text, request=request)


class _Factory:
    """记录 AsyncClient 构造参数并返回同一个桩实例。"""

    def __init__(self, stub: _StubAsyncClient) -> None:
        self.stub = stub
        self.kwargs: list[dict] = []

    def __call__(self, *args, **kwargs) -> _StubAsyncClient:
        self.kwargs.append(kwargs)
        return self.stub


def _install(monkeypatch: pytest.MonkeyPatch, stub: _StubAsyncClient) -> _Factory:
    factory = _Factory(stub)
    monkeypatch.setattr("wl_sync.connection.client.httpx.AsyncClient", factory)
    return factory


def _failures(reason: str) -> float:
    value = REGISTRY.get_sample_value(
        "wl_sync_triplestore_failures_total", {"operation": "update", "reason": reason}
    )
    return value or 0.0


@pytest.mark.asyncio
async def test_update_posts_query_to_dataset_endpoint(client: RedlinkClient, monkeypatch: pytest.MonkeyPatch) -> None:
    stub = _StubAsyncClient(deque([(200, "")]))
    _install(monkeypatch, stub)

    assert await client.update(QUERY, trace_id="trace-1") is True

    url, content, headers = stub.calls[0]
    assert url.startswith("https://api.redlink.io/1.0-ALPHA/data/blog/sparql/update")
    assert "key=test-key" in url
    assert content == QUERY.encode("utf-8")
    assert headers["Content-Type"] == "application/sparql-update; charset=utf-8"
    assert headers["X-Trace-Id"] == "trace-1"


@pytest.mark.asyncio
async def test_trace_header_omitted_without_trace_id(client: RedlinkClient, monkeypatch: pytest.MonkeyPatch) -> None:
    stub = _StubAsyncClient(deque([(200, "")]))
    _install(monkeypatch, stub)

    await client.update(QUERY)

    assert "X-Trace-Id" not in stub.calls[0][2]


@pytest.mark.asyncio
async def test_transport_options_forwarded(client: RedlinkClient, monkeypatch: pytest.MonkeyPatch) -> None:
    factory = _install(monkeypatch, _StubAsyncClient(deque([(200, "")])))

    await client.update(QUERY)

    kwargs = factory.kwargs[0]
    assert kwargs["verify"] is True
    assert kwargs["max_redirects"] == 5
    assert kwargs["follow_redirects"] is True
    assert kwargs["timeout"].read == 45.0


@pytest.mark.asyncio
async def test_non_200_returns_false_without_retry(client: RedlinkClient, monkeypatch: pytest.MonkeyPatch) -> None:
    """500 只请求一次并返回 False，同时记录失败指标。"""

    stub = _StubAsyncClient(deque([(500, "boom"), (200, "")]))
    _install(monkeypatch, stub)
    before = _failures("server_error")

    assert await client.update(QUERY) is False

    assert len(stub.calls) == 1
    assert _failures("server_error") == before + 1


@pytest.mark.asyncio
async def test_created_status_is_not_success(client: RedlinkClient, monkeypatch: pytest.MonkeyPatch) -> None:
    """只有 200 视为成功。"""

    _install(monkeypatch, _StubAsyncClient(deque([(204, "")])))

    assert await client.update(QUERY) is False


@pytest.mark.asyncio
async def test_connect_error_returns_false(client: RedlinkClient, monkeypatch: pytest.MonkeyPatch) -> None:
    stub = _StubAsyncClient(exc=httpx.ConnectError("refused"))
    _install(monkeypatch, stub)
    before = _failures("connect_error")

    assert await client.update(QUERY) is False

    assert len(stub.calls) == 1
    assert _failures("connect_error") == before + 1


@pytest.mark.asyncio
async def test_timeout_returns_false(client: RedlinkClient, monkeypatch: pytest.MonkeyPatch) -> None:
    stub = _StubAsyncClient(exc=httpx.ReadTimeout("slow"))
    _install(monkeypatch, stub)
    before = _failures("timeout")

    assert await client.update(QUERY) is False

    assert _failures("timeout") == before + 1


def test_from_settings_and_key_not_in_endpoint(settings) -> None:
    client = RedlinkClient.from_settings(settings.redlink)

    assert client.endpoint == "https://api.redlink.io/1.0-ALPHA/data/blog/sparql/update"
    assert "test-key" not in client.endpoint
