"""测试公共夹具：加载测试配置，提供内存存储与可观测的三元组存储替身。"""
from __future__ import annotations

from pathlib import Path

import pytest
from rdflib import Graph

from wl_sync.cms import InMemoryContentStore
from wl_sync.core.config import ConfigManager, Settings
from wl_sync.sync import SyncService

_CFG = Path(__file__).resolve().parent / "fixtures" / "config" / "testing.yaml"

DATASET_BASE = "http://data.redlink.io/acme/blog"


class RecordingClient:
    """记录每条更新语句，按预设结果返回。"""

    def __init__(self, result: bool = True) -> None:
        self.result = result
        self.queries: list[str] = []

    async def update(self, query: str, *, trace_id: str | None = None) -> bool:
        self.queries.append(query)
        return self.result


class GraphClient(RecordingClient):
    """将更新语句作用到 rdflib 内存图上，用于校验语句的真实效果。"""

    def __init__(self) -> None:
        super().__init__(True)
        self.graph = Graph()

    async def update(self, query: str, *, trace_id: str | None = None) -> bool:
        self.queries.append(query)
        self.graph.update(query)
        return True


@pytest.fixture()
def settings() -> Settings:
    return ConfigManager.load(override_path=str(_CFG), environ={}).settings


@pytest.fixture()
def store() -> InMemoryContentStore:
    return InMemoryContentStore(site_url="http://blog.example")


@pytest.fixture()
def client() -> RecordingClient:
    return RecordingClient()


@pytest.fixture()
def graph_client() -> GraphClient:
    return GraphClient()


@pytest.fixture()
def service(settings: Settings, store: InMemoryContentStore, client: RecordingClient) -> SyncService:
    return SyncService(settings, store, client)
