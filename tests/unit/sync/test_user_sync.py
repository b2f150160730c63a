"""用户注册、资料更新与删除的同步测试。"""
from __future__ import annotations

import pytest
from rdflib import Literal, URIRef

from wl_sync.cms import InMemoryContentStore
from wl_sync.core.config import ConfigManager, Settings
from wl_sync.query.namespaces import SCHEMA
from wl_sync.sync import SyncService

BASE = "http://data.redlink.io/acme/blog"


@pytest.fixture()
def graph_service(settings: Settings, store: InMemoryContentStore, graph_client) -> SyncService:
    return SyncService(settings, store, graph_client)


@pytest.mark.asyncio
async def test_register_writes_localized_names(
    graph_service: SyncService, graph_client, store: InMemoryContentStore
) -> None:
    user = store.add_user(first_name="Jane", last_name="Doe")

    assert await graph_service.on_user_registered(user.id) is True

    g = graph_client.graph
    subject = URIRef(f"{BASE}/user/Jane_Doe")
    assert g.value(subject, SCHEMA.givenName) == Literal("Jane", lang="en")
    assert g.value(subject, SCHEMA.familyName) == Literal("Doe", lang="en")
    assert g.value(subject, SCHEMA.url) == URIRef(f"http://blog.example/?author={user.id}")


@pytest.mark.asyncio
async def test_profile_update_replaces_names_and_keeps_uri(
    graph_service: SyncService, graph_client, store: InMemoryContentStore
) -> None:
    user = store.add_user(first_name="Jane", last_name="Doe")
    await graph_service.on_user_registered(user.id)

    user.first_name = "Janet"
    await graph_service.on_profile_updated(user.id)

    subject = URIRef(f"{BASE}/user/Jane_Doe")
    assert set(graph_client.graph.objects(subject, SCHEMA.givenName)) == {Literal("Janet", lang="en")}


@pytest.mark.asyncio
async def test_site_language_tags_names(store: InMemoryContentStore, client) -> None:
    settings = ConfigManager.load(environ={"WL_SYNC__APP__SITE_LANGUAGE": "de"}).settings
    user = store.add_user(first_name="Jürgen", last_name="Müller")

    await SyncService(settings, store, client).on_profile_updated(user.id)

    assert '"Jürgen"@de' in client.queries[-1]


@pytest.mark.asyncio
async def test_delete_purges_user(
    graph_service: SyncService, graph_client, store: InMemoryContentStore
) -> None:
    user = store.add_user(first_name="Jane", last_name="Doe")
    await graph_service.on_user_registered(user.id)
    subject = URIRef(f"{BASE}/user/Jane_Doe")
    post = URIRef(f"{BASE}/post/1")
    graph_client.graph.add((post, SCHEMA.author, subject))

    assert await graph_service.on_user_deleted(user.id) is True

    assert (subject, None, None) not in graph_client.graph
    assert (None, None, subject) not in graph_client.graph


@pytest.mark.asyncio
async def test_unknown_user(service: SyncService, client) -> None:
    assert await service.on_user_registered(404) is False
    assert await service.on_user_deleted(404) is False
    assert client.queries == []


@pytest.mark.asyncio
async def test_invalid_triple_is_reported_as_failure(store: InMemoryContentStore, client) -> None:
    """站点语言为空时无法构造本地化字面量，处理函数返回 False 而不抛出。"""

    settings = ConfigManager.load(environ={"WL_SYNC__APP__SITE_LANGUAGE": ""}).settings
    user = store.add_user(first_name="Jane", last_name="Doe")

    assert await SyncService(settings, store, client).on_profile_updated(user.id) is False
    assert client.queries == []
