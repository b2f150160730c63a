"""RelationshipIndex 双向引用维护测试。"""
from __future__ import annotations

import random

import pytest

from wl_sync.cms import InMemoryContentStore
from wl_sync.relation import RELATED_ENTITIES_KEY, RELATED_POSTS_KEY, RelationshipIndex


@pytest.fixture()
def index(store: InMemoryContentStore) -> RelationshipIndex:
    return RelationshipIndex(store)


def _entities(store: InMemoryContentStore, n: int) -> list[int]:
    return [store.add_post(title=f"E{i}", post_type="entity").id for i in range(n)]


def test_update_sets_both_directions(index: RelationshipIndex, store: InMemoryContentStore) -> None:
    post = store.add_post(title="P")
    e1, e2 = _entities(store, 2)

    assert index.update(post.id, [e1, e2, e1]) == [e1, e2]

    assert store.get_post_meta(post.id, RELATED_ENTITIES_KEY) == [e1, e2]
    assert index.related_post_ids(e1) == [post.id]
    assert index.related_post_ids(e2) == [post.id]


def test_resave_removes_stale_and_does_not_duplicate(index: RelationshipIndex, store: InMemoryContentStore) -> None:
    post = store.add_post(title="P")
    e1, e2, e3 = _entities(store, 3)

    index.update(post.id, [e1, e2])
    index.update(post.id, [e2, e3])
    index.update(post.id, [e2, e3])

    assert index.related_entity_ids(post.id) == [e2, e3]
    assert index.related_post_ids(e1) == []
    assert index.related_post_ids(e2) == [post.id]
    assert index.related_post_ids(e3) == [post.id]


def test_other_posts_are_preserved(index: RelationshipIndex, store: InMemoryContentStore) -> None:
    p1, p2 = store.add_post(title="P1"), store.add_post(title="P2")
    (entity,) = _entities(store, 1)

    index.update(p1.id, [entity])
    index.update(p2.id, [entity])
    index.update(p1.id, [])

    assert index.related_post_ids(entity) == [p2.id]


def test_corrupt_meta_reads_as_empty(index: RelationshipIndex, store: InMemoryContentStore) -> None:
    post = store.add_post(title="P")
    store.update_post_meta(post.id, RELATED_ENTITIES_KEY, "not-a-list")

    assert index.related_entity_ids(post.id) == []


def test_reverse_lists_match_forward_lists_after_random_saves(
    index: RelationshipIndex, store: InMemoryContentStore
) -> None:
    """任意保存序列之后，反向列表与所有文章的当前引用集合一致且无重复。"""

    rng = random.Random(1234)
    posts = [store.add_post(title=f"P{i}").id for i in range(5)]
    entities = _entities(store, 6)

    for _ in range(60):
        post_id = rng.choice(posts)
        chosen = [rng.choice(entities) for _ in range(rng.randint(0, 4))]
        index.update(post_id, chosen)

    for entity_id in entities:
        reverse = store.get_post_meta(entity_id, RELATED_POSTS_KEY) or []
        expected = {pid for pid in posts if entity_id in index.related_entity_ids(pid)}
        assert len(reverse) == len(set(reverse))
        assert set(reverse) == expected


def test_unparseable_ids_are_ignored(index: RelationshipIndex, store: InMemoryContentStore) -> None:
    (entity,) = _entities(store, 1)
    store.update_post_meta(entity, RELATED_POSTS_KEY, [3, "4", "", "abc", None, True])

    assert index.related_post_ids(entity) == [3, 4]
