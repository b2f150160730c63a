"""Example: sync one post with an entity annotation to the configured Redlink dataset."""
from __future__ import annotations

import asyncio
import os
from datetime import datetime, timezone

from wl_sync import ConfigManager, InMemoryContentStore, LoggerFactory, SyncService


async def main() -> None:
    settings = ConfigManager.load(os.environ.get("WL_SYNC_CONFIG")).settings
    LoggerFactory.configure(settings.logging.level)

    store = InMemoryContentStore(site_url="http://blog.example")
    author = store.add_user(first_name="Jane", last_name="Doe", display_name="jdoe")
    post = store.add_post(
        title="A weekend in Berlin",
        content="Notes from the trip.",
        author_id=author.id,
        date_published=datetime.now(timezone.utc),
    )

    service = SyncService.from_settings(settings, store)
    ok = await service.on_save_post(
        post.id,
        [
            {
                "id": "http://dbpedia.org/resource/Berlin",
                "label": "Berlin",
                "type": "http://schema.org/Place",
                "description": "Capital of Germany",
            }
        ],
    )
    print("Post synced:", ok)
    print("Post URI:", service.resolver.post_uri(post.id))


if __name__ == "__main__":
    asyncio.run(main())
