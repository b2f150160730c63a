from .memory import InMemoryContentStore
from .store import (
    ENTITY_POST_TYPE,
    ENTITY_TYPE_TAXONOMY,
    REVISION_POST_TYPE,
    Attachment,
    ContentStore,
    Post,
    User,
)

__all__ = [
    "InMemoryContentStore",
    "ContentStore",
    "Post",
    "User",
    "Attachment",
    "ENTITY_POST_TYPE",
    "ENTITY_TYPE_TAXONOMY",
    "REVISION_POST_TYPE",
]
