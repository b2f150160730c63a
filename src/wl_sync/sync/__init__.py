from .service import (
    AUTHOR_PREDICATES,
    ENTITY_PREDICATES,
    POST_PREDICATES,
    USER_PREDICATES,
    SyncService,
)

__all__ = [
    "SyncService",
    "POST_PREDICATES",
    "AUTHOR_PREDICATES",
    "ENTITY_PREDICATES",
    "USER_PREDICATES",
]
