from .cms import ContentStore, InMemoryContentStore, Post, User
from .connection import RedlinkClient, TripleStoreClient
from .core import ConfigManager, LoggerFactory, Settings
from .entity import EntityAnnotation, EntityService
from .naming import UriResolver
from .query import ReconcileRequest, SPARQLSanitizer, SparqlUpdateBuilder, Triple
from .relation import RelationshipIndex
from .sync import SyncService
from .timeline import TimelineService
from .transaction import AuditLogger, ReconcileManager

__all__ = [
    "ContentStore",
    "InMemoryContentStore",
    "Post",
    "User",
    "RedlinkClient",
    "TripleStoreClient",
    "ConfigManager",
    "LoggerFactory",
    "Settings",
    "EntityAnnotation",
    "EntityService",
    "UriResolver",
    "ReconcileRequest",
    "SPARQLSanitizer",
    "SparqlUpdateBuilder",
    "Triple",
    "RelationshipIndex",
    "SyncService",
    "TimelineService",
    "AuditLogger",
    "ReconcileManager",
]
