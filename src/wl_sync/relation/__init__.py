from .index import RELATED_ENTITIES_KEY, RELATED_POSTS_KEY, RelationshipIndex

__all__ = ["RelationshipIndex", "RELATED_ENTITIES_KEY", "RELATED_POSTS_KEY"]
