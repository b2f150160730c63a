from .service import ENTITY_SAME_AS_KEY, ENTITY_URL_KEY, EntityAnnotation, EntityService

__all__ = ["EntityAnnotation", "EntityService", "ENTITY_URL_KEY", "ENTITY_SAME_AS_KEY"]
