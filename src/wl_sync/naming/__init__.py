from .resolver import USER_URI_META_KEY, UriResolver

__all__ = ["UriResolver", "USER_URI_META_KEY"]
