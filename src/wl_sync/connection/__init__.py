from .client import RedlinkClient, TripleStoreClient

__all__ = ["RedlinkClient", "TripleStoreClient"]
