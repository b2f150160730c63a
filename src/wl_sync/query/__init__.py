from .builder import SPARQLSanitizer, SparqlUpdateBuilder
from .dsl import ObjectKind, ReconcileRequest, Triple
from .namespaces import PREFIXES

__all__ = [
    "SPARQLSanitizer",
    "SparqlUpdateBuilder",
    "ObjectKind",
    "ReconcileRequest",
    "Triple",
    "PREFIXES",
]
