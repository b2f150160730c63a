"""同步用到的 RDF 命名空间。"""
from __future__ import annotations

from rdflib import Namespace
from rdflib.namespace import DCTERMS, OWL, RDF, RDFS

SCHEMA = Namespace("http://schema.org/")

#: 每条查询前置的前缀声明，``dct`` 是 ``dcterms`` 的历史别名。
PREFIXES: dict[str, str] = {
    "dcterms": str(DCTERMS),
    "rdfs": str(RDFS),
    "owl": str(OWL),
    "schema": str(SCHEMA),
    "dct": str(DCTERMS),
}

__all__ = ["DCTERMS", "OWL", "RDF", "RDFS", "SCHEMA", "PREFIXES"]
