"""SPARQL Update 语句构建。

同步采用"全量替换"策略：对目标主语上一组固定谓词先 DELETE 全部旧值，
再以 INSERT DATA 写入当前期望的三元组集合，不计算逐条差异。"""
from __future__ import annotations

import re
from typing import Iterable

from .dsl import ReconcileRequest, Triple
from .namespaces import PREFIXES, RDF


class SPARQLSanitizer:
    """SPARQL 字面量转义与前缀校验工具。

    URI 由调用方负责校验，构建器原样嵌入。"""

    _LITERAL_ESCAPES = str.maketrans(
        {
            "\\": "\\\\",
            "'": "\\'",
            '"': '\\"',
            "\t": "\\t",
            "\n": "\\n",
            "\r": "\\r",
            "\b": "\\b",
            "\f": "\\f",
        }
    )

    @classmethod
    def escape_literal(cls, value: str) -> str:
        """转义字面量内容（不含外层引号）。

        一次性替换反斜杠、单双引号以及 tab/换行/回车/退格/换页，
        结果可安全重复嵌入查询文本，例如 ``say "hi"`` 转为 ``say \\"hi\\"``。"""

        return value.translate(cls._LITERAL_ESCAPES)

    @staticmethod
    def validate_prefix(prefix: str) -> bool:
        """验证前缀名称是否满足 NCName 近似约束。"""

        return bool(re.match(r"^[A-Za-z_][A-Za-z0-9_-]*$", prefix))


class SparqlUpdateBuilder:
    """生成带固定前缀的 DELETE/INSERT 更新语句。

    典型用法::

        builder = SparqlUpdateBuilder()
        query = builder.build_reconcile(
            ReconcileRequest(
                subject="http://data.redlink.io/u/d/post/1",
                predicates=[str(RDFS.label)],
                triples=[Triple.literal("http://data.redlink.io/u/d/post/1", str(RDFS.label), "Hello")],
            )
        )
    """

    _LOCAL_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")

    def __init__(self, *, prefixes: dict[str, str] | None = None) -> None:
        self._prefixes = dict(prefixes or PREFIXES)
        for prefix in self._prefixes:
            if not SPARQLSanitizer.validate_prefix(prefix):
                raise ValueError(f"非法前缀名: {prefix}")

    def prefixes(self) -> str:
        """渲染所有 PREFIX 声明，末尾附一个空行。"""

        lines = [f"PREFIX {prefix}: <{iri}>" for prefix, iri in self._prefixes.items()]
        return "\n".join(lines) + "\n\n"

    def build_reconcile(self, request: ReconcileRequest) -> str:
        """为主语生成全量替换语句。

        每个谓词一条 ``DELETE {..} WHERE {..}``，最后一条 ``INSERT DATA``；
        即便 ``triples`` 为空也输出合法的空 ``INSERT DATA { }``。"""

        subject = self._format_iri(request.subject)
        operations: list[str] = []
        for predicate in request.predicates:
            pattern = f"{subject} {self.format_predicate(predicate)} ?o ."
            operations.append(f"DELETE {{ {pattern} }}\nWHERE  {{ {pattern} }}")
        operations.append(f"INSERT DATA {{\n{self._render_block(request.triples)}}}")
        return self.prefixes() + ";\n".join(operations) + "\n"

    def build_purge(self, uri: str) -> str:
        """删除 ``uri`` 作为主语或宾语出现的全部三元组。"""

        target = self._format_iri(uri)
        return self.prefixes() + (
            f"DELETE {{ {target} ?p ?o . }} WHERE {{ {target} ?p ?o . }};\n"
            f"DELETE {{ ?s ?p {target} . }} WHERE {{ ?s ?p {target} . }}\n"
        )

    def render_triple(self, triple: Triple) -> str:
        return (
            f"{self._format_iri(triple.s)} "
            f"{self.format_predicate(triple.p)} "
            f"{self._format_object(triple)} ."
        )

    def format_predicate(self, predicate: str) -> str:
        """将谓词 IRI 压缩为前缀名，``rdf:type`` 输出为 ``a``。"""

        if predicate == str(RDF.type):
            return "a"
        for prefix, namespace in self._prefixes.items():
            if predicate.startswith(namespace):
                local = predicate[len(namespace):]
                if self._LOCAL_NAME.match(local):
                    return f"{prefix}:{local}"
        return self._format_iri(predicate)

    def _render_block(self, triples: Iterable[Triple]) -> str:
        return "".join(f"  {self.render_triple(triple)}\n" for triple in triples)

    def _format_object(self, triple: Triple) -> str:
        if triple.kind == "uri":
            return self._format_iri(triple.o)
        literal = f'"{SPARQLSanitizer.escape_literal(triple.o)}"'
        if triple.kind == "localized":
            return f"{literal}@{triple.lang}"
        return literal

    @staticmethod
    def _format_iri(value: str) -> str:
        if value.startswith("<") and value.endswith(">"):
            return value
        return f"<{value}>"
