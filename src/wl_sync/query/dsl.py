"""三元组与对账请求模型。"""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, model_validator

ObjectKind = Literal["uri", "literal", "localized"]


class Triple(BaseModel):
    """一条待写入的三元组。

    ``p`` 为完整谓词 IRI；``kind`` 决定 ``o`` 的渲染方式：``uri`` 原样包裹尖括号，
    ``literal`` 转义为字符串字面量，``localized`` 额外带 ``@lang`` 语言标签。"""

    s: str
    p: str
    o: str
    kind: ObjectKind = "uri"
    lang: str | None = None

    @model_validator(mode="after")
    def _check_lang(self) -> "Triple":
        if self.kind == "localized" and not self.lang:
            raise ValueError("localized 字面量必须提供 lang")
        return self

    @classmethod
    def uri(cls, s: str, p: str, o: str) -> "Triple":
        return cls(s=s, p=p, o=o, kind="uri")

    @classmethod
    def literal(cls, s: str, p: str, o: str) -> "Triple":
        return cls(s=s, p=p, o=o, kind="literal")

    @classmethod
    def localized(cls, s: str, p: str, o: str, lang: str) -> "Triple":
        return cls(s=s, p=p, o=o, kind="localized", lang=lang)


class ReconcileRequest(BaseModel):
    """全量替换请求：先清空 ``subject`` 上 ``predicates`` 的全部取值，再写入 ``triples``。"""

    subject: str
    predicates: list[str] = Field(default_factory=list)
    triples: list[Triple] = Field(default_factory=list)
