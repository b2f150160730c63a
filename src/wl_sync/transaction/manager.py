"""全量替换对账的执行入口。"""
from __future__ import annotations

import hashlib
import logging
import time
import uuid
from typing import Iterable, Optional, TYPE_CHECKING

from ..connection.client import TripleStoreClient
from ..core.logging import LoggerFactory
from ..query.builder import SparqlUpdateBuilder
from ..query.dsl import ReconcileRequest, Triple

if TYPE_CHECKING:  # pragma: no cover - 仅用于类型提示
    from .audit import AuditLogger


class ReconcileManager:
    """``reconcile(subject, desired)`` 原语：文章、作者、实体、用户的同步都经由这里。

    每次调用生成一条语句、发起一次远端请求，不重试、不回滚；结果与客户端
    一致地收敛为布尔值。"""

    def __init__(
        self,
        client: TripleStoreClient,
        *,
        builder: Optional[SparqlUpdateBuilder] = None,
        audit_logger: Optional[AuditLogger] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._client = client
        self._builder = builder or SparqlUpdateBuilder()
        self._audit_logger = audit_logger
        self._logger = logger or LoggerFactory.create_default_logger(__name__)

    @property
    def builder(self) -> SparqlUpdateBuilder:
        return self._builder

    async def reconcile(
        self,
        subject: str,
        predicates: Iterable[str],
        triples: Iterable[Triple],
        *,
        op_type: str = "reconcile",
        trace_id: str | None = None,
    ) -> bool:
        """清空 ``subject`` 上 ``predicates`` 的旧值并写入 ``triples``。"""

        request = ReconcileRequest(subject=subject, predicates=list(predicates), triples=list(triples))
        query = self._builder.build_reconcile(request)
        return await self._send(
            op_type,
            subject,
            query,
            trace_id=trace_id,
            payload={"predicates": len(request.predicates), "triples": len(request.triples)},
        )

    async def purge(self, uri: str, *, op_type: str = "purge", trace_id: str | None = None) -> bool:
        """删除 ``uri`` 作为主语或宾语的全部三元组。"""

        return await self._send(op_type, uri, self._builder.build_purge(uri), trace_id=trace_id, payload={})

    # ---- 内部工具 -----------------------------------------------------

    async def _send(
        self,
        op_type: str,
        subject: str,
        query: str,
        *,
        trace_id: str | None,
        payload: dict[str, int],
    ) -> bool:
        trace_id = trace_id or str(uuid.uuid4())
        start = time.perf_counter()
        ok = await self._client.update(query, trace_id=trace_id)
        latency_ms = (time.perf_counter() - start) * 1000

        if ok:
            self._logger.info("%s 完成 [subject :: %s]", op_type, subject, extra={"trace_id": trace_id})
        else:
            self._logger.error("%s 失败 [subject :: %s]", op_type, subject, extra={"trace_id": trace_id})

        if self._audit_logger:
            await self._audit_logger.log_operation_async(
                op_type=op_type,
                subject_uri=subject,
                trace_id=trace_id,
                query_hash=hashlib.sha256(query.encode("utf-8")).hexdigest(),
                result_status="success" if ok else "failed",
                latency_ms=latency_ms,
                payload=payload,
            )
        return ok
