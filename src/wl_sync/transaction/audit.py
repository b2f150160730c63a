"""同步操作审计写入工具。"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine


class AuditLogger:
    """将每次对账/清除操作的结果写入 ``sync_operation_audit`` 表。

    审计失败只记录告警，不影响同步主流程。"""

    def __init__(
        self,
        dsn: str,
        schema: str,
        *,
        engine: Optional[Engine] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """初始化审计记录器，允许注入 Engine 便于测试。"""

        self._engine = engine or create_engine(dsn, future=True, pool_pre_ping=True)
        self._schema = schema
        self._logger = logger or logging.getLogger(__name__)

    async def log_operation_async(
        self,
        *,
        op_type: str,
        subject_uri: str,
        trace_id: str | None,
        query_hash: str,
        result_status: str,
        latency_ms: float,
        payload: dict[str, Any] | None = None,
    ) -> str | None:
        """异步写入一条审计记录，返回记录 ID。"""

        return await asyncio.to_thread(
            self.log_operation,
            op_type=op_type,
            subject_uri=subject_uri,
            trace_id=trace_id,
            query_hash=query_hash,
            result_status=result_status,
            latency_ms=latency_ms,
            payload=payload,
        )

    def log_operation(
        self,
        *,
        op_type: str,
        subject_uri: str,
        trace_id: str | None,
        query_hash: str,
        result_status: str,
        latency_ms: float,
        payload: dict[str, Any] | None = None,
    ) -> str | None:
        """同步写入审计记录，发生异常时记录日志并返回 None。"""

        try:
            sql = text(
                f"""
                INSERT INTO {self._schema}.sync_operation_audit
                    (op_type, subject_uri, trace_id, query_hash, result_status, latency_ms, payload)
                VALUES
                    (:op_type, :subject_uri, :trace_id, :query_hash, :result_status, :latency_ms, :payload)
                RETURNING id
                """
            )
            with self._engine.begin() as conn:
                result = conn.execute(
                    sql,
                    {
                        "op_type": op_type,
                        "subject_uri": subject_uri,
                        "trace_id": trace_id,
                        "query_hash": query_hash,
                        "result_status": result_status,
                        "latency_ms": int(latency_ms),
                        "payload": json.dumps(payload or {}, ensure_ascii=False),
                    },
                )
                new_id = result.scalar_one()
            return str(new_id)
        except Exception as exc:  # noqa: BLE001
            self._logger.warning("写入 sync_operation_audit 失败: %s", exc, exc_info=True)
            return None
