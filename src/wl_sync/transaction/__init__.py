from .audit import AuditLogger
from .manager import ReconcileManager

__all__ = ["AuditLogger", "ReconcileManager"]
