"""Audit subsystem: async JSONL trail of coordinator actions."""

from empacy.audit.schemas import AuditEvent
from empacy.audit.schemas import AuditEventType
from empacy.audit.store import AuditLogger

__all__ = [
    "AuditEvent",
    "AuditEventType",
    "AuditLogger",
]
