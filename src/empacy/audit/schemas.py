"""Audit event types for the coordination plane."""

from __future__ import annotations

import time
from enum import Enum
from typing import Any

from pydantic import BaseModel
from pydantic import Field


class AuditEventType(str, Enum):
    """Coordinator actions that leave an audit trail."""

    AGENT_SPAWNED = "AGENT_SPAWNED"
    AGENT_STATUS_UPDATED = "AGENT_STATUS_UPDATED"
    AGENT_TERMINATED = "AGENT_TERMINATED"
    CONTEXT_DISTRIBUTED = "CONTEXT_DISTRIBUTED"
    CONTEXT_CLEANED = "CONTEXT_CLEANED"
    LANGUAGE_UPDATED = "LANGUAGE_UPDATED"
    LANGUAGE_IMPORTED = "LANGUAGE_IMPORTED"
    PROJECT_CREATED = "PROJECT_CREATED"
    RELEASE_CREATED = "RELEASE_CREATED"


class AuditEvent(BaseModel):
    """One immutable line of the JSONL audit file."""

    model_config = {"frozen": True}

    timestamp: float = Field(
        default_factory=time.time,
        description="Unix epoch when the action completed.",
    )
    event_type: AuditEventType
    operation: str = Field(
        default="",
        description="Coordinator operation that produced the event.",
    )
    payload: dict[str, Any] = Field(default_factory=dict)
