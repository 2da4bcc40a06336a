"""Agent data models."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import Field

from empacy.agents.catalog import AgentRole
from empacy.agents.catalog import AgentTypeDescriptor
from empacy.models import utcnow
from empacy.models import WireModel


class AgentStatus(StrEnum):
    """Lifecycle states of a tracked agent."""

    initializing = "initializing"
    ready = "ready"
    error = "error"
    terminated = "terminated"


class Agent(WireModel):
    """A tracked unit of work with a role, status and metadata."""

    id: str
    role: AgentRole
    type: AgentTypeDescriptor
    context: dict[str, Any] = Field(default_factory=dict)
    status: AgentStatus = AgentStatus.initializing
    created_at: datetime = Field(default_factory=utcnow)
    last_activity: datetime = Field(default_factory=utcnow)
    capabilities: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)
    context_warnings: list[str] = Field(
        default_factory=list,
        description="Required context names missing at spawn time.",
    )

    def snapshot(self) -> AgentStatusSnapshot:
        return AgentStatusSnapshot(
            id=self.id,
            role=self.role,
            status=self.status,
            last_activity=self.last_activity,
            capabilities=list(self.capabilities),
            metadata=dict(self.metadata),
        )

    def summary(self) -> AgentSummary:
        return AgentSummary(
            id=self.id,
            role=self.role,
            status=self.status,
            last_activity=self.last_activity,
        )


class AgentSummary(WireModel):
    """Compact listing entry for an agent."""

    id: str
    role: AgentRole
    status: AgentStatus
    last_activity: datetime


class AgentStatusSnapshot(AgentSummary):
    """Point-in-time view returned by ``get_agent_status``."""

    capabilities: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)
