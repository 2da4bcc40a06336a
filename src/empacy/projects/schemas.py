"""Records produced and consumed by the project scaffolder."""

from __future__ import annotations

from datetime import date
from datetime import datetime
from typing import Any

from pydantic import Field

from empacy.models import FrozenWireModel
from empacy.models import utcnow
from empacy.models import WireModel

# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


class PhaseTask(FrozenWireModel):
    title: str
    description: str = ""
    estimated_effort: str = ""
    dependencies: list[str] = Field(default_factory=list)
    acceptance_criteria: str = ""


class ContextItem(FrozenWireModel):
    """Structured entry of a phase context digest."""

    title: str = "Context Item"
    description: str = ""
    details: str | None = None
    references: list[str] | None = None


class ScheduledPhase(FrozenWireModel):
    name: str
    domain: str = ""
    duration: str = ""
    start_date: date
    end_date: date
    dependencies: list[str] = Field(default_factory=list)

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days


class PhaseDependency(FrozenWireModel):
    source: str = Field(alias="from")
    target: str = Field(alias="to")
    type: str = "finish-to-start"
    critical: bool = False


class Artifact(FrozenWireModel):
    name: str
    type: str = ""
    path: str = ""
    description: str = ""
    version: str | None = None
    checksum: str | None = None


class CompletionData(FrozenWireModel):
    artifacts: list[Artifact] = Field(default_factory=list)
    notes: str = ""
    quality_metrics: dict[str, Any] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class Project(WireModel):
    id: str
    name: str
    description: str = ""
    domains: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    status: str = "initializing"
    path: str = ""


class Phase(WireModel):
    id: str
    project_id: str
    domain: str
    name: str
    tasks: list[PhaseTask] = Field(default_factory=list)
    context: list[str | ContextItem] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    status: str = "planned"
    path: str = ""


class Schedule(WireModel):
    id: str
    project_id: str
    phases: list[ScheduledPhase] = Field(default_factory=list)
    dependencies: list[PhaseDependency] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    status: str = "scheduled"
    path: str = ""


class WorkAssignment(WireModel):
    id: str
    agent_id: str
    task_id: str
    context: list[str] = Field(default_factory=list)
    assigned_at: datetime = Field(default_factory=utcnow)
    status: str = "assigned"
    path: str = ""


class CompletionReport(WireModel):
    domain: str
    project_id: str
    completed_at: datetime = Field(default_factory=utcnow)
    artifacts: list[Artifact] = Field(default_factory=list)
    notes: str = ""
    quality_metrics: dict[str, Any] = Field(default_factory=dict)
    path: str = ""


class Release(WireModel):
    id: str
    project_id: str
    version: str
    description: str = ""
    artifacts: list[Artifact] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    status: str = "created"
    path: str = ""


class Diagram(FrozenWireModel):
    path: str
    type: str
    content: str


class DomainState(FrozenWireModel):
    name: str
    has_phases: bool = False
    has_implementation: bool = False
    completed: bool = False
    status: str = "pending"


class ProjectState(FrozenWireModel):
    project_id: str
    config: dict[str, Any]
    domains: list[DomainState]
    schedule: dict[str, Any]
    overall_status: str
    last_updated: datetime = Field(default_factory=utcnow)
