"""Context distribution data models."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import Field

from empacy.models import FrozenWireModel
from empacy.models import utcnow


class ContentType(StrEnum):
    """Detected kind of a context file."""

    yaml = "yaml"
    json = "json"
    markdown = "markdown"
    text = "text"


class ContextFileRecord(FrozenWireModel):
    """One validated context file, captured at distribution time."""

    name: str = Field(description="Name as requested by the caller.")
    path: str = Field(description="Resolved absolute path.")
    size: int
    last_modified: datetime
    content: str
    type: ContentType


class ContextFileSummary(FrozenWireModel):
    name: str
    type: ContentType
    size: int
    last_modified: datetime


class ContextSummary(FrozenWireModel):
    """Human oriented digest of a package."""

    files: list[ContextFileSummary] = Field(default_factory=list)
    overview: str = ""


class ContextPackageMetadata(FrozenWireModel):
    total_files: int = 0
    total_size: int = 0
    file_types: list[ContentType] = Field(default_factory=list)


class ContextPackage(FrozenWireModel):
    """The single current bundle of reference files handed to one agent."""

    agent_id: str
    created_at: datetime = Field(default_factory=utcnow)
    files: list[ContextFileRecord] = Field(default_factory=list)
    summary: ContextSummary = Field(default_factory=ContextSummary)
    metadata: ContextPackageMetadata = Field(default_factory=ContextPackageMetadata)


class AccessLogRecord(FrozenWireModel):
    """Append-only audit entry for one distribution."""

    timestamp: datetime = Field(default_factory=utcnow)
    agent_id: str
    files: list[str] = Field(default_factory=list)
    action: str = "context_distributed"


class ContextStats(FrozenWireModel):
    total_agents: int = 0
    total_context_files: int = 0
    total_context_size: int = 0
    file_type_distribution: dict[str, int] = Field(default_factory=dict)
    recent_activity: list[AccessLogRecord] = Field(default_factory=list)
