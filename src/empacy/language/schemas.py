"""Ubiquitous language data models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field

from empacy.models import FrozenWireModel
from empacy.models import utcnow
from empacy.models import WireModel


class ConceptInput(FrozenWireModel):
    """Validated shape of one concept submitted for create or merge.

    Text fields are strict: numbers or lists where text is expected are
    rejected rather than coerced.
    """

    name: str = Field(min_length=1, strict=True)
    domain: str = Field(min_length=1, strict=True)
    definition: str = Field(min_length=1, strict=True)
    short_name: str | None = Field(default=None, strict=True)
    synonyms: list[str] | None = Field(default=None, strict=True)
    related_concepts: list[str] | None = Field(default=None, strict=True)
    metadata: dict[str, Any] | None = None
    source: str | None = None
    confidence: str | None = None
    tags: list[str] | None = None


class Concept(WireModel):
    """A named, defined domain term shared across agents."""

    id: str
    name: str
    short_name: str = ""
    domain: str
    definition: str
    synonyms: list[str] = Field(default_factory=list)
    related_concepts: list[str] = Field(default_factory=list)
    version: int = 1
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)
    last_updated: datetime = Field(default_factory=utcnow)


class AcronymEntry(FrozenWireModel):
    """Short form that exactly equals the initials of a concept name."""

    acronym: str
    concept_name: str
    domain: str
    definition: str
    created_at: datetime


class ConceptHistoryRecord(FrozenWireModel):
    timestamp: datetime = Field(default_factory=utcnow)
    concept_name: str
    action: str
    changes: dict[str, Any] = Field(default_factory=dict)


class ScoredConcept(FrozenWireModel):
    concept: Concept
    score: int


class LanguageStats(FrozenWireModel):
    total_concepts: int = 0
    total_domains: int = 0
    total_acronyms: int = 0
    total_history: int = 0
    domain_breakdown: dict[str, int] = Field(default_factory=dict)
