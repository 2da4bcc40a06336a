"""Shared pydantic base models and time helpers.

Field names are snake_case in Python and camelCase on the wire
(``agentId``, ``shortName``), matching the MCP request/response contract.
"""

from __future__ import annotations

from datetime import datetime
from datetime import UTC
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(tz=UTC)


class WireModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self, **kwargs: Any) -> dict[str, Any]:
        """Dump to a JSON-compatible dict using wire (camelCase) keys."""
        return self.model_dump(mode="json", by_alias=True, **kwargs)


class FrozenWireModel(WireModel):
    """Immutable variant of ``WireModel`` for records that are only replaced."""

    model_config = ConfigDict(frozen=True)
