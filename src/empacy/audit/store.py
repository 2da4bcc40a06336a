"""Append-only JSONL audit logger for coordinator actions."""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from empacy.audit.schemas import AuditEvent
from empacy.audit.schemas import AuditEventType
from empacy.config import AuditConfig

logger = logging.getLogger(__name__)


class AuditLogger:
    """Writes one JSON line per audited coordinator action.

    File I/O runs in ``asyncio.to_thread`` behind an ``asyncio.Lock`` so
    concurrent tool calls append whole lines in completion order.
    """

    def __init__(self, config: AuditConfig | None = None) -> None:
        self.config = config or AuditConfig()
        self._lock = asyncio.Lock()

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    async def log(self, event: AuditEvent) -> None:
        if not self.config.enabled:
            return
        line = event.model_dump_json() + "\n"
        async with self._lock:
            try:
                await asyncio.to_thread(
                    partial(self._append, self.config.file_path, line)
                )
            except OSError as exc:
                # The audited action has already been applied.
                logger.warning(
                    "Audit write failed for %s (%s): %s",
                    event.operation,
                    event.event_type.value,
                    exc,
                )

    async def record(
        self, event_type: AuditEventType, operation: str, **payload: Any
    ) -> None:
        """Build and log an event in one call."""
        await self.log(
            AuditEvent(event_type=event_type, operation=operation, payload=payload)
        )

    @staticmethod
    def _append(path: str, line: str) -> None:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("a", encoding="utf-8") as fh:
            fh.write(line)

    async def read_events(
        self,
        *,
        event_type: AuditEventType | None = None,
        since: float | None = None,
    ) -> list[AuditEvent]:
        """Read events back, skipping malformed lines."""
        path = Path(self.config.file_path)
        if not path.exists():
            return []

        async with self._lock:
            raw = await asyncio.to_thread(path.read_text, encoding="utf-8")

        events: list[AuditEvent] = []
        for line_no, line in enumerate(raw.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                event = AuditEvent.model_validate_json(line)
            except ValidationError:
                logger.warning("Skipping malformed audit line %d in %s", line_no, path)
                continue
            if event_type is not None and event.event_type != event_type:
                continue
            if since is not None and event.timestamp < since:
                continue
            events.append(event)
        return events
