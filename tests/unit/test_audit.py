"""Unit tests for the audit logger."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from empacy.audit import AuditEvent
from empacy.audit import AuditEventType
from empacy.audit import AuditLogger
from empacy.config import AuditConfig


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_event(
    event_type: AuditEventType = AuditEventType.AGENT_SPAWNED,
    timestamp: float = 1000.0,
    payload: dict | None = None,
) -> AuditEvent:
    return AuditEvent(
        timestamp=timestamp,
        event_type=event_type,
        operation="spawnAgent",
        payload=payload or {},
    )


def _config(tmp_path: Path, *, enabled: bool = True) -> AuditConfig:
    return AuditConfig(file_path=str(tmp_path / "audit.jsonl"), enabled=enabled)


# ---------------------------------------------------------------------------
# Write
# ---------------------------------------------------------------------------


class TestAuditLogWrite:
    async def test_log_writes_jsonl_line(self, tmp_path: Path):
        audit = AuditLogger(_config(tmp_path))
        await audit.log(_make_event(payload={"agent_id": "agent_1"}))

        lines = Path(audit.config.file_path).read_text().strip().splitlines()
        assert len(lines) == 1
        data = json.loads(lines[0])
        assert data["event_type"] == "AGENT_SPAWNED"
        assert data["operation"] == "spawnAgent"
        assert data["payload"] == {"agent_id": "agent_1"}

    async def test_record_builds_event(self, tmp_path: Path):
        audit = AuditLogger(_config(tmp_path))
        await audit.record(
            AuditEventType.LANGUAGE_UPDATED, "updateUbiquitousLanguage", totalConcepts=3
        )

        [event] = await audit.read_events()
        assert event.event_type == AuditEventType.LANGUAGE_UPDATED
        assert event.payload == {"totalConcepts": 3}
        assert event.timestamp > 0

    async def test_parent_directory_created(self, tmp_path: Path):
        cfg = AuditConfig(
            file_path=str(tmp_path / "logs" / "audit.jsonl"), enabled=True
        )
        audit = AuditLogger(cfg)
        await audit.log(_make_event())
        assert Path(cfg.file_path).exists()

    async def test_write_failure_is_logged_not_raised(self, tmp_path: Path, caplog):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        audit = AuditLogger(
            AuditConfig(file_path=str(blocker / "audit.jsonl"), enabled=True)
        )
        with caplog.at_level(logging.WARNING, logger="empacy.audit.store"):
            await audit.log(_make_event())
        assert "Audit write failed" in caplog.text

    async def test_disabled_by_default(self, tmp_path: Path):
        cfg = AuditConfig(file_path=str(tmp_path / "audit.jsonl"))
        audit = AuditLogger(cfg)
        await audit.log(_make_event())

        assert audit.enabled is False
        assert not Path(cfg.file_path).exists()


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------


class TestAuditLogRead:
    async def test_filter_by_type(self, tmp_path: Path):
        audit = AuditLogger(_config(tmp_path))
        await audit.log(_make_event(AuditEventType.AGENT_SPAWNED, 1.0))
        await audit.log(_make_event(AuditEventType.PROJECT_CREATED, 2.0))
        await audit.log(_make_event(AuditEventType.AGENT_SPAWNED, 3.0))

        events = await audit.read_events(event_type=AuditEventType.AGENT_SPAWNED)
        assert [e.timestamp for e in events] == [1.0, 3.0]

    async def test_filter_by_since(self, tmp_path: Path):
        audit = AuditLogger(_config(tmp_path))
        for ts in (100.0, 200.0, 300.0):
            await audit.log(_make_event(timestamp=ts))

        events = await audit.read_events(since=200.0)
        assert [e.timestamp for e in events] == [200.0, 300.0]

    async def test_malformed_lines_skipped(self, tmp_path: Path):
        audit = AuditLogger(_config(tmp_path))
        await audit.log(_make_event(timestamp=1.0))
        with Path(audit.config.file_path).open("a") as fh:
            fh.write("not json\n\n")
        await audit.log(_make_event(timestamp=2.0))

        events = await audit.read_events()
        assert [e.timestamp for e in events] == [1.0, 2.0]

    async def test_empty_when_no_file(self, tmp_path: Path):
        assert await AuditLogger(_config(tmp_path)).read_events() == []
