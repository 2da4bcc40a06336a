"""Context distribution manager.

Builds one versioned ``ContextPackage`` per agent from a list of file
names.  Files that are missing, not regular files, or unreadable are
logged and skipped; the package simply holds fewer records.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from collections.abc import Sequence
from datetime import datetime
from datetime import timedelta
from datetime import UTC
from pathlib import Path

from empacy.config import ContextConfig
from empacy.context.detection import detect_content_type
from empacy.context.detection import format_bytes
from empacy.context.schemas import AccessLogRecord
from empacy.context.schemas import ContextFileRecord
from empacy.context.schemas import ContextFileSummary
from empacy.context.schemas import ContextPackage
from empacy.context.schemas import ContextPackageMetadata
from empacy.context.schemas import ContextStats
from empacy.context.schemas import ContextSummary
from empacy.context.store import ContextStore
from empacy.errors import NotFoundError
from empacy.errors import ValidationError

logger = logging.getLogger(__name__)


def _read_file(path: Path) -> tuple[str, int, float]:
    stat = path.stat()
    content = path.read_text(encoding="utf-8")
    return content, stat.st_size, stat.st_mtime


class ContextManager:
    """Owns per-agent context packages, their versions and the access log."""

    def __init__(
        self,
        store: ContextStore | None = None,
        *,
        config: ContextConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config or ContextConfig()
        self.store = (
            store
            if store is not None
            else ContextStore(max_access_log=self.config.max_access_log)
        )
        self._root = Path(self.config.root_dir)
        self._clock = clock or (lambda: datetime.now(tz=UTC))
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Distribution
    # ------------------------------------------------------------------

    async def distribute_context(
        self, agent_id: str, file_names: Sequence[str]
    ) -> ContextPackage:
        """Validate *file_names* and install them as the agent's package."""
        if isinstance(file_names, str):
            raise ValidationError("contextFiles must be a list of file names")
        logger.info("Distributing %d context files to %s", len(file_names), agent_id)

        async with self._lock:
            records = await self.validate_context_files(file_names)
            action = (
                "context_updated"
                if agent_id in self.store.packages
                else "context_distributed"
            )
            package = self._build_package(agent_id, records)
            version = self.store.put(package)
            self.store.record(
                AccessLogRecord(
                    timestamp=self._clock(),
                    agent_id=agent_id,
                    files=list(file_names),
                    action=action,
                )
            )

        logger.info(
            "Context v%d for %s: %d/%d files",
            version,
            agent_id,
            len(records),
            len(file_names),
        )
        return package

    async def update_context(
        self, agent_id: str, file_names: Sequence[str]
    ) -> ContextPackage:
        """Replace the agent's package; identical to ``distribute_context``."""
        return await self.distribute_context(agent_id, file_names)

    async def validate_context_files(
        self, file_names: Sequence[str]
    ) -> list[ContextFileRecord]:
        """Read each file in order, skipping the ones that cannot be used."""
        records: list[ContextFileRecord] = []
        for name in file_names:
            record = await self._validate_one(name)
            if record is not None:
                records.append(record)
        return records

    async def _validate_one(self, name: str) -> ContextFileRecord | None:
        path = (self._root / name).resolve()
        try:
            if not await asyncio.to_thread(path.is_file):
                logger.warning("Context file missing or not a regular file: %s", name)
                return None
            content, size, mtime = await asyncio.to_thread(_read_file, path)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Context file validation failed: %s (%s)", name, exc)
            return None

        return ContextFileRecord(
            name=name,
            path=str(path),
            size=size,
            last_modified=datetime.fromtimestamp(mtime, tz=UTC),
            content=content,
            type=detect_content_type(name, content),
        )

    def _build_package(
        self, agent_id: str, records: list[ContextFileRecord]
    ) -> ContextPackage:
        total_size = sum(record.size for record in records)
        file_types = sorted({record.type for record in records})
        summary = ContextSummary(
            files=[
                ContextFileSummary(
                    name=record.name,
                    type=record.type,
                    size=record.size,
                    last_modified=record.last_modified,
                )
                for record in records
            ],
            overview=(
                f"Context package contains {len(records)} files with "
                f"{format_bytes(total_size)} total content"
            ),
        )
        return ContextPackage(
            agent_id=agent_id,
            created_at=self._clock(),
            files=records,
            summary=summary,
            metadata=ContextPackageMetadata(
                total_files=len(records),
                total_size=total_size,
                file_types=file_types,
            ),
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_context(self, agent_id: str) -> ContextPackage:
        package = self.store.packages.get(agent_id)
        if package is None:
            raise NotFoundError(f"No context found for agent: {agent_id}")
        return package

    def get_context_version(self, agent_id: str) -> int:
        return self.store.versions.get(agent_id, 0)

    def get_access_log(
        self, agent_id: str | None = None, limit: int = 100
    ) -> list[AccessLogRecord]:
        """Return the newest *limit* access records, optionally for one agent."""
        entries = [
            entry
            for entry in self.store.access_log
            if agent_id is None or entry.agent_id == agent_id
        ]
        return entries[-limit:] if limit > 0 else []

    def get_context_stats(self) -> ContextStats:
        distribution: dict[str, int] = {}
        total_files = 0
        total_size = 0
        for package in self.store.packages.values():
            total_files += len(package.files)
            total_size += package.metadata.total_size
            for file_type in package.metadata.file_types:
                distribution[file_type.value] = distribution.get(file_type.value, 0) + 1

        size = self.config.recent_activity_size
        recent = list(self.store.access_log)[-size:] if size > 0 else []
        return ContextStats(
            total_agents=len(self.store.packages),
            total_context_files=total_files,
            total_context_size=total_size,
            file_type_distribution=distribution,
            recent_activity=recent,
        )

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def cleanup_old_context(self, max_age_ms: int | None = None) -> int:
        """Delete packages created at or before ``now - max_age_ms``.

        Version counters go with their package. Returns the number removed.
        """
        if max_age_ms is None:
            max_age_ms = self.config.default_max_age_ms
        if max_age_ms < 0:
            raise ValidationError("max_age_ms must be >= 0")

        cutoff = self._clock() - timedelta(milliseconds=max_age_ms)
        expired = [
            agent_id
            for agent_id, package in self.store.packages.items()
            if package.created_at <= cutoff
        ]
        for agent_id in expired:
            self.store.discard(agent_id)

        logger.info("Cleaned up %d old context packages", len(expired))
        return len(expired)
