"""In-memory context package store owned by ``ContextManager``."""

from __future__ import annotations

from collections import deque

from empacy.context.schemas import AccessLogRecord
from empacy.context.schemas import ContextPackage


class ContextStore:
    """Current packages, version counters and the bounded access log.

    A package and its version counter are created and deleted together.
    """

    def __init__(self, *, max_access_log: int = 1000) -> None:
        self.packages: dict[str, ContextPackage] = {}
        self.versions: dict[str, int] = {}
        self.access_log: deque[AccessLogRecord] = deque(maxlen=max_access_log)

    def put(self, package: ContextPackage) -> int:
        """Replace the agent's current package and return the new version."""
        self.packages[package.agent_id] = package
        version = self.versions.get(package.agent_id, 0) + 1
        self.versions[package.agent_id] = version
        return version

    def discard(self, agent_id: str) -> None:
        self.packages.pop(agent_id, None)
        self.versions.pop(agent_id, None)

    def record(self, entry: AccessLogRecord) -> None:
        # deque(maxlen) evicts the oldest entry once the cap is reached.
        self.access_log.append(entry)

    def reset(self) -> None:
        self.packages.clear()
        self.versions.clear()
        self.access_log.clear()
