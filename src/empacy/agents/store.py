"""In-memory agent registry owned by ``AgentManager``."""

from __future__ import annotations

import itertools
import uuid
from collections.abc import Iterator

from empacy.agents.schemas import Agent


class AgentRegistry:
    """Process-lifetime agent registry.

    One instance is injected into an ``AgentManager``; ``reset()`` is the
    teardown hook used between tests and by ``server._reset_state()``.
    """

    def __init__(self) -> None:
        self._agents: dict[str, Agent] = {}
        self._sequence = itertools.count(1)

    def next_id(self) -> str:
        """Allocate an id that is unique for the lifetime of the process."""
        return f"agent_{next(self._sequence)}_{uuid.uuid4().hex[:12]}"

    def add(self, agent: Agent) -> None:
        self._agents[agent.id] = agent

    def get(self, agent_id: str) -> Agent | None:
        return self._agents.get(agent_id)

    def remove(self, agent_id: str) -> Agent | None:
        return self._agents.pop(agent_id, None)

    def __iter__(self) -> Iterator[Agent]:
        return iter(list(self._agents.values()))

    def __len__(self) -> int:
        return len(self._agents)

    def __contains__(self, agent_id: object) -> bool:
        return agent_id in self._agents

    def reset(self) -> None:
        """Drop every agent. The id sequence keeps counting."""
        self._agents.clear()
