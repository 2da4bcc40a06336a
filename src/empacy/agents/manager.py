"""Agent lifecycle manager: spawn, initialize, update, query, terminate.

Role-specific behaviour is dispatched through two tables keyed by
``AgentRole``: one initializer stamping the role's fixed metadata and one
cleanup hook run on termination.  Both tables must cover every role.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from collections.abc import Mapping
from typing import Any

from empacy.agents.catalog import AGENT_TYPES
from empacy.agents.catalog import AgentRole
from empacy.agents.catalog import AgentTypeDescriptor
from empacy.agents.catalog import get_agent_type
from empacy.agents.schemas import Agent
from empacy.agents.schemas import AgentStatus
from empacy.agents.schemas import AgentStatusSnapshot
from empacy.agents.schemas import AgentSummary
from empacy.agents.store import AgentRegistry
from empacy.errors import NotFoundError
from empacy.errors import UnknownRoleError
from empacy.errors import ValidationError
from empacy.models import utcnow

logger = logging.getLogger(__name__)

Initializer = Callable[[Agent], dict[str, Any]]
Cleanup = Callable[[Agent, AgentRegistry], None]


# ---------------------------------------------------------------------------
# Role initializers
# ---------------------------------------------------------------------------


def _init_cto(agent: Agent) -> dict[str, Any]:
    return {
        "role": "strategic",
        "decisionAuthority": "full",
        "reportingStructure": "top-level",
        "accessLevel": "full",
        "canSpawnAgents": True,
        "canDistributeContext": True,
    }


def _init_cto_assistant(agent: Agent) -> dict[str, Any]:
    return {
        "role": "support",
        "decisionAuthority": "limited",
        "reportingStructure": "reports-to-cto",
        "accessLevel": "content-focused",
        "canSpawnAgents": False,
        "canDistributeContext": False,
        "canUpdateUbiquitousLanguage": True,
    }


def _init_principal_engineer(agent: Agent) -> dict[str, Any]:
    return {
        "role": "technical",
        "decisionAuthority": "technical-decisions",
        "reportingStructure": "reports-to-cto",
        "accessLevel": "technical-full",
        "canSpawnAgents": False,
        "canDistributeContext": False,
        "canMakeTechnicalDecisions": True,
    }


def _init_domain_director(agent: Agent) -> dict[str, Any]:
    return {
        "role": "planning",
        "decisionAuthority": "domain-planning",
        "reportingStructure": "reports-to-cto",
        "accessLevel": "domain-specific",
        "canSpawnAgents": False,
        "canDistributeContext": False,
        "canPlanDomainImplementation": True,
    }


def _init_project_manager(agent: Agent) -> dict[str, Any]:
    return {
        "role": "coordination",
        "decisionAuthority": "scheduling-decisions",
        "reportingStructure": "reports-to-cto",
        "accessLevel": "scheduling-full",
        "canSpawnAgents": False,
        "canDistributeContext": False,
        "canManageSchedule": True,
    }


ROLE_INITIALIZERS: dict[AgentRole, Initializer] = {
    AgentRole.cto: _init_cto,
    AgentRole.cto_assistant: _init_cto_assistant,
    AgentRole.principal_engineer: _init_principal_engineer,
    AgentRole.domain_director: _init_domain_director,
    AgentRole.project_manager: _init_project_manager,
}


# ---------------------------------------------------------------------------
# Role cleanup hooks
# ---------------------------------------------------------------------------


def _cleanup_cto(agent: Agent, registry: AgentRegistry) -> None:
    remaining = [other for other in registry if other.id != agent.id]
    if remaining:
        logger.warning(
            "CTO %s terminated with %d remaining agents", agent.id, len(remaining)
        )


def _cleanup_noop(agent: Agent, registry: AgentRegistry) -> None:
    logger.debug("No pending state to flush for %s agent %s", agent.role, agent.id)


ROLE_CLEANUPS: dict[AgentRole, Cleanup] = {
    AgentRole.cto: _cleanup_cto,
    AgentRole.cto_assistant: _cleanup_noop,
    AgentRole.principal_engineer: _cleanup_noop,
    AgentRole.domain_director: _cleanup_noop,
    AgentRole.project_manager: _cleanup_noop,
}

for _table_name, _table in (
    ("ROLE_INITIALIZERS", ROLE_INITIALIZERS),
    ("ROLE_CLEANUPS", ROLE_CLEANUPS),
    ("AGENT_TYPES", AGENT_TYPES),
):
    _missing = set(AgentRole) - set(_table)
    if _missing:
        raise RuntimeError(
            f"{_table_name} has no entry for roles: {', '.join(sorted(_missing))}"
        )


# ---------------------------------------------------------------------------
# Soft context check
# ---------------------------------------------------------------------------


def check_required_context(
    descriptor: AgentTypeDescriptor, context: Mapping[str, Any]
) -> list[str]:
    """Return the required context names absent from *context*.

    A name is satisfied by either its exact key or the key with a
    ``.yaml`` suffix stripped.  Never raises: missing context is a warning.
    """
    missing: list[str] = []
    for name in descriptor.required_context:
        if context.get(name) or context.get(name.removesuffix(".yaml")):
            continue
        missing.append(name)
    return missing


# ---------------------------------------------------------------------------
# AgentManager
# ---------------------------------------------------------------------------


class AgentManager:
    """Owns the agent registry and every status transition."""

    def __init__(
        self,
        registry: AgentRegistry | None = None,
        *,
        initializers: Mapping[AgentRole, Initializer] | None = None,
    ) -> None:
        self.registry = registry if registry is not None else AgentRegistry()
        self._initializers = dict(ROLE_INITIALIZERS)
        if initializers:
            self._initializers.update(initializers)
        logger.info("AgentManager initialized with %d agent types", len(AGENT_TYPES))

    # -- lifecycle --

    def spawn_agent(self, role: str, context: Mapping[str, Any] | None = None) -> Agent:
        """Create, register and initialize an agent for *role*.

        Raises ``UnknownRoleError`` before touching the registry.  When the
        role initializer fails the agent stays registered in ``error`` state
        and the exception propagates.
        """
        descriptor = get_agent_type(role)
        if descriptor is None:
            raise UnknownRoleError(role)

        agent = Agent(
            id=self.registry.next_id(),
            role=descriptor.role,
            type=descriptor,
            context=dict(context or {}),
            capabilities=list(descriptor.capabilities),
        )
        self.registry.add(agent)
        logger.info("Spawning agent %s with role %s", agent.id, agent.role)

        agent.context_warnings = check_required_context(descriptor, agent.context)
        if agent.context_warnings:
            logger.warning(
                "Agent %s missing required context: %s",
                agent.id,
                ", ".join(agent.context_warnings),
            )

        self._initialize(agent)
        return agent

    def _initialize(self, agent: Agent) -> None:
        initializer = self._initializers[agent.role]
        try:
            stamp = initializer(agent)
        except Exception as exc:
            agent.status = AgentStatus.error
            agent.metadata["error"] = str(exc)
            agent.last_activity = utcnow()
            logger.error("Failed to initialize agent %s: %s", agent.id, exc)
            raise
        agent.metadata.update(stamp)
        agent.status = AgentStatus.ready
        agent.last_activity = utcnow()
        logger.info("Agent %s initialized as %s", agent.id, agent.role)

    def terminate_agent(self, agent_id: str) -> dict[str, Any]:
        """Run role cleanup, mark the agent terminated and drop it."""
        agent = self._require(agent_id)
        logger.info("Terminating agent %s", agent_id)
        ROLE_CLEANUPS[agent.role](agent, self.registry)
        agent.status = AgentStatus.terminated
        agent.last_activity = utcnow()
        self.registry.remove(agent_id)
        return {"agentId": agent_id, "status": agent.status.value}

    # -- updates --

    def update_agent_status(
        self,
        agent_id: str,
        status: AgentStatus | str,
        metadata: Mapping[str, Any] | None = None,
    ) -> Agent:
        """Overwrite status, shallow-merge *metadata*, refresh activity time."""
        agent = self._require(agent_id)
        try:
            new_status = AgentStatus(status)
        except ValueError as exc:
            allowed = ", ".join(s.value for s in AgentStatus)
            raise ValidationError(
                f"Invalid agent status: {status}. Expected one of: {allowed}."
            ) from exc

        agent.status = new_status
        agent.metadata = {**agent.metadata, **dict(metadata or {})}
        agent.last_activity = utcnow()
        logger.info("Agent %s status updated to %s", agent_id, new_status)
        return agent

    # -- queries --

    def get_agent(self, agent_id: str) -> Agent:
        return self._require(agent_id)

    def get_agent_status(self, agent_id: str) -> AgentStatusSnapshot:
        return self._require(agent_id).snapshot()

    def get_all_agents(self) -> list[AgentSummary]:
        return [agent.summary() for agent in self.registry]

    def get_agents_by_role(self, role: str) -> list[AgentSummary]:
        return [agent.summary() for agent in self.registry if agent.role == role]

    def _require(self, agent_id: str) -> Agent:
        agent = self.registry.get(agent_id)
        if agent is None:
            raise NotFoundError(f"Agent not found: {agent_id}")
        return agent
