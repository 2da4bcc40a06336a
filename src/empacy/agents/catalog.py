"""Static agent type catalog: role → capabilities and required context."""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from empacy.models import FrozenWireModel


class AgentRole(StrEnum):
    """Closed set of roles an agent can be spawned with."""

    cto = "cto"
    cto_assistant = "cto-assistant"
    principal_engineer = "principal-engineer"
    domain_director = "domain-director"
    project_manager = "project-manager"


class AgentTypeDescriptor(FrozenWireModel):
    """Immutable catalog entry describing one class of agent."""

    role: AgentRole
    name: str = Field(description="Human readable role name.")
    description: str = ""
    capabilities: tuple[str, ...] = ()
    required_context: tuple[str, ...] = Field(
        default=(),
        description="Context names the role expects; checked softly on spawn.",
    )


AGENT_TYPES: dict[AgentRole, AgentTypeDescriptor] = {
    AgentRole.cto: AgentTypeDescriptor(
        role=AgentRole.cto,
        name="CTO",
        description="Strategic decision maker and orchestrator",
        capabilities=("vision", "strategy", "coordination"),
        required_context=("ubiquitous-language.yaml", "vision.md"),
    ),
    AgentRole.cto_assistant: AgentTypeDescriptor(
        role=AgentRole.cto_assistant,
        name="CTO-Assistant",
        description="Content refinement and ubiquitous language management",
        capabilities=("summarization", "language-management", "content-quality"),
        required_context=("ubiquitous-language.yaml",),
    ),
    AgentRole.principal_engineer: AgentTypeDescriptor(
        role=AgentRole.principal_engineer,
        name="Principal Engineer",
        description="Technical architecture and infrastructure",
        capabilities=("architecture", "infrastructure", "quality-tools"),
        required_context=("project-config.json", "domain-design.md"),
    ),
    AgentRole.domain_director: AgentTypeDescriptor(
        role=AgentRole.domain_director,
        name="Domain Director",
        description="Domain-specific planning and task breakdown",
        capabilities=("planning", "task-breakdown", "context-digest"),
        required_context=("project-config.json", "ubiquitous-language.yaml"),
    ),
    AgentRole.project_manager: AgentTypeDescriptor(
        role=AgentRole.project_manager,
        name="Project Manager",
        description="Task scheduling and dependency management",
        capabilities=("scheduling", "dependency-management", "conflict-resolution"),
        required_context=("project-config.json", "domain-phases"),
    ),
}


def get_agent_type(role: str) -> AgentTypeDescriptor | None:
    """Return the catalog entry for *role*, or ``None`` when unregistered."""
    try:
        return AGENT_TYPES[AgentRole(role)]
    except ValueError:
        return None
