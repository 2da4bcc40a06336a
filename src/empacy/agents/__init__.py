"""Agents domain: role catalog, agent registry and lifecycle manager."""

from empacy.agents.catalog import AGENT_TYPES
from empacy.agents.catalog import AgentRole
from empacy.agents.catalog import AgentTypeDescriptor
from empacy.agents.catalog import get_agent_type
from empacy.agents.manager import AgentManager
from empacy.agents.manager import check_required_context
from empacy.agents.schemas import Agent
from empacy.agents.schemas import AgentStatus
from empacy.agents.schemas import AgentStatusSnapshot
from empacy.agents.schemas import AgentSummary
from empacy.agents.store import AgentRegistry

__all__ = [
    "AGENT_TYPES",
    "Agent",
    "AgentManager",
    "AgentRegistry",
    "AgentRole",
    "AgentStatus",
    "AgentStatusSnapshot",
    "AgentSummary",
    "AgentTypeDescriptor",
    "check_required_context",
    "get_agent_type",
]
