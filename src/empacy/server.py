"""Empacy: FastMCP v2 server exposing the Coordinator operations as tools.

Tool names are the camelCase operation names (``spawnAgent``,
``distributeContext`` ...).  Call ``configure()`` before serving.
"""

from __future__ import annotations

import logging
from typing import Any

from fastmcp import FastMCP

from empacy.audit import AuditLogger
from empacy.config import EmpacyConfig
from empacy.coordinator import Coordinator
from empacy.observability import reset_operation_metrics

logger = logging.getLogger(__name__)

mcp = FastMCP("Empacy")

# ---------------------------------------------------------------------------
# Coordinator instance (set via configure())
# ---------------------------------------------------------------------------

_coordinator: Coordinator | None = None


async def configure(
    config: EmpacyConfig | None = None,
    *,
    coordinator: Coordinator | None = None,
) -> Coordinator:
    """Build (or install) the Coordinator the tools delegate to.

    Must be called before the MCP tools can function.
    """
    global _coordinator
    cfg = config or EmpacyConfig()
    _coordinator = coordinator or Coordinator(cfg, audit=AuditLogger(cfg.audit))
    logger.info(
        "Empacy configured: projects=%s context_root=%s audit=%s",
        cfg.projects.root_dir,
        cfg.context.root_dir,
        "on" if cfg.audit.enabled else "off",
    )
    return _coordinator


async def shutdown() -> None:
    """Release the Coordinator and its in-memory state."""
    global _coordinator
    if _coordinator is not None:
        _coordinator.reset()
    _coordinator = None


async def _reset_state() -> None:
    """Clear registries and metrics; used for test cleanup."""
    if _coordinator is not None:
        _coordinator.reset()
    reset_operation_metrics()


def _get_coordinator() -> Coordinator:
    """Return the configured Coordinator or raise."""
    if _coordinator is None:
        raise RuntimeError("Empacy not configured. Call configure() first.")
    return _coordinator


# ---------------------------------------------------------------------------
# Agents
# ---------------------------------------------------------------------------


@mcp.tool(name="spawnAgent")
async def spawn_agent(role: str, context: dict[str, Any] | None = None) -> dict:
    """Spawn an agent with the given role.

    Args:
        role: One of cto, cto-assistant, principal-engineer, domain-director,
            project-manager.
        context: Context names available to the agent (soft-checked).
    """
    return await _get_coordinator().spawn_agent(role, context)


@mcp.tool(name="getAgentStatus")
async def get_agent_status(agent_id: str) -> dict:
    """Return the status snapshot of one agent."""
    return await _get_coordinator().get_agent_status(agent_id)


@mcp.tool(name="listAgents")
async def list_agents(role: str | None = None) -> dict:
    """List agents, optionally filtered by role."""
    return await _get_coordinator().list_agents(role)


@mcp.tool(name="updateAgentStatus")
async def update_agent_status(
    agent_id: str, status: str, metadata: dict[str, Any] | None = None
) -> dict:
    """Set an agent's status and merge metadata into it."""
    return await _get_coordinator().update_agent_status(agent_id, status, metadata)


@mcp.tool(name="terminateAgent")
async def terminate_agent(agent_id: str) -> dict:
    """Terminate an agent and remove it from the registry."""
    return await _get_coordinator().terminate_agent(agent_id)


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------


@mcp.tool(name="distributeContext")
async def distribute_context(agent_id: str, context_files: list[str]) -> dict:
    """Build a new versioned context package for an agent.

    Args:
        agent_id: Agent that owns the package.
        context_files: File names resolved against the context root.
            Unreadable files are skipped.
    """
    return await _get_coordinator().distribute_context(agent_id, context_files)


@mcp.tool(name="updateContext")
async def update_context(agent_id: str, context_files: list[str]) -> dict:
    """Replace an agent's context package."""
    return await _get_coordinator().update_context(agent_id, context_files)


@mcp.tool(name="getContext")
async def get_context(agent_id: str) -> dict:
    """Return an agent's current context package and version."""
    return await _get_coordinator().get_context(agent_id)


@mcp.tool(name="getContextStats")
async def get_context_stats() -> dict:
    """Aggregate counts across all context packages."""
    return await _get_coordinator().get_context_stats()


@mcp.tool(name="cleanupOldContext")
async def cleanup_old_context(max_age_ms: int | None = None) -> dict:
    """Delete context packages older than ``max_age_ms`` (default one day)."""
    return await _get_coordinator().cleanup_old_context(max_age_ms)


# ---------------------------------------------------------------------------
# Ubiquitous language
# ---------------------------------------------------------------------------


@mcp.tool(name="updateUbiquitousLanguage")
async def update_ubiquitous_language(concepts: list[dict[str, Any]]) -> dict:
    """Create or merge concepts.

    Args:
        concepts: Objects with name, domain and definition, plus optional
            shortName, synonyms, relatedConcepts and metadata.
    """
    return await _get_coordinator().update_ubiquitous_language(concepts)


@mcp.tool(name="searchConcepts")
async def search_concepts(
    query: str, domain: str | None = None, limit: int | None = None
) -> dict:
    """Rank concepts matching a case-insensitive query."""
    return await _get_coordinator().search_concepts(query, domain, limit)


@mcp.tool(name="exportUbiquitousLanguage")
async def export_ubiquitous_language() -> dict:
    """Export the language registry as YAML."""
    return await _get_coordinator().export_ubiquitous_language()


@mcp.tool(name="importUbiquitousLanguage")
async def import_ubiquitous_language(content: str) -> dict:
    """Import a YAML document produced by exportUbiquitousLanguage."""
    return await _get_coordinator().import_ubiquitous_language(content)


@mcp.tool(name="getLanguageStats")
async def get_language_stats() -> dict:
    return await _get_coordinator().get_language_stats()


# ---------------------------------------------------------------------------
# Projects and documents
# ---------------------------------------------------------------------------


@mcp.tool(name="createProject")
async def create_project(name: str, description: str, domains: list[str]) -> dict:
    """Scaffold a project and spawn its initial agents."""
    return await _get_coordinator().create_project(name, description, domains)


@mcp.tool(name="getProjectState")
async def get_project_state(project_id: str) -> dict:
    """Report per-domain and overall progress of a project."""
    return await _get_coordinator().get_project_state(project_id)


@mcp.tool(name="generatePlantUMLDiagram")
async def generate_plantuml_diagram(
    diagram_type: str, content: str, output_path: str
) -> dict:
    """Write a PlantUML diagram file.

    Args:
        diagram_type: Diagram name placed after ``@startuml``.
        content: Diagram body.
        output_path: Destination file; parent directories are created.
    """
    return await _get_coordinator().generate_plantuml_diagram(
        diagram_type, content, output_path
    )


@mcp.tool(name="createDomainPhase")
async def create_domain_phase(
    domain: str,
    phase_name: str,
    tasks: list[dict[str, Any]] | None = None,
    context: list[Any] | None = None,
    project_id: str | None = None,
) -> dict:
    """Write the phase plan and context digest for a domain phase."""
    return await _get_coordinator().create_domain_phase(
        domain, phase_name, tasks, context, project_id
    )


@mcp.tool(name="scheduleProject")
async def schedule_project(
    project_id: str,
    phases: list[dict[str, Any]],
    dependencies: list[dict[str, Any]] | None = None,
) -> dict:
    """Write the project schedule with a per-phase timeline."""
    return await _get_coordinator().schedule_project(project_id, phases, dependencies)


@mcp.tool(name="assignWork")
async def assign_work(
    agent_id: str,
    task_id: str,
    context: list[str] | None = None,
    project_id: str | None = None,
) -> dict:
    """Write a work assignment document for an agent."""
    return await _get_coordinator().assign_work(agent_id, task_id, context, project_id)


@mcp.tool(name="markDomainComplete")
async def mark_domain_complete(
    domain: str, project_id: str, completion_data: dict[str, Any] | None = None
) -> dict:
    """Write a completion report and mark the domain completed."""
    return await _get_coordinator().mark_domain_complete(
        domain, project_id, completion_data
    )


@mcp.tool(name="createRelease")
async def create_release(
    project_id: str,
    version: str,
    description: str = "",
    artifacts: list[dict[str, Any]] | None = None,
) -> dict:
    """Write release notes and a JSON manifest."""
    return await _get_coordinator().create_release(
        project_id, version, description, artifacts
    )


@mcp.tool(name="readFile")
async def read_file(path: str) -> dict:
    return await _get_coordinator().read_file(path)


@mcp.tool(name="writeFile")
async def write_file(path: str, content: str) -> dict:
    return await _get_coordinator().write_file(path, content)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@mcp.tool(name="getHealth")
async def get_health() -> dict:
    """Component status, uptime and per-operation latency."""
    return await _get_coordinator().get_health()
