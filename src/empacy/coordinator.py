"""Coordinator: named request/response operations over the managers.

Every public coroutine returns ``{"success": True, ...}`` or
``{"success": False, "error": message}``.  Expected failures
(``EmpacyError`` and ``OSError``) are logged as warnings; anything else
is logged with its traceback.  No manager exception escapes.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from collections.abc import Callable
from collections.abc import Mapping
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from empacy.agents import AgentManager
from empacy.agents import AgentRole
from empacy.audit import AuditEventType
from empacy.audit import AuditLogger
from empacy.config import EmpacyConfig
from empacy.context import ContextManager
from empacy.errors import EmpacyError
from empacy.language import UbiquitousLanguageManager
from empacy.observability import health_report
from empacy.observability import track_operation
from empacy.projects import ProjectScaffolder

logger = logging.getLogger(__name__)

Result = dict[str, Any]

# Agents spawned for every new project, with the context names they expect.
PROJECT_AGENTS: tuple[tuple[AgentRole, tuple[str, ...]], ...] = (
    (AgentRole.cto_assistant, ("ubiquitous-language.yaml", "project-config.json")),
    (
        AgentRole.principal_engineer,
        ("ubiquitous-language.yaml", "project-config.json", "domain-design.md"),
    ),
)


class Coordinator:
    """Composes the agent, context and language managers with the scaffolder."""

    def __init__(
        self,
        config: EmpacyConfig | None = None,
        *,
        agents: AgentManager | None = None,
        context: ContextManager | None = None,
        language: UbiquitousLanguageManager | None = None,
        projects: ProjectScaffolder | None = None,
        audit: AuditLogger | None = None,
    ) -> None:
        self.config = config or EmpacyConfig()
        self.agents = agents or AgentManager()
        self.context = context or ContextManager(config=self.config.context)
        self.language = language or UbiquitousLanguageManager(
            config=self.config.language
        )
        self.projects = projects or ProjectScaffolder(self.config.projects)
        self.audit = audit or AuditLogger(self.config.audit)

    def reset(self) -> None:
        """Drop all in-memory agent, context and language state."""
        self.agents.registry.reset()
        self.context.store.reset()
        self.language.store.reset()

    async def _run(
        self, operation: str, action: Callable[[], Awaitable[Result]]
    ) -> Result:
        with track_operation(f"coordinator.{operation}") as outcome:
            try:
                result = await action()
            except (EmpacyError, OSError) as exc:
                outcome["ok"] = False
                logger.warning("%s failed: %s", operation, exc)
                return {"success": False, "error": str(exc)}
            except Exception as exc:
                outcome["ok"] = False
                logger.exception("%s failed unexpectedly", operation)
                return {"success": False, "error": str(exc) or type(exc).__name__}
        return {"success": True, **result}

    # ------------------------------------------------------------------
    # Agents
    # ------------------------------------------------------------------

    async def spawn_agent(
        self, role: str, context: Mapping[str, Any] | None = None
    ) -> Result:
        async def action() -> Result:
            agent = self.agents.spawn_agent(role, context)
            await self.audit.record(
                AuditEventType.AGENT_SPAWNED,
                "spawnAgent",
                agent_id=agent.id,
                role=agent.role.value,
            )
            return {
                "agentId": agent.id,
                "status": agent.status.value,
                "contextWarnings": list(agent.context_warnings),
            }

        return await self._run("spawnAgent", action)

    async def get_agent_status(self, agent_id: str) -> Result:
        async def action() -> Result:
            return {"status": self.agents.get_agent_status(agent_id).to_wire()}

        return await self._run("getAgentStatus", action)

    async def list_agents(self, role: str | None = None) -> Result:
        async def action() -> Result:
            summaries = (
                self.agents.get_agents_by_role(role)
                if role
                else self.agents.get_all_agents()
            )
            return {"agents": [summary.to_wire() for summary in summaries]}

        return await self._run("listAgents", action)

    async def update_agent_status(
        self,
        agent_id: str,
        status: str,
        metadata: Mapping[str, Any] | None = None,
    ) -> Result:
        async def action() -> Result:
            agent = self.agents.update_agent_status(agent_id, status, metadata)
            await self.audit.record(
                AuditEventType.AGENT_STATUS_UPDATED,
                "updateAgentStatus",
                agent_id=agent_id,
                status=agent.status.value,
            )
            return {"status": agent.snapshot().to_wire()}

        return await self._run("updateAgentStatus", action)

    async def terminate_agent(self, agent_id: str) -> Result:
        async def action() -> Result:
            result = self.agents.terminate_agent(agent_id)
            await self.audit.record(
                AuditEventType.AGENT_TERMINATED, "terminateAgent", agent_id=agent_id
            )
            return result

        return await self._run("terminateAgent", action)

    # ------------------------------------------------------------------
    # Context
    # ------------------------------------------------------------------

    async def distribute_context(
        self, agent_id: str, context_files: Sequence[str]
    ) -> Result:
        async def action() -> Result:
            package = await self.context.distribute_context(agent_id, context_files)
            version = self.context.get_context_version(agent_id)
            await self.audit.record(
                AuditEventType.CONTEXT_DISTRIBUTED,
                "distributeContext",
                agent_id=agent_id,
                version=version,
                files=[record.name for record in package.files],
            )
            return {
                "status": "context_distributed",
                "version": version,
                "totalFiles": package.metadata.total_files,
            }

        return await self._run("distributeContext", action)

    async def update_context(
        self, agent_id: str, context_files: Sequence[str]
    ) -> Result:
        async def action() -> Result:
            package = await self.context.update_context(agent_id, context_files)
            version = self.context.get_context_version(agent_id)
            await self.audit.record(
                AuditEventType.CONTEXT_DISTRIBUTED,
                "updateContext",
                agent_id=agent_id,
                version=version,
                files=[record.name for record in package.files],
            )
            return {
                "status": "context_updated",
                "version": version,
                "totalFiles": package.metadata.total_files,
            }

        return await self._run("updateContext", action)

    async def get_context(self, agent_id: str) -> Result:
        async def action() -> Result:
            package = self.context.get_context(agent_id)
            return {
                "context": package.to_wire(),
                "version": self.context.get_context_version(agent_id),
            }

        return await self._run("getContext", action)

    async def get_context_stats(self) -> Result:
        async def action() -> Result:
            return {"stats": self.context.get_context_stats().to_wire()}

        return await self._run("getContextStats", action)

    async def cleanup_old_context(self, max_age_ms: int | None = None) -> Result:
        async def action() -> Result:
            removed = self.context.cleanup_old_context(max_age_ms)
            await self.audit.record(
                AuditEventType.CONTEXT_CLEANED, "cleanupOldContext", removed=removed
            )
            return {"removed": removed}

        return await self._run("cleanupOldContext", action)

    # ------------------------------------------------------------------
    # Ubiquitous language
    # ------------------------------------------------------------------

    async def update_ubiquitous_language(
        self, concepts: Sequence[Mapping[str, Any]]
    ) -> Result:
        async def action() -> Result:
            counts = self.language.update_concepts(concepts)
            await self.audit.record(
                AuditEventType.LANGUAGE_UPDATED, "updateUbiquitousLanguage", **counts
            )
            return {"status": "language_updated", **counts}

        return await self._run("updateUbiquitousLanguage", action)

    async def search_concepts(
        self,
        query: str,
        domain: str | None = None,
        limit: int | None = None,
    ) -> Result:
        async def action() -> Result:
            hits = self.language.search_scored(query, domain=domain, limit=limit)
            return {
                "concepts": [
                    {**hit.concept.to_wire(), "score": hit.score} for hit in hits
                ]
            }

        return await self._run("searchConcepts", action)

    async def export_ubiquitous_language(self) -> Result:
        async def action() -> Result:
            return {"yaml": self.language.export_to_yaml()}

        return await self._run("exportUbiquitousLanguage", action)

    async def import_ubiquitous_language(self, content: str) -> Result:
        async def action() -> Result:
            counts = self.language.import_from_yaml(content)
            await self.audit.record(
                AuditEventType.LANGUAGE_IMPORTED, "importUbiquitousLanguage", **counts
            )
            return {"status": "language_imported", **counts}

        return await self._run("importUbiquitousLanguage", action)

    async def get_language_stats(self) -> Result:
        async def action() -> Result:
            return {"stats": self.language.get_stats().to_wire()}

        return await self._run("getLanguageStats", action)

    # ------------------------------------------------------------------
    # Projects and documents
    # ------------------------------------------------------------------

    async def create_project(
        self, name: str, description: str, domains: Sequence[str]
    ) -> Result:
        async def action() -> Result:
            project = await self.projects.create_project(name, description, domains)
            agent_ids = []
            for role, context_names in PROJECT_AGENTS:
                agent = self.agents.spawn_agent(
                    role,
                    {
                        "projectId": project.id,
                        "role": role.value,
                        "context": list(context_names),
                    },
                )
                agent_ids.append(agent.id)
            project.status = "created"
            await self.audit.record(
                AuditEventType.PROJECT_CREATED,
                "createProject",
                project_id=project.id,
                agent_ids=agent_ids,
            )
            return {"projectId": project.id, "status": "created", "agentIds": agent_ids}

        return await self._run("createProject", action)

    async def get_project_state(self, project_id: str) -> Result:
        async def action() -> Result:
            state = await self.projects.get_project_state(project_id)
            return {"state": state.to_wire(), "status": "project_state_retrieved"}

        return await self._run("getProjectState", action)

    async def generate_plantuml_diagram(
        self, diagram_type: str, content: str, output_path: str
    ) -> Result:
        async def action() -> Result:
            diagram = await self.projects.generate_plantuml_diagram(
                diagram_type, content, output_path
            )
            return {"diagramPath": diagram.path, "status": "diagram_generated"}

        return await self._run("generatePlantUMLDiagram", action)

    async def create_domain_phase(
        self,
        domain: str,
        phase_name: str,
        tasks: Sequence[Mapping[str, Any]] | None = None,
        context: Sequence[Any] | None = None,
        project_id: str | None = None,
    ) -> Result:
        async def action() -> Result:
            phase = await self.projects.create_domain_phase(
                domain, phase_name, tasks, context, project_id=project_id
            )
            return {"phaseId": phase.id, "path": phase.path, "status": "phase_created"}

        return await self._run("createDomainPhase", action)

    async def schedule_project(
        self,
        project_id: str,
        phases: Sequence[Mapping[str, Any]],
        dependencies: Sequence[Mapping[str, Any]] | None = None,
    ) -> Result:
        async def action() -> Result:
            schedule = await self.projects.schedule_project(
                project_id, phases, dependencies
            )
            return {
                "scheduleId": schedule.id,
                "path": schedule.path,
                "status": "project_scheduled",
            }

        return await self._run("scheduleProject", action)

    async def assign_work(
        self,
        agent_id: str,
        task_id: str,
        context: Sequence[str] | None = None,
        project_id: str | None = None,
    ) -> Result:
        async def action() -> Result:
            assignment = await self.projects.assign_work(
                agent_id, task_id, context, project_id=project_id
            )
            return {
                "assignmentId": assignment.id,
                "path": assignment.path,
                "status": "work_assigned",
            }

        return await self._run("assignWork", action)

    async def mark_domain_complete(
        self,
        domain: str,
        project_id: str,
        completion_data: Mapping[str, Any] | None = None,
    ) -> Result:
        async def action() -> Result:
            report = await self.projects.mark_domain_complete(
                domain, project_id, completion_data
            )
            return {"status": "domain_completed", "data": report.to_wire()}

        return await self._run("markDomainComplete", action)

    async def create_release(
        self,
        project_id: str,
        version: str,
        description: str = "",
        artifacts: Sequence[Mapping[str, Any]] | None = None,
    ) -> Result:
        async def action() -> Result:
            release = await self.projects.create_release(
                project_id, version, description, artifacts
            )
            await self.audit.record(
                AuditEventType.RELEASE_CREATED,
                "createRelease",
                project_id=project_id,
                version=version,
            )
            return {
                "releaseId": release.id,
                "path": release.path,
                "status": "release_created",
            }

        return await self._run("createRelease", action)

    async def read_file(self, path: str) -> Result:
        async def action() -> Result:
            return {"content": await self.projects.read_file(path), "status": "file_read"}

        return await self._run("readFile", action)

    async def write_file(self, path: str, content: str) -> Result:
        async def action() -> Result:
            size = await self.projects.write_file(path, content)
            return {"path": path, "bytesWritten": size, "status": "file_written"}

        return await self._run("writeFile", action)

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    def health(self) -> dict[str, Any]:
        projects_root = Path(self.config.projects.root_dir)
        return health_report(
            {
                "agents": {"healthy": True, "count": len(self.agents.registry)},
                "context": {
                    "healthy": True,
                    "packages": len(self.context.store.packages),
                },
                "language": {
                    "healthy": True,
                    "concepts": len(self.language.store.concepts),
                },
                "projects": {
                    "healthy": not projects_root.exists() or projects_root.is_dir(),
                    "rootDir": str(projects_root),
                },
                "audit": {"healthy": True, "enabled": self.audit.enabled},
            }
        )

    async def get_health(self) -> Result:
        async def action() -> Result:
            return self.health()

        return await self._run("getHealth", action)
