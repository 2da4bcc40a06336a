"""Project scaffolding: directory trees and planning documents on disk.

All file-system work runs in ``asyncio.to_thread``.  Project ids and
domain, phase and release names become path segments and are rejected
when they could escape the projects root.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
import uuid
from collections.abc import Callable
from collections.abc import Mapping
from collections.abc import Sequence
from datetime import datetime
from datetime import UTC
from pathlib import Path
from typing import Any
from typing import TypeVar

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from empacy.config import ProjectsConfig
from empacy.errors import NotFoundError
from empacy.errors import ValidationError
from empacy.projects import templates
from empacy.projects.schemas import Artifact
from empacy.projects.schemas import CompletionData
from empacy.projects.schemas import CompletionReport
from empacy.projects.schemas import ContextItem
from empacy.projects.schemas import Diagram
from empacy.projects.schemas import DomainState
from empacy.projects.schemas import Phase
from empacy.projects.schemas import PhaseDependency
from empacy.projects.schemas import PhaseTask
from empacy.projects.schemas import Project
from empacy.projects.schemas import ProjectState
from empacy.projects.schemas import Release
from empacy.projects.schemas import Schedule
from empacy.projects.schemas import ScheduledPhase
from empacy.projects.schemas import WorkAssignment

logger = logging.getLogger(__name__)

T = TypeVar("T")

PROJECT_CONFIG_FILE = "project-config.json"
DOMAIN_SUBDIRS = ("phases", "implementation", "tests")
SHARED_DIRS = ("shared", "docs", "ci-cd")

_TASKS = TypeAdapter(list[PhaseTask])
_CONTEXT = TypeAdapter(list[str | ContextItem])
_STRINGS = TypeAdapter(list[str])
_PHASES = TypeAdapter(list[ScheduledPhase])
_DEPENDENCIES = TypeAdapter(list[PhaseDependency])
_ARTIFACTS = TypeAdapter(list[Artifact])
_COMPLETION = TypeAdapter(CompletionData)


def _new_id(prefix: str) -> str:
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def _parse(adapter: TypeAdapter[T], value: Any, label: str) -> T:
    try:
        return adapter.validate_python(value if value is not None else [])
    except PydanticValidationError as exc:
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()))
        message = first.get("msg", "invalid value")
        raise ValidationError(f"Invalid {label} at '{location}': {message}") from exc


def _segment(value: str, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label} must be a non-empty string")
    if value in {".", ".."} or "/" in value or "\\" in value:
        raise ValidationError(f"{label} must not contain path separators: {value}")
    return value


def _write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def _write_json(path: Path, data: Any) -> None:
    _write_text(path, json.dumps(data, indent=2))


def _has_entries(path: Path) -> bool:
    return path.is_dir() and any(path.iterdir())


def overall_status(domains: Sequence[DomainState]) -> str:
    """Roll per-domain statuses up into one project status."""
    statuses = [domain.status for domain in domains]
    if not statuses:
        return "pending"
    if all(status == "implemented" for status in statuses):
        return "completed"
    if any(status == "implemented" for status in statuses):
        return "in-progress"
    if all(status == "planned" for status in statuses):
        return "planned"
    return "pending"


class ProjectScaffolder:
    """Writes project trees and documents under ``ProjectsConfig.root_dir``."""

    def __init__(
        self,
        config: ProjectsConfig | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config or ProjectsConfig()
        self.root = Path(self.config.root_dir)
        self._clock = clock or (lambda: datetime.now(tz=UTC))

    # ------------------------------------------------------------------
    # Path resolution
    # ------------------------------------------------------------------

    def project_dir(self, project_id: str) -> Path:
        return self.root / _segment(project_id, "projectId")

    async def _existing_project(self, project_id: str | None) -> Path:
        """Return the project directory, creating it only for the default project."""
        project_id = project_id or self.config.default_project
        path = self.project_dir(project_id)
        if project_id == self.config.default_project:
            await asyncio.to_thread(path.mkdir, parents=True, exist_ok=True)
        elif not await asyncio.to_thread(path.is_dir):
            raise NotFoundError(f"Project not found: {project_id}")
        return path

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    async def create_project(
        self, name: str, description: str, domains: Sequence[str]
    ) -> Project:
        """Create the directory tree and seed files for a new project."""
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Project name must be a non-empty string")
        domain_names = _parse(_STRINGS, domains, "domains")
        for domain in domain_names:
            _segment(domain, "domain")
        logger.info("Creating project %s with %d domains", name, len(domain_names))

        project = Project(
            id=_new_id("project"),
            name=name,
            description=description or "",
            domains=domain_names,
            created_at=self._clock(),
        )
        path = self.project_dir(project.id)
        project.path = str(path)
        await asyncio.to_thread(self._build_tree, path, project)
        logger.info("Project %s initialized at %s", project.id, path)
        return project

    def _build_tree(self, path: Path, project: Project) -> None:
        for domain in project.domains:
            for sub in DOMAIN_SUBDIRS:
                (path / "domains" / domain / sub).mkdir(parents=True, exist_ok=True)
        for shared in SHARED_DIRS:
            (path / shared).mkdir(parents=True, exist_ok=True)

        _write_json(
            path / PROJECT_CONFIG_FILE, templates.render_project_config(project)
        )
        _write_text(path / "README.md", templates.render_project_readme(project))
        _write_text(
            path / "ubiquitous-language.yaml",
            templates.render_ubiquitous_language_seed(project.domains),
        )

    async def get_project_state(self, project_id: str) -> ProjectState:
        path = self.project_dir(project_id)
        return await asyncio.to_thread(self._read_state, project_id, path)

    def _read_state(self, project_id: str, path: Path) -> ProjectState:
        config_path = path / PROJECT_CONFIG_FILE
        try:
            config = json.loads(config_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Failed to read project config %s: %s", config_path, exc)
            raise NotFoundError(f"Project not found or invalid: {project_id}") from exc

        domains = [
            self._domain_state(path / "domains" / name, name)
            for name in config.get("domains", [])
        ]
        schedule_path = path / "project-schedule.md"
        schedule: dict[str, Any] = {"exists": schedule_path.is_file()}
        if schedule["exists"]:
            schedule["path"] = str(schedule_path)

        return ProjectState(
            project_id=project_id,
            config=config,
            domains=domains,
            schedule=schedule,
            overall_status=overall_status(domains),
            last_updated=self._clock(),
        )

    @staticmethod
    def _domain_state(path: Path, name: str) -> DomainState:
        has_phases = _has_entries(path / "phases")
        has_implementation = _has_entries(path / "implementation")
        completed = False
        status_file = path / "status.json"
        if status_file.is_file():
            try:
                completed = (
                    json.loads(status_file.read_text(encoding="utf-8")).get("status")
                    == "completed"
                )
            except json.JSONDecodeError:
                logger.warning("Ignoring malformed domain status file %s", status_file)

        if completed or has_implementation:
            status = "implemented"
        elif has_phases:
            status = "planned"
        else:
            status = "pending"
        return DomainState(
            name=name,
            has_phases=has_phases,
            has_implementation=has_implementation,
            completed=completed,
            status=status,
        )

    # ------------------------------------------------------------------
    # Planning documents
    # ------------------------------------------------------------------

    async def create_domain_phase(
        self,
        domain: str,
        phase_name: str,
        tasks: Sequence[Mapping[str, Any]] | None = None,
        context: Sequence[str | Mapping[str, Any]] | None = None,
        *,
        project_id: str | None = None,
    ) -> Phase:
        """Write ``phase-plan.md`` and ``context-digest.md`` for one phase."""
        _segment(domain, "domain")
        _segment(phase_name, "phaseName")
        project_path = await self._existing_project(project_id)
        phase = Phase(
            id=_new_id("phase"),
            project_id=project_path.name,
            domain=domain,
            name=phase_name,
            tasks=_parse(_TASKS, tasks, "tasks"),
            context=_parse(_CONTEXT, context, "context"),
            created_at=self._clock(),
        )
        phase_dir = project_path / "domains" / domain / "phases" / phase_name
        phase.path = str(phase_dir)
        logger.info("Creating phase %s for domain %s", phase_name, domain)

        plan = templates.render_phase_plan(phase)
        digest = templates.render_context_digest(phase.context, self._clock())
        await asyncio.to_thread(_write_text, phase_dir / "phase-plan.md", plan)
        await asyncio.to_thread(_write_text, phase_dir / "context-digest.md", digest)
        return phase

    async def schedule_project(
        self,
        project_id: str,
        phases: Sequence[Mapping[str, Any]],
        dependencies: Sequence[Mapping[str, Any]] | None = None,
    ) -> Schedule:
        """Write ``project-schedule.md`` with a per-phase day timeline."""
        project_path = await self._existing_project(project_id)
        schedule = Schedule(
            id=_new_id("schedule"),
            project_id=project_path.name,
            phases=_parse(_PHASES, phases, "phases"),
            dependencies=_parse(_DEPENDENCIES, dependencies, "dependencies"),
            created_at=self._clock(),
        )
        target = project_path / "project-schedule.md"
        schedule.path = str(target)
        logger.info(
            "Scheduling project %s with %d phases", project_id, len(schedule.phases)
        )
        await asyncio.to_thread(
            _write_text, target, templates.render_schedule(schedule)
        )
        return schedule

    async def assign_work(
        self,
        agent_id: str,
        task_id: str,
        context: Sequence[str] | None = None,
        *,
        project_id: str | None = None,
    ) -> WorkAssignment:
        project_path = await self._existing_project(project_id)
        assignment = WorkAssignment(
            id=_new_id("assignment"),
            agent_id=agent_id,
            task_id=task_id,
            context=_parse(_STRINGS, context, "context"),
            assigned_at=self._clock(),
        )
        target = project_path / "assignments" / f"{assignment.id}.md"
        assignment.path = str(target)
        logger.info("Assigning task %s to agent %s", task_id, agent_id)
        await asyncio.to_thread(
            _write_text, target, templates.render_work_assignment(assignment)
        )
        return assignment

    # ------------------------------------------------------------------
    # Completion and release
    # ------------------------------------------------------------------

    async def mark_domain_complete(
        self,
        domain: str,
        project_id: str,
        completion_data: Mapping[str, Any] | None = None,
    ) -> CompletionReport:
        """Write the completion report and flip ``status.json`` to completed."""
        _segment(domain, "domain")
        domain_dir = self.project_dir(project_id) / "domains" / domain
        if not await asyncio.to_thread(domain_dir.is_dir):
            raise NotFoundError(f"Domain not found: {domain} in project {project_id}")
        data = _parse(_COMPLETION, completion_data or {}, "completionData")

        now = self._clock()
        report = CompletionReport(
            domain=domain,
            project_id=project_id,
            completed_at=now,
            artifacts=data.artifacts,
            notes=data.notes,
            quality_metrics=data.quality_metrics,
            path=str(domain_dir / "completion-report.md"),
        )
        status = {
            "domain": domain,
            "projectId": project_id,
            "status": "completed",
            "completedAt": now.isoformat(),
            "lastUpdated": now.isoformat(),
        }
        await asyncio.to_thread(
            _write_text, Path(report.path), templates.render_completion_report(report)
        )
        await asyncio.to_thread(_write_json, domain_dir / "status.json", status)
        logger.info("Domain %s marked complete in project %s", domain, project_id)
        return report

    async def create_release(
        self,
        project_id: str,
        version: str,
        description: str = "",
        artifacts: Sequence[Mapping[str, Any]] | None = None,
    ) -> Release:
        """Write release notes and a JSON manifest under ``releases/<version>``."""
        project_path = await self._existing_project(project_id)
        release = Release(
            id=_new_id("release"),
            project_id=project_path.name,
            version=_segment(version, "version"),
            description=description or "",
            artifacts=_parse(_ARTIFACTS, artifacts, "artifacts"),
            created_at=self._clock(),
        )
        release_dir = project_path / "releases" / version
        release.path = str(release_dir)
        await asyncio.to_thread(
            _write_text,
            release_dir / "release-notes.md",
            templates.render_release_notes(release),
        )
        await asyncio.to_thread(
            _write_json,
            release_dir / "manifest.json",
            templates.render_release_manifest(release, self._clock()),
        )
        logger.info("Release %s created for project %s", version, project_id)
        return release

    # ------------------------------------------------------------------
    # Raw files and diagrams
    # ------------------------------------------------------------------

    async def generate_plantuml_diagram(
        self, diagram_type: str, content: str, output_path: str
    ) -> Diagram:
        diagram = Diagram(
            path=output_path,
            type=diagram_type,
            content=templates.render_plantuml(diagram_type, content),
        )
        await asyncio.to_thread(_write_text, Path(output_path), diagram.content)
        logger.info("PlantUML %s diagram written to %s", diagram_type, output_path)
        return diagram

    async def read_file(self, path: str) -> str:
        return await asyncio.to_thread(Path(path).read_text, encoding="utf-8")

    async def write_file(self, path: str, content: str) -> int:
        """Write *content* to *path*, creating parents. Returns bytes written."""
        await asyncio.to_thread(_write_text, Path(path), content)
        logger.info("Wrote file %s", path)
        return len(content.encode("utf-8"))
