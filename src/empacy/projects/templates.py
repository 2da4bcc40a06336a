"""Markdown, YAML and PlantUML documents written by the scaffolder.

Pure string rendering: every function takes records and returns text.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any

import yaml

from empacy import __version__
from empacy.projects.schemas import Artifact
from empacy.projects.schemas import CompletionReport
from empacy.projects.schemas import ContextItem
from empacy.projects.schemas import Phase
from empacy.projects.schemas import Project
from empacy.projects.schemas import Release
from empacy.projects.schemas import Schedule
from empacy.projects.schemas import ScheduledPhase
from empacy.projects.schemas import WorkAssignment

TIMELINE_BAR = "█"
TIMELINE_MAX_WIDTH = 20


def _bullets(items: Iterable[str]) -> str:
    return "\n".join(f"- {item}" for item in items)


def _numbered(blocks: Iterable[str]) -> str:
    return "\n\n".join(f"{index}. {block}" for index, block in enumerate(blocks, 1))


def _context_label(item: str | ContextItem) -> str:
    return item.title if isinstance(item, ContextItem) else item


# ---------------------------------------------------------------------------
# Project files
# ---------------------------------------------------------------------------


def render_project_readme(project: Project) -> str:
    domain_sections = "\n\n".join(
        f"### {domain}\n- Implementation phases\n- Tests and validation\n- Documentation"
        for domain in project.domains
    )
    lines = [
        f"# {project.name}",
        "",
        "## Project Overview",
        "",
        project.description,
        "",
        "## Project Details",
        "",
        f"- **Project ID**: {project.id}",
        f"- **Created**: {project.created_at.isoformat()}",
        f"- **Status**: {project.status}",
        f"- **Domains**: {', '.join(project.domains)}",
        "",
        "## Domain Structure",
        "",
        domain_sections,
        "",
        "## Getting Started",
        "",
        "This project was created using Empacy - Multi-Agent MCP Server.",
        "",
        "## Development",
        "",
        "See individual domain directories for implementation details and phase planning.",
    ]
    return "\n".join(lines) + "\n"


def render_ubiquitous_language_seed(domains: Iterable[str]) -> str:
    """Empty language document with one entry per project domain."""
    document = {
        "domains": [
            {
                "name": domain,
                "shortName": "".join(domain.split()).upper(),
                "definition": f"Domain for {domain.lower()} functionality",
                "concepts": [],
                "acronyms": [],
            }
            for domain in domains
        ]
    }
    return yaml.safe_dump(document, sort_keys=False, allow_unicode=True)


def render_project_config(project: Project) -> dict[str, Any]:
    return project.to_wire(
        include={"id", "name", "description", "domains", "created_at", "status"}
    )


# ---------------------------------------------------------------------------
# Phases
# ---------------------------------------------------------------------------


def render_phase_plan(phase: Phase) -> str:
    tasks = _numbered(
        f"**{task.title}**\n"
        f"   - Description: {task.description}\n"
        f"   - Estimated effort: {task.estimated_effort}\n"
        f"   - Dependencies: {', '.join(task.dependencies) or 'None'}\n"
        f"   - Acceptance criteria: {task.acceptance_criteria}"
        for task in phase.tasks
    )
    lines = [
        f"# Phase: {phase.name}",
        "",
        f"## Domain: {phase.domain}",
        "",
        "## Tasks",
        "",
        tasks,
        "",
        "## Context",
        "",
        "This phase requires the following context:",
        _bullets(_context_label(item) for item in phase.context),
        "",
        "## Status",
        "",
        f"- **Created**: {phase.created_at.isoformat()}",
        f"- **Current Status**: {phase.status}",
        f"- **Phase ID**: {phase.id}",
        "",
        "## Notes",
        "",
        "Add implementation notes and progress updates here.",
    ]
    return "\n".join(lines) + "\n"


def _digest_entry(item: str | ContextItem) -> str:
    if not isinstance(item, ContextItem):
        return f"### Context Item\n{item}"
    parts = [f"### {item.title}\n{item.description}"]
    if item.details:
        parts.append(f"**Details:**\n{item.details}")
    if item.references:
        parts.append(f"**References:**\n{_bullets(item.references)}")
    return "\n\n".join(parts)


def render_context_digest(context: Iterable[str | ContextItem], now: datetime) -> str:
    lines = [
        "# Context Digest",
        "",
        "## Required Context for Phase Implementation",
        "",
        "\n\n".join(_digest_entry(item) for item in context),
        "",
        "## Context Summary",
        "",
        "This digest contains all the context information needed to implement "
        "the phase successfully.",
        "Refer to the original source files for the most up-to-date information.",
        "",
        "## Last Updated",
        "",
        now.isoformat(),
    ]
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# Scheduling and assignment
# ---------------------------------------------------------------------------


def render_timeline(phases: Iterable[ScheduledPhase]) -> str:
    """One bar per phase, a block per day capped at ``TIMELINE_MAX_WIDTH``."""
    rows = []
    for phase in phases:
        width = max(0, min(phase.days, TIMELINE_MAX_WIDTH))
        rows.append(f"{phase.name}: {TIMELINE_BAR * width} ({phase.days} days)")
    return "\n".join(rows)


def render_schedule(schedule: Schedule) -> str:
    phases = _numbered(
        f"**{phase.name}** ({phase.domain})\n"
        f"   - Duration: {phase.duration}\n"
        f"   - Start: {phase.start_date.isoformat()}\n"
        f"   - End: {phase.end_date.isoformat()}\n"
        f"   - Dependencies: {', '.join(phase.dependencies) or 'None'}"
        for phase in schedule.phases
    )
    dependencies = "\n\n".join(
        f"- **{dep.source}** → **{dep.target}**\n"
        f"   - Type: {dep.type}\n"
        f"   - Critical: {'Yes' if dep.critical else 'No'}"
        for dep in schedule.dependencies
    )
    lines = [
        "# Project Schedule",
        "",
        f"## Project ID: {schedule.project_id}",
        "",
        "## Phases",
        "",
        phases,
        "",
        "## Dependencies",
        "",
        dependencies,
        "",
        "## Timeline",
        "",
        render_timeline(schedule.phases),
        "",
        "## Status",
        "",
        f"- **Created**: {schedule.created_at.isoformat()}",
        f"- **Current Status**: {schedule.status}",
        f"- **Schedule ID**: {schedule.id}",
        "",
        "## Notes",
        "",
        "Add scheduling notes and updates here.",
    ]
    return "\n".join(lines) + "\n"


def render_work_assignment(assignment: WorkAssignment) -> str:
    lines = [
        "# Work Assignment",
        "",
        f"## Assignment ID: {assignment.id}",
        "",
        "## Assigned To",
        "",
        f"- **Agent ID**: {assignment.agent_id}",
        f"- **Task ID**: {assignment.task_id}",
        f"- **Assigned**: {assignment.assigned_at.isoformat()}",
        "",
        "## Context",
        "",
        _bullets(assignment.context),
        "",
        "## Status",
        "",
        f"- **Current Status**: {assignment.status}",
        "- **Progress**: 0%",
        "",
        "## Notes",
        "",
        "Add progress notes and updates here.",
        "",
        "## Completion Criteria",
        "",
        "[To be defined based on task requirements]",
    ]
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# Completion and release
# ---------------------------------------------------------------------------


def _artifact_block(artifact: Artifact, last_field: str) -> str:
    if last_field == "version":
        tail = f"  - Version: {artifact.version or 'N/A'}"
    else:
        tail = f"  - Description: {artifact.description}"
    return (
        f"- **{artifact.name}**\n"
        f"  - Type: {artifact.type}\n"
        f"  - Path: {artifact.path}\n"
        f"{tail}"
    )


def render_completion_report(report: CompletionReport) -> str:
    lines = [
        "# Domain Completion Report",
        "",
        f"## Domain: {report.domain}",
        "",
        f"## Project ID: {report.project_id}",
        "",
        "## Completion Details",
        "",
        f"- **Completed At**: {report.completed_at.isoformat()}",
        "- **Status**: Completed",
        "",
        "## Artifacts Delivered",
        "",
        "\n\n".join(_artifact_block(a, "description") for a in report.artifacts),
        "",
        "## Quality Metrics",
        "",
        "\n".join(
            f"- **{metric}**: {value}"
            for metric, value in report.quality_metrics.items()
        ),
        "",
        "## Notes",
        "",
        report.notes,
        "",
        "## Next Steps",
        "",
        "This domain has been completed successfully. The Project Manager should "
        "review the artifacts and proceed with the next phase or project completion.",
    ]
    return "\n".join(lines) + "\n"


def render_release_notes(release: Release) -> str:
    lines = [
        f"# Release Notes - {release.version}",
        "",
        f"## Project ID: {release.project_id}",
        "",
        "## Release Information",
        "",
        f"- **Version**: {release.version}",
        f"- **Created**: {release.created_at.isoformat()}",
        f"- **Status**: {release.status}",
        "",
        "## Description",
        "",
        release.description,
        "",
        "## Artifacts Included",
        "",
        "\n\n".join(_artifact_block(a, "version") for a in release.artifacts),
        "",
        "## Changes in This Release",
        "",
        "[To be filled in by development team]",
        "",
        "## Known Issues",
        "",
        "[To be filled in by QA team]",
        "",
        "## Installation Instructions",
        "",
        "[To be filled in by DevOps team]",
        "",
        "## Rollback Plan",
        "",
        "[To be filled in by DevOps team]",
    ]
    return "\n".join(lines) + "\n"


def render_release_manifest(release: Release, now: datetime) -> dict[str, Any]:
    return {
        "releaseId": release.id,
        "projectId": release.project_id,
        "version": release.version,
        "description": release.description,
        "createdAt": release.created_at.isoformat(),
        "status": release.status,
        "artifacts": [
            artifact.to_wire(
                include={"name", "type", "path", "version", "checksum"}
            )
            for artifact in release.artifacts
        ],
        "metadata": {
            "generatedBy": "Empacy MCP Server",
            "generatorVersion": __version__,
            "timestamp": now.isoformat(),
        },
    }


# ---------------------------------------------------------------------------
# Diagrams
# ---------------------------------------------------------------------------


def render_plantuml(diagram_type: str, body: str) -> str:
    return f"@startuml {diagram_type}\n!theme plain\n\n{body}\n@enduml"
