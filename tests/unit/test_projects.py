"""Unit tests for project scaffolding and document rendering."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest
import yaml

from empacy.config import ProjectsConfig
from empacy.errors import NotFoundError
from empacy.errors import ValidationError
from empacy.projects import DomainState
from empacy.projects import overall_status
from empacy.projects import ProjectScaffolder
from empacy.projects.schemas import ScheduledPhase
from empacy.projects.templates import render_plantuml
from empacy.projects.templates import render_timeline


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@pytest.fixture()
def scaffolder(tmp_path: Path) -> ProjectScaffolder:
    return ProjectScaffolder(ProjectsConfig(root_dir=str(tmp_path / "projects")))


def _task(title: str, *deps: str) -> dict:
    return {
        "title": title,
        "description": f"Do {title}",
        "estimatedEffort": "2d",
        "dependencies": list(deps),
        "acceptanceCriteria": "Tests pass",
    }


def _phase(name: str, start: str, end: str) -> dict:
    return {
        "name": name,
        "domain": "billing",
        "duration": "n/a",
        "startDate": start,
        "endDate": end,
    }


# ---------------------------------------------------------------------------
# Project creation
# ---------------------------------------------------------------------------


class TestCreateProject:
    async def test_tree_and_seed_files(self, scaffolder):
        project = await scaffolder.create_project(
            "Shop", "Online shop", ["billing", "catalog"]
        )
        root = Path(project.path)

        for domain in ("billing", "catalog"):
            for sub in ("phases", "implementation", "tests"):
                assert (root / "domains" / domain / sub).is_dir()
        for shared in ("shared", "docs", "ci-cd"):
            assert (root / shared).is_dir()

        config = json.loads((root / "project-config.json").read_text())
        assert config["id"] == project.id
        assert config["domains"] == ["billing", "catalog"]
        assert "createdAt" in config

        readme = (root / "README.md").read_text()
        assert readme.startswith("# Shop\n")
        assert "- **Domains**: billing, catalog" in readme

        language = yaml.safe_load((root / "ubiquitous-language.yaml").read_text())
        assert [d["name"] for d in language["domains"]] == ["billing", "catalog"]
        assert language["domains"][0]["concepts"] == []

    async def test_project_ids_are_unique(self, scaffolder):
        first = await scaffolder.create_project("A", "", ["x"])
        second = await scaffolder.create_project("B", "", ["x"])
        assert first.id != second.id
        assert first.id.startswith("project_")

    @pytest.mark.parametrize("domains", [["../escape"], [""], "billing"])
    async def test_rejects_bad_domains(self, scaffolder, domains):
        with pytest.raises(ValidationError):
            await scaffolder.create_project("Shop", "", domains)

    async def test_rejects_empty_name(self, scaffolder):
        with pytest.raises(ValidationError):
            await scaffolder.create_project("  ", "", ["billing"])


# ---------------------------------------------------------------------------
# Project state
# ---------------------------------------------------------------------------


class TestProjectState:
    async def test_lifecycle(self, scaffolder):
        project = await scaffolder.create_project("Shop", "", ["billing", "catalog"])

        state = await scaffolder.get_project_state(project.id)
        assert [d.status for d in state.domains] == ["pending", "pending"]
        assert state.overall_status == "pending"
        assert state.schedule == {"exists": False}

        for domain in ("billing", "catalog"):
            await scaffolder.create_domain_phase(
                domain,
                "phase-1",
                [_task("Model")],
                ["domain-design.md"],
                project_id=project.id,
            )
        state = await scaffolder.get_project_state(project.id)
        assert state.overall_status == "planned"

        await scaffolder.mark_domain_complete("billing", project.id, {})
        state = await scaffolder.get_project_state(project.id)
        assert [d.status for d in state.domains] == ["implemented", "planned"]
        assert state.overall_status == "in-progress"

        await scaffolder.mark_domain_complete("catalog", project.id, {})
        state = await scaffolder.get_project_state(project.id)
        assert state.overall_status == "completed"

    async def test_unknown_project(self, scaffolder):
        with pytest.raises(NotFoundError, match="Project not found or invalid"):
            await scaffolder.get_project_state("project_missing")

    @pytest.mark.parametrize(
        ("statuses", "expected"),
        [
            ([], "pending"),
            (["implemented", "implemented"], "completed"),
            (["implemented", "pending"], "in-progress"),
            (["planned", "planned"], "planned"),
            (["planned", "pending"], "pending"),
        ],
    )
    def test_overall_status(self, statuses, expected):
        domains = [DomainState(name=str(i), status=s) for i, s in enumerate(statuses)]
        assert overall_status(domains) == expected


# ---------------------------------------------------------------------------
# Planning documents
# ---------------------------------------------------------------------------


class TestPlanningDocuments:
    async def test_phase_in_default_project(self, scaffolder, tmp_path):
        phase = await scaffolder.create_domain_phase(
            "billing",
            "discovery",
            [_task("Model invoices"), _task("Persist", "Model invoices")],
            [
                "ubiquitous-language.yaml",
                {"title": "Tax rules", "description": "VAT", "references": ["law.pdf"]},
            ],
        )
        phase_dir = tmp_path / "projects" / "current" / "domains" / "billing"
        phase_dir = phase_dir / "phases" / "discovery"
        assert phase.path == str(phase_dir)

        plan = (phase_dir / "phase-plan.md").read_text()
        assert plan.startswith("# Phase: discovery\n")
        assert "1. **Model invoices**" in plan
        assert "   - Dependencies: None" in plan
        assert "   - Dependencies: Model invoices" in plan
        assert "- Tax rules" in plan

        digest = (phase_dir / "context-digest.md").read_text()
        assert "### Tax rules\nVAT" in digest
        assert "**References:**\n- law.pdf" in digest

    async def test_phase_for_unknown_project(self, scaffolder):
        with pytest.raises(NotFoundError):
            await scaffolder.create_domain_phase("billing", "p", [], [], project_id="nope")

    async def test_phase_rejects_bad_tasks(self, scaffolder):
        with pytest.raises(ValidationError, match="tasks"):
            await scaffolder.create_domain_phase("billing", "p", [{"description": "x"}])

    async def test_schedule(self, scaffolder):
        project = await scaffolder.create_project("Shop", "", ["billing"])
        schedule = await scaffolder.schedule_project(
            project.id,
            [
                _phase("Design", "2024-01-01", "2024-01-06"),
                _phase("Build", "2024-01-06", "2024-03-01"),
            ],
            [{"from": "Design", "to": "Build", "type": "finish-to-start", "critical": True}],
        )

        text = Path(schedule.path).read_text()
        assert "Design: █████ (5 days)" in text
        assert f"Build: {'█' * 20} (55 days)" in text
        assert "- **Design** → **Build**" in text
        assert "   - Critical: Yes" in text

        state = await scaffolder.get_project_state(project.id)
        assert state.schedule["exists"] is True

    async def test_assign_work(self, scaffolder):
        assignment = await scaffolder.assign_work("agent_1", "task-7", ["vision.md"])
        path = Path(assignment.path)
        assert path.parent.name == "assignments"
        text = path.read_text()
        assert "- **Agent ID**: agent_1" in text
        assert "- **Task ID**: task-7" in text
        assert "- vision.md" in text


class TestTimeline:
    def test_bar_capped_at_twenty(self):
        phases = [
            ScheduledPhase(
                name="Short", start_date=date(2024, 1, 1), end_date=date(2024, 1, 3)
            ),
            ScheduledPhase(
                name="Long", start_date=date(2024, 1, 1), end_date=date(2024, 2, 1)
            ),
        ]
        assert render_timeline(phases) == (
            f"Short: ██ (2 days)\nLong: {'█' * 20} (31 days)"
        )


# ---------------------------------------------------------------------------
# Completion and release
# ---------------------------------------------------------------------------


class TestCompletionAndRelease:
    async def test_mark_domain_complete(self, scaffolder):
        project = await scaffolder.create_project("Shop", "", ["billing"])
        report = await scaffolder.mark_domain_complete(
            "billing",
            project.id,
            {
                "artifacts": [{"name": "api", "type": "service", "path": "src/api"}],
                "notes": "Done early",
                "qualityMetrics": {"coverage": "92%"},
            },
        )

        domain_dir = Path(project.path) / "domains" / "billing"
        text = (domain_dir / "completion-report.md").read_text()
        assert "- **api**\n  - Type: service\n  - Path: src/api" in text
        assert "- **coverage**: 92%" in text
        assert "Done early" in text

        status = json.loads((domain_dir / "status.json").read_text())
        assert status["status"] == "completed"
        assert status["completedAt"] == report.completed_at.isoformat()

    async def test_unknown_domain(self, scaffolder):
        project = await scaffolder.create_project("Shop", "", ["billing"])
        with pytest.raises(NotFoundError, match="Domain not found"):
            await scaffolder.mark_domain_complete("shipping", project.id, {})

    async def test_create_release(self, scaffolder):
        project = await scaffolder.create_project("Shop", "", ["billing"])
        release = await scaffolder.create_release(
            project.id,
            "1.0.0",
            "First cut",
            [{"name": "api", "type": "image", "path": "registry/api", "version": "1.0.0"}],
        )

        release_dir = Path(release.path)
        assert release_dir.name == "1.0.0"
        notes = (release_dir / "release-notes.md").read_text()
        assert notes.startswith("# Release Notes - 1.0.0\n")
        assert "  - Version: 1.0.0" in notes

        manifest = json.loads((release_dir / "manifest.json").read_text())
        assert manifest["releaseId"] == release.id
        assert manifest["artifacts"] == [
            {
                "name": "api",
                "type": "image",
                "path": "registry/api",
                "version": "1.0.0",
                "checksum": None,
            }
        ]
        assert manifest["metadata"]["generatedBy"] == "Empacy MCP Server"

    async def test_release_for_unknown_project(self, scaffolder):
        with pytest.raises(NotFoundError):
            await scaffolder.create_release("project_missing", "1.0.0")


# ---------------------------------------------------------------------------
# Files and diagrams
# ---------------------------------------------------------------------------


class TestFilesAndDiagrams:
    def test_render_plantuml(self):
        assert (
            render_plantuml("class", "A -> B")
            == "@startuml class\n!theme plain\n\nA -> B\n@enduml"
        )

    async def test_generate_diagram_creates_parents(self, scaffolder, tmp_path):
        target = tmp_path / "docs" / "diagrams" / "context.puml"
        diagram = await scaffolder.generate_plantuml_diagram(
            "component", "[A] --> [B]", str(target)
        )
        assert target.read_text() == diagram.content
        assert diagram.content.startswith("@startuml component\n")

    async def test_write_then_read(self, scaffolder, tmp_path):
        target = tmp_path / "nested" / "note.txt"
        written = await scaffolder.write_file(str(target), "héllo")
        assert written == len("héllo".encode())
        assert await scaffolder.read_file(str(target)) == "héllo"

    async def test_read_missing_file(self, scaffolder, tmp_path):
        with pytest.raises(FileNotFoundError):
            await scaffolder.read_file(str(tmp_path / "missing.txt"))
