"""Unit tests for the Coordinator request/response boundary."""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path

import pytest

from empacy.audit import AuditEventType
from empacy.config import AuditConfig
from empacy.coordinator import Coordinator


@pytest.fixture()
def coordinator(empacy_config) -> Coordinator:
    return Coordinator(empacy_config)


# ---------------------------------------------------------------------------
# Agents
# ---------------------------------------------------------------------------


class TestAgentOperations:
    async def test_spawn_success(self, coordinator):
        result = await coordinator.spawn_agent("cto", {"vision.md": "x"})
        assert result["success"] is True
        assert result["status"] == "ready"
        assert result["agentId"].startswith("agent_")
        assert result["contextWarnings"] == ["ubiquitous-language.yaml"]

    async def test_unknown_role_is_a_failure_response(self, coordinator):
        result = await coordinator.spawn_agent("wizard", {})
        assert result == {"success": False, "error": "Unknown agent type: wizard"}

    async def test_status_of_unknown_agent(self, coordinator):
        result = await coordinator.get_agent_status("agent_missing")
        assert result == {"success": False, "error": "Agent not found: agent_missing"}

    async def test_status_snapshot(self, coordinator):
        spawned = await coordinator.spawn_agent("project-manager", {})
        result = await coordinator.get_agent_status(spawned["agentId"])
        assert result["success"] is True
        assert result["status"]["role"] == "project-manager"
        assert result["status"]["metadata"]["canManageSchedule"] is True

    async def test_update_list_terminate(self, coordinator):
        spawned = await coordinator.spawn_agent("domain-director", {})
        agent_id = spawned["agentId"]

        updated = await coordinator.update_agent_status(
            agent_id, "error", {"reason": "blocked"}
        )
        assert updated["status"]["status"] == "error"

        listed = await coordinator.list_agents("domain-director")
        assert [a["id"] for a in listed["agents"]] == [agent_id]

        terminated = await coordinator.terminate_agent(agent_id)
        assert terminated == {"success": True, "agentId": agent_id, "status": "terminated"}
        assert (await coordinator.list_agents())["agents"] == []

    async def test_invalid_status(self, coordinator):
        spawned = await coordinator.spawn_agent("cto", {})
        result = await coordinator.update_agent_status(spawned["agentId"], "asleep")
        assert result["success"] is False
        assert "Invalid agent status" in result["error"]


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------


class TestContextOperations:
    async def test_distribute_and_update(self, coordinator, context_root: Path):
        (context_root / "vision.md").write_text("# Vision")

        first = await coordinator.distribute_context("agent_1", ["vision.md", "gone.md"])
        assert first == {
            "success": True,
            "status": "context_distributed",
            "version": 1,
            "totalFiles": 1,
        }
        second = await coordinator.update_context("agent_1", ["vision.md"])
        assert second["status"] == "context_updated"
        assert second["version"] == 2

        fetched = await coordinator.get_context("agent_1")
        assert fetched["version"] == 2
        assert fetched["context"]["agentId"] == "agent_1"
        assert fetched["context"]["files"][0]["type"] == "markdown"

    async def test_get_missing_context(self, coordinator):
        result = await coordinator.get_context("agent_1")
        assert result["success"] is False
        assert result["error"] == "No context found for agent: agent_1"

    async def test_stats_and_cleanup(self, coordinator, context_root: Path):
        (context_root / "a.json").write_text("{}")
        await coordinator.distribute_context("agent_1", ["a.json"])

        stats = await coordinator.get_context_stats()
        assert stats["stats"]["totalAgents"] == 1
        assert stats["stats"]["fileTypeDistribution"] == {"json": 1}

        cleaned = await coordinator.cleanup_old_context(0)
        assert cleaned == {"success": True, "removed": 1}


# ---------------------------------------------------------------------------
# Ubiquitous language
# ---------------------------------------------------------------------------


class TestLanguageOperations:
    async def test_update_search_export_import(self, coordinator):
        updated = await coordinator.update_ubiquitous_language(
            [
                {
                    "name": "Bounded Context",
                    "domain": "architecture",
                    "definition": "Boundary within which a model applies",
                }
            ]
        )
        assert updated == {
            "success": True,
            "status": "language_updated",
            "conceptsProcessed": 1,
            "totalConcepts": 1,
        }

        found = await coordinator.search_concepts("bounded")
        assert found["concepts"][0]["name"] == "Bounded Context"
        assert found["concepts"][0]["shortName"] == "BC"
        assert found["concepts"][0]["score"] == 10

        exported = await coordinator.export_ubiquitous_language()
        imported = await coordinator.import_ubiquitous_language(exported["yaml"])
        assert imported["conceptsImported"] == 1

        stats = await coordinator.get_language_stats()
        assert stats["stats"]["totalAcronyms"] == 1

    async def test_invalid_concept(self, coordinator):
        result = await coordinator.update_ubiquitous_language([{"name": "Only"}])
        assert result["success"] is False
        assert "Invalid concept field" in result["error"]

    async def test_unexpected_error_is_contained(self, coordinator, monkeypatch, caplog):
        def explode(concepts):
            raise RuntimeError("kaboom")

        monkeypatch.setattr(coordinator.language, "update_concepts", explode)
        with caplog.at_level(logging.ERROR, logger="empacy.coordinator"):
            result = await coordinator.update_ubiquitous_language([])
        assert result == {"success": False, "error": "kaboom"}
        assert "failed unexpectedly" in caplog.text


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


class TestProjectOperations:
    async def test_create_project_spawns_initial_agents(self, coordinator):
        result = await coordinator.create_project("Shop", "Online shop", ["billing"])
        assert result["success"] is True
        assert result["status"] == "created"
        assert len(result["agentIds"]) == 2

        agents = (await coordinator.list_agents())["agents"]
        assert sorted(a["role"] for a in agents) == [
            "cto-assistant",
            "principal-engineer",
        ]

        state = await coordinator.get_project_state(result["projectId"])
        assert state["state"]["overallStatus"] == "pending"

    async def test_document_operations(self, coordinator, tmp_path):
        project = await coordinator.create_project("Shop", "", ["billing"])
        project_id = project["projectId"]

        phase = await coordinator.create_domain_phase(
            "billing", "p1", [{"title": "Model"}], ["vision.md"], project_id
        )
        assert phase["status"] == "phase_created"

        schedule = await coordinator.schedule_project(
            project_id,
            [{"name": "p1", "startDate": "2024-01-01", "endDate": "2024-01-10"}],
        )
        assert schedule["status"] == "project_scheduled"

        assignment = await coordinator.assign_work("agent_1", "t1", [], project_id)
        assert assignment["status"] == "work_assigned"

        completed = await coordinator.mark_domain_complete("billing", project_id, {})
        assert completed["data"]["domain"] == "billing"

        release = await coordinator.create_release(project_id, "0.1.0", "Alpha", [])
        assert release["status"] == "release_created"

        diagram = await coordinator.generate_plantuml_diagram(
            "sequence", "A -> B", str(tmp_path / "d.puml")
        )
        assert diagram["status"] == "diagram_generated"

        written = await coordinator.write_file(str(tmp_path / "f.txt"), "abc")
        assert written["bytesWritten"] == 3
        read = await coordinator.read_file(str(tmp_path / "f.txt"))
        assert read["content"] == "abc"

    async def test_io_error_is_a_failure_response(self, coordinator, tmp_path):
        result = await coordinator.read_file(str(tmp_path / "missing.txt"))
        assert result["success"] is False
        assert "missing.txt" in result["error"]

    async def test_unknown_project(self, coordinator):
        result = await coordinator.get_project_state("project_nope")
        assert result == {
            "success": False,
            "error": "Project not found or invalid: project_nope",
        }


# ---------------------------------------------------------------------------
# Audit and health
# ---------------------------------------------------------------------------


class TestAuditAndHealth:
    async def test_audit_events_written(self, coordinator):
        spawned = await coordinator.spawn_agent("cto", {})
        await coordinator.terminate_agent(spawned["agentId"])

        events = await coordinator.audit.read_events()
        assert [e.event_type for e in events] == [
            AuditEventType.AGENT_SPAWNED,
            AuditEventType.AGENT_TERMINATED,
        ]
        assert events[0].payload["agent_id"] == spawned["agentId"]
        assert events[0].operation == "spawnAgent"

    async def test_failed_operation_not_audited(self, coordinator):
        await coordinator.spawn_agent("wizard", {})
        assert await coordinator.audit.read_events() == []

    async def test_audit_write_failure_keeps_success(
        self, empacy_config, tmp_path: Path, caplog
    ):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        config = replace(
            empacy_config,
            audit=AuditConfig(file_path=str(blocker / "audit.jsonl"), enabled=True),
        )
        coordinator = Coordinator(config)

        with caplog.at_level(logging.WARNING, logger="empacy.audit.store"):
            result = await coordinator.spawn_agent("cto", {})

        assert result["success"] is True
        assert len(coordinator.agents.registry) == 1
        assert "Audit write failed for spawnAgent" in caplog.text

    async def test_health_reports_operation_metrics(self, coordinator):
        await coordinator.spawn_agent("cto", {})
        await coordinator.spawn_agent("wizard", {})

        health = await coordinator.get_health()
        assert health["success"] is True
        assert health["healthy"] is True
        assert health["components"]["agents"]["count"] == 1
        spawn = health["operations"]["coordinator.spawnAgent"]
        assert spawn["calls"] == 2
        assert spawn["failures"] == 1

    async def test_reset(self, coordinator):
        await coordinator.spawn_agent("cto", {})
        coordinator.reset()
        assert coordinator.health()["components"]["agents"]["count"] == 0
