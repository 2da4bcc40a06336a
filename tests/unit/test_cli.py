"""Unit tests for the ``empacy`` command line."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from empacy.cli import main

_LANGUAGE = """
domains:
  - name: sales
    concepts:
      - name: Customer Relationship Management
        definition: Managing customer interactions
      - name: Lead
        definition: Potential customer
"""


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("EMPACY_PROJECTS_ROOT", str(tmp_path / "projects"))
    monkeypatch.delenv("EMPACY_PORT", raising=False)


class TestCli:
    def test_config_prints_json(self, capsys):
        assert main(["config"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["server"]["name"] == "empacy"
        assert data["projects"]["root_dir"].endswith("projects")

    def test_health(self, capsys):
        assert main(["health"]) == 0
        report = json.loads(capsys.readouterr().out)
        assert report["healthy"] is True
        assert set(report["components"]) >= {"agents", "context", "language"}

    def test_export_language_to_stdout(self, tmp_path: Path, capsys):
        source = tmp_path / "language.yaml"
        source.write_text(_LANGUAGE)

        assert main(["export-language", "--input", str(source)]) == 0
        document = yaml.safe_load(capsys.readouterr().out)
        [domain] = document["domains"]
        assert [c["name"] for c in domain["concepts"]] == [
            "Customer Relationship Management",
            "Lead",
        ]
        assert document["acronyms"][0]["acronym"] == "CRM"

    def test_export_language_to_file(self, tmp_path: Path):
        source = tmp_path / "language.yaml"
        source.write_text(_LANGUAGE)
        target = tmp_path / "out.yaml"

        assert main(["export-language", "--input", str(source), "--output", str(target)]) == 0
        assert yaml.safe_load(target.read_text())["metadata"]["totalConcepts"] == 2

    def test_export_language_missing_file(self, tmp_path: Path):
        assert main(["export-language", "--input", str(tmp_path / "none.yaml")]) == 1

    def test_invalid_configuration(self, monkeypatch, capsys):
        monkeypatch.setenv("EMPACY_PORT", "not-a-port")
        assert main(["config"]) == 2
        assert "EMPACY_PORT" in capsys.readouterr().err

    def test_command_required(self):
        with pytest.raises(SystemExit):
            main([])
