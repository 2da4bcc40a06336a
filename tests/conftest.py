"""Root conftest: suite markers and shared Empacy fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest
from dotenv import load_dotenv

from empacy.config import AuditConfig
from empacy.config import ContextConfig
from empacy.config import EmpacyConfig
from empacy.config import ProjectsConfig
from empacy.observability import reset_operation_metrics

# Load repository-root .env for test opt-ins (existing env vars stay authoritative).
load_dotenv(dotenv_path=Path(__file__).resolve().parents[1] / ".env", override=False)


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    """Attach suite markers from test path.

    - `tests/unit/*` -> `unit`
    - `tests/integration/*` -> `integration`
    """
    root = Path(__file__).resolve().parents[1]
    for item in items:
        item_path = Path(str(item.fspath)).resolve()
        try:
            rel = item_path.relative_to(root)
        except ValueError:
            continue

        parts = rel.parts
        if len(parts) < 2 or parts[0] != "tests":
            continue
        if parts[1] == "unit":
            item.add_marker(pytest.mark.unit)
        elif parts[1] == "integration":
            item.add_marker(pytest.mark.integration)


@pytest.fixture(autouse=True)
def clean_operation_metrics():
    """Operation metrics are process-global; isolate them per test."""
    reset_operation_metrics()
    yield
    reset_operation_metrics()


@pytest.fixture()
def context_root(tmp_path: Path) -> Path:
    root = tmp_path / "context"
    root.mkdir()
    return root


@pytest.fixture()
def empacy_config(tmp_path: Path, context_root: Path) -> EmpacyConfig:
    """Config with every file-system root under ``tmp_path`` and audit on."""
    return EmpacyConfig(
        context=ContextConfig(root_dir=str(context_root)),
        projects=ProjectsConfig(root_dir=str(tmp_path / "projects")),
        audit=AuditConfig(file_path=str(tmp_path / "audit.jsonl"), enabled=True),
    )


@pytest.fixture()
async def mcp_client(empacy_config):
    """Yield a FastMCP Client wired to a freshly configured Empacy server."""
    from fastmcp import Client

    from empacy.server import configure
    from empacy.server import mcp
    from empacy.server import shutdown

    await configure(empacy_config)
    async with Client(mcp) as client:
        yield client
    await shutdown()
