"""Application configuration dataclasses.

Frozen dataclasses with sensible defaults for each subsystem.
``load_config()`` overlays ``EMPACY_*`` environment variables on top of
the defaults; everything else is overridden at construction time.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from dataclasses import field

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ServerConfig:
    """MCP server identity and transport settings."""

    name: str = "empacy"
    transport: str = "stdio"
    host: str = "127.0.0.1"
    port: int = 3000


@dataclass(frozen=True)
class ContextConfig:
    """Context distribution settings."""

    # Relative context file names resolve against this directory.
    root_dir: str = "."
    max_access_log: int = 1000
    default_max_age_ms: int = 24 * 60 * 60 * 1000
    recent_activity_size: int = 10


@dataclass(frozen=True)
class LanguageConfig:
    """Ubiquitous language registry settings."""

    max_history: int = 1000
    acronym_min_length: int = 2
    acronym_max_length: int = 5
    single_word_short_name_length: int = 4


@dataclass(frozen=True)
class ProjectsConfig:
    """Where project scaffolding is written."""

    root_dir: str = "./projects"
    # Phase, schedule and assignment documents without a project id land here.
    default_project: str = "current"


@dataclass(frozen=True)
class AuditConfig:
    """Settings for the JSONL audit logger."""

    file_path: str = "empacy_audit.jsonl"
    enabled: bool = False


@dataclass(frozen=True)
class LoggingConfig:
    """Root logger settings applied by the CLI."""

    level: str = "INFO"
    format: str = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


@dataclass(frozen=True)
class EmpacyConfig:
    """Aggregate configuration for one server process."""

    server: ServerConfig = field(default_factory=ServerConfig)
    context: ContextConfig = field(default_factory=ContextConfig)
    language: LanguageConfig = field(default_factory=LanguageConfig)
    projects: ProjectsConfig = field(default_factory=ProjectsConfig)
    audit: AuditConfig = field(default_factory=AuditConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    stripped = raw.strip()
    return stripped if stripped else default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUTHY


def load_config() -> EmpacyConfig:
    """Build an ``EmpacyConfig`` from defaults and ``EMPACY_*`` env vars.

    ``LOG_LEVEL`` is honoured as a fallback for ``EMPACY_LOG_LEVEL``.
    """
    server = ServerConfig(
        transport=_env_str("EMPACY_TRANSPORT", ServerConfig.transport),
        host=_env_str("EMPACY_HOST", ServerConfig.host),
        port=_env_int("EMPACY_PORT", ServerConfig.port),
    )
    context = ContextConfig(
        root_dir=_env_str("EMPACY_CONTEXT_ROOT", ContextConfig.root_dir),
        default_max_age_ms=_env_int(
            "EMPACY_CONTEXT_MAX_AGE_MS", ContextConfig.default_max_age_ms
        ),
    )
    projects = ProjectsConfig(
        root_dir=_env_str("EMPACY_PROJECTS_ROOT", ProjectsConfig.root_dir),
    )
    audit = AuditConfig(
        file_path=_env_str("EMPACY_AUDIT_FILE", AuditConfig.file_path),
        enabled=_env_bool("EMPACY_AUDIT_ENABLED", AuditConfig.enabled),
    )
    logging_cfg = LoggingConfig(
        level=_env_str(
            "EMPACY_LOG_LEVEL", _env_str("LOG_LEVEL", LoggingConfig.level)
        ).upper(),
    )
    return EmpacyConfig(
        server=server,
        context=context,
        projects=projects,
        audit=audit,
        logging=logging_cfg,
    )
