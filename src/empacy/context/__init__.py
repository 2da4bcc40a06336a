"""Context domain: versioned per-agent context packages."""

from empacy.context.detection import detect_content_type
from empacy.context.detection import format_bytes
from empacy.context.manager import ContextManager
from empacy.context.schemas import AccessLogRecord
from empacy.context.schemas import ContentType
from empacy.context.schemas import ContextFileRecord
from empacy.context.schemas import ContextPackage
from empacy.context.schemas import ContextStats
from empacy.context.store import ContextStore

__all__ = [
    "AccessLogRecord",
    "ContentType",
    "ContextFileRecord",
    "ContextManager",
    "ContextPackage",
    "ContextStats",
    "ContextStore",
    "detect_content_type",
    "format_bytes",
]
