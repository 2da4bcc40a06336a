"""Exception taxonomy shared by the managers and the coordinator.

File-system failures are not wrapped: they surface as the built-in
``OSError`` family.
"""

from __future__ import annotations


class EmpacyError(Exception):
    """Base class for expected, caller-facing failures."""


class UnknownRoleError(EmpacyError):
    """Raised when an agent is spawned with a role missing from the catalog."""

    def __init__(self, role: str) -> None:
        super().__init__(f"Unknown agent type: {role}")
        self.role = role


class NotFoundError(EmpacyError):
    """Raised when an agent, context package, project or domain is unknown."""


class ValidationError(EmpacyError):
    """Raised for malformed concept, status or context input."""
