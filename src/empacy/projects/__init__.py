"""Project scaffolding: directory trees and planning documents."""

from empacy.projects.scaffold import overall_status
from empacy.projects.scaffold import ProjectScaffolder
from empacy.projects.schemas import Diagram
from empacy.projects.schemas import DomainState
from empacy.projects.schemas import Project
from empacy.projects.schemas import ProjectState

__all__ = [
    "Diagram",
    "DomainState",
    "Project",
    "ProjectScaffolder",
    "ProjectState",
    "overall_status",
]
