"""Project file persistence."""

from .project import (
    ProjectDocument,
    apply_project,
    load_project,
    read_project,
    save_project,
    serialize_project,
)

__all__ = [
    "ProjectDocument",
    "apply_project",
    "load_project",
    "read_project",
    "save_project",
    "serialize_project",
]
