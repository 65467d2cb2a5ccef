"""Project model loading contract."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from core.domain.models import ProjectModel


@runtime_checkable
class ProjectLoader(Protocol):
    """Reads a project tree into a `ProjectModel`.

    Must raise `ProjectStateError` when the tree cannot be loaded.
    """

    def load(self, root: Path, *, generation: int) -> ProjectModel:
        ...
