"""Project State: the single piece of shared mutable state.

Lifecycle:

    Uninitialized --initialize()--> Initialized --reset()--> Uninitialized ...

Each successful `initialize()` from the uninitialized state produces a new
generation. Generation numbers are never reused, so an entity stamped with
an old generation can always be told apart from the current ones.
"""

from __future__ import annotations

from pathlib import Path

from core.domain.errors import ProjectStateError, StaleEntityError
from core.domain.models import Package, ProjectModel, Target
from core.interfaces.project_loader import ProjectLoader


class ProjectState:
    def __init__(self, root: Path, loader: ProjectLoader) -> None:
        self._root = root
        self._loader = loader
        self._model: ProjectModel | None = None
        self._last_generation = 0

    @property
    def root(self) -> Path:
        return self._root

    @property
    def is_initialized(self) -> bool:
        return self._model is not None

    @property
    def generation(self) -> int:
        """Current generation, or 0 while uninitialized."""

        return self._model.generation if self._model is not None else 0

    @property
    def model(self) -> ProjectModel:
        if self._model is None:
            raise ProjectStateError("Project state is not initialized")
        return self._model

    def initialize(self) -> None:
        """Load the project unless it is already loaded."""

        if self._model is not None:
            return
        generation = self._last_generation + 1
        model = self._loader.load(self._root, generation=generation)
        self._last_generation = generation
        self._model = model

    def reset(self) -> None:
        """Drop the current generation; the next `initialize()` reloads."""

        self._model = None

    def package_list(self) -> dict[str, dict[str, Package]]:
        return self.model.packages

    def ensure_current(self, entity: Target | Package) -> None:
        current = self.model.generation
        if entity.generation != current:
            kind = type(entity).__name__.lower()
            raise StaleEntityError(
                f"Stale {kind} {entity.name!r}: resolved under generation "
                f"{entity.generation}, project is at generation {current}"
            )
