"""Error taxonomy for the orchestration core.

Every failure the core reports derives from `BuildToolError` and carries a
human-readable `text`. The CLI is the only place these are caught and turned
into an exit status.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from core.domain.models import TestBatchResult


class BuildToolError(Exception):
    """Base error with a structured diagnostic string."""

    def __init__(self, text: str) -> None:
        super().__init__(text)
        self.text = text


class UsageError(BuildToolError):
    """Missing arguments, unknown names or an empty selection."""

    def __init__(self, text: str, *, show_help: bool = False) -> None:
        super().__init__(text)
        self.show_help = show_help


class ResolutionError(BuildToolError):
    """A package name exists but the project model cannot resolve it."""


class ProjectStateError(BuildToolError):
    """Project State could not be loaded, or was used while uninitialized."""


class StaleEntityError(ProjectStateError):
    """An entity resolved under an earlier Project State generation was used."""


class BuilderError(BuildToolError):
    """A Builder could not be constructed for a target."""


class ActionError(BuildToolError):
    """A Builder lifecycle action failed."""


class TestFailureError(BuildToolError):
    """At least one package in a batch test run failed."""

    __test__ = False

    def __init__(self, result: TestBatchResult) -> None:
        super().__init__(
            f"Test failure(s):\n{result.passed_line()}\n{result.failed_line()}"
        )
        self.result = result
