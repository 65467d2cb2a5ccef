"""Callbacks the services use to report progress.

The services never print; UI layers plug in here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from core.domain.models import TestOutcome
from core.domain.verbosity import Verbosity


@dataclass
class StatusHooks:
    """Optional callbacks for UI layers (status lines, live test results)."""

    status: Callable[[Verbosity, str], None] | None = None
    on_outcome: Callable[[TestOutcome], None] | None = None

    def emit(self, level: Verbosity, message: str) -> None:
        if self.status:
            self.status(level, message)
