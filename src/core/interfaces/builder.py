"""Builder contract.

Why Protocol:
- The services depend on a structural contract, not on the toolchain adapter.
- Tests swap in a recording builder without subclassing anything.

A Builder is bound to exactly one Target and exposes the action lifecycle.
It is created fresh for every action (or every test cycle) and is invalid
once the Project State it was created under has been reset.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Callable, Protocol, runtime_checkable

from core.domain.models import Package, Target

if TYPE_CHECKING:
    from core.project import ProjectState


@runtime_checkable
class Builder(Protocol):
    """Action executor for one target.

    Every method either returns normally or raises a `BuildToolError`.
    """

    def build(self) -> None: ...

    def clean(self) -> None: ...

    def test(self, package: Package) -> None: ...

    def load(self) -> None: ...

    def debug(self) -> None: ...

    def size(self) -> None: ...

    def app_elf_path(self) -> Path: ...


BuilderFactory = Callable[["ProjectState", Target], Builder]
