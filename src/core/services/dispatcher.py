"""Single-target command dispatch (build, clean, load, debug, size).

Each command follows the same sequence: initialize the project, check
arity, resolve the target, construct a fresh Builder and invoke exactly one
lifecycle action on it. Errors are raised, never printed; the CLI boundary
reports them.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from core.domain.errors import ActionError, UsageError
from core.domain.models import Target
from core.domain.verbosity import Verbosity
from core.interfaces.builder import Builder, BuilderFactory
from core.project import ProjectState
from core.resolver import NameResolver
from core.services.hooks import StatusHooks

TARGET_KEYWORD_ALL = "all"


class TargetAction(str, Enum):
    BUILD = "build"
    LOAD = "load"
    DEBUG = "debug"
    SIZE = "size"


@dataclass
class CleanResult:
    """What a `clean` invocation removed."""

    removed_root: Path | None = None
    cleaned_targets: list[str] = field(default_factory=list)


class ActionDispatcher:
    def __init__(
        self,
        *,
        state: ProjectState,
        builder_factory: BuilderFactory,
        bin_root: Path,
        hooks: StatusHooks | None = None,
    ) -> None:
        self._state = state
        self._builder_factory = builder_factory
        self._bin_root = bin_root
        self._hooks = hooks or StatusHooks()
        self._resolver = NameResolver(state)

    def run(self, action: TargetAction, args: list[str]) -> Builder:
        """Run one lifecycle action against the target named by `args[0]`."""

        self._state.initialize()
        if not args:
            raise UsageError("Must specify target", show_help=True)

        target = self._resolve_target(args[0])
        builder = self._builder_factory(self._state, target)
        getattr(builder, action.value)()
        return builder

    def build(self, args: list[str]) -> Path:
        builder = self.run(TargetAction.BUILD, args)
        elf_path = builder.app_elf_path()
        self._hooks.emit(Verbosity.DEFAULT, f"App successfully built: {elf_path}")
        return elf_path

    def load(self, args: list[str]) -> None:
        self.run(TargetAction.LOAD, args)

    def debug(self, args: list[str]) -> None:
        self.run(TargetAction.DEBUG, args)

    def size(self, args: list[str]) -> None:
        self.run(TargetAction.SIZE, args)

    def clean(self, args: list[str]) -> CleanResult:
        """Clean the named targets, or the whole output root for `all`.

        Every argument is classified first, so an unknown target name is a
        usage error even when `all` is present. If `all` appears anywhere the
        output root is removed and no per-target clean runs.
        """

        self._state.initialize()
        if not args:
            raise UsageError("Must specify target", show_help=True)

        clean_all = False
        targets: list[Target] = []
        for arg in args:
            if arg == TARGET_KEYWORD_ALL:
                clean_all = True
            else:
                targets.append(self._resolve_target(arg))

        result = CleanResult()
        if clean_all:
            self._hooks.emit(Verbosity.VERBOSE, f"Cleaning directory {self._bin_root}")
            try:
                shutil.rmtree(self._bin_root)
            except FileNotFoundError:
                pass
            except OSError as exc:
                raise ActionError(f"Failed to remove {self._bin_root}: {exc}") from exc
            result.removed_root = self._bin_root
            return result

        for target in targets:
            builder = self._builder_factory(self._state, target)
            builder.clean()
            self._hooks.emit(Verbosity.VERBOSE, f"Cleaned target {target.name}")
            result.cleaned_targets.append(target.name)
        return result

    def _resolve_target(self, name: str) -> Target:
        target = self._resolver.resolve_target(name)
        if target is None:
            raise UsageError(f"invalid target name: {name}", show_help=True)
        return target
