"""Builder backed by external toolchain commands.

Compilation, flashing and debugging are delegated to command templates from
`AppSettings`. Templates are formatted with these placeholders (each value
is shell-quoted) and then split with `shlex`:

- `{target}`: target short name
- `{profile}`: build profile
- `{app_path}` / `{bsp_path}`: package directories
- `{bsp_name}`: last path component of the BSP name
- `{bin_dir}`: output directory for the action
- `{elf}`: app image path
- `{package}` / `{package_path}`: package under test (test action only)

Output layout under the bin root:

    <bin_root>/<target>/<app path>/<app basename>.elf
    <bin_root>/<target>/test/<package path>/
"""

from __future__ import annotations

import functools
import shlex
import shutil
from pathlib import Path

from adapters.command_runner import CommandRunner, run_command
from core.config import AppSettings
from core.domain.errors import ActionError, BuilderError, ResolutionError, StaleEntityError
from core.domain.models import Package, Target
from core.domain.verbosity import Verbosity
from core.interfaces.builder import Builder, BuilderFactory
from core.project import ProjectState
from core.resolver import NameResolver
from core.services.hooks import StatusHooks


def bin_root(settings: AppSettings) -> Path:
    """Root of all build output."""

    return settings.resolved_root() / settings.bin_dir


def _path_part(name: str) -> str:
    return name.lstrip("@")


class ToolchainBuilder(Builder):
    """Runs the configured toolchain commands for one target."""

    def __init__(
        self,
        state: ProjectState,
        target: Target,
        *,
        settings: AppSettings,
        hooks: StatusHooks | None = None,
        runner: CommandRunner = run_command,
    ) -> None:
        state.ensure_current(target)
        if not target.bsp:
            raise BuilderError(f"Target {target.name} does not specify a BSP (target.bsp)")

        resolver = NameResolver(state)
        try:
            self._bsp = resolver.resolve_package(target.bsp)
        except ResolutionError as exc:
            raise BuilderError(f"Target {target.name}: cannot resolve BSP: {exc.text}") from exc

        self._app: Package | None = None
        if target.app:
            try:
                self._app = resolver.resolve_package(target.app)
            except ResolutionError as exc:
                raise BuilderError(f"Target {target.name}: cannot resolve app: {exc.text}") from exc

        self._state = state
        self._generation = state.generation
        self._target = target
        self._settings = settings
        self._hooks = hooks or StatusHooks()
        self._runner = runner
        self._bin_dir = bin_root(settings) / target.short_name

    @property
    def bin_dir(self) -> Path:
        return self._bin_dir

    def app_elf_path(self) -> Path:
        app = self._require_app()
        app_dir = self._bin_dir / _path_part(app.full_name)
        return app_dir / f"{app.name.rsplit('/', 1)[-1]}.elf"

    def build(self) -> None:
        self._check_current()
        elf = self.app_elf_path()
        elf.parent.mkdir(parents=True, exist_ok=True)
        self._run(self._settings.build_command, bin_dir=elf.parent)

    def clean(self) -> None:
        self._check_current()
        self._hooks.emit(Verbosity.VERBOSE, f"Cleaning directory {self._bin_dir}")
        try:
            shutil.rmtree(self._bin_dir)
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise ActionError(f"Failed to clean {self._bin_dir}: {exc}") from exc

    def test(self, package: Package) -> None:
        self._check_current()
        self._state.ensure_current(package)
        test_dir = self._bin_dir / "test" / _path_part(package.full_name)
        test_dir.mkdir(parents=True, exist_ok=True)
        self._run(
            self._settings.test_command,
            bin_dir=test_dir,
            package=package.full_name,
            package_path=package.base_path,
        )

    def load(self) -> None:
        self._check_current()
        elf = self._require_image()
        self._run(self._settings.load_command, bin_dir=elf.parent)

    def debug(self) -> None:
        self._check_current()
        elf = self._require_image()
        self._run(self._settings.debug_command, bin_dir=elf.parent)

    def size(self) -> None:
        self._check_current()
        elf = self._require_image()
        self._run(self._settings.size_command, bin_dir=elf.parent, output_level=Verbosity.DEFAULT)

    def _check_current(self) -> None:
        if self._state.generation != self._generation:
            raise StaleEntityError(
                f"Builder for {self._target.name} was created under generation "
                f"{self._generation}; project is at generation {self._state.generation}"
            )

    def _require_app(self) -> Package:
        if self._app is None:
            raise ActionError(f"Target {self._target.name} does not specify an app (target.app)")
        return self._app

    def _require_image(self) -> Path:
        elf = self.app_elf_path()
        if not elf.is_file():
            raise ActionError(
                f"App image {elf} not found; build target {self._target.short_name} first"
            )
        return elf

    def _placeholders(self, **extra: object) -> dict[str, str]:
        values: dict[str, object] = {
            "target": self._target.short_name,
            "profile": self._target.build_profile,
            "bsp_path": self._bsp.base_path,
            "bsp_name": self._bsp.name.rsplit("/", 1)[-1],
            "app_path": self._app.base_path if self._app else "",
            "elf": self.app_elf_path() if self._app else "",
            "package": "",
            "package_path": "",
        }
        values.update(extra)
        return {key: shlex.quote(str(value)) for key, value in values.items()}

    def _run(
        self,
        template: str,
        *,
        output_level: Verbosity = Verbosity.VERBOSE,
        **extra: object,
    ) -> None:
        try:
            command = template.format(**self._placeholders(**extra))
        except (KeyError, IndexError, ValueError) as exc:
            raise ActionError(f"Invalid command template {template!r}: {exc}") from exc

        args = shlex.split(command)
        self._hooks.emit(Verbosity.VERBOSE, f"Executing: {' '.join(args)}")
        result = self._runner(args, cwd=self._settings.resolved_root())
        if not result.ok:
            detail = result.output.strip()
            message = f"Command failed with status {result.returncode}: {' '.join(args)}"
            raise ActionError(f"{message}\n{detail}" if detail else message)
        if result.output.strip():
            self._hooks.emit(output_level, result.output.rstrip())


def make_builder_factory(settings: AppSettings, *, hooks: StatusHooks | None = None) -> BuilderFactory:
    """Bind settings and hooks so the core can construct builders on demand."""

    return functools.partial(ToolchainBuilder, settings=settings, hooks=hooks)
