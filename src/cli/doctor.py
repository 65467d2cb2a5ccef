"""Doctor command for environment diagnostics."""

from __future__ import annotations

import shlex
import shutil

import typer
from rich.console import Console
from rich.table import Table

from adapters.project_loader import PROJECT_FILE, YamlProjectLoader
from core.config import AppSettings, write_user_env_vars
from core.domain.errors import BuildToolError
from core.project import ProjectState
from core.resolver import NameResolver
from core.services.test_orchestrator import TARGET_TEST_NAME, pkg_is_testable

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and toolchain configuration.")

_console = Console()

_COMMAND_FIELDS = (
    "build_command",
    "test_command",
    "load_command",
    "debug_command",
    "size_command",
)


def _settings_from(ctx: typer.Context) -> AppSettings:
    obj = ctx.obj
    settings = getattr(obj, "settings", None)
    return settings if isinstance(settings, AppSettings) else AppSettings()


def _check_command(template: str) -> tuple[str, str]:
    """Check that the program a command template starts with is on PATH."""

    try:
        program = shlex.split(template)[0]
    except (ValueError, IndexError):
        return "FAIL", "Cannot parse command template"
    if "{" in program:
        return "SKIP", f"Program depends on the target ({program})"
    found = shutil.which(program)
    if found:
        return "OK", found
    return "FAIL", f"{program} not found on PATH"


@app.command()
def run(ctx: typer.Context) -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = _settings_from(ctx)
    root = settings.resolved_root()

    table = Table(title="fwbuild Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    table.add_row("Project root", "OK" if root.is_dir() else "FAIL", str(root))
    project_file = root / PROJECT_FILE
    table.add_row("Project file", "OK" if project_file.is_file() else "FAIL", str(project_file))

    state = ProjectState(root, YamlProjectLoader(bin_dir=settings.bin_dir))
    loaded = False
    try:
        state.initialize()
        loaded = True
    except BuildToolError as exc:
        table.add_row("Project load", "FAIL", exc.text)

    if loaded:
        model = state.model
        packages = list(model.iter_packages())
        table.add_row(
            "Project load",
            "OK",
            f"{model.name}: {len(packages)} packages, {len(model.targets)} targets",
        )
        testable = sum(1 for pack in packages if pkg_is_testable(pack))
        table.add_row("Testable packages", "OK" if testable else "WARN", str(testable))
        test_target = NameResolver(state).resolve_target(TARGET_TEST_NAME)
        if test_target is None:
            table.add_row("Unit test target", "FAIL", f"No target named {TARGET_TEST_NAME}")
        else:
            table.add_row("Unit test target", "OK", test_target.name)

    for field_name in _COMMAND_FIELDS:
        status, detail = _check_command(getattr(settings, field_name))
        table.add_row(field_name.replace("_", " ").capitalize(), status, detail)

    _console.print(table)


@app.command(name="setup-toolchain")
def setup_toolchain(ctx: typer.Context) -> None:
    """Interactive toolchain setup (stores command templates in the user .env)."""

    settings = _settings_from(ctx)
    values: dict[str, str | None] = {}
    for field_name in _COMMAND_FIELDS:
        label = field_name.replace("_", " ").capitalize()
        value = typer.prompt(label, default=getattr(settings, field_name), show_default=True).strip()
        if not value:
            raise typer.BadParameter(f"{label} must not be empty")
        values[f"FWBUILD_{field_name.upper()}"] = value

    env_path = write_user_env_vars(values)
    _console.print(f"[green]Saved toolchain config to:[/green] {env_path}")
