"""fwbuild command line (Typer).

Commands are thin: they wire settings, Project State, the builder factory
and the Rich output hooks into the core services, and translate
`BuildToolError` into an error message and exit status 1.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

import typer
from rich.console import Console

from adapters.json_exporter import export_test_result_json
from adapters.project_loader import YamlProjectLoader
from adapters.report_exporter import export_test_result_html
from adapters.toolchain_builder import bin_root, make_builder_factory
from cli import doctor
from cli.ui_components import (
    build_results_table,
    make_outcome_printer,
    make_status_printer,
    print_banner,
    print_error,
)
from core.config import AppSettings
from core.domain.errors import ActionError, BuildToolError, TestFailureError, UsageError
from core.domain.models import TestBatchResult
from core.domain.verbosity import Verbosity
from core.project import ProjectState
from core.services.dispatcher import ActionDispatcher, TargetAction
from core.services.hooks import StatusHooks
from core.services.test_orchestrator import TestOrchestrator

app = typer.Typer(
    no_args_is_help=True,
    help="Build, test, load, debug and size firmware targets.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


@dataclass
class CliContext:
    settings: AppSettings
    verbosity: Verbosity
    show_banner: bool


@dataclass
class _Services:
    state: ProjectState
    hooks: StatusHooks
    dispatcher: ActionDispatcher
    orchestrator: TestOrchestrator


def _cli(ctx: typer.Context) -> CliContext:
    obj = ctx.obj
    if isinstance(obj, CliContext):
        return obj
    settings = AppSettings()
    return CliContext(settings=settings, verbosity=settings.verbosity, show_banner=False)


def _services(cli: CliContext) -> _Services:
    hooks = StatusHooks(
        status=make_status_printer(_console, cli.verbosity),
        on_outcome=make_outcome_printer(_console, cli.verbosity),
    )
    state = ProjectState(
        cli.settings.resolved_root(),
        YamlProjectLoader(bin_dir=cli.settings.bin_dir),
    )
    factory = make_builder_factory(cli.settings, hooks=hooks)
    return _Services(
        state=state,
        hooks=hooks,
        dispatcher=ActionDispatcher(
            state=state,
            builder_factory=factory,
            bin_root=bin_root(cli.settings),
            hooks=hooks,
        ),
        orchestrator=TestOrchestrator(state=state, builder_factory=factory, hooks=hooks),
    )


@contextmanager
def _guard(ctx: typer.Context) -> Iterator[None]:
    """Command boundary: report any `BuildToolError` and exit non-zero."""

    try:
        yield
    except UsageError as exc:
        print_error(_err_console, exc.text)
        if exc.show_help:
            _err_console.print(ctx.get_help(), markup=False, highlight=False)
        raise typer.Exit(code=1) from exc
    except BuildToolError as exc:
        print_error(_err_console, exc.text)
        raise typer.Exit(code=1) from exc


@app.callback()
def main(
    ctx: typer.Context,
    project_root: Optional[Path] = typer.Option(
        None,
        "--project-root",
        "-C",
        help="Project directory (defaults to FWBUILD_PROJECT_ROOT or the cwd).",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show commands and their output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only show errors and test failures."),
    no_banner: bool = typer.Option(False, "--no-banner", help="Do not print the banner."),
) -> None:
    settings = AppSettings()
    if project_root is not None:
        settings = settings.model_copy(update={"project_root": project_root})

    verbosity = settings.verbosity
    if verbose or quiet:
        verbosity = Verbosity.from_flags(verbose=verbose, quiet=quiet)

    ctx.obj = CliContext(
        settings=settings,
        verbosity=verbosity,
        show_banner=settings.show_banner and not no_banner and verbosity >= Verbosity.DEFAULT,
    )


@app.command()
def build(
    ctx: typer.Context,
    target: Optional[List[str]] = typer.Argument(None, help="Target to build."),
) -> None:
    """Build one target and print the path of the app image."""

    cli = _cli(ctx)
    with _guard(ctx):
        _services(cli).dispatcher.build(list(target or []))


@app.command()
def clean(
    ctx: typer.Context,
    targets: Optional[List[str]] = typer.Argument(None, help="Targets to clean, or 'all'."),
) -> None:
    """Delete build artifacts of the named targets, or the whole bin root for 'all'."""

    cli = _cli(ctx)
    with _guard(ctx):
        result = _services(cli).dispatcher.clean(list(targets or []))
    if result.removed_root is not None and cli.verbosity >= Verbosity.DEFAULT:
        _console.print(f"Removed {result.removed_root}", markup=False, highlight=False)


@app.command()
def test(
    ctx: typer.Context,
    packages: Optional[List[str]] = typer.Argument(None, help="Packages to test, or 'all'."),
    report_json: Optional[Path] = typer.Option(None, "--report-json", help="Write results as JSON."),
    report_html: Optional[Path] = typer.Option(None, "--report-html", help="Write results as HTML."),
) -> None:
    """Run each package's unit tests in an isolated build of the unittest target."""

    cli = _cli(ctx)
    if cli.show_banner:
        print_banner(_console)

    services = _services(cli)
    with _guard(ctx):
        try:
            result = services.orchestrator.run(list(packages or []))
        except TestFailureError as exc:
            _finish_batch(cli, services, exc.result, report_json, report_html)
            raise
        if not _finish_batch(cli, services, result, report_json, report_html):
            raise ActionError("Tests passed but a report could not be written")


def _finish_batch(
    cli: CliContext,
    services: _Services,
    result: TestBatchResult,
    report_json: Path | None,
    report_html: Path | None,
) -> bool:
    """Print the results table and write the requested reports; False if a report failed."""

    written = True
    if cli.verbosity >= Verbosity.VERBOSE:
        _console.print(build_results_table(result))
    # A report that cannot be written must not mask the batch outcome.
    if report_json is not None:
        try:
            path = export_test_result_json(result=result, output_path=report_json)
        except OSError as exc:
            print_error(_err_console, f"Cannot write report {report_json}: {exc}")
            written = False
        else:
            services.hooks.emit(Verbosity.DEFAULT, f"JSON report written to {path}")
    if report_html is not None:
        project_name = services.state.model.name if services.state.is_initialized else "fwbuild"
        try:
            path = export_test_result_html(result=result, project_name=project_name, output_path=report_html)
        except OSError as exc:
            print_error(_err_console, f"Cannot write report {report_html}: {exc}")
            written = False
        else:
            services.hooks.emit(Verbosity.DEFAULT, f"HTML report written to {path}")
    return written


def _target_command(ctx: typer.Context, action: TargetAction, target: list[str] | None) -> None:
    cli = _cli(ctx)
    with _guard(ctx):
        dispatcher = _services(cli).dispatcher
        getattr(dispatcher, action.value)(list(target or []))


@app.command()
def load(
    ctx: typer.Context,
    target: Optional[List[str]] = typer.Argument(None, help="Target whose image is loaded."),
) -> None:
    """Load the built app image of a target onto its board."""

    _target_command(ctx, TargetAction.LOAD, target)


@app.command()
def debug(
    ctx: typer.Context,
    target: Optional[List[str]] = typer.Argument(None, help="Target to debug."),
) -> None:
    """Open a debugger session for a target."""

    _target_command(ctx, TargetAction.DEBUG, target)


@app.command()
def size(
    ctx: typer.Context,
    target: Optional[List[str]] = typer.Argument(None, help="Target to size."),
) -> None:
    """Report the size breakdown of a target's app image."""

    _target_command(ctx, TargetAction.SIZE, target)


def run() -> None:
    app()
