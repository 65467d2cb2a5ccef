"""Batch unit-test orchestration.

For every selected package the orchestrator runs an isolated cycle:

1. reset the Project State (this invalidates every Target/Package resolved
   so far) and initialize a fresh generation;
2. resolve the reserved unit-test target;
3. construct a fresh Builder for it;
4. re-resolve the package by full name against the new generation;
5. run the Builder's test action and record pass/fail.

Cycles run strictly one after another because each one rebuilds the shared
Project State. A failing package test is recorded and the batch continues;
every other error is fatal to the whole batch.
"""

from __future__ import annotations

from pathlib import Path

from core.domain.errors import BuildToolError, ResolutionError, TestFailureError, UsageError
from core.domain.models import Package, TestBatchResult, TestOutcome
from core.domain.verbosity import Verbosity
from core.interfaces.builder import BuilderFactory
from core.project import ProjectState
from core.resolver import NameResolver
from core.services.hooks import StatusHooks

TARGET_TEST_NAME = "unittest"
TEST_KEYWORD_ALL = "all"
TEST_SRC_SUBDIR = Path("src") / "test"


def pkg_is_testable(pack: Package) -> bool:
    return (pack.base_path / TEST_SRC_SUBDIR).is_dir()


class TestOrchestrator:
    __test__ = False

    def __init__(
        self,
        *,
        state: ProjectState,
        builder_factory: BuilderFactory,
        hooks: StatusHooks | None = None,
    ) -> None:
        self._state = state
        self._builder_factory = builder_factory
        self._hooks = hooks or StatusHooks()
        self._resolver = NameResolver(state)

    def select(self, args: list[str]) -> list[Package]:
        """Expand the package arguments into the packages to test.

        `all` selects every testable package in the project and discards
        the explicit names. Otherwise each name must resolve; the first
        failure aborts the whole batch.
        """

        self._state.initialize()
        if not args:
            raise UsageError("Must specify at least one package", show_help=True)

        if TEST_KEYWORD_ALL in args:
            packs = [pack for pack in self._state.model.iter_packages() if pkg_is_testable(pack)]
        else:
            packs = [self._resolver.resolve_package(name) for name in args]

        if not packs:
            raise UsageError("No testable packages found")
        return packs

    def run_batch(self, args: list[str]) -> TestBatchResult:
        """Run one isolated test cycle per selected package."""

        names = [pack.full_name for pack in self.select(args)]
        result = TestBatchResult()
        for full_name in names:
            outcome = self._run_cycle(full_name)
            result.record(outcome)
            if self._hooks.on_outcome:
                self._hooks.on_outcome(outcome)
        return result

    def run(self, args: list[str]) -> TestBatchResult:
        """Like `run_batch`, but raise `TestFailureError` if any package failed."""

        result = self.run_batch(args)
        if not result.ok:
            raise TestFailureError(result)
        self._hooks.emit(Verbosity.DEFAULT, result.passed_line())
        self._hooks.emit(Verbosity.DEFAULT, "All tests passed")
        return result

    def _run_cycle(self, full_name: str) -> TestOutcome:
        # Derived configuration from the previous package's build must not
        # leak into this one.
        self._state.reset()
        self._state.initialize()

        target = self._resolver.resolve_target(TARGET_TEST_NAME)
        if target is None:
            raise UsageError(f"Can't find unit test target: {TARGET_TEST_NAME}")

        builder = self._builder_factory(self._state, target)

        self._hooks.emit(Verbosity.DEFAULT, f"Testing package {full_name}")

        try:
            pack = self._resolver.resolve_package(full_name)
        except ResolutionError:
            raise UsageError(f"Failed to resolve package: {full_name}") from None

        try:
            builder.test(pack)
        except BuildToolError as exc:
            self._hooks.emit(Verbosity.QUIET, exc.text)
            return TestOutcome(package=pack.full_name, passed=False, diagnostic=exc.text)
        return TestOutcome(package=pack.full_name, passed=True)
