"""Shared fixtures: a small project tree on disk and a recording Builder."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import pytest

from adapters.project_loader import YamlProjectLoader
from core.domain.errors import ActionError
from core.domain.models import Package, Target
from core.domain.verbosity import Verbosity
from core.project import ProjectState
from core.services.hooks import StatusHooks


def write(path: Path, text: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def make_package(root: Path, rel: str, *, pkg_type: str = "lib", testable: bool = False) -> Path:
    pkg_dir = root / rel
    write(pkg_dir / "pkg.yml", f"pkg.name: {rel}\npkg.type: {pkg_type}\n")
    if testable:
        (pkg_dir / "src" / "test").mkdir(parents=True, exist_ok=True)
    return pkg_dir


def make_target(root: Path, name: str, *, bsp: str | None = "hw/bsp/native", app: str | None = None) -> Path:
    target_dir = make_package(root, f"targets/{name}", pkg_type="target")
    lines = []
    if app:
        lines.append(f"target.app: {app}")
    if bsp:
        lines.append(f"target.bsp: {bsp}")
    lines.append("target.build_profile: debug")
    write(target_dir / "target.yml", "\n".join(lines) + "\n")
    return target_dir


def build_project(root: Path) -> Path:
    """Project with three local libs (alpha and gamma testable) and one repo package."""

    write(root / "project.yml", "project.name: demo\n")
    make_package(root, "apps/blinky", pkg_type="app")
    make_package(root, "hw/bsp/native", pkg_type="bsp")
    make_package(root, "libs/alpha", testable=True)
    make_package(root, "libs/beta")
    make_package(root, "libs/gamma", testable=True)
    make_target(root, "unittest")
    make_target(root, "blinky_sim", app="apps/blinky")
    make_package(root / "repos" / "ext", "sys/log", testable=True)
    return root


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    return build_project(tmp_path / "proj")


@pytest.fixture
def state(project_root: Path) -> ProjectState:
    return ProjectState(project_root, YamlProjectLoader())


@dataclass
class Messages:
    items: list[tuple[Verbosity, str]] = field(default_factory=list)

    def __call__(self, level: Verbosity, message: str) -> None:
        self.items.append((level, message))

    def texts(self) -> list[str]:
        return [message for _, message in self.items]


@pytest.fixture
def messages() -> Messages:
    return Messages()


@pytest.fixture
def hooks(messages: Messages) -> StatusHooks:
    return StatusHooks(status=messages)


@dataclass
class Recorder:
    """Records every Builder construction and action."""

    calls: list[tuple[str, str, int]] = field(default_factory=list)
    builders: list["FakeBuilder"] = field(default_factory=list)
    failing: set[str] = field(default_factory=set)

    def factory(self, state: ProjectState, target: Target) -> "FakeBuilder":
        builder = FakeBuilder(self, state, target)
        self.builders.append(builder)
        return builder

    def actions(self, name: str) -> list[tuple[str, str, int]]:
        return [call for call in self.calls if call[0] == name]


class FakeBuilder:
    def __init__(self, recorder: Recorder, state: ProjectState, target: Target) -> None:
        state.ensure_current(target)
        self.recorder = recorder
        self.state = state
        self.target = target
        self.generation = state.generation

    def _record(self, action: str, subject: str) -> None:
        self.recorder.calls.append((action, subject, self.state.generation))

    def build(self) -> None:
        self._record("build", self.target.name)

    def clean(self) -> None:
        self._record("clean", self.target.name)

    def test(self, package: Package) -> None:
        self.state.ensure_current(package)
        self._record("test", package.full_name)
        if package.full_name in self.recorder.failing:
            raise ActionError(f"{package.full_name}: 1 of 3 tests failed")

    def load(self) -> None:
        self._record("load", self.target.name)

    def debug(self) -> None:
        self._record("debug", self.target.name)

    def size(self) -> None:
        self._record("size", self.target.name)

    def app_elf_path(self) -> Path:
        return Path("bin") / self.target.short_name / "app.elf"


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()
