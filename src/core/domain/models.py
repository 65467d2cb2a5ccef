"""Domain models (Pydantic v2).

These describe *what* a project contains (targets, packages) and *what* a
batch test run produced. They know nothing about YAML, subprocesses or the
CLI.

Every Target and Package records the Project State generation it was
resolved under; `core.project.ProjectState.ensure_current` rejects entities
from a previous generation.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

LOCAL_REPO = "local"


class Package(BaseModel):
    """A unit of source code inside the loaded project."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(
        ...,
        min_length=1,
        description="Path of the package inside its repository (e.g. 'apps/blinky').",
    )
    repo: str = Field(
        default=LOCAL_REPO,
        min_length=1,
        description="Repository identifier; 'local' for the project's own tree.",
    )
    pkg_type: str = Field(
        default="lib",
        description="Package type declared in pkg.yml (app, bsp, lib, target, unittest...).",
    )
    base_path: Path = Field(
        ...,
        description="Directory holding the package's pkg.yml.",
    )
    generation: int = Field(
        ...,
        ge=1,
        description="Project State generation this package was resolved under.",
    )

    @property
    def full_name(self) -> str:
        if self.repo == LOCAL_REPO:
            return self.name
        return f"@{self.repo}/{self.name}"


class Target(BaseModel):
    """A named build configuration: app + BSP + build profile."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(
        ...,
        min_length=1,
        description="Full target package name (e.g. 'targets/blinky_nrf52').",
    )
    base_path: Path
    app: str | None = Field(
        default=None,
        description="Full name of the app package, if the target builds one.",
    )
    bsp: str | None = Field(
        default=None,
        description="Full name of the board support package.",
    )
    build_profile: str = "default"
    generation: int = Field(..., ge=1)

    @property
    def short_name(self) -> str:
        return self.name.rsplit("/", 1)[-1]


class ProjectModel(BaseModel):
    """One generation of the loaded project."""

    name: str
    root: Path
    generation: int = Field(..., ge=1)
    packages: dict[str, dict[str, Package]] = Field(
        default_factory=dict,
        description="Package list: repository id -> full name -> package.",
    )
    targets: dict[str, Target] = Field(default_factory=dict)

    def iter_packages(self):
        for repo_packages in self.packages.values():
            yield from repo_packages.values()


class TestOutcome(BaseModel):
    """Pass/fail record for one package of a batch test run."""

    __test__ = False

    package: str
    passed: bool
    diagnostic: str | None = None


class TestBatchResult(BaseModel):
    """Outcomes of one batch test run, in selection order."""

    __test__ = False

    outcomes: list[TestOutcome] = Field(default_factory=list)

    @property
    def passed(self) -> list[str]:
        return [o.package for o in self.outcomes if o.passed]

    @property
    def failed(self) -> list[str]:
        return [o.package for o in self.outcomes if not o.passed]

    @property
    def ok(self) -> bool:
        return not self.failed

    def record(self, outcome: TestOutcome) -> None:
        self.outcomes.append(outcome)

    def passed_line(self) -> str:
        return f"Passed tests: [{' '.join(self.passed)}]"

    def failed_line(self) -> str:
        return f"Failed tests: [{' '.join(self.failed)}]"
