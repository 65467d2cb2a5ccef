"""Project tree loader (YAML manifests).

Layout understood here:

- `project.yml` at the root (`project.name` optional);
- every directory holding a `pkg.yml` is a package of the local repository;
- every directory under `repos/<repo>/` holding a `pkg.yml` is a package of
  repository `<repo>`;
- local packages of type `target` (or living under `targets/`) also define
  a Target through their `target.yml`.

Manifest keys may be written flat (`pkg.name: apps/blinky`) or nested
(`pkg: {name: apps/blinky}`).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Iterator

import yaml

from core.domain.errors import ProjectStateError
from core.domain.models import LOCAL_REPO, Package, ProjectModel, Target

PROJECT_FILE = "project.yml"
PKG_FILE = "pkg.yml"
TARGET_FILE = "target.yml"
REPOS_DIR = "repos"
TARGETS_DIR = "targets"


def read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ProjectStateError(f"Malformed YAML in {path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise ProjectStateError(f"Cannot decode {path}: {exc}") from exc
    except OSError as exc:
        raise ProjectStateError(f"Cannot read {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ProjectStateError(f"Expected a mapping at the top of {path}")
    return data


def manifest_value(data: dict[str, Any], key: str) -> Any:
    """Look up `a.b` either as a flat key or as nested mappings."""

    if key in data:
        return data[key]
    node: Any = data
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node


def _iter_package_dirs(top: Path, *, skip: set[str]) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(top):
        current = Path(dirpath)
        dirnames[:] = sorted(
            d for d in dirnames if not d.startswith(".") and not (current == top and d in skip)
        )
        if PKG_FILE in filenames:
            yield current


class YamlProjectLoader:
    """Loads a `ProjectModel` from a directory tree of YAML manifests."""

    def __init__(self, *, bin_dir: str = "bin") -> None:
        self._bin_dir = bin_dir

    def load(self, root: Path, *, generation: int) -> ProjectModel:
        project_file = root / PROJECT_FILE
        if not project_file.is_file():
            raise ProjectStateError(f"No project file found in {root}")

        project_data = read_yaml(project_file)
        name = manifest_value(project_data, "project.name") or root.name

        packages: dict[str, dict[str, Package]] = {LOCAL_REPO: {}}
        skip = {self._bin_dir, REPOS_DIR}
        for pkg_dir in _iter_package_dirs(root, skip=skip):
            self._add_package(packages, root, pkg_dir, LOCAL_REPO, generation)

        repos_root = root / REPOS_DIR
        if repos_root.is_dir():
            for repo_dir in sorted(p for p in repos_root.iterdir() if p.is_dir() and not p.name.startswith(".")):
                packages.setdefault(repo_dir.name, {})
                for pkg_dir in _iter_package_dirs(repo_dir, skip=set()):
                    self._add_package(packages, repo_dir, pkg_dir, repo_dir.name, generation)

        targets: dict[str, Target] = {}
        for pack in packages[LOCAL_REPO].values():
            if pack.pkg_type == "target" or pack.name.startswith(f"{TARGETS_DIR}/"):
                targets[pack.name] = self._load_target(pack)

        return ProjectModel(
            name=str(name),
            root=root,
            generation=generation,
            packages=packages,
            targets=targets,
        )

    def _add_package(
        self,
        packages: dict[str, dict[str, Package]],
        repo_root: Path,
        pkg_dir: Path,
        repo: str,
        generation: int,
    ) -> None:
        data = read_yaml(pkg_dir / PKG_FILE)
        rel_name = pkg_dir.relative_to(repo_root).as_posix()
        pack = Package(
            name=str(manifest_value(data, "pkg.name") or rel_name),
            repo=repo,
            pkg_type=str(manifest_value(data, "pkg.type") or "lib"),
            base_path=pkg_dir,
            generation=generation,
        )
        repo_packages = packages.setdefault(repo, {})
        if pack.full_name in repo_packages:
            other = repo_packages[pack.full_name].base_path
            raise ProjectStateError(
                f"Duplicate package name {pack.full_name!r} in {other} and {pkg_dir}"
            )
        repo_packages[pack.full_name] = pack

    def _load_target(self, pack: Package) -> Target:
        target_file = pack.base_path / TARGET_FILE
        data = read_yaml(target_file) if target_file.is_file() else {}
        app = manifest_value(data, "target.app")
        bsp = manifest_value(data, "target.bsp")
        profile = manifest_value(data, "target.build_profile")
        return Target(
            name=pack.name,
            base_path=pack.base_path,
            app=str(app) if app else None,
            bsp=str(bsp) if bsp else None,
            build_profile=str(profile) if profile else "default",
            generation=pack.generation,
        )
