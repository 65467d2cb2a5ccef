"""Name resolution against the current Project State generation.

Resolution is a pure lookup. A missing target is reported as `None` so the
caller can turn it into a usage error; package lookups raise
`ResolutionError` and their text is shown to the user verbatim.
"""

from __future__ import annotations

from core.domain.errors import ResolutionError
from core.domain.models import LOCAL_REPO, Package, Target
from core.project import ProjectState

TARGETS_DIR = "targets"


class NameResolver:
    def __init__(self, state: ProjectState) -> None:
        self._state = state

    def resolve_target(self, name: str) -> Target | None:
        """Find a target by full name, falling back to `targets/<name>`."""

        targets = self._state.model.targets
        target = targets.get(name)
        if target is None and not name.startswith(f"{TARGETS_DIR}/"):
            target = targets.get(f"{TARGETS_DIR}/{name}")
        return target

    def resolve_package(self, name: str) -> Package:
        """Find a package by `@repo/path` or, for the local repo, by path."""

        packages = self._state.package_list()
        name = name.strip().rstrip("/")

        if name.startswith("@"):
            repo, _, path = name[1:].partition("/")
            if not repo or not path:
                raise ResolutionError(f'Invalid package name "{name}"')
            repo_packages = packages.get(repo)
            if repo_packages is None:
                raise ResolutionError(f'Unknown repository "{repo}" in package name "{name}"')
            pack = repo_packages.get(name)
            if pack is None and repo == LOCAL_REPO:
                pack = repo_packages.get(path)
            if pack is None:
                raise ResolutionError(f'Could not resolve package "{name}"')
            return pack

        local = packages.get(LOCAL_REPO, {})
        if name in local:
            return local[name]

        matches = [
            pack
            for repo, repo_packages in packages.items()
            if repo != LOCAL_REPO
            for pack in repo_packages.values()
            if pack.name == name
        ]
        if len(matches) > 1:
            candidates = ", ".join(sorted(p.full_name for p in matches))
            raise ResolutionError(f'Ambiguous package name "{name}"; candidates: {candidates}')
        if matches:
            return matches[0]
        raise ResolutionError(f'Could not resolve package "{name}"')
