"""Project State lifecycle and generation tracking."""

from __future__ import annotations

from pathlib import Path

import pytest

from adapters.project_loader import YamlProjectLoader
from core.domain.errors import ProjectStateError, StaleEntityError
from core.project import ProjectState


class TestLifecycle:
    def test_starts_uninitialized(self, state):
        assert not state.is_initialized
        assert state.generation == 0
        with pytest.raises(ProjectStateError):
            state.model

    def test_initialize_is_idempotent(self, state):
        state.initialize()
        first = state.model
        state.initialize()

        assert state.model is first
        assert state.generation == 1

    def test_reset_then_initialize_starts_new_generation(self, state):
        state.initialize()
        state.reset()

        assert not state.is_initialized
        with pytest.raises(ProjectStateError):
            state.package_list()

        state.initialize()
        assert state.generation == 2

    def test_generation_numbers_are_never_reused(self, state):
        seen = []
        for _ in range(3):
            state.initialize()
            seen.append(state.generation)
            state.reset()

        assert seen == [1, 2, 3]

    def test_failed_initialize_leaves_state_uninitialized(self, tmp_path: Path):
        state = ProjectState(tmp_path, YamlProjectLoader())

        with pytest.raises(ProjectStateError, match="No project file found"):
            state.initialize()

        assert not state.is_initialized
        (tmp_path / "project.yml").write_text("project.name: late\n", encoding="utf-8")
        state.initialize()
        assert state.generation == 1


class TestEnsureCurrent:
    def test_accepts_entities_from_current_generation(self, state):
        state.initialize()
        target = state.model.targets["targets/unittest"]

        state.ensure_current(target)

    def test_rejects_entities_from_previous_generation(self, state):
        state.initialize()
        pack = state.package_list()["local"]["libs/alpha"]
        state.reset()
        state.initialize()

        with pytest.raises(StaleEntityError, match="libs/alpha"):
            state.ensure_current(pack)

    def test_rejects_everything_while_uninitialized(self, state):
        state.initialize()
        target = state.model.targets["targets/unittest"]
        state.reset()

        with pytest.raises(ProjectStateError):
            state.ensure_current(target)
