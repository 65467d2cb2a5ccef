"""Settings parsing and the user-level .env writer."""

from __future__ import annotations

import pytest

from core.config import AppSettings, _parse_env_lines, write_user_env_vars
from core.domain.verbosity import Verbosity


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("quiet", Verbosity.QUIET), ("VERBOSE", Verbosity.VERBOSE), ("1", Verbosity.DEFAULT)],
)
def test_verbosity_from_environment(monkeypatch, tmp_path, raw, expected):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("FWBUILD_VERBOSITY", raw)

    assert AppSettings().verbosity is expected


def test_unknown_verbosity_is_rejected():
    with pytest.raises(ValueError):
        Verbosity.parse("chatty")


def test_verbosity_flags():
    assert Verbosity.from_flags(verbose=False, quiet=False) is Verbosity.DEFAULT
    assert Verbosity.from_flags(verbose=True, quiet=False) is Verbosity.VERBOSE
    assert Verbosity.from_flags(verbose=True, quiet=True) is Verbosity.QUIET


def test_resolved_root(tmp_path):
    settings = AppSettings(project_root=tmp_path / "a" / ".." / "b")

    assert settings.resolved_root() == (tmp_path / "b").resolve()


def test_write_user_env_vars_merges_and_quotes(tmp_path):
    env_path = tmp_path / "cfg" / ".env"
    env_path.parent.mkdir()
    env_path.write_text("# old\nFWBUILD_BIN_DIR=out\nFWBUILD_SIZE_COMMAND=size\n", encoding="utf-8")

    write_user_env_vars(
        {"FWBUILD_SIZE_COMMAND": "arm-none-eabi-size -A {elf}", "FWBUILD_DEBUG_COMMAND": None},
        env_path=env_path,
    )

    lines = env_path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "# fwbuild user config (.env)"
    assert "FWBUILD_BIN_DIR=out" in lines
    assert 'FWBUILD_SIZE_COMMAND="arm-none-eabi-size -A {elf}"' in lines
    assert not any(line.startswith("FWBUILD_DEBUG_COMMAND") for line in lines)


def test_write_user_env_vars_escapes_mixed_quotes(monkeypatch, tmp_path):
    monkeypatch.delenv("FWBUILD_DEBUG_COMMAND", raising=False)
    env_path = tmp_path / ".env"
    command = """sh -c 'echo "x"' {elf}"""

    write_user_env_vars({"FWBUILD_DEBUG_COMMAND": command}, env_path=env_path)

    assert _parse_env_lines(env_path.read_text(encoding="utf-8")) == {"FWBUILD_DEBUG_COMMAND": command}
    assert AppSettings(_env_file=env_path).debug_command == command


def test_rewriting_keeps_escaped_values(tmp_path):
    env_path = tmp_path / ".env"
    command = 'gdb -ex "target remote :3333" C:\\fw\\{elf}'
    write_user_env_vars({"FWBUILD_DEBUG_COMMAND": command}, env_path=env_path)

    write_user_env_vars({"FWBUILD_BIN_DIR": "out"}, env_path=env_path)

    parsed = _parse_env_lines(env_path.read_text(encoding="utf-8"))
    assert parsed == {"FWBUILD_BIN_DIR": "out", "FWBUILD_DEBUG_COMMAND": command}
