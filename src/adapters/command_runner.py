"""Subprocess wrapper used by the toolchain builder."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from core.domain.errors import ActionError


@dataclass
class CommandResult:
    args: list[str]
    returncode: int
    output: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def run_command(args: Sequence[str], *, cwd: Path) -> CommandResult:
    """Run `args` to completion and capture combined stdout/stderr.

    A command that cannot be started raises `ActionError`; a non-zero exit
    status is returned to the caller.
    """

    if not args:
        raise ActionError("Empty command")
    try:
        proc = subprocess.run(
            list(args),
            cwd=str(cwd),
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        raise ActionError(f"Failed to run {args[0]}: {exc}") from exc
    output = (proc.stdout or "") + (proc.stderr or "")
    return CommandResult(args=list(args), returncode=proc.returncode, output=output)


CommandRunner = Callable[..., CommandResult]
