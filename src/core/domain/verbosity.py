"""Verbosity levels for status output.

The core tags each status message with a level; the CLI decides which levels
are shown.
"""

from __future__ import annotations

from enum import IntEnum


class Verbosity(IntEnum):
    QUIET = 0
    DEFAULT = 1
    VERBOSE = 2

    @classmethod
    def from_flags(cls, *, verbose: bool, quiet: bool) -> "Verbosity":
        """Derive a level from the global `--verbose` / `--quiet` flags."""

        if quiet:
            return cls.QUIET
        if verbose:
            return cls.VERBOSE
        return cls.DEFAULT

    @classmethod
    def parse(cls, value: str | int | "Verbosity") -> "Verbosity":
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            return cls(value)
        text = value.strip()
        if text.isdigit():
            return cls(int(text))
        try:
            return cls[text.upper()]
        except KeyError:
            raise ValueError(f"Unknown verbosity level: {value!r}") from None
