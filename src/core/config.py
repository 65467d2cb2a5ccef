"""Application configuration.

Why here:
- Environment-driven settings (pydantic-settings) live in one place, outside
  the CLI.
- Adapters read the command templates and output root the same way the CLI
  does.
"""

from __future__ import annotations

import os
import re
import sys
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.verbosity import Verbosity


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no extra deps)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "fwbuild"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "fwbuild"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "fwbuild"
    return Path.home() / ".config" / "fwbuild"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


_QUOTE_TRIGGERS = frozenset("\"'#\\")
_ESCAPED = re.compile(r'\\([\\"])')


def _quote(value: str) -> str:
    """Double-quote a value, escaping backslashes and double quotes as dotenv expects."""

    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return _ESCAPED.sub(r"\1", value[1:-1])
    if len(value) >= 2 and value[0] == value[-1] == "'":
        return value[1:-1]
    return value


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = _unquote(value.strip())
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str | None], *, env_path: Path | None = None) -> Path:
    """Write/update variables in the user-level .env file."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# fwbuild user config (.env)"]
    for key in sorted(existing.keys()):
        value = existing[key]
        if any(ch.isspace() or ch in _QUOTE_TRIGGERS for ch in value):
            value = _quote(value)
        lines.append(f"{key}={value}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Central application settings.

    Command templates are formatted with the placeholders documented on
    `adapters.toolchain_builder.ToolchainBuilder` and split with `shlex`.
    """

    model_config = SettingsConfigDict(
        env_prefix="FWBUILD_",
        extra="ignore",
        case_sensitive=False,
        # Project .env first (dev), then the user-level one.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    project_root: Path = Field(
        default=Path("."),
        description="Root of the project tree (directory holding project.yml).",
    )
    bin_dir: str = Field(
        default="bin",
        min_length=1,
        description="Build output root, relative to the project root.",
    )
    verbosity: Verbosity = Field(
        default=Verbosity.DEFAULT,
        description="Status output level (quiet/default/verbose).",
    )
    show_banner: bool = Field(
        default=True,
        description="Print the banner before interactive commands.",
    )

    build_command: str = Field(
        default="make -C {app_path} BSP={bsp_path} BIN_DIR={bin_dir} ELF={elf} PROFILE={profile}",
        min_length=1,
        description="Command that builds the target's app into {elf}.",
    )
    test_command: str = Field(
        default="make -C {package_path} test BSP={bsp_path} BIN_DIR={bin_dir} PROFILE={profile}",
        min_length=1,
        description="Command that builds and runs one package's unit tests.",
    )
    load_command: str = Field(
        default="{bsp_path}/{bsp_name}_download.sh {bsp_path} {elf}",
        min_length=1,
        description="Command that flashes {elf} onto the board.",
    )
    debug_command: str = Field(
        default="{bsp_path}/{bsp_name}_debug.sh {bsp_path} {elf}",
        min_length=1,
        description="Command that opens a debugger session for {elf}.",
    )
    size_command: str = Field(
        default="arm-none-eabi-size -A {elf}",
        min_length=1,
        description="Command that reports the size breakdown of {elf}.",
    )

    @field_validator("verbosity", mode="before")
    @classmethod
    def _parse_verbosity(cls, value: object) -> object:
        if isinstance(value, (str, int)):
            return Verbosity.parse(value)
        return value

    def resolved_root(self) -> Path:
        return self.project_root.expanduser().resolve()
