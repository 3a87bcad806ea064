"""Formatters applied to rendered source before it is written."""

from __future__ import annotations

import subprocess
from typing import Protocol

from . import config
from .errors import ConfigError, FormatError


class Formatter(Protocol):
    def format(self, filename: str, source: bytes) -> bytes: ...


class NoopFormatter:
    """Returns the rendered source unchanged."""

    def format(self, filename: str, source: bytes) -> bytes:
        return source


class CommandFormatter:
    """Pipe the source through a command that reads stdin and writes stdout."""

    def __init__(self, cmd: list[str]) -> None:
        self.cmd = list(cmd)

    def format(self, filename: str, source: bytes) -> bytes:
        prog = self.cmd[0]
        try:
            proc = subprocess.run(
                self.cmd,
                input=source,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=False,
            )
        except FileNotFoundError as e:
            raise FormatError(
                f"cannot format {filename}: `{prog}` not found on PATH "
                "(use --formatter none to skip formatting)",
                source=source,
            ) from e
        if proc.returncode != 0:
            err = (proc.stderr or b"").decode("utf-8", errors="replace").strip()
            # The tools report positions as <standard input>:line:col.
            err = err.replace("<standard input>", filename)
            raise FormatError(f"cannot format {filename}: {err}", source=source)
        return proc.stdout


class GofmtFormatter(CommandFormatter):
    def __init__(self, gofmt: str = "gofmt") -> None:
        super().__init__([gofmt])


class GoimportsFormatter(CommandFormatter):
    def __init__(self, goimports: str = "goimports") -> None:
        super().__init__([goimports])


FORMATTERS = {
    "gofmt": GofmtFormatter,
    "goimports": GoimportsFormatter,
    "none": NoopFormatter,
}


def get_formatter(name: str | None = None) -> Formatter:
    name = name or config.default_formatter_name()
    factory = FORMATTERS.get(name)
    if factory is None:
        raise ConfigError(f"unknown formatter {name!r} (expected one of: {', '.join(sorted(FORMATTERS))})")
    return factory()
