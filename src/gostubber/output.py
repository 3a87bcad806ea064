from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from .errors import OutputError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedFile:
    unit_name: str
    path: Path
    content: bytes
    # Permission bits of the input directory, used if the destination is created.
    dir_mode: int = 0o755


def write_files(files: list[GeneratedFile]) -> list[Path]:
    """Write every generated file, creating destination directories as needed."""
    dupes = sorted(str(p) for p, n in Counter(f.path for f in files).items() if n > 1)
    if dupes:
        raise OutputError(f"more than one package would be written to {', '.join(dupes)}")

    written: list[Path] = []
    for f in files:
        try:
            f.path.parent.mkdir(parents=True, exist_ok=True, mode=f.dir_mode)
        except OSError as e:
            raise OutputError(f"cannot make output directory: {e}") from e
        try:
            f.path.write_bytes(f.content)
        except OSError as e:
            raise OutputError(f"failed to write output file {f.path}: {e}") from e
        log.debug("wrote %s", f.path)
        written.append(f.path)
    return written


def write_stream(files: list[GeneratedFile], out: BinaryIO) -> None:
    """Write every generated file to one stream, in order."""
    try:
        for f in files:
            out.write(f.content)
        out.flush()
    except OSError as e:
        raise OutputError(f"failed to write result: {e}") from e
