"""The generation pipeline: resolve, model, name, render, format, write."""

from __future__ import annotations

import logging
import stat
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO

from . import config
from .deps import resolve_dependencies
from .emit import render_unit
from .errors import FormatError, ResolveError
from .extract import extract_interfaces, new_input_unit
from .format import Formatter, get_formatter
from .model import InputUnit
from .naming import assign_member_names, escape_vars, resolve_stub_names
from .output import GeneratedFile, write_files, write_stream
from .resolver.scan import GoSourceResolver
from .resolver.symbols import ResolvedUnit, SourceResolver

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerateOptions:
    inputs: tuple[Path, ...] = (Path("."),)
    # Interface names to stub; empty means every interface.
    types: frozenset[str] = frozenset()
    # None writes each unit's stubs next to its input.
    output_dir: Path | None = None
    # "<package>.<StubName>" -> new stub name
    renames: Mapping[str, str] = field(default_factory=dict)
    build_tag: str | None = field(default_factory=config.default_build_tag)


def build_model(resolved: list[ResolvedUnit], options: GenerateOptions) -> list[InputUnit]:
    """Turn resolved packages into named, render-ready InputUnits.

    Stub names are assigned in one pass over the interfaces of every unit,
    after all of them have been extracted.
    """
    units: list[InputUnit] = []
    for r in resolved:
        unit = new_input_unit(r, output_dir=options.output_dir)
        extract_interfaces(r, unit, include=options.types or None)
        units.append(unit)

    if options.types:
        found = {iface.name for unit in units for iface in unit.interfaces}
        for name in sorted(options.types - found):
            log.warning("no interface named %s was found", name)

    for unit in units:
        resolve_dependencies(unit)
        escape_vars(unit)
        for iface in unit.interfaces:
            assign_member_names(iface)

    resolve_stub_names([iface for unit in units for iface in unit.interfaces], options.renames)
    return units


def _dir_mode(path: Path) -> int:
    try:
        return stat.S_IMODE(Path(path).stat().st_mode)
    except OSError as e:
        raise ResolveError(f"cannot stat input dir: {e}") from e


def generate_files(
    options: GenerateOptions,
    *,
    resolver: SourceResolver,
    formatter: Formatter,
) -> list[GeneratedFile]:
    """Produce the formatted stubs for every input without writing anything."""
    modes = [_dir_mode(p) for p in options.inputs]
    resolved = [resolver.resolve(Path(p)) for p in options.inputs]
    units = build_model(resolved, options)

    files: list[GeneratedFile] = []
    for unit, mode in zip(units, modes, strict=True):
        if not unit.interfaces:
            log.debug("%s: no interfaces to stub", unit.input_name)
            continue
        text = render_unit(unit, build_tag=options.build_tag)
        try:
            code = formatter.format(unit.output_filename, text.encode("utf-8"))
        except FormatError as e:
            log.error("%s", e.source.decode("utf-8", errors="replace"))
            raise
        dest = Path(options.output_dir) if options.output_dir is not None else unit.dir
        files.append(
            GeneratedFile(unit_name=unit.input_name, path=dest / unit.output_filename, content=code, dir_mode=mode)
        )
    return files


def run(
    options: GenerateOptions,
    *,
    resolver: SourceResolver | None = None,
    formatter: Formatter | None = None,
    out: BinaryIO | None = None,
) -> list[GeneratedFile]:
    """Generate stubs and write them to `out`, or to files when `out` is None.

    Nothing is written unless every unit rendered and formatted.
    """
    formatter = formatter or get_formatter()
    if resolver is None:
        with GoSourceResolver() as go_resolver:
            files = generate_files(options, resolver=go_resolver, formatter=formatter)
    else:
        files = generate_files(options, resolver=resolver, formatter=formatter)

    if out is not None:
        write_stream(files, out)
    else:
        write_files(files)
    return files
