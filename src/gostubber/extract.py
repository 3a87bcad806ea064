from __future__ import annotations

import logging
from collections.abc import Collection
from pathlib import Path

from .errors import UnsupportedInterfaceError
from .model import InputUnit, Interface
from .resolver.symbols import ResolvedUnit
from .signature import model_func

log = logging.getLogger(__name__)

# Methods with this name are documentation-only placeholders.
BLANK = "_"


def new_input_unit(resolved: ResolvedUnit, *, output_dir: Path | None) -> InputUnit:
    """Create the InputUnit for a resolved package.

    Output goes alongside the input unless `output_dir` names a different
    directory, in which case the output package is named after that directory
    and references back to the input package are qualified.
    """
    unit = InputUnit(
        dir=resolved.dir,
        input_name=resolved.name,
        import_path=resolved.import_path,
        output_name=resolved.name,
    )
    if output_dir is not None and Path(output_dir).resolve() != Path(resolved.dir).resolve():
        unit.output_name = Path(output_dir).resolve().name
        unit.external = True
    return unit


def extract_interfaces(
    resolved: ResolvedUnit,
    unit: InputUnit,
    *,
    include: Collection[str] | None = None,
) -> list[Interface]:
    """Build an Interface for each resolved interface, optionally limited to `include`.

    The resolved method sets are already flattened, so embedding is not walked
    here. The interfaces are attached to `unit` and returned.
    """
    out: list[Interface] = []
    for decl in resolved.interfaces:
        if include and decl.name not in include:
            continue
        if unit.external and not decl.exported:
            log.debug("skipping %s.%s: unexported interface in external mode", unit.input_name, decl.name)
            continue

        iface = Interface(name=decl.name, unit=unit)
        for method in decl.methods:
            if method.name == BLANK:
                continue
            if unit.external and not method.name[:1].isupper():
                raise UnsupportedInterfaceError(
                    f"{iface.qualified_name} has unexported method {method.name} "
                    f"and cannot be implemented from package {unit.output_name}"
                )
            fn = model_func(method)
            fn.interface = iface
            iface.funcs.append(fn)
        out.append(iface)

    unit.interfaces.extend(out)
    return out
