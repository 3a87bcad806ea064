from __future__ import annotations

from .errors import UnsupportedInterfaceError
from .gotypes import Named
from .model import InputUnit

# Import paths that cannot be imported from another package.
_UNIMPORTABLE = ("command-line-arguments",)


def referenced_types(unit: InputUnit) -> list[Named]:
    """Every named type used by a param or result of any stubbed method."""
    out: list[Named] = []
    for iface in unit.interfaces:
        for fn in iface.funcs:
            for v in (*fn.params, *fn.results):
                out.extend(t for t in v.type.walk() if isinstance(t, Named))
    return out


def resolve_dependencies(unit: InputUnit) -> dict[str, str]:
    """Record the packages the generated file must import for `unit`.

    Named types defined outside the output package become dependencies. In
    external mode that includes the input package itself, which the
    interface-satisfaction assertion always references. Two dependencies with
    the same package name get numbered identifiers (`rand`, `rand2`) in import
    path order, with the input package keeping its own name.

    The mapping (import path -> identifier) is stored on `unit.deps` and returned.
    """
    wanted: dict[str, str] = {}
    for named in referenced_types(unit):
        if not named.pkg_path:
            continue
        if named.pkg_path == unit.import_path:
            if not unit.external:
                continue
            if not named.exported:
                raise UnsupportedInterfaceError(
                    f"{unit.input_name}.{named.name} is unexported and cannot be "
                    f"referenced from package {unit.output_name}"
                )
        wanted[named.pkg_path] = named.pkg_name

    order = sorted(wanted)
    if unit.external and unit.interfaces:
        if unit.import_path in _UNIMPORTABLE or unit.import_path.startswith(("_/", ".")):
            raise UnsupportedInterfaceError(
                f"package {unit.input_name} at {unit.dir} has no importable path; "
                "write the stubs alongside it instead"
            )
        wanted[unit.import_path] = unit.input_name
        order = [unit.import_path, *(p for p in order if p != unit.import_path)]

    deps: dict[str, str] = {}
    used: set[str] = set()
    for path in order:
        base = wanted[path]
        ident = base
        n = 2
        while ident in used:
            ident = f"{base}{n}"
            n += 1
        used.add(ident)
        deps[path] = ident

    unit.deps = deps
    return deps


def import_spec(path: str, ident: str) -> str:
    """Render one import line, aliasing when the identifier is not the path's last element."""
    if ident == path.rsplit("/", 1)[-1]:
        return f'"{path}"'
    return f'{ident} "{path}"'
