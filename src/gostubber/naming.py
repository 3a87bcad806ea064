"""Stub names, member names and identifier escaping.

`resolve_stub_names` is the only pass that looks across input units. It must
see every interface of the run before any unit is emitted, since a duplicate
found in a later unit renames stubs in earlier ones too.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Mapping

from .errors import ConfigError
from .gotypes import Basic
from .model import Func, InputUnit, Interface, Var

log = logging.getLogger(__name__)

STUB_PREFIX = "Stubbed"
# Receiver identifier used by every generated method.
RECEIVER = "s"
# Predeclared identifiers the generated method bodies refer to.
BODY_BUILTINS = frozenset({"append", "nil", "panic"})


def publicize(name: str) -> str:
    # TODO: keep initialisms readable, e.g. "db" -> "DB" instead of "Db".
    return name[:1].upper() + name[1:]


def lower_first(name: str) -> str:
    return name[:1].lower() + name[1:]


def escape_identifier(name: str, taken: Iterable[str]) -> str:
    """Prepend underscores to `name` until it is not in `taken`."""
    taken = set(taken)
    while name in taken:
        name = "_" + name
    return name


def default_stub_name(iface: Interface) -> str:
    # A stub in its own package can reuse the interface's name.
    if iface.unit.external:
        return iface.name
    return STUB_PREFIX + iface.name


def parse_renames(directives: Iterable[str]) -> dict[str, str]:
    """Parse `pkg.OldStub=NewStub` directives into a mapping."""
    out: dict[str, str] = {}
    for d in directives:
        old, sep, new = d.partition("=")
        old, new = old.strip(), new.strip()
        pkg, dot, stub = old.partition(".")
        if not sep or not dot or not pkg or not stub:
            raise ConfigError(f"invalid rename {d!r}: expected <package>.<StubName>=<NewName>")
        if not new.isidentifier():
            raise ConfigError(f"invalid rename {d!r}: {new!r} is not an identifier")
        out[old] = new
    return out


def resolve_stub_names(
    interfaces: list[Interface],
    renames: Mapping[str, str] | None = None,
) -> list[Interface]:
    """Assign a unique stub name to every interface of the run.

    Order: defaults, then renames keyed by `<input package>.<StubName>` (these
    always win), then every name that occurs more than once is prefixed with its
    package name. Names that still collide (two packages with the same name)
    get a numeric suffix in encounter order.
    """
    renames = renames or {}
    for iface in interfaces:
        iface.stub_name = default_stub_name(iface)

    applied: set[str] = set()
    for iface in interfaces:
        key = f"{iface.unit.input_name}.{iface.stub_name}"
        new = renames.get(key)
        if new:
            log.debug("renaming %s to %s", key, new)
            iface.stub_name = new
            applied.add(key)
    for key in sorted(set(renames) - applied):
        log.warning("rename %s did not match any stub", key)

    counts = Counter(iface.stub_name for iface in interfaces)
    for iface in interfaces:
        if counts[iface.stub_name] > 1:
            qualified = publicize(iface.unit.input_name) + iface.stub_name
            log.debug("%s is not unique, using %s for %s", iface.stub_name, qualified, iface.qualified_name)
            iface.stub_name = qualified

    seen: set[str] = set()
    for iface in interfaces:
        base = iface.stub_name
        name = base
        n = 2
        while name in seen:
            name = f"{base}{n}"
            n += 1
        seen.add(name)
        iface.stub_name = name
    return interfaces


def _unique_member(name: str, taken: set[str]) -> str:
    while name in taken:
        name += "_"
    taken.add(name)
    return name


def assign_member_names(iface: Interface) -> None:
    """Name the stub field, calls field and calls accessor of every method.

    Fields and methods share one namespace in a Go struct, so a member that
    would clash with an interface method (or another member) gets `_` appended.
    """
    taken = {fn.name for fn in iface.funcs}
    for fn in iface.funcs:
        fn.stub_field = _unique_member(fn.name + "Stub", taken)
        fn.calls_field = _unique_member(lower_first(fn.name) + "Calls", taken)
        fn.calls_accessor = _unique_member(fn.name + "Calls", taken)


def _bare_type_idents(unit: InputUnit, fn: Func) -> set[str]:
    # Identifiers that appear unqualified when the func's types are rendered.
    out: set[str] = set()
    for v in (*fn.params, *fn.results):
        for t in v.type.walk():
            if isinstance(t, Basic) or not t.pkg_path or not unit.qualify(t.pkg_path):
                out.add(t.name)
    return out


def escape_vars(unit: InputUnit) -> None:
    """Rename params and results that would shadow something the stub body uses.

    That covers dependency package identifiers, the receiver, the builtins in
    BODY_BUILTINS and type names written unqualified. Call-record field names
    are derived afterwards from the escaped param names. Requires `unit.deps`
    to be resolved.
    """
    base = unit.dep_idents | {RECEIVER}
    shadowable = base | BODY_BUILTINS
    for iface in unit.interfaces:
        for fn in iface.funcs:
            reserved = shadowable | _bare_type_idents(unit, fn)
            named: list[Var] = [v for v in (*fn.params, *fn.results) if v.name and v.name != "_"]
            assigned: set[str] = set()
            for i, v in enumerate(named):
                later = {w.name for w in named[i + 1 :]}
                v.name = escape_identifier(v.name, reserved | assigned | later)
                assigned.add(v.name)

            # Field names are selectors, so they keep the readable form of the
            # param name and are only escaped against imports and each other.
            fields: set[str] = set()
            for p in fn.params:
                p.field_name = escape_identifier(publicize(p.name.lstrip("_") or p.name), base | fields)
                fields.add(p.field_name)
