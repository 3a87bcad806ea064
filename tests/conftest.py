from pathlib import Path
from types import SimpleNamespace

import pytest


def _basic(name):
    return {"kind": "basic", "name": name}


def _named(pkg, name, pkg_name=None):
    if not pkg:
        return {"kind": "named", "pkg": "", "pkg_name": "", "name": name}
    return {"kind": "named", "pkg": pkg, "pkg_name": pkg_name or pkg.rsplit("/", 1)[-1], "name": name}


def _wrap(kind, elem, **extra):
    return {"kind": kind, "elem": elem, **extra}


def _field(name, typ):
    return {"name": name, "type": typ}


def _sig(params=(), results=(), variadic=False):
    return {"params": list(params), "results": list(results), "variadic": variadic}


def _method(name, params=(), results=(), variadic=False):
    return {"name": name, "sig": _sig(params, results, variadic)}


def _iface(name, *methods):
    return {"name": name, "methods": list(methods)}


@pytest.fixture
def gt():
    """Builders for the resolver's JSON encoding of packages and types."""
    return SimpleNamespace(
        basic=_basic,
        named=_named,
        pointer=lambda elem: _wrap("pointer", elem),
        slice=lambda elem: _wrap("slice", elem),
        array=lambda n, elem: _wrap("array", elem, len=n),
        map=lambda key, elem: _wrap("map", elem, key=key),
        chan=lambda elem, dir="both": _wrap("chan", elem, dir=dir),
        func=lambda params=(), results=(), variadic=False: {"kind": "func", **_sig(params, results, variadic)},
        field=_field,
        method=_method,
        iface=_iface,
    )


class FakeResolver:
    def __init__(self, units):
        self.units = {Path(u["dir"]).resolve(): u for u in units}
        self.calls = []

    def resolve(self, location):
        from gostubber.resolver.symbols import parse_unit

        location = Path(location).resolve()
        self.calls.append(location)
        return parse_unit(self.units[location])


@pytest.fixture
def pkg(tmp_path: Path):
    """Create a package directory and return its resolver encoding."""

    def make(name, *interfaces, path=None, subdir=None):
        d = tmp_path / (subdir or name)
        d.mkdir(parents=True, exist_ok=True)
        return {
            "name": name,
            "path": path or f"example.com/{name}",
            "dir": str(d),
            "interfaces": list(interfaces),
        }

    return make


@pytest.fixture
def fake_resolver():
    return FakeResolver


@pytest.fixture
def account_pkg(pkg, gt):
    return pkg(
        "bank",
        gt.iface(
            "Account",
            gt.method("Balance", results=[gt.field("", gt.basic("int"))]),
            gt.method("Summarize", params=[gt.field("w", gt.named("io", "Writer"))]),
        ),
    )
