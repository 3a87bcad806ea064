"""Go type descriptors as reported by the source resolver.

Every descriptor renders itself back to Go syntax. Package-qualified names are
printed through a `Qualifier`, which maps an import path to the identifier the
generated file uses for it (an empty string means "no qualifier").
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Iterator

from .errors import ResolveError

Qualifier = Callable[[str], str]


def no_qualifier(pkg_path: str) -> str:
    return ""


class GoType:
    def render(self, q: Qualifier) -> str:
        raise NotImplementedError

    def walk(self) -> Iterator["Leaf"]:
        """Yield every named and basic type reachable from this descriptor."""
        return iter(())


@dataclass(frozen=True)
class Basic(GoType):
    name: str

    def render(self, q: Qualifier) -> str:
        return self.name

    def walk(self) -> Iterator["Leaf"]:
        yield self


@dataclass(frozen=True)
class Named(GoType):
    # pkg_path is empty for universe types such as `error` and `comparable`.
    pkg_path: str
    pkg_name: str
    name: str
    # Type arguments of an instantiated generic type.
    args: tuple[GoType, ...] = ()

    @property
    def exported(self) -> bool:
        return self.name[:1].isupper()

    def render(self, q: Qualifier) -> str:
        s = self.name
        if self.pkg_path:
            ident = q(self.pkg_path)
            if ident:
                s = f"{ident}.{s}"
        if self.args:
            s += "[" + ", ".join(a.render(q) for a in self.args) + "]"
        return s

    def walk(self) -> Iterator["Leaf"]:
        yield self
        for a in self.args:
            yield from a.walk()


@dataclass(frozen=True)
class Pointer(GoType):
    elem: GoType

    def render(self, q: Qualifier) -> str:
        return "*" + self.elem.render(q)

    def walk(self) -> Iterator["Leaf"]:
        return self.elem.walk()


@dataclass(frozen=True)
class Slice(GoType):
    elem: GoType

    def render(self, q: Qualifier) -> str:
        return "[]" + self.elem.render(q)

    def walk(self) -> Iterator["Leaf"]:
        return self.elem.walk()


@dataclass(frozen=True)
class Array(GoType):
    length: int
    elem: GoType

    def render(self, q: Qualifier) -> str:
        return f"[{self.length}]" + self.elem.render(q)

    def walk(self) -> Iterator["Leaf"]:
        return self.elem.walk()


@dataclass(frozen=True)
class Map(GoType):
    key: GoType
    elem: GoType

    def render(self, q: Qualifier) -> str:
        return f"map[{self.key.render(q)}]{self.elem.render(q)}"

    def walk(self) -> Iterator["Leaf"]:
        yield from self.key.walk()
        yield from self.elem.walk()


_CHAN_DIRS = ("both", "send", "recv")


@dataclass(frozen=True)
class Chan(GoType):
    dir: str
    elem: GoType

    def render(self, q: Qualifier) -> str:
        elem = self.elem.render(q)
        if self.dir == "send":
            return "chan<- " + elem
        if self.dir == "recv":
            return "<-chan " + elem
        # `chan <-chan T` would parse as `chan<- chan T`.
        if isinstance(self.elem, Chan) and self.elem.dir == "recv":
            elem = f"({elem})"
        return "chan " + elem

    def walk(self) -> Iterator["Leaf"]:
        return self.elem.walk()


@dataclass(frozen=True)
class Field:
    name: str
    type: GoType


@dataclass(frozen=True)
class Signature(GoType):
    params: tuple[Field, ...]
    results: tuple[Field, ...]
    # When set, the last param's type is a Slice rendered as `...elem`.
    variadic: bool = False

    def params_string(self, q: Qualifier) -> str:
        parts: list[str] = []
        last = len(self.params) - 1
        for i, p in enumerate(self.params):
            if self.variadic and i == last:
                typ = "..." + _variadic_elem(p.type).render(q)
            else:
                typ = p.type.render(q)
            parts.append(f"{p.name} {typ}" if p.name else typ)
        return ", ".join(parts)

    def results_string(self, q: Qualifier) -> str:
        if not self.results:
            return ""
        if len(self.results) == 1 and not self.results[0].name:
            return self.results[0].type.render(q)
        parts = [f"{r.name} {r.type.render(q)}" if r.name else r.type.render(q) for r in self.results]
        return "(" + ", ".join(parts) + ")"

    def method_string(self, q: Qualifier) -> str:
        # Shared by `func(...)` literals and interface method specs.
        results = self.results_string(q)
        if results:
            return f"({self.params_string(q)}) {results}"
        return f"({self.params_string(q)})"

    def render(self, q: Qualifier) -> str:
        return "func" + self.method_string(q)

    def walk(self) -> Iterator["Leaf"]:
        for f in (*self.params, *self.results):
            yield from f.type.walk()


@dataclass(frozen=True)
class Method:
    name: str
    signature: Signature


@dataclass(frozen=True)
class InterfaceLit(GoType):
    methods: tuple[Method, ...] = ()

    def render(self, q: Qualifier) -> str:
        if not self.methods:
            return "interface{}"
        specs = [m.name + m.signature.method_string(q) for m in self.methods]
        return "interface{ " + "; ".join(specs) + " }"

    def walk(self) -> Iterator["Leaf"]:
        for m in self.methods:
            yield from m.signature.walk()


@dataclass(frozen=True)
class StructField:
    name: str
    type: GoType
    embedded: bool = False
    tag: str = ""


@dataclass(frozen=True)
class StructLit(GoType):
    fields: tuple[StructField, ...] = ()

    def render(self, q: Qualifier) -> str:
        if not self.fields:
            return "struct{}"
        parts: list[str] = []
        for f in self.fields:
            s = f.type.render(q) if f.embedded else f"{f.name} {f.type.render(q)}"
            if f.tag:
                s += " " + _tag_literal(f.tag)
            parts.append(s)
        return "struct{ " + "; ".join(parts) + " }"

    def walk(self) -> Iterator["Leaf"]:
        for f in self.fields:
            yield from f.type.walk()


Leaf = Basic | Named


def _variadic_elem(t: GoType) -> GoType:
    if not isinstance(t, Slice):
        raise ResolveError(f"variadic parameter must have a slice type, got {t!r}")
    return t.elem


def _tag_literal(tag: str) -> str:
    if "`" not in tag:
        return f"`{tag}`"
    # JSON string escapes are a subset of Go's interpreted string literal.
    return json.dumps(tag)


def parse_type(obj: Any) -> GoType:
    """Build a descriptor from the resolver's JSON encoding."""
    if not isinstance(obj, dict):
        raise ResolveError(f"invalid type descriptor: {obj!r}")
    kind = obj.get("kind")
    if kind == "basic":
        return Basic(name=_str(obj, "name"))
    if kind == "named":
        return Named(
            pkg_path=_str(obj, "pkg", allow_empty=True),
            pkg_name=_str(obj, "pkg_name", allow_empty=True),
            name=_str(obj, "name"),
            args=tuple(parse_type(a) for a in _list(obj, "args")),
        )
    if kind == "pointer":
        return Pointer(elem=parse_type(obj.get("elem")))
    if kind == "slice":
        return Slice(elem=parse_type(obj.get("elem")))
    if kind == "array":
        length = obj.get("len")
        if not isinstance(length, int) or isinstance(length, bool) or length < 0:
            raise ResolveError(f"invalid array length: {length!r}")
        return Array(length=length, elem=parse_type(obj.get("elem")))
    if kind == "map":
        return Map(key=parse_type(obj.get("key")), elem=parse_type(obj.get("elem")))
    if kind == "chan":
        direction = obj.get("dir", "both")
        if direction not in _CHAN_DIRS:
            raise ResolveError(f"invalid channel direction: {direction!r}")
        return Chan(dir=direction, elem=parse_type(obj.get("elem")))
    if kind == "func":
        return parse_signature(obj)
    if kind == "interface":
        methods = tuple(
            Method(name=_str(m, "name"), signature=parse_signature(m.get("sig")))
            for m in _list(obj, "methods")
        )
        return InterfaceLit(methods=methods)
    if kind == "struct":
        fields = tuple(
            StructField(
                name=_str(f, "name"),
                type=parse_type(f.get("type")),
                embedded=bool(f.get("embedded", False)),
                tag=f.get("tag") if isinstance(f.get("tag"), str) else "",
            )
            for f in _list(obj, "fields")
        )
        return StructLit(fields=fields)
    raise ResolveError(f"unknown type kind: {kind!r}")


def parse_signature(obj: Any) -> Signature:
    if not isinstance(obj, dict):
        raise ResolveError(f"invalid signature: {obj!r}")
    params = tuple(_parse_field(p) for p in _list(obj, "params"))
    results = tuple(_parse_field(r) for r in _list(obj, "results"))
    variadic = bool(obj.get("variadic", False))
    if variadic:
        if not params:
            raise ResolveError("variadic signature without parameters")
        _variadic_elem(params[-1].type)
    return Signature(params=params, results=results, variadic=variadic)


def _parse_field(obj: Any) -> Field:
    if not isinstance(obj, dict):
        raise ResolveError(f"invalid parameter: {obj!r}")
    name = obj.get("name", "")
    if not isinstance(name, str):
        raise ResolveError(f"invalid parameter name: {name!r}")
    return Field(name=name, type=parse_type(obj.get("type")))


def _str(obj: Any, key: str, *, allow_empty: bool = False) -> str:
    if not isinstance(obj, dict):
        raise ResolveError(f"expected object, got {obj!r}")
    v = obj.get(key, "" if allow_empty else None)
    if not isinstance(v, str) or (not v and not allow_empty):
        raise ResolveError(f"invalid {key!r} in {obj!r}")
    return v


def _list(obj: dict[str, Any], key: str) -> list[Any]:
    v = obj.get(key) or []
    if not isinstance(v, list):
        raise ResolveError(f"invalid {key!r} in {obj!r}")
    return v
