from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from ..errors import ResolveError
from ..gotypes import Signature, parse_signature


@dataclass(frozen=True)
class ResolvedMethod:
    name: str
    signature: Signature


@dataclass(frozen=True)
class ResolvedInterface:
    name: str
    # Method set with embedded interfaces already flattened, in source order.
    methods: tuple[ResolvedMethod, ...]

    @property
    def exported(self) -> bool:
        return self.name[:1].isupper()


@dataclass(frozen=True)
class ResolvedUnit:
    name: str
    import_path: str
    dir: Path
    interfaces: tuple[ResolvedInterface, ...]


class SourceResolver(Protocol):
    """Loads and type-checks one Go package directory."""

    def resolve(self, location: Path) -> ResolvedUnit: ...


def parse_unit(obj: Any) -> ResolvedUnit:
    """Build a ResolvedUnit from the scanner's JSON encoding of one package."""
    if not isinstance(obj, dict):
        raise ResolveError(f"invalid package entry: {obj!r}")
    name = obj.get("name")
    import_path = obj.get("path")
    directory = obj.get("dir")
    if not isinstance(name, str) or not name:
        raise ResolveError(f"package entry is missing a name: {obj!r}")
    if not isinstance(import_path, str) or not isinstance(directory, str):
        raise ResolveError(f"package entry for {name} is missing path/dir")

    interfaces: list[ResolvedInterface] = []
    seen: set[str] = set()
    for item in obj.get("interfaces") or []:
        if not isinstance(item, dict) or not isinstance(item.get("name"), str):
            raise ResolveError(f"invalid interface entry in {name}: {item!r}")
        iname = item["name"]
        if iname in seen:
            raise ResolveError(f"duplicate interface {iname} in package {name}")
        seen.add(iname)
        methods: list[ResolvedMethod] = []
        for m in item.get("methods") or []:
            if not isinstance(m, dict) or not isinstance(m.get("name"), str):
                raise ResolveError(f"invalid method entry in {name}.{iname}: {m!r}")
            methods.append(ResolvedMethod(name=m["name"], signature=parse_signature(m.get("sig"))))
        interfaces.append(ResolvedInterface(name=iname, methods=tuple(methods)))

    return ResolvedUnit(
        name=name,
        import_path=import_path,
        dir=Path(directory),
        interfaces=tuple(interfaces),
    )
