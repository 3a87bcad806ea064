"""The generation model: input units, interfaces, funcs and vars.

Entities are built fresh for every run. Only `Interface.stub_name` changes
after construction, first by rename directives and then by de-duplication.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .errors import RenderError
from .gotypes import GoType, Qualifier, Slice


@dataclass(eq=False)
class InputUnit:
    dir: Path
    input_name: str
    import_path: str
    output_name: str
    # True when the stubs live in a different package than the interfaces, so
    # references back to the input package must be qualified.
    external: bool = False
    # import path -> identifier used in the generated file
    deps: dict[str, str] = field(default_factory=dict)
    interfaces: list["Interface"] = field(default_factory=list)

    @property
    def output_filename(self) -> str:
        return f"{self.input_name}_stubs.go"

    @property
    def dep_idents(self) -> set[str]:
        return set(self.deps.values())

    @property
    def dep_paths(self) -> set[str]:
        return set(self.deps)

    def qualify(self, pkg_path: str) -> str:
        if pkg_path == self.import_path and not self.external:
            return ""
        ident = self.deps.get(pkg_path)
        if ident is None:
            raise RenderError(f"package {pkg_path} is referenced but was not recorded as a dependency")
        return ident


@dataclass(eq=False)
class Var:
    name: str
    type: GoType
    variadic: bool = False
    # Exported name of the matching call-record field (params only).
    field_name: str = ""

    def render(self, q: Qualifier) -> str:
        """Render the type as written in a signature (`...T` for variadics)."""
        if self.variadic:
            if not isinstance(self.type, Slice):
                raise RenderError(f"variadic parameter {self.name} is not a slice")
            return "..." + self.type.elem.render(q)
        return self.type.render(q)


@dataclass(eq=False)
class Func:
    name: str
    params: list[Var] = field(default_factory=list)
    results: list[Var] = field(default_factory=list)
    interface: "Interface | None" = field(default=None, repr=False)

    stub_field: str = ""
    calls_field: str = ""
    calls_accessor: str = ""

    @property
    def has_results(self) -> bool:
        return len(self.results) > 0

    @property
    def unit(self) -> InputUnit:
        if self.interface is None:
            raise RenderError(f"func {self.name} is not attached to an interface")
        return self.interface.unit

    def params_string(self) -> str:
        q = self.unit.qualify
        parts: list[str] = []
        for v in self.params:
            parts.append(f"{v.name} {v.render(q)}")
        return ", ".join(parts)

    def results_string(self) -> str:
        q = self.unit.qualify
        if not self.results:
            return ""
        s = ", ".join(f"{v.name} {v.type.render(q)}" if v.name else v.type.render(q) for v in self.results)
        if len(self.results) > 1 or self.results[0].name:
            s = f"({s})"
        return s

    def signature_string(self) -> str:
        results = self.results_string()
        if results:
            return f"({self.params_string()}) {results}"
        return f"({self.params_string()})"

    def params_struct(self) -> str:
        q = self.unit.qualify
        if not self.params:
            return "struct{}"
        # A variadic argument list is captured as the slice it arrives as.
        fields = "; ".join(f"{v.field_name} {v.type.render(q)}" for v in self.params)
        return "struct{ " + fields + " }"

    def params_struct_values(self) -> str:
        return ", ".join(f"{v.field_name}: {v.name}" for v in self.params)

    def param_names(self) -> str:
        return ", ".join(v.name + "..." if v.variadic else v.name for v in self.params)


@dataclass(eq=False)
class Interface:
    name: str
    unit: InputUnit
    funcs: list[Func] = field(default_factory=list)
    stub_name: str = ""

    @property
    def qualified_name(self) -> str:
        return f"{self.unit.input_name}.{self.name}"

    @property
    def type_ref(self) -> str:
        """The interface as written from inside the output package."""
        ident = self.unit.qualify(self.unit.import_path)
        return f"{ident}.{self.name}" if ident else self.name
