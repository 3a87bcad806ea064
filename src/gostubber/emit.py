from __future__ import annotations

from .deps import import_spec
from .errors import RenderError
from .model import Func, InputUnit, Interface
from .naming import RECEIVER

HEADER = "// Code generated by gostubber; DO NOT EDIT."


def render_unit(unit: InputUnit, *, build_tag: str | None = "nostubs") -> str:
    """Render the stubs for one input unit as Go source.

    The unit must have gone through dependency resolution and naming. The
    output is not formatted.
    """
    lines: list[str] = [HEADER, ""]
    if build_tag:
        # Building with `-tags <build_tag>` leaves the stubs out.
        lines.extend([f"//go:build !{build_tag}", ""])
    lines.extend([f"package {unit.output_name}", ""])

    if unit.deps:
        lines.append("import (")
        for path in sorted(unit.deps):
            lines.append("\t" + import_spec(path, unit.deps[path]))
        lines.extend([")", ""])

    for iface in unit.interfaces:
        lines.extend(_render_interface(iface))
    return "\n".join(lines).rstrip("\n") + "\n"


def _render_interface(iface: Interface) -> list[str]:
    if not iface.stub_name:
        raise RenderError(f"{iface.qualified_name} has no stub name")
    stub = iface.stub_name
    lines: list[str] = [
        f"// {stub} is a stubbed implementation of {iface.type_ref}.",
        f"type {stub} struct {{",
    ]
    for fn in iface.funcs:
        _check_members(fn)
        results = fn.results_string()
        fn_type = f"func({fn.params_string()})" + (f" {results}" if results else "")
        lines.extend(
            [
                f"\t// {fn.stub_field} defines the implementation for {fn.name}.",
                f"\t{fn.stub_field} {fn_type}",
                f"\t{fn.calls_field} []{fn.params_struct()}",
            ]
        )
    lines.extend(["}", ""])

    for fn in iface.funcs:
        lines.extend(_render_func(stub, fn))

    lines.extend(
        [
            "// Compile-time check that the implementation matches the interface.",
            f"var _ {iface.type_ref} = (*{stub})(nil)",
            "",
        ]
    )
    return lines


def _render_func(stub: str, fn: Func) -> list[str]:
    s = RECEIVER
    record = fn.params_struct()
    call = f"({s}.{fn.stub_field})({fn.param_names()})"
    if fn.has_results:
        call = "return " + call
    return [
        f"// {fn.name} delegates its behavior to the field {fn.stub_field}.",
        f"func ({s} *{stub}) {fn.name}{fn.signature_string()} {{",
        f"\tif {s}.{fn.stub_field} == nil {{",
        f'\t\tpanic("{stub}.{fn.name}: nil method stub")',
        "\t}",
        f"\t{s}.{fn.calls_field} = append({s}.{fn.calls_field}, {record}{{{fn.params_struct_values()}}})",
        f"\t{call}",
        "}",
        "",
        f"// {fn.calls_accessor} returns a copy of the calls made to {fn.name}. Each element",
        "// of the slice represents the parameters that were provided.",
        f"func ({s} *{stub}) {fn.calls_accessor}() []{record} {{",
        f"\treturn append([]{record}(nil), {s}.{fn.calls_field}...)",
        "}",
        "",
    ]


def _check_members(fn: Func) -> None:
    if not (fn.stub_field and fn.calls_field and fn.calls_accessor):
        raise RenderError(f"{fn.name}: member names were not assigned")
    if any(p.variadic for p in fn.params[:-1]):
        raise RenderError(f"{fn.name}: only the last parameter may be variadic")
    if any(not p.field_name for p in fn.params):
        raise RenderError(f"{fn.name}: call record fields were not named")
