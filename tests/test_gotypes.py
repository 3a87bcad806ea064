from __future__ import annotations

import pytest


def _q(pkg_path: str) -> str:
    return {"io": "io", "database/sql": "sql", "example.com/bank": "bank"}.get(pkg_path, "")


def test_render_composite_types(gt):
    from gostubber.gotypes import parse_type

    cases = [
        (gt.pointer(gt.named("database/sql", "DB")), "*sql.DB"),
        (gt.slice(gt.basic("byte")), "[]byte"),
        (gt.array(4, gt.basic("int")), "[4]int"),
        (gt.map(gt.basic("string"), gt.slice(gt.named("io", "Reader"))), "map[string][]io.Reader"),
        (gt.chan(gt.basic("int"), dir="send"), "chan<- int"),
        (gt.chan(gt.basic("int"), dir="recv"), "<-chan int"),
        (gt.chan(gt.chan(gt.basic("int"), dir="recv")), "chan (<-chan int)"),
        (gt.named("", "error"), "error"),
        ({"kind": "interface", "methods": []}, "interface{}"),
        ({"kind": "struct", "fields": []}, "struct{}"),
    ]
    for obj, want in cases:
        assert parse_type(obj).render(_q) == want


def test_named_types_from_the_output_package_are_unqualified(gt):
    from gostubber.gotypes import parse_type

    t = parse_type(gt.pointer(gt.named("example.com/ledger", "Entry")))
    assert t.render(_q) == "*Entry"


def test_render_func_type(gt):
    from gostubber.gotypes import parse_type

    t = parse_type(
        gt.func(
            params=[gt.field("", gt.basic("string")), gt.field("", gt.slice(gt.named("", "error")))],
            results=[gt.field("", gt.basic("bool"))],
            variadic=True,
        )
    )
    assert t.render(_q) == "func(string, ...error) bool"

    named_results = parse_type(
        gt.func(results=[gt.field("n", gt.basic("int")), gt.field("err", gt.named("", "error"))])
    )
    assert named_results.render(_q) == "func() (n int, err error)"


def test_render_interface_and_struct_literals(gt):
    from gostubber.gotypes import parse_type

    iface = parse_type(
        {
            "kind": "interface",
            "methods": [
                gt.method("Close", results=[gt.field("", gt.named("", "error"))]),
                gt.method("Write", params=[gt.field("p", gt.slice(gt.basic("byte")))]),
            ],
        }
    )
    assert iface.render(_q) == "interface{ Close() error; Write(p []byte) }"

    st = parse_type(
        {
            "kind": "struct",
            "fields": [
                {"name": "Name", "type": gt.basic("string"), "tag": 'json:"name"'},
                {"name": "Writer", "type": gt.named("io", "Writer"), "embedded": True},
            ],
        }
    )
    assert st.render(_q) == 'struct{ Name string `json:"name"`; io.Writer }'


def test_render_instantiated_generic_type(gt):
    from gostubber.gotypes import parse_type

    obj = gt.named("sync/atomic", "Pointer")
    obj["args"] = [gt.named("example.com/bank", "Account")]
    t = parse_type(obj)
    assert t.render(lambda p: {"sync/atomic": "atomic", "example.com/bank": "bank"}[p]) == "atomic.Pointer[bank.Account]"
    assert [n.name for n in t.walk()] == ["Pointer", "Account"]


def test_walk_reaches_nested_types(gt):
    from gostubber.gotypes import Basic, Named, parse_type

    t = parse_type(
        gt.map(
            gt.basic("string"),
            gt.func(params=[gt.field("r", gt.pointer(gt.named("net/http", "Request")))]),
        )
    )
    leaves = list(t.walk())
    assert Basic(name="string") in leaves
    assert [x.pkg_path for x in leaves if isinstance(x, Named)] == ["net/http"]


@pytest.mark.parametrize(
    "obj",
    [
        None,
        {"kind": "tuple"},
        {"kind": "named", "pkg": "io"},
        {"kind": "array", "len": -1, "elem": {"kind": "basic", "name": "int"}},
        {"kind": "chan", "dir": "sideways", "elem": {"kind": "basic", "name": "int"}},
        {"kind": "func", "params": [], "results": [], "variadic": True},
        {"kind": "func", "params": [{"name": "x", "type": {"kind": "basic", "name": "int"}}], "variadic": True},
    ],
)
def test_parse_type_rejects_malformed_descriptors(obj):
    from gostubber.errors import ResolveError
    from gostubber.gotypes import parse_type

    with pytest.raises(ResolveError):
        parse_type(obj)
