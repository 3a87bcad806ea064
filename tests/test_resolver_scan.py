from __future__ import annotations

import json
import subprocess
from pathlib import Path

import pytest


def test_parse_unit_reads_interfaces(account_pkg):
    from gostubber.gotypes import Named
    from gostubber.resolver.symbols import parse_unit

    unit = parse_unit(account_pkg)
    assert unit.name == "bank"
    assert unit.import_path == "example.com/bank"
    assert [i.name for i in unit.interfaces] == ["Account"]
    summarize = unit.interfaces[0].methods[1]
    assert summarize.name == "Summarize"
    assert summarize.signature.params[0].type == Named(pkg_path="io", pkg_name="io", name="Writer")


def test_parse_unit_rejects_duplicate_interfaces(pkg, gt):
    from gostubber.errors import ResolveError
    from gostubber.resolver.symbols import parse_unit

    obj = pkg("bank", gt.iface("Account"), gt.iface("Account"))
    with pytest.raises(ResolveError, match="duplicate interface Account"):
        parse_unit(obj)


def test_parse_unit_requires_package_name(tmp_path: Path):
    from gostubber.errors import ResolveError
    from gostubber.resolver.symbols import parse_unit

    with pytest.raises(ResolveError):
        parse_unit({"path": "example.com/x", "dir": str(tmp_path), "interfaces": []})


def test_missing_go_raises_resolve_error(monkeypatch, tmp_path):
    from gostubber.errors import ResolveError
    from gostubber.resolver.scan import GoSourceResolver

    def fake_run(*args, **kwargs):  # noqa: ANN001
        raise FileNotFoundError("go")

    monkeypatch.setattr(subprocess, "run", fake_run)

    with GoSourceResolver(go="go") as r:
        with pytest.raises(ResolveError, match=r"Go toolchain not found"):
            r.resolve(tmp_path)


def test_type_check_failure_is_reported_verbatim(monkeypatch, tmp_path):
    from gostubber.errors import ResolveError
    from gostubber.resolver.scan import GoSourceResolver

    message = "cannot check package example.com/bank: account.go:5:2: undefined: Writer"

    def fake_run(cmd, **kwargs):  # noqa: ANN001
        if cmd[1] == "build":
            return subprocess.CompletedProcess(cmd, 0, stdout=b"", stderr=b"")
        return subprocess.CompletedProcess(cmd, 1, stdout=b"", stderr=(message + "\n").encode())

    monkeypatch.setattr(subprocess, "run", fake_run)

    with GoSourceResolver(go="go") as r:
        with pytest.raises(ResolveError) as ei:
            r.resolve(tmp_path)
    assert str(ei.value) == message


def test_helper_is_built_once_and_removed_on_close(monkeypatch, tmp_path, account_pkg):
    from gostubber.resolver.scan import GoSourceResolver

    calls: list[list[str]] = []
    build_dirs: list[Path] = []

    def fake_run(cmd, **kwargs):  # noqa: ANN001
        calls.append(cmd)
        if cmd[1] == "build":
            build_dirs.append(Path(kwargs["cwd"]))
            assert kwargs["env"]["GOWORK"] == "off"
            assert kwargs["env"]["GOTOOLCHAIN"] == "local"
            assert (Path(kwargs["cwd"]) / "main.go").exists()
            return subprocess.CompletedProcess(cmd, 0, stdout=b"", stderr=b"")
        return subprocess.CompletedProcess(cmd, 0, stdout=json.dumps(account_pkg).encode(), stderr=b"")

    monkeypatch.setattr(subprocess, "run", fake_run)

    r = GoSourceResolver(go="/opt/go/bin/go")
    first = r.resolve(tmp_path)
    second = r.resolve(tmp_path)
    assert first == second
    assert [c[1] for c in calls] == ["build", "--dir", "--dir"]
    assert calls[1][-2:] == ["--go", "/opt/go/bin/go"]
    assert build_dirs[0].exists()
    r.close()
    assert not build_dirs[0].exists()


def test_unparseable_helper_output(monkeypatch, tmp_path):
    from gostubber.errors import ResolveError
    from gostubber.resolver.scan import GoSourceResolver

    def fake_run(cmd, **kwargs):  # noqa: ANN001
        return subprocess.CompletedProcess(cmd, 0, stdout=b"not json", stderr=b"")

    monkeypatch.setattr(subprocess, "run", fake_run)

    with GoSourceResolver(go="go") as r:
        with pytest.raises(ResolveError, match="failed to parse resolver output"):
            r.resolve(tmp_path)


def test_resolve_rejects_missing_directory(tmp_path):
    from gostubber.errors import ResolveError
    from gostubber.resolver.scan import GoSourceResolver

    with GoSourceResolver(go="go") as r:
        with pytest.raises(ResolveError, match="not a directory"):
            r.resolve(tmp_path / "nope")


def test_go_binary_env_override(monkeypatch):
    from gostubber.resolver.scan import GoSourceResolver

    monkeypatch.setenv("GOSTUBBER_GO", "/usr/local/go/bin/go")
    assert GoSourceResolver().go == "/usr/local/go/bin/go"


def test_helper_build_failure_names_minimum_go(monkeypatch, tmp_path):
    from gostubber.errors import ResolveError
    from gostubber.resolver.scan import MIN_GO_VERSION, GoSourceResolver

    def fake_run(cmd, **kwargs):  # noqa: ANN001
        return subprocess.CompletedProcess(
            cmd, 1, stdout=b"", stderr=b"go: go.mod requires go >= 1.22 (running go 1.21.6; GOTOOLCHAIN=local)\n"
        )

    monkeypatch.setattr(subprocess, "run", fake_run)

    with GoSourceResolver(go="go") as r:
        with pytest.raises(ResolveError) as ei:
            r.resolve(tmp_path)
    msg = str(ei.value)
    assert f"requires Go {MIN_GO_VERSION} or newer" in msg
    assert "running go 1.21.6" in msg
