from __future__ import annotations

import json
import logging
import os
import shutil
import subprocess
import sys
import tempfile
from pathlib import Path

from .. import config
from ..errors import ResolveError
from .symbols import ResolvedUnit, parse_unit

log = logging.getLogger(__name__)

# Oldest toolchain that can build the helper (it calls types.Unalias).
MIN_GO_VERSION = "1.22"


def _run(cmd: list[str], *, cwd: Path, env: dict[str, str] | None = None) -> str:
    prog = cmd[0] if cmd else "<unknown>"
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=False,
            check=False,
        )
    except FileNotFoundError as e:
        if Path(prog).name.startswith("go"):
            raise ResolveError(
                "Go toolchain not found (`go` is missing from PATH). "
                f"Install Go {MIN_GO_VERSION} or newer and ensure `go` is available on PATH, "
                "or point GOSTUBBER_GO at the go binary."
            ) from e
        raise ResolveError(f"command not found: {prog}") from e

    stdout = (proc.stdout or b"").decode("utf-8", errors="replace")
    stderr = (proc.stderr or b"").decode("utf-8", errors="replace")
    if proc.returncode != 0:
        out = "\n".join([s for s in [stdout.strip("\n"), stderr.strip("\n")] if s])
        raise ResolveError(out or f"command failed: {' '.join(cmd)}")
    return stdout


class GoSourceResolver:
    """Resolve Go packages with a small helper program built from `go/types`.

    The helper is compiled once per resolver into a temporary directory that is
    removed by `close()` (or on leaving the `with` block).
    """

    def __init__(self, *, go: str | None = None) -> None:
        self.go = go or config.go_binary()
        self._tmp: tempfile.TemporaryDirectory[str] | None = None
        self._helper: Path | None = None

    def __enter__(self) -> "GoSourceResolver":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._tmp is not None:
            self._tmp.cleanup()
        self._tmp = None
        self._helper = None

    def resolve(self, location: Path) -> ResolvedUnit:
        location = Path(location).resolve()
        if not location.is_dir():
            raise ResolveError(f"cannot process directory {location}: not a directory")

        helper = self._ensure_helper()
        out = _run([str(helper), "--dir", str(location), "--go", self.go], cwd=location)
        try:
            obj = json.loads(out)
        except Exception as e:  # noqa: BLE001 - boundary parse
            raise ResolveError(f"failed to parse resolver output: {e}\n{out}") from e
        unit = parse_unit(obj)
        log.debug("resolved %s (%s): %d interface(s)", unit.name, unit.import_path, len(unit.interfaces))
        return unit

    def _ensure_helper(self) -> Path:
        if self._helper is not None:
            return self._helper

        self._tmp = tempfile.TemporaryDirectory(prefix="gostubber-resolver-")
        build_dir = Path(self._tmp.name)
        (build_dir / "go.mod").write_text(
            "\n".join(
                [
                    "module gostubber.resolver",
                    "",
                    f"go {MIN_GO_VERSION}",
                    "",
                ]
            ),
            encoding="utf-8",
        )
        (build_dir / "main.go").write_text(_resolver_go_source(), encoding="utf-8")

        exe = build_dir / ("resolver.exe" if sys.platform == "win32" else "resolver")
        # The helper is a standalone module; keep any enclosing go.work out of it
        # and never fetch a newer toolchain for it.
        env = dict(os.environ, GOWORK="off", GOTOOLCHAIN="local")
        try:
            _run([self.go, "build", "-o", str(exe), "."], cwd=build_dir, env=env)
        except ResolveError as e:
            if "toolchain not found" in str(e):
                raise
            raise ResolveError(f"cannot build the resolver helper (requires Go {MIN_GO_VERSION} or newer):\n{e}") from e
        self._helper = exe
        return exe


def go_available(go: str | None = None) -> bool:
    return shutil.which(go or config.go_binary()) is not None


def _resolver_go_source() -> str:
    # Keep this file stdlib-only so building it doesn't need network access.
    return r'''
package main

import (
	"bytes"
	"encoding/json"
	"flag"
	"fmt"
	"go/ast"
	"go/importer"
	"go/parser"
	"go/token"
	"go/types"
	"os"
	"os/exec"
	"path/filepath"
	"sort"
	"strings"
)

type goListPkg struct {
	ImportPath string
	Name       string
	Dir        string
	GoFiles    []string
}

type outType map[string]any

type outField struct {
	Name string  `json:"name"`
	Type outType `json:"type"`
}

type outSig struct {
	Params   []outField `json:"params"`
	Results  []outField `json:"results"`
	Variadic bool       `json:"variadic"`
}

type outMethod struct {
	Name string `json:"name"`
	Sig  outSig `json:"sig"`
}

type outInterface struct {
	Name    string      `json:"name"`
	Methods []outMethod `json:"methods"`
}

type outPkg struct {
	Name       string         `json:"name"`
	Path       string         `json:"path"`
	Dir        string         `json:"dir"`
	Interfaces []outInterface `json:"interfaces"`
}

func main() {
	var dir, goBin string
	flag.StringVar(&dir, "dir", ".", "package directory to resolve")
	flag.StringVar(&goBin, "go", "go", "go command used for `go list`")
	flag.Parse()

	pkg, err := resolve(dir, goBin)
	if err != nil {
		fmt.Fprintln(os.Stderr, err.Error())
		os.Exit(1)
	}

	enc := json.NewEncoder(os.Stdout)
	enc.SetEscapeHTML(false)
	if err := enc.Encode(pkg); err != nil {
		fmt.Fprintln(os.Stderr, err.Error())
		os.Exit(1)
	}
}

func listPkg(dir, goBin string) (*goListPkg, error) {
	cmd := exec.Command(goBin, "list", "-json", ".")
	cmd.Dir = dir
	var stdout, stderr bytes.Buffer
	cmd.Stdout = &stdout
	cmd.Stderr = &stderr
	if err := cmd.Run(); err != nil {
		return nil, fmt.Errorf("cannot process directory %s: %v\n%s", dir, err, stderr.String())
	}
	var p goListPkg
	if err := json.Unmarshal(stdout.Bytes(), &p); err != nil {
		return nil, fmt.Errorf("failed to decode go list json: %v", err)
	}
	return &p, nil
}

func resolve(dir, goBin string) (*outPkg, error) {
	abs, err := filepath.Abs(dir)
	if err != nil {
		return nil, err
	}
	p, err := listPkg(abs, goBin)
	if err != nil {
		return nil, err
	}

	fset := token.NewFileSet()
	files := []*ast.File{}
	for _, name := range p.GoFiles {
		// Previously generated stubs are replaced, never read.
		if strings.HasSuffix(name, "_stubs.go") {
			continue
		}
		full := filepath.Join(p.Dir, name)
		f, err := parser.ParseFile(fset, full, nil, 0)
		if err != nil {
			return nil, fmt.Errorf("cannot parse file %s: %v", full, err)
		}
		files = append(files, f)
	}
	if len(files) == 0 {
		return nil, fmt.Errorf("%s: no buildable Go files", abs)
	}

	info := &types.Info{
		Types: map[ast.Expr]types.TypeAndValue{},
		Uses:  map[*ast.Ident]types.Object{},
	}
	conf := types.Config{Importer: importer.ForCompiler(fset, "source", nil)}
	tpkg, err := conf.Check(p.ImportPath, fset, files, info)
	if err != nil {
		return nil, fmt.Errorf("cannot check package %s: %v", p.ImportPath, err)
	}

	specs := map[string]*ast.InterfaceType{}
	for _, f := range files {
		for _, decl := range f.Decls {
			gd, ok := decl.(*ast.GenDecl)
			if !ok || gd.Tok != token.TYPE {
				continue
			}
			for _, spec := range gd.Specs {
				ts := spec.(*ast.TypeSpec)
				if it, ok := ts.Type.(*ast.InterfaceType); ok {
					specs[ts.Name.Name] = it
				}
			}
		}
	}

	scope := tpkg.Scope()
	typeNames := []*types.TypeName{}
	for _, name := range scope.Names() {
		tn, ok := scope.Lookup(name).(*types.TypeName)
		if !ok || tn.IsAlias() {
			continue
		}
		typeNames = append(typeNames, tn)
	}
	// Declaration order: files are added to fset in GoFiles order.
	sort.Slice(typeNames, func(i, j int) bool { return typeNames[i].Pos() < typeNames[j].Pos() })

	out := &outPkg{Name: tpkg.Name(), Path: p.ImportPath, Dir: p.Dir, Interfaces: []outInterface{}}
	for _, tn := range typeNames {
		named, ok := tn.Type().(*types.Named)
		if !ok || named.TypeParams().Len() > 0 {
			continue
		}
		iface, ok := named.Underlying().(*types.Interface)
		if !ok || !iface.IsMethodSet() {
			continue
		}
		oi := outInterface{Name: tn.Name(), Methods: []outMethod{}}
		for _, m := range orderedMethods(iface, specs[tn.Name()], info) {
			sig, err := encodeSig(m.Type().(*types.Signature))
			if err != nil {
				return nil, fmt.Errorf("%s.%s: %v", tn.Name(), m.Name(), err)
			}
			oi.Methods = append(oi.Methods, outMethod{Name: m.Name(), Sig: sig})
		}
		out.Interfaces = append(out.Interfaces, oi)
	}
	return out, nil
}

// orderedMethods returns the method set in source order. Methods of an
// embedded interface take the place of the embedding line.
func orderedMethods(iface *types.Interface, spec *ast.InterfaceType, info *types.Info) []*types.Func {
	rank := map[string]int{}
	add := func(name string) {
		if _, ok := rank[name]; !ok {
			rank[name] = len(rank)
		}
	}
	if spec != nil && spec.Methods != nil {
		for _, field := range spec.Methods.List {
			for _, n := range field.Names {
				add(n.Name)
			}
			if len(field.Names) > 0 {
				continue
			}
			t := info.TypeOf(field.Type)
			if t == nil {
				continue
			}
			embedded, ok := t.Underlying().(*types.Interface)
			if !ok {
				continue
			}
			ms := []*types.Func{}
			for i := 0; i < embedded.NumMethods(); i++ {
				ms = append(ms, embedded.Method(i))
			}
			sort.SliceStable(ms, func(i, j int) bool { return ms[i].Pos() < ms[j].Pos() })
			for _, m := range ms {
				add(m.Name())
			}
		}
	}

	out := []*types.Func{}
	for i := 0; i < iface.NumMethods(); i++ {
		out = append(out, iface.Method(i))
	}
	pos := func(m *types.Func) int {
		if r, ok := rank[m.Name()]; ok {
			return r
		}
		return len(rank)
	}
	sort.SliceStable(out, func(i, j int) bool { return pos(out[i]) < pos(out[j]) })
	return out
}

func encodeTuple(t *types.Tuple) ([]outField, error) {
	out := []outField{}
	for i := 0; i < t.Len(); i++ {
		v := t.At(i)
		ot, err := encodeType(v.Type())
		if err != nil {
			return nil, err
		}
		out = append(out, outField{Name: v.Name(), Type: ot})
	}
	return out, nil
}

func encodeSig(sig *types.Signature) (outSig, error) {
	params, err := encodeTuple(sig.Params())
	if err != nil {
		return outSig{}, err
	}
	results, err := encodeTuple(sig.Results())
	if err != nil {
		return outSig{}, err
	}
	return outSig{Params: params, Results: results, Variadic: sig.Variadic()}, nil
}

func encodeType(t types.Type) (outType, error) {
	switch t := types.Unalias(t).(type) {
	case *types.Basic:
		return outType{"kind": "basic", "name": t.Name()}, nil
	case *types.Named:
		o := outType{"kind": "named", "name": t.Obj().Name(), "pkg": "", "pkg_name": ""}
		if p := t.Obj().Pkg(); p != nil {
			o["pkg"] = p.Path()
			o["pkg_name"] = p.Name()
		}
		if args := t.TypeArgs(); args != nil && args.Len() > 0 {
			encoded := []outType{}
			for i := 0; i < args.Len(); i++ {
				a, err := encodeType(args.At(i))
				if err != nil {
					return nil, err
				}
				encoded = append(encoded, a)
			}
			o["args"] = encoded
		}
		return o, nil
	case *types.Pointer:
		return wrap("pointer", t.Elem())
	case *types.Slice:
		return wrap("slice", t.Elem())
	case *types.Array:
		o, err := wrap("array", t.Elem())
		if err != nil {
			return nil, err
		}
		o["len"] = t.Len()
		return o, nil
	case *types.Map:
		k, err := encodeType(t.Key())
		if err != nil {
			return nil, err
		}
		o, err := wrap("map", t.Elem())
		if err != nil {
			return nil, err
		}
		o["key"] = k
		return o, nil
	case *types.Chan:
		o, err := wrap("chan", t.Elem())
		if err != nil {
			return nil, err
		}
		switch t.Dir() {
		case types.SendOnly:
			o["dir"] = "send"
		case types.RecvOnly:
			o["dir"] = "recv"
		default:
			o["dir"] = "both"
		}
		return o, nil
	case *types.Signature:
		sig, err := encodeSig(t)
		if err != nil {
			return nil, err
		}
		return outType{"kind": "func", "params": sig.Params, "results": sig.Results, "variadic": sig.Variadic}, nil
	case *types.Interface:
		methods := []outMethod{}
		for i := 0; i < t.NumMethods(); i++ {
			m := t.Method(i)
			sig, err := encodeSig(m.Type().(*types.Signature))
			if err != nil {
				return nil, err
			}
			methods = append(methods, outMethod{Name: m.Name(), Sig: sig})
		}
		return outType{"kind": "interface", "methods": methods}, nil
	case *types.Struct:
		fields := []outType{}
		for i := 0; i < t.NumFields(); i++ {
			f := t.Field(i)
			ft, err := encodeType(f.Type())
			if err != nil {
				return nil, err
			}
			fields = append(fields, outType{"name": f.Name(), "type": ft, "embedded": f.Embedded(), "tag": t.Tag(i)})
		}
		return outType{"kind": "struct", "fields": fields}, nil
	default:
		return nil, fmt.Errorf("unsupported type %s (%T)", t, t)
	}
}

func wrap(kind string, elem types.Type) (outType, error) {
	e, err := encodeType(elem)
	if err != nil {
		return nil, err
	}
	return outType{"kind": kind, "elem": e}, nil
}
'''
