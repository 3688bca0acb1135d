from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path
from typing import Any

from ..errors import SourceParseError, ToolchainError
from .syntax import Package, decode_package
from .toolchain import run_go

logger = logging.getLogger(__name__)


def parse_dirs(dirs: list[Path]) -> dict[Path, list[Package]]:
    """Parse the Go files of each directory (non-recursive) with the Go parser.

    All directories are parsed by a single `go run` of the helper program.
    Files whose names start with "." or "_" and `_test.go` files are skipped,
    like `go build` does. The first syntax error aborts the batch with a
    SourceParseError.
    """
    dirs = [Path(d).resolve() for d in dirs]
    if not dirs:
        return {}

    with tempfile.TemporaryDirectory(prefix="gosrcinfo-goparse-") as td:
        helper_dir = Path(td)
        (helper_dir / "go.mod").write_text(
            "\n".join(
                [
                    "module gosrcinfo.goparse",
                    "",
                    "go 1.18",
                    "",
                ]
            ),
            encoding="utf-8",
        )
        (helper_dir / "main.go").write_text(_parser_go_source(), encoding="utf-8")
        dirs_file = helper_dir / "dirs.json"
        dirs_file.write_text(json.dumps([str(d) for d in dirs]), encoding="utf-8")

        logger.debug("parsing %d package directories", len(dirs))
        res = run_go(["run", ".", "--dirs-file", str(dirs_file)], cwd=helper_dir)
        if res.returncode != 0:
            raise ToolchainError(f"go parse helper failed\n{res.output}")

    try:
        obj = json.loads(res.stdout)
    except Exception as e:  # noqa: BLE001 - boundary parse
        raise ToolchainError(f"failed to parse go parse helper output: {e}\n{res.output}") from e

    return _decode_dirs(obj)


def parse_dir(directory: Path) -> list[Package]:
    return parse_dirs([Path(directory)]).get(Path(directory).resolve(), [])


def _decode_dirs(obj: Any) -> dict[Path, list[Package]]:
    if not isinstance(obj, dict) or not isinstance(obj.get("dirs"), list):
        raise ToolchainError("go parse helper output has no `dirs` list")

    out: dict[Path, list[Package]] = {}
    for item in obj["dirs"]:
        if not isinstance(item, dict) or not isinstance(item.get("dir"), str):
            raise ToolchainError(f"invalid directory entry in parse output: {item!r}")
        err = item.get("error")
        if isinstance(err, dict):
            raise SourceParseError(
                str(err.get("msg", "parse error")),
                filename=str(err.get("file", "")),
                line=int(err.get("line") or 0),
                column=int(err.get("col") or 0),
            )
        out[Path(item["dir"])] = [decode_package(p) for p in item.get("packages") or []]
    return out


def _parser_go_source() -> str:
    # Keep this file stdlib-only so `go run` doesn't need network access.
    return r'''
package main

import (
	"encoding/json"
	"errors"
	"flag"
	"fmt"
	"go/ast"
	"go/parser"
	"go/scanner"
	"go/token"
	"os"
	"path/filepath"
	"strings"
)

type outError struct {
	File string `json:"file"`
	Line int    `json:"line"`
	Col  int    `json:"col"`
	Msg  string `json:"msg"`
}

type outFile struct {
	Name  string `json:"name"`
	Decls []any  `json:"decls"`
}

type outPkg struct {
	Name  string    `json:"name"`
	Files []outFile `json:"files"`
}

type outDir struct {
	Dir      string    `json:"dir"`
	Packages []outPkg  `json:"packages"`
	Error    *outError `json:"error"`
}

type outObj struct {
	Dirs []outDir `json:"dirs"`
}

func main() {
	var dirsFile string
	flag.StringVar(&dirsFile, "dirs-file", "", "JSON file listing the directories to parse")
	flag.Parse()

	if dirsFile == "" {
		fmt.Fprintln(os.Stderr, "missing --dirs-file")
		os.Exit(2)
	}

	raw, err := os.ReadFile(dirsFile)
	if err != nil {
		fmt.Fprintf(os.Stderr, "read dirs file: %v\n", err)
		os.Exit(2)
	}
	var dirs []string
	if err := json.Unmarshal(raw, &dirs); err != nil {
		fmt.Fprintf(os.Stderr, "decode dirs file: %v\n", err)
		os.Exit(2)
	}

	out := outObj{Dirs: make([]outDir, 0, len(dirs))}
	for _, d := range dirs {
		out.Dirs = append(out.Dirs, parseDir(d))
	}

	enc := json.NewEncoder(os.Stdout)
	enc.SetEscapeHTML(false)
	if err := enc.Encode(out); err != nil {
		fmt.Fprintf(os.Stderr, "encode: %v\n", err)
		os.Exit(1)
	}
}

func parseDir(dir string) outDir {
	res := outDir{Dir: dir, Packages: []outPkg{}}
	entries, err := os.ReadDir(dir)
	if err != nil {
		res.Error = &outError{File: dir, Msg: err.Error()}
		return res
	}

	fs := token.NewFileSet()
	byName := map[string]*outPkg{}
	order := []string{}
	for _, e := range entries {
		name := e.Name()
		if e.IsDir() || !strings.HasSuffix(name, ".go") || strings.HasSuffix(name, "_test.go") {
			continue
		}
		if strings.HasPrefix(name, ".") || strings.HasPrefix(name, "_") {
			continue
		}
		path := filepath.Join(dir, name)
		af, err := parser.ParseFile(fs, path, nil, 0)
		if err != nil {
			res.Error = toOutError(path, err)
			res.Packages = []outPkg{}
			return res
		}
		p, ok := byName[af.Name.Name]
		if !ok {
			p = &outPkg{Name: af.Name.Name, Files: []outFile{}}
			byName[af.Name.Name] = p
			order = append(order, af.Name.Name)
		}
		decls := make([]any, 0, len(af.Decls))
		for _, d := range af.Decls {
			decls = append(decls, encDecl(fs, d))
		}
		p.Files = append(p.Files, outFile{Name: path, Decls: decls})
	}
	for _, n := range order {
		res.Packages = append(res.Packages, *byName[n])
	}
	return res
}

func toOutError(path string, err error) *outError {
	var list scanner.ErrorList
	if errors.As(err, &list) && len(list) > 0 {
		e := list[0]
		return &outError{File: e.Pos.Filename, Line: e.Pos.Line, Col: e.Pos.Column, Msg: e.Msg}
	}
	return &outError{File: path, Msg: err.Error()}
}

func pos(fs *token.FileSet, p token.Pos) []int {
	if !p.IsValid() {
		return nil
	}
	ps := fs.Position(p)
	return []int{ps.Line, ps.Column}
}

func encDecl(fs *token.FileSet, d ast.Decl) map[string]any {
	switch t := d.(type) {
	case *ast.FuncDecl:
		out := map[string]any{
			"k":       "FuncDecl",
			"name":    t.Name.Name,
			"p":       pos(fs, t.Pos()),
			"e":       pos(fs, t.End()),
			"recv":    encFields(fs, t.Recv),
			"params":  encFields(fs, t.Type.Params),
			"results": encFields(fs, t.Type.Results),
		}
		if t.Body != nil {
			out["body"] = encTree(fs, t.Body)
		}
		return out
	case *ast.GenDecl:
		specs := []any{}
		for _, s := range t.Specs {
			switch sp := s.(type) {
			case *ast.ImportSpec:
				m := map[string]any{"k": "ImportSpec", "path": sp.Path.Value, "p": pos(fs, sp.Pos())}
				if sp.Name != nil {
					m["name"] = sp.Name.Name
				}
				specs = append(specs, m)
			case *ast.TypeSpec:
				specs = append(specs, map[string]any{
					"k":    "TypeSpec",
					"name": sp.Name.Name,
					"p":    pos(fs, sp.Pos()),
					"type": encTree(fs, sp.Type),
				})
			case *ast.ValueSpec:
				names := []string{}
				for _, n := range sp.Names {
					names = append(names, n.Name)
				}
				specs = append(specs, map[string]any{"k": "ValueSpec", "names": names, "p": pos(fs, sp.Pos())})
			}
		}
		return map[string]any{"k": "GenDecl", "tok": t.Tok.String(), "p": pos(fs, t.Pos()), "specs": specs}
	default:
		return map[string]any{"k": "BadDecl", "p": pos(fs, d.Pos())}
	}
}

func encFields(fs *token.FileSet, fl *ast.FieldList) []any {
	if fl == nil {
		return nil
	}
	out := []any{}
	for _, f := range fl.List {
		names := []string{}
		for _, n := range f.Names {
			names = append(names, n.Name)
		}
		out = append(out, map[string]any{"names": names, "type": encTree(fs, f.Type), "p": pos(fs, f.Pos())})
	}
	return out
}

// children returns the direct children of n in source order.
func children(n ast.Node) []ast.Node {
	out := []ast.Node{}
	ast.Inspect(n, func(c ast.Node) bool {
		if c == nil {
			return false
		}
		if c == n {
			return true
		}
		out = append(out, c)
		return false
	})
	return out
}

// encTree flattens the tree rooted at n into post-order: every node follows
// its children and records their count in "nc". The JSON nesting depth stays
// constant however deep the expression is.
func encTree(fs *token.FileSet, root ast.Node) []any {
	out := []any{}
	var visit func(n ast.Node)
	visit = func(n ast.Node) {
		m, leaf := encNode(fs, n)
		if !leaf {
			kids := children(n)
			for _, c := range kids {
				visit(c)
			}
			if len(kids) > 0 {
				m["nc"] = len(kids)
			}
		}
		out = append(out, m)
	}
	visit(root)
	return out
}

// encNode encodes n without its children; leaf reports whether its
// children are left out of the tree.
func encNode(fs *token.FileSet, n ast.Node) (out map[string]any, leaf bool) {
	out = map[string]any{
		"k": strings.TrimPrefix(fmt.Sprintf("%T", n), "*ast."),
		"p": pos(fs, n.Pos()),
		"e": pos(fs, n.End()),
	}
	switch t := n.(type) {
	case *ast.Ident:
		out["n"] = t.Name
		return out, true
	case *ast.BasicLit:
		out["t"] = t.Kind.String()
		out["v"] = t.Value
		return out, true
	case *ast.StructType:
		out["fields"] = encFields(fs, t.Fields)
		return out, true
	case *ast.UnaryExpr:
		out["op"] = t.Op.String()
	case *ast.BinaryExpr:
		out["op"] = t.Op.String()
	case *ast.CallExpr:
		out["lp"] = pos(fs, t.Lparen)
	case *ast.ArrayType:
		out["len"] = t.Len != nil
	}
	return out, false
}
'''
