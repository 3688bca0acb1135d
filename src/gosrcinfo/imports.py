"""Per-file import tables: alias -> full import path."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from .aliases import AliasCache
from .errors import MalformedDeclarationError
from .goparse.syntax import Decl, GenDecl, ImportSpec

ImportTable = dict[str, str]


def build_import_table(decls: Iterable[Decl], src_dir: Path, cache: AliasCache) -> ImportTable:
    """Build the import table of one file from its top-level declarations.

    e.g. import "sample/app/models" => {"models": "sample/app/models"}
    """
    imports: ImportTable = {}
    for decl in decls:
        add_imports(imports, decl, src_dir, cache)
    return imports


def add_imports(imports: ImportTable, decl: Decl, src_dir: Path, cache: AliasCache) -> None:
    """Add the imports of `decl` to `imports`. Non-import declarations are ignored.

    Imports whose alias cannot be determined are skipped.
    """
    if not isinstance(decl, GenDecl) or decl.tok != "import":
        return

    for spec in decl.specs:
        if not isinstance(spec, ImportSpec):
            raise MalformedDeclarationError(f"import declaration holds a {type(spec).__name__}")
        full_path = unquote_import_path(spec.path)
        alias = cache.resolve(full_path, spec.name, src_dir)
        if alias is None:
            continue
        imports[alias] = full_path


def unquote_import_path(literal: str) -> str:
    # e.g. "\"sample/app/models\"" or a raw `sample/app/models` literal.
    if len(literal) >= 2 and literal[0] == literal[-1] and literal[0] in ('"', "`"):
        path = literal[1:-1]
        if path:
            return path
    raise MalformedDeclarationError(f"invalid import path literal: {literal!r}")
