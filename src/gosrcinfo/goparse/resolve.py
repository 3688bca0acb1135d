from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..errors import SourceInfoError


@dataclass(frozen=True)
class ResolvedModule:
    module_path: str
    module_dir: Path


def resolve_module(start: Path) -> ResolvedModule:
    """Locate the Go module enclosing `start` and read its module path.

    `start` may be the module root or any subdirectory of it.
    """
    module_dir = find_module_root(Path(start).resolve())
    return ResolvedModule(module_path=read_module_path(module_dir), module_dir=module_dir)


def import_path_for_dir(directory: Path) -> str:
    """Map a package directory inside a Go module to its import path."""
    directory = Path(directory).resolve()
    resolved = resolve_module(directory)
    rel = directory.relative_to(resolved.module_dir)
    if str(rel) == ".":
        return resolved.module_path
    return f"{resolved.module_path}/{'/'.join(rel.parts)}"


def read_module_path(module_dir: Path) -> str:
    go_mod = module_dir / "go.mod"
    if not go_mod.exists():
        raise SourceInfoError(f"go.mod not found in {module_dir}")
    for line in go_mod.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line.startswith("module "):
            return line.split()[1].strip('"')
    raise SourceInfoError("failed to parse module path from go.mod")


def find_module_root(start: Path) -> Path:
    p = start
    while True:
        if (p / "go.mod").exists():
            return p
        if p.parent == p:
            break
        p = p.parent
    raise SourceInfoError(f"go.mod not found in {start} or any parent directory")
