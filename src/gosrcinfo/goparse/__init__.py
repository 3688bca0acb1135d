"""Go source parsing: the embedded parser helper and its Python syntax model."""

from __future__ import annotations

from .parse import parse_dir, parse_dirs
from .resolve import import_path_for_dir, resolve_module

__all__ = [
    "import_path_for_dir",
    "parse_dir",
    "parse_dirs",
    "resolve_module",
]
