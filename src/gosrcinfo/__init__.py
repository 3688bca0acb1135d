"""gosrcinfo: extract controller, action and validation metadata from Go sources."""

from __future__ import annotations

from . import errors
from .aliases import AliasCache, default_alias_cache
from .config import ScanConfig
from .process import process_package, process_source
from .sourceinfo import MethodSpec, SourceInfo, TypeInfo

__all__ = [
    "AliasCache",
    "MethodSpec",
    "ScanConfig",
    "SourceInfo",
    "TypeInfo",
    "default_alias_cache",
    "errors",
    "process_package",
    "process_source",
]
