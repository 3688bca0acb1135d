"""Process-wide cache of import path -> declared package name."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from .config import ScanConfig
from .errors import PackageNotFoundError
from .importer import GoListImporter, PackageImporter

logger = logging.getLogger(__name__)

BLANK_IDENTIFIER = "_"


class AliasCache:
    """Maps a full import path to the name code refers to it by.

    Entries are recorded at most once and never overwritten or invalidated:
    a package's declared name is assumed not to change for the lifetime of the
    process, even if the package is regenerated mid-run.

    Lookups are single-flight per import path. Concurrent misses on the same
    path wait for the first importer call instead of issuing their own.
    Failed lookups are not cached. Only a missing Go toolchain
    (ToolchainError) propagates; any other importer failure skips the import.
    """

    def __init__(self, importer: PackageImporter | None = None, config: ScanConfig | None = None) -> None:
        self.importer: PackageImporter = importer if importer is not None else GoListImporter()
        self.config = config if config is not None else ScanConfig()
        self._aliases: dict[str, str] = {}
        self._lock = threading.Lock()
        self._path_locks: dict[str, threading.Lock] = {}

    def __contains__(self, import_path: object) -> bool:
        with self._lock:
            return import_path in self._aliases

    def __len__(self) -> int:
        with self._lock:
            return len(self._aliases)

    def get(self, import_path: str) -> str | None:
        with self._lock:
            return self._aliases.get(import_path)

    def snapshot(self) -> dict[str, str]:
        with self._lock:
            return dict(self._aliases)

    def clear(self) -> None:
        with self._lock:
            self._aliases.clear()
            self._path_locks.clear()

    def resolve(self, import_path: str, alias_hint: str | None, src_dir: Path) -> str | None:
        """Return the alias an import is referred to by, or None to skip it.

        - "_" (blank import): None, nothing is looked up.
        - explicit alias: returned as-is; file-local, never cached.
        - otherwise: cached name, or the importer's declared package name.
        """
        if alias_hint == BLANK_IDENTIFIER:
            return None
        if alias_hint:
            return alias_hint
        return self.lookup(import_path, src_dir)

    def lookup(self, import_path: str, src_dir: Path) -> str | None:
        with self._lock:
            cached = self._aliases.get(import_path)
            if cached is not None:
                return cached
            path_lock = self._path_locks.setdefault(import_path, threading.Lock())

        with path_lock:
            # Another thread may have finished the same lookup while we waited.
            with self._lock:
                cached = self._aliases.get(import_path)
            if cached is not None:
                return cached

            try:
                name = self.importer.import_package(import_path, Path(src_dir))
            except PackageNotFoundError:
                # Apps using reverse routing import the routes package before
                # it has been generated. Don't report that one.
                if not import_path.endswith(self.config.routes_suffix):
                    logger.debug("Could not find import: %s", import_path)
                return None

            with self._lock:
                name = self._aliases.setdefault(import_path, name)
                # Later lookups hit the cache; threads already waiting hold a reference.
                self._path_locks.pop(import_path, None)
                return name


_DEFAULT_CACHE: AliasCache | None = None
_DEFAULT_CACHE_LOCK = threading.Lock()


def default_alias_cache() -> AliasCache:
    """Return the process-wide cache shared by scans that don't pass their own."""
    global _DEFAULT_CACHE
    with _DEFAULT_CACHE_LOCK:
        if _DEFAULT_CACHE is None:
            _DEFAULT_CACHE = AliasCache(config=ScanConfig.from_env())
        return _DEFAULT_CACHE


def reset_default_alias_cache() -> None:
    global _DEFAULT_CACHE
    with _DEFAULT_CACHE_LOCK:
        _DEFAULT_CACHE = None
