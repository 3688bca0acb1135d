from __future__ import annotations

import threading
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _reset_default_alias_cache():
    # Tests run in one Python process; drop the process-global cache between tests.
    from gosrcinfo.aliases import reset_default_alias_cache

    reset_default_alias_cache()
    yield
    reset_default_alias_cache()


class FakeImporter:
    """Importer returning declared names from a dict; unknown paths are not found."""

    def __init__(self, names: dict[str, str]) -> None:
        self.names = dict(names)
        self.calls: list[tuple[str, Path]] = []
        self._lock = threading.Lock()

    def import_package(self, import_path: str, src_dir: Path) -> str:
        from gosrcinfo.errors import PackageNotFoundError

        with self._lock:
            self.calls.append((import_path, Path(src_dir)))
        if import_path not in self.names:
            raise PackageNotFoundError(import_path)
        return self.names[import_path]


@pytest.fixture
def make_cache():
    from gosrcinfo.aliases import AliasCache

    def _make(names: dict[str, str] | None = None) -> AliasCache:
        return AliasCache(importer=FakeImporter(names or {}))

    return _make
