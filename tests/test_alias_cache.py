from __future__ import annotations

import logging
import threading
import time
from pathlib import Path


def test_lookup_caches_declared_name(make_cache, tmp_path: Path):
    cache = make_cache({"sample/app/models": "models"})

    assert cache.resolve("sample/app/models", None, tmp_path) == "models"
    assert cache.resolve("sample/app/models", None, tmp_path / "other") == "models"
    assert cache.importer.calls == [("sample/app/models", tmp_path)]
    assert cache.snapshot() == {"sample/app/models": "models"}


def test_explicit_alias_does_not_touch_cache(make_cache, tmp_path: Path):
    cache = make_cache({"gopkg.in/yaml.v3": "yaml"})

    assert cache.resolve("gopkg.in/yaml.v3", "y", tmp_path) == "y"
    assert cache.importer.calls == []
    assert "gopkg.in/yaml.v3" not in cache


def test_blank_import_is_skipped(make_cache, tmp_path: Path):
    cache = make_cache({"github.com/lib/pq": "pq"})

    assert cache.resolve("github.com/lib/pq", "_", tmp_path) is None
    assert cache.importer.calls == []
    assert len(cache) == 0


def test_declared_name_may_differ_from_last_segment(make_cache, tmp_path: Path):
    cache = make_cache({"gopkg.in/yaml.v3": "yaml"})
    assert cache.resolve("gopkg.in/yaml.v3", None, tmp_path) == "yaml"


def test_failures_are_not_cached(make_cache, tmp_path: Path):
    cache = make_cache()

    assert cache.resolve("example.com/missing", None, tmp_path) is None
    assert cache.resolve("example.com/missing", None, tmp_path) is None
    assert len(cache.importer.calls) == 2
    assert "example.com/missing" not in cache

    cache.importer.names["example.com/missing"] = "missing"
    assert cache.resolve("example.com/missing", None, tmp_path) == "missing"


def test_missing_import_is_logged_at_debug(make_cache, tmp_path: Path, caplog):
    cache = make_cache()

    with caplog.at_level(logging.DEBUG, logger="gosrcinfo.aliases"):
        cache.resolve("example.com/missing", None, tmp_path)

    assert [r.levelno for r in caplog.records] == [logging.DEBUG]
    assert "Could not find import: example.com/missing" in caplog.text


def test_missing_routes_package_is_silent(make_cache, tmp_path: Path, caplog):
    cache = make_cache()

    with caplog.at_level(logging.DEBUG, logger="gosrcinfo.aliases"):
        assert cache.resolve("sample/app/routes", None, tmp_path) is None

    assert caplog.records == []


def test_concurrent_misses_share_one_lookup(tmp_path: Path):
    from gosrcinfo.aliases import AliasCache

    started = threading.Event()
    calls: list[str] = []

    class SlowImporter:
        def import_package(self, import_path: str, src_dir: Path) -> str:
            calls.append(import_path)
            started.set()
            time.sleep(0.05)
            return "models"

    cache = AliasCache(importer=SlowImporter())
    results: list[str | None] = []

    def worker() -> None:
        results.append(cache.resolve("sample/app/models", None, tmp_path))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert started.is_set()
    assert calls == ["sample/app/models"]
    assert results == ["models"] * 8


def test_default_cache_is_process_wide():
    from gosrcinfo.aliases import default_alias_cache
    from gosrcinfo.importer import GoListImporter

    a = default_alias_cache()
    assert a is default_alias_cache()
    assert isinstance(a.importer, GoListImporter)


def test_per_path_locks_are_released_once_cached(make_cache, tmp_path: Path):
    names = {f"sample/app/pkg{i}": f"pkg{i}" for i in range(50)}
    cache = make_cache(names)

    for path in names:
        cache.resolve(path, None, tmp_path)

    assert len(cache) == 50
    assert cache._path_locks == {}
