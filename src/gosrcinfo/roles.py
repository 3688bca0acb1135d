"""Package roles, decided by the conventional layout of the import path."""

from __future__ import annotations

import enum

from .config import ScanConfig


class PackageRole(enum.Enum):
    CONTROLLER = "controller"
    TEST = "test"
    PLAIN = "plain"


def _has_segment(import_path: str, marker: str) -> bool:
    return import_path.endswith(f"/{marker}") or f"/{marker}/" in import_path


def is_controller_package(import_path: str, config: ScanConfig | None = None) -> bool:
    """True for `.../controllers` and anything below a `controllers` directory."""
    cfg = config or ScanConfig()
    return _has_segment(import_path, cfg.controllers_marker)


def is_test_package(import_path: str, config: ScanConfig | None = None) -> bool:
    """True for `.../tests` and anything below a `tests` directory."""
    cfg = config or ScanConfig()
    return _has_segment(import_path, cfg.tests_marker)


def package_role(import_path: str, config: ScanConfig | None = None) -> PackageRole:
    # Controller wins when a path matches both markers.
    if is_controller_package(import_path, config):
        return PackageRole.CONTROLLER
    if is_test_package(import_path, config):
        return PackageRole.TEST
    return PackageRole.PLAIN
