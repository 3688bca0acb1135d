from __future__ import annotations

import os
from dataclasses import dataclass, field, replace

DEFAULT_FRAMEWORK_IMPORT_PATH = "github.com/revel/revel"

# Rule methods of the framework's Validation type.
DEFAULT_VALIDATION_METHODS = frozenset(
    {
        "Required",
        "Min",
        "MinFloat",
        "Max",
        "MaxFloat",
        "Range",
        "RangeFloat",
        "MinSize",
        "MaxSize",
        "Length",
        "Match",
        "Email",
        "IPAddr",
        "MacAddr",
        "Domain",
        "URL",
        "PureText",
        "FilePath",
        "Check",
    }
)


@dataclass(frozen=True)
class ScanConfig:
    """Naming conventions the scanners match against.

    Override with `GOSRCINFO_FRAMEWORK_IMPORT_PATHS` (comma separated) and
    `GOSRCINFO_ROUTES_SUFFIX` via `ScanConfig.from_env()`.
    """

    framework_import_paths: tuple[str, ...] = (DEFAULT_FRAMEWORK_IMPORT_PATH,)
    controllers_marker: str = "controllers"
    tests_marker: str = "tests"
    # Generated by the reverse-routing pass; missing on the first scan.
    routes_suffix: str = "/app/routes"
    result_type: str = "Result"
    validation_type: str = "Validation"
    validation_methods: frozenset[str] = field(default=DEFAULT_VALIDATION_METHODS)
    render_method: str = "Render"

    @classmethod
    def from_env(cls) -> "ScanConfig":
        cfg = cls()
        paths = os.environ.get("GOSRCINFO_FRAMEWORK_IMPORT_PATHS")
        if paths:
            items = tuple(p.strip() for p in paths.split(",") if p.strip())
            if items:
                cfg = replace(cfg, framework_import_paths=items)
        routes = os.environ.get("GOSRCINFO_ROUTES_SUFFIX")
        if routes:
            cfg = replace(cfg, routes_suffix=routes)
        return cfg

    def is_framework_path(self, import_path: str | None) -> bool:
        return import_path is not None and import_path in self.framework_import_paths


def go_binary() -> str:
    """Return the `go` executable to run. Override with `GOSRCINFO_GO`."""
    return os.environ.get("GOSRCINFO_GO") or "go"
