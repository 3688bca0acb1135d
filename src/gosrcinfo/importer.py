"""Package importers: learn the declared name of an imported Go package."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Protocol

from .errors import PackageNotFoundError
from .goparse.toolchain import run_go


class PackageImporter(Protocol):
    def import_package(self, import_path: str, src_dir: Path) -> str:
        """Return the package name declared by `import_path`.

        `src_dir` is the directory of the importing package, so relative and
        vendored imports resolve the way the compiler resolves them. Raises
        PackageNotFoundError when the package cannot be found.
        """
        ...


class GoListImporter:
    """Importer backed by `go list -find -json`.

    `-find` skips dependency resolution: only the package clause is needed.
    Output that can't be read is reported as PackageNotFoundError so the
    import is skipped; ToolchainError is raised only when `go` is missing.
    """

    def import_package(self, import_path: str, src_dir: Path) -> str:
        res = run_go(["list", "-find", "-json", import_path], cwd=Path(src_dir))
        if res.returncode != 0:
            raise PackageNotFoundError(import_path, res.stderr.strip())
        try:
            info = json.loads(res.stdout)
        except Exception as e:  # noqa: BLE001 - boundary parse
            raise PackageNotFoundError(import_path, f"unreadable go list output: {e}") from e
        name = info.get("Name") if isinstance(info, dict) else None
        if not isinstance(name, str) or not name:
            # go list reports directories without Go files as packages with no name.
            raise PackageNotFoundError(import_path, "no Go files")
        return name
