"""Scan packages into SourceInfo."""

from __future__ import annotations

import logging
import os
from dataclasses import replace
from pathlib import Path

from .aliases import AliasCache, default_alias_cache
from .config import ScanConfig
from .extract import extract_action, extract_structs
from .goparse.parse import parse_dirs
from .goparse.resolve import import_path_for_dir
from .goparse.syntax import FuncDecl, Package
from .imports import build_import_table
from .roles import PackageRole, package_role
from .sourceinfo import MethodSpec, SourceInfo, TypeInfo
from .validation import func_name, validation_keys

logger = logging.getLogger(__name__)

_SKIP_DIRS = {"vendor", "testdata", "node_modules"}


def process_package(
    package: Package,
    import_path: str,
    src_dir: Path,
    *,
    cache: AliasCache | None = None,
    config: ScanConfig | None = None,
) -> SourceInfo:
    """Scan one parsed package.

    `src_dir` is the package directory; unaliased imports are resolved
    relative to it. Unresolvable imports are skipped; malformed declarations
    raise MalformedDeclarationError.
    """
    cache = cache if cache is not None else default_alias_cache()
    cfg = config or cache.config
    role = package_role(import_path, cfg)

    struct_specs: list[TypeInfo] = []
    methods: dict[str, list[MethodSpec]] = {}
    keys: dict[str, dict[int, str]] = {}
    init_import_paths: list[str] = []

    for file in package.files:
        # e.g. import "sample/app/models" => {"models": "sample/app/models"}
        imports = build_import_table(file.decls, src_dir, cache)

        for decl in file.decls:
            if role is not PackageRole.PLAIN:
                struct_specs.extend(
                    extract_structs(decl, import_path=import_path, package_name=package.name, imports=imports)
                )
            if role is PackageRole.CONTROLLER:
                method = extract_action(
                    decl,
                    import_path=import_path,
                    package_name=package.name,
                    imports=imports,
                    config=cfg,
                )
                if method is not None:
                    methods.setdefault(method.receiver, []).append(method)

            if not isinstance(decl, FuncDecl):
                continue

            line_keys = validation_keys(decl, imports, cfg)
            if line_keys:
                keys[f"{import_path}.{func_name(decl)}"] = line_keys

            if decl.name == "init" and not decl.recv and not decl.params:
                init_import_paths = [import_path]

    # Attach the actions to their structs.
    specs = tuple(_with_methods(spec, methods.get(spec.struct_name, [])) for spec in struct_specs)
    logger.debug(
        "scanned %s (%s): %d structs, %d validated funcs",
        import_path,
        role.value,
        len(specs),
        len(keys),
    )
    return SourceInfo(
        struct_specs=specs,
        validation_keys=keys,
        init_import_paths=tuple(init_import_paths),
    )


def _with_methods(spec: TypeInfo, methods: list[MethodSpec]) -> TypeInfo:
    return replace(spec, method_specs=tuple(methods))


def package_dirs(root: Path) -> list[Path]:
    """Directories under `root` (inclusive) holding .go files, in sorted order."""
    root = Path(root).resolve()
    out: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if not d.startswith((".", "_")) and d not in _SKIP_DIRS)
        if any(f.endswith(".go") and not f.endswith("_test.go") for f in filenames):
            out.append(Path(dirpath))
    return out


def process_source(
    root: Path,
    *,
    import_path: str | None = None,
    cache: AliasCache | None = None,
    config: ScanConfig | None = None,
) -> SourceInfo:
    """Scan every package in the tree rooted at `root` and merge the results.

    `import_path` is the import path of `root`; when omitted it is derived
    from the enclosing go.mod. `main` packages are skipped.
    """
    root = Path(root).resolve()
    if import_path is None:
        import_path = import_path_for_dir(root)

    dirs = package_dirs(root)
    parsed = parse_dirs(dirs)

    info = SourceInfo()
    for d in dirs:
        packages = [p for p in parsed.get(d, []) if p.name != "main"]
        if not packages:
            continue
        if len(packages) > 1:
            logger.warning(
                "multiple packages in a single directory %s: %s",
                d,
                ", ".join(p.name for p in packages),
            )
        rel = d.relative_to(root)
        pkg_import_path = import_path if str(rel) == "." else f"{import_path}/{rel.as_posix()}"
        for pkg in packages:
            info = info.merge(process_package(pkg, pkg_import_path, d, cache=cache, config=config))
    return info
