from __future__ import annotations

import argparse
import importlib.metadata
import json
import logging
import sys
from pathlib import Path
from typing import Any

from .sourceinfo import SourceInfo


def _summary(info: SourceInfo) -> dict[str, Any]:
    return {
        "structs": [
            {
                "name": s.qualified_name,
                "embeds": [str(e) for e in s.embedded_types],
                "methods": [
                    {
                        "name": m.name,
                        "args": [f"{a.name} {a.type_expr.type_name()}" for a in m.args],
                        "render_lines": [r.line for r in m.render_calls],
                    }
                    for m in s.method_specs
                ],
            }
            for s in info.struct_specs
        ],
        "validation_keys": {
            fn: {str(line): key for line, key in sorted(lines.items())} for fn, lines in info.validation_keys.items()
        },
        "init_import_paths": list(info.init_import_paths),
    }


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="gosrcinfo")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("version", help="Print gosrcinfo version.")

    p_scan = sub.add_parser("scan", help="Scan a Go source tree and print the extracted metadata.")
    p_scan.add_argument("--dir", required=True, help="Root directory of the Go source tree.")
    p_scan.add_argument(
        "--import-path",
        default=None,
        help="Import path of --dir (default: derived from the enclosing go.mod).",
    )
    p_scan.add_argument(
        "--out",
        default=None,
        help="Write the MessagePack-encoded SourceInfo here instead of printing a JSON summary.",
    )
    p_scan.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")

    args = parser.parse_args(argv)
    if args.cmd == "version":
        try:
            print(importlib.metadata.version("gosrcinfo"))
        except Exception:
            # Best-effort fallback for editable/local-only contexts.
            print("0.0.0")
        return

    if args.cmd == "scan":
        from .codec import encode_source_info
        from .errors import SourceInfoError
        from .process import process_source

        logging.basicConfig(
            level=logging.DEBUG if args.verbose else logging.WARNING,
            format="%(asctime)s %(levelname)s %(name)s - %(message)s",
        )
        try:
            info = process_source(Path(args.dir), import_path=args.import_path)
        except SourceInfoError as e:
            raise SystemExit(f"gosrcinfo: {e}") from e

        if args.out:
            Path(args.out).write_bytes(encode_source_info(info))
            return
        json.dump(_summary(info), sys.stdout, indent=2)
        sys.stdout.write("\n")
        return
