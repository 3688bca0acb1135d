"""MessagePack encoding of SourceInfo for out-of-process generators."""

from __future__ import annotations

from typing import Any

import msgpack

from .errors import CodecError
from .goparse.syntax import Pos
from .sourceinfo import EmbeddedType, MethodArg, MethodSpec, RenderCall, SourceInfo, TypeInfo
from .typeexpr import TypeExpr

FORMAT_VERSION = 1


def _pos(p: Pos) -> list[int]:
    return [p.line, p.column]


def _type_expr(t: TypeExpr) -> dict[str, Any]:
    return {"expr": t.expr, "pkg_name": t.pkg_name, "pkg_index": t.pkg_index, "valid": t.valid}


def _method(m: MethodSpec) -> dict[str, Any]:
    return {
        "name": m.name,
        "receiver": m.receiver,
        "import_path": m.import_path,
        "package_name": m.package_name,
        "imports": dict(m.imports),
        "pos": _pos(m.pos),
        "args": [
            {"name": a.name, "type_expr": _type_expr(a.type_expr), "import_path": a.import_path} for a in m.args
        ],
        "render_calls": [{"line": r.line, "names": list(r.names)} for r in m.render_calls],
    }


def _struct(s: TypeInfo) -> dict[str, Any]:
    return {
        "struct_name": s.struct_name,
        "import_path": s.import_path,
        "package_name": s.package_name,
        "imports": dict(s.imports),
        "pos": _pos(s.pos),
        "embedded_types": [[e.import_path, e.struct_name] for e in s.embedded_types],
        "method_specs": [_method(m) for m in s.method_specs],
    }


def encode_source_info(info: SourceInfo) -> bytes:
    payload = {
        "format": FORMAT_VERSION,
        "struct_specs": [_struct(s) for s in info.struct_specs],
        # msgpack keeps int keys, so line numbers survive as ints.
        "validation_keys": {fn: dict(lines) for fn, lines in info.validation_keys.items()},
        "init_import_paths": list(info.init_import_paths),
    }
    return msgpack.packb(payload, use_bin_type=True)


def decode_source_info(payload: bytes) -> SourceInfo:
    try:
        obj = msgpack.unpackb(payload, raw=False, strict_map_key=False)
    except Exception as e:  # noqa: BLE001 - boundary decoding error
        raise CodecError(str(e)) from e

    if not isinstance(obj, dict) or obj.get("format") != FORMAT_VERSION:
        raise CodecError("invalid or unsupported SourceInfo envelope")

    try:
        return SourceInfo(
            struct_specs=tuple(_decode_struct(s) for s in obj.get("struct_specs", [])),
            validation_keys={
                str(fn): {int(line): str(key) for line, key in lines.items()}
                for fn, lines in obj.get("validation_keys", {}).items()
            },
            init_import_paths=tuple(str(p) for p in obj.get("init_import_paths", [])),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise CodecError(f"invalid SourceInfo payload: {e}") from e


def _decode_pos(raw: Any) -> Pos:
    return Pos(line=int(raw[0]), column=int(raw[1]))


def _decode_method(m: dict[str, Any]) -> MethodSpec:
    return MethodSpec(
        name=m["name"],
        receiver=m["receiver"],
        import_path=m["import_path"],
        package_name=m["package_name"],
        imports=dict(m["imports"]),
        pos=_decode_pos(m["pos"]),
        args=tuple(
            MethodArg(name=a["name"], type_expr=TypeExpr(**a["type_expr"]), import_path=a["import_path"])
            for a in m["args"]
        ),
        render_calls=tuple(RenderCall(line=r["line"], names=tuple(r["names"])) for r in m["render_calls"]),
    )


def _decode_struct(s: dict[str, Any]) -> TypeInfo:
    return TypeInfo(
        struct_name=s["struct_name"],
        import_path=s["import_path"],
        package_name=s["package_name"],
        imports=dict(s["imports"]),
        pos=_decode_pos(s["pos"]),
        embedded_types=tuple(EmbeddedType(import_path=p, struct_name=n) for p, n in s["embedded_types"]),
        method_specs=tuple(_decode_method(m) for m in s["method_specs"]),
    )
