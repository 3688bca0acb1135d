"""Struct and action extraction from top-level declarations."""

from __future__ import annotations

import logging

from .config import ScanConfig
from .goparse.syntax import (
    CallExpr,
    Decl,
    FuncDecl,
    GenDecl,
    Ident,
    SelectorExpr,
    StarExpr,
    StructType,
    TypeSpec,
    receiver_name,
    walk,
)
from .imports import ImportTable
from .sourceinfo import EmbeddedType, MethodArg, MethodSpec, RenderCall, TypeInfo
from .typeexpr import new_type_expr

logger = logging.getLogger(__name__)


def extract_structs(
    decl: Decl,
    *,
    import_path: str,
    package_name: str,
    imports: ImportTable,
) -> list[TypeInfo]:
    """Return a TypeInfo for each struct type declared by `decl`.

    Every struct is a candidate; the generator later filters them by the
    types they embed.
    """
    if not isinstance(decl, GenDecl) or decl.tok != "type":
        return []

    out: list[TypeInfo] = []
    for spec in decl.specs:
        if not isinstance(spec, TypeSpec) or not isinstance(spec.type, StructType):
            continue
        out.append(
            TypeInfo(
                struct_name=spec.name,
                import_path=import_path,
                package_name=package_name,
                imports=dict(imports),
                pos=spec.pos,
                embedded_types=tuple(_embedded_types(spec.type, import_path, imports)),
            )
        )
    return out


def _embedded_types(struct: StructType, import_path: str, imports: ImportTable) -> list[EmbeddedType]:
    out: list[EmbeddedType] = []
    for field in struct.fields:
        # Named fields are not embedded types.
        if field.names:
            continue

        # Ident "AppController" or SelectorExpr {"revel", "Controller"},
        # possibly wrapped in StarExprs.
        t = field.type
        while isinstance(t, StarExpr):
            t = t.x

        if isinstance(t, Ident):
            out.append(EmbeddedType(import_path=import_path, struct_name=t.name))
            continue
        if not (isinstance(t, SelectorExpr) and isinstance(t.x, Ident)):
            continue

        pkg_alias = t.x.name
        full_path = imports.get(pkg_alias)
        if full_path is None:
            logger.debug("Failed to find import path for %s.%s", pkg_alias, t.sel.name)
            continue
        out.append(EmbeddedType(import_path=full_path, struct_name=t.sel.name))
    return out


def extract_action(
    decl: Decl,
    *,
    import_path: str,
    package_name: str,
    imports: ImportTable,
    config: ScanConfig,
) -> MethodSpec | None:
    """Return a MethodSpec if `decl` is an action, else None.

    An action is an exported method returning exactly one framework `Result`.
    """
    if not isinstance(decl, FuncDecl) or not decl.recv:
        return None
    if not decl.name[:1].isupper():
        return None

    if decl.results is None or len(decl.results) != 1 or len(decl.results[0].names) > 1:
        return None
    result = decl.results[0].type
    if not (isinstance(result, SelectorExpr) and isinstance(result.x, Ident)):
        return None
    if result.sel.name != config.result_type or not config.is_framework_path(imports.get(result.x.name)):
        return None

    args: list[MethodArg] = []
    for field in decl.params:
        type_expr = new_type_expr(package_name, field.type)
        for name in field.names:
            if not type_expr.valid:
                logger.debug("Didn't understand argument %r of action %s. Ignoring.", name, decl.name)
                return None

            arg_path = ""
            if type_expr.pkg_name == package_name:
                arg_path = import_path
            elif type_expr.pkg_name:
                found = imports.get(type_expr.pkg_name)
                if found is None:
                    logger.warning(
                        "Failed to find import for arg of type %s; skipping action %s",
                        type_expr.type_name(),
                        decl.name,
                    )
                    return None
                arg_path = found
            args.append(MethodArg(name=name, type_expr=type_expr, import_path=arg_path))

    recv_type, _ = receiver_name(decl) or ("", False)
    return MethodSpec(
        name=decl.name,
        receiver=recv_type,
        import_path=import_path,
        package_name=package_name,
        imports=dict(imports),
        pos=decl.pos,
        args=tuple(args),
        render_calls=tuple(_render_calls(decl, config)),
    )


def _render_calls(decl: FuncDecl, config: ScanConfig) -> list[RenderCall]:
    # The receiver's type isn't resolved, so every call to a method named
    # Render counts.
    out: list[RenderCall] = []
    for node in walk(decl.body):
        if not isinstance(node, CallExpr) or not isinstance(node.fun, SelectorExpr):
            continue
        if node.fun.sel.name != config.render_method:
            continue
        names = tuple(a.name for a in node.args if isinstance(a, Ident))
        out.append(RenderCall(line=node.lparen.line or node.pos.line, names=names))
    return out
