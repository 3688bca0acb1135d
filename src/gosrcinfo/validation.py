"""Locate validation calls and the keys they validate.

Runtime validation errors only carry the caller's file and line, so the
generator needs line -> key tables to name the field that failed, e.g.

    c.Validation.Required(user.Name)   // line 42 -> "user.Name"
"""

from __future__ import annotations

from .config import ScanConfig
from .goparse.syntax import (
    BinaryExpr,
    CallExpr,
    FuncDecl,
    Ident,
    ParenExpr,
    SelectorExpr,
    StarExpr,
    UnaryExpr,
    receiver_name,
    render_expr,
    walk,
)
from .imports import ImportTable


def func_name(decl: FuncDecl) -> str:
    """Name a function the way it is keyed in ValidationKeys: `F`, `T.M` or `(*T).M`."""
    recv = receiver_name(decl)
    if recv is None:
        return decl.name
    type_name, pointer = recv
    if pointer:
        return f"(*{type_name}).{decl.name}"
    return f"{type_name}.{decl.name}"


def validation_keys(decl: FuncDecl, imports: ImportTable, config: ScanConfig | None = None) -> dict[int, str]:
    """Return line -> key for every validation call in the body of `decl`.

    Lines are those of the closing parenthesis of each call; a later call on
    the same line replaces an earlier one.
    """
    cfg = config or ScanConfig()
    if decl.body is None:
        return {}

    params = _validation_params(decl, imports, cfg)
    line_keys: dict[int, str] = {}
    for node in walk(decl.body):
        # e.g. c.Validation.Required(arg) or v.Required(arg)
        if not isinstance(node, CallExpr) or not isinstance(node.fun, SelectorExpr):
            continue
        method = node.fun.sel.name
        if method not in cfg.validation_methods or not node.args:
            continue
        if not _is_validation_target(node.fun.x, params, cfg):
            continue

        line = node.end.line or node.pos.line
        line_keys[line] = _derive_key(node, method, line)
    return line_keys


def _is_validation_target(x, params: set[str], cfg: ScanConfig) -> bool:
    if isinstance(x, SelectorExpr):
        # c.Validation
        return x.sel.name == cfg.validation_type
    if isinstance(x, Ident):
        # Validation, or v where v *revel.Validation is a parameter.
        return x.name == cfg.validation_type or x.name in params
    return False


def _validation_params(decl: FuncDecl, imports: ImportTable, cfg: ScanConfig) -> set[str]:
    """Names of parameters typed `*<framework>.Validation` (or by value)."""
    names: set[str] = set()
    for field in decl.params:
        t = field.type
        if isinstance(t, StarExpr):
            t = t.x
        if not (isinstance(t, SelectorExpr) and isinstance(t.x, Ident)):
            continue
        if t.sel.name == cfg.validation_type and cfg.is_framework_path(imports.get(t.x.name)):
            names.update(field.names)
    return names


def _derive_key(call: CallExpr, method: str, line: int) -> str:
    for arg in call.args:
        # Drill into !ok, (x), and the left side of x != "".
        expr = arg
        while isinstance(expr, (ParenExpr, UnaryExpr, BinaryExpr)):
            expr = expr.x
        key = render_expr(expr)
        if key:
            return key
    # Nothing nameable among the arguments (e.g. literals only).
    return f"{method}:{line}"
