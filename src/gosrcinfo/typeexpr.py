from __future__ import annotations

from dataclasses import dataclass

from .goparse.syntax import ArrayType, Ellipsis, Ident, SelectorExpr, StarExpr

BUILTIN_TYPES = frozenset(
    {
        "bool",
        "byte",
        "complex128",
        "complex64",
        "error",
        "float32",
        "float64",
        "int",
        "int16",
        "int32",
        "int64",
        "int8",
        "rune",
        "string",
        "uint",
        "uint16",
        "uint32",
        "uint64",
        "uint8",
        "uintptr",
    }
)


@dataclass(frozen=True)
class TypeExpr:
    """An argument type expression with its package qualifier split out.

    `expr` is unqualified (e.g. "[]*User"); `pkg_index` is where a package
    qualifier is inserted to render it (e.g. "[]*models.User").
    """

    expr: str
    pkg_name: str = ""
    pkg_index: int = 0
    valid: bool = True

    def type_name(self, pkg_override: str = "") -> str:
        pkg = pkg_override or self.pkg_name
        if not pkg:
            return self.expr
        return f"{self.expr[: self.pkg_index]}{pkg}.{self.expr[self.pkg_index :]}"


INVALID = TypeExpr(expr="", valid=False)


def new_type_expr(pkg_name: str, expr) -> TypeExpr:
    """Build a TypeExpr. Builtin identifiers are never package qualified."""
    if isinstance(expr, Ident):
        if expr.name in BUILTIN_TYPES:
            pkg_name = ""
        return TypeExpr(expr=expr.name, pkg_name=pkg_name)
    if isinstance(expr, SelectorExpr):
        e = new_type_expr(pkg_name, expr.x)
        return TypeExpr(expr=expr.sel.name, pkg_name=e.expr, valid=e.valid)
    if isinstance(expr, StarExpr):
        e = new_type_expr(pkg_name, expr.x)
        return TypeExpr(expr="*" + e.expr, pkg_name=e.pkg_name, pkg_index=e.pkg_index + 1, valid=e.valid)
    if isinstance(expr, (ArrayType, Ellipsis)) and expr.elt is not None:
        # Fixed-size arrays are not understood.
        if isinstance(expr, ArrayType) and expr.length is not None:
            return INVALID
        e = new_type_expr(pkg_name, expr.elt)
        return TypeExpr(expr="[]" + e.expr, pkg_name=e.pkg_name, pkg_index=e.pkg_index + 2, valid=e.valid)
    return INVALID
