"""Python-side model of the Go syntax tree emitted by the parse helper.

Only the node kinds the scanners inspect get a dedicated class. Everything
else (statements, function literals, composite literals, ...) is kept as a
generic `Node` so traversal still reaches calls nested anywhere in a body.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Union

from ..errors import MalformedDeclarationError


@dataclass(frozen=True)
class Pos:
    line: int = 0
    column: int = 0


NO_POS = Pos()


@dataclass(frozen=True)
class Ident:
    name: str
    pos: Pos = NO_POS
    end: Pos = NO_POS

    def children(self) -> tuple:
        return ()


@dataclass(frozen=True)
class BasicLit:
    kind: str  # INT, FLOAT, IMAG, CHAR, STRING
    value: str
    pos: Pos = NO_POS
    end: Pos = NO_POS

    def children(self) -> tuple:
        return ()


@dataclass(frozen=True)
class SelectorExpr:
    x: "Expr"
    sel: Ident
    pos: Pos = NO_POS
    end: Pos = NO_POS

    def children(self) -> tuple:
        return (self.x, self.sel)


@dataclass(frozen=True)
class StarExpr:
    x: "Expr"
    pos: Pos = NO_POS
    end: Pos = NO_POS

    def children(self) -> tuple:
        return (self.x,)


@dataclass(frozen=True)
class ParenExpr:
    x: "Expr"
    pos: Pos = NO_POS
    end: Pos = NO_POS

    def children(self) -> tuple:
        return (self.x,)


@dataclass(frozen=True)
class UnaryExpr:
    op: str
    x: "Expr"
    pos: Pos = NO_POS
    end: Pos = NO_POS

    def children(self) -> tuple:
        return (self.x,)


@dataclass(frozen=True)
class BinaryExpr:
    op: str
    x: "Expr"
    y: "Expr"
    pos: Pos = NO_POS
    end: Pos = NO_POS

    def children(self) -> tuple:
        return (self.x, self.y)


@dataclass(frozen=True)
class CallExpr:
    fun: "Expr"
    args: tuple["Expr", ...] = ()
    pos: Pos = NO_POS
    end: Pos = NO_POS
    lparen: Pos = NO_POS

    def children(self) -> tuple:
        return (self.fun, *self.args)


@dataclass(frozen=True)
class IndexExpr:
    x: "Expr"
    index: "Expr"
    pos: Pos = NO_POS
    end: Pos = NO_POS

    def children(self) -> tuple:
        return (self.x, self.index)


@dataclass(frozen=True)
class ArrayType:
    elt: "Expr"
    length: "Expr | None" = None
    pos: Pos = NO_POS
    end: Pos = NO_POS

    def children(self) -> tuple:
        if self.length is None:
            return (self.elt,)
        return (self.length, self.elt)


@dataclass(frozen=True)
class MapType:
    key: "Expr"
    value: "Expr"
    pos: Pos = NO_POS
    end: Pos = NO_POS

    def children(self) -> tuple:
        return (self.key, self.value)


@dataclass(frozen=True)
class Ellipsis:
    elt: "Expr | None" = None
    pos: Pos = NO_POS
    end: Pos = NO_POS

    def children(self) -> tuple:
        return () if self.elt is None else (self.elt,)


@dataclass(frozen=True)
class Field:
    # Empty `names` means an anonymous (embedded or unnamed) field.
    names: tuple[str, ...]
    type: "Expr"
    pos: Pos = NO_POS

    def children(self) -> tuple:
        return (self.type,)


@dataclass(frozen=True)
class StructType:
    fields: tuple[Field, ...] = ()
    pos: Pos = NO_POS
    end: Pos = NO_POS

    def children(self) -> tuple:
        return self.fields


@dataclass(frozen=True)
class Node:
    """Any other syntax node, with its direct children in source order."""

    kind: str
    children_: tuple = ()
    pos: Pos = NO_POS
    end: Pos = NO_POS

    def children(self) -> tuple:
        return self.children_


Expr = Union[
    Ident,
    BasicLit,
    SelectorExpr,
    StarExpr,
    ParenExpr,
    UnaryExpr,
    BinaryExpr,
    CallExpr,
    IndexExpr,
    ArrayType,
    MapType,
    Ellipsis,
    StructType,
    Node,
]


@dataclass(frozen=True)
class ImportSpec:
    path: str  # quoted literal as written, e.g. "\"sample/app/models\""
    name: str | None = None
    pos: Pos = NO_POS


@dataclass(frozen=True)
class TypeSpec:
    name: str
    type: Expr
    pos: Pos = NO_POS


@dataclass(frozen=True)
class ValueSpec:
    names: tuple[str, ...] = ()
    pos: Pos = NO_POS


Spec = Union[ImportSpec, TypeSpec, ValueSpec]


@dataclass(frozen=True)
class GenDecl:
    tok: str  # import, type, var, const
    specs: tuple[Spec, ...] = ()
    pos: Pos = NO_POS


@dataclass(frozen=True)
class FuncDecl:
    name: str
    params: tuple[Field, ...] = ()
    results: tuple[Field, ...] | None = None
    recv: tuple[Field, ...] | None = None
    body: Node | None = None
    pos: Pos = NO_POS
    end: Pos = NO_POS


@dataclass(frozen=True)
class BadDecl:
    pos: Pos = NO_POS


Decl = Union[GenDecl, FuncDecl, BadDecl]


@dataclass(frozen=True)
class File:
    filename: str
    package_name: str
    decls: tuple[Decl, ...] = ()


@dataclass(frozen=True)
class Package:
    name: str
    files: tuple[File, ...] = ()


def walk(node: Any) -> Iterator[Any]:
    """Yield `node` and all of its descendants, depth first, in source order."""
    stack = [node]
    while stack:
        n = stack.pop()
        if n is None:
            continue
        yield n
        stack.extend(reversed(n.children()))


def render_expr(expr: Any) -> str | None:
    """Render an identifier or selector chain (`a`, `a.b.c`) as source text."""
    parts: list[str] = []
    while isinstance(expr, SelectorExpr):
        parts.append(expr.sel.name)
        expr = expr.x
    if not isinstance(expr, Ident):
        return None
    parts.append(expr.name)
    return ".".join(reversed(parts))


def receiver_name(decl: FuncDecl) -> tuple[str, bool] | None:
    """Return (type name, is pointer) for a method receiver, None for plain funcs."""
    if not decl.recv:
        return None
    t = _unparen(decl.recv[0].type)
    pointer = False
    # `func (a (*App)) ...` and `func (a *(App)) ...` are valid too.
    if isinstance(t, StarExpr):
        t = _unparen(t.x)
        pointer = True
    # Generic receivers: `func (l *List[T]) ...`
    if isinstance(t, IndexExpr):
        t = t.x
    elif isinstance(t, Node) and t.kind == "IndexListExpr" and t.children_:
        t = t.children_[0]
    if not isinstance(t, Ident):
        raise MalformedDeclarationError(f"unexpected receiver type for method {decl.name}")
    return t.name, pointer


def _unparen(t: Any) -> Any:
    while isinstance(t, ParenExpr):
        t = t.x
    return t


# --- JSON decoding ---------------------------------------------------------


def _pos(raw: Any) -> Pos:
    if isinstance(raw, list) and len(raw) == 2 and all(isinstance(x, int) for x in raw):
        return Pos(line=raw[0], column=raw[1])
    return NO_POS


def _expect(kind: str, kids: list, n: int) -> None:
    if len(kids) != n:
        raise MalformedDeclarationError(f"{kind}: expected {n} children, got {len(kids)}")


def decode_expr(obj: Any) -> Expr:
    """Rebuild a syntax tree from its flat post-order node list.

    Each entry carries `nc`, the number of its direct children: the `nc`
    subtrees completed just before it. Decoding keeps an explicit stack, so
    deep expressions such as long `+` chains don't hit the recursion limit.
    """
    if not isinstance(obj, list) or not obj:
        raise MalformedDeclarationError(f"invalid syntax tree: {obj!r}")
    stack: list[Expr] = []
    for raw in obj:
        if not isinstance(raw, dict):
            raise MalformedDeclarationError(f"invalid syntax node: {raw!r}")
        n = raw.get("nc", 0)
        if not isinstance(n, int) or n < 0 or n > len(stack):
            raise MalformedDeclarationError(f"invalid child count in syntax node: {raw!r}")
        split = len(stack) - n
        kids = stack[split:]
        del stack[split:]
        stack.append(_decode_node(raw, kids))
    if len(stack) != 1:
        raise MalformedDeclarationError(f"syntax tree has {len(stack)} roots")
    return stack[0]


def _decode_node(obj: dict, kids: list) -> Expr:
    if not isinstance(obj.get("k"), str):
        raise MalformedDeclarationError(f"invalid syntax node: {obj!r}")
    kind = obj["k"]
    pos = _pos(obj.get("p"))
    end = _pos(obj.get("e"))

    if kind == "Ident":
        _expect(kind, kids, 0)
        return Ident(name=str(obj.get("n", "")), pos=pos, end=end)
    if kind == "BasicLit":
        _expect(kind, kids, 0)
        return BasicLit(kind=str(obj.get("t", "")), value=str(obj.get("v", "")), pos=pos, end=end)
    if kind == "StructType":
        _expect(kind, kids, 0)
        return StructType(fields=decode_fields(obj.get("fields")) or (), pos=pos, end=end)

    if kind == "SelectorExpr":
        _expect(kind, kids, 2)
        if not isinstance(kids[1], Ident):
            raise MalformedDeclarationError("SelectorExpr: selector is not an identifier")
        return SelectorExpr(x=kids[0], sel=kids[1], pos=pos, end=end)
    if kind == "StarExpr":
        _expect(kind, kids, 1)
        return StarExpr(x=kids[0], pos=pos, end=end)
    if kind == "ParenExpr":
        _expect(kind, kids, 1)
        return ParenExpr(x=kids[0], pos=pos, end=end)
    if kind == "UnaryExpr":
        _expect(kind, kids, 1)
        return UnaryExpr(op=str(obj.get("op", "")), x=kids[0], pos=pos, end=end)
    if kind == "BinaryExpr":
        _expect(kind, kids, 2)
        return BinaryExpr(op=str(obj.get("op", "")), x=kids[0], y=kids[1], pos=pos, end=end)
    if kind == "CallExpr":
        if not kids:
            raise MalformedDeclarationError("CallExpr: missing function expression")
        return CallExpr(fun=kids[0], args=tuple(kids[1:]), pos=pos, end=end, lparen=_pos(obj.get("lp")))
    if kind == "IndexExpr":
        _expect(kind, kids, 2)
        return IndexExpr(x=kids[0], index=kids[1], pos=pos, end=end)
    if kind == "ArrayType":
        if obj.get("len"):
            _expect(kind, kids, 2)
            return ArrayType(elt=kids[1], length=kids[0], pos=pos, end=end)
        _expect(kind, kids, 1)
        return ArrayType(elt=kids[0], pos=pos, end=end)
    if kind == "MapType":
        _expect(kind, kids, 2)
        return MapType(key=kids[0], value=kids[1], pos=pos, end=end)
    if kind == "Ellipsis":
        return Ellipsis(elt=kids[0] if kids else None, pos=pos, end=end)
    return Node(kind=kind, children_=tuple(kids), pos=pos, end=end)


def decode_fields(raw: Any) -> tuple[Field, ...] | None:
    if raw is None:
        return None
    if not isinstance(raw, list):
        raise MalformedDeclarationError(f"invalid field list: {raw!r}")
    out: list[Field] = []
    for f in raw:
        if not isinstance(f, dict):
            raise MalformedDeclarationError(f"invalid field: {f!r}")
        names = f.get("names") or []
        if not all(isinstance(n, str) for n in names):
            raise MalformedDeclarationError(f"invalid field names: {names!r}")
        out.append(Field(names=tuple(names), type=decode_expr(f.get("type")), pos=_pos(f.get("p"))))
    return tuple(out)


def decode_spec(obj: Any) -> Spec:
    if not isinstance(obj, dict):
        raise MalformedDeclarationError(f"invalid spec: {obj!r}")
    kind = obj.get("k")
    pos = _pos(obj.get("p"))
    if kind == "ImportSpec":
        path = obj.get("path")
        name = obj.get("name")
        if not isinstance(path, str) or (name is not None and not isinstance(name, str)):
            raise MalformedDeclarationError(f"invalid import spec: {obj!r}")
        return ImportSpec(path=path, name=name, pos=pos)
    if kind == "TypeSpec":
        name = obj.get("name")
        if not isinstance(name, str):
            raise MalformedDeclarationError(f"invalid type spec: {obj!r}")
        return TypeSpec(name=name, type=decode_expr(obj.get("type")), pos=pos)
    if kind == "ValueSpec":
        return ValueSpec(names=tuple(str(n) for n in obj.get("names") or []), pos=pos)
    raise MalformedDeclarationError(f"unknown spec kind: {kind!r}")


def decode_decl(obj: Any) -> Decl:
    if not isinstance(obj, dict):
        raise MalformedDeclarationError(f"invalid declaration: {obj!r}")
    kind = obj.get("k")
    pos = _pos(obj.get("p"))
    if kind == "GenDecl":
        tok = obj.get("tok")
        if not isinstance(tok, str):
            raise MalformedDeclarationError(f"invalid GenDecl token: {tok!r}")
        return GenDecl(tok=tok, specs=tuple(decode_spec(s) for s in obj.get("specs") or []), pos=pos)
    if kind == "FuncDecl":
        name = obj.get("name")
        if not isinstance(name, str):
            raise MalformedDeclarationError(f"invalid FuncDecl name: {name!r}")
        body = obj.get("body")
        decoded_body = decode_expr(body) if body is not None else None
        if decoded_body is not None and not isinstance(decoded_body, Node):
            raise MalformedDeclarationError(f"invalid body for func {name}")
        return FuncDecl(
            name=name,
            params=decode_fields(obj.get("params")) or (),
            results=decode_fields(obj.get("results")),
            recv=decode_fields(obj.get("recv")),
            body=decoded_body,
            pos=pos,
            end=_pos(obj.get("e")),
        )
    if kind == "BadDecl":
        return BadDecl(pos=pos)
    raise MalformedDeclarationError(f"unknown declaration kind: {kind!r}")


def decode_package(obj: Any) -> Package:
    if not isinstance(obj, dict) or not isinstance(obj.get("name"), str):
        raise MalformedDeclarationError(f"invalid package: {obj!r}")
    files: list[File] = []
    for f in obj.get("files") or []:
        if not isinstance(f, dict) or not isinstance(f.get("name"), str):
            raise MalformedDeclarationError(f"invalid file entry: {f!r}")
        files.append(
            File(
                filename=f["name"],
                package_name=obj["name"],
                decls=tuple(decode_decl(d) for d in f.get("decls") or []),
            )
        )
    return Package(name=obj["name"], files=tuple(files))
