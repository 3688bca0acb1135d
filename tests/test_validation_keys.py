from __future__ import annotations


def _sel(*names: str):
    from gosrcinfo.goparse.syntax import Ident, SelectorExpr

    expr = Ident(names[0])
    for n in names[1:]:
        expr = SelectorExpr(x=expr, sel=Ident(n))
    return expr


def _call(fun, *args, line: int):
    from gosrcinfo.goparse.syntax import CallExpr, Pos

    return CallExpr(fun=fun, args=tuple(args), pos=Pos(line, 2), end=Pos(line, 40), lparen=Pos(line, 20))


def _func(*stmts, name: str = "Save", params=(), recv=None):
    from gosrcinfo.goparse.syntax import FuncDecl, Node

    body = Node(kind="BlockStmt", children_=tuple(Node(kind="ExprStmt", children_=(s,)) for s in stmts))
    return FuncDecl(name=name, params=tuple(params), recv=recv, body=body)


REVEL = {"revel": "github.com/revel/revel"}


def test_bare_validation_call_records_selector_key():
    from gosrcinfo.validation import validation_keys

    decl = _func(_call(_sel("Validation", "Required"), _sel("user", "Name"), line=42))
    assert validation_keys(decl, {}) == {42: "user.Name"}


def test_controller_field_validation_calls():
    from gosrcinfo.goparse.syntax import BasicLit, BinaryExpr, Ident, UnaryExpr
    from gosrcinfo.validation import validation_keys

    decl = _func(
        _call(_sel("c", "Validation", "Required"), Ident("username"), line=10),
        _call(_sel("c", "Validation", "MinSize"), _sel("user", "Password"), BasicLit("INT", "8"), line=11),
        _call(
            _sel("c", "Validation", "Required"),
            BinaryExpr(op="!=", x=Ident("email"), y=BasicLit("STRING", '""')),
            line=12,
        ),
        _call(_sel("c", "Validation", "Required"), UnaryExpr(op="!", x=Ident("banned")), line=13),
    )
    assert validation_keys(decl, {}) == {
        10: "username",
        11: "user.Password",
        12: "email",
        13: "banned",
    }


def test_validation_parameter_resolves_through_import_table():
    from gosrcinfo.goparse.syntax import Field, Ident, StarExpr
    from gosrcinfo.validation import validation_keys

    params = (Field(names=("v",), type=StarExpr(x=_sel("revel", "Validation"))),)
    decl = _func(_call(_sel("v", "Required"), Ident("name"), line=7), params=params)

    assert validation_keys(decl, REVEL) == {7: "name"}
    # Without the import the parameter type is unknown.
    assert validation_keys(decl, {}) == {}
    assert validation_keys(decl, {"revel": "example.com/other"}) == {}


def test_unrelated_calls_are_ignored():
    from gosrcinfo.goparse.syntax import Ident
    from gosrcinfo.validation import validation_keys

    decl = _func(
        _call(_sel("c", "Validation", "HasErrors"), line=3),
        _call(_sel("c", "Validation", "Keep"), line=4),
        _call(_sel("db", "Required"), Ident("x"), line=5),
        _call(_sel("c", "Validation", "Required"), line=6),
        _call(Ident("Required"), Ident("x"), line=7),
    )
    assert validation_keys(decl, REVEL) == {}


def test_literal_only_arguments_fall_back_to_positional_key():
    from gosrcinfo.goparse.syntax import BasicLit
    from gosrcinfo.validation import validation_keys

    decl = _func(_call(_sel("c", "Validation", "Check"), BasicLit("STRING", '"x"'), line=57))
    assert validation_keys(decl, {}) == {57: "Check:57"}


def test_same_line_last_call_wins():
    from gosrcinfo.goparse.syntax import Ident
    from gosrcinfo.validation import validation_keys

    decl = _func(
        _call(_sel("c", "Validation", "Required"), Ident("first"), line=20),
        _call(_sel("c", "Validation", "Required"), Ident("second"), line=20),
    )
    assert validation_keys(decl, {}) == {20: "second"}


def test_calls_nested_in_function_literals_are_found():
    from gosrcinfo.goparse.syntax import Ident, Node
    from gosrcinfo.validation import validation_keys

    inner = _call(_sel("c", "Validation", "Email"), _sel("form", "Email"), line=31)
    func_lit = Node(kind="FuncLit", children_=(Node(kind="FuncType"), Node(kind="BlockStmt", children_=(inner,))))
    outer = _call(Ident("run"), func_lit, line=30)
    assert validation_keys(_func(outer), {}) == {31: "form.Email"}


def test_multi_line_call_uses_closing_line():
    from gosrcinfo.goparse.syntax import CallExpr, Ident, Pos
    from gosrcinfo.validation import validation_keys

    call = CallExpr(
        fun=_sel("c", "Validation", "Range"),
        args=(Ident("age"),),
        pos=Pos(8, 2),
        end=Pos(10, 3),
    )
    assert validation_keys(_func(call), {}) == {10: "age"}


def test_func_without_body_has_no_keys():
    from gosrcinfo.goparse.syntax import FuncDecl
    from gosrcinfo.validation import validation_keys

    assert validation_keys(FuncDecl(name="external"), {}) == {}


def test_func_name_includes_receiver():
    from gosrcinfo.goparse.syntax import Field, Ident, StarExpr
    from gosrcinfo.validation import func_name

    assert func_name(_func(name="helper")) == "helper"
    value_recv = (Field(names=("c",), type=Ident("App")),)
    assert func_name(_func(name="Index", recv=value_recv)) == "App.Index"
    ptr_recv = (Field(names=("c",), type=StarExpr(x=Ident("App"))),)
    assert func_name(_func(name="Save", recv=ptr_recv)) == "(*App).Save"
