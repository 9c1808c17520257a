"""Small LibCST accessors shared by migration visitors."""

from __future__ import annotations

from collections.abc import Iterator, Sequence

import libcst as cst


def dotted_chain(expr: cst.BaseExpression) -> list[str]:
    """
    Flatten ``a.b.c`` (or the callee of ``a.b.c(...)``) into name parts.

    Returns
    -------
    list[str]
        Name parts from the root outwards; empty for non-name expressions.
    """
    if isinstance(expr, cst.Call):
        return dotted_chain(expr.func)
    names: list[str] = []
    current: cst.BaseExpression = expr
    while isinstance(current, cst.Attribute):
        names.append(current.attr.value)
        current = current.value
    if not isinstance(current, cst.Name):
        return []
    names.append(current.value)
    names.reverse()
    return names


def callee_name(call: cst.Call) -> str:
    """Return the final name part of a call's callee (``""`` when unnamed)."""
    chain = dotted_chain(call.func)
    return chain[-1] if chain else ""


def receiver_name(call: cst.Call) -> str | None:
    """Return the root name a method call is made on, e.g. ``op`` in ``op.add_column``."""
    chain = dotted_chain(call.func)
    return chain[0] if len(chain) > 1 else None


def positional_args(call: cst.Call) -> list[cst.BaseExpression]:
    """Return positional argument values, skipping ``*args``/``**kwargs`` splats."""
    return [arg.value for arg in call.args if arg.keyword is None and not arg.star]


def keyword_arg(call: cst.Call, name: str) -> cst.BaseExpression | None:
    """Return the value of keyword argument ``name`` when present."""
    for arg in call.args:
        if arg.keyword is not None and arg.keyword.value == name:
            return arg.value
    return None


def string_value(expr: cst.BaseExpression | None) -> str | None:
    """
    Evaluate a plain or implicitly concatenated string literal.

    Returns
    -------
    str | None
        Literal text; None for f-strings, bytes and non-literals.
    """
    if isinstance(expr, (cst.SimpleString, cst.ConcatenatedString)):
        value = expr.evaluated_value
        return value if isinstance(value, str) else None
    return None


def bool_value(expr: cst.BaseExpression | None) -> bool | None:
    """Return the value of a ``True``/``False`` literal, else None."""
    if isinstance(expr, cst.Name) and expr.value in {"True", "False"}:
        return expr.value == "True"
    return None


def iter_calls(statements: Sequence[cst.BaseStatement | cst.BaseSmallStatement]) -> Iterator[cst.Call]:
    """
    Yield calls used as expression statements, in source order.

    Compound statements are not entered.

    Yields
    ------
    cst.Call
        Expression-statement calls.
    """
    for statement in statements:
        small: Sequence[cst.BaseSmallStatement]
        if isinstance(statement, cst.SimpleStatementLine):
            small = statement.body
        elif isinstance(statement, cst.BaseSmallStatement):
            small = (statement,)
        else:
            continue
        for item in small:
            if isinstance(item, cst.Expr) and isinstance(item.value, cst.Call):
                yield item.value


def block_statements(
    suite: cst.BaseSuite,
) -> Sequence[cst.BaseStatement | cst.BaseSmallStatement]:
    """Return the statements of an indented block or a one-line suite."""
    if isinstance(suite, cst.IndentedBlock):
        return suite.body
    if isinstance(suite, cst.SimpleStatementSuite):
        return suite.body
    return ()
