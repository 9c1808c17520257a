"""Parse textual Python type expressions into structured types."""

from __future__ import annotations

from typing import Final, Protocol

import libcst as cst

from modelintel.errors import UnresolvedTypeError
from modelintel.ingestion.cst_utils import dotted_chain, string_value
from modelintel.types import (
    NONE,
    GenericType,
    NamedType,
    Type,
    literal_union,
    union,
)

LITERAL_NAMES: Final = frozenset({"Literal", "typing.Literal", "typing_extensions.Literal"})
OPTIONAL_NAMES: Final = frozenset({"Optional", "typing.Optional"})
UNION_NAMES: Final = frozenset({"Union", "typing.Union"})


class TypeStringResolver(Protocol):
    """Resolver contract: textual type expression in, structured type out."""

    def resolve(self, text: str) -> Type:
        """Resolve ``text``; raise :class:`UnresolvedTypeError` on malformed input."""
        ...


class CstTypeStringResolver:
    """
    Resolve type strings such as ``"str | None"`` or ``"Literal['a', 'b']"``.

    Supports names, dotted names, ``X | Y`` unions, ``Optional``/``Union``,
    ``Literal`` with string/int/bool members, subscripted generics and quoted
    forward references. Results are cached per input text.
    """

    def __init__(self) -> None:
        self._cache: dict[str, Type] = {}

    def resolve(self, text: str) -> Type:
        """
        Resolve ``text`` into a structured type.

        Returns
        -------
        Type
            Structured type equal across repeated calls.

        Raises
        ------
        UnresolvedTypeError
            If ``text`` is not a valid type expression.
        """
        cached = self._cache.get(text)
        if cached is not None:
            return cached
        try:
            expr = cst.parse_expression(text.strip())
        except cst.ParserSyntaxError as exc:
            raise UnresolvedTypeError.for_text(text, "invalid syntax") from exc
        resolved = self._convert(expr, text)
        self._cache[text] = resolved
        return resolved

    def _convert(self, expr: cst.BaseExpression, text: str) -> Type:
        if isinstance(expr, cst.BinaryOperation) and isinstance(expr.operator, cst.BitOr):
            return union(self._convert(expr.left, text), self._convert(expr.right, text))
        if isinstance(expr, (cst.Name, cst.Attribute)):
            chain = dotted_chain(expr)
            if not chain:
                raise UnresolvedTypeError.for_text(text, "unsupported attribute base")
            name = ".".join(chain)
            return NONE if name == "None" else NamedType(name)
        if isinstance(expr, cst.Subscript):
            return self._convert_subscript(expr, text)
        forward = string_value(expr)
        if forward is not None:
            return self.resolve(forward)
        if isinstance(expr, cst.Ellipsis):
            return NamedType("...")
        raise UnresolvedTypeError.for_text(text, f"unsupported {type(expr).__name__} expression")

    def _convert_subscript(self, expr: cst.Subscript, text: str) -> Type:
        chain = dotted_chain(expr.value)
        if not chain:
            raise UnresolvedTypeError.for_text(text, "unsupported subscript base")
        base = ".".join(chain)
        elements: list[cst.BaseExpression] = []
        for element in expr.slice:
            if not isinstance(element.slice, cst.Index):
                raise UnresolvedTypeError.for_text(text, "slices are not types")
            elements.append(element.slice.value)

        if base in LITERAL_NAMES:
            return literal_union(_literal_value(item, text) for item in elements)
        args = [self._convert(item, text) for item in elements]
        if base in OPTIONAL_NAMES:
            return union(*args, NONE)
        if base in UNION_NAMES:
            return union(*args)
        return GenericType(base, tuple(args))


def _literal_value(expr: cst.BaseExpression, text: str) -> str | int | bool:
    value = string_value(expr)
    if value is not None:
        return value
    if isinstance(expr, cst.Integer):
        return int(expr.value, 0)
    if isinstance(expr, cst.UnaryOperation) and isinstance(expr.operator, cst.Minus):
        if isinstance(expr.expression, cst.Integer):
            return -int(expr.expression.value, 0)
    if isinstance(expr, cst.Name) and expr.value in {"True", "False"}:
        return expr.value == "True"
    raise UnresolvedTypeError.for_text(text, "Literal members must be str, int or bool")
