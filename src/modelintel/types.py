"""Structured type values produced by property and method inference."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol, TypeAlias


class Type:
    """Marker base for structured types; concrete variants are frozen dataclasses."""

    __slots__ = ()

    def describe(self) -> str:
        """
        Render the type as a Python type expression.

        Returns
        -------
        str
            Type expression such as ``"str | None"``.
        """
        return format_type(self)


@dataclass(frozen=True)
class NamedType(Type):
    """Plain (possibly dotted) type name such as ``int`` or ``datetime.datetime``."""

    name: str


@dataclass(frozen=True, eq=False)
class LiteralType(Type):
    """Single ``Literal[...]`` value; ``Literal[1]`` and ``Literal[True]`` stay distinct."""

    value: str | int | bool

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LiteralType):
            return NotImplemented
        return (type(self.value), self.value) == (type(other.value), other.value)

    def __hash__(self) -> int:
        return hash((type(self.value), self.value))


@dataclass(frozen=True)
class GenericType(Type):
    """Subscripted type such as ``dict[str, Any]``."""

    base: str
    args: tuple[Type, ...]


@dataclass(frozen=True)
class UnionType(Type):
    """Flattened, de-duplicated union; build it through :func:`union`."""

    members: tuple[Type, ...]


TypeExpr: TypeAlias = "str | Type"

ANY = NamedType("Any")
NONE = NamedType("None")
BOOL = NamedType("bool")
INT = NamedType("int")
STR = NamedType("str")
FLOAT = NamedType("float")
OBJECT = NamedType("object")


def union(*types: Type) -> Type:
    """
    Combine types into a canonical union.

    Nested unions are flattened, duplicates removed in first-seen order and any
    member equal to ``Any`` absorbs the rest.

    Returns
    -------
    Type
        The single member when only one remains, otherwise a ``UnionType``.
    """
    members: list[Type] = []
    for member in _flatten(types):
        if member == ANY:
            return ANY
        if member not in members:
            members.append(member)
    if not members:
        return ANY
    if len(members) == 1:
        return members[0]
    return UnionType(tuple(members))


def _flatten(types: Iterable[Type]) -> Iterable[Type]:
    for item in types:
        if isinstance(item, UnionType):
            yield from _flatten(item.members)
        else:
            yield item


def literal_union(values: Iterable[str | int | bool]) -> Type:
    """
    Build a union of ``Literal`` members, one per value.

    Returns
    -------
    Type
        Union of literal types (``Any`` when ``values`` is empty).
    """
    return union(*(LiteralType(value) for value in values))


def is_nullable(type_: Type) -> bool:
    """Return True when ``None`` is a member of the type."""
    if type_ == NONE:
        return True
    return isinstance(type_, UnionType) and NONE in type_.members


def format_type(type_: Type | None) -> str:
    """
    Render a structured type back into Python type-expression syntax.

    Returns
    -------
    str
        Textual form that the type-string resolver maps back to ``type_``.
    """
    if type_ is None:
        return "<unknown>"
    if isinstance(type_, NamedType):
        return type_.name
    if isinstance(type_, LiteralType):
        return f"Literal[{type_.value!r}]"
    if isinstance(type_, GenericType):
        inner = ", ".join(format_type(arg) for arg in type_.args)
        return f"{type_.base}[{inner}]"
    if isinstance(type_, UnionType):
        return " | ".join(format_type(member) for member in type_.members)
    return repr(type_)


def resolve_type_expr(expr: TypeExpr, resolver: TypeResolverLike) -> Type:
    """
    Resolve a textual type expression, leaving structured values untouched.

    Resolving an already structured value returns it unchanged, so repeated
    calls yield equal results.

    Returns
    -------
    Type
        Structured type for ``expr``.
    """
    if isinstance(expr, Type):
        return expr
    return resolver.resolve(expr)


class TypeResolverLike(Protocol):
    """Structural type for objects exposing ``resolve(text) -> Type``."""

    def resolve(self, text: str) -> Type:
        """Resolve ``text`` into a structured type."""
        ...
