"""Decision table mapping storage types and casts to read/write types."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Final

from modelintel.schema.models import SchemaTable
from modelintel.types import BOOL, LiteralType, Type, TypeExpr, union

log = logging.getLogger(__name__)

ANY_TEXT: Final = "Any"
BOOL_WRITABLE: Final[Type] = union(BOOL, LiteralType(0), LiteralType(1))

STORED_IDENTITY: Final[dict[str, str]] = {
    "string": "str",
    "str": "str",
    "int": "int",
    "integer": "int",
    "float": "float",
}

CAST_TYPES: Final[dict[str, str]] = {
    "string": "str",
    "str": "str",
    "array": "dict[str, Any] | list[Any]",
    "json": "dict[str, Any] | list[Any]",
    "object": "object",
    "int": "int",
    "integer": "int",
    "timestamp": "int",
    "real": "float",
    "double": "float",
    "float": "float",
}

NULLABLE_CASTS: Final = frozenset({"str", "int", "float"})


@dataclass(frozen=True)
class ColumnTypes:
    """Readable and writable type of one column, textual or structured."""

    readable: TypeExpr
    writable: TypeExpr


@dataclass(frozen=True)
class TypeHints:
    """Project-specific inputs to the decision table."""

    date_class: str = "datetime.datetime"
    collection_class: str = "list[Any]"
    known_class: Callable[[str], bool] = lambda _name: False


DEFAULT_HINTS: Final = TypeHints()


def _nullable(text: str, nullable: bool) -> str:
    return f"{text} | None" if nullable else text


def _enum_literals(options: Sequence[str]) -> str:
    return " | ".join(f"Literal[{option!r}]" for option in options)


def decide(
    stored_type: str,
    *,
    nullable: bool = False,
    options: Sequence[str] = (),
    cast: str | None = None,
    is_date: bool = False,
    hints: TypeHints = DEFAULT_HINTS,
) -> ColumnTypes:
    """
    Map a column's storage type (or its cast) to a read/write type pair.

    Precedence: date field, then cast, then storage type.

    Parameters
    ----------
    stored_type
        Storage literal captured from the migrations (``"string"``, ``"int"``, ...).
    nullable
        Whether the column accepts NULL.
    options
        Enum options in declaration order.
    cast
        Cast declared on the record class for this column, if any.
    is_date
        Whether the record class lists the column among its date fields.
    hints
        Date/collection types and known-class lookup.

    Returns
    -------
    ColumnTypes
        Textual or structured readable/writable types.
    """
    if is_date:
        readable = _nullable(hints.date_class, nullable)
        return ColumnTypes(readable, _nullable(f"{hints.date_class} | str", nullable))
    if cast is not None:
        return decide_cast(cast, nullable=nullable, hints=hints)

    key = stored_type.lower()
    identity = STORED_IDENTITY.get(key)
    if identity is not None:
        text = _nullable(identity, nullable)
        return ColumnTypes(text, text)
    if key in {"bool", "boolean"}:
        return ColumnTypes(BOOL, BOOL_WRITABLE)
    if key == "enum":
        text = _enum_literals(options) if options else "str"
        return ColumnTypes(text, text)
    return ColumnTypes(ANY_TEXT, ANY_TEXT)


def decide_cast(
    cast: str, *, nullable: bool = False, hints: TypeHints = DEFAULT_HINTS
) -> ColumnTypes:
    """
    Map a cast declaration to a read/write type pair.

    Cast parameters (``"datetime:%Y-%m-%d"``) are ignored except for
    ``"enum:a,b"``, whose options become literal members. Casts to ``str``,
    ``int`` and ``float`` append ``None`` for nullable columns like the stored
    types do; classes the broker knows are used as-is, anything else is ``Any``.

    Returns
    -------
    ColumnTypes
        Readable/writable types for the cast.
    """
    name = cast.strip()
    key, _, params = name.partition(":")
    key = key.lower()
    if key in {"bool", "boolean"}:
        return ColumnTypes(BOOL, BOOL_WRITABLE)
    if key == "enum":
        options = [option.strip() for option in params.split(",") if option.strip()]
        text = _enum_literals(options) if options else "str"
        return ColumnTypes(text, text)
    mapped = CAST_TYPES.get(key)
    if mapped is not None:
        if mapped in NULLABLE_CASTS:
            mapped = _nullable(mapped, nullable)
        return ColumnTypes(mapped, mapped)
    if key in {"date", "datetime"}:
        return ColumnTypes(hints.date_class, hints.date_class)
    if key == "collection":
        return ColumnTypes(hints.collection_class, hints.collection_class)
    if hints.known_class(name):
        return ColumnTypes(name, name)
    log.debug("Unknown cast %r; treating as Any", cast)
    return ColumnTypes(ANY_TEXT, ANY_TEXT)


def cast_overrides(table: SchemaTable, casts: Mapping[str, str]) -> dict[str, str]:
    """
    Keep only the casts that name existing columns of ``table``.

    Returns
    -------
    dict[str, str]
        Column name to cast for columns present in the table.
    """
    kept: dict[str, str] = {}
    for column, cast in casts.items():
        if column in table.columns:
            kept[column] = cast
        else:
            log.debug("Ignoring cast %r on unknown column %s.%s", cast, table.name, column)
    return kept
