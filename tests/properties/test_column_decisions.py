"""Column type decision table."""

from __future__ import annotations

import pytest

from modelintel.properties import ColumnTypes, TypeHints, cast_overrides, decide, decide_cast
from modelintel.properties.decision import BOOL_WRITABLE
from modelintel.schema import SchemaColumn, SchemaTable
from modelintel.types import BOOL
from tests._helpers.expect import expect_equal


@pytest.mark.parametrize(
    ("stored", "nullable", "expected"),
    [
        ("string", False, ColumnTypes("str", "str")),
        ("string", True, ColumnTypes("str | None", "str | None")),
        ("int", True, ColumnTypes("int | None", "int | None")),
        ("float", False, ColumnTypes("float", "float")),
        ("bool", True, ColumnTypes(BOOL, BOOL_WRITABLE)),
        ("jsonb", False, ColumnTypes("Any", "Any")),
    ],
)
def test_stored_type_dispatch(stored: str, nullable: bool, expected: ColumnTypes) -> None:
    """Identity types honour nullability; booleans accept 0/1 writes; unknown is Any."""
    expect_equal(decide(stored, nullable=nullable), expected, label=stored)


def test_enum_options_become_literal_union() -> None:
    """Enum options become one Literal per option, without options a plain str."""
    expect_equal(
        decide("enum", options=("a", "b")),
        ColumnTypes("Literal['a'] | Literal['b']", "Literal['a'] | Literal['b']"),
    )
    expect_equal(decide("enum"), ColumnTypes("str", "str"))


def test_date_fields_take_precedence_over_casts() -> None:
    """Date fields read as the date class and also accept strings on write."""
    expect_equal(
        decide("string", nullable=True, cast="int", is_date=True),
        ColumnTypes("datetime.datetime | None", "datetime.datetime | str | None"),
    )
    hints = TypeHints(date_class="pendulum.DateTime")
    expect_equal(
        decide("datetime", is_date=True, hints=hints),
        ColumnTypes("pendulum.DateTime", "pendulum.DateTime | str"),
    )


def test_cast_overrides_stored_type() -> None:
    """A string column cast to bool decides as bool, without None."""
    expect_equal(decide("string", nullable=True, cast="bool"), ColumnTypes(BOOL, BOOL_WRITABLE))


@pytest.mark.parametrize(
    ("cast", "expected"),
    [
        ("int", "int | None"),
        ("string", "str | None"),
        ("real", "float | None"),
        ("double", "float | None"),
        ("json", "dict[str, Any] | list[Any]"),
        ("datetime", "datetime.datetime"),
    ],
)
def test_identity_casts_keep_column_nullability(cast: str, expected: str) -> None:
    """Casts to str, int and float append None on nullable columns; others do not."""
    expect_equal(decide("string", nullable=True, cast=cast), ColumnTypes(expected, expected), label=cast)
    expect_equal(decide_cast(cast, nullable=True), ColumnTypes(expected, expected), label=cast)


@pytest.mark.parametrize(
    ("cast", "expected"),
    [
        ("json", "dict[str, Any] | list[Any]"),
        ("array", "dict[str, Any] | list[Any]"),
        ("object", "object"),
        ("timestamp", "int"),
        ("double", "float"),
        ("String", "str"),
        ("datetime:%Y-%m-%d", "datetime.datetime"),
        ("date", "datetime.datetime"),
        ("collection", "list[Any]"),
        ("enum:draft, published", "Literal['draft'] | Literal['published']"),
        ("enum", "str"),
        ("no.such.Caster", "Any"),
    ],
)
def test_cast_dispatch(cast: str, expected: str) -> None:
    """Casts map to fixed types; unknown names fall back to Any."""
    expect_equal(decide_cast(cast), ColumnTypes(expected, expected), label=cast)


def test_known_class_casts_are_used_verbatim() -> None:
    """A cast naming a resolvable class becomes that class."""
    hints = TypeHints(known_class=lambda name: name == "decimal.Decimal")
    expect_equal(decide_cast("decimal.Decimal", hints=hints), ColumnTypes("decimal.Decimal", "decimal.Decimal"))


def test_casts_on_unknown_columns_are_ignored() -> None:
    """Only casts naming existing columns survive."""
    table = SchemaTable("users", {"email": SchemaColumn.from_literal("email", "string")})
    expect_equal(cast_overrides(table, {"email": "str", "ghost": "int"}), {"email": "str"})
