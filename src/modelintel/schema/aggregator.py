"""Fold migration statements into a table/column model."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Final

import libcst as cst

from modelintel.ingestion.cst_utils import (
    block_statements,
    bool_value,
    callee_name,
    dotted_chain,
    iter_calls,
    keyword_arg,
    positional_args,
    receiver_name,
    string_value,
)
from modelintel.schema.models import AnomalyKind, SchemaAnomaly, SchemaColumn, SchemaTable

log = logging.getLogger(__name__)

UPGRADE_FUNCTION: Final = "upgrade"
COLUMN_CONSTRUCTOR: Final = "Column"
BATCH_CONTEXT: Final = "batch_alter_table"

STORAGE_LITERALS: Final[dict[str, str]] = {
    "string": "string",
    "text": "string",
    "unicode": "string",
    "unicodetext": "string",
    "char": "string",
    "varchar": "string",
    "nvarchar": "string",
    "uuid": "string",
    "integer": "int",
    "biginteger": "int",
    "smallinteger": "int",
    "bigint": "int",
    "smallint": "int",
    "int": "int",
    "float": "float",
    "numeric": "float",
    "decimal": "float",
    "real": "float",
    "double": "float",
    "double_precision": "float",
    "boolean": "bool",
    "bool": "bool",
    "enum": "enum",
}


def storage_literal(type_expr: cst.BaseExpression | None) -> tuple[str, tuple[str, ...]]:
    """
    Map a SQLAlchemy type expression to its storage literal and enum options.

    ``sa.String(50)``, ``sa.String`` and ``String()`` all map to ``"string"``;
    unknown types map to their lower-cased class name.

    Returns
    -------
    tuple[str, tuple[str, ...]]
        Storage literal and enum options (empty unless the type is an enum).
    """
    if type_expr is None:
        return "mixed", ()
    chain = dotted_chain(type_expr)
    if not chain:
        return "mixed", ()
    type_name = chain[-1].lower()
    literal = STORAGE_LITERALS.get(type_name, type_name)
    options: tuple[str, ...] = ()
    if literal == "enum" and isinstance(type_expr, cst.Call):
        options = tuple(
            value
            for value in (string_value(arg) for arg in positional_args(type_expr))
            if value is not None
        )
    return literal, options


def column_from_call(call: cst.Call) -> SchemaColumn | None:
    """
    Build a column from an ``sa.Column(name, type, ...)`` call.

    A column is nullable only when it carries an explicit ``nullable=True``
    modifier; ``primary_key`` has no bearing on it.

    Returns
    -------
    SchemaColumn | None
        Captured column, or None when the call is not a named column.
    """
    if callee_name(call) != COLUMN_CONSTRUCTOR:
        return None
    args = positional_args(call)
    name = string_value(args[0]) if args else None
    if name is None:
        return None
    type_expr = args[1] if len(args) > 1 else keyword_arg(call, "type_")
    literal, options = storage_literal(type_expr)
    nullable = bool_value(keyword_arg(call, "nullable")) is True
    return SchemaColumn.from_literal(name, literal, nullable=nullable, options=options)


class SchemaAggregator:
    """
    Running ``{table: {column: definition}}`` model built from migration files.

    Files must be added in chronological (file name) order so later
    alterations override earlier definitions. Statements that reference
    tables or columns that do not exist are tolerated and recorded in
    :attr:`anomalies`.
    """

    def __init__(self) -> None:
        self.tables: dict[str, SchemaTable] = {}
        self.anomalies: list[SchemaAnomaly] = []
        self._source: str | None = None

    def add_statements(
        self,
        statements: Sequence[cst.BaseStatement],
        *,
        source: str | None = None,
    ) -> None:
        """Fold the top-level statements of one migration module."""
        self._source = source
        try:
            for statement in statements:
                if isinstance(statement, cst.FunctionDef):
                    if statement.name.value == UPGRADE_FUNCTION:
                        self._add_block(block_statements(statement.body))
                elif isinstance(statement, cst.SimpleStatementLine):
                    self._add_block((statement,))
        finally:
            self._source = None

    def _add_block(
        self,
        statements: Sequence[cst.BaseStatement | cst.BaseSmallStatement],
        batch: tuple[str, str] | None = None,
    ) -> None:
        for statement in statements:
            if isinstance(statement, cst.With):
                target = _batch_target(statement)
                if target is not None:
                    self._add_block(block_statements(statement.body), target)
                continue
            for call in iter_calls((statement,)):
                self._add_call(call, batch)

    def _add_call(self, call: cst.Call, batch: tuple[str, str] | None) -> None:
        method = callee_name(call)
        args = positional_args(call)
        receiver = receiver_name(call)
        if batch is not None and receiver == batch[1]:
            table_name: str | None = batch[0]
        elif receiver is not None and args:
            table_name = string_value(args[0])
            args = args[1:]
        else:
            return
        if table_name is None:
            return

        if method == "create_table":
            self._create_table(table_name, args)
        elif method == "drop_table":
            self._drop_table(table_name)
        elif method == "rename_table":
            self._rename_table(table_name, string_value(args[0]) if args else None)
        elif method == "add_column":
            self._add_column(table_name, args[0] if args else None)
        elif method == "drop_column":
            self._drop_column(table_name, string_value(args[0]) if args else None)
        elif method == "alter_column":
            self._alter_column(table_name, string_value(args[0]) if args else None, call)

    def _create_table(self, name: str, args: Sequence[cst.BaseExpression]) -> None:
        table = SchemaTable(name)
        for arg in args:
            if isinstance(arg, cst.Call):
                column = column_from_call(arg)
                if column is not None:
                    table.add(column)
        self.tables[name] = table

    def _drop_table(self, name: str) -> None:
        if self.tables.pop(name, None) is None:
            self._anomaly("unknown_table", "drop_table", name)

    def _rename_table(self, old: str, new: str | None) -> None:
        if new is None:
            return
        table = self.tables.pop(old, None)
        if table is None:
            self._anomaly("unknown_table", "rename_table", old)
            return
        table.name = new
        self.tables[new] = table

    def _add_column(self, table_name: str, expr: cst.BaseExpression | None) -> None:
        if not isinstance(expr, cst.Call):
            return
        column = column_from_call(expr)
        if column is None:
            return
        table = self.tables.get(table_name)
        if table is None:
            self._anomaly("unknown_table", "add_column", table_name, column.name)
            return
        if column.name in table.columns:
            self._anomaly("duplicate_column", "add_column", table_name, column.name)
        table.add(column)

    def _drop_column(self, table_name: str, column_name: str | None) -> None:
        if column_name is None:
            return
        table = self.tables.get(table_name)
        if table is None:
            self._anomaly("unknown_table", "drop_column", table_name, column_name)
            return
        if table.drop(column_name) is None:
            self._anomaly("unknown_column", "drop_column", table_name, column_name)

    def _alter_column(self, table_name: str, column_name: str | None, call: cst.Call) -> None:
        if column_name is None:
            return
        table = self.tables.get(table_name)
        if table is None:
            self._anomaly("unknown_table", "alter_column", table_name, column_name)
            return
        column = table.columns.get(column_name)
        if column is None:
            self._anomaly("unknown_column", "alter_column", table_name, column_name)
            return

        type_expr = keyword_arg(call, "type_")
        if type_expr is not None:
            column.retype(*storage_literal(type_expr))
        nullable = bool_value(keyword_arg(call, "nullable"))
        if nullable is not None:
            column.nullable = nullable
        new_name = string_value(keyword_arg(call, "new_column_name"))
        if new_name is not None and new_name != column_name:
            table.rename(column_name, new_name)

    def _anomaly(
        self,
        kind: AnomalyKind,
        operation: str,
        table: str,
        column: str | None = None,
    ) -> None:
        anomaly = SchemaAnomaly(kind, operation, table, column, self._source)
        self.anomalies.append(anomaly)
        log.debug("Tolerating migration anomaly: %s", anomaly.describe())


def _batch_target(statement: cst.With) -> tuple[str, str] | None:
    """Return ``(table, alias)`` for ``with op.batch_alter_table("t") as alias:``."""
    for item in statement.items:
        call = item.item
        if not isinstance(call, cst.Call) or callee_name(call) != BATCH_CONTEXT:
            continue
        args = positional_args(call)
        table_name = string_value(args[0]) if args else string_value(keyword_arg(call, "table_name"))
        if table_name is None or item.asname is None:
            continue
        alias = item.asname.name
        if isinstance(alias, cst.Name):
            return table_name, alias.value
    return None
