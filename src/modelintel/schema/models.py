"""Table and column records recovered from migration history."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Literal

from modelintel.types import Type, TypeExpr, TypeResolverLike, resolve_type_expr

AnomalyKind = Literal[
    "unknown_table",
    "unknown_column",
    "duplicate_column",
]


@dataclass
class SchemaColumn:
    """
    One column of a table as of the latest migration.

    ``stored_type`` keeps the raw storage literal captured from the migration.
    ``readable_type``/``writable_type`` start out equal to it and only ever move
    from textual to structured values.
    """

    name: str
    stored_type: str
    readable_type: TypeExpr
    writable_type: TypeExpr
    nullable: bool = False
    options: tuple[str, ...] = ()

    @classmethod
    def from_literal(
        cls,
        name: str,
        stored_type: str,
        *,
        nullable: bool = False,
        options: tuple[str, ...] = (),
    ) -> SchemaColumn:
        """
        Build a column whose read/write types are the raw storage literal.

        Returns
        -------
        SchemaColumn
            Freshly captured column.
        """
        return cls(
            name=name,
            stored_type=stored_type,
            readable_type=stored_type,
            writable_type=stored_type,
            nullable=nullable,
            options=options,
        )

    def retype(self, stored_type: str, options: tuple[str, ...] = ()) -> None:
        """Replace the storage type after an ``alter_column(type_=...)``."""
        self.stored_type = stored_type
        self.readable_type = stored_type
        self.writable_type = stored_type
        self.options = options

    def with_types(self, readable: TypeExpr, writable: TypeExpr) -> SchemaColumn:
        """
        Copy this column with decided read/write types.

        Returns
        -------
        SchemaColumn
            Independent copy; the registry's column is left untouched.
        """
        return replace(self, readable_type=readable, writable_type=writable)

    def resolve(self, resolver: TypeResolverLike) -> tuple[Type, Type]:
        """
        Resolve textual types in place and return the structured pair.

        Returns
        -------
        tuple[Type, Type]
            Readable and writable structured types.
        """
        readable = resolve_type_expr(self.readable_type, resolver)
        writable = resolve_type_expr(self.writable_type, resolver)
        self.readable_type = readable
        self.writable_type = writable
        return readable, writable


@dataclass
class SchemaTable:
    """Columns of one table in migration declaration order."""

    name: str
    columns: dict[str, SchemaColumn] = field(default_factory=dict)

    def add(self, column: SchemaColumn) -> None:
        """Add or replace a column; a replaced column keeps its position."""
        self.columns[column.name] = column

    def drop(self, name: str) -> SchemaColumn | None:
        """Remove a column, returning it when it existed."""
        return self.columns.pop(name, None)

    def rename(self, old: str, new: str) -> bool:
        """
        Move a column to a new key, keeping the column object and its position.

        Returns
        -------
        bool
            False when ``old`` is not a column of this table.
        """
        column = self.columns.get(old)
        if column is None:
            return False
        column.name = new
        self.columns = {
            (new if key == old else key): value
            for key, value in self.columns.items()
            if key != new or key == old
        }
        return True


@dataclass(frozen=True)
class SchemaAnomaly:
    """A migration statement that referenced a table or column that does not exist."""

    kind: AnomalyKind
    operation: str
    table: str
    column: str | None = None
    source: str | None = None

    def describe(self) -> str:
        """
        One-line description for logs and CLI output.

        Returns
        -------
        str
            Human-readable anomaly summary.
        """
        target = self.table if self.column is None else f"{self.table}.{self.column}"
        where = f" in {self.source}" if self.source else ""
        return f"{self.operation}: {self.kind.replace('_', ' ')} {target}{where}"
