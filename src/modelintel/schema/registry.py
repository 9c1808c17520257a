"""Process-scoped schema registry built lazily from migration history."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path

from modelintel.config.models import AnalysisConfig
from modelintel.ingestion.parser import CachedParser, SourceParser
from modelintel.ingestion.source_scanner import discover_migrations
from modelintel.schema.aggregator import SchemaAggregator
from modelintel.schema.models import SchemaAnomaly, SchemaColumn, SchemaTable

log = logging.getLogger(__name__)

MigrationSource = Callable[[], Sequence[Path]]


class SchemaRegistry:
    """
    ``{table: SchemaTable}`` map folded from every migration, built at most once.

    The first :meth:`ensure_built` call runs the build under a lock; later calls
    see the built flag and return without locking. The registry is never
    invalidated when migration files change; hosts that need a fresh snapshot
    call :meth:`rebuild` explicitly.
    """

    def __init__(self, migrations: MigrationSource, parser: SourceParser | None = None) -> None:
        self._migrations = migrations
        self._parser = parser or CachedParser()
        self._lock = threading.Lock()
        self._built = False
        self._tables: dict[str, SchemaTable] = {}
        self._anomalies: tuple[SchemaAnomaly, ...] = ()

    @classmethod
    def from_config(cls, config: AnalysisConfig, parser: SourceParser | None = None) -> SchemaRegistry:
        """
        Build a registry over the migrations configured for a project.

        Returns
        -------
        SchemaRegistry
            Unbuilt registry reading ``config.migrations_path``.
        """
        return cls(lambda: discover_migrations(config), parser)

    @property
    def is_built(self) -> bool:
        """Return True once the migration history has been folded."""
        return self._built

    def ensure_built(self) -> None:
        """Fold the migration history unless that already happened."""
        if self._built:
            return
        with self._lock:
            if self._built:
                return
            self._build()

    def rebuild(self) -> None:
        """Discard the current snapshot and fold the migration history again."""
        with self._lock:
            self._build()

    def _build(self) -> None:
        files = self._migrations()
        aggregator = SchemaAggregator()
        for path in files:
            aggregator.add_statements(self._parser.parse_file(path), source=path.name)
        self._tables = aggregator.tables
        self._anomalies = tuple(aggregator.anomalies)
        self._built = True
        log.info(
            "Schema registry built from %d migrations: %d tables, %d anomalies",
            len(files),
            len(self._tables),
            len(self._anomalies),
        )

    @property
    def tables(self) -> Mapping[str, SchemaTable]:
        """Tables as of the latest migration (empty until built)."""
        return self._tables

    @property
    def anomalies(self) -> tuple[SchemaAnomaly, ...]:
        """Tolerated statements that referenced unknown tables or columns."""
        return self._anomalies

    def table(self, name: str) -> SchemaTable | None:
        """Return the table called ``name`` when it exists."""
        return self._tables.get(name)

    def column(self, table: str, column: str) -> SchemaColumn | None:
        """Return ``table.column`` when both exist."""
        found = self._tables.get(table)
        if found is None:
            return None
        return found.columns.get(column)


_REGISTRIES: dict[Path, SchemaRegistry] = {}
_REGISTRIES_LOCK = threading.Lock()


def shared_registry(config: AnalysisConfig, parser: SourceParser | None = None) -> SchemaRegistry:
    """
    Return the process-wide registry for ``config.migrations_path``.

    Returns
    -------
    SchemaRegistry
        Registry shared by every resolver analysing the same migrations.
    """
    key = config.migrations_path
    with _REGISTRIES_LOCK:
        registry = _REGISTRIES.get(key)
        if registry is None:
            registry = SchemaRegistry.from_config(config, parser)
            _REGISTRIES[key] = registry
        return registry
