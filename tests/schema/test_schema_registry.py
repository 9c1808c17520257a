"""Build-once semantics of the schema registry."""

from __future__ import annotations

import threading
from collections.abc import Sequence
from pathlib import Path

import libcst as cst
import pytest

from modelintel.config import AnalysisConfig
from modelintel.ingestion import CachedParser
from modelintel.schema import SchemaRegistry, shared_registry
from tests._helpers.expect import expect_equal, expect_false, expect_in, expect_true
from tests._helpers.migrations import write_migrations

WORKERS = 8


class CountingParser:
    """Parser double counting how often migration files are parsed."""

    def __init__(self) -> None:
        self.inner = CachedParser()
        self.calls = 0
        self._lock = threading.Lock()

    def parse_file(self, path: Path) -> Sequence[cst.BaseStatement]:
        with self._lock:
            self.calls += 1
        return self.inner.parse_file(path)


def test_registry_folds_migrations_in_file_name_order(registry: SchemaRegistry) -> None:
    """Later migration files override earlier definitions."""
    expect_false(registry.is_built)
    registry.ensure_built()
    expect_true(registry.is_built)
    users = registry.table("users")
    if users is None:
        pytest.fail("users table missing from registry")
    expect_equal(
        list(users.columns),
        [
            "id",
            "email",
            "display_name",
            "is_admin",
            "active",
            "role",
            "settings",
            "payload",
            "verified_at",
            "created_at",
            "score",
            "nickname",
        ],
    )
    score = registry.column("users", "score")
    if score is None:
        pytest.fail("users.score missing from registry")
    expect_equal(score.stored_type, "int")
    expect_equal(registry.column("users", "legacy"), None)
    expect_equal(registry.column("nowhere", "id"), None)
    expect_equal([anomaly.table for anomaly in registry.anomalies], ["ghosts"])


def test_registry_builds_once_until_rebuilt(config: AnalysisConfig) -> None:
    """ensure_built parses every file once; rebuild folds the history again."""
    parser = CountingParser()
    registry = SchemaRegistry.from_config(config, parser)
    registry.ensure_built()
    registry.ensure_built()
    expect_equal(parser.calls, 3)

    write_migrations(
        config.migrations_path,
        {"0004_tags.py": 'op.create_table("tags", sa.Column("label", sa.String()))\n'},
    )
    registry.ensure_built()
    expect_equal(registry.table("tags"), None, label="registry is not invalidated")
    registry.rebuild()
    expect_in("tags", registry.tables)


def test_concurrent_first_queries_build_once(config: AnalysisConfig) -> None:
    """Racing callers observe a single build."""
    parser = CountingParser()
    registry = SchemaRegistry.from_config(config, parser)
    barrier = threading.Barrier(WORKERS)

    def worker() -> None:
        barrier.wait()
        registry.ensure_built()

    threads = [threading.Thread(target=worker) for _ in range(WORKERS)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    expect_equal(parser.calls, 3)
    expect_in("users", registry.tables)


def test_missing_migration_directory_builds_empty(tmp_path: Path) -> None:
    """A project without migrations yields an empty, built registry."""
    registry = SchemaRegistry.from_config(AnalysisConfig(project_root=tmp_path))
    registry.ensure_built()
    expect_true(registry.is_built)
    expect_equal(dict(registry.tables), {})


def test_shared_registry_is_keyed_by_migrations_path(tmp_path: Path) -> None:
    """Configs pointing at the same migrations share one registry."""
    first = AnalysisConfig(project_root=tmp_path / "one")
    again = AnalysisConfig(project_root=tmp_path / "one", statics=("x.Y",))
    other = AnalysisConfig(project_root=tmp_path / "two")
    expect_true(shared_registry(first) is shared_registry(again))
    expect_false(shared_registry(first) is shared_registry(other))


def test_syntax_errors_propagate(tmp_path: Path) -> None:
    """A broken migration aborts the build instead of being skipped."""
    cfg = AnalysisConfig(project_root=tmp_path)
    write_migrations(cfg.migrations_path, {"0001_broken.py": "def upgrade(:\n"})
    registry = SchemaRegistry.from_config(cfg)
    with pytest.raises(cst.ParserSyntaxError):
        registry.ensure_built()
    expect_false(registry.is_built)
