"""Migration discovery and the caching LibCST parser."""

from __future__ import annotations

import os
from pathlib import Path

from modelintel.config import AnalysisConfig
from modelintel.ingestion import CachedParser, ScanProfile, SourceScanner, discover_migrations
from tests._helpers.expect import expect_equal, expect_true


def _touch(path: Path, text: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_discovery_orders_by_file_name_and_skips_support_files(tmp_path: Path) -> None:
    """Revision-prefixed names decide the order; env.py, __init__.py and caches are skipped."""
    versions = tmp_path / "migrations" / "versions"
    _touch(versions / "0002_second.py")
    _touch(versions / "archive" / "0001_first.py")
    _touch(versions / "0003_third.py")
    _touch(versions / "__init__.py")
    _touch(versions / "env.py")
    _touch(versions / "README.md")
    _touch(versions / "__pycache__" / "0000_cached.py")

    found = discover_migrations(AnalysisConfig(project_root=tmp_path))
    expect_equal([path.name for path in found], ["0001_first.py", "0002_second.py", "0003_third.py"])


def test_scanner_honours_custom_globs(tmp_path: Path) -> None:
    """Include globs restrict which files count as migrations."""
    _touch(tmp_path / "m" / "20240101_init.py")
    _touch(tmp_path / "m" / "helpers.py")
    profile = ScanProfile(root=tmp_path / "m", include_globs=("2*.py",))
    expect_equal([path.name for path in SourceScanner(profile).sorted_files()], ["20240101_init.py"])


def test_missing_directory_yields_nothing(tmp_path: Path) -> None:
    """Scanning a missing directory is not an error."""
    expect_equal(SourceScanner(ScanProfile(root=tmp_path / "absent")).sorted_files(), [])


def test_parser_reuses_cached_module_until_file_changes(tmp_path: Path) -> None:
    """Unchanged files return the cached tree; a newer mtime triggers a reparse."""
    path = _touch(tmp_path / "0001.py", "x = 1\n")
    parser = CachedParser()
    first = parser.parse_module(path)
    expect_true(parser.parse_module(path) is first, message="expected cached module")

    path.write_text("x = 1\ny = 2\n", encoding="utf-8")
    stat = path.stat()
    os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))
    expect_equal(len(parser.parse_file(path)), 2)
