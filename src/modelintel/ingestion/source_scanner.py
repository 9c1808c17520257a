"""Migration file discovery."""

from __future__ import annotations

import fnmatch
import logging
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from modelintel.config.models import DEFAULT_IGNORE_DIRS, AnalysisConfig

log = logging.getLogger(__name__)

NON_MIGRATION_FILES: Final[frozenset[str]] = frozenset({"__init__.py", "env.py"})


@dataclass(frozen=True)
class ScanProfile:
    """Description of how to scan a directory tree for migration files."""

    root: Path
    include_globs: tuple[str, ...] = ("*.py",)
    ignore_dirs: tuple[str, ...] = DEFAULT_IGNORE_DIRS
    exclude_names: frozenset[str] = NON_MIGRATION_FILES

    @classmethod
    def from_config(cls, config: AnalysisConfig) -> ScanProfile:
        """
        Build the migration profile described by an analysis config.

        Returns
        -------
        ScanProfile
            Profile rooted at ``config.migrations_path``.
        """
        return cls(
            root=config.migrations_path,
            include_globs=config.migration_globs,
            ignore_dirs=config.ignore_dirs,
        )


class SourceScanner:
    """Recursive scanner for files matching a profile."""

    def __init__(self, profile: ScanProfile) -> None:
        self.profile = profile

    def iter_files(self) -> Iterator[Path]:
        """
        Yield files matching include globs while respecting ignored directories.

        Yields
        ------
        Path
            Paths to files that satisfy the scan profile, in walk order.
        """
        root = self.profile.root
        if not root.is_dir():
            log.info("Migration directory %s does not exist; skipping scan", root)
            return
        ignore_set = set(self.profile.ignore_dirs)
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = [name for name in dirnames if name not in ignore_set]
            for name in filenames:
                if name in self.profile.exclude_names:
                    continue
                if not _matches_any_glob(name, self.profile.include_globs):
                    continue
                yield Path(dirpath) / name

    def sorted_files(self) -> list[Path]:
        """
        Return matching files ordered by file name.

        Migration file names carry their revision or timestamp prefix, so the
        name alone decides the fold order regardless of subdirectory.

        Returns
        -------
        list[Path]
            Files sorted by (file name, full path).
        """
        files = sorted(self.iter_files(), key=lambda path: (path.name, path.as_posix()))
        log.debug("Discovered %d migration files under %s", len(files), self.profile.root)
        return files


def _matches_any_glob(name: str, patterns: Iterable[str]) -> bool:
    return any(fnmatch.fnmatch(name, pattern) for pattern in patterns)


def discover_migrations(config: AnalysisConfig) -> list[Path]:
    """
    Enumerate migration files for ``config`` in fold order.

    Returns
    -------
    list[Path]
        Migration files sorted by file name; empty when the directory is missing.
    """
    return SourceScanner(ScanProfile.from_config(config)).sorted_files()
