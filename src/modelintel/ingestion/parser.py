"""LibCST-backed source parser with a per-file cache."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

import libcst as cst

log = logging.getLogger(__name__)


class SourceParser(Protocol):
    """Parser contract: turn a source file into its top-level statements."""

    def parse_file(self, path: Path) -> Sequence[cst.BaseStatement]:
        """Return the module-level statements of ``path``."""
        ...


class CachedParser:
    """
    Parse Python files with LibCST, caching modules by path and mtime.

    Read and syntax errors propagate; callers decide whether a broken
    migration aborts the analysis.
    """

    def __init__(self) -> None:
        self._cache: dict[Path, tuple[int, cst.Module]] = {}

    def parse_module(self, path: Path) -> cst.Module:
        """
        Parse ``path`` into a LibCST module, reusing a cached tree when unchanged.

        Returns
        -------
        cst.Module
            Parsed module.
        """
        resolved = path.resolve()
        mtime = resolved.stat().st_mtime_ns
        cached = self._cache.get(resolved)
        if cached is not None and cached[0] == mtime:
            return cached[1]
        source = resolved.read_text(encoding="utf-8")
        module = cst.parse_module(source)
        self._cache[resolved] = (mtime, module)
        log.debug("Parsed %s (%d statements)", resolved, len(module.body))
        return module

    def parse_file(self, path: Path) -> Sequence[cst.BaseStatement]:
        """
        Return the top-level statements of ``path``.

        Returns
        -------
        Sequence[cst.BaseStatement]
            Module body statements in source order.
        """
        return self.parse_module(path).body
