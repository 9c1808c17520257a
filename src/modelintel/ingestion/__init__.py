"""Discovery and parsing of migration sources."""

from modelintel.ingestion.parser import CachedParser, SourceParser
from modelintel.ingestion.source_scanner import ScanProfile, SourceScanner, discover_migrations

__all__ = [
    "CachedParser",
    "ScanProfile",
    "SourceParser",
    "SourceScanner",
    "discover_migrations",
]
