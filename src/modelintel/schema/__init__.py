"""Schema recovery from migration history."""

from modelintel.schema.aggregator import SchemaAggregator, column_from_call, storage_literal
from modelintel.schema.models import SchemaAnomaly, SchemaColumn, SchemaTable
from modelintel.schema.registry import SchemaRegistry, shared_registry

__all__ = [
    "SchemaAggregator",
    "SchemaAnomaly",
    "SchemaColumn",
    "SchemaRegistry",
    "SchemaTable",
    "column_from_call",
    "shared_registry",
    "storage_literal",
]
