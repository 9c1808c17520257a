"""Schema-backed attribute inference for record classes."""

from modelintel.properties.annotations import AnnotationsPropertyExtension, PropertyExtension
from modelintel.properties.decision import ColumnTypes, TypeHints, cast_overrides, decide, decide_cast
from modelintel.properties.extension import ModelPropertyExtension, PropertyState
from modelintel.properties.model_property import ModelProperty

__all__ = [
    "AnnotationsPropertyExtension",
    "ColumnTypes",
    "ModelProperty",
    "ModelPropertyExtension",
    "PropertyExtension",
    "PropertyState",
    "TypeHints",
    "cast_overrides",
    "decide",
    "decide_cast",
]
