"""Static inference of schema-backed record attributes and dynamically forwarded methods."""

from modelintel.config import AnalysisConfig, load_config
from modelintel.methods import ForwardedMethodsExtension
from modelintel.properties import AnnotationsPropertyExtension, ModelPropertyExtension
from modelintel.reflection import RuntimeBroker
from modelintel.schema import SchemaRegistry

__all__ = [
    "AnalysisConfig",
    "AnnotationsPropertyExtension",
    "ForwardedMethodsExtension",
    "ModelPropertyExtension",
    "RuntimeBroker",
    "SchemaRegistry",
    "load_config",
]

__version__ = "0.1.0"
