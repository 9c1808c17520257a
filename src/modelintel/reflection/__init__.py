"""Reflection views over classes and methods used by the resolvers."""

from modelintel.reflection.broker import (
    ClassDescriptor,
    ClassNotFoundError,
    ReflectionBroker,
    RuntimeBroker,
    RuntimeClass,
    import_class,
    qualified_name,
)
from modelintel.reflection.metadata import RecordMetadata, default_table_name
from modelintel.reflection.methods import (
    MacroMethod,
    MethodDescriptor,
    NativeMethod,
    ParameterInfo,
    StaticForwardingMethod,
)

__all__ = [
    "ClassDescriptor",
    "ClassNotFoundError",
    "MacroMethod",
    "MethodDescriptor",
    "NativeMethod",
    "ParameterInfo",
    "RecordMetadata",
    "ReflectionBroker",
    "RuntimeBroker",
    "RuntimeClass",
    "StaticForwardingMethod",
    "default_table_name",
    "import_class",
    "qualified_name",
]
