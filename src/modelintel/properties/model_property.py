"""Immutable description of a schema-backed record attribute."""

from __future__ import annotations

from dataclasses import dataclass

from modelintel.reflection.broker import ClassDescriptor
from modelintel.types import Type


@dataclass(frozen=True)
class ModelProperty:
    """Public, instance-level, readable and writable attribute of a record class."""

    owner: ClassDescriptor
    readable_type: Type
    writable_type: Type

    @property
    def declaring_class(self) -> ClassDescriptor:
        return self.owner

    @property
    def type(self) -> Type:
        """Type observed when reading the attribute."""
        return self.readable_type

    @property
    def is_static(self) -> bool:
        return False

    @property
    def is_public(self) -> bool:
        return True

    @property
    def is_private(self) -> bool:
        return False

    @property
    def is_readable(self) -> bool:
        return True

    @property
    def is_writable(self) -> bool:
        return True

    @property
    def can_change_type_after_assignment(self) -> bool:
        return True
