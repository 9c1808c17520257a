"""Explicitly annotated attributes take priority over schema inference."""

from __future__ import annotations

from typing import Protocol

from modelintel.reflection.broker import ClassDescriptor


class PropertyExtension(Protocol):
    """Contract of property extensions consulted before schema lookup."""

    def has_property(self, class_ref: ClassDescriptor, property_name: str) -> bool:
        """Return True when this extension describes ``property_name``."""
        ...


class AnnotationsPropertyExtension:
    """Claims attributes declared with a class-level annotation (``name: str``)."""

    def has_property(self, class_ref: ClassDescriptor, property_name: str) -> bool:
        """
        Return True when ``property_name`` is annotated anywhere in the class hierarchy.

        Returns
        -------
        bool
            Whether an explicit annotation exists.
        """
        return property_name in class_ref.annotations()
