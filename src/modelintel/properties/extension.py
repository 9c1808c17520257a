"""Infer record attribute types from migration history and class casts."""

from __future__ import annotations

import logging
from enum import StrEnum

from modelintel.config.models import AnalysisConfig
from modelintel.errors import InvalidStateError
from modelintel.ingestion.parser import SourceParser
from modelintel.properties.annotations import PropertyExtension
from modelintel.properties.decision import TypeHints, cast_overrides, decide
from modelintel.properties.model_property import ModelProperty
from modelintel.reflection.broker import ClassDescriptor, ReflectionBroker
from modelintel.schema.models import SchemaColumn
from modelintel.schema.registry import SchemaRegistry, shared_registry
from modelintel.type_strings import TypeStringResolver
from modelintel.types import INT

log = logging.getLogger(__name__)

IMPLICIT_KEY = "id"


class PropertyState(StrEnum):
    """Stage a property query stopped at."""

    NOT_APPLICABLE = "not_applicable"
    CHECKING_PRECEDENCE = "checking_precedence"
    SCHEMA_LOOKUP = "schema_lookup"
    RESOLVED = "resolved"
    ABSENT = "absent"


class ModelPropertyExtension:
    """
    Answer ``has_property``/``get_property`` for schema-backed record classes.

    Precedence: explicit annotations and native accessor methods win over the
    schema, so the extension declines those attributes. The schema registry is
    folded on the first applicable query and reused afterwards.

    Decided column types are kept per (class, attribute): two record classes
    mapped to one table may declare different casts.
    """

    def __init__(
        self,
        *,
        broker: ReflectionBroker,
        annotation_extension: PropertyExtension,
        string_resolver: TypeStringResolver,
        config: AnalysisConfig,
        registry: SchemaRegistry | None = None,
        parser: SourceParser | None = None,
    ) -> None:
        self._annotations = annotation_extension
        self._string_resolver = string_resolver
        self._config = config
        self._registry = registry or shared_registry(config, parser)
        self._hints = TypeHints(
            date_class=config.date_class,
            collection_class=config.collection_class,
            known_class=broker.has_class,
        )
        self._resolved: dict[tuple[str, str], SchemaColumn] = {}
        self.last_state = PropertyState.NOT_APPLICABLE

    @property
    def registry(self) -> SchemaRegistry:
        return self._registry

    def has_property(self, class_ref: ClassDescriptor, property_name: str) -> bool:
        """
        Return True when the record's table provides ``property_name``.

        Returns
        -------
        bool
            Whether the attribute is schema-backed for this class.
        """
        self.last_state = PropertyState.CHECKING_PRECEDENCE
        if not self._applies(class_ref, property_name):
            self._forget(class_ref, property_name)
            self.last_state = PropertyState.NOT_APPLICABLE
            return False
        self._registry.ensure_built()

        self.last_state = PropertyState.SCHEMA_LOOKUP
        metadata = class_ref.record_metadata()
        table = self._registry.table(metadata.table_name)
        column = table.columns.get(property_name) if table is not None else None
        if table is None or column is None:
            self._forget(class_ref, property_name)
            if property_name == IMPLICIT_KEY:
                self.last_state = PropertyState.RESOLVED
                return True
            self.last_state = PropertyState.ABSENT
            return False

        cast = cast_overrides(table, metadata.casts).get(property_name)
        types = decide(
            column.stored_type,
            nullable=column.nullable,
            options=column.options,
            cast=cast,
            is_date=property_name in metadata.date_fields,
            hints=self._hints,
        )
        self._resolved[class_ref.name, property_name] = column.with_types(
            types.readable, types.writable
        )
        self.last_state = PropertyState.RESOLVED
        log.debug(
            "Resolved %s.%s from table %s (cast=%s)",
            class_ref.name,
            property_name,
            table.name,
            cast,
        )
        return True

    def get_property(self, class_ref: ClassDescriptor, property_name: str) -> ModelProperty:
        """
        Describe a property previously accepted by :meth:`has_property`.

        Textual types are resolved here and stored back, so later calls
        return the same structured values.

        Returns
        -------
        ModelProperty
            Owner plus readable and writable types.

        Raises
        ------
        InvalidStateError
            If ``has_property`` did not accept the property first.
        UnresolvedTypeError
            If a textual type cannot be parsed.
        """
        entry = self._resolved.get((class_ref.name, property_name))
        if entry is None:
            if property_name == IMPLICIT_KEY and self._schema_column(class_ref, property_name) is None:
                return ModelProperty(class_ref, INT, INT)
            raise InvalidStateError.property_not_resolved(class_ref.name, property_name)
        readable, writable = entry.resolve(self._string_resolver)
        return ModelProperty(class_ref, readable, writable)

    def _forget(self, class_ref: ClassDescriptor, property_name: str) -> None:
        self._resolved.pop((class_ref.name, property_name), None)

    def _schema_column(self, class_ref: ClassDescriptor, property_name: str) -> SchemaColumn | None:
        if not self._registry.is_built:
            return None
        return self._registry.column(class_ref.record_metadata().table_name, property_name)

    def _applies(self, class_ref: ClassDescriptor, property_name: str) -> bool:
        """Record class, concrete, no native accessor, no explicit annotation; in that order."""
        if not class_ref.is_subclass_of(self._config.record_base):
            return False
        if class_ref.is_abstract():
            return False
        if class_ref.has_native_method(self._config.accessor_name(property_name)):
            return False
        return not self._annotations.has_property(class_ref, property_name)
