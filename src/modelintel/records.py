"""
Declarative base classes whose dynamic surface modelintel infers.

Record attributes come from the table a :class:`Model` maps to; unknown class
attributes are forwarded to the model's :class:`Query`; facades forward to a
root class instance and managers to their default driver. The analysers in
:mod:`modelintel.properties` and :mod:`modelintel.methods` describe these
behaviours without running them.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, ClassVar

from modelintel.reflection.broker import import_class
from modelintel.reflection.metadata import RecordMetadata


def _resolve(target: str | type) -> type:
    return target if isinstance(target, type) else import_class(target)


def _macro(cls: type, name: str) -> Callable[..., Any] | None:
    for klass in cls.__mro__:
        macros = vars(klass).get("__macros__")
        if isinstance(macros, Mapping) and name in macros:
            return macros[name]
    return None


class _ForwardingMeta(type):
    """Route unknown class attributes to macros, then to ``cls._forward_target()``."""

    def __getattr__(cls, name: str) -> Any:
        if name.startswith("__"):
            raise AttributeError(name)
        macro = _macro(cls, name)
        if macro is not None:
            return macro
        return getattr(cls._forward_target(), name)

    def _forward_target(cls) -> object:
        message = f"{cls.__name__} does not forward attribute access"
        raise AttributeError(message)


class Query:
    """Chainable query description for one record class."""

    def __init__(self, model: type[Model]) -> None:
        self.model = model
        self.criteria: list[tuple[str, object]] = []
        self.ordering: list[str] = []
        self.limit_value: int | None = None

    def where(self, column: str, value: object) -> Query:
        self.criteria.append((column, value))
        return self

    def order_by(self, column: str) -> Query:
        self.ordering.append(column)
        return self

    def limit(self, count: int) -> Query:
        self.limit_value = count
        return self


class Model(metaclass=_ForwardingMeta):
    """
    Base class of storage-backed records.

    Class attributes read by the analyser: ``__tablename__``, ``__casts__``,
    ``__dates__``, ``__timestamps__``, ``__macros__``, ``__mixins__`` and
    ``__query_class__``.
    """

    __abstract__ = True
    __casts__: ClassVar[Mapping[str, str]] = {}
    __dates__: ClassVar[tuple[str, ...]] = ()
    __timestamps__: ClassVar[bool] = True
    __query_class__: ClassVar[str | type] = Query

    def __init__(self, **attributes: object) -> None:
        self._attributes: dict[str, object] = dict(attributes)

    def __getattr__(self, name: str) -> object:
        try:
            return self.__dict__["_attributes"][name]
        except KeyError:
            raise AttributeError(name) from None

    @classmethod
    def query(cls) -> Query:
        """Start a query for this record class."""
        return _resolve(cls.__query_class__)(cls)

    @classmethod
    def _forward_target(cls) -> object:
        return cls.query()

    @classmethod
    def metadata(cls) -> RecordMetadata:
        """Return the table name, casts and date fields of this class."""
        return RecordMetadata.from_attributes(cls.__name__, lambda attr: getattr(cls, attr, None))


class Facade(metaclass=_ForwardingMeta):
    """Static proxy to a single instance of ``__facade_root__``."""

    __facade_root__: ClassVar[str | type | None] = None
    _roots: ClassVar[dict[type, object]] = {}

    @classmethod
    def _forward_target(cls) -> object:
        if cls not in Facade._roots:
            if cls.__facade_root__ is None:
                message = f"{cls.__name__} does not declare __facade_root__"
                raise AttributeError(message)
            Facade._roots[cls] = _resolve(cls.__facade_root__)()
        return Facade._roots[cls]


class Manager:
    """Forward unknown instance attributes to a lazily created default driver."""

    __default_driver__: ClassVar[str | type | None] = None

    def __init__(self) -> None:
        self._driver: object | None = None

    def driver(self) -> object:
        """Return the default driver instance, creating it on first use."""
        if self._driver is None:
            if self.__default_driver__ is None:
                message = f"{type(self).__name__} does not declare __default_driver__"
                raise AttributeError(message)
            self._driver = _resolve(self.__default_driver__)()
        return self._driver

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self.driver(), name)
