"""Class descriptors and the broker that resolves dotted class names to them."""

from __future__ import annotations

import builtins
import importlib
import inspect
import logging
import typing
from collections.abc import Iterable, Mapping
from typing import Any, Protocol

from modelintel.reflection.metadata import RecordMetadata
from modelintel.reflection.methods import MethodDescriptor, NativeMethod

log = logging.getLogger(__name__)


class ClassNotFoundError(LookupError):
    """Raised when a dotted class name cannot be resolved."""

    def __init__(self, name: str, reason: str = "not importable") -> None:
        super().__init__(f"Class {name!r} cannot be resolved: {reason}")
        self.name = name


class ClassDescriptor(Protocol):
    """Reflection view of one class, as consumed by the resolvers."""

    @property
    def name(self) -> str:
        """Fully qualified dotted name."""
        ...

    def has_native_method(self, name: str) -> bool:
        """Return True when the class (or a base) defines method ``name``."""
        ...

    def get_native_method(self, name: str) -> MethodDescriptor:
        """Describe method ``name``; raise ``LookupError`` when absent."""
        ...

    def is_subclass_of(self, name: str) -> bool:
        """Return True when a proper base class is named ``name``."""
        ...

    def is_abstract(self) -> bool:
        """Return True for abstract classes."""
        ...

    def class_attribute(self, name: str, default: Any = None) -> Any:
        """Return an (inherited) class attribute, or ``default``."""
        ...

    def annotations(self) -> Mapping[str, str]:
        """Instance attribute annotations declared across the class hierarchy."""
        ...

    def record_metadata(self) -> RecordMetadata:
        """Table name, casts and date fields declared on the class."""
        ...

    def instantiate(self) -> object:
        """Create an instance with no arguments."""
        ...


class ReflectionBroker(Protocol):
    """Resolve class names to descriptors."""

    def get_class(self, name: str) -> ClassDescriptor:
        """Return the descriptor for ``name``; raise ``ClassNotFoundError`` otherwise."""
        ...

    def has_class(self, name: str) -> bool:
        """Return True when ``name`` resolves to a class."""
        ...


def qualified_name(cls: type) -> str:
    """
    Dotted ``module.QualName`` of a class; builtins keep their bare name.

    Returns
    -------
    str
        Name under which the broker resolves ``cls``.
    """
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def _is_method_member(member: object) -> bool:
    if isinstance(member, (staticmethod, classmethod)):
        return True
    return inspect.isfunction(member) or (inspect.ismethoddescriptor(member) and callable(member))


def _is_class_var(annotation: object) -> bool:
    if isinstance(annotation, str):
        return annotation.startswith(("ClassVar", "typing.ClassVar"))
    return typing.get_origin(annotation) is typing.ClassVar or annotation is typing.ClassVar


class RuntimeClass:
    """Descriptor backed by a live Python class."""

    def __init__(self, cls: type) -> None:
        self._cls = cls
        self._name = qualified_name(cls)
        self._base_names = frozenset(qualified_name(base) for base in cls.__mro__[1:])

    def __repr__(self) -> str:
        return f"RuntimeClass({self._name})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, RuntimeClass) and other._cls is self._cls

    def __hash__(self) -> int:
        return hash(self._cls)

    @property
    def name(self) -> str:
        return self._name

    def _find_member(self, name: str) -> tuple[type, object] | None:
        for klass in self._cls.__mro__:
            if name in vars(klass):
                return klass, vars(klass)[name]
        return None

    def has_native_method(self, name: str) -> bool:
        found = self._find_member(name)
        return found is not None and _is_method_member(found[1])

    def get_native_method(self, name: str) -> MethodDescriptor:
        found = self._find_member(name)
        if found is None or not _is_method_member(found[1]):
            message = f"{self._name} has no method {name!r}"
            raise LookupError(message)
        owner, member = found
        return NativeMethod.from_member(qualified_name(owner), name, member)

    def is_subclass_of(self, name: str) -> bool:
        return name in self._base_names

    def is_abstract(self) -> bool:
        return inspect.isabstract(self._cls) or bool(vars(self._cls).get("__abstract__", False))

    def class_attribute(self, name: str, default: Any = None) -> Any:
        found = self._find_member(name)
        return default if found is None else found[1]

    def annotations(self) -> Mapping[str, str]:
        merged: dict[str, str] = {}
        for klass in reversed(self._cls.__mro__):
            for key, value in inspect.get_annotations(klass).items():
                if key.startswith("__") or _is_class_var(value):
                    continue
                merged[key] = value if isinstance(value, str) else inspect.formatannotation(value)
        return merged

    def record_metadata(self) -> RecordMetadata:
        return RecordMetadata.from_attributes(
            self._cls.__name__,
            lambda attr: self.class_attribute(attr),
        )

    def instantiate(self) -> object:
        return self._cls()


class RuntimeBroker:
    """
    Broker over importable classes.

    Names resolve first against explicitly registered classes, then by
    importing the longest importable module prefix and walking attributes.
    """

    def __init__(self, classes: Iterable[type] = ()) -> None:
        self._registered: dict[str, type] = {}
        self._descriptors: dict[str, RuntimeClass] = {}
        for cls in classes:
            self.register(cls)

    def register(self, cls: type, *, alias: str | None = None) -> RuntimeClass:
        """
        Make ``cls`` resolvable under its qualified name (and ``alias``).

        Returns
        -------
        RuntimeClass
            Descriptor for the registered class.
        """
        descriptor = RuntimeClass(cls)
        for key in (descriptor.name, alias):
            if key is not None:
                self._registered[key] = cls
                self._descriptors.pop(key, None)
        return descriptor

    def describe(self, cls: type) -> RuntimeClass:
        """
        Return the (cached) descriptor of a live class.

        Returns
        -------
        RuntimeClass
            Descriptor for ``cls``.
        """
        name = qualified_name(cls)
        if self._registered.get(name) is not cls:
            self.register(cls)
        return self.get_class(name)

    def get_class(self, name: str) -> RuntimeClass:
        cached = self._descriptors.get(name)
        if cached is not None:
            return cached
        cls = self._registered.get(name) or import_class(name)
        descriptor = RuntimeClass(cls)
        self._descriptors[name] = descriptor
        return descriptor

    def has_class(self, name: str) -> bool:
        try:
            self.get_class(name)
        except ClassNotFoundError:
            return False
        return True


def import_class(name: str) -> type:
    """
    Import the class called ``name`` (``"pkg.module.Class"`` or a builtin name).

    The longest importable module prefix wins; remaining parts are attributes.

    Returns
    -------
    type
        The resolved class.

    Raises
    ------
    ClassNotFoundError
        If no module prefix imports or the target is not a class.
    """
    parts = name.split(".")
    if len(parts) == 1:
        builtin = getattr(builtins, name, None)
        if isinstance(builtin, type):
            return builtin
        raise ClassNotFoundError(name)
    for split in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:split])
        try:
            target: object = importlib.import_module(module_name)
        except ImportError:
            continue
        try:
            for attr in parts[split:]:
                target = getattr(target, attr)
        except AttributeError as exc:
            raise ClassNotFoundError(name, f"no attribute in {module_name}") from exc
        if not isinstance(target, type):
            raise ClassNotFoundError(name, "not a class")
        log.debug("Resolved %s from module %s", name, module_name)
        return target
    raise ClassNotFoundError(name)
