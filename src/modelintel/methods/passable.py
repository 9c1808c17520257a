"""Mutable request threaded through the method-resolution pipeline."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from modelintel.errors import InvalidStateError
from modelintel.methods.pipeline import Pipeline
from modelintel.reflection.broker import ClassDescriptor, ClassNotFoundError, ReflectionBroker
from modelintel.reflection.methods import MethodDescriptor, NativeMethod, StaticForwardingMethod

log = logging.getLogger(__name__)


class Passable:
    """
    State of one method query: the class being searched, the method name, the
    method found so far and whether static calls are allowed.

    ``static_allowed`` only ever goes from False to True. One passable serves
    one query; delegation uses transient copies (see :meth:`send_to_pipeline`).
    """

    def __init__(
        self,
        broker: ReflectionBroker,
        pipeline: Pipeline,
        class_ref: ClassDescriptor,
        method_name: str,
        *,
        statics: Sequence[str] = (),
        trail: tuple[str, ...] = (),
    ) -> None:
        self._broker = broker
        self._pipeline = pipeline
        self._class_ref = class_ref
        self._method_name = method_name
        self._statics = tuple(statics)
        self._trail = trail or (class_ref.name,)
        self._method: MethodDescriptor | None = None
        self._static_allowed = False

    def __repr__(self) -> str:
        return (
            f"Passable({self._class_ref.name}.{self._method_name}, "
            f"found={self.has_found()}, static_allowed={self._static_allowed})"
        )

    @property
    def broker(self) -> ReflectionBroker:
        return self._broker

    @property
    def class_ref(self) -> ClassDescriptor:
        return self._class_ref

    @class_ref.setter
    def class_ref(self, class_ref: ClassDescriptor) -> None:
        self._class_ref = class_ref

    @property
    def method_name(self) -> str:
        return self._method_name

    @property
    def static_allowed(self) -> bool:
        return self._static_allowed

    def allow_static(self, allowed: bool) -> None:
        """Raise the static-allowance flag; a False value never lowers it."""
        self._static_allowed = self._static_allowed or allowed

    def has_found(self) -> bool:
        return self._method is not None

    def get_method(self) -> MethodDescriptor:
        """
        Return the resolved method.

        Returns
        -------
        MethodDescriptor
            Method recorded by a pipe.

        Raises
        ------
        InvalidStateError
            If no method has been found yet.
        """
        if self._method is None:
            raise InvalidStateError.method_not_found(self._class_ref.name, self._method_name)
        return self._method

    def set_method(self, method: MethodDescriptor) -> None:
        self._method = method

    def search_on(self, class_name: str) -> bool:
        """
        Look ``method_name`` up natively on ``class_name`` and record it when found.

        Returns
        -------
        bool
            Whether the class defines the method.
        """
        candidate = self._broker.get_class(class_name)
        found = candidate.has_native_method(self._method_name)
        if found:
            self.set_method(candidate.get_native_method(self._method_name))
        return found

    def send_to_pipeline(self, class_name: str, static_allowed: bool = False) -> bool:
        """
        Resolve the method on a delegation target through the whole pipeline.

        Static calls become allowed when requested, or when the target is (or
        extends) one of the configured always-static classes. A transient
        passable bound to the target runs the pipeline; a method it finds is
        merged back together with its static allowance. A native method found
        this way is wrapped so it reports static callability.

        Returns
        -------
        bool
            Whether this passable holds a method afterwards.
        """
        try:
            target = self._broker.get_class(class_name)
        except ClassNotFoundError as exc:
            log.debug("Delegation target unavailable for %s: %s", self._class_ref.name, exc)
            return self.has_found()
        if target.name in self._trail:
            log.debug("Skipping delegation cycle %s -> %s", " -> ".join(self._trail), target.name)
            return self.has_found()

        if not self._static_allowed and not static_allowed:
            static_allowed = self._is_always_static(target)
        self.allow_static(static_allowed)

        original = self._class_ref
        transient = self._spawn(target)
        try:
            self._pipeline.send(transient).then(lambda passable: passable)
            if transient.has_found():
                self.set_method(transient.get_method())
                self.allow_static(transient.static_allowed)
        finally:
            self._class_ref = original

        found = self.has_found()
        if found:
            method = self.get_method()
            if type(method) is NativeMethod:
                self.set_method(StaticForwardingMethod(method))
        return found

    def _spawn(self, target: ClassDescriptor) -> Passable:
        transient = Passable(
            self._broker,
            self._pipeline,
            target,
            self._method_name,
            statics=self._statics,
            trail=(*self._trail, target.name),
        )
        transient.allow_static(self._static_allowed)
        return transient

    def _is_always_static(self, target: ClassDescriptor) -> bool:
        return any(
            static == target.name or target.is_subclass_of(static) for static in self._statics
        )
