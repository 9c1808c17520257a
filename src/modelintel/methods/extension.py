"""Describe methods that record classes, facades and managers acquire dynamically."""

from __future__ import annotations

import logging

from modelintel.config.models import AnalysisConfig
from modelintel.errors import InvalidStateError
from modelintel.methods.passable import Passable
from modelintel.methods.pipeline import Pipeline
from modelintel.methods.pipes import PipeFactory
from modelintel.reflection.broker import ClassDescriptor, ReflectionBroker
from modelintel.reflection.methods import MethodDescriptor

log = logging.getLogger(__name__)


class ForwardedMethodsExtension:
    """
    Answer ``has_method``/``get_method`` through the strategy pipeline.

    Results are memoized per (class, method); a miss is cached too so repeated
    queries for an unknown method stay cheap.
    """

    def __init__(
        self,
        broker: ReflectionBroker,
        config: AnalysisConfig,
        pipeline: Pipeline | None = None,
    ) -> None:
        self._broker = broker
        self._config = config
        self._pipeline = pipeline or Pipeline(PipeFactory(config).build())
        self._cache: dict[tuple[str, str], MethodDescriptor | None] = {}

    @property
    def pipeline(self) -> Pipeline:
        return self._pipeline

    def has_method(self, class_ref: ClassDescriptor, method_name: str) -> bool:
        """
        Return True when some strategy resolves ``method_name`` for ``class_ref``.

        Returns
        -------
        bool
            Whether a method descriptor exists.
        """
        return self._lookup(class_ref, method_name) is not None

    def get_method(self, class_ref: ClassDescriptor, method_name: str) -> MethodDescriptor:
        """
        Return the descriptor resolved for ``method_name``.

        Returns
        -------
        MethodDescriptor
            Native, macro or static-forwarding descriptor.

        Raises
        ------
        InvalidStateError
            If no strategy resolves the method.
        """
        method = self._lookup(class_ref, method_name)
        if method is None:
            raise InvalidStateError.method_not_found(class_ref.name, method_name)
        return method

    def _lookup(self, class_ref: ClassDescriptor, method_name: str) -> MethodDescriptor | None:
        key = (class_ref.name, method_name)
        if key not in self._cache:
            passable = self._dispatch(class_ref, method_name)
            self._cache[key] = passable.get_method() if passable.has_found() else None
        return self._cache[key]

    def _dispatch(self, class_ref: ClassDescriptor, method_name: str) -> Passable:
        passable = Passable(
            self._broker,
            self._pipeline,
            class_ref,
            method_name,
            statics=self._config.statics,
        )
        self._pipeline.send(passable).then(lambda finished: finished)
        log.debug("Method query %r", passable)
        return passable
