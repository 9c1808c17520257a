"""Built-in method-resolution strategies."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from modelintel.config.models import AnalysisConfig, PipeName
from modelintel.methods.passable import Passable
from modelintel.methods.pipeline import Next, Pipe
from modelintel.reflection.broker import qualified_name
from modelintel.reflection.methods import MacroMethod

log = logging.getLogger(__name__)


def _class_name(value: object) -> str | None:
    if isinstance(value, type):
        return qualified_name(value)
    if isinstance(value, str) and value:
        return value
    return None


def _class_names(value: object) -> list[str]:
    if isinstance(value, (str, type)):
        value = (value,)
    if not isinstance(value, Iterable):
        return []
    return [name for name in (_class_name(item) for item in value) if name is not None]


@dataclass(frozen=True)
class SelfClassPipe:
    """Methods defined on the class itself."""

    name: str = "self_class"

    def handle(self, passable: Passable, next_: Next) -> Passable:
        if passable.search_on(passable.class_ref.name):
            return passable
        return next_(passable)


@dataclass(frozen=True)
class MacrosPipe:
    """Callables registered in a ``__macros__`` mapping on the class or a base."""

    name: str = "macros"

    def handle(self, passable: Passable, next_: Next) -> Passable:
        macros = passable.class_ref.class_attribute("__macros__")
        if isinstance(macros, Mapping) and passable.method_name in macros:
            macro: Callable[..., Any] = macros[passable.method_name]
            passable.set_method(
                MacroMethod.from_callable(
                    passable.class_ref.name,
                    passable.method_name,
                    macro,
                    static=passable.static_allowed,
                )
            )
            return passable
        return next_(passable)


@dataclass(frozen=True)
class MixinsPipe:
    """Classes listed in ``__mixins__`` lend their methods."""

    name: str = "mixins"

    def handle(self, passable: Passable, next_: Next) -> Passable:
        for mixin in _class_names(passable.class_ref.class_attribute("__mixins__", ())):
            if passable.send_to_pipeline(mixin):
                return passable
        return next_(passable)


@dataclass(frozen=True)
class FacadesPipe:
    """Facades forward static calls to their ``__facade_root__``."""

    facade_base: str
    name: str = "facades"

    def handle(self, passable: Passable, next_: Next) -> Passable:
        class_ref = passable.class_ref
        if class_ref.is_subclass_of(self.facade_base):
            root = _class_name(class_ref.class_attribute("__facade_root__"))
            if root is not None and passable.send_to_pipeline(root, static_allowed=True):
                return passable
        return next_(passable)


@dataclass(frozen=True)
class ManagersPipe:
    """Managers forward calls to their ``__default_driver__``."""

    manager_base: str
    name: str = "managers"

    def handle(self, passable: Passable, next_: Next) -> Passable:
        class_ref = passable.class_ref
        if class_ref.is_subclass_of(self.manager_base):
            driver = _class_name(class_ref.class_attribute("__default_driver__"))
            if driver is not None and passable.send_to_pipeline(driver):
                return passable
        return next_(passable)


@dataclass(frozen=True)
class ForwardsToQueryPipe:
    """Record classes forward unknown class-level calls to their query class."""

    record_base: str
    query_class: str
    name: str = "forwards_to_query"

    def handle(self, passable: Passable, next_: Next) -> Passable:
        class_ref = passable.class_ref
        if class_ref.is_subclass_of(self.record_base):
            query = _class_name(class_ref.class_attribute("__query_class__")) or self.query_class
            if passable.send_to_pipeline(query, static_allowed=True):
                return passable
        return next_(passable)


@dataclass(frozen=True)
class PipeFactory:
    """Builds pipes by configured name."""

    config: AnalysisConfig
    builders: dict[PipeName, Callable[[AnalysisConfig], Pipe]] = field(
        default_factory=lambda: {
            "self_class": lambda _cfg: SelfClassPipe(),
            "macros": lambda _cfg: MacrosPipe(),
            "mixins": lambda _cfg: MixinsPipe(),
            "facades": lambda cfg: FacadesPipe(cfg.facade_base),
            "managers": lambda cfg: ManagersPipe(cfg.manager_base),
            "forwards_to_query": lambda cfg: ForwardsToQueryPipe(cfg.record_base, cfg.query_class),
        }
    )

    def build(self) -> list[Pipe]:
        """
        Instantiate the configured pipes in order.

        Returns
        -------
        list[Pipe]
            Pipes named by ``config.pipes``.
        """
        pipes = [self.builders[name](self.config) for name in self.config.pipes]
        log.debug("Method pipeline: %s", ", ".join(pipe.name for pipe in pipes))
        return pipes
