"""Method descriptors returned by the reflection broker and the forwarding pipeline."""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ParameterInfo:
    """One parameter of a method signature."""

    name: str
    annotation: str = "Any"
    optional: bool = False
    variadic: bool = False


def _format_annotation(annotation: Any) -> str:
    if annotation is inspect.Parameter.empty:
        return "Any"
    if isinstance(annotation, str):
        return annotation
    return inspect.formatannotation(annotation)


def describe_signature(func: Callable[..., Any], *, bound: bool) -> tuple[tuple[ParameterInfo, ...], str]:
    """
    Describe the parameters and return annotation of ``func``.

    Parameters
    ----------
    func
        Plain function (unwrapped from ``staticmethod``/``classmethod``).
    bound
        Drop the leading ``self``/``cls`` parameter.

    Returns
    -------
    tuple[tuple[ParameterInfo, ...], str]
        Parameters and the textual return annotation (``"Any"`` when absent).
    """
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return (), "Any"
    params = list(signature.parameters.values())
    if bound and params:
        params = params[1:]
    described = tuple(
        ParameterInfo(
            name=param.name,
            annotation=_format_annotation(param.annotation),
            optional=param.default is not inspect.Parameter.empty
            or param.kind in {param.VAR_POSITIONAL, param.VAR_KEYWORD},
            variadic=param.kind in {param.VAR_POSITIONAL, param.VAR_KEYWORD},
        )
        for param in params
    )
    return described, _format_annotation(signature.return_annotation)


class MethodDescriptor(ABC):
    """
    Common surface of method descriptors.

    Python visibility follows naming: ``_name`` is non-public, ``__name`` is
    private; dunder methods are public.
    """

    name: str
    declaring_class: str

    @property
    @abstractmethod
    def is_static(self) -> bool:
        """Return True when the method may be called on the class itself."""

    @property
    @abstractmethod
    def parameters(self) -> tuple[ParameterInfo, ...]:
        """Parameters excluding ``self``/``cls``."""

    @property
    @abstractmethod
    def return_type(self) -> str:
        """Textual return annotation."""

    @property
    def is_public(self) -> bool:
        """Return True for names without a leading underscore and for dunders."""
        return not self.name.startswith("_") or _is_dunder(self.name)

    @property
    def is_private(self) -> bool:
        """Return True for name-mangled (``__name``) methods."""
        return self.name.startswith("__") and not _is_dunder(self.name)

    @property
    def is_variadic(self) -> bool:
        """Return True when the signature accepts ``*args`` or ``**kwargs``."""
        return any(param.variadic for param in self.parameters)


def _is_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__") and len(name) > 4


@dataclass(frozen=True)
class NativeMethod(MethodDescriptor):
    """Method defined in a class body."""

    name: str
    declaring_class: str
    static: bool
    signature: tuple[ParameterInfo, ...] = ()
    returns: str = "Any"

    @classmethod
    def from_member(cls, declaring_class: str, name: str, member: object) -> NativeMethod:
        """
        Describe a raw class-dict member (function, staticmethod or classmethod).

        Returns
        -------
        NativeMethod
            Descriptor for the member.
        """
        if isinstance(member, staticmethod):
            params, returns = describe_signature(member.__func__, bound=False)
            return cls(name, declaring_class, True, params, returns)
        if isinstance(member, classmethod):
            params, returns = describe_signature(member.__func__, bound=True)
            return cls(name, declaring_class, True, params, returns)
        if callable(member):
            params, returns = describe_signature(member, bound=True)
            return cls(name, declaring_class, False, params, returns)
        message = f"{declaring_class}.{name} is not a method"
        raise TypeError(message)

    @property
    def is_static(self) -> bool:
        return self.static

    @property
    def parameters(self) -> tuple[ParameterInfo, ...]:
        return self.signature

    @property
    def return_type(self) -> str:
        return self.returns


@dataclass(frozen=True)
class StaticForwardingMethod(MethodDescriptor):
    """Wraps a method reached through call forwarding so it reports static callability."""

    inner: MethodDescriptor

    @property
    def name(self) -> str:  # type: ignore[override]
        return self.inner.name

    @property
    def declaring_class(self) -> str:  # type: ignore[override]
        return self.inner.declaring_class

    @property
    def is_static(self) -> bool:
        return True

    @property
    def parameters(self) -> tuple[ParameterInfo, ...]:
        return self.inner.parameters

    @property
    def return_type(self) -> str:
        return self.inner.return_type

    @property
    def is_public(self) -> bool:
        return self.inner.is_public

    @property
    def is_private(self) -> bool:
        return self.inner.is_private


@dataclass(frozen=True)
class MacroMethod(MethodDescriptor):
    """Method registered at runtime through a class's ``__macros__`` mapping."""

    name: str
    declaring_class: str
    static: bool
    signature: tuple[ParameterInfo, ...] = ()
    returns: str = "Any"

    @classmethod
    def from_callable(
        cls,
        declaring_class: str,
        name: str,
        macro: Callable[..., Any],
        *,
        static: bool,
    ) -> MacroMethod:
        """
        Describe a macro callable; its parameters are taken as written.

        Returns
        -------
        MacroMethod
            Synthetic descriptor for the macro.
        """
        params, returns = describe_signature(macro, bound=False)
        return cls(name, declaring_class, static, params, returns)

    @property
    def is_static(self) -> bool:
        return self.static

    @property
    def parameters(self) -> tuple[ParameterInfo, ...]:
        return self.signature

    @property
    def return_type(self) -> str:
        return self.returns
