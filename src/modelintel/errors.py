"""Shared error taxonomy and Problem Details helpers."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4


def generate_correlation_id() -> str:
    """
    Return a new correlation identifier for tracing errors.

    Returns
    -------
    str
        UUID4 correlation identifier.
    """
    return str(uuid4())


@dataclass(frozen=True)
class ProblemDetail:
    """
    RFC 9457 Problem Details payload.

    Fields mirror the standard shape with optional extras for diagnostics.
    """

    type: str
    title: str
    detail: str
    instance: str = field(default_factory=generate_correlation_id)
    code: str | None = None
    extras: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize to a JSON-friendly dict.

        Returns
        -------
        dict[str, Any]
            Problem detail payload as a plain dictionary.
        """
        payload: dict[str, Any] = {
            "type": self.type,
            "title": self.title,
            "detail": self.detail,
            "instance": self.instance,
        }
        if self.code is not None:
            payload["code"] = self.code
        if self.extras:
            payload["extras"] = self.extras
        return payload


def problem(
    code: str,
    title: str,
    detail: str,
    *,
    instance: str | None = None,
    type_uri: str | None = None,
    extras: dict[str, Any] | None = None,
) -> ProblemDetail:
    """
    Create a ProblemDetail with defaults for type/instance.

    Parameters
    ----------
    code
        Stable problem code (e.g., 'property.not_resolved').
    title
        Human-readable error summary.
    detail
        Detailed description of the error.
    instance
        Correlation/trace identifier; defaults to a UUID4.
    type_uri
        URI identifying the problem type; defaults to a modelintel namespace.
    extras
        Optional structured context for diagnostics.

    Returns
    -------
    ProblemDetail
        Structured problem payload.
    """
    return ProblemDetail(
        type=type_uri or f"https://problems.modelintel.dev/{code}",
        title=title,
        detail=detail,
        instance=instance or generate_correlation_id(),
        code=code,
        extras=extras or {},
    )


def log_problem(logger: logging.Logger | logging.LoggerAdapter, detail: ProblemDetail) -> None:
    """Emit a Problem Detail as a structured error log."""
    logger.error(json.dumps(detail.to_dict()))


class ProblemError(Exception):
    """Base exception carrying a ProblemDetail payload."""

    def __init__(self, detail: ProblemDetail) -> None:
        super().__init__(detail.detail)
        self.problem_detail = detail


class InvalidStateError(ProblemError):
    """A method or property was queried before resolution succeeded."""

    @classmethod
    def method_not_found(cls, class_name: str, method_name: str) -> InvalidStateError:
        """
        Build the error raised when no method descriptor has been recorded.

        Returns
        -------
        InvalidStateError
            Error describing the missing method descriptor.
        """
        return cls(
            problem(
                code="method.not_resolved",
                title="Method descriptor does not exist",
                detail=f"No method {method_name!r} was resolved for {class_name}",
                extras={"class": class_name, "method": method_name},
            )
        )

    @classmethod
    def property_not_resolved(cls, class_name: str, property_name: str) -> InvalidStateError:
        """
        Build the error raised when ``get_property`` precedes ``has_property``.

        Returns
        -------
        InvalidStateError
            Error describing the unresolved property.
        """
        return cls(
            problem(
                code="property.not_resolved",
                title="Property was not resolved",
                detail=(
                    f"Property {property_name!r} of {class_name} was not resolved; "
                    "call has_property first"
                ),
                extras={"class": class_name, "property": property_name},
            )
        )


class UnresolvedTypeError(ProblemError):
    """A textual type expression could not be parsed into a structured type."""

    def __init__(self, detail: ProblemDetail, text: str) -> None:
        super().__init__(detail)
        self.text = text

    @classmethod
    def for_text(cls, text: str, reason: str) -> UnresolvedTypeError:
        """
        Build the error for a rejected type string.

        Returns
        -------
        UnresolvedTypeError
            Error carrying the offending text.
        """
        return cls(
            problem(
                code="type.unresolved",
                title="Type expression could not be resolved",
                detail=f"Cannot resolve type {text!r}: {reason}",
                extras={"text": text},
            ),
            text,
        )
