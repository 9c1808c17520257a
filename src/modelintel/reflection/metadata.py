"""Record metadata read from class attributes without instantiating the class."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Final

TIMESTAMP_COLUMNS: Final[tuple[str, str]] = ("created_at", "updated_at")

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def snake_case(name: str) -> str:
    """
    Convert ``CamelCase`` to ``snake_case``.

    Examples
    --------
    >>> snake_case("BlogPost")
    'blog_post'
    """
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def pluralize(word: str) -> str:
    """
    Pluralize an English noun with the common suffix rules.

    Examples
    --------
    >>> pluralize("category")
    'categories'
    >>> pluralize("box")
    'boxes'
    """
    if word.endswith("y") and len(word) > 1 and word[-2] not in "aeiou":
        return word[:-1] + "ies"
    if word.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    return word + "s"


def default_table_name(class_name: str) -> str:
    """
    Table name used when a record class does not set ``__tablename__``.

    Only the last word is pluralized, so ``BlogPost`` maps to ``blog_posts``.

    Returns
    -------
    str
        Snake-case plural of the class name.
    """
    words = snake_case(class_name).split("_")
    words[-1] = pluralize(words[-1])
    return "_".join(words)


@dataclass(frozen=True)
class RecordMetadata:
    """Table name, casts and date fields declared by a record class."""

    table_name: str
    casts: Mapping[str, str] = field(default_factory=dict)
    date_fields: frozenset[str] = frozenset()

    @classmethod
    def from_attributes(
        cls,
        class_name: str,
        attribute: Callable[[str], object],
    ) -> RecordMetadata:
        """
        Read ``__tablename__``, ``__casts__``, ``__dates__`` and ``__timestamps__``.

        Parameters
        ----------
        class_name
            Unqualified class name, used for the default table name.
        attribute
            Lookup of (possibly inherited) class attributes, returning None when absent.

        Returns
        -------
        RecordMetadata
            Metadata with timestamp columns added to the date fields when enabled.
        """
        table_name = attribute("__tablename__")
        if not isinstance(table_name, str) or not table_name:
            table_name = default_table_name(class_name)

        raw_casts = attribute("__casts__")
        casts: dict[str, str] = {}
        if isinstance(raw_casts, Mapping):
            casts = {str(key): _cast_name(value) for key, value in raw_casts.items()}

        dates: set[str] = set()
        raw_dates = attribute("__dates__")
        if isinstance(raw_dates, Iterable) and not isinstance(raw_dates, str):
            dates.update(str(item) for item in raw_dates)
        if attribute("__timestamps__") is not False:
            dates.update(TIMESTAMP_COLUMNS)

        return cls(table_name=table_name, casts=casts, date_fields=frozenset(dates))


def _cast_name(value: object) -> str:
    if isinstance(value, type):
        if value.__module__ == "builtins":
            return value.__qualname__
        return f"{value.__module__}.{value.__qualname__}"
    return str(value)
