"""
Configuration models consumed by the property and method resolvers.

Settings come from the ``[tool.modelintel]`` table of the analysed project's
``pyproject.toml`` with a small set of environment overrides, and are
normalized once into an immutable :class:`AnalysisConfig`.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

PipeName = Literal[
    "self_class",
    "macros",
    "mixins",
    "facades",
    "managers",
    "forwards_to_query",
]

DEFAULT_PIPES: tuple[PipeName, ...] = (
    "self_class",
    "macros",
    "mixins",
    "facades",
    "managers",
    "forwards_to_query",
)

DEFAULT_IGNORE_DIRS: tuple[str, ...] = (
    ".git",
    ".mypy_cache",
    ".pytest_cache",
    ".venv",
    "__pycache__",
    "venv",
)

TOOL_TABLE = "modelintel"


def _split_env_list(raw: str) -> tuple[str, ...]:
    """Split comma/semicolon separated env values into a tuple of entries."""
    normalized = raw.replace(";", ",")
    return tuple(entry.strip() for entry in normalized.split(",") if entry.strip())


class AnalysisConfig(BaseModel):
    """
    Settings shared by schema loading, property inference and method forwarding.

    Dotted names (``statics``, ``record_base`` and friends) name classes the
    reflection broker can resolve, e.g. ``"app.models.Model"``.
    """

    model_config = ConfigDict(frozen=True)

    project_root: Path = Field(
        default_factory=lambda: Path().resolve(),
        description="Root of the analysed project.",
    )
    migrations_path: Path = Field(
        default=Path("migrations/versions"),
        description="Directory holding migration files (relative to project_root).",
    )
    migration_globs: tuple[str, ...] = Field(
        default=("*.py",),
        description="Filename globs that identify migration files.",
    )
    ignore_dirs: tuple[str, ...] = Field(
        default=DEFAULT_IGNORE_DIRS,
        description="Directory names skipped while discovering migrations.",
    )
    statics: tuple[str, ...] = Field(
        default=(),
        description="Classes whose forwarded methods are always callable statically.",
    )
    record_base: str = Field(
        default="modelintel.records.Model",
        description="Base class of storage-backed record types.",
    )
    facade_base: str = Field(
        default="modelintel.records.Facade",
        description="Base class of facades that forward static calls to a root class.",
    )
    manager_base: str = Field(
        default="modelintel.records.Manager",
        description="Base class of managers that forward calls to a default driver.",
    )
    query_class: str = Field(
        default="modelintel.records.Query",
        description="Class record types forward unknown methods to.",
    )
    date_class: str = Field(
        default="datetime.datetime",
        description="Type used for date columns and date casts.",
    )
    collection_class: str = Field(
        default="list[Any]",
        description="Type used for the 'collection' cast.",
    )
    accessor_template: str = Field(
        default="get_{name}_attribute",
        description="Name template of native accessor methods that shadow columns.",
    )
    pipes: tuple[PipeName, ...] = Field(
        default=DEFAULT_PIPES,
        description="Ordered method-forwarding strategies.",
    )

    @field_validator("project_root", "migrations_path", mode="before")
    @classmethod
    def _expand_user(cls, v: Path | str) -> Path:
        """
        Expand user home markers for path-like inputs.

        Returns
        -------
        Path
            Expanded pathlib object.
        """
        if isinstance(v, Path):
            return v.expanduser()
        return Path(str(v)).expanduser()

    @field_validator("statics", mode="before")
    @classmethod
    def _normalize_statics(cls, v: object) -> tuple[str, ...]:
        """
        Accept a list or a comma separated string of class names.

        Returns
        -------
        tuple[str, ...]
            Class names without surrounding whitespace.
        """
        if isinstance(v, str):
            return _split_env_list(v)
        if isinstance(v, (list, tuple)):
            return tuple(str(item).strip() for item in v if str(item).strip())
        message = f"statics must be a list or a comma separated string, got {type(v).__name__}"
        raise ValueError(message)

    @field_validator("accessor_template")
    @classmethod
    def _validate_template(cls, v: str) -> str:
        """
        Require the ``{name}`` placeholder in the accessor template.

        Returns
        -------
        str
            The validated template.
        """
        if "{name}" not in v:
            message = "accessor_template must contain a '{name}' placeholder"
            raise ValueError(message)
        return v

    @model_validator(mode="after")
    def _resolve_paths(self) -> AnalysisConfig:
        """
        Resolve relative paths against project_root.

        Returns
        -------
        AnalysisConfig
            Instance with an absolute migrations path.
        """
        root = self.project_root.resolve()
        migrations = self.migrations_path
        if not migrations.is_absolute():
            migrations = (root / migrations).resolve()
        object.__setattr__(self, "project_root", root)
        object.__setattr__(self, "migrations_path", migrations)
        return self

    def accessor_name(self, property_name: str) -> str:
        """
        Name of the native accessor method that would shadow ``property_name``.

        Returns
        -------
        str
            Accessor method name.
        """
        return self.accessor_template.format(name=property_name)


def _read_tool_table(pyproject: Path) -> dict[str, Any]:
    if not pyproject.is_file():
        return {}
    with pyproject.open("rb") as handle:
        data = tomllib.load(handle)
    table = data.get("tool", {}).get(TOOL_TABLE, {})
    if not isinstance(table, Mapping):
        message = f"[tool.{TOOL_TABLE}] in {pyproject} must be a table"
        raise TypeError(message)
    return {key.replace("-", "_"): value for key, value in table.items()}


def load_config(
    project_root: Path | str = ".",
    *,
    env: Mapping[str, str] | None = None,
    **overrides: Any,
) -> AnalysisConfig:
    """
    Load the analysis configuration for a project.

    Precedence: explicit ``overrides`` > environment > ``pyproject.toml`` >
    model defaults. ``MODELINTEL_MIGRATIONS_PATH`` and ``MODELINTEL_STATICS``
    (comma or semicolon separated) are honoured.

    Parameters
    ----------
    project_root
        Directory containing the analysed project's ``pyproject.toml``.
    env
        Environment mapping; defaults to ``os.environ``.
    **overrides
        Field values that win over every other source.

    Returns
    -------
    AnalysisConfig
        Validated configuration.
    """
    root = Path(project_root).expanduser().resolve()
    environ = os.environ if env is None else env
    values: dict[str, Any] = _read_tool_table(root / "pyproject.toml")

    raw_migrations = environ.get("MODELINTEL_MIGRATIONS_PATH")
    if raw_migrations:
        values["migrations_path"] = raw_migrations
    raw_statics = environ.get("MODELINTEL_STATICS")
    if raw_statics:
        values["statics"] = _split_env_list(raw_statics)

    values.update(overrides)
    values["project_root"] = root
    return AnalysisConfig.model_validate(values)
