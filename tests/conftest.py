"""Pytest configuration for the modelintel test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from modelintel.config import AnalysisConfig
from modelintel.methods import ForwardedMethodsExtension
from modelintel.properties import AnnotationsPropertyExtension, ModelPropertyExtension
from modelintel.reflection import RuntimeBroker
from modelintel.schema import SchemaRegistry
from modelintel.type_strings import CstTypeStringResolver
from tests._helpers.migrations import write_migrations


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Project tree with the default ``migrations/versions`` history written.

    Returns
    -------
    Path
        Root of the generated project.
    """
    write_migrations(tmp_path / "migrations" / "versions")
    return tmp_path


@pytest.fixture
def config(project_root: Path) -> AnalysisConfig:
    """Analysis config rooted at the generated project.

    Returns
    -------
    AnalysisConfig
        Default settings with statics pointing at the fixture clock.
    """
    return AnalysisConfig(
        project_root=project_root,
        statics=("tests.fixtures.models.Clock",),
    )


@pytest.fixture
def registry(config: AnalysisConfig) -> SchemaRegistry:
    """Unbuilt registry private to one test.

    Returns
    -------
    SchemaRegistry
        Registry over the generated migrations.
    """
    return SchemaRegistry.from_config(config)


@pytest.fixture
def broker() -> RuntimeBroker:
    """Broker resolving classes by import.

    Returns
    -------
    RuntimeBroker
        Fresh broker.
    """
    return RuntimeBroker()


@pytest.fixture
def properties(
    broker: RuntimeBroker, config: AnalysisConfig, registry: SchemaRegistry
) -> ModelPropertyExtension:
    """Property extension wired to the per-test registry.

    Returns
    -------
    ModelPropertyExtension
        Extension under test.
    """
    return ModelPropertyExtension(
        broker=broker,
        annotation_extension=AnnotationsPropertyExtension(),
        string_resolver=CstTypeStringResolver(),
        config=config,
        registry=registry,
    )


@pytest.fixture
def methods(broker: RuntimeBroker, config: AnalysisConfig) -> ForwardedMethodsExtension:
    """Method extension running the default pipeline.

    Returns
    -------
    ForwardedMethodsExtension
        Extension under test.
    """
    return ForwardedMethodsExtension(broker, config)
