"""Configuration models and loaders for modelintel."""

from modelintel.config.models import (
    DEFAULT_PIPES,
    AnalysisConfig,
    PipeName,
    load_config,
)

__all__ = ["DEFAULT_PIPES", "AnalysisConfig", "PipeName", "load_config"]
