"""Configuration management."""

from .manager import (
    ConfigManager,
    ReconciliationConfig,
    AnalysisConfig,
    OutputConfig,
    create_sample_config,
)

__all__ = [
    "ConfigManager",
    "ReconciliationConfig",
    "AnalysisConfig",
    "OutputConfig",
    "create_sample_config",
]
