"""Configuration loading and validation utilities."""

from .loader import (
    ConfigError,
    load_analysis_config,
    load_study_config,
    normalize_config_dict,
    validate_config_dict,
)
from .models import AnalysisConfig, StudyConfig

__all__ = [
    "AnalysisConfig",
    "ConfigError",
    "StudyConfig",
    "load_analysis_config",
    "load_study_config",
    "normalize_config_dict",
    "validate_config_dict",
]
