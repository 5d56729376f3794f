from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Type, TypeVar

import yaml
from pydantic import ValidationError

from .models import AnalysisConfig, StudyConfig, format_validation_error


class ConfigError(ValueError):
    pass


ConfigT = TypeVar("ConfigT", bound=StudyConfig)


def load_analysis_config(path: Path) -> AnalysisConfig:
    """Read and validate an analysis configuration.

    Relative ``excitation.csv_path`` entries are resolved against the
    directory of the configuration file.
    """
    return _load(Path(path), AnalysisConfig)


def load_study_config(path: Path) -> StudyConfig:
    """Like :func:`load_analysis_config`, with the excitation section optional."""
    return _load(Path(path), StudyConfig)


def _load(path: Path, model: Type[ConfigT]) -> ConfigT:
    raw = _load_raw_config(path)
    cfg = validate_config_dict(raw, filename=path.name, model=model)
    if cfg.excitation is not None:
        csv_path = Path(cfg.excitation.csv_path)
        if not csv_path.is_absolute():
            excitation = cfg.excitation.model_copy(update={"csv_path": str(path.parent / csv_path)})
            cfg = cfg.model_copy(update={"excitation": excitation})
    return cfg


def _load_raw_config(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in {".yaml", ".yml"}:
        data = yaml.safe_load(text)
    elif path.suffix.lower() == ".json":
        data = yaml.safe_load(text)
    else:
        raise ConfigError(f"Unsupported config extension '{path.suffix}'.")
    if not isinstance(data, dict):
        raise ConfigError(f"{path.name}: configuration must be a mapping")
    return data


def normalize_config_dict(config: Dict[str, Any]) -> Dict[str, Any]:
    """Accept a bare algorithm name (``algorithm: WBZ``) or vector as shorthand."""
    data = deepcopy(config)
    algorithm = data.get("algorithm")
    if isinstance(algorithm, str):
        data["algorithm"] = {"name": algorithm}
    elif isinstance(algorithm, list):
        data["algorithm"] = {"coefficients": algorithm}
    return data


def validate_config_dict(
    config: Dict[str, Any],
    *,
    filename: str,
    model: Type[ConfigT] = AnalysisConfig,  # type: ignore[assignment]
) -> ConfigT:
    raw = normalize_config_dict(config)
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(format_validation_error(exc, filename=filename)) from exc
