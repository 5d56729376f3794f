from __future__ import annotations

from pathlib import Path
import json
import sys

sys.path.insert(0, "src")

import pytest
import yaml

from gssss_sdof.config import (
    AnalysisConfig,
    ConfigError,
    load_analysis_config,
    load_study_config,
    normalize_config_dict,
    validate_config_dict,
)


def _base_cfg() -> dict:
    return {
        "system": {"k": 1000.0, "m": 1.0, "ksi": 0.05},
        "algorithm": {"name": "U0-V1-Opt", "rinf": 0.8},
        "initial": {"u0": 0.0, "ut0": 0.1},
        "excitation": {"csv_path": "record.csv", "time_column": "Time_s", "acceleration_column": "Acc", "scale": 9.81},
    }


def test_load_yaml_resolves_record_path(tmp_path: Path) -> None:
    cfg_path = tmp_path / "case.yml"
    cfg_path.write_text(yaml.safe_dump(_base_cfg()), encoding="utf-8")

    cfg = load_analysis_config(cfg_path)
    assert isinstance(cfg, AnalysisConfig)
    assert cfg.system.k == 1000.0
    assert cfg.algorithm.spec == "U0-V1-Opt"
    assert cfg.algorithm.rinf == 0.8
    assert cfg.initial.ut0 == 0.1
    assert Path(cfg.excitation.csv_path) == tmp_path / "record.csv"
    assert cfg.excitation.scale == 9.81


def test_load_json(tmp_path: Path) -> None:
    cfg_path = tmp_path / "case.json"
    cfg_path.write_text(json.dumps(_base_cfg()), encoding="utf-8")
    assert load_analysis_config(cfg_path).system.ksi == 0.05


def test_defaults_and_shorthand() -> None:
    raw = {
        "system": {"k": 10.0, "m": 2.0},
        "algorithm": "WBZ",
        "excitation": {"csv_path": "/data/rec.csv", "dt": 0.01},
    }
    cfg = validate_config_dict(raw, filename="short.yml")
    assert cfg.system.ksi == 0.0
    assert cfg.algorithm.name == "WBZ"
    assert cfg.algorithm.rinf == 1.0
    assert cfg.initial.u0 == 0.0 and cfg.initial.ut0 == 0.0

    coeffs = [0.0] * 14
    assert normalize_config_dict({"algorithm": coeffs})["algorithm"] == {"coefficients": coeffs}


def test_coefficient_vector_is_validated() -> None:
    raw = _base_cfg()
    raw["algorithm"] = {"coefficients": [1.0] * 13}
    with pytest.raises(ConfigError) as info:
        validate_config_dict(raw, filename="bad.yml")
    assert "bad.yml: invalid configuration" in str(info.value)
    assert "algorithm.coefficients" in str(info.value)


def test_name_and_coefficients_are_exclusive() -> None:
    raw = _base_cfg()
    raw["algorithm"] = {"name": "WBZ", "coefficients": [1.0] * 14}
    with pytest.raises(ConfigError) as info:
        validate_config_dict(raw, filename="bad.yml")
    assert "exactly one" in str(info.value)


def test_invalid_system_is_reported_with_location() -> None:
    raw = _base_cfg()
    del raw["system"]["k"]
    raw["system"]["m"] = -1.0
    with pytest.raises(ConfigError) as info:
        validate_config_dict(raw, filename="bad.yml")
    msg = str(info.value)
    assert "system.k" in msg
    assert "system.m" in msg


def test_unknown_keys_are_rejected() -> None:
    raw = _base_cfg()
    raw["system"]["zeta"] = 0.02
    with pytest.raises(ConfigError) as info:
        validate_config_dict(raw, filename="bad.yml")
    assert "system.zeta" in str(info.value)


def test_excitation_needs_time_base() -> None:
    raw = _base_cfg()
    raw["excitation"] = {"csv_path": "record.csv"}
    with pytest.raises(ConfigError):
        validate_config_dict(raw, filename="bad.yml")


def test_study_config_without_excitation(tmp_path: Path) -> None:
    raw = _base_cfg()
    del raw["excitation"]
    cfg_path = tmp_path / "study.yaml"
    cfg_path.write_text(yaml.safe_dump(raw), encoding="utf-8")

    cfg = load_study_config(cfg_path)
    assert cfg.excitation is None
    with pytest.raises(ConfigError):
        load_analysis_config(cfg_path)


def test_missing_file_and_bad_extension(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_analysis_config(tmp_path / "missing.yml")
    bad = tmp_path / "case.toml"
    bad.write_text("x = 1", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_analysis_config(bad)
    not_mapping = tmp_path / "list.yml"
    not_mapping.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_analysis_config(not_mapping)
