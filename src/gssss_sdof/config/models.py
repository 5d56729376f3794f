from __future__ import annotations

import math
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from ..core.algorithms import N_COEFFICIENTS


class ConfigBase(BaseModel):
    model_config = {"extra": "forbid"}


class SystemConfig(ConfigBase):
    k: float
    m: float
    ksi: float = 0.0

    @field_validator("k", "m")
    @classmethod
    def _positive(cls, value: float) -> float:
        if not math.isfinite(value) or value <= 0.0:
            raise ValueError("must be a finite value > 0")
        return value

    @field_validator("ksi")
    @classmethod
    def _ksi_nonneg(cls, value: float) -> float:
        if not math.isfinite(value) or value < 0.0:
            raise ValueError("ksi must be >= 0")
        return value


class AlgorithmConfig(ConfigBase):
    name: Optional[str] = None
    coefficients: Optional[List[float]] = None
    rinf: float = 1.0

    @field_validator("coefficients")
    @classmethod
    def _coefficient_count(cls, value: Optional[List[float]]) -> Optional[List[float]]:
        if value is None:
            return value
        if len(value) != N_COEFFICIENTS:
            raise ValueError(
                f"coefficients must contain {N_COEFFICIENTS} values "
                "[w1, w2, w3, W1L1, W2L2, W3L3, W1L4, W2L5, W1L6, l1, l2, l3, l4, l5]"
            )
        if not all(math.isfinite(v) for v in value):
            raise ValueError("coefficients must be finite")
        return value

    @field_validator("rinf")
    @classmethod
    def _rinf_finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("rinf must be finite")
        return value

    @model_validator(mode="after")
    def _name_xor_coefficients(self) -> "AlgorithmConfig":
        if (self.name is None) == (self.coefficients is None):
            raise ValueError("specify exactly one of 'name' or 'coefficients'")
        return self

    @property
    def spec(self):
        """Value accepted by :func:`gssss_sdof.core.algorithms.select_algorithm`."""
        return self.name if self.name is not None else list(self.coefficients or [])


class InitialConditionsConfig(ConfigBase):
    u0: float = 0.0
    ut0: float = 0.0


class ExcitationConfig(ConfigBase):
    csv_path: str
    time_column: Optional[str] = None
    acceleration_column: Optional[str] = None
    scale: float = 1.0
    dt: Optional[float] = None

    @field_validator("dt")
    @classmethod
    def _dt_positive(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and (not math.isfinite(value) or value <= 0.0):
            raise ValueError("dt must be > 0")
        return value

    @model_validator(mode="after")
    def _time_base(self) -> "ExcitationConfig":
        if self.time_column is None and self.dt is None:
            raise ValueError("either 'time_column' or 'dt' is required")
        return self


class StudyConfig(ConfigBase):
    system: SystemConfig
    algorithm: AlgorithmConfig = Field(default_factory=lambda: AlgorithmConfig(name="U0-V1-Opt"))
    initial: InitialConditionsConfig = Field(default_factory=InitialConditionsConfig)
    excitation: Optional[ExcitationConfig] = None


class AnalysisConfig(StudyConfig):
    excitation: ExcitationConfig


def format_validation_error(exc: ValidationError, *, filename: str) -> str:
    parts = []
    for error in exc.errors():
        loc = ".".join(str(item) for item in error.get("loc", []))
        msg = error.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}")
    details = "; ".join(parts) if parts else str(exc)
    return f"{filename}: invalid configuration: {details}"
