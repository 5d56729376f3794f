"""Ground-acceleration records: CSV reader and uniform-grid helpers.

The response filter assumes a constant time step, so every record passes
through :func:`load_excitation`, which resamples irregular records onto a
uniform grid by linear interpolation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

# Relative tolerance on the sample spacing for a grid to count as uniform
UNIFORM_RTOL = 1e-6


@dataclass(frozen=True)
class ExcitationRecord:
    """Uniformly sampled ground acceleration."""

    values: np.ndarray
    dt: float
    source: str = ""
    resampled: bool = False

    def __post_init__(self) -> None:
        self.values.setflags(write=False)

    @property
    def nstep(self) -> int:
        return int(self.values.size)

    @property
    def time(self) -> np.ndarray:
        return self.dt * np.arange(self.nstep)

    @property
    def duration(self) -> float:
        return self.dt * max(self.nstep - 1, 0)

    def peak(self) -> float:
        return float(np.max(np.abs(self.values))) if self.nstep else 0.0


def is_uniform(time, rtol: float = UNIFORM_RTOL) -> bool:
    """True if ``time`` is strictly increasing with constant spacing."""
    t = np.asarray(time, dtype=float)
    if t.size < 3:
        return t.size < 2 or bool(t[1] > t[0])
    steps = np.diff(t)
    if np.any(steps <= 0.0):
        return False
    mean = float(np.mean(steps))
    return bool(np.max(np.abs(steps - mean)) <= rtol * mean)


def resample_uniform(time, values, dt: float) -> Tuple[np.ndarray, np.ndarray]:
    """Linearly interpolate ``values`` onto t0, t0+dt, ... <= t_end."""
    t = np.asarray(time, dtype=float)
    v = np.asarray(values, dtype=float)
    if t.shape != v.shape or t.ndim != 1:
        raise ValueError("time and values must be 1-D arrays of equal length")
    if dt <= 0.0 or not np.isfinite(dt):
        raise ValueError(f"dt must be > 0, got {dt!r}")
    if t.size < 2:
        raise ValueError("at least two samples are required to resample")
    if np.any(np.diff(t) <= 0.0):
        raise ValueError("time must be strictly increasing")

    n = int(np.floor((t[-1] - t[0]) / dt * (1.0 + 1e-12))) + 1
    t_new = t[0] + dt * np.arange(n)
    return t_new, np.interp(t_new, t, v)


def _pick_acceleration_column(df: pd.DataFrame, time_column: Optional[str]) -> str:
    candidates = [c for c in df.columns if c != time_column]
    if not candidates:
        raise ValueError("CSV record has no acceleration column")
    return candidates[0]


def load_excitation(
    csv_path: Path,
    *,
    time_column: Optional[str] = None,
    acceleration_column: Optional[str] = None,
    scale: float = 1.0,
    dt: Optional[float] = None,
) -> ExcitationRecord:
    """Read a ground-acceleration record from CSV.

    Parameters
    ----------
    csv_path : Path
        CSV file with a header row.
    time_column : str, optional
        Column holding the sample times. Without it, ``dt`` is required and
        the samples are taken as uniform.
    acceleration_column : str, optional
        Column holding the acceleration; defaults to the first non-time column.
    scale : float
        Factor applied to the acceleration (e.g. 9.81 for records in g).
    dt : float, optional
        Target time step. With a time column, the record is resampled when
        its spacing is irregular or differs from ``dt``.
    """
    csv_path = Path(csv_path)
    if not csv_path.is_file():
        raise FileNotFoundError(f"Excitation record not found: {csv_path}")

    df = pd.read_csv(csv_path)
    if time_column is not None and time_column not in df.columns:
        raise ValueError(f"CSV {csv_path} has no time column '{time_column}'")
    col = acceleration_column or _pick_acceleration_column(df, time_column)
    if col not in df.columns:
        raise ValueError(f"CSV {csv_path} has no acceleration column '{col}'")

    acc = df[col].to_numpy(dtype=float) * float(scale)
    if acc.size == 0:
        raise ValueError(f"CSV {csv_path} contains no samples")
    if not np.all(np.isfinite(acc)):
        raise ValueError(f"CSV {csv_path} column '{col}' contains non-finite values")

    if time_column is None:
        if dt is None:
            raise ValueError("dt is required when the record has no time column")
        return ExcitationRecord(values=acc, dt=float(dt), source=str(csv_path))

    t = df[time_column].to_numpy(dtype=float)
    uniform = is_uniform(t)
    spacing = float(np.mean(np.diff(t))) if t.size > 1 else float(dt or 0.0)
    target = float(dt) if dt is not None else spacing
    if target <= 0.0:
        raise ValueError(f"Cannot infer a time step from {csv_path}; give dt explicitly")

    if uniform and abs(spacing - target) <= UNIFORM_RTOL * target:
        return ExcitationRecord(values=acc, dt=spacing, source=str(csv_path))

    if not uniform:
        logger.warning(
            "Record %s is not uniformly sampled; resampling to dt=%g s", csv_path.name, target
        )
    else:
        logger.info("Resampling record %s from dt=%g s to dt=%g s", csv_path.name, spacing, target)
    _, values = resample_uniform(t, acc, target)
    return ExcitationRecord(values=values, dt=target, source=str(csv_path), resampled=True)


def load_configured_excitation(excitation) -> ExcitationRecord:
    """Load the record described by an ``ExcitationConfig`` section."""
    return load_excitation(
        Path(excitation.csv_path),
        time_column=excitation.time_column,
        acceleration_column=excitation.acceleration_column,
        scale=excitation.scale,
        dt=excitation.dt,
    )
