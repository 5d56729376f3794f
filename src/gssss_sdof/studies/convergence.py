"""
Time-step convergence study against the exact free-vibration solution.
"""
from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

import numpy as np
import pandas as pd
import yaml

from ..core.algorithms import AlgorithmSpec
from ..core.engine import ResponseHistory
from . import save_study_metadata

logger = logging.getLogger(__name__)

ResponseFunc = Callable[..., ResponseHistory]


def exact_free_vibration(t, k: float, m: float, ksi: float, u0: float, ut0: float):
    """Displacement and velocity of an underdamped SDOF in free vibration."""
    if not 0.0 <= ksi < 1.0:
        raise ValueError(f"exact free vibration requires 0 <= ksi < 1, got {ksi}")
    t = np.asarray(t, dtype=float)
    omega = math.sqrt(k / m)
    omega_d = omega * math.sqrt(1.0 - ksi**2)
    B = (ut0 + ksi * omega * u0) / omega_d
    env = np.exp(-ksi * omega * t)
    cos, sin = np.cos(omega_d * t), np.sin(omega_d * t)
    u = env * (u0 * cos + B * sin)
    ut = env * ((-ksi * omega) * (u0 * cos + B * sin) + omega_d * (-u0 * sin + B * cos))
    return u, ut


def _errors(res: ResponseHistory, k: float, m: float, ksi: float, u0: float, ut0: float) -> Dict[str, float]:
    # displacement sample n lies (n+1) steps after the initial state,
    # recovered velocity sample n lies n steps after it
    dt = res.dt
    u_ex, _ = exact_free_vibration(res.time + dt, k, m, ksi, u0, ut0)
    _, ut_ex = exact_free_vibration(res.time, k, m, ksi, u0, ut0)
    u_scale = max(float(np.max(np.abs(u_ex))), 1e-300)
    ut_scale = max(float(np.max(np.abs(ut_ex))), 1e-300)
    return {
        "displacement_error": float(np.max(np.abs(res.displacement - u_ex))) / u_scale,
        "velocity_error": float(np.max(np.abs(res.velocity - ut_ex))) / ut_scale,
    }


def run_convergence_study(
    k: float,
    m: float,
    ksi: float,
    algorithm: AlgorithmSpec,
    dt_values: Iterable[float],
    *,
    rinf: float = 1.0,
    u0: float = 1.0,
    ut0: float = 0.0,
    periods: float = 5.0,
    out_dir: Optional[Path] = None,
    save_timeseries: bool = False,
    response_func: Optional[ResponseFunc] = None,
) -> pd.DataFrame:
    """
    Sweep the time step and report the error against the exact solution.

    The system vibrates freely from (u0, ut0) for ``periods`` natural periods.
    Errors are maxima over the run, relative to the peak exact value; the
    observed order compares consecutive time steps.

    Parameters
    ----------
    k, m, ksi:
        System definition (0 <= ksi < 1).
    algorithm, rinf:
        Integration scheme, as for `compute_response`.
    dt_values:
        Iterable of time steps in seconds.
    out_dir:
        If provided, write summary CSV + metadata.
    save_timeseries:
        If True, also save each run DataFrame as CSV.
    response_func:
        For testing; defaults to `gssss_sdof.core.engine.compute_response`.

    Returns
    -------
    pd.DataFrame with one row per dt, largest dt first.
    """
    import time

    if response_func is None:
        from ..core.engine import compute_response as response_func

    dt_list = sorted({float(dt) for dt in dt_values}, reverse=True)
    if not dt_list:
        raise ValueError("at least one time step is required")
    duration = periods * 2.0 * math.pi / math.sqrt(k / m)

    rows: List[Dict[str, Any]] = []
    prev: Optional[Dict[str, float]] = None
    prev_dt: Optional[float] = None

    for dt in dt_list:
        nstep = max(int(round(duration / dt)), 1)
        excitation = np.zeros(nstep)

        t0 = time.perf_counter()
        res = response_func(k, m, dt, excitation, ksi, algorithm, u0=u0, ut0=ut0, rinf=rinf)
        wall = time.perf_counter() - t0

        errors = _errors(res, k, m, ksi, u0, ut0)
        if prev is None or prev_dt is None:
            order_u = order_ut = None
        else:
            ratio = math.log(prev_dt / dt)
            order_u = _order(prev["displacement_error"], errors["displacement_error"], ratio)
            order_ut = _order(prev["velocity_error"], errors["velocity_error"], ratio)
        prev, prev_dt = errors, dt

        rows.append(
            {
                "dt_s": dt,
                "nstep": nstep,
                "Omega": res.system.Omega,
                "algorithm": res.selection.name,
                "rinf": res.selection.rinf,
                "wall_time_s": float(wall),
                **errors,
                "observed_order_displacement": order_u,
                "observed_order_velocity": order_ut,
            }
        )
        logger.info("dt=%g: displacement error %.3e", dt, errors["displacement_error"])

        if out_dir and save_timeseries:
            out_dir.mkdir(parents=True, exist_ok=True)
            res.to_dataframe().to_csv(out_dir / f"timeseries_dt_{dt:.3e}.csv", index=False)

    summary = pd.DataFrame(rows)

    if out_dir:
        out_dir.mkdir(parents=True, exist_ok=True)
        summary.to_csv(out_dir / "convergence_summary.csv", index=False)
        (out_dir / "study_parameters.yml").write_text(
            yaml.safe_dump(
                {
                    "system": {"k": float(k), "m": float(m), "ksi": float(ksi)},
                    "algorithm": algorithm if isinstance(algorithm, str) else list(map(float, algorithm)),
                    "rinf": float(rinf),
                    "initial": {"u0": float(u0), "ut0": float(ut0)},
                },
                sort_keys=False,
            ),
            encoding="utf-8",
        )
        save_study_metadata(
            out_dir,
            metadata={
                "study_type": "convergence",
                "dt_values": dt_list,
                "periods": float(periods),
                "save_timeseries": bool(save_timeseries),
            },
        )
    return summary


def _order(err_coarse: float, err_fine: float, log_dt_ratio: float) -> Optional[float]:
    if err_coarse <= 0.0 or err_fine <= 0.0 or log_dt_ratio == 0.0:
        return None
    return math.log(err_coarse / err_fine) / log_dt_ratio
