"""Linear dynamic response history analysis of an SDOF system.

This module is I/O-agnostic: it wires the GSSSS pipeline

    parameter selection -> amplification matrix -> transfer function
    -> filter initial conditions -> recursive filter -> velocity,
    acceleration and restoring force recovery

into the single entry point :func:`compute_response`. The integration runs
as one pass of a digital filter, which is only valid for a uniform time
step. Records with irregular spacing must be resampled beforehand, e.g. with
:func:`gssss_sdof.records.resample_uniform`.

Use from the CLI, studies or tests as:

    from gssss_sdof.core.engine import compute_response

    res = compute_response(k=1000.0, m=1.0, dt=0.01, excitation=xgtt,
                           ksi=0.05, algorithm="U0-V1-Opt", rinf=0.8)
    df = res.to_dataframe()

Time convention: output sample ``n`` belongs to excitation sample ``n`` at
t = n*dt; the initial conditions (u0, ut0) describe the state one step before
the first sample.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Literal, Tuple

import numpy as np
import pandas as pd

from .algorithms import AlgorithmSelection, AlgorithmSpec, ClampNotice, select_algorithm
from .amplification import AmplificationMatrix, build_amplification_matrix
from .filtering import filter_displacement, integrate_state_recursion
from .initial_conditions import InitialState, solve_initial_state
from .recovery import recover_acceleration, recover_velocity, restoring_force
from .system import SystemParameters
from .transfer import FilterPolynomials, build_transfer_function, load_vector

logger = logging.getLogger(__name__)

Method = Literal["filter", "recursion"]
METHODS: Tuple[str, ...] = ("filter", "recursion")


@dataclass(frozen=True)
class ResponseHistory:
    """Response time histories of one analysis.

    ``excitation_force`` is the applied force per unit mass (minus the ground
    acceleration); ``restoring_force`` is the elastic force k*u. The two are
    never the same array.
    """

    displacement: np.ndarray
    velocity: np.ndarray
    acceleration: np.ndarray
    restoring_force: np.ndarray
    excitation_force: np.ndarray
    system: SystemParameters
    selection: AlgorithmSelection
    amplification: AmplificationMatrix
    polynomials: FilterPolynomials
    initial_state: InitialState
    method: str = "filter"

    def __post_init__(self) -> None:
        for name in (
            "displacement",
            "velocity",
            "acceleration",
            "restoring_force",
            "excitation_force",
        ):
            getattr(self, name).setflags(write=False)

    @property
    def dt(self) -> float:
        return self.system.dt

    @property
    def nstep(self) -> int:
        return int(self.displacement.size)

    @property
    def time(self) -> np.ndarray:
        return self.dt * np.arange(self.nstep)

    @property
    def notices(self) -> Tuple[ClampNotice, ...]:
        return self.selection.notices

    def peaks(self) -> Dict[str, float]:
        """Peak absolute values of the four response histories."""
        if self.nstep == 0:
            return {}
        return {
            "max_abs_displacement": float(np.max(np.abs(self.displacement))),
            "max_abs_velocity": float(np.max(np.abs(self.velocity))),
            "max_abs_acceleration": float(np.max(np.abs(self.acceleration))),
            "max_abs_restoring_force": float(np.max(np.abs(self.restoring_force))),
        }

    def to_dataframe(self) -> pd.DataFrame:
        df = pd.DataFrame(
            {
                "Time_s": self.time,
                "Ground_Acceleration_m_s2": -self.excitation_force,
                "Displacement_m": self.displacement,
                "Velocity_m_s": self.velocity,
                "Acceleration_m_s2": self.acceleration,
                "Restoring_Force_N": self.restoring_force,
            }
        )
        df.attrs["algorithm"] = self.selection.name
        df.attrs["rinf"] = self.selection.rinf
        df.attrs["method"] = self.method
        df.attrs["notices"] = [n.message for n in self.notices]
        return df


def _as_excitation(excitation) -> np.ndarray:
    xgtt = np.asarray(excitation, dtype=float)
    if xgtt.ndim == 2 and 1 in xgtt.shape:
        xgtt = xgtt.ravel()
    if xgtt.ndim != 1:
        raise ValueError(f"Excitation must be a 1-D sequence, got shape {xgtt.shape}")
    if xgtt.size == 0:
        raise ValueError("Excitation record is empty")
    if not np.all(np.isfinite(xgtt)):
        raise ValueError("Excitation record contains non-finite values")
    return xgtt


def compute_response(
    k: float,
    m: float,
    dt: float,
    excitation,
    ksi: float,
    algorithm: AlgorithmSpec,
    u0: float = 0.0,
    ut0: float = 0.0,
    rinf: float = 1.0,
    *,
    method: Method = "filter",
) -> ResponseHistory:
    """Linear dynamic response history of an SDOF system under base excitation.

    Parameters
    ----------
    k, m : float
        Stiffness and mass.
    dt : float
        Uniform time step of the excitation record.
    excitation : array_like
        Ground acceleration samples, shape (nstep,).
    ksi : float
        Ratio of critical damping.
    algorithm : str or sequence of 14 floats
        GSSSS scheme name (e.g. ``"U0-V1-Opt"``, ``"HHT a-method"``,
        ``"Newmark ACA"``) or explicit coefficient vector.
    u0, ut0 : float
        Initial displacement and velocity.
    rinf : float
        Spectral radius at the high frequency limit (clamped per scheme).
    method : {"filter", "recursion"}
        One-pass digital filter (default) or explicit step-by-step recursion.

    Returns
    -------
    ResponseHistory

    Raises
    ------
    UnsupportedAlgorithmError, DegenerateAmplificationError
        Fatal input errors; no partial result is produced. A singular
        amplification matrix is not an error here (Newmark-type schemes
        always have one).
    """
    if method not in METHODS:
        raise ValueError(f"method must be one of {METHODS}, got {method!r}")

    system = SystemParameters(k=float(k), m=float(m), ksi=float(ksi), dt=float(dt))
    xgtt = _as_excitation(excitation)
    force = -xgtt

    selection = select_algorithm(algorithm, rinf)
    coeffs = selection.coefficients
    amp = build_amplification_matrix(system, coeffs)
    polys = build_transfer_function(amp, coeffs, system.dt)
    init = solve_initial_state(amp, system, float(u0), float(ut0), float(force[0]))

    if method == "filter":
        u = filter_displacement(polys, force, init.zi)
    else:
        q = load_vector(amp, coeffs, system.dt)
        u = integrate_state_recursion(amp.matrix, q, coeffs.W1, force, init.state)[:, 0]

    ut = recover_velocity(u, force, system, amp, coeffs, float(u0))
    utt = recover_acceleration(u, ut, system)
    fr = restoring_force(u, system)

    if not np.all(np.isfinite(u)):
        logger.warning(
            "%s produced non-finite displacements (spectral radius %.4g at Omega=%.4g)",
            selection.name,
            amp.spectral_radius() if np.all(np.isfinite(amp.matrix)) else float("nan"),
            amp.Omega,
        )

    logger.debug(
        "Response computed: algorithm=%s rinf=%s nstep=%d Omega=%.4g method=%s",
        selection.name,
        selection.rinf,
        xgtt.size,
        system.Omega,
        method,
    )

    return ResponseHistory(
        displacement=np.asarray(u, dtype=float),
        velocity=np.asarray(ut, dtype=float),
        acceleration=np.asarray(utt, dtype=float),
        restoring_force=np.asarray(fr, dtype=float),
        excitation_force=force,
        system=system,
        selection=selection,
        amplification=amp,
        polynomials=polys,
        initial_state=init,
        method=method,
    )
