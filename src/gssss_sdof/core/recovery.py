"""Algebraic recovery of velocity, acceleration and restoring force.

Velocity follows from two equations, without differentiating the
displacement history:

1. the first scalar row of the forced recursion,
   u_n = A11 u_{n-1} + A12 dt v_{n-1} + A13 dt^2 a_{n-1} + dt^2/D l3 (W1 f_n + (1-W1) f_{n-1})
2. the equation of motion, a = f - omega^2 u - 2 ksi omega v
   (eq. 6.12.3 in Chopra, Dynamics of Structures).
"""

from __future__ import annotations

import numpy as np

from .algorithms import AlgorithmCoefficients
from .amplification import ZERO_TOL, AmplificationMatrix
from .exceptions import DegenerateAmplificationError
from .system import SystemParameters


def _shifted(values: np.ndarray, first: float) -> np.ndarray:
    out = np.empty_like(values)
    out[0] = first
    out[1:] = values[:-1]
    return out


def recover_velocity(
    u: np.ndarray,
    force: np.ndarray,
    system: SystemParameters,
    amp: AmplificationMatrix,
    coeffs: AlgorithmCoefficients,
    u0: float,
) -> np.ndarray:
    """Velocity history from the displacement and force histories."""
    u = np.asarray(u, dtype=float)
    force = np.asarray(force, dtype=float)
    if u.size == 0:
        return np.empty(0)

    dt = system.dt
    omega = system.omega
    ksi = system.ksi
    A11, A12, A13 = amp.entry(1, 1), amp.entry(1, 2), amp.entry(1, 3)

    C_u = omega**2 * A13 * dt**2 - A11
    C_f = -A13 * dt**2
    C_ut = A12 * dt - A13 * dt**2 * 2.0 * ksi * omega
    if not np.isfinite(C_ut) or abs(C_ut) <= ZERO_TOL * dt:
        raise DegenerateAmplificationError(
            f"Velocity coefficient C_ut={C_ut!r} vanishes; velocity cannot be recovered",
            D=amp.D,
            Omega=amp.Omega,
        )

    u_shifted = _shifted(u, u0)
    f_shifted = _shifted(force, 0.0)
    W1 = coeffs.W1
    L = 1.0 / amp.D * coeffs.l3 * dt**2 * ((1.0 - W1) * f_shifted + W1 * force)
    return (u + C_u * u_shifted + C_f * f_shifted - L) / C_ut


def recover_acceleration(u: np.ndarray, ut: np.ndarray, system: SystemParameters) -> np.ndarray:
    """Absolute acceleration -omega^2 u - 2 ksi omega v."""
    omega = system.omega
    return -(omega**2) * np.asarray(u) - 2.0 * system.ksi * omega * np.asarray(ut)


def restoring_force(u: np.ndarray, system: SystemParameters) -> np.ndarray:
    """Elastic restoring force k u."""
    return system.k * np.asarray(u, dtype=float)
