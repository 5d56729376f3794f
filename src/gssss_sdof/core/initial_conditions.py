"""Consistent initial conditions for the displacement filter.

The filter output must match the state recursion started from the true
initial state X_init = [u0, dt*v0, dt^2*a0]. Its homogeneous part is

    y_n = e1' A^(n+1) X_init,    n = 0, 1, 2, ...

and by Cayley-Hamilton it obeys the denominator recursion from n = 3 on, so
the first three outputs fix the 3-tap delay state. Only forward products
with A are needed; the seed stays defined when A is singular, which is the
case for every Newmark-type a-form scheme (the acceleration component is
tied to u and v by equilibrium).

:func:`past_displacements` gives the equivalent backward construction
(fictitious displacements before the start, A X_-1 = X_init,
A X_-2 = X_-1). It needs an invertible A.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
import scipy.linalg
from scipy.signal import lfilter

from .amplification import AmplificationMatrix
from .exceptions import SingularAmplificationMatrixError
from .system import SystemParameters

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InitialState:
    """Initial state and the filter seed derived from it.

    Attributes:
        state: [u0, dt*v0, dt^2*a0]
        free_response: first three outputs of the homogeneous recursion
        zi: delay values of the transposed direct form (3 taps)
    """

    state: np.ndarray
    free_response: np.ndarray
    zi: np.ndarray

    @property
    def acceleration(self) -> float:
        return float(self.state[2])


def initial_acceleration(system: SystemParameters, u0: float, ut0: float, f0: float) -> float:
    """Acceleration implied by the equation of motion a = f - omega^2 u - c v."""
    return f0 - (system.omega**2 * u0 + system.c * ut0)


def filter_state_from_outputs(a: np.ndarray, outputs: np.ndarray) -> np.ndarray:
    """Delay values making a zero-input filter emit ``outputs`` (oldest first).

    zi = [y0, y1 + a1 y0, y2 + a1 y1 + a2 y0]
    """
    a = np.asarray(a, dtype=float)
    y = np.asarray(outputs, dtype=float)
    return lfilter(a[:3], [1.0], y)


def filter_state_from_history(a: np.ndarray, past_displacements: np.ndarray) -> np.ndarray:
    """Delay values reproducing the outputs ``past_displacements`` (newest first).

    Runs the denominator-only recursion backward over the history, with all
    inputs before the first sample taken as zero.
    """
    a = np.asarray(a, dtype=float)
    ypast = np.asarray(past_displacements, dtype=float)
    return lfilter(-a[:0:-1], [1.0], ypast)[::-1].copy()


def past_displacements(amp: AmplificationMatrix, state: np.ndarray) -> np.ndarray:
    """[u0, u_-1, u_-2] from the homogeneous recursion run backward.

    Raises
    ------
    SingularAmplificationMatrixError
        If the amplification matrix is not invertible.
    """
    cond = float(np.linalg.cond(amp.matrix))
    if not np.isfinite(cond) or cond * np.finfo(float).eps >= 1.0:
        raise SingularAmplificationMatrixError(
            f"Amplification matrix is singular (condition number {cond:.3g}); "
            "the recursion cannot be run backward",
            condition_number=cond,
        )
    lu = scipy.linalg.lu_factor(amp.matrix)
    X_1 = scipy.linalg.lu_solve(lu, state)
    X_2 = scipy.linalg.lu_solve(lu, X_1)
    return np.array([state[0], X_1[0], X_2[0]])


def solve_initial_state(
    amp: AmplificationMatrix,
    system: SystemParameters,
    u0: float,
    ut0: float,
    f0: float,
) -> InitialState:
    """Derive the 3-tap filter seed from the true initial state."""
    dt = system.dt
    a0 = initial_acceleration(system, u0, ut0, f0)
    state = np.array([u0, dt * ut0, dt**2 * a0], dtype=float)

    free = np.empty(3)
    x = state
    for i in range(3):
        x = amp.matrix @ x
        free[i] = x[0]

    zi = filter_state_from_outputs(amp.denominator, free)
    logger.debug("Initial state %s, free response %s, zi %s", state, free, zi)
    return InitialState(state=state, free_response=free, zi=zi)
