"""Displacement history by recursive filtering or explicit state recursion.

Both realizations are algebraically identical for a uniform time step:

- :func:`filter_displacement` evaluates the rational transfer function in a
  single vectorized pass (``scipy.signal.lfilter``).
- :func:`integrate_state_recursion` advances the 3-component state one step
  at a time with the amplification matrix.
"""

from __future__ import annotations

import logging

import numpy as np
from scipy.signal import lfilter

from .transfer import FilterPolynomials

logger = logging.getLogger(__name__)


def filter_displacement(polys: FilterPolynomials, force: np.ndarray, zi: np.ndarray) -> np.ndarray:
    """Evaluate

        u[n] = b0 f[n] + b1 f[n-1] + b2 f[n-2] + b3 f[n-3]
               - a1 u[n-1] - a2 u[n-2] - a3 u[n-3]

    for n = 0..nstep-1, with the outputs before the first sample supplied by
    ``zi`` and the inputs before it taken as zero.

    Args:
        polys: numerator/denominator taps
        force: (nstep,) equivalent force per unit mass, f = -ground acceleration
        zi: (3,) delay values from the initial-condition solver

    Returns:
        (nstep,) displacement
    """
    force = np.asarray(force, dtype=float)
    u, _ = lfilter(polys.b, polys.a, force, zi=np.asarray(zi, dtype=float))
    return u


def integrate_state_recursion(
    A: np.ndarray,
    q: np.ndarray,
    W1: float,
    force: np.ndarray,
    state0: np.ndarray,
) -> np.ndarray:
    """Step the forced recursion X_n = A X_{n-1} + q (W1 f_n + (1-W1) f_{n-1}).

    ``state0`` is the state before the first sample, [u0, dt*v0, dt^2*a0];
    the force before the first sample is zero.

    Returns:
        (nstep, 3) states X_0 .. X_{nstep-1}
    """
    force = np.asarray(force, dtype=float)
    n = force.size
    states = np.empty((n, 3))
    x = np.asarray(state0, dtype=float).copy()
    f_prev = 0.0
    for i in range(n):
        x = A @ x + q * (W1 * force[i] + (1.0 - W1) * f_prev)
        states[i] = x
        f_prev = force[i]
    return states
