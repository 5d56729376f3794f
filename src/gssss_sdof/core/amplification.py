"""Amplification matrix of a GSSSS scheme applied to a linear SDOF system.

The state advanced by one step is

    X_n = [u_n, dt * v_n, dt^2 * a_n]

and the homogeneous recursion is X_{n+1} = A X_n (eq. 61 in Zhou & Tamma,
2004). The characteristic polynomial of A is the denominator of the
equivalent digital filter, so the filter poles are the eigenvalues of A.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

from .algorithms import AlgorithmCoefficients
from .exceptions import DegenerateAmplificationError
from .system import SystemParameters

logger = logging.getLogger(__name__)

ZERO_TOL = 1e-12


@dataclass(frozen=True)
class AmplificationMatrix:
    """3x3 state-transition matrix with its scalar denominator ``D``."""

    matrix: np.ndarray
    D: float
    omega: float
    Omega: float

    def __post_init__(self) -> None:
        self.matrix.setflags(write=False)

    def entry(self, i: int, j: int) -> float:
        """1-based entry A_ij, matching the notation of the formulas."""
        return float(self.matrix[i - 1, j - 1])

    @property
    def A1(self) -> float:
        """Trace."""
        return float(np.trace(self.matrix))

    @property
    def A2(self) -> float:
        """Sum of the principal 2x2 minors."""
        A = self.matrix
        return float(
            A[0, 0] * A[1, 1] - A[0, 1] * A[1, 0]
            + A[0, 0] * A[2, 2] - A[0, 2] * A[2, 0]
            + A[1, 1] * A[2, 2] - A[1, 2] * A[2, 1]
        )

    @property
    def A3(self) -> float:
        """Determinant, expanded explicitly."""
        A = self.matrix
        return float(
            A[0, 0] * A[1, 1] * A[2, 2]
            - A[0, 0] * A[1, 2] * A[2, 1]
            - A[0, 1] * A[1, 0] * A[2, 2]
            + A[0, 1] * A[1, 2] * A[2, 0]
            + A[0, 2] * A[1, 0] * A[2, 1]
            - A[0, 2] * A[1, 1] * A[2, 0]
        )

    @property
    def denominator(self) -> np.ndarray:
        """Characteristic polynomial [1, -A1, A2, -A3]."""
        return np.array([1.0, -self.A1, self.A2, -self.A3])

    def eigenvalues(self) -> np.ndarray:
        return np.linalg.eigvals(self.matrix)

    def spectral_radius(self) -> float:
        return float(np.max(np.abs(self.eigenvalues())))


def build_amplification_matrix(
    system: SystemParameters, coeffs: AlgorithmCoefficients
) -> AmplificationMatrix:
    """Assemble the amplification matrix for ``system`` and ``coeffs``.

    Raises
    ------
    DegenerateAmplificationError
        If D = W1L6 + 2*W2L5*ksi*Omega + W3L3*Omega^2 vanishes.
    """
    omega = system.omega
    Omega = system.Omega
    ksi = system.ksi

    D = coeffs.W1L6 + 2.0 * coeffs.W2L5 * ksi * Omega + coeffs.W3L3 * Omega**2
    if not math.isfinite(D) or abs(D) <= ZERO_TOL:
        raise DegenerateAmplificationError(
            f"Amplification denominator D={D!r} is zero for Omega={Omega:g}, ksi={ksi:g}; "
            "the scheme is inadmissible for this step size and damping",
            D=D,
            Omega=Omega,
        )

    A31 = -Omega**2 / D
    A32 = -(2.0 * ksi * Omega + coeffs.W1L1 * Omega**2) / D
    A33 = 1.0 - (1.0 + 2.0 * coeffs.W1L4 * ksi * Omega + coeffs.W2L2 * Omega**2) / D
    A11 = 1.0 + coeffs.l3 * A31
    A12 = coeffs.l1 + coeffs.l3 * A32
    A13 = coeffs.l2 - coeffs.l3 * (1.0 - A33)
    A21 = coeffs.l5 * A31
    A22 = 1.0 + coeffs.l5 * A32
    A23 = coeffs.l4 - coeffs.l5 * (1.0 - A33)

    matrix = np.array(
        [
            [A11, A12, A13],
            [A21, A22, A23],
            [A31, A32, A33],
        ],
        dtype=float,
    )
    amp = AmplificationMatrix(matrix=matrix, D=D, omega=omega, Omega=Omega)
    logger.debug(
        "Amplification matrix: D=%.6g, invariants A1=%.6g A2=%.6g A3=%.6g",
        D,
        amp.A1,
        amp.A2,
        amp.A3,
    )
    return amp
