"""Rational transfer function equivalent to the amplification recursion.

With the load vector q = dt^2/D * [l3, l5, 1] the forced recursion reads

    X_n = A X_{n-1} + q * (W1 f_n + (1 - W1) f_{n-1})

and the displacement u_n = X_n[0] is the output of the digital filter b/a,
where a is the characteristic polynomial of A and b follows from the first
row of adj(zI - A) applied to q.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from .algorithms import AlgorithmCoefficients
from .amplification import AmplificationMatrix

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterPolynomials:
    """Numerator ``b`` and monic denominator ``a`` (4 taps each)."""

    b: np.ndarray
    a: np.ndarray

    def __post_init__(self) -> None:
        self.b.setflags(write=False)
        self.a.setflags(write=False)

    def poles(self) -> np.ndarray:
        return np.roots(self.a)


def load_vector(amp: AmplificationMatrix, coeffs: AlgorithmCoefficients, dt: float) -> np.ndarray:
    """q = dt^2/D * [l3, l5, 1]."""
    return dt**2 / amp.D * np.array([coeffs.l3, coeffs.l5, 1.0])


def build_transfer_function(
    amp: AmplificationMatrix, coeffs: AlgorithmCoefficients, dt: float
) -> FilterPolynomials:
    A12, A13 = amp.entry(1, 2), amp.entry(1, 3)
    A22, A23 = amp.entry(2, 2), amp.entry(2, 3)
    A32, A33 = amp.entry(3, 2), amp.entry(3, 3)
    l3, l5, W1 = coeffs.l3, coeffs.l5, coeffs.W1
    W0 = 1.0 - W1
    scale = dt**2 / amp.D

    # first row of adj(zI - A) times [l3, l5, 1], as polynomial in z
    p0 = l3
    p1 = -(A22 + A33) * l3 + A12 * l5 + A13
    p2 = (A22 * A33 - A23 * A32) * l3 - (A12 * A33 - A13 * A32) * l5 + (A12 * A23 - A13 * A22)

    b = scale * np.array(
        [
            p0 * W1,
            p0 * W0 + p1 * W1,
            p1 * W0 + p2 * W1,
            p2 * W0,
        ]
    )
    polys = FilterPolynomials(b=b, a=amp.denominator)
    logger.debug("Transfer function b=%s a=%s", polys.b, polys.a)
    return polys
