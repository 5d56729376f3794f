"""Numerical core: GSSSS coefficients, amplification matrix and filter."""

from .algorithms import (
    AlgorithmCoefficients,
    AlgorithmSelection,
    ClampNotice,
    CustomCoefficients,
    list_schemes,
    scheme_names,
    select_algorithm,
)
from .engine import ResponseHistory, compute_response
from .exceptions import (
    DegenerateAmplificationError,
    GSSSSError,
    SingularAmplificationMatrixError,
    UnsupportedAlgorithmError,
)
from .system import SystemParameters

__all__ = [
    "AlgorithmCoefficients",
    "AlgorithmSelection",
    "ClampNotice",
    "CustomCoefficients",
    "DegenerateAmplificationError",
    "GSSSSError",
    "ResponseHistory",
    "SingularAmplificationMatrixError",
    "SystemParameters",
    "UnsupportedAlgorithmError",
    "compute_response",
    "list_schemes",
    "scheme_names",
    "select_algorithm",
]
