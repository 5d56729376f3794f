"""Exceptions raised by the GSSSS response pipeline."""

from __future__ import annotations

from typing import Any, Dict


class GSSSSError(ValueError):
    """Base class for fatal errors of the response computation."""

    def to_diagnostics_dict(self) -> Dict[str, Any]:
        diag: Dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": str(self),
        }
        for key, value in vars(self).items():
            if not key.startswith("_"):
                diag[key] = value
        return diag


class UnsupportedAlgorithmError(GSSSSError):
    """Identifier names no known scheme and is not a 14-coefficient vector."""

    def __init__(self, message: str, *, algorithm: Any = None):
        super().__init__(message)
        self.algorithm = algorithm


class DegenerateAmplificationError(GSSSSError):
    """Scheme / step size / damping combination gives a zero denominator."""

    def __init__(self, message: str, *, D: float | None = None, Omega: float | None = None):
        super().__init__(message)
        self.D = D
        self.Omega = Omega


class SingularAmplificationMatrixError(GSSSSError):
    """Amplification matrix cannot be inverted to seed the filter."""

    def __init__(self, message: str, *, condition_number: float | None = None):
        super().__init__(message)
        self.condition_number = condition_number
