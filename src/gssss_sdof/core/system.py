"""Physical parameters of the linear SDOF oscillator."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class SystemParameters:
    """Linear elastic SDOF system sampled at a uniform time step.

    Attributes:
        k: stiffness (> 0)
        m: mass (> 0)
        ksi: ratio of critical damping (>= 0)
        dt: time step of the excitation record (> 0)
    """

    k: float
    m: float
    ksi: float
    dt: float

    def __post_init__(self) -> None:
        for name in ("k", "m", "ksi", "dt"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite, got {value!r}")
        if self.k <= 0.0:
            raise ValueError(f"k must be > 0, got {self.k}")
        if self.m <= 0.0:
            raise ValueError(f"m must be > 0, got {self.m}")
        if self.ksi < 0.0:
            raise ValueError(f"ksi must be >= 0, got {self.ksi}")
        if self.dt <= 0.0:
            raise ValueError(f"dt must be > 0, got {self.dt}")

    @property
    def omega(self) -> float:
        """Natural circular frequency sqrt(k/m)."""
        return math.sqrt(self.k / self.m)

    @property
    def Omega(self) -> float:
        """Normalized step omega*dt."""
        return self.omega * self.dt

    @property
    def c(self) -> float:
        """Viscous coefficient per unit mass, 2*omega*ksi."""
        return 2.0 * self.omega * self.ksi

    @property
    def period(self) -> float:
        return 2.0 * math.pi / self.omega
