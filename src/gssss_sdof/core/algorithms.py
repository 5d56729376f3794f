"""GSSSS algorithm parameter selection.

Maps an algorithm identifier and a spectral radius r∞ to the integration
constants of the General Single-Step Single-Solve (GSSSS) family
(Zhou & Tamma, 2004).

Every named scheme is a pure coefficient function registered under its
canonical name (plus aliases). An explicit 14-coefficient vector is handled
as one more variant, :class:`CustomCoefficients`:

    [w1, w2, w3, W1L1, W2L2, W3L3, W1L4, W2L5, W1L6, l1, l2, l3, l4, l5]

Naming of the named schemes follows the overshooting behaviour of the
algorithm in the limit of large time steps:

- ``U0``/``U1``: zero/first-order displacement overshooting
- ``V0``/``V1``: zero/first-order velocity overshooting
- ``Opt``: optimal numerical dissipation and dispersion
- ``CA``: continuous acceleration (zero spurious root at the low frequency limit)
- ``DA``: discontinuous acceleration (zero spurious root at the high frequency limit)

References
----------
.. [1] Zhou, X., and Tamma, K. K. "Design, analysis, and synthesis of
       generalized single step single solve and optimal algorithms for
       structural dynamics." International Journal for Numerical Methods
       in Engineering 59.5 (2004): 597-668.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, fields
from fractions import Fraction
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np

from .exceptions import UnsupportedAlgorithmError

logger = logging.getLogger(__name__)

N_COEFFICIENTS = 14


# ====================================================================
# COEFFICIENT CONTAINERS
# ====================================================================


@dataclass(frozen=True)
class AlgorithmCoefficients:
    """Integration constants of one GSSSS scheme.

    ``w1``, ``w2``, ``w3`` are the weighting-function parameters and ``W1``
    the derived load-evaluation weight. ``W1L1`` .. ``W1L6`` are the
    products of the weights with the Lambda parameters, ``l1`` .. ``l5`` the
    Lambda parameters of the displacement/velocity updates.
    """

    w1: float
    w2: float
    w3: float
    W1: float
    W1L1: float
    W2L2: float
    W3L3: float
    W1L4: float
    W2L5: float
    W1L6: float
    l1: float
    l2: float
    l3: float
    l4: float
    l5: float

    def as_vector(self) -> np.ndarray:
        """Return the 14-entry override vector (everything but ``W1``)."""
        return np.array(
            [getattr(self, f.name) for f in fields(self) if f.name != "W1"],
            dtype=float,
        )


@dataclass(frozen=True)
class CustomCoefficients:
    """Explicit coefficient vector overriding the named-scheme lookup."""

    values: Tuple[float, ...]

    def __post_init__(self) -> None:
        values = tuple(float(v) for v in self.values)
        if len(values) != N_COEFFICIENTS:
            raise UnsupportedAlgorithmError(
                f"Coefficient override must have {N_COEFFICIENTS} entries, got {len(values)}",
                algorithm=self.values,
            )
        if not all(math.isfinite(v) for v in values):
            raise UnsupportedAlgorithmError(
                "Coefficient override contains non-finite entries",
                algorithm=self.values,
            )
        object.__setattr__(self, "values", values)


@dataclass(frozen=True)
class ClampNotice:
    """Non-fatal notice: the requested r∞ was outside the scheme's range."""

    algorithm: str
    requested: float
    applied: float

    @property
    def message(self) -> str:
        bound = Fraction(self.applied).limit_denominator(12)
        return (
            f"{self.algorithm}: minimum absolute eigenvalue of amplification "
            f"matrix is set to {bound} (requested {self.requested:g})"
        )

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class AlgorithmSelection:
    """Result of the parameter selection, including diagnostics."""

    name: str
    coefficients: AlgorithmCoefficients
    rinf: Optional[float]
    notices: Tuple[ClampNotice, ...] = ()

    @property
    def clamped(self) -> bool:
        return bool(self.notices)


AlgorithmSpec = Union[str, CustomCoefficients, Sequence[float], np.ndarray]


# ====================================================================
# SCHEME REGISTRY
# ====================================================================


class _Weights(NamedTuple):
    """w_i = n_i / den, kept in common-denominator form."""

    n1: float
    n2: float
    n3: float
    den: float = 1.0


class _Constants(NamedTuple):
    W1L1: float
    W2L2: float
    W3L3: float
    W1L4: float
    W2L5: float
    W1L6: float
    l1: float
    l2: float
    l3: float
    l4: float
    l5: float


SchemeFunc = Callable[[float], Tuple[_Weights, _Constants]]


@dataclass(frozen=True)
class SchemeDefinition:
    name: str
    description: str
    func: SchemeFunc
    rinf_range: Optional[Tuple[float, float]]
    aliases: Tuple[str, ...] = ()


_REGISTRY: Dict[str, SchemeDefinition] = {}
_LOOKUP: Dict[str, str] = {}


def _normalize_name(name: str) -> str:
    return " ".join(name.strip().lower().split())


def _register(
    name: str,
    *,
    description: str,
    rinf_range: Optional[Tuple[float, float]] = (0.0, 1.0),
    aliases: Tuple[str, ...] = (),
) -> Callable[[SchemeFunc], SchemeFunc]:
    def decorator(func: SchemeFunc) -> SchemeFunc:
        _REGISTRY[name] = SchemeDefinition(name, description, func, rinf_range, aliases)
        for key in (name, *aliases):
            _LOOKUP[_normalize_name(key)] = name
        return func

    return decorator


# Weight families shared by several schemes
_DA_WEIGHTS = _Weights(-15.0, 45.0, -35.0)


def _opt_weights(r: float) -> _Weights:
    return _Weights(-15.0 * (1 - 2 * r), 15.0 * (3 - 4 * r), -35.0 * (1 - r), 1 - 4 * r)


def _zero_order_velocity_lambdas(r: float) -> Tuple[float, float, float, float, float]:
    return 1.0, 0.5, 1 / 2 / (1 + r), 1.0, 1 / (1 + r)


def _first_order_velocity_lambdas(r: float) -> Tuple[float, float, float, float, float]:
    return 1.0, 0.5, 1 / (1 + r) ** 2, 1.0, (3 - r) / 2 / (1 + r)


# -- zero-order displacement, zero-order velocity --------------------


@_register("U0-V0-Opt", description="U0-V0, optimal numerical dissipation and dispersion")
def _u0_v0_opt(r: float) -> Tuple[_Weights, _Constants]:
    s = 1 + r
    return _opt_weights(r), _Constants(
        1 / s, 1 / 2 / s, 1 / 2 / s**2, 1 / s, 1 / s**2, (3 - r) / 2 / s,
        *_zero_order_velocity_lambdas(r),
    )


@_register(
    "U0-V0-CA",
    description="U0-V0, continuous acceleration",
    rinf_range=(1.0 / 3.0, 1.0),
)
def _u0_v0_ca(r: float) -> Tuple[_Weights, _Constants]:
    s = 1 + r
    p = 1 + 3 * r
    weights = _Weights(-15.0 * (1 - 5 * r), 15.0 * (1 - 13 * r), 140.0 * r, 3 - 7 * r)
    return weights, _Constants(
        p / 2 / s, p / 4 / s, p / 4 / s**2, p / 2 / s, p / 2 / s**2, 1.0,
        *_zero_order_velocity_lambdas(r),
    )


@_register("U0-V0-DA", description="U0-V0, discontinuous acceleration")
def _u0_v0_da(r: float) -> Tuple[_Weights, _Constants]:
    s = 1 + r
    return _DA_WEIGHTS, _Constants(
        1.0, 0.5, 1 / 2 / s, 1.0, 1 / s, (3 + r) / 2 / s,
        *_zero_order_velocity_lambdas(r),
    )


# -- zero-order displacement, first-order velocity -------------------


@_register(
    "U0-V1-Opt",
    description="U0-V1, optimal dissipation (generalized-alpha, Chung & Hulbert 1993)",
    aliases=("generalized a-method",),
)
def _u0_v1_opt(r: float) -> Tuple[_Weights, _Constants]:
    s = 1 + r
    return _opt_weights(r), _Constants(
        1 / s, 1 / 2 / s, 1 / s**3, 1 / s, (3 - r) / 2 / s**2, (2 - r) / s,
        *_first_order_velocity_lambdas(r),
    )


@_register(
    "U0-V1-CA",
    description="U0-V1, continuous acceleration (HHT-alpha, Hilber, Hughes & Taylor 1977)",
    rinf_range=(0.5, 1.0),
    aliases=("HHT a-method",),
)
def _u0_v1_ca(r: float) -> Tuple[_Weights, _Constants]:
    s = 1 + r
    weights = _Weights(
        -15.0 * (1 - 2 * r), 15.0 * (2 - 5 * r), -35.0 * (1 - 3 * r) / 2, 2 - 3 * r
    )
    return weights, _Constants(
        2 * r / s, r / s, 2 * r / s**3, 2 * r / s, r * (3 - r) / s**2, 1.0,
        *_first_order_velocity_lambdas(r),
    )


@_register(
    "U0-V1-DA",
    description="U0-V1, discontinuous acceleration (WBZ, Wood, Bossak & Zienkiewicz 1980)",
    aliases=("WBZ",),
)
def _u0_v1_da(r: float) -> Tuple[_Weights, _Constants]:
    s = 1 + r
    return _DA_WEIGHTS, _Constants(
        1.0, 0.5, 1 / s**2, 1.0, (3 - r) / 2 / s, 2 / s,
        *_first_order_velocity_lambdas(r),
    )


# -- first-order displacement, zero-order velocity -------------------


@_register("U1-V0-Opt", description="U1-V0, optimal numerical dissipation and dispersion")
def _u1_v0_opt(r: float) -> Tuple[_Weights, _Constants]:
    s = 1 + r
    weights = _Weights(
        -30.0 * (3 - 8 * r + 6 * r**2),
        15.0 * (25 - 74 * r + 53 * r**2) / 2,
        -35.0 * (3 - 10 * r + 7 * r**2),
        9 - 22 * r + 19 * r**2,
    )
    return weights, _Constants(
        (3 - r) / 2 / s, 1 / s**2, 1 / s**3, (3 - r) / 2 / s, 2 / s**3, (2 - r) / s,
        *_zero_order_velocity_lambdas(r),
    )


@_register(
    "U1-V0-CA",
    description="U1-V0, continuous acceleration",
    rinf_range=(0.5, 1.0),
)
def _u1_v0_ca(r: float) -> Tuple[_Weights, _Constants]:
    s = 1 + r
    p = 1 + 3 * r
    weights = _Weights(
        -60.0 * (2 - 8 * r + 7 * r**2),
        15.0 * (37 - 140 * r + 127 * r**2) / 2,
        -35.0 * (5 - 18 * r + 17 * r**2),
        11 - 48 * r + 41 * r**2,
    )
    return weights, _Constants(
        p / 2 / s, 2 * r / s**2, 2 * r / s**3, p / 2 / s, 4 * r / s**3, 1.0,
        *_zero_order_velocity_lambdas(r),
    )


@_register("U1-V0-DA", description="U1-V0, discontinuous acceleration")
def _u1_v0_da(r: float) -> Tuple[_Weights, _Constants]:
    s = 1 + r
    weights = _Weights(
        -30.0 * (3 - 4 * r), 15.0 * (25 - 37 * r) / 2, -35.0 * (3 - 5 * r), 9 - 11 * r
    )
    return weights, _Constants(
        (3 + r) / 2 / s, 1 / s, 1 / s**2, (3 + r) / 2 / s, 2 / s**2, 2 / s,
        *_first_order_velocity_lambdas(r),
    )


# -- classical Newmark family (r∞ not used) --------------------------


def _newmark(beta: float, gamma: float) -> SchemeFunc:
    def scheme(_r: float) -> Tuple[_Weights, _Constants]:
        return _DA_WEIGHTS, _Constants(1.0, 0.5, beta, 1.0, gamma, 1.0, 1.0, 0.5, beta, 1.0, gamma)

    return scheme


for _name, _beta, _description in (
    ("Newmark ACA", 1 / 4, "Newmark average constant acceleration (beta=1/4, gamma=1/2)"),
    ("Newmark LA", 1 / 6, "Newmark linear acceleration (beta=1/6, gamma=1/2)"),
    ("Newmark BA", 1 / 2, "Newmark backward acceleration (beta=1/2, gamma=1/2)"),
    ("Fox-Goodwin", 1 / 12, "Fox-Goodwin formula (beta=1/12, gamma=1/2)"),
):
    _register(_name, description=_description, rinf_range=None)(_newmark(_beta, 0.5))

del _name, _beta, _description


# ====================================================================
# SELECTION
# ====================================================================


def _ratio(num: float, den: float) -> float:
    if den != 0.0:
        return num / den
    return math.copysign(math.inf, num)


def _load_weight(w: _Weights) -> float:
    """W1 = (1/2 + w1/3 + w2/4 + w3/5) / (1 + w1/2 + w2/3 + w3/4).

    Evaluated with numerator and denominator multiplied by the common
    denominator of the w's, which stays finite where the w's have a pole.
    """
    top = w.den / 2 + w.n1 / 3 + w.n2 / 4 + w.n3 / 5
    bottom = w.den + w.n1 / 2 + w.n2 / 3 + w.n3 / 4
    if bottom == 0.0 or not math.isfinite(bottom):
        raise UnsupportedAlgorithmError(
            f"Weighting parameters w=({_ratio(w.n1, w.den)}, {_ratio(w.n2, w.den)}, "
            f"{_ratio(w.n3, w.den)}) leave W1 undefined"
        )
    return top / bottom


def _build_coefficients(weights: _Weights, constants: _Constants) -> AlgorithmCoefficients:
    return AlgorithmCoefficients(
        w1=_ratio(weights.n1, weights.den),
        w2=_ratio(weights.n2, weights.den),
        w3=_ratio(weights.n3, weights.den),
        W1=_load_weight(weights),
        **constants._asdict(),
    )


def coefficients_from_vector(values: Sequence[float]) -> AlgorithmCoefficients:
    """Build coefficients from an explicit 14-entry override vector."""
    custom = values if isinstance(values, CustomCoefficients) else CustomCoefficients(tuple(values))
    w1, w2, w3, *rest = custom.values
    return _build_coefficients(_Weights(w1, w2, w3), _Constants(*rest))


def _as_override_vector(algorithm: object) -> Optional[Tuple[float, ...]]:
    if isinstance(algorithm, CustomCoefficients):
        return algorithm.values
    if isinstance(algorithm, (str, bytes)):
        return None
    try:
        arr = np.asarray(algorithm, dtype=float)
    except (TypeError, ValueError):
        return None
    if arr.ndim == 0 or arr.ndim > 2 or (arr.ndim == 2 and 1 not in arr.shape):
        return None
    arr = arr.ravel()
    if arr.size != N_COEFFICIENTS:
        return None
    return tuple(float(v) for v in arr)


def resolve_scheme(name: str) -> SchemeDefinition:
    """Look up a scheme by canonical name or alias (case-insensitive)."""
    key = _LOOKUP.get(_normalize_name(name))
    if key is None:
        raise UnsupportedAlgorithmError(
            f"No appropriate algorithm specified: {name!r}. "
            f"Known schemes: {', '.join(scheme_names())}",
            algorithm=name,
        )
    return _REGISTRY[key]


def clamp_rinf(definition: SchemeDefinition, rinf: float) -> Tuple[float, Optional[ClampNotice]]:
    """Clamp r∞ into the scheme's admissible range."""
    lo, hi = definition.rinf_range  # type: ignore[misc]
    if rinf < lo:
        applied = lo
    elif rinf > hi:
        applied = hi
    else:
        return rinf, None
    notice = ClampNotice(definition.name, requested=rinf, applied=applied)
    logger.warning(notice.message)
    return applied, notice


def select_algorithm(algorithm: AlgorithmSpec, rinf: float = 1.0) -> AlgorithmSelection:
    """Select the GSSSS integration constants.

    Parameters
    ----------
    algorithm : str, CustomCoefficients or sequence of 14 floats
        Named scheme (see :func:`scheme_names`) or explicit coefficients.
    rinf : float
        Spectral radius at the high frequency limit. Clamped to the scheme's
        admissible range with a :class:`ClampNotice`; ignored by the Newmark
        family and by explicit coefficients.

    Returns
    -------
    AlgorithmSelection

    Raises
    ------
    UnsupportedAlgorithmError
        If ``algorithm`` is neither a known scheme nor a 14-entry vector.
    """
    vector = _as_override_vector(algorithm)
    if vector is not None:
        coefficients = coefficients_from_vector(CustomCoefficients(vector))
        return AlgorithmSelection("custom", coefficients, rinf=None)

    if not isinstance(algorithm, str):
        raise UnsupportedAlgorithmError(
            f"Algorithm must be a scheme name or a {N_COEFFICIENTS}-entry coefficient "
            f"vector, got {algorithm!r}",
            algorithm=algorithm,
        )

    definition = resolve_scheme(algorithm)
    if definition.rinf_range is None:
        weights, constants = definition.func(1.0)
        return AlgorithmSelection(definition.name, _build_coefficients(weights, constants), None)

    rinf = float(rinf)
    if not math.isfinite(rinf):
        raise ValueError(f"rinf must be finite, got {rinf!r}")
    applied, notice = clamp_rinf(definition, rinf)
    weights, constants = definition.func(applied)
    coefficients = _build_coefficients(weights, constants)
    logger.debug("Selected %s (rinf=%g): %s", definition.name, applied, coefficients)
    return AlgorithmSelection(
        definition.name,
        coefficients,
        rinf=applied,
        notices=(notice,) if notice is not None else (),
    )


def scheme_names() -> List[str]:
    return list(_REGISTRY)


def list_schemes() -> List[SchemeDefinition]:
    return list(_REGISTRY.values())
