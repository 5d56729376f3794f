"""
Newmark-family schemes against an independent step-by-step Newmark-β solver.

The reference solves m*u¨ + c*u˙ + k*u = F(t) in effective-stiffness form.
Its first sample is the initial state; the filter output starts one step
later, so the reference is compared from index 1 on.
"""

from __future__ import annotations

import sys

sys.path.insert(0, "src")

import numpy as np
import pytest

from gssss_sdof.core.engine import compute_response


def _solve_sdof_newmark_force(
    F: np.ndarray,
    dt: float,
    m: float,
    k: float,
    zeta: float,
    u0: float = 0.0,
    v0: float = 0.0,
    beta: float = 0.25,
    gamma: float = 0.5,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    n = len(F)
    omega_n = np.sqrt(k / m)
    c = 2.0 * zeta * m * omega_n

    a0 = 1.0 / (beta * dt * dt)
    a1 = gamma / (beta * dt)
    a2 = 1.0 / (beta * dt)
    a3 = 1.0 / (2.0 * beta) - 1.0
    a4 = gamma / beta - 1.0
    a5 = dt * (gamma / (2.0 * beta) - 1.0)

    k_eff = k + a0 * m + a1 * c

    u = np.zeros(n)
    v = np.zeros(n)
    a = np.zeros(n)
    u[0], v[0] = u0, v0
    a[0] = (F[0] - c * v[0] - k * u[0]) / m

    for i in range(n - 1):
        P_eff = (
            F[i + 1]
            + m * (a0 * u[i] + a2 * v[i] + a3 * a[i])
            + c * (a1 * u[i] + a4 * v[i] + a5 * a[i])
        )
        u_next = P_eff / k_eff
        a_next = a0 * (u_next - u[i]) - a2 * v[i] - a3 * a[i]
        v_next = v[i] + dt * ((1.0 - gamma) * a[i] + gamma * a_next)
        u[i + 1], v[i + 1], a[i + 1] = u_next, v_next, a_next

    return u, v, a


@pytest.mark.parametrize(
    "name, beta",
    [("Newmark ACA", 0.25), ("Newmark LA", 1.0 / 6.0), ("Newmark BA", 0.5), ("Fox-Goodwin", 1.0 / 12.0)],
)
def test_newmark_family_matches_reference_solver(name: str, beta: float) -> None:
    k, m, zeta, dt = 2000.0, 3.0, 0.04, 0.005
    n = 600
    t = dt * np.arange(n)
    xgtt = np.sin(2.0 * np.pi * 2.0 * t) * np.exp(-t)  # starts at zero
    u0, v0 = 0.003, 0.05

    res = compute_response(k, m, dt, xgtt, zeta, name, u0=u0, ut0=v0)

    # applied force; the load at the initial instant is the first sample
    force = -m * xgtt
    F = np.concatenate([[force[0]], force])
    u_ref, v_ref, _ = _solve_sdof_newmark_force(F, dt, m, k, zeta, u0=u0, v0=v0, beta=beta)

    scale_u = np.max(np.abs(u_ref))
    np.testing.assert_allclose(res.displacement, u_ref[1:], rtol=0, atol=1e-9 * scale_u)

    # recovered velocity n belongs to the state one step before displacement n
    scale_v = np.max(np.abs(v_ref))
    assert res.velocity[0] == pytest.approx(v0, abs=1e-9 * scale_v)
    np.testing.assert_allclose(res.velocity, v_ref[:-1], rtol=0, atol=1e-8 * scale_v)


def test_nonzero_first_sample_sets_initial_acceleration() -> None:
    # the initial acceleration follows m*a0 = F0 - c*v0 - k*u0 with F0 = -m*xgtt[0]
    k, m, zeta, dt = 2000.0, 3.0, 0.04, 0.005
    t = dt * np.arange(400)
    xgtt = 1.5 * np.cos(2.0 * np.pi * 1.5 * t)
    u0, v0 = -0.002, 0.03

    res = compute_response(k, m, dt, xgtt, zeta, "Newmark ACA", u0=u0, ut0=v0)

    force = -m * xgtt
    F = np.concatenate([[force[0]], force])
    u_ref, v_ref, _ = _solve_sdof_newmark_force(F, dt, m, k, zeta, u0=u0, v0=v0)

    scale_u = np.max(np.abs(u_ref))
    np.testing.assert_allclose(res.displacement, u_ref[1:], rtol=0, atol=1e-9 * scale_u)
    # sample 0 blends in a zero force before the record
    scale_v = np.max(np.abs(v_ref))
    np.testing.assert_allclose(res.velocity[1:], v_ref[1:-1], rtol=0, atol=1e-8 * scale_v)


def test_restoring_and_inertia_balance_applied_force() -> None:
    k, m, zeta, dt = 2000.0, 3.0, 0.04, 0.005
    t = dt * np.arange(300)
    xgtt = 0.5 * np.sin(2.0 * np.pi * 3.0 * t)
    res = compute_response(k, m, dt, xgtt, zeta, "Newmark ACA")

    # absolute acceleration: m*(utt + xgtt) + c*ut + k*u = 0 with utt the relative part
    c = 2.0 * zeta * np.sqrt(k * m)
    lhs = m * res.acceleration + c * res.velocity + res.restoring_force
    np.testing.assert_allclose(lhs, 0.0, atol=1e-9 * np.max(np.abs(res.restoring_force)))
