import math
import warnings

import jax.numpy as jnp
import numpy as np
import pytest

from boltzflow import DiffusionEquation, RichardsEquation, boltzmann
from boltzflow.boltzmann import (
    do_dr,
    do_dt,
    flowrate_to_d_do,
    o,
    r,
    sorptivity_to_d_do,
    t,
    transform,
)


def test_transform_helpers():
    assert o(1.0, 4.0) == pytest.approx(0.5)
    assert transform(1.0, 4.0) == o(1.0, 4.0)
    assert r(0.5, 4.0) == pytest.approx(1.0)
    assert t(0.5, 1.0) == pytest.approx(4.0)
    assert do_dr(1.0, 4.0) == pytest.approx(0.5)
    assert do_dt(1.0, 4.0) == pytest.approx(-0.0625)


def test_transform_broadcasts():
    rr = np.array([0.0, 1.0, 2.0])
    np.testing.assert_allclose(o(rr, 4.0), [0.0, 0.5, 1.0])
    np.testing.assert_allclose(do_dr(rr, 4.0), [0.5, 0.5, 0.5])


def test_rhs_constant_diffusivity():
    odefun = boltzmann(DiffusionEquation(lambda u: 2.0 + 0.0 * u))
    dU = odefun(1.0, np.array([0.5, -0.3]))
    # dv/do = -(o/2)/D * v for constant D
    np.testing.assert_allclose(dU, [-0.3, 0.075])


def test_rhs_radial_term():
    odefun = boltzmann(DiffusionEquation(lambda u: 1.0 + 0.0 * u, dim=3))
    dU = odefun.rhs(2.0, np.array([0.0, 1.0]))
    # -(o/2 + 2/o) * v
    np.testing.assert_allclose(dU, [1.0, -2.0])


def _fd_jacobian(f, o, U, h=1e-6):
    J = np.empty((2, 2))
    for j in range(2):
        e = np.zeros(2)
        e[j] = h
        J[:, j] = (f(o, U + e) - f(o, U - e)) / (2 * h)
    return J


@pytest.mark.parametrize("dim", [1, 2, 3])
def test_jacobian_matches_finite_differences(dim: int):
    eq = RichardsEquation(C=lambda h: 1.0 + 0.5 * h**2, K=jnp.exp, dim=dim)
    odefun = boltzmann(eq)
    o_, U = 0.7, np.array([0.3, -0.4])

    J = odefun.jac(o_, U)
    J_fd = _fd_jacobian(odefun.rhs, o_, U)

    np.testing.assert_allclose(J, J_fd, rtol=1e-6, atol=1e-8)


def test_out_of_domain_gives_nan_derivative():
    odefun = boltzmann(DiffusionEquation(jnp.sqrt))
    dU = odefun.rhs(1.0, np.array([-1.0, -0.5]))

    assert dU[0] == -0.5
    assert math.isnan(dU[1])

    J = odefun.jac(1.0, np.array([-1.0, -0.5]))
    assert np.all(np.isfinite(J))
    np.testing.assert_array_equal(J[0], [0.0, 1.0])


@pytest.mark.parametrize("u", [-0.5, 0.0])
def test_nonpositive_conductivity_gives_nan_derivative(identity, u: float):
    odefun = boltzmann(DiffusionEquation(identity))
    U = np.array([u, -1.0])

    with warnings.catch_warnings():
        warnings.simplefilter("error", RuntimeWarning)
        dU = odefun.rhs(1.0, U)
        J = odefun.jac(1.0, U)

    assert dU[0] == -1.0
    assert math.isnan(dU[1])
    np.testing.assert_array_equal(J, [[0.0, 1.0], [0.0, 0.0]])


def test_sorptivity_to_d_do():
    eq = DiffusionEquation(lambda u: 0.5 + 0.0 * u)
    assert sorptivity_to_d_do(eq, 1.0, 1.0) == pytest.approx(-1.0)


def test_flowrate_to_d_do():
    eq = DiffusionEquation(lambda u: u, dim=2)
    # flux*r = 0.1 at ob = 0.5 -> S = 2*0.1/0.5 = 0.4 -> d_do = -0.4/(2*2)
    assert flowrate_to_d_do(eq, 2.0, 0.5, 0.1) == pytest.approx(-0.1)

    with pytest.raises(ValueError):
        flowrate_to_d_do(DiffusionEquation(lambda u: u), 2.0, 0.5, 0.1)
