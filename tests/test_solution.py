import math

import jax.numpy as jnp
import numpy as np
import pytest

from boltzflow import DiffusionEquation, DirichletProblem, ReturnCode, Solution, solve


@pytest.fixture(scope="module")
def exact_solution() -> Solution:
    return solve(DirichletProblem(lambda u: 0.5 * (1 - jnp.log(u)), i=0, b=1))


def test_outside_trajectory(exact_solution):
    sol = exact_solution

    assert math.isnan(sol(-1e-9 + sol.ob))
    assert math.isnan(sol.d_do(-1.0))
    assert sol(2 * sol.oi + 1.0) == sol.i
    assert sol.d_do(2 * sol.oi + 1.0) == 0.0
    assert sol(sol.ob) == sol.b
    assert sol.d_do(sol.ob) == sol.d_dob


def test_scalar_and_array_evaluation(exact_solution):
    sol = exact_solution

    assert isinstance(sol(0.5), float)
    out = sol(np.array([[0.0, 0.5], [1.0, 2 * sol.oi + 1.0]]))
    assert out.shape == (2, 2)
    assert out[0, 0] == sol.b
    assert out[1, 1] == sol.i


def test_r_t_evaluation(exact_solution):
    sol = exact_solution
    r = np.array([0.0, 0.5, 1.0, 2.0])
    t = 4.0

    np.testing.assert_array_equal(sol(r, t), sol(r / 2.0))
    np.testing.assert_array_equal(sol.d_do(r, t), sol.d_do(r / 2.0))
    np.testing.assert_allclose(sol.d_dr(r, t), sol.d_do(r / 2.0) / 2.0)
    np.testing.assert_allclose(sol.d_dt(r, t), sol.d_do(r / 2.0) * -(r / 2.0) / (2 * t))


def test_flux(exact_solution):
    sol = exact_solution
    r, t = 0.3, 2.0
    u = sol(r, t)

    expected = -0.5 * (1 - math.log(u)) * sol.d_dr(r, t)
    assert sol.flux(r, t) == pytest.approx(expected)
    assert sol.flux(0.0, 2.0) == pytest.approx(sol.boundary_flux(2.0))
    assert sol.boundary_flux(1.0) == pytest.approx(sol.sorptivity() / 2)


def test_rb(exact_solution):
    assert exact_solution.rb(4.0) == 0.0


def test_trajectory_arrays(exact_solution):
    sol = exact_solution

    assert sol.o[0] == sol.ob and sol.o[-1] == sol.oi
    assert sol.u[0] == sol.b and sol.u[-1] == sol.i
    assert np.all(np.diff(sol.o) > 0)
    assert np.all(np.diff(sol.u[:-1]) <= 0)


def test_str_and_repr(exact_solution):
    text = str(exact_solution)
    assert text.startswith("Solution theta obtained after")
    assert "thetab = 1" in text
    assert "ob =" not in text
    assert "retcode='success'" in repr(exact_solution)


def test_single_point_solution(identity):
    eq = DiffusionEquation(identity)
    sol = Solution(None, eq, [0.5], [[1.0, -0.2]], retcode=ReturnCode.MAX_ITERS)

    assert sol.ob == sol.oi == 0.5
    assert sol(0.5) == 1.0
    assert sol(0.6) == 1.0
    assert math.isnan(sol(0.4))
    assert sol.d_do(0.5) == -0.2
    assert not sol.success
    assert "ob = 0.5" in str(sol)


def test_inconsistent_trajectory(identity):
    with pytest.raises(ValueError):
        Solution(None, DiffusionEquation(identity), [0.0, 1.0], [[1.0, 0.0]])
