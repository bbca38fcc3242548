import math

import numpy as np
import pytest

from boltzflow import (
    BoltzmannODE,
    DirichletProblem,
    DomainError,
    ReturnCode,
    RichardsEquation,
    SolvingError,
    solve,
)


def test_constant_solution(identity, o_grid):
    sol = solve(DirichletProblem(identity, i=1, b=1))

    assert sol.retcode is ReturnCode.SUCCESS
    assert sol.iterations == 0
    np.testing.assert_allclose(sol(o_grid), sol.i)
    np.testing.assert_allclose(sol(o_grid), sol.b)
    np.testing.assert_allclose(sol.d_do(o_grid), 0.0, atol=1e-12)
    assert math.isnan(sol(-1.0))


def test_exact(exact_D, o_grid):
    sol = solve(DirichletProblem(exact_D, i=0, b=1))

    assert sol.success
    assert sol.iterations > 0
    np.testing.assert_allclose(sol(o_grid), np.exp(-o_grid), atol=1e-3)
    np.testing.assert_allclose(sol.d_do(o_grid), -np.exp(-o_grid), atol=2e-3)
    assert abs(sol.i) <= 1e-3


def test_exact_sorptivity(exact_D):
    sol = solve(DirichletProblem(exact_D, i=0, b=1), itol=1e-4)

    assert sol.sorptivity() == pytest.approx(1.0, abs=1e-3)
    assert sol.sorptivity(sol.ob) == pytest.approx(sol.sorptivity())


def test_exact_richards(exact_D, o_grid):
    eq = RichardsEquation(C=1.0, K=exact_D)
    sol = solve(DirichletProblem(eq, i=0, b=1))

    np.testing.assert_allclose(sol(o_grid), np.exp(-o_grid), atol=1e-3)


@pytest.mark.parametrize("i, b", [(0.0, 1.0), (0.2, 1.0), (1.0, 0.5)])
def test_d_dob_sign_follows_monotonicity(exact_D, i: float, b: float):
    sol = solve(DirichletProblem(exact_D, i=i, b=b))

    assert sol.success
    assert np.sign(sol.d_dob) == np.sign(i - b)
    assert sol.i == pytest.approx(i, abs=1e-3)
    assert sol.b == b


def test_d_dob_hint(exact_D):
    sol = solve(DirichletProblem(exact_D, i=0, b=1), BoltzmannODE(d_dob_hint=-0.9))
    assert sol.success
    assert sol.d_dob == pytest.approx(-1.0, abs=1e-2)


def test_d_dob_hint_with_wrong_sign(exact_D):
    with pytest.raises(ValueError, match="d_dob_hint"):
        solve(DirichletProblem(exact_D, i=0, b=1), BoltzmannODE(d_dob_hint=1.0))


def test_bad_argument(identity):
    with pytest.raises(ValueError):
        solve(DirichletProblem(identity, i=0, b=1), maxiters=-1)
    with pytest.raises(ValueError):
        solve(DirichletProblem(identity, i=0, b=1), itol=-1.0)


def test_unsolved(identity):
    with pytest.raises(SolvingError):
        solve(DirichletProblem(identity, i=0, b=1), maxiters=0)


def test_unsolved_without_raising(identity):
    sol = solve(DirichletProblem(identity, i=0, b=1), maxiters=0, raise_on_failure=False)

    assert sol.retcode is ReturnCode.MAX_ITERS
    assert not sol.success
    assert sol.iterations == 0
    assert sol.b == 1.0
    assert sol.d_dob < 0


@pytest.mark.parametrize("i, b", [(-1e-3, 1.0), (0.0, -1.0)])
def test_unsolvable(identity, i: float, b: float):
    with pytest.raises(DomainError) as excinfo:
        solve(DirichletProblem(identity, i=i, b=b))
    assert excinfo.value.value in (i, b)


def test_unsolvable_is_a_value_error(identity):
    with pytest.raises(ValueError):
        solve(DirichletProblem(identity, i=0, b=-1))


def test_radial(radial_identity):
    sol = solve(DirichletProblem(radial_identity, i=0.1, b=1.0, ob=0.1))

    assert sol.success
    assert sol.ob == 0.1
    assert sol.b == 1.0
    assert sol.i == pytest.approx(0.1, abs=1e-3)
    assert math.isnan(sol(0.05))
