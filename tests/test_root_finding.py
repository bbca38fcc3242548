import math

import pytest

from boltzflow.numerics.root_finding import (
    BracketBisect,
    NoConvergenceError,
    SearchPhase,
    bracket_bisect_method,
)


def test_seeds_are_requested_in_order():
    search = BracketBisect(0.0, 1.0)
    assert search.phase is SearchPhase.SEED
    assert search.request() == 0.0

    assert search.feed(-2.0) == 1.0
    assert search.phase is SearchPhase.SEED


def test_bracket_expansion_then_bisection():
    search = BracketBisect(0.0, 1.0, ya=-1.0)
    assert search.request() == 1.0

    # same sign: extrapolate xb + 2*(xb - xa)
    assert search.feed(-0.5) == 3.0
    assert search.phase is SearchPhase.BRACKET

    # sign change: bisect [1, 3]
    assert search.feed(2.0) == 2.0
    assert search.phase is SearchPhase.BISECT
    assert search.bracket == (1.0, 3.0)

    # residual has the sign of ya: xa moves
    assert search.feed(-0.1) == 2.5
    assert search.bracket == (2.0, 3.0)

    # residual has the sign of yb: xb moves
    assert search.feed(0.1) == 2.25
    assert search.bracket == (2.0, 2.5)


def test_bracket_expansion_runs_toward_negative_side():
    search = BracketBisect(0.0, -1.0, ya=1.0, growth_factor=3.0)
    assert search.request() == -1.0
    assert search.feed(math.inf) == -4.0
    assert search.feed(math.inf) == -13.0
    assert search.feed(-math.inf) == pytest.approx(-8.5)


def test_given_seeds_skip_to_bracketing():
    search = BracketBisect(0.0, 1.0, ya=1.0, yb=-1.0)
    assert search.phase is SearchPhase.BISECT
    assert search.request() == 0.5


@pytest.mark.parametrize(
    "kwargs",
    [
        {"xa": 1.0, "xb": 1.0},
        {"xa": 0.0, "xb": 1.0, "growth_factor": 0.5},
        {"xa": 0.0, "xb": 1.0, "ya": 0.0, "yb": 1.0},
        {"xa": 0.0, "xb": 1.0, "ya": math.nan, "yb": 1.0},
    ],
)
def test_invalid_construction(kwargs):
    with pytest.raises(ValueError):
        BracketBisect(**kwargs)


def test_zero_seed_fed_later_is_rejected():
    search = BracketBisect(0.0, 1.0, ya=1.0)
    with pytest.raises(ValueError):
        search.feed(0.0)


def test_bracket_bisect_method_finds_sqrt2():
    res = bracket_bisect_method(lambda x: x * x - 2.0, 0.0, 1.0, tol_f=1e-10)

    assert res.converged
    assert res.method == "bracket_bisect"
    assert res.root == pytest.approx(math.sqrt(2.0), abs=1e-9)
    assert abs(res.f_at_root) <= 1e-10
    lo, hi = sorted(res.bracket)
    assert lo <= res.root <= hi


def test_bracket_bisect_method_known_root_at_seed():
    res = bracket_bisect_method(lambda x: x, 0.0, 1.0, ya=0.0)
    assert res.root == 0.0
    assert res.iterations == 0


def test_bracket_bisect_method_no_convergence():
    with pytest.raises(NoConvergenceError):
        bracket_bisect_method(lambda x: x * x - 2.0, 0.0, 1.0, tol_f=1e-12, max_iter=3)
