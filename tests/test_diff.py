import math
import warnings

import jax.numpy as jnp
import pytest

from boltzflow.numerics.diff import ForwardDerivatives


@pytest.mark.parametrize("jit", [True, False], ids=["jit", "eager"])
def test_polynomial_derivatives(jit: bool):
    d1 = ForwardDerivatives(lambda x: x**3, 1, jit=jit)
    d2 = ForwardDerivatives(lambda x: x**3, 2, jit=jit)

    assert d1(2.0) == pytest.approx((8.0, 12.0))
    assert d2(2.0) == pytest.approx((8.0, 12.0, 12.0))


def test_results_are_python_floats():
    out = ForwardDerivatives(jnp.exp, 2)(0.0)
    assert all(type(v) is float for v in out)
    assert out == pytest.approx((1.0, 1.0, 1.0))


def test_constant_has_zero_derivatives():
    assert ForwardDerivatives(3.0, 1)(5.0) == (3.0, 0.0)
    assert ForwardDerivatives(3.0, 2)(5.0) == (3.0, 0.0, 0.0)


def test_out_of_domain_gives_nan():
    K, dK = ForwardDerivatives(jnp.log, 1)(-1.0)
    assert math.isnan(K)


def test_invalid_order():
    with pytest.raises(ValueError):
        ForwardDerivatives(jnp.sin, 3)


def test_untraceable_function_falls_back_to_eager():
    def f(x):
        if x > 0:
            return x**2
        return -x

    deriv = ForwardDerivatives(f, 1)

    with pytest.warns(RuntimeWarning, match="cannot be JIT-compiled"):
        assert deriv(2.0) == pytest.approx((4.0, 4.0))

    # the fallback sticks; no further warnings
    with warnings.catch_warnings(record=True) as record:
        warnings.simplefilter("always")
        assert deriv(-3.0) == pytest.approx((3.0, -1.0))
    assert not [w for w in record if "JIT" in str(w.message)]
