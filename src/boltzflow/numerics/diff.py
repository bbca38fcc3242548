"""Forward-mode automatic differentiation of scalar material functions.

The Boltzmann ODE needs the conductivity ``K`` together with its first and
second derivatives (the latter only for the Jacobian), and the capacity ``C``
together with its first derivative. Finite differences are not good enough
near stiff regions, so derivatives are propagated exactly with ``jax.jvp``.

Design notes
------------
- User functions must be written with ``jax.numpy`` (or plain arithmetic).
  Out-of-domain arguments should produce NaN (as ``jnp.log``/``jnp.sqrt`` do)
  rather than raise.
- Derivative evaluators are ``jax.jit``-compiled. Functions that branch on the
  *value* of their argument cannot be traced; those fall back to eager
  ``jax.jvp``, which supports Python control flow.
- 64-bit floats are enabled on import; the integrator works in double
  precision.
"""

from __future__ import annotations

import warnings
from collections.abc import Callable

import jax
import jax.numpy as jnp

jax.config.update("jax_enable_x64", True)

_TRACING_ERRORS = (
    jax.errors.ConcretizationTypeError,
    jax.errors.TracerIntegerConversionError,
)


def _first(f: Callable) -> Callable:
    def value_and_tangent(x):
        return jax.jvp(f, (x,), (jnp.ones_like(x),))

    return value_and_tangent


def _second(f: Callable) -> Callable:
    def values_and_tangents(x):
        (y, dy), (_, d2y) = jax.jvp(_first(f), (x,), (jnp.ones_like(x),))
        return y, dy, d2y

    return values_and_tangents


class ForwardDerivatives:
    """Evaluate ``f`` and its derivatives up to ``order`` at a scalar point.

    Calling the instance returns a tuple of Python floats
    ``(f(x), f'(x))`` for ``order=1`` or ``(f(x), f'(x), f''(x))`` for
    ``order=2``.

    Parameters
    ----------
    f:
        Scalar function, or a constant (whose derivatives are zero).
    order:
        1 or 2.
    jit:
        Compile the derivative evaluator with ``jax.jit``. Falls back to eager
        evaluation (with a warning) if ``f`` cannot be traced.
    """

    __slots__ = ("f", "order", "_eager", "_compiled")

    def __init__(self, f: Callable[[float], float] | float, order: int = 1, *, jit: bool = True):
        if order not in (1, 2):
            raise ValueError("order must be 1 or 2")
        self.f = f
        self.order = order

        if callable(f):
            self._eager = _first(f) if order == 1 else _second(f)
            self._compiled = jax.jit(self._eager) if jit else None
        else:
            self._eager = None
            self._compiled = None

    def __call__(self, x: float) -> tuple[float, ...]:
        if self._eager is None:
            return (float(self.f),) + (0.0,) * self.order

        xx = jnp.asarray(x, dtype=jnp.float64)
        if self._compiled is not None:
            try:
                out = self._compiled(xx)
            except _TRACING_ERRORS:
                warnings.warn(
                    f"{self.f!r} cannot be JIT-compiled; using eager forward-mode "
                    "differentiation (slower). Use jnp.where instead of Python "
                    "branches on the argument to avoid this.",
                    RuntimeWarning,
                    stacklevel=2,
                )
                self._compiled = None
                out = self._eager(xx)
        else:
            out = self._eager(xx)

        return tuple(float(v) for v in out)
