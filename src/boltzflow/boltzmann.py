"""Boltzmann similarity transformation.

With the Boltzmann variable ``o = r/sqrt(t)`` the governing PDE collapses into
a second-order ODE in ``o`` alone. Written as a first-order system in
``U = (u, v)`` with ``v = du/do``::

    du/do = v
    dv/do = -((C(u) o/2 + K'(u) v)/K(u) + k/o) v

where ``k = dim - 1`` (``k = 0`` for planar problems). The Jacobian is
evaluated analytically from forward-mode derivatives of ``K`` and ``C``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from .equations import Equation, valid_conductivity

# Errors that user material functions may raise outside their domain
_EVAL_ERRORS = (ArithmeticError, ValueError)


def o(r, t):
    """Boltzmann variable ``o = r/sqrt(t)``."""
    return r / np.sqrt(t)


def do_dr(r, t):
    return 1.0 / np.sqrt(t) + 0.0 * r


def do_dt(r, t):
    return -o(r, t) / (2.0 * t)


def r(o, t):
    """Position ``r = o*sqrt(t)`` (inverse of :func:`o` at fixed ``t``)."""
    return o * np.sqrt(t)


def t(o, r):
    """Time ``t = (r/o)**2`` (inverse of :func:`o` at fixed ``r``)."""
    return (r / o) ** 2


def transform(r, t):
    """Same as :func:`o`."""
    return o(r, t)


@dataclass(frozen=True, slots=True)
class BoltzmannODEFunction:
    """Right-hand side and Jacobian of the transformed ODE.

    Both callables use the ``fun(t, y)`` / ``jac(t, y)`` convention of
    :mod:`scipy.integrate`, with the Boltzmann variable in place of ``t``.

    Out-of-domain evaluations never raise: the derivative component becomes
    NaN, which makes the stiff integrator reject the step.
    """

    eq: Equation

    def rhs(self, o: float, U: NDArray[np.floating]) -> NDArray[np.floating]:
        u, v = float(U[0]), float(U[1])
        k = self.eq.k
        try:
            K, dK = self.eq.conductivity_derivatives(u)
            if valid_conductivity(K, dK):
                C = self.eq.capacity(u)
                dv = -((C * o / 2 + dK * v) / K + (k / o if k else 0.0)) * v
            else:
                dv = math.nan
        except _EVAL_ERRORS:
            dv = math.nan

        return np.array([v, dv])

    def jac(self, o: float, U: NDArray[np.floating]) -> NDArray[np.floating]:
        u, v = float(U[0]), float(U[1])
        k = self.eq.k
        try:
            K, dK, d2K = self.eq.conductivity_derivatives(u, order=2)
            if valid_conductivity(K, dK):
                C, dC = self.eq.capacity_derivative(u)
                j21 = -v * (K * (2 * d2K * v + dC * o) - dK * (C * o + 2 * dK * v)) / (2 * K**2)
                j22 = -2 * dK * v / K - C * o / (2 * K) - (k / o if k else 0.0)
            else:
                j21 = j22 = math.nan
        except _EVAL_ERRORS:
            j21 = j22 = math.nan

        J = np.array([[0.0, 1.0], [j21, j22]])
        # LU factorization rejects non-finite input
        J[~np.isfinite(J)] = 0.0
        return J

    def __call__(self, o: float, U: NDArray[np.floating]) -> NDArray[np.floating]:
        return self.rhs(o, U)


def boltzmann(eq: Equation) -> BoltzmannODEFunction:
    """Transform ``eq`` into a first-order ODE system in the Boltzmann variable.

    The returned system has independent variable ``o`` and two components:
    the solution itself and its ``o``-derivative.

    Notes
    -----
    For radial equations the ``k/o`` term is singular at ``o = 0``; callers
    must start integration from ``o = ob > 0``.
    """
    return BoltzmannODEFunction(eq)


def sorptivity_to_d_do(eq: Equation, val: float, S: float) -> float:
    """Boundary ``o``-derivative implied by a sorptivity ``S`` at value ``val``."""
    return -S / (2 * eq.flow_diffusivity(val))


def flowrate_to_d_do(eq: Equation, val: float, ob: float, flux_mul_r: float) -> float:
    """Boundary ``o``-derivative implied by a radial flow rate.

    ``flux_mul_r`` is the flow rate per unit angle and height (``Qb/(angle*height)``),
    i.e. the product of flux and radius at the boundary ``r = ob*sqrt(t)``.
    """
    if eq.dim != 2:
        raise ValueError("flow rate boundary conditions require a dim=2 equation")
    return sorptivity_to_d_do(eq, val, 2 * flux_mul_r / ob)
