"""Solutions returned by :func:`boltzflow.solve`."""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.integrate import OdeSolution

from .boltzmann import do_dr, do_dt, transform
from .boltzmann import r as position
from .equations import Equation
from .types import ReturnCode


def _scalar_or_array(out: NDArray[np.floating], shape: tuple[int, ...]):
    out = out.reshape(shape)
    return float(out) if out.ndim == 0 else out


class Solution:
    """Similarity solution ``u(o)`` of a problem, with ``o = r/sqrt(t)``.

    ``Solution(o)`` evaluates the profile at Boltzmann variable values;
    ``Solution(r, t)`` evaluates it at positions and times. Both accept
    scalars or arrays (broadcast together in the ``(r, t)`` form) and return
    a float for scalar input.

    - For ``o > oi`` the solution is the initial value ``i``.
    - For ``o < ob`` the solution is NaN (outside the domain).
    - In between, the dense output of the integrator is evaluated.

    Parameters
    ----------
    trajectory:
        Dense output over ``[ob, oi]``, or ``None`` if the integrator took no
        step (then ``ob == oi``).
    eq:
        Governing equation.
    o, U:
        Integrator nodes and the states ``(u, du/do)`` at those nodes, with
        shapes ``(n,)`` and ``(n, 2)``.
    iterations:
        Number of shooting trials needed to find this solution.
    retcode:
        Outcome of the solve.

    Attributes
    ----------
    b, d_dob, ob:
        Boundary value, boundary ``o``-derivative and boundary constant.
    i, oi:
        Value the trajectory settled at and where it did.
    """

    __slots__ = ("_odesol", "eq", "_o", "_U", "b", "d_dob", "ob", "i", "oi", "iterations", "retcode")

    def __init__(
        self,
        trajectory: OdeSolution | None,
        eq: Equation,
        o: ArrayLike,
        U: ArrayLike,
        *,
        iterations: int = 0,
        retcode: ReturnCode = ReturnCode.SUCCESS,
    ) -> None:
        o = np.asarray(o, dtype=float)
        U = np.asarray(U, dtype=float).reshape(-1, 2)
        if o.ndim != 1 or o.size == 0 or o.size != U.shape[0]:
            raise ValueError("o and U must describe the same non-empty trajectory")

        self._odesol = trajectory
        self.eq = eq
        self._o = o
        self._U = U
        self.b = float(U[0, 0])
        self.d_dob = float(U[0, 1])
        self.ob = float(o[0])
        self.i = float(U[-1, 0])
        self.oi = float(o[-1])
        self.iterations = int(iterations)
        self.retcode = ReturnCode(retcode)

    @classmethod
    def from_integrator(cls, integrator, *, iterations: int, retcode: ReturnCode) -> Solution:
        """Freeze the current trajectory of a :class:`BoltzmannIntegrator`."""
        U = np.column_stack([integrator.u, integrator.d_do])
        return cls(
            integrator.dense_output(),
            integrator.equation,
            integrator.o,
            U,
            iterations=iterations,
            retcode=retcode,
        )

    # Evaluation -----------------------------------------------------------

    def _eval(self, o: ArrayLike, idx: int, above: float):
        o = np.asarray(o, dtype=float)
        flat = np.atleast_1d(o).ravel()
        out = np.full(flat.shape, np.nan)
        out[flat > self.oi] = above

        inside = (flat >= self.ob) & (flat <= self.oi)
        if inside.any():
            if self._odesol is None:
                out[inside] = self._U[0, idx]
            else:
                out[inside] = self._odesol(flat[inside])[idx]

        return _scalar_or_array(out, o.shape)

    def _as_o(self, args: tuple) -> NDArray[np.floating]:
        if len(args) == 1:
            return np.asarray(args[0], dtype=float)
        if len(args) == 2:
            r, t = np.broadcast_arrays(np.asarray(args[0], float), np.asarray(args[1], float))
            with np.errstate(divide="ignore", invalid="ignore"):
                return transform(r, t)
        raise TypeError("expected (o) or (r, t)")

    def __call__(self, *args):
        """Evaluate at ``o`` or at ``(r, t)``."""
        return self._eval(self._as_o(args), 0, self.i)

    def d_do(self, *args):
        """``o``-derivative of the solution, at ``o`` or at ``(r, t)``.

        Zero beyond ``oi`` and NaN below ``ob``.
        """
        return self._eval(self._as_o(args), 1, 0.0)

    def d_dr(self, r, t):
        """Spatial derivative ``du/dr``."""
        with np.errstate(divide="ignore", invalid="ignore"):
            return self.d_do(r, t) * do_dr(r, t)

    def d_dt(self, r, t):
        """Time derivative ``du/dt``."""
        with np.errstate(divide="ignore", invalid="ignore"):
            return self.d_do(r, t) * do_dt(r, t)

    def _flow_diffusivity(self, u):
        u = np.asarray(u, dtype=float)
        vals = np.array([self.eq.flow_diffusivity(x) for x in np.atleast_1d(u).ravel()])
        return _scalar_or_array(vals, u.shape)

    def flux(self, r, t):
        """Diffusive flux ``-flow_diffusivity(u) du/dr``."""
        return -self._flow_diffusivity(self(r, t)) * self.d_dr(r, t)

    def boundary_flux(self, t):
        """Diffusive flux through the boundary ``r = rb(t)``.

        Evaluated from the boundary state, so it is exact for imposed flow
        rates.
        """
        t = np.asarray(t, dtype=float)
        with np.errstate(divide="ignore", invalid="ignore"):
            out = -self.eq.flow_diffusivity(self.b) * self.d_dob / np.sqrt(t)
        return float(out) if np.ndim(out) == 0 else out

    def rb(self, t):
        """Location of the boundary at time ``t``, ``ob*sqrt(t)``."""
        return position(self.ob, t)

    def sorptivity(self, o: float | None = None) -> float:
        """Sorptivity ``-2 flow_diffusivity(u) du/do``, at the boundary by default."""
        if o is None:
            return -2 * self.eq.flow_diffusivity(self.b) * self.d_dob
        u = self(o)
        if math.isnan(u):
            return math.nan
        return -2 * self.eq.flow_diffusivity(u) * self.d_do(o)

    # Inspection -----------------------------------------------------------

    @property
    def success(self) -> bool:
        return self.retcode is ReturnCode.SUCCESS

    @property
    def o(self) -> NDArray[np.floating]:
        """Integrator nodes, from ``ob`` to ``oi``."""
        return self._o.copy()

    @property
    def u(self) -> NDArray[np.floating]:
        """Solution values at the integrator nodes."""
        return self._U[:, 0].copy()

    def __repr__(self) -> str:
        return (
            f"Solution(b={self.b!r}, d_dob={self.d_dob!r}, ob={self.ob!r}, "
            f"i={self.i!r}, oi={self.oi!r}, iterations={self.iterations}, "
            f"retcode={self.retcode.value!r})"
        )

    def __str__(self) -> str:
        s = self.eq.sym
        lines = [
            f"Solution {s} obtained after {self.iterations} iterations ({self.retcode.value})",
            f"{s}b = {self.b:g}",
            f"d{s}/do|b = {self.d_dob:g}",
        ]
        if self.ob != 0:
            lines.append(f"ob = {self.ob:g}")
        lines.append(f"{s}i = {self.i:g}")
        return "\n".join(lines)
