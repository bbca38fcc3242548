"""Semi-infinite problems that reduce to a Boltzmann ODE.

Every problem is posed on ``r > rb(t) = ob*sqrt(t)`` for ``t > 0``. Planar
problems default to a fixed boundary at ``r = 0`` (``ob = 0``); radial problems
need ``ob > 0`` because the point ``r = 0`` is singular.

Problems that are solved by shooting expose :meth:`to_cauchy`, which builds
the elementary :class:`CauchyProblem` for one trial value of the unknown
boundary quantity.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass

from .boltzmann import flowrate_to_d_do, sorptivity_to_d_do
from .equations import Equation, MaterialFunction, as_equation


def _sign(x: float) -> int:
    return (x > 0) - (x < 0)


def _check_ob(eq: Equation, ob: float) -> None:
    if not ob >= 0:
        raise ValueError("ob must be >= 0")
    if eq.radial and ob == 0:
        raise ValueError("ob must be > 0 for a radial equation (r=0 is singular)")


def _render(eq: Equation, ob: float, i: float, name: str, value: float) -> str:
    s = eq.sym
    if ob == 0:
        lines = [f"⎧ {eq}, r>0,t>0", f"⎨ {s}(r,0) = {i:g}, r>0", f"⎩ {name}(0,t) = {value:g}, t>0"]
    else:
        lines = [
            f"⎧ {eq}, r>rb(t),t>0",
            f"⎨ {s}(r,0) = {i:g}, r>0",
            f"⎩ {name}(rb(t),t) = {value:g}, t>0",
            f"with rb(t) = {ob:g}*√t",
        ]
    return "\n".join(lines)


class Problem(ABC):
    """Base class for problems. Subclasses are frozen dataclasses with ``eq`` and ``ob``."""

    __slots__ = ()

    eq: Equation
    ob: float

    @abstractmethod
    def monotonicity(self) -> int:
        """Whether the solution decreases (-1), is constant (0) or increases (+1) in ``r``."""

    def _set(self, name: str, value) -> None:
        object.__setattr__(self, name, value)


def monotonicity(prob: Problem) -> int:
    return prob.monotonicity()


@dataclass(frozen=True, slots=True)
class CauchyProblem(Problem):
    """Problem with imposed boundary value and boundary ``o``-derivative.

    The initial condition is unknown; it is whatever value the trajectory
    settles at. This is the elementary initial value problem integrated by
    the shooting method.

    Parameters
    ----------
    eq : Equation or callable
        Governing equation, or a diffusivity function (planar diffusion).
    b : float
        Boundary value.
    d_dob : float
        ``o``-derivative of the solution at the boundary, equivalent to
        ``sqrt(t) * du/dr`` at ``r = rb(t)``.
    ob : float, default 0
        Boundary constant; the boundary is located at ``rb(t) = ob*sqrt(t)``.
    """

    eq: Equation | MaterialFunction
    b: float
    d_dob: float
    ob: float = 0.0

    def __post_init__(self) -> None:
        self._set("eq", as_equation(self.eq))
        self._set("b", float(self.b))
        self._set("d_dob", float(self.d_dob))
        self._set("ob", float(self.ob))
        _check_ob(self.eq, self.ob)

    def monotonicity(self) -> int:
        return _sign(self.d_dob)

    def to_cauchy(self) -> CauchyProblem:
        return self

    def __str__(self) -> str:
        s = self.eq.sym
        if self.ob == 0:
            lines = [
                f"⎧ {self.eq}, r>0,t>0",
                f"⎨ {s}(0,t) = {self.b:g}, t>0",
                f"⎩ √t*∂{s}/∂r(0,t) = {self.d_dob:g}, t>0",
            ]
        else:
            lines = [
                f"⎧ {self.eq}, r>rb(t),t>0",
                f"⎨ {s}(rb(t),t) = {self.b:g}, t>0",
                f"⎩ √t*∂{s}/∂r(rb(t),t) = {self.d_dob:g}, t>0",
                f"with rb(t) = {self.ob:g}*√t",
            ]
        return "\n".join(lines)


@dataclass(frozen=True, slots=True)
class DirichletProblem(Problem):
    """Problem with imposed initial and boundary values.

    Parameters
    ----------
    eq : Equation or callable
        Governing equation, or a diffusivity function (planar diffusion).
    i : float
        Initial value.
    b : float
        Boundary value.
    ob : float, default 0
        Boundary constant; must be positive for radial equations.

    Examples
    --------
    >>> prob = DirichletProblem(lambda u: u**4, i=1.0, b=2.0)
    >>> prob.monotonicity()
    -1
    """

    eq: Equation | MaterialFunction
    i: float
    b: float
    ob: float = 0.0

    def __post_init__(self) -> None:
        self._set("eq", as_equation(self.eq))
        self._set("i", float(self.i))
        self._set("b", float(self.b))
        self._set("ob", float(self.ob))
        _check_ob(self.eq, self.ob)

    def monotonicity(self) -> int:
        return _sign(self.i - self.b)

    def to_cauchy(self, d_dob: float) -> CauchyProblem:
        """Trial Cauchy problem for a guessed boundary ``o``-derivative."""
        return CauchyProblem(self.eq, b=self.b, d_dob=d_dob, ob=self.ob)

    def __str__(self) -> str:
        return _render(self.eq, self.ob, self.i, self.eq.sym, self.b)


@dataclass(frozen=True, slots=True)
class FlowrateProblem(Problem):
    """Radial (polar/cylindrical) problem with an imposed boundary flow rate.

    Parameters
    ----------
    eq : Equation
        Governing equation; must have ``dim == 2``.
    i : float
        Initial value.
    Qb : float
        Imposed flow rate through the boundary (positive means inflow).
    angle : float, default 2*pi
        Total angle covered by the domain, ``0 < angle <= 2*pi``.
    height : float, default 1
        Domain height.
    ob : float, default 0
        Boundary constant. ``ob = 0`` (a point source) is allowed; the solver
        then places the boundary at a small ``obtol`` instead.
    """

    eq: Equation
    i: float
    Qb: float
    angle: float = 2 * math.pi
    height: float = 1.0
    ob: float = 0.0

    def __post_init__(self) -> None:
        if not isinstance(self.eq, Equation) or self.eq.dim != 2:
            raise ValueError("FlowrateProblem requires an equation with dim=2")
        if not 0 < self.angle <= 2 * math.pi:
            raise ValueError("angle must be in (0, 2*pi]")
        if not self.height > 0:
            raise ValueError("height must be > 0")
        if not self.ob >= 0:
            raise ValueError("ob must be >= 0")
        self._set("i", float(self.i))
        self._set("Qb", float(self.Qb))
        self._set("ob", float(self.ob))

    @property
    def flux_mul_r(self) -> float:
        """Boundary flux times radius, ``Qb/(angle*height)``."""
        return self.Qb / (self.angle * self.height)

    def monotonicity(self) -> int:
        return -_sign(self.Qb)

    def to_cauchy(self, b: float, ob: float | None = None) -> CauchyProblem:
        """Trial Cauchy problem for a guessed boundary value.

        ``ob`` overrides the boundary constant (needed when ``self.ob == 0``).
        """
        ob = self.ob if ob is None else float(ob)
        if not ob > 0:
            raise ValueError("a positive ob is needed to impose a flow rate")
        d_dob = flowrate_to_d_do(self.eq, b, ob, self.flux_mul_r)
        return CauchyProblem(self.eq, b=b, d_dob=d_dob, ob=ob)

    def __str__(self) -> str:
        return _render(self.eq, self.ob, self.i, "Qb", self.Qb)


@dataclass(frozen=True, slots=True)
class SorptivityCauchyProblem(Problem):
    """Problem with imposed boundary value and sorptivity.

    Equivalent to a :class:`CauchyProblem` with
    ``d_dob = -S/(2*flow_diffusivity(b))``.
    """

    eq: Equation | MaterialFunction
    b: float
    S: float
    ob: float = 0.0

    def __post_init__(self) -> None:
        self._set("eq", as_equation(self.eq))
        self._set("b", float(self.b))
        self._set("S", float(self.S))
        self._set("ob", float(self.ob))
        _check_ob(self.eq, self.ob)

    def monotonicity(self) -> int:
        return -_sign(self.S)

    def to_cauchy(self) -> CauchyProblem:
        d_dob = sorptivity_to_d_do(self.eq, self.b, self.S)
        return CauchyProblem(self.eq, b=self.b, d_dob=d_dob, ob=self.ob)

    def __str__(self) -> str:
        s = self.eq.sym
        where = "0" if self.ob == 0 else "rb(t)"
        lines = [
            f"⎧ {self.eq}, r>{where},t>0",
            f"⎨ {s}({where},t) = {self.b:g}, t>0",
            f"⎩ S = {self.S:g}",
        ]
        if self.ob != 0:
            lines.append(f"with rb(t) = {self.ob:g}*√t")
        return "\n".join(lines)


@dataclass(frozen=True, slots=True)
class SorptivityProblem(Problem):
    """Problem with imposed initial value and sorptivity; the boundary value is unknown."""

    eq: Equation | MaterialFunction
    i: float
    S: float
    ob: float = 0.0

    def __post_init__(self) -> None:
        self._set("eq", as_equation(self.eq))
        self._set("i", float(self.i))
        self._set("S", float(self.S))
        self._set("ob", float(self.ob))
        _check_ob(self.eq, self.ob)

    def monotonicity(self) -> int:
        return -_sign(self.S)

    def to_cauchy(self, b: float) -> CauchyProblem:
        """Trial Cauchy problem for a guessed boundary value."""
        d_dob = sorptivity_to_d_do(self.eq, b, self.S)
        return CauchyProblem(self.eq, b=b, d_dob=d_dob, ob=self.ob)

    def __str__(self) -> str:
        return _render(self.eq, self.ob, self.i, "S", self.S)
