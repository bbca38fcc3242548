"""Governing equations.

Two kinds of nonlinear diffusion equations are supported, both in one space
dimension, optionally radial:

- :class:`DiffusionEquation`: ``u_t = (1/r^k) (r^k D(u) u_r)_r``
- :class:`RichardsEquation`: ``C(h) h_t = (1/r^k) (r^k K(h) h_r)_r``

with ``k = dim - 1``. Internally both are handled through the same
conductivity/capacity pair; a diffusion equation is the special case
``K = D``, ``C = 1``.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import ClassVar

from .numerics.diff import ForwardDerivatives

MaterialFunction = Callable[[float], float]

_DIM_WORDS = {1: "", 2: "r*", 3: "r²*"}
_DIM_PREFIX = {1: "", 2: "1/r*", 3: "1/r²*"}


def _check_dim(dim: int) -> None:
    if isinstance(dim, bool) or not isinstance(dim, int):
        raise TypeError(f"dim must be an int, got {type(dim).__name__}")
    if dim not in (1, 2, 3):
        raise ValueError("dim must be 1 (planar), 2 (polar/cylindrical) or 3 (spherical)")


def _name(f) -> str:
    return getattr(f, "__name__", None) or repr(f)


class Equation(ABC):
    """Base class for the equations solved by this package.

    Subclasses are frozen dataclasses that define at least

    - ``dim``: number of spatial dimensions, 1 for a planar problem, 2 for
      radial flow in polar/cylindrical coordinates, 3 for spherical
      coordinates;
    - ``sym``: symbol used for the unknown when printing.
    """

    __slots__ = ()

    dim: int
    sym: str

    kind: ClassVar[str] = "equation"

    @property
    def k(self) -> int:
        """Coefficient of the radial ``k/o`` term (``dim - 1``)."""
        return self.dim - 1

    @property
    def radial(self) -> bool:
        return self.dim != 1

    # Capability interface -------------------------------------------------

    @abstractmethod
    def conductivity(self, val: float) -> float: ...

    @abstractmethod
    def capacity(self, val: float) -> float: ...

    @abstractmethod
    def conductivity_derivatives(self, val: float, order: int = 1) -> tuple[float, ...]:
        """``(K, K')`` or ``(K, K', K'')`` at ``val``."""

    @abstractmethod
    def capacity_derivative(self, val: float) -> tuple[float, float]:
        """``(C, C')`` at ``val``."""

    def diffusivity(self, val: float) -> float:
        return self.conductivity(val) / self.capacity(val)

    def flow_diffusivity(self, val: float) -> float:
        """Diffusivity used for flow quantities (flux, sorptivity)."""
        return self.conductivity(val)


@dataclass(frozen=True, slots=True)
class DiffusionEquation(Equation):
    """Nonlinear diffusion equation ``u_t = div(D(u) grad u)``.

    Parameters
    ----------
    D : callable
        Diffusivity function. Must be differentiable with ``jax`` (use
        ``jax.numpy`` for elementary functions).
    dim : int, default 1
        1 (planar), 2 (polar/cylindrical) or 3 (spherical).
    sym : str, default "theta"
        Symbol for the unknown.
    jit : bool, default True
        JIT-compile the derivative evaluators.

    Examples
    --------
    >>> import jax.numpy as jnp
    >>> eq = DiffusionEquation(lambda u: 0.5 * (1 - jnp.log(u)))
    >>> eq.diffusivity(1.0)
    0.5
    """

    D: MaterialFunction | None = None
    dim: int = 1
    sym: str = "theta"
    jit: bool = True
    _dD: ForwardDerivatives = field(init=False, repr=False, compare=False)
    _d2D: ForwardDerivatives = field(init=False, repr=False, compare=False)

    kind: ClassVar[str] = "diffusion"

    def __post_init__(self) -> None:
        if not callable(self.D):
            raise TypeError("D must be callable")
        _check_dim(self.dim)
        object.__setattr__(self, "_dD", ForwardDerivatives(self.D, 1, jit=self.jit))
        object.__setattr__(self, "_d2D", ForwardDerivatives(self.D, 2, jit=self.jit))

    def conductivity(self, val: float) -> float:
        return float(self.D(val))

    def capacity(self, val: float) -> float:
        return 1.0

    def diffusivity(self, val: float) -> float:
        return float(self.D(val))

    def conductivity_derivatives(self, val: float, order: int = 1) -> tuple[float, ...]:
        return self._dD(val) if order == 1 else self._d2D(val)

    def capacity_derivative(self, val: float) -> tuple[float, float]:
        return 1.0, 0.0

    def __str__(self) -> str:
        s = self.sym
        return (
            f"∂{s}/∂t = {_DIM_PREFIX[self.dim]}∂({_DIM_WORDS[self.dim]}"
            f"{_name(self.D)}({s})*∂{s}/∂r)/∂r"
        )


@dataclass(frozen=True, slots=True)
class RichardsEquation(Equation):
    """Horizontal Richards equation, pressure-head formulation.

    ``C(h) h_t = div(K(h) grad h)``

    Parameters
    ----------
    C : callable or float
        Hydraulic capacity, as a function of the unknown (or a constant).
    K : callable
        Hydraulic conductivity, as a function of the unknown.
    dim : int, default 1
        1 (planar), 2 (polar/cylindrical) or 3 (spherical).
    sym : str, default "h"
        Symbol for the unknown.
    jit : bool, default True
        JIT-compile the derivative evaluators.
    """

    C: MaterialFunction | float | None = None
    K: MaterialFunction | None = None
    dim: int = 1
    sym: str = "h"
    jit: bool = True
    _dK: ForwardDerivatives = field(init=False, repr=False, compare=False)
    _d2K: ForwardDerivatives = field(init=False, repr=False, compare=False)
    _dC: ForwardDerivatives = field(init=False, repr=False, compare=False)

    kind: ClassVar[str] = "richards"

    def __post_init__(self) -> None:
        if not callable(self.K):
            raise TypeError("K must be callable")
        if self.C is None:
            raise TypeError("C must be callable or a number")
        _check_dim(self.dim)
        object.__setattr__(self, "_dK", ForwardDerivatives(self.K, 1, jit=self.jit))
        object.__setattr__(self, "_d2K", ForwardDerivatives(self.K, 2, jit=self.jit))
        object.__setattr__(self, "_dC", ForwardDerivatives(self.C, 1, jit=self.jit))

    def conductivity(self, val: float) -> float:
        return float(self.K(val))

    def capacity(self, val: float) -> float:
        return float(self.C(val)) if callable(self.C) else float(self.C)

    def conductivity_derivatives(self, val: float, order: int = 1) -> tuple[float, ...]:
        return self._dK(val) if order == 1 else self._d2K(val)

    def capacity_derivative(self, val: float) -> tuple[float, float]:
        return self._dC(val)

    def __str__(self) -> str:
        s = self.sym
        C = f"{_name(self.C)}({s})" if callable(self.C) else f"{self.C:g}"
        return (
            f"{C}*∂{s}/∂t = {_DIM_PREFIX[self.dim]}∂({_DIM_WORDS[self.dim]}"
            f"{_name(self.K)}({s})*∂{s}/∂r)/∂r"
        )


def as_equation(eq: Equation | MaterialFunction) -> Equation:
    """Accept a bare diffusivity function as shorthand for a planar equation."""
    if isinstance(eq, Equation):
        return eq
    if callable(eq):
        return DiffusionEquation(eq)
    raise TypeError(f"expected an Equation or a diffusivity function, got {eq!r}")


def isindomain(eq: Equation, val: float) -> bool:
    """True if ``eq`` is well defined for the solution value ``val``.

    The conductivity must be positive and finite at ``val`` and its derivative
    must be finite. Evaluation errors count as "not in the domain".
    """
    try:
        K, dK = eq.conductivity_derivatives(val)
    except (ArithmeticError, ValueError):
        return False
    return valid_conductivity(K, dK)


def valid_conductivity(K: float, dK: float) -> bool:
    return K > 0 and math.isfinite(K) and math.isfinite(dK)


def diffusivity(eq: Equation, val: float) -> float:
    return eq.diffusivity(val)


def flow_diffusivity(eq: Equation, val: float) -> float:
    return eq.flow_diffusivity(val)
