from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

# ---------------------------
# Results + Exceptions
# ---------------------------


@dataclass(frozen=True, slots=True)
class RootResult:
    root: float
    converged: bool
    iterations: int
    method: str
    f_at_root: float
    bracket: tuple[float, float] | None = None


class RootFindingError(Exception):
    """Base class for root-finding failures."""


class NoConvergenceError(RootFindingError):
    """Raised when the method fails to converge within max_iter."""


def _sign(y: float) -> float:
    # 0 for zero and NaN
    if y > 0:
        return 1.0
    if y < 0:
        return -1.0
    return 0.0


class SearchPhase(str, Enum):
    SEED = "seed"
    BRACKET = "bracket"
    BISECT = "bisect"


# ---------------------------
# Resumable bracket + bisect engine
# ---------------------------


class BracketBisect:
    """Restartable bracket-then-bisect root search driven by external samples.

    The engine never evaluates the residual itself. The caller asks for the
    next abscissa with :meth:`request`, evaluates its residual however it
    likes, and hands the value back with :meth:`feed`, which returns the next
    abscissa to try::

        search = BracketBisect(0.0, x_hint, ya=y0)
        x = search.request()
        while True:
            y = residual(x)
            if abs(y) <= tol:
                break
            x = search.feed(y)

    Phases
    ------
    SEED
        Collect whichever of ``ya``/``yb`` was not supplied (``xa`` first).
    BRACKET
        While ``ya`` and ``yb`` share a sign, extrapolate
        ``x = xb + growth_factor * (xb - xa)`` and shift the pair.
    BISECT
        Query the midpoint and keep the bound whose residual has the same
        sign. There is no stopping criterion; the caller stops asking.

    Only the sign of the residual is used, so infinite residuals are fine.

    Raises
    ------
    ValueError
        If ``xa == xb``, ``growth_factor < 1`` or a seed residual is zero
        (a zero seed already is a root and must be handled by the caller).
    """

    __slots__ = ("xa", "xb", "ya", "yb", "growth_factor", "phase", "_x")

    def __init__(
        self,
        xa: float,
        xb: float,
        ya: float | None = None,
        yb: float | None = None,
        *,
        growth_factor: float = 2.0,
    ) -> None:
        if xa == xb:
            raise ValueError("Require xa != xb.")
        if growth_factor < 1.0:
            raise ValueError("Require growth_factor >= 1.")

        self.xa = float(xa)
        self.xb = float(xb)
        self.ya = None if ya is None else float(ya)
        self.yb = None if yb is None else float(yb)
        self.growth_factor = float(growth_factor)
        self.phase = SearchPhase.SEED
        self._x = 0.0
        self._advance()

    @property
    def bracket(self) -> tuple[float, float]:
        return self.xa, self.xb

    def request(self) -> float:
        """Abscissa whose residual is expected by the next :meth:`feed`."""
        return self._x

    def feed(self, y: float) -> float:
        """Record the residual of the pending abscissa and return the next one."""
        y = float(y)
        x = self._x

        if self.phase is SearchPhase.SEED:
            if self.ya is None:
                self.ya = y
            else:
                self.yb = y
        elif self.phase is SearchPhase.BRACKET:
            self.xa, self.xb = self.xb, x
            self.ya, self.yb = self.yb, y
        else:
            if _sign(y) == _sign(self.ya):
                self.xa, self.ya = x, y
            else:
                self.xb, self.yb = x, y

        self._advance()
        return self._x

    def _advance(self) -> None:
        if self.phase is SearchPhase.SEED:
            if self.ya is None:
                self._x = self.xa
                return
            if self.yb is None:
                self._x = self.xb
                return
            if self.ya == 0.0 or self.yb == 0.0:
                raise ValueError("Seed residuals must be nonzero.")
            if math.isnan(self.ya) or math.isnan(self.yb):
                raise ValueError("Seed residuals must not be NaN.")
            self.phase = SearchPhase.BRACKET

        if self.phase is SearchPhase.BRACKET:
            if _sign(self.ya) == _sign(self.yb):
                self._x = self.xb + self.growth_factor * (self.xb - self.xa)
                return
            self.phase = SearchPhase.BISECT

        self._x = (self.xa + self.xb) / 2.0

    def __repr__(self) -> str:
        return (
            f"BracketBisect(phase={self.phase.value}, xa={self.xa!r}, xb={self.xb!r}, "
            f"ya={self.ya!r}, yb={self.yb!r})"
        )


# ---------------------------
# Callable driver (unified signature)
# ---------------------------


def bracket_bisect_method(
    Fn: Callable[[float], float],
    xa: float,
    xb: float,
    *,
    ya: float | None = None,
    growth_factor: float = 2.0,
    tol_f: float = 1e-8,
    max_iter: int = 200,
) -> RootResult:
    """Find a root of ``Fn`` by expanding ``[xa, xb]`` outward and bisecting.

    Convenience wrapper that feeds :class:`BracketBisect` from a callable.
    Every evaluation of ``Fn`` counts as one iteration.

    Raises
    ------
    NoConvergenceError
        If ``|Fn(x)| > tol_f`` for every one of the ``max_iter`` evaluations.
    """
    if ya is not None and abs(ya) <= tol_f:
        return RootResult(
            root=float(xa),
            converged=True,
            iterations=0,
            method="bracket_bisect",
            f_at_root=float(ya),
            bracket=(float(xa), float(xb)),
        )

    search = BracketBisect(xa, xb, ya=ya, growth_factor=growth_factor)
    x = search.request()

    for it in range(1, max_iter + 1):
        fx = float(Fn(x))
        if abs(fx) <= tol_f:
            return RootResult(
                root=x,
                converged=True,
                iterations=it,
                method="bracket_bisect",
                f_at_root=fx,
                bracket=search.bracket,
            )
        x = search.feed(fx)

    raise NoConvergenceError("Bracket-bisect did not converge within max_iter.")
