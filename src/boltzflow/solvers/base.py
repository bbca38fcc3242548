"""Solver algorithms, a small registry and the :func:`solve` entry point.

This module provides two things:

1) A lightweight *algorithm interface* (:class:`SolverAlgorithm`) so that
   :func:`solve` can call different solvers in a uniform way. Any object with
   a ``name`` and a ``solve(problem, config)`` method returning a
   :class:`~boltzflow.solution.Solution` qualifies.
2) A string-to-algorithm *registry* so users can do
   ``solve(prob, "shooting")`` or plug in their own solvers (e.g.
   finite-difference or pseudospectral ones) without editing :func:`solve`.

The only built-in algorithm is the shooting method on the Boltzmann ODE.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from ..config import ShootingConfig
from ..exceptions import SolvingError
from ..problems import Problem
from ..solution import Solution
from .shooting import BoltzmannODE

logger = logging.getLogger(__name__)


@runtime_checkable
class SolverAlgorithm(Protocol):
    """An algorithm that turns a problem into a :class:`Solution`."""

    @property
    def name(self) -> str:  # pragma: no cover
        ...

    def solve(self, problem: Problem, config: ShootingConfig) -> Solution:  # pragma: no cover
        ...


# -----------------------------
# Registry
# -----------------------------

AlgorithmFactory = Callable[[], SolverAlgorithm]
_ALGORITHM_REGISTRY: dict[str, AlgorithmFactory] = {}


def register_algorithm(
    name: str,
    factory: AlgorithmFactory,
    *,
    overwrite: bool = False,
    aliases: tuple[str, ...] = (),
) -> None:
    """Register an algorithm factory under one or more names.

    Parameters
    ----------
    name:
        Primary key users will pass to ``solve(..., algorithm=...)``.
    factory:
        Callable returning a new algorithm instance.
    overwrite:
        If False (default), raise if ``name`` or any alias already exists.
    aliases:
        Additional strings that should resolve to the same factory.
    """

    keys = (name, *aliases)
    for k in keys:
        kk = str(k).lower().strip()
        if not kk:
            raise ValueError("Algorithm name/alias cannot be empty")
        if (not overwrite) and (kk in _ALGORITHM_REGISTRY):
            raise KeyError(f"Algorithm '{kk}' is already registered")
        _ALGORITHM_REGISTRY[kk] = factory


def available_algorithms() -> list[str]:
    """Return the currently registered algorithm keys (sorted)."""

    return sorted(_ALGORITHM_REGISTRY.keys())


def resolve_algorithm(algorithm: str | SolverAlgorithm | None) -> SolverAlgorithm:
    """Resolve the user's algorithm choice into a concrete :class:`SolverAlgorithm`.

    ``None`` selects ``"boltzmann_ode"``; instances are returned as they are;
    strings are looked up in the registry (case-insensitive).
    """

    if algorithm is None:
        algorithm = "boltzmann_ode"

    if isinstance(algorithm, SolverAlgorithm):
        return algorithm

    key = str(algorithm).lower().strip()
    try:
        factory = _ALGORITHM_REGISTRY[key]
    except KeyError as e:
        raise ValueError(
            f"Unknown algorithm '{algorithm}'. Available: {', '.join(available_algorithms())}"
        ) from e
    return factory()


def solve(
    problem: Problem,
    algorithm: str | SolverAlgorithm | None = None,
    *,
    itol: float = 1e-3,
    maxiters: int = 100,
    obtol: float = 1e-6,
    raise_on_failure: bool = True,
) -> Solution:
    """Solve ``problem`` and return its :class:`Solution`.

    Parameters
    ----------
    problem:
        Any problem from :mod:`boltzflow.problems`.
    algorithm:
        Algorithm instance or registered name; defaults to the shooting
        method (:class:`~boltzflow.solvers.shooting.BoltzmannODE`).
    itol:
        Absolute tolerance on the initial value.
    maxiters:
        Maximum number of shooting trials.
    obtol:
        Boundary constant used for radial flow rate problems posed with
        ``ob = 0``.
    raise_on_failure:
        If True (default), raise :class:`SolvingError` when no acceptable
        solution is found. If False, return the best-effort solution; check
        ``solution.success`` or ``solution.retcode``.

    Raises
    ------
    ValueError
        Invalid tolerances or hints.
    DomainError
        Boundary or initial value outside the domain of the equation.
    SolvingError
        No solution found and ``raise_on_failure`` is True.
    """

    config = ShootingConfig(itol=itol, maxiters=maxiters, obtol=obtol)
    alg = resolve_algorithm(algorithm)

    solution = alg.solve(problem, config)
    logger.debug(
        "%s: %s after %d iterations", alg.name, solution.retcode.value, solution.iterations
    )

    if raise_on_failure and not solution.success:
        raise SolvingError(
            f"{alg.name} failed to solve the problem ({solution.retcode.value} "
            f"after {solution.iterations} iterations)"
        )
    return solution


def _register_builtin_algorithms() -> None:
    register_algorithm(
        "boltzmann_ode",
        BoltzmannODE,
        overwrite=True,
        aliases=("shooting",),
    )


_register_builtin_algorithms()
