"""Solver algorithms and the :func:`solve` entry point."""

from .base import (
    SolverAlgorithm,
    available_algorithms,
    register_algorithm,
    resolve_algorithm,
    solve,
)
from .shooting import BoltzmannODE

__all__ = [
    "SolverAlgorithm",
    "BoltzmannODE",
    "solve",
    "register_algorithm",
    "available_algorithms",
    "resolve_algorithm",
]
