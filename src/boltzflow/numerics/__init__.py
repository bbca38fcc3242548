# src/boltzflow/numerics/__init__.py
"""
Numerical building blocks (advanced API).

Top-level package `boltzflow` exposes the everyday solving API.
This subpackage exposes reusable numerical primitives. The ODE integrator
lives in :mod:`boltzflow.numerics.integration` and is imported from there.
"""

from .diff import ForwardDerivatives
from .root_finding import (
    BracketBisect,
    NoConvergenceError,
    RootFindingError,
    RootResult,
    SearchPhase,
    bracket_bisect_method,
)

__all__ = [
    # Automatic differentiation
    "ForwardDerivatives",
    # Root finding
    "BracketBisect",
    "SearchPhase",
    "RootResult",
    "RootFindingError",
    "NoConvergenceError",
    "bracket_bisect_method",
]
