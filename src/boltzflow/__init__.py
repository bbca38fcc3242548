"""
boltzflow

Similarity solutions of nonlinear diffusion problems in semi-infinite
domains, obtained with the Boltzmann transformation ``o = r/sqrt(t)``.

This package exposes the main user-facing objects at the top level, so you
can write, for example:

    from boltzflow import DirichletProblem, solve
"""

from .boltzmann import boltzmann, flowrate_to_d_do, o, sorptivity_to_d_do
from .config import IntegratorConfig, ShootingConfig
from .equations import (
    DiffusionEquation,
    Equation,
    RichardsEquation,
    diffusivity,
    flow_diffusivity,
    isindomain,
)
from .exceptions import DomainError, SolvingError
from .problems import (
    CauchyProblem,
    DirichletProblem,
    FlowrateProblem,
    SorptivityCauchyProblem,
    SorptivityProblem,
    monotonicity,
)
from .solution import Solution
from .solvers import BoltzmannODE, available_algorithms, register_algorithm, solve
from .types import ReturnCode

__all__ = [
    # Equations
    "Equation",
    "DiffusionEquation",
    "RichardsEquation",
    "isindomain",
    "diffusivity",
    "flow_diffusivity",
    # Transformation
    "o",
    "boltzmann",
    "sorptivity_to_d_do",
    "flowrate_to_d_do",
    # Problems
    "DirichletProblem",
    "FlowrateProblem",
    "CauchyProblem",
    "SorptivityCauchyProblem",
    "SorptivityProblem",
    "monotonicity",
    # Solving
    "solve",
    "BoltzmannODE",
    "register_algorithm",
    "available_algorithms",
    "Solution",
    "ReturnCode",
    # Configuration and errors
    "IntegratorConfig",
    "ShootingConfig",
    "DomainError",
    "SolvingError",
]
