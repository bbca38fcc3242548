"""Pytest helpers for the boltzflow library."""

from __future__ import annotations

import jax.numpy as jnp
import numpy as np
import pytest

from boltzflow import DiffusionEquation


@pytest.fixture
def exact_D():
    """Diffusivity with the closed-form solution ``u(o) = exp(-o)`` for i=0, b=1.

    Reference: Philip (1960), Table 1, No. 13. https://doi.org/10.1071/PH600001
    """

    def D(u):
        return 0.5 * (1 - jnp.log(u))

    return D


@pytest.fixture
def identity():
    def D(u):
        return u

    return D


@pytest.fixture
def radial_identity(identity) -> DiffusionEquation:
    """``D(u) = u`` in polar coordinates."""
    return DiffusionEquation(identity, dim=2)


@pytest.fixture
def o_grid() -> np.ndarray:
    return np.linspace(0.0, 20.0, 100)
