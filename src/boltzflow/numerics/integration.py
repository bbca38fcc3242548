"""Event-driven integration of the Boltzmann ODE.

:class:`BoltzmannIntegrator` steps :class:`scipy.integrate.Radau` (a 5th-order
implicit Radau IIA method; the transformed ODE gets stiff wherever ``C/K``
varies strongly) forward from the boundary ``o = ob`` and checks two
conditions after every accepted step:

- *settled*: ``sign(d_dob) * v <= 0``. The ``o``-derivative crossed zero, so
  the current ``u`` is the value the trajectory settles at (the implied
  initial condition).
- *past limit* (optional): ``sign(d_dob) * u > sign(d_dob) * limit`` with
  ``limit = i + sign(d_dob) * itol``. Used while shooting to abandon a trial
  as soon as it overshoots the target initial value.

One integrator is owned by one solve call and reused across shooting trials
through :meth:`BoltzmannIntegrator.reinit`.
"""

from __future__ import annotations

import logging

import numpy as np
from numpy.typing import NDArray
from scipy.integrate import OdeSolution, Radau

from ..boltzmann import BoltzmannODEFunction, boltzmann
from ..config import IntegratorConfig
from ..equations import Equation
from ..types import IntegrationStatus

logger = logging.getLogger(__name__)


def _sign(x: float) -> int:
    return (x > 0) - (x < 0)


class BoltzmannIntegrator:
    """Reusable Radau integrator for the Boltzmann ODE of one equation.

    Parameters
    ----------
    eq:
        Governing equation.
    i:
        Target initial value for the past-limit condition, or ``None`` to
        integrate until settled.
    itol:
        Overshoot tolerance for the past-limit condition.
    config:
        Integrator tolerances and step cap.

    Notes
    -----
    Not thread-safe; never share an instance between concurrent solves.
    """

    def __init__(
        self,
        eq: Equation,
        *,
        i: float | None = None,
        itol: float = 0.0,
        config: IntegratorConfig | None = None,
    ) -> None:
        self.odefun: BoltzmannODEFunction = boltzmann(eq)
        self.config = config if config is not None else IntegratorConfig()
        self.i = None if i is None else float(i)
        self.itol = float(itol)

        self._ts: list[float] = []
        self._ys: list[NDArray[np.floating]] = []
        self._interpolants: list = []
        self._solver: Radau | None = None
        self.direction = 0
        self.status = IntegrationStatus.RUNNING
        self.message: str | None = None

    @classmethod
    def init(cls, prob, *, i: float | None = None, itol: float = 0.0, config=None):
        """Create an integrator positioned at the boundary state of ``prob``.

        ``prob`` is a :class:`~boltzflow.problems.CauchyProblem` or anything
        with a no-argument ``to_cauchy()``.
        """
        cauchy = prob.to_cauchy()
        integrator = cls(cauchy.eq, i=i, itol=itol, config=config)
        return integrator.reinit(cauchy.b, cauchy.d_dob, ob=cauchy.ob)

    @property
    def equation(self) -> Equation:
        return self.odefun.eq

    @property
    def limit(self) -> float | None:
        if self.i is None:
            return None
        return self.i + self.direction * self.itol

    def reinit(self, b: float, d_dob: float, *, ob: float | None = None):
        """Restart from a new boundary state, discarding the previous trajectory."""
        if ob is None:
            if not self._ts:
                raise RuntimeError("ob is required on the first reinit()")
            ob = self._ts[0]
        ob = float(ob)

        self._ts.clear()
        self._ys.clear()
        self._interpolants.clear()

        y0 = np.array([float(b), float(d_dob)])
        self._ts.append(ob)
        self._ys.append(y0)
        self._solver = Radau(
            self.odefun.rhs,
            ob,
            y0,
            np.inf,
            rtol=self.config.rtol,
            atol=self.config.atol,
            jac=self.odefun.jac,
        )
        self.direction = _sign(float(d_dob))
        self.status = IntegrationStatus.RUNNING
        self.message = None
        return self

    def run(self):
        """Step until settled, past the limit, out of steps, or failed."""
        solver = self._solver
        if solver is None:
            raise RuntimeError("call reinit() before run()")

        direction = self.direction
        limit = self.limit

        for _ in range(self.config.max_steps):
            message = solver.step()
            if solver.status == "failed":
                self.status = IntegrationStatus.FAILED
                self.message = message
                break

            self._ts.append(float(solver.t))
            self._ys.append(solver.y.copy())
            self._interpolants.append(solver.dense_output())

            u, v = solver.y
            if direction * v <= 0:
                self.status = IntegrationStatus.SETTLED
                break
            if limit is not None and direction * u > direction * limit:
                self.status = IntegrationStatus.PAST_LIMIT
                break
        else:
            self.status = IntegrationStatus.MAX_STEPS

        logger.debug(
            "Boltzmann ODE run from o=%g: %s after %d steps (o=%g, u=%g)",
            self._ts[0],
            self.status.value,
            self.nsteps,
            self._ts[-1],
            self._ys[-1][0],
        )
        return self

    # Trajectory access ----------------------------------------------------

    @property
    def nsteps(self) -> int:
        return len(self._interpolants)

    @property
    def o(self) -> NDArray[np.floating]:
        return np.asarray(self._ts, dtype=float)

    @property
    def u(self) -> NDArray[np.floating]:
        return np.asarray([y[0] for y in self._ys], dtype=float)

    @property
    def d_do(self) -> NDArray[np.floating]:
        return np.asarray([y[1] for y in self._ys], dtype=float)

    @property
    def u_end(self) -> float:
        return float(self._ys[-1][0])

    def dense_output(self) -> OdeSolution | None:
        """Continuous trajectory over ``[ob, o_end]``, or ``None`` if no step was taken."""
        if not self._interpolants:
            return None
        return OdeSolution(list(self._ts), list(self._interpolants))
