"""Shooting method on the Boltzmann ODE.

Problems with a condition at ``o -> inf`` (the initial value ``i``) are
reduced to a sequence of Cauchy problems. Each trial guesses the missing
boundary quantity, integrates until the trajectory settles, and compares the
settled value with ``i``. :class:`~boltzflow.numerics.root_finding.BracketBisect`
proposes the next guess from the sign of the mismatch.

- :class:`~boltzflow.problems.DirichletProblem`: unknown ``d_dob``.
- :class:`~boltzflow.problems.FlowrateProblem` and
  :class:`~boltzflow.problems.SorptivityProblem`: unknown ``b``; ``d_dob``
  follows from the imposed quantity and the trial ``b``.

References
----------
Gerlero, G. S.; Berli, C. L. A.; Kler, P. A. Open-source high-performance
software packages for direct and inverse solving of horizontal capillary
flow. Capillarity, 2023, 6(2), 31-40.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field

from ..config import IntegratorConfig, ShootingConfig
from ..equations import Equation, isindomain
from ..exceptions import DomainError
from ..numerics.integration import BoltzmannIntegrator
from ..numerics.root_finding import BracketBisect
from ..problems import (
    CauchyProblem,
    DirichletProblem,
    FlowrateProblem,
    Problem,
    SorptivityCauchyProblem,
    SorptivityProblem,
)
from ..solution import Solution
from ..types import IntegrationStatus, ReturnCode

logger = logging.getLogger(__name__)

_EVAL_ERRORS = (ArithmeticError, ValueError)

_RETCODES = {
    IntegrationStatus.SETTLED: ReturnCode.SUCCESS,
    IntegrationStatus.MAX_STEPS: ReturnCode.MAX_ITERS,
    IntegrationStatus.FAILED: ReturnCode.FAILURE,
}


def _sign(x: float) -> int:
    return (x > 0) - (x < 0)


def _check_boundary(eq: Equation, b: float) -> None:
    if not isindomain(eq, b):
        raise DomainError(b, "boundary value is outside the domain of the equation")


def _check_initial(eq: Equation, i: float, direction: int, itol: float) -> None:
    # i itself may sit on the edge of the domain (e.g. i=0 for D(u)=u)
    if not (isindomain(eq, i) or isindomain(eq, i - direction * itol)):
        raise DomainError(i, "initial value is outside the domain of the equation")


def d_dob_hint(eq: Equation, i: float, b: float) -> float:
    """First guess for the boundary ``o``-derivative of a Dirichlet problem.

    ``(i - b)/(2*sqrt(D(b)))``, the derivative of a profile that relaxes from
    ``b`` to ``i`` over ``o ~ 2*sqrt(D(b))``. Falls back to the flow
    diffusivity, then to ``i - b``, if ``D(b)`` is not positive and finite.
    """
    for D in (eq.diffusivity, eq.flow_diffusivity):
        try:
            d = D(b)
        except _EVAL_ERRORS:
            continue
        if math.isfinite(d) and d > 0:
            return (i - b) / (2 * math.sqrt(d))
    return i - b


@dataclass(frozen=True, slots=True)
class BoltzmannODE:
    """Shooting algorithm on the Boltzmann-transformed ODE.

    Parameters
    ----------
    b_hint:
        Optional first guess for the boundary value (flow rate and
        sorptivity problems). Must lie on the side of ``i`` implied by the
        problem's monotonicity.
    d_dob_hint:
        Optional first guess for the boundary ``o``-derivative (Dirichlet
        problems). Must have the sign of ``i - b``.
    integrator:
        Tolerances and step cap of each ODE run.
    """

    b_hint: float | None = None
    d_dob_hint: float | None = None
    integrator: IntegratorConfig = field(default_factory=IntegratorConfig)

    @property
    def name(self) -> str:
        return "boltzmann_ode"

    def solve(self, problem: Problem, config: ShootingConfig | None = None) -> Solution:
        config = config if config is not None else ShootingConfig()

        if isinstance(problem, (CauchyProblem, SorptivityCauchyProblem)):
            return self._solve_cauchy(problem)
        if isinstance(problem, DirichletProblem):
            return self._solve_dirichlet(problem, config)
        if isinstance(problem, FlowrateProblem):
            ob = problem.ob if problem.ob > 0 else config.obtol
            return self._solve_boundary_value(
                problem, lambda b: problem.to_cauchy(b, ob=ob), ob, config
            )
        if isinstance(problem, SorptivityProblem):
            return self._solve_boundary_value(problem, problem.to_cauchy, problem.ob, config)

        raise TypeError(f"{self.name} cannot solve {type(problem).__name__}")

    # Single integration ---------------------------------------------------

    def _solve_cauchy(self, problem: CauchyProblem | SorptivityCauchyProblem) -> Solution:
        _check_boundary(problem.eq, problem.b)
        integrator = BoltzmannIntegrator.init(problem, config=self.integrator).run()
        return Solution.from_integrator(
            integrator, iterations=0, retcode=_RETCODES[integrator.status]
        )

    @staticmethod
    def _shoot(integrator: BoltzmannIntegrator, trial: CauchyProblem, i: float) -> float:
        """Integrate one trial and return its residual ``u_end - i``.

        Trajectories that do not settle, or settle past the limit, count as
        an infinite overshoot in the direction of the trial.
        """
        integrator.reinit(trial.b, trial.d_dob, ob=trial.ob).run()
        direction = integrator.direction
        if (
            integrator.status is IntegrationStatus.SETTLED
            and direction * integrator.u_end <= direction * integrator.limit
        ):
            return integrator.u_end - i
        return direction * math.inf

    # Search over d_dob ----------------------------------------------------

    def _solve_dirichlet(self, problem: DirichletProblem, config: ShootingConfig) -> Solution:
        eq = problem.eq
        direction = problem.monotonicity()
        _check_boundary(eq, problem.b)
        _check_initial(eq, problem.i, direction, config.itol)

        if abs(problem.b - problem.i) <= config.itol:
            integrator = BoltzmannIntegrator.init(
                problem.to_cauchy(0.0), config=self.integrator
            ).run()
            return Solution.from_integrator(
                integrator, iterations=0, retcode=_RETCODES[integrator.status]
            )

        if self.d_dob_hint is not None:
            if _sign(self.d_dob_hint) != direction:
                raise ValueError(
                    "sign of d_dob_hint must be consistent with the initial and boundary values"
                )
            hint = float(self.d_dob_hint)
        else:
            hint = d_dob_hint(eq, problem.i, problem.b)

        integrator = BoltzmannIntegrator(
            eq, i=problem.i, itol=config.itol, config=self.integrator
        )
        search = BracketBisect(0.0, hint, ya=problem.b - problem.i)

        return self._search(
            integrator,
            search,
            problem.to_cauchy,
            problem.i,
            config,
            variable="d_dob",
        )

    # Search over b --------------------------------------------------------

    def _solve_boundary_value(
        self,
        problem: FlowrateProblem | SorptivityProblem,
        to_cauchy: Callable[[float], CauchyProblem],
        ob: float,
        config: ShootingConfig,
    ) -> Solution:
        eq = problem.eq
        direction = problem.monotonicity()
        _check_initial(eq, problem.i, direction, config.itol)

        integrator = BoltzmannIntegrator(
            eq, i=problem.i, itol=config.itol, config=self.integrator
        )

        def trial(b: float) -> CauchyProblem | None:
            if not isindomain(eq, b):
                return None
            try:
                return to_cauchy(b)
            except _EVAL_ERRORS:
                return None

        def invalid(b: float) -> float:
            # Past the domain edge on the far side of i counts as too far
            if _sign(problem.i - b) == direction:
                return -direction * math.inf
            return direction * math.inf

        if direction == 0:
            cauchy = trial(problem.i)
            if cauchy is None:
                return Solution(None, eq, [ob], [[problem.i, 0.0]], iterations=0)
            self._shoot(integrator, cauchy, problem.i)
            return Solution.from_integrator(
                integrator, iterations=0, retcode=_RETCODES[integrator.status]
            )

        if self.b_hint is not None:
            if _sign(problem.i - self.b_hint) != direction:
                raise ValueError(
                    "sign of b_hint must be consistent with the initial and boundary conditions"
                )
            hint = float(self.b_hint)
        else:
            hint = problem.i - direction

        search = BracketBisect(problem.i, hint)

        return self._search(
            integrator,
            search,
            trial,
            problem.i,
            config,
            variable="b",
            invalid=invalid,
            fallback=(problem.i, ob),
        )

    # Shared loop ----------------------------------------------------------

    def _search(
        self,
        integrator: BoltzmannIntegrator,
        search: BracketBisect,
        trial: Callable[[float], CauchyProblem | None],
        i: float,
        config: ShootingConfig,
        *,
        variable: str,
        invalid: Callable[[float], float] | None = None,
        fallback: tuple[float, float] | None = None,
    ) -> Solution:
        x = search.request()
        shot = False

        for niter in range(1, config.maxiters + 1):
            cauchy = trial(x)
            if cauchy is None:
                resid = invalid(x)
            else:
                resid = self._shoot(integrator, cauchy, i)
                shot = True

            logger.debug("trial %d: %s=%.12g, residual=%g", niter, variable, x, resid)

            if abs(resid) <= config.itol:
                return Solution.from_integrator(
                    integrator, iterations=niter, retcode=ReturnCode.SUCCESS
                )
            x = search.feed(resid)

        logger.debug("no solution within %d trials (%r)", config.maxiters, search)

        if not shot:
            # Best effort: the trajectory of the pending guess
            cauchy = trial(x)
            if cauchy is not None:
                integrator.reinit(cauchy.b, cauchy.d_dob, ob=cauchy.ob).run()
                shot = True

        if not shot:
            b, ob = fallback
            return Solution(
                None,
                integrator.equation,
                [ob],
                [[b, math.nan]],
                iterations=config.maxiters,
                retcode=ReturnCode.MAX_ITERS,
            )

        return Solution.from_integrator(
            integrator, iterations=config.maxiters, retcode=ReturnCode.MAX_ITERS
        )
