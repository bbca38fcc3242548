from enum import Enum


class ReturnCode(str, Enum):
    """Outcome of a solve.

    Attributes
    ----------
    SUCCESS : str
        The solution satisfies the requested tolerance ("success").
    MAX_ITERS : str
        The iteration (or integration step) budget was exhausted ("max_iters").
    FAILURE : str
        The ODE integrator could not continue, e.g. the step size collapsed
        ("failure").
    """

    SUCCESS = "success"
    MAX_ITERS = "max_iters"
    FAILURE = "failure"


class IntegrationStatus(str, Enum):
    """Why a single Boltzmann ODE run stopped.

    Attributes
    ----------
    RUNNING : str
        Not started or still stepping.
    SETTLED : str
        The o-derivative crossed zero; the trajectory reached its asymptote.
    PAST_LIMIT : str
        The solution went past the caller-supplied limit value.
    MAX_STEPS : str
        The internal step cap was hit before any event fired.
    FAILED : str
        The integrator gave up (step size too small).
    """

    RUNNING = "running"
    SETTLED = "settled"
    PAST_LIMIT = "past_limit"
    MAX_STEPS = "max_steps"
    FAILED = "failed"
