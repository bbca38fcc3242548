class DomainError(ValueError):
    """Raised when a problem is unsolvable for the given equation.

    This error is raised by :func:`~boltzflow.solve` when a boundary or initial
    value lies outside the admissible domain of the governing equation (see
    :func:`~boltzflow.isindomain`). It is detected before any integration is
    attempted, so it is kept separate from ordinary non-convergence.

    Parameters
    ----------
    value : float
        The offending value.
    message : str
        Human-readable explanation.
    """

    def __init__(self, value: float, message: str) -> None:
        super().__init__(f"{message} (got {value!r})")
        self.value = value


class SolvingError(Exception):
    """Raised when ``solve`` fails to find an acceptable solution.

    Notes
    -----
    Only raised when ``raise_on_failure=True`` (the default). With
    ``raise_on_failure=False`` the best-effort :class:`~boltzflow.Solution` is
    returned instead and its ``retcode`` tells the caller what went wrong.
    """
