"""
Exceptions raised by rayleighmle.

Domain errors subclass the closest built-in so callers can catch either.
Non-convergence is not an exception: it is reported on the result status and
as a ``sklearn.exceptions.ConvergenceWarning``.
"""

from rayleighmle._utils import IterationRecord


class InvalidSampleError(ValueError):
    """Sample is empty, not one-dimensional, or has a value <= 0."""


class DivergedEstimateError(ArithmeticError):
    """
    An iteration step left the parameter space.

    Attributes:
        iteration: Step at which beta became invalid
        beta: The offending value (non-positive, non-finite, or the last valid
            beta when the denominator vanished)
        trace: Iteration records accumulated before the failure
    """

    def __init__(
        self,
        message: str,
        iteration: int,
        beta: float,
        trace: tuple[IterationRecord, ...] = (),
    ) -> None:
        super().__init__(message)
        self.iteration = iteration
        self.beta = beta
        self.trace = trace
