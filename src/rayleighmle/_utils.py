import enum

from dataclasses import dataclass
from importlib.util import find_spec

NUMBA_AVAILABLE = find_spec("numba") is not None


class SolverStatus(enum.Enum):
    """State of the scalar score iteration"""

    RUNNING = "running"
    CONVERGED = "converged"
    MAX_ITERATIONS_EXCEEDED = "max_iterations_exceeded"


@dataclass(frozen=True)
class IterationRecord:
    """One row of the convergence trace"""

    iteration: int  # m, starting at 1
    beta: float  # estimate after step m
    score: float  # U(beta)
    denominator: float  # U'(beta) or E[U'](beta), depending on the method
    ratio: float  # U / denominator


@dataclass
class MLEResult:
    """Output from scalar maximum-likelihood iteration"""

    beta: float  # fitted scale parameter
    loglik: float  # log-likelihood at beta
    score: float  # score at beta
    fisher_info: float  # n / beta**2
    n_iter: int  # number of iterations
    status: SolverStatus
    trace: tuple[IterationRecord, ...]

    @property
    def converged(self) -> bool:
        return self.status is SolverStatus.CONVERGED
