import numpy as np

from typing import Callable, Protocol

from rayleighmle._utils import IterationRecord, MLEResult, SolverStatus
from rayleighmle.exceptions import DivergedEstimateError


class ScalarQuantities(Protocol):
    loglik: float
    score: float
    score_derivative: float
    expected_score_derivative: float
    fisher_info: float


def newton_raphson(
    compute_quantities: Callable[[float], ScalarQuantities],
    beta0: float,
    max_iter: int = 100,
    decimals: int = 6,
) -> MLEResult:
    """
    Newton-Raphson on the score equation, using the observed derivative U'.

    Parameters
    ----------
    compute_quantities : Callable[[float], ScalarQuantities]
        Function `callable(beta)` that returns loglik, score, score derivative,
        expected score derivative and fisher_info
    beta0 : float
        Starting value, must be positive
    max_iter : int, default=100
        Maximum number of iterations
    decimals : int, default=6
        Successive estimates equal after rounding to this many decimals stop
        the iteration

    Returns
    -------
    MLEResult
        Estimate, final quantities, status and convergence trace
    """
    return _score_iteration(
        compute_quantities,
        beta0,
        denominator=lambda q: q.score_derivative,
        max_iter=max_iter,
        decimals=decimals,
    )


def fisher_scoring(
    compute_quantities: Callable[[float], ScalarQuantities],
    beta0: float,
    max_iter: int = 100,
    decimals: int = 6,
) -> MLEResult:
    """
    Fisher scoring: Newton-Raphson with U' replaced by its expectation.

    The expected derivative is minus the Fisher information, so the update is
    the same subtraction ``beta - U / E[U']``. Parameters and return value are
    as for `newton_raphson`.
    """
    return _score_iteration(
        compute_quantities,
        beta0,
        denominator=lambda q: q.expected_score_derivative,
        max_iter=max_iter,
        decimals=decimals,
    )


def _score_iteration(
    compute_quantities: Callable[[float], ScalarQuantities],
    beta0: float,
    denominator: Callable[[ScalarQuantities], float],
    max_iter: int,
    decimals: int,
) -> MLEResult:
    beta = float(beta0)
    if not np.isfinite(beta) or beta <= 0.0:
        raise ValueError(f"beta0 must be positive and finite, got {beta0}")

    q = compute_quantities(beta)
    trace: list[IterationRecord] = []

    for iteration in range(1, max_iter + 1):
        d = denominator(q)
        if d == 0.0 or not np.isfinite(d):
            raise DivergedEstimateError(
                f"Update denominator is {d} at beta={beta:.6g} (iteration {iteration})",
                iteration=iteration,
                beta=beta,
                trace=tuple(trace),
            )

        beta_new = beta - q.score / d
        if not np.isfinite(beta_new) or beta_new <= 0.0:
            raise DivergedEstimateError(
                f"Estimate left the parameter space: beta={beta_new:.6g} "
                f"at iteration {iteration}",
                iteration=iteration,
                beta=beta_new,
                trace=tuple(trace),
            )

        q = compute_quantities(beta_new)
        d_new = denominator(q)
        trace.append(
            IterationRecord(
                iteration=iteration,
                beta=beta_new,
                score=q.score,
                denominator=d_new,
                ratio=q.score / d_new if d_new != 0.0 else np.nan,
            )
        )

        # converged when the estimate stops changing at `decimals` precision
        converged = round(beta_new, decimals) == round(beta, decimals)
        beta = beta_new
        if converged:
            return _make_result(beta, q, SolverStatus.CONVERGED, trace)

    return _make_result(beta, q, SolverStatus.MAX_ITERATIONS_EXCEEDED, trace)


def _make_result(
    beta: float,
    q: ScalarQuantities,
    status: SolverStatus,
    trace: list[IterationRecord],
) -> MLEResult:
    return MLEResult(
        beta=beta,
        loglik=q.loglik,
        score=q.score,
        fisher_info=q.fisher_info,
        n_iter=len(trace),
        status=status,
        trace=tuple(trace),
    )
