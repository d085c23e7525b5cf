import numpy as np
from numba import njit
from numpy.typing import NDArray


@njit(fastmath=True, cache=True)
def sum_of_squares(x: NDArray[np.float64]) -> float:
    total = 0.0
    for i in range(x.shape[0]):
        total += x[i] * x[i]
    return total


@njit(cache=True)
def score_and_denominator(
    beta: float, n: int, S: float, expected: bool
) -> tuple[float, float]:
    u = (S / beta - n) / beta
    if expected:
        d = -n / beta / beta
    else:
        d = (n - 2.0 * S / beta) / beta / beta
    return u, d


@njit(cache=True)
def score_iteration(
    n: int,
    S: float,
    beta0: float,
    expected: bool,
    max_iter: int,
    decimals: int,
    trace: NDArray[np.float64],  # (max_iter, 4): beta, score, denominator, ratio
) -> tuple[float, int, int]:
    """
    Returns (beta, n_iter, info).

    info: 0 converged, 1 max_iter reached, 2 zero or non-finite denominator
    (beta is the last valid estimate), 3 beta left (0, inf) (beta is the
    offending value). n_iter counts the rows written to `trace`.
    """
    beta = beta0
    u, d = score_and_denominator(beta, n, S, expected)

    for iteration in range(max_iter):
        if d == 0.0 or not np.isfinite(d):
            return beta, iteration, 2

        beta_new = beta - u / d
        if not np.isfinite(beta_new) or beta_new <= 0.0:
            return beta_new, iteration, 3

        u, d = score_and_denominator(beta_new, n, S, expected)
        trace[iteration, 0] = beta_new
        trace[iteration, 1] = u
        trace[iteration, 2] = d
        trace[iteration, 3] = u / d if d != 0.0 else np.nan

        converged = round(beta_new, decimals) == round(beta, decimals)
        beta = beta_new
        if converged:
            return beta, iteration + 1, 0

    return beta, max_iter, 1
