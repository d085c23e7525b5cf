import numpy as np
import scipy
import warnings

from dataclasses import dataclass
from numpy.typing import ArrayLike, NDArray
from scipy.optimize import brentq
from sklearn.base import BaseEstimator
from sklearn.exceptions import ConvergenceWarning
from sklearn.utils.validation import check_array, check_is_fitted
from typing import Literal, Self

from rayleighmle._solvers import fisher_scoring, newton_raphson
from rayleighmle._utils import (
    NUMBA_AVAILABLE,
    IterationRecord,
    MLEResult,
    SolverStatus,
)
from rayleighmle.exceptions import DivergedEstimateError, InvalidSampleError

_SOLVERS = {
    "newton-raphson": newton_raphson,
    "fisher-scoring": fisher_scoring,
}


class RayleighMLE(BaseEstimator):
    """
    Maximum-likelihood fit of the one-parameter Rayleigh-type density

        f(x; beta) = (2 / beta) * x * exp(-x**2 / beta),  x > 0.

    The score equation is solved iteratively from `beta0`, either with
    Newton-Raphson (observed derivative of the score) or Fisher scoring
    (expected derivative). Iteration stops once two successive estimates agree
    to `decimals` decimal places.

    Parameters
    ----------
    solver : {'newton-raphson', 'fisher-scoring'}, default='newton-raphson'
        Update rule for the score iteration.
    max_iter : int, default=100
        Maximum number of iterations.
    decimals : int, default=6
        Rounding precision of the convergence test.
    beta0 : float or None, default=None
        Starting value. If None, the sample mean is used.
    backend : {'numpy', 'numba'}, default='numpy'
        Implementation of the iteration loop. 'numba' requires numba.

    Attributes
    ----------
    beta_ : float
        Fitted scale parameter.
    loglik_ : float
        Log-likelihood at `beta_`, without the constant sum(log(x)).
    score_ : float
        Score at `beta_`.
    n_iter_ : int
        Number of iterations the solver ran.
    converged_ : bool
        Whether the solver converged within `max_iter`.
    status_ : SolverStatus
        Terminal state of the solver.
    trace_ : tuple of IterationRecord
        Convergence trace, one record per iteration.
    bse_ : float
        Wald standard error, beta_ / sqrt(n).
    n_samples_ : int
        Number of observations seen during `fit`.
    sum_of_squares_ : float
        Sufficient statistic sum(x**2).

    Examples
    --------
    >>> import numpy as np
    >>> from rayleighmle import RayleighMLE
    >>> x = np.array([1.0, 2.0, 3.0])
    >>> model = RayleighMLE(solver="fisher-scoring").fit(x)
    >>> round(model.beta_, 6)
    4.666667
    """

    def __init__(
        self,
        solver: Literal["newton-raphson", "fisher-scoring"] = "newton-raphson",
        max_iter: int = 100,
        decimals: int = 6,
        beta0: float | None = None,
        backend: Literal["numpy", "numba"] = "numpy",
    ) -> None:
        self.solver = solver
        self.max_iter = max_iter
        self.decimals = decimals
        self.beta0 = beta0
        self.backend = backend

    def fit(self, X: ArrayLike, y: None = None) -> Self:
        """
        Fit the scale parameter to a sample.

        Parameters
        ----------
        X : array-like of shape (n_samples,)
            Positive observations.
        y : None
            Ignored.

        Returns
        -------
        self : RayleighMLE
            Fitted estimator.

        Raises
        ------
        InvalidSampleError
            If the sample is empty, not 1-D, or contains a value <= 0.
        DivergedEstimateError
            If an iteration step drives beta to a non-positive or non-finite value.
        """
        x = self._validate_input(X)
        n = x.shape[0]
        beta0 = float(np.mean(x)) if self.beta0 is None else float(self.beta0)

        if self.backend == "numba":
            S, result = _fit_numba(
                x, beta0, self.solver, self.max_iter, self.decimals
            )
        else:
            S = sum_of_squares(x)

            def compute_quantities(beta: float) -> RayleighQuantities:
                return compute_rayleigh_quantities(beta, n, S)

            result = _SOLVERS[self.solver](
                compute_quantities=compute_quantities,
                beta0=beta0,
                max_iter=self.max_iter,
                decimals=self.decimals,
            )

        if not result.converged:
            warnings.warn(
                f"{self.solver} did not converge after {result.n_iter} iterations "
                f"(last beta={result.beta:.6g}).",
                ConvergenceWarning,
                stacklevel=2,
            )

        self.beta_ = result.beta
        self.loglik_ = result.loglik
        self.score_ = result.score
        self.n_iter_ = result.n_iter
        self.converged_ = result.converged
        self.status_ = result.status
        self.trace_ = result.trace
        self.bse_ = float(result.beta / np.sqrt(n))
        self.n_samples_ = n
        self.sum_of_squares_ = S
        return self

    def conf_int(
        self,
        alpha: float = 0.05,
        method: Literal["wald", "pl"] = "wald",
    ) -> NDArray[np.float64]:
        """
        Confidence interval for the scale parameter.

        Parameters
        ----------
        alpha : float, default=0.05
            Significance level (default 0.05 for 95% CI)
        method : {'wald', 'pl'}, default='wald'
            - 'wald': beta_ +/- z * bse_
            - 'pl': profile likelihood, the two roots of
              loglik(beta) = loglik_ - chi2(1 - alpha, 1) / 2

        Returns
        -------
        ndarray, shape (2,)
            Lower and upper bound.
        """
        check_is_fitted(self)
        if method == "wald":
            return np.array(wald_interval(self.beta_, self.n_samples_, 1 - alpha))
        elif method == "pl":
            return np.array(
                profile_interval(self.n_samples_, self.sum_of_squares_, 1 - alpha)
            )
        else:
            raise ValueError(f"method must be 'wald' or 'pl', got '{method}'")

    def pdf(self, X: ArrayLike) -> NDArray[np.float64]:
        """Fitted density at X."""
        check_is_fitted(self)
        return rayleigh_pdf(np.asarray(X, dtype=np.float64), self.beta_)

    def cdf(self, X: ArrayLike) -> NDArray[np.float64]:
        """Fitted distribution function at X."""
        check_is_fitted(self)
        return rayleigh_cdf(np.asarray(X, dtype=np.float64), self.beta_)

    def _validate_input(self, X: ArrayLike) -> NDArray[np.float64]:
        """Validate parameters and sample"""
        if self.solver not in _SOLVERS:
            raise ValueError(
                f"solver='{self.solver}' is not supported. "
                "Use 'newton-raphson' or 'fisher-scoring'."
            )
        if self.max_iter <= 0:
            raise ValueError(f"max_iter must be positive, got {self.max_iter}")
        if self.decimals < 0:
            raise ValueError(f"decimals must be non-negative, got {self.decimals}")
        if self.beta0 is not None and not self.beta0 > 0:
            raise ValueError(f"beta0 must be positive, got {self.beta0}")
        if self.backend not in ("numpy", "numba"):
            raise ValueError(
                f"backend must be 'numpy' or 'numba', got '{self.backend}'"
            )
        if self.backend == "numba" and not NUMBA_AVAILABLE:
            raise ValueError("backend='numba' requires numba to be installed")
        return validate_sample(X)


@dataclass
class RayleighQuantities:
    """Quantities needed for one score iteration"""

    loglik: float  # n*log(2/beta) - S/beta
    score: float  # U = -n/beta + S/beta^2
    score_derivative: float  # U' = n/beta^2 - 2S/beta^3
    expected_score_derivative: float  # E[U'] = -n/beta^2
    fisher_info: float  # n/beta^2


def compute_rayleigh_quantities(beta: float, n: int, S: float) -> RayleighQuantities:
    """Compute all quantities needed for one score iteration."""
    return RayleighQuantities(
        loglik=loglik(beta, n, S),
        score=score(beta, n, S),
        score_derivative=score_derivative(beta, n, S),
        expected_score_derivative=expected_score_derivative(beta, n),
        fisher_info=n / beta / beta,
    )


def validate_sample(X: ArrayLike) -> NDArray[np.float64]:
    """
    Return the sample as a 1-D float64 array.

    Raises `InvalidSampleError` for an empty or multi-dimensional sample, a
    value <= 0, or a sum of squares beyond float64 range. NaN and inf are
    rejected by `check_array`.
    """
    x = check_array(X, ensure_2d=False, ensure_min_samples=0, dtype=np.float64)
    if x.ndim != 1:
        raise InvalidSampleError(
            f"Sample must be one-dimensional, got shape {x.shape}"
        )
    if x.shape[0] == 0:
        raise InvalidSampleError("Sample must contain at least one observation")
    bad = np.flatnonzero(x <= 0)
    if bad.size:
        raise InvalidSampleError(
            f"Sample values must be positive; found {x[bad[0]]} at index {bad[0]}"
        )
    if not np.isfinite(sum_of_squares(x)):
        raise InvalidSampleError(
            "Sum of squares of the sample overflows float64; rescale the data"
        )
    return x


def sum_of_squares(x: NDArray[np.float64]) -> float:
    """Sufficient statistic S = sum(x**2)."""
    return float(x @ x)


def rayleigh_pdf(x: NDArray[np.float64], beta: float) -> NDArray[np.float64]:
    return (2.0 / beta) * x * np.exp(-(x**2) / beta)


def rayleigh_cdf(x: NDArray[np.float64], beta: float) -> NDArray[np.float64]:
    return -np.expm1(-(x**2) / beta)


def loglik(beta: float, n: int, S: float) -> float:
    return float(n * np.log(2.0 / beta) - S / beta)


# Successive division rather than **: float ** raises OverflowError.


def score(beta: float, n: int, S: float) -> float:
    return (S / beta - n) / beta


def score_derivative(beta: float, n: int, S: float) -> float:
    return (n - 2.0 * S / beta) / beta / beta


def expected_score_derivative(beta: float, n: int) -> float:
    return -n / beta / beta


def wald_interval(
    beta_hat: float, n: int, level: float = 0.95
) -> tuple[float, float]:
    """
    Wald interval beta_hat +/- z * se, with se = beta_hat / sqrt(n).

    se is the inverse square root of the Fisher information n / beta_hat**2.
    """
    _check_level(level)
    if n < 1:
        raise ValueError(f"n must be at least 1, got {n}")
    if not beta_hat > 0:
        raise ValueError(f"beta_hat must be positive, got {beta_hat}")
    se = beta_hat / np.sqrt(n)
    z = scipy.stats.norm.ppf(1 - (1 - level) / 2)
    return float(beta_hat - z * se), float(beta_hat + z * se)


def profile_interval(n: int, S: float, level: float = 0.95) -> tuple[float, float]:
    """
    Profile-likelihood interval: the values of beta where the log-likelihood
    has dropped by chi2(level, 1) / 2 from its maximum at beta_hat = S / n.

    The log-likelihood tends to -inf at both ends of (0, inf), so each bound is
    bracketed by halving (below) or doubling (above) from `beta_hat` and then
    solved with Brent's method.
    """
    _check_level(level)
    if n < 1:
        raise ValueError(f"n must be at least 1, got {n}")
    if not (S > 0 and np.isfinite(S)):
        raise ValueError(f"S must be positive and finite, got {S}")
    beta_hat = S / n
    l_star = loglik(beta_hat, n, S) - scipy.stats.chi2.ppf(level, 1) / 2

    def excess(beta: float) -> float:
        return loglik(beta, n, S) - l_star

    lo = beta_hat / 2
    while excess(lo) > 0:
        lo /= 2
    hi = beta_hat * 2
    while excess(hi) > 0:
        hi *= 2

    lower = brentq(excess, lo, beta_hat)
    upper = brentq(excess, beta_hat, hi)
    return float(lower), float(upper)


def _check_level(level: float) -> None:
    if not 0 < level < 1:
        raise ValueError(f"level must be in (0, 1), got {level}")


_NUMBA_STATUS = {
    0: SolverStatus.CONVERGED,
    1: SolverStatus.MAX_ITERATIONS_EXCEEDED,
}


def _fit_numba(
    x: NDArray[np.float64],
    beta0: float,
    solver: str,
    max_iter: int,
    decimals: int,
) -> tuple[float, MLEResult]:
    """Run the jitted iteration; returns S and the repackaged MLEResult."""
    from rayleighmle._numba.rayleigh import score_iteration
    from rayleighmle._numba.rayleigh import sum_of_squares as sum_of_squares_numba

    n = x.shape[0]
    S = float(sum_of_squares_numba(x))
    trace_buf = np.empty((max_iter, 4), dtype=np.float64)
    beta, n_iter, info = score_iteration(
        n, S, beta0, solver == "fisher-scoring", max_iter, decimals, trace_buf
    )
    trace = tuple(
        IterationRecord(
            iteration=i + 1,
            beta=float(row[0]),
            score=float(row[1]),
            denominator=float(row[2]),
            ratio=float(row[3]),
        )
        for i, row in enumerate(trace_buf[:n_iter])
    )

    if info == 2:
        raise DivergedEstimateError(
            f"Update denominator vanished at beta={beta:.6g} (iteration {n_iter + 1})",
            iteration=n_iter + 1,
            beta=float(beta),
            trace=trace,
        )
    if info == 3:
        raise DivergedEstimateError(
            f"Estimate left the parameter space: beta={beta:.6g} "
            f"at iteration {n_iter + 1}",
            iteration=n_iter + 1,
            beta=float(beta),
            trace=trace,
        )

    q = compute_rayleigh_quantities(float(beta), n, S)
    return S, MLEResult(
        beta=float(beta),
        loglik=q.loglik,
        score=q.score,
        fisher_info=q.fisher_info,
        n_iter=int(n_iter),
        status=_NUMBA_STATUS[int(info)],
        trace=trace,
    )
