"""
Plain-text report of a fit: one convergence table per solver, the estimate,
the confidence interval line and a Kolmogorov-Smirnov check of the fitted
distribution.
"""

import numpy as np
import scipy

from numpy.typing import ArrayLike
from typing import Sequence

from rayleighmle._utils import IterationRecord
from rayleighmle.rayleigh import RayleighMLE, rayleigh_cdf, validate_sample

_DENOMINATOR_LABEL = {
    "newton-raphson": "U'",
    "fisher-scoring": "E[U']",
}


def format_trace(
    trace: Sequence[IterationRecord], denominator_label: str = "U'"
) -> str:
    """Render a convergence trace as a fixed-width table."""
    hdr = (
        f"{'m':>4} {'beta':>14} {'U':>14} "
        f"{denominator_label:>14} {'U/' + denominator_label:>14}"
    )
    lines = [hdr, "-" * len(hdr)]
    for rec in trace:
        lines.append(
            f"{rec.iteration:>4d} {rec.beta:>14.6f} {rec.score:>14.6e} "
            f"{rec.denominator:>14.6e} {rec.ratio:>14.6e}"
        )
    return "\n".join(lines)


def format_interval(lower: float, upper: float, digits: int = 4) -> str:
    return f"CL = ( {lower:.{digits}f}, {upper:.{digits}f} )"


def fit_report(
    X: ArrayLike,
    level: float = 0.95,
    solvers: Sequence[str] = ("newton-raphson", "fisher-scoring"),
    beta0: float | None = None,
) -> str:
    """
    Fit the sample with each solver and render the report.

    The interval and goodness-of-fit lines use the last solver's estimate.
    """
    x = validate_sample(X)
    width = 66
    lines = [
        "Rayleigh scale parameter: maximum-likelihood fit".center(width),
        "=" * width,
        f"n = {x.shape[0]}    sum(x^2) = {float(x @ x):.6f}    "
        f"mean(x) = {float(np.mean(x)):.6f}",
    ]

    start = float(np.mean(x)) if beta0 is None else float(beta0)
    model = None
    for solver in solvers:
        model = RayleighMLE(solver=solver, beta0=beta0).fit(x)
        lines.append("")
        lines.append(f"{solver.title()} (beta0 = {start:.6f})")
        lines.append(format_trace(model.trace_, _DENOMINATOR_LABEL[solver]))
        status = "converged" if model.converged_ else "did not converge"
        lines.append(
            f"{status} after {model.n_iter_} iterations: beta = {model.beta_:.6f}"
        )

    if model is None:
        raise ValueError("At least one solver is required")

    lower, upper = model.conf_int(alpha=1 - level)
    ks = scipy.stats.kstest(x, lambda t: rayleigh_cdf(t, model.beta_))

    lines.append("")
    lines.append("=" * width)
    lines.append(f"beta_hat = {model.beta_:.6f}    se = {model.bse_:.6f}")
    lines.append(f"{level:.0%} Wald interval:")
    lines.append(format_interval(lower, upper))
    lines.append(f"Kolmogorov-Smirnov: D = {ks.statistic:.4f}, p = {ks.pvalue:.4f}")
    return "\n".join(lines)
