from typing import Literal

import numpy as np
from numpy.typing import ArrayLike, NDArray

from rayleighmle import RayleighMLE
from rayleighmle._utils import IterationRecord

_METHODS = {"newton": "newton-raphson", "fisher": "fisher-scoring"}


class RayleighScale:
    def __init__(self, endog: ArrayLike, **kwargs):
        self.endog = np.asarray(endog, dtype=np.float64)

        missing = kwargs.pop("missing", "none")

        if kwargs:
            raise TypeError(
                f"__init__() got unexpected keyword arguments: {list(kwargs.keys())}"
            )

        if missing == "drop":
            raise NotImplementedError("missing='drop' is not supported")
        elif missing == "raise":
            if np.isnan(self.endog).any():
                raise ValueError("Input contains NaN values")

        self.param_names = ["beta"]

    @property
    def nobs(self) -> int:
        return self.endog.shape[0]

    def __repr__(self) -> str:
        return f"<RayleighScale: nobs={self.nobs}>"

    def fit(
        self,
        start_params: ArrayLike | None = None,
        method: Literal["newton", "fisher"] = "newton",
        maxiter: int = 100,
        **kwargs,  # decimals
    ) -> "RayleighScaleResults":
        if method not in _METHODS:
            raise ValueError(f"method must be 'newton' or 'fisher', got '{method}'")

        decimals = kwargs.pop("decimals", 6)
        if kwargs:
            raise TypeError(
                f"fit() got unexpected keyword arguments: {list(kwargs.keys())}"
            )

        beta0 = None
        if start_params is not None:
            beta0 = float(np.asarray(start_params, dtype=np.float64).reshape(-1)[0])

        estimator = RayleighMLE(
            solver=_METHODS[method],
            max_iter=maxiter,
            decimals=decimals,
            beta0=beta0,
        )
        estimator.fit(self.endog)
        return RayleighScaleResults(self, estimator)


class RayleighScaleResults:
    def __init__(self, model: RayleighScale, estimator: RayleighMLE):
        self.model = model
        self.estimator = estimator

    @property
    def params(self) -> NDArray[np.float64]:
        return np.array([self.estimator.beta_])

    @property
    def bse(self) -> NDArray[np.float64]:
        return np.array([self.estimator.bse_])

    @property
    def llf(self) -> float:
        return self.estimator.loglik_

    @property
    def converged(self) -> bool:
        return self.estimator.converged_

    @property
    def nobs(self) -> int:
        return self.estimator.n_samples_

    @property
    def df_resid(self) -> int:
        return self.nobs - len(self.params)

    @property
    def mle_retvals(self) -> dict:
        return {
            "converged": self.converged,
            "iterations": self.estimator.n_iter_,
            "score": self.estimator.score_,
        }

    @property
    def trace(self) -> tuple[IterationRecord, ...]:
        return self.estimator.trace_

    def __repr__(self) -> str:
        return f"<RayleighScaleResults: nobs={self.nobs}, converged={self.converged}>"

    def conf_int(
        self,
        alpha: float = 0.05,
        method: Literal["wald", "pl"] = "wald",
    ) -> NDArray[np.float64]:
        """Confidence interval as a (1, 2) array, one row per parameter."""
        return self.estimator.conf_int(alpha=alpha, method=method).reshape(1, 2)

    def cov_params(self) -> NDArray[np.float64]:
        return np.array([[self.estimator.bse_**2]])

    def summary(self, alpha: float = 0.05) -> "RayleighSummary":
        """Generate a summary of the fit."""
        ci = self.conf_int(alpha=alpha)
        ci_lower = alpha / 2
        ci_upper = 1 - alpha / 2

        width = 78

        def fmtval(x: float, width: int = 11) -> str:
            """Format a number: scientific notation for extreme values."""
            if np.isnan(x):
                return f"{'NaN':>{width}}"
            if x == 0:
                return f"{0.0:{width}.6f}"
            if abs(x) < 0.0001 or abs(x) >= 1e6:
                return f"{x:{width}.3e}"
            return f"{x:{width}.6f}"

        lines: list[str] = []

        title = "Rayleigh Scale Maximum-Likelihood Results"
        lines.append(title.center(width))
        lines.append("=" * width)

        info_left = [
            ("Solver:", self.estimator.solver.title()),
            ("Converged:", str(self.converged)),
            ("No. Iterations:", str(self.mle_retvals["iterations"])),
        ]
        info_right = [
            ("No. Observations:", str(self.nobs)),
            ("Df Residual:", str(self.df_resid)),
            ("Log-Likelihood:", f"{self.llf:.3f}"),
        ]

        for (l_lbl, l_val), (r_lbl, r_val) in zip(info_left, info_right):
            left = f"{l_lbl:<18} {l_val:<20}"
            right = f"{r_lbl:<18} {r_val:>10}"
            lines.append(left + right)

        lines.append("=" * width)

        ci_lo_hdr = f"[{ci_lower:.3g}"
        ci_hi_hdr = f"{ci_upper:.3g}]"
        hdr = f"{'':>12} {'coef':>11} {'std err':>11} {ci_lo_hdr:>11} {ci_hi_hdr:>11}"
        lines.append(hdr)
        lines.append("-" * width)

        for i, name in enumerate(self.model.param_names):
            row = (
                f"{name:>12} "
                f"{fmtval(self.params[i])} "
                f"{fmtval(self.bse[i])} "
                f"{fmtval(ci[i, 0])} "
                f"{fmtval(ci[i, 1])}"
            )
            lines.append(row)

        lines.append("=" * width)
        lines.append("Std. errors: inverse Fisher information | CIs: Wald")

        return RayleighSummary("\n".join(lines))

    def summary_frame(self, alpha: float = 0.05):
        """Return summary as a pandas DataFrame."""
        try:
            import pandas as pd
        except ImportError as e:
            raise ImportError("pandas is required for summary_frame()") from e

        ci = self.conf_int(alpha=alpha)
        ci_lower = alpha / 2
        ci_upper = 1 - alpha / 2

        return pd.DataFrame(
            {
                "coef": self.params,
                "std err": self.bse,
                f"[{ci_lower:.3g}": ci[:, 0],
                f"{ci_upper:.3g}]": ci[:, 1],
            },
            index=self.model.param_names,
        )


class RayleighSummary:
    def __init__(self, text: str):
        self._text = text

    def __str__(self) -> str:
        return self._text

    def as_text(self) -> str:
        return self._text

    def as_html(self) -> str:
        raise NotImplementedError("HTML summary is not supported.")

    def as_latex(self) -> str:
        raise NotImplementedError("LaTeX summary is not supported.")
