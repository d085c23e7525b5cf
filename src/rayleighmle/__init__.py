from rayleighmle._solvers import fisher_scoring, newton_raphson
from rayleighmle._utils import (
    NUMBA_AVAILABLE,
    IterationRecord,
    MLEResult,
    SolverStatus,
)
from rayleighmle.exceptions import DivergedEstimateError, InvalidSampleError
from rayleighmle.rayleigh import (
    RayleighMLE,
    profile_interval,
    wald_interval,
)

__all__ = [
    "NUMBA_AVAILABLE",
    "DivergedEstimateError",
    "InvalidSampleError",
    "IterationRecord",
    "MLEResult",
    "RayleighMLE",
    "SolverStatus",
    "fisher_scoring",
    "newton_raphson",
    "profile_interval",
    "wald_interval",
]

__version__ = "0.1.0"
