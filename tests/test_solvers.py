from types import SimpleNamespace

import numpy as np
import pytest

from rayleighmle import DivergedEstimateError, SolverStatus
from rayleighmle._solvers import fisher_scoring, newton_raphson
from rayleighmle.rayleigh import compute_rayleigh_quantities, sum_of_squares


def _quantities(x):
    n = x.shape[0]
    S = sum_of_squares(x)
    return lambda beta: compute_rayleigh_quantities(beta, n, S)


class TestNewtonRaphson:
    def test_converges_to_mean_square(self, fiber_strength):
        result = newton_raphson(_quantities(fiber_strength), np.mean(fiber_strength))

        assert result.status is SolverStatus.CONVERGED
        assert result.converged
        np.testing.assert_allclose(result.beta, 18.621749386, rtol=1e-9)
        assert abs(result.score) < 1e-6

    def test_trace_is_indexed_and_consistent(self, fiber_strength):
        result = newton_raphson(_quantities(fiber_strength), np.mean(fiber_strength))

        assert [r.iteration for r in result.trace] == list(range(1, result.n_iter + 1))
        assert result.trace[-1].beta == result.beta
        for rec in result.trace:
            np.testing.assert_allclose(rec.ratio, rec.score / rec.denominator)

    def test_first_step_from_sample_mean(self, fiber_strength):
        result = newton_raphson(_quantities(fiber_strength), np.mean(fiber_strength))
        np.testing.assert_allclose(result.trace[0].beta, 6.0810154974, rtol=1e-9)

    def test_stops_when_rounded_estimates_agree(self, fiber_strength):
        result = newton_raphson(_quantities(fiber_strength), np.mean(fiber_strength))
        last, prev = result.trace[-1].beta, result.trace[-2].beta
        assert round(last, 6) == round(prev, 6)
        # every earlier pair differs at 6 decimals
        for a, b in zip(result.trace[:-2], result.trace[1:-1]):
            assert round(a.beta, 6) != round(b.beta, 6)

    def test_max_iterations_exceeded(self, fiber_strength):
        # from 3 * beta_hat the Newton step overshoots away from the root
        beta_hat = np.mean(fiber_strength**2)
        result = newton_raphson(_quantities(fiber_strength), 3 * beta_hat, max_iter=100)

        assert result.status is SolverStatus.MAX_ITERATIONS_EXCEEDED
        assert not result.converged
        assert result.n_iter == 100
        assert len(result.trace) == 100
        assert np.isfinite(result.beta)

    def test_long_run_ends_in_divergence_not_overflow(self, fiber_strength):
        # beta doubles each step until n / beta / beta underflows to zero
        beta_hat = np.mean(fiber_strength**2)
        with pytest.raises(DivergedEstimateError) as exc_info:
            newton_raphson(_quantities(fiber_strength), 3 * beta_hat, max_iter=1000)

        assert 100 < exc_info.value.iteration < 1000
        assert len(exc_info.value.trace) == exc_info.value.iteration - 1

    def test_negative_step_raises_diverged(self, fiber_strength):
        # between 1.5 and 2 times beta_hat the first step lands below zero
        beta_hat = np.mean(fiber_strength**2)
        with pytest.raises(DivergedEstimateError, match="parameter space") as exc_info:
            newton_raphson(_quantities(fiber_strength), 1.8 * beta_hat)

        assert exc_info.value.iteration == 1
        assert exc_info.value.beta < 0
        assert exc_info.value.trace == ()

    def test_zero_denominator_raises_diverged(self):
        def flat(beta):
            return SimpleNamespace(
                loglik=0.0,
                score=1.0,
                score_derivative=0.0,
                expected_score_derivative=-1.0,
                fisher_info=1.0,
            )

        with pytest.raises(DivergedEstimateError, match="denominator") as exc_info:
            newton_raphson(flat, 1.0)
        assert exc_info.value.iteration == 1
        assert exc_info.value.beta == 1.0

    def test_rejects_non_positive_start(self, fiber_strength):
        with pytest.raises(ValueError, match="beta0"):
            newton_raphson(_quantities(fiber_strength), 0.0)


class TestFisherScoring:
    def test_matches_newton_raphson(self, fiber_strength):
        beta0 = np.mean(fiber_strength)
        nr = newton_raphson(_quantities(fiber_strength), beta0)
        fs = fisher_scoring(_quantities(fiber_strength), beta0)

        assert fs.converged
        np.testing.assert_allclose(fs.beta, nr.beta, atol=1e-6)
        assert fs.n_iter <= nr.n_iter

    def test_denominator_is_negative_information(self, fiber_strength):
        n = fiber_strength.shape[0]
        result = fisher_scoring(_quantities(fiber_strength), np.mean(fiber_strength))
        for rec in result.trace:
            np.testing.assert_allclose(rec.denominator, -n / rec.beta**2)
            assert rec.denominator < 0

    def test_converges_from_far_start(self, fiber_strength):
        # the start that defeats Newton-Raphson is harmless here
        beta_hat = np.mean(fiber_strength**2)
        result = fisher_scoring(_quantities(fiber_strength), 3 * beta_hat)
        assert result.converged
        np.testing.assert_allclose(result.beta, beta_hat, rtol=1e-9)
