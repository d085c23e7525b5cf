import numpy as np
import pytest

from rayleighmle.adapters.statsmodels import (
    RayleighScale,
    RayleighScaleResults,
    RayleighSummary,
)


@pytest.fixture
def toy_data():
    return np.array([1.0, 2.0, 3.0, 2.5])


class TestRayleighScale:
    def test_stores_endog(self, toy_data):
        model = RayleighScale(toy_data)
        assert isinstance(model.endog, np.ndarray)
        np.testing.assert_array_equal(model.endog, toy_data)
        assert model.nobs == 4

    def test_unknown_kwargs_raise_typeerror(self, toy_data):
        with pytest.raises(TypeError, match="myeyesaresodry"):
            RayleighScale(toy_data, myeyesaresodry=123)

    def test_missing_raise_with_nan(self):
        with pytest.raises(ValueError, match="NaN"):
            RayleighScale(np.array([1.0, np.nan]), missing="raise")

    def test_missing_drop_not_implemented(self, toy_data):
        with pytest.raises(NotImplementedError):
            RayleighScale(toy_data, missing="drop")

    def test_fit_returns_results(self, toy_data):
        results = RayleighScale(toy_data).fit()
        assert isinstance(results, RayleighScaleResults)

    def test_fit_unknown_method(self, toy_data):
        with pytest.raises(ValueError, match="method"):
            RayleighScale(toy_data).fit(method="bfgs")

    def test_fit_unknown_kwargs(self, toy_data):
        with pytest.raises(TypeError, match="gtol"):
            RayleighScale(toy_data).fit(gtol=1e-8)

    def test_start_params_used(self, toy_data):
        results = RayleighScale(toy_data).fit(start_params=[1.0], method="fisher")
        # first Fisher step from any start lands on S/n
        np.testing.assert_allclose(results.trace[0].beta, np.mean(toy_data**2))


class TestRayleighScaleResults:
    @pytest.fixture
    def fitted_results(self, fiber_strength):
        return RayleighScale(fiber_strength).fit(method="newton")

    def test_params_and_bse(self, fitted_results):
        assert fitted_results.params.shape == (1,)
        np.testing.assert_allclose(fitted_results.params[0], 18.621749, atol=1e-6)
        np.testing.assert_allclose(
            fitted_results.bse[0], fitted_results.params[0] / np.sqrt(57)
        )
        np.testing.assert_allclose(
            fitted_results.cov_params(), [[fitted_results.bse[0] ** 2]]
        )

    def test_retvals(self, fitted_results):
        assert fitted_results.converged
        assert fitted_results.df_resid == 56
        assert fitted_results.mle_retvals["iterations"] == len(fitted_results.trace)

    def test_conf_int_shape(self, fitted_results):
        ci = fitted_results.conf_int()
        assert ci.shape == (1, 2)
        assert ci[0, 0] < fitted_results.params[0] < ci[0, 1]

    def test_summary_text(self, fitted_results):
        summary = fitted_results.summary()
        assert isinstance(summary, RayleighSummary)
        text = summary.as_text()
        assert "Newton-Raphson" in text
        assert "No. Observations:" in text
        assert "beta" in text
        assert str(summary) == text

    def test_summary_frame(self, fitted_results):
        pytest.importorskip("pandas")
        frame = fitted_results.summary_frame()
        assert list(frame.index) == ["beta"]
        assert list(frame.columns) == ["coef", "std err", "[0.025", "0.975]"]
