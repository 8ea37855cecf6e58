"""
Unit tests for forward prediction.

Tests cover:
- Raw affine prediction
- Baseline ratio scaling and rounding
- Zero and non-finite denominators
"""

import math
import pytest
import numpy as np
from numpy.testing import assert_allclose

from formulation.core.errors import InputValidationError
from formulation.core.params import PREDICTORS, RESPONSES, LinearCoefficients
from formulation.core.prediction import (
    predict_candidates,
    predict_matrix,
    predict_raw,
    predict_scaled,
    round_yield,
    safe_divide,
)


def _constant_coefficients(value):
    return {
        r: LinearCoefficients(response=r, intercept=value, weights=np.zeros(5))
        for r in RESPONSES
    }


class TestSafeDivide:
    """Test division with a zero fallback."""

    @pytest.mark.parametrize("a", [0.0, 1.0, -3.5, 1e9])
    def test_zero_and_nan_denominator(self, a):
        assert safe_divide(a, 0) == 0
        assert safe_divide(a, float('nan')) == 0
        assert safe_divide(a, float('inf')) == 0

    def test_regular_division(self):
        assert safe_divide(3.0, 4.0) == 0.75


class TestRoundYield:
    """Test 2-decimal yield rounding."""

    def test_half_up(self):
        assert round_yield(2.675) == 2.68
        assert round_yield(1.005) == 1.01
        assert round_yield(-1.005) == -1.01

    def test_non_finite(self):
        assert round_yield(float('nan')) == 0.0

    @pytest.mark.parametrize("value", [1.2345e33, -9.87e45, 1.7e308])
    def test_large_values_kept(self, value):
        assert round_yield(value) == value


class TestPredictRaw:
    """Test the affine model."""

    def test_affine(self, linear_coefficients):
        params = {'filter_ventilation': 0.5, 'filter_pressure_drop': 5000, 'permeability': 50,
                  'quantitative': 30, 'citrate': 0.02}
        result = predict_raw(params, linear_coefficients)

        x = np.array([params[name] for name in PREDICTORS])
        for response in RESPONSES:
            c = linear_coefficients[response]
            assert_allclose(result[response], c.intercept + np.sum(x * c.weights))

    def test_pairwise_order_preserved(self):
        """Each predictor is paired with its own coefficient."""
        coefficients = {
            r: LinearCoefficients(response=r, intercept=0.0, weights=np.array([1.0, 10.0, 100.0, 1000.0, 10000.0]))
            for r in RESPONSES
        }
        params = {name: i + 1 for i, name in enumerate(PREDICTORS)}
        result = predict_raw(params, coefficients)
        assert_allclose(result['tar'], 1 + 20 + 300 + 4000 + 50000)

    def test_no_clamping(self):
        result = predict_raw({name: 0 for name in PREDICTORS}, _constant_coefficients(-5.0))
        assert result == {'tar': -5.0, 'nicotine': -5.0, 'co': -5.0}

    def test_missing_response(self, linear_coefficients):
        del linear_coefficients['co']
        with pytest.raises(InputValidationError, match="co"):
            predict_raw({name: 1 for name in PREDICTORS}, linear_coefficients)

    def test_non_finite_param(self, linear_coefficients):
        params = {name: 1 for name in PREDICTORS}
        params['citrate'] = float('nan')
        with pytest.raises(InputValidationError, match="citrate"):
            predict_raw(params, linear_coefficients)

    def test_matrix_matches_single(self, linear_coefficients, baseline):
        x = np.array([[baseline[name] for name in PREDICTORS]] * 3)
        single = predict_raw(baseline, linear_coefficients)
        assert_allclose(predict_matrix(x, linear_coefficients)[1], [single[r] for r in RESPONSES])


class TestPredictScaled:
    """Test baseline ratio scaling."""

    def test_candidate_equal_to_baseline(self, linear_coefficients):
        baseline = {'filter_ventilation': 0.4, 'filter_pressure_drop': 4300, 'permeability': 60,
                    'quantitative': 28, 'citrate': 0.015, 'tar': 8.123, 'nicotine': 0.6789, 'co': 5.005}
        result = predict_scaled(baseline, baseline, linear_coefficients)
        assert result == {'tar': 8.12, 'nicotine': 0.68, 'co': 5.01}

    def test_ratio_applied(self, linear_coefficients, baseline):
        candidate = dict(baseline, filter_ventilation=0.6)
        base_pred = predict_raw(baseline, linear_coefficients)
        cand_pred = predict_raw(candidate, linear_coefficients)

        result = predict_scaled(baseline, candidate, linear_coefficients)

        for response in RESPONSES:
            expected = baseline[response] * cand_pred[response] / base_pred[response]
            assert math.isclose(result[response], round(expected, 2), abs_tol=0.01)

    def test_zero_base_prediction_degrades_to_zero(self):
        baseline = {name: 1 for name in PREDICTORS}
        baseline.update(tar=7.0, nicotine=0.7, co=5.0)
        result = predict_scaled(baseline, baseline, _constant_coefficients(0.0))
        assert result == {'tar': 0.0, 'nicotine': 0.0, 'co': 0.0}

    def test_large_candidate_value(self, linear_coefficients, baseline):
        candidate = dict(baseline, filter_pressure_drop=1e30)
        base_pred = predict_raw(baseline, linear_coefficients)
        cand_pred = predict_raw(candidate, linear_coefficients)

        result = predict_scaled(baseline, candidate, linear_coefficients)

        for response in RESPONSES:
            expected = baseline[response] * cand_pred[response] / base_pred[response]
            assert math.isfinite(result[response])
            assert_allclose(result[response], expected, rtol=1e-12)


class TestPredictCandidates:
    """Test batch prediction with candidate keys."""

    def test_keys_default_to_index(self, linear_coefficients, baseline):
        candidates = [dict(baseline), dict(baseline, key='B'), dict(baseline, key='')]
        rows = predict_candidates(baseline, candidates, linear_coefficients)

        assert [row['key'] for row in rows] == ['0', 'B', '2']
        for row in rows:
            for response in RESPONSES:
                assert row[response] == round_yield(baseline[response])

    def test_empty(self, linear_coefficients, baseline):
        assert predict_candidates(baseline, [], linear_coefficients) == []
