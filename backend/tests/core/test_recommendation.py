"""
Unit tests for the recommendation grid search.

Tests cover:
- Grid enumeration and range validation
- Percent normalization
- Scoring and ranking against a brute-force reference
- Search-space and time guards
"""

import itertools
import pytest
import numpy as np
from decimal import Decimal
from numpy.testing import assert_allclose

from formulation.core import recommendation as search
from formulation.core.errors import ExcessiveSearchSpaceError, InputValidationError
from formulation.core.params import PREDICTORS, RESPONSES
from formulation.core.prediction import predict_raw, safe_divide
from formulation.core.recommendation import (
    ParameterRange,
    SearchStats,
    SearchTarget,
    as_range,
    grid_count,
    grid_size,
    grid_values,
    normalize_percent_inputs,
    recommend,
)


def _range(minimum, maximum, step):
    return ParameterRange(Decimal(str(minimum)), Decimal(str(maximum)), Decimal(str(step)))


def _target(baseline, **weights):
    target = {r: baseline[r] for r in RESPONSES}
    for r in RESPONSES:
        target[f"{r}_weight"] = weights.get(r, 1.0)
    return target


@pytest.fixture
def small_ranges():
    """72-point grid in model units."""
    return {
        'filter_ventilation': {'min': 0.3, 'max': 0.5, 'step': 0.1},
        'filter_pressure_drop': {'min': 4000, 'max': 4400, 'step': 400},
        'permeability': {'min': 50, 'max': 70, 'step': 20},
        'quantitative': {'min': 26, 'max': 30, 'step': 4},
        'citrate': {'min': 0.01, 'max': 0.02, 'step': 0.005},
    }


class TestGrid:
    """Test grid enumeration."""

    def test_count_floor(self):
        rng = _range(0, 1, 0.3)
        assert grid_count(rng) == 4
        assert_allclose(grid_values(rng), [0, 0.3, 0.6, 0.9])

    def test_max_reached_exactly(self):
        """Decimal steps hit max without floating drift."""
        rng = _range(0.1, 0.3, 0.05)
        values = grid_values(rng)
        assert len(values) == 5
        assert values[-1] == 0.3

    @pytest.mark.parametrize("minimum,maximum,step", [
        (0, 10, 3), (3868, 5831, 200), (25.1, 32.8, 2), (0.9, 2.2, 0.4),
    ])
    def test_count_formula(self, minimum, maximum, step):
        rng = _range(minimum, maximum, step)
        expected = int((Decimal(str(maximum)) - Decimal(str(minimum))) // Decimal(str(step))) + 1
        values = grid_values(rng)
        assert len(values) == expected
        assert values[-1] <= maximum

    def test_degenerate_range(self):
        rng = as_range({'min': 5, 'max': 5}, 'permeability')
        assert grid_count(rng) == 1
        assert_allclose(grid_values(rng), [5])

    def test_grid_size(self):
        ranges = {name: _range(0, 1, 0.5) for name in PREDICTORS}
        assert grid_size(ranges) == 3 ** 5

    def test_inverted_range(self):
        with pytest.raises(InputValidationError, match="inverted"):
            as_range({'min': 2, 'max': 1, 'step': 1}, 'quantitative')

    @pytest.mark.parametrize("step", [0, -1, None])
    def test_non_positive_step(self, step):
        with pytest.raises(InputValidationError, match="Step"):
            as_range({'min': 1, 'max': 2, 'step': step}, 'quantitative')


class TestNormalizePercentInputs:
    """Test percent to fraction conversion."""

    def test_scales_baseline_and_ranges(self):
        baseline = {'filter_ventilation': Decimal('40.9'), 'citrate': Decimal('2.2'), 'tar': Decimal('6.8')}
        ranges = {
            'filter_ventilation': _range(30, 50, 5),
            'citrate': _range(1, 2, 0.4),
            'permeability': _range(40, 80, 5),
        }

        new_baseline, new_ranges = normalize_percent_inputs(baseline, ranges)

        assert new_baseline['filter_ventilation'] == Decimal('0.409')
        assert new_baseline['citrate'] == Decimal('0.022')
        assert new_baseline['tar'] == Decimal('6.8')
        assert new_ranges['filter_ventilation'] == _range('0.3', '0.5', '0.05')
        assert new_ranges['citrate'].step == Decimal('0.004')
        assert new_ranges['permeability'] == ranges['permeability']
        assert grid_count(new_ranges['citrate']) == grid_count(ranges['citrate'])


class TestRecommend:
    """Test the grid search."""

    def test_degenerate_range_matches_baseline(self, baseline, linear_coefficients):
        """Target == measured and a single-point grid at the baseline gives diff 0."""
        percent_baseline = dict(baseline, filter_ventilation=40, citrate=1.5)
        ranges = {
            name: {'min': percent_baseline[name], 'max': percent_baseline[name]}
            for name in PREDICTORS
        }

        results = recommend(percent_baseline, _target(baseline), ranges, linear_coefficients)

        assert len(results) == 1
        assert results[0].score == pytest.approx(0.0, abs=1e-9)
        assert results[0].design_params['filter_ventilation'] == pytest.approx(0.4)
        assert results[0].design_params['citrate'] == pytest.approx(0.015)
        for r in RESPONSES:
            assert results[0].adjusted_yields[r] == pytest.approx(baseline[r])

    def test_matches_brute_force(self, baseline, linear_coefficients, small_ranges):
        target = dict(_target(baseline, tar=0.5, nicotine=0.3, co=0.2), tar=7.0, nicotine=0.5, co=4.0)
        base_pred = predict_raw(baseline, linear_coefficients)

        expected = []
        grids = [grid_values(as_range(small_ranges[name], name)) for name in PREDICTORS]
        for point in itertools.product(*grids):
            candidate = dict(zip(PREDICTORS, point))
            cand_pred = predict_raw(candidate, linear_coefficients)
            diff = sum(
                target[f"{r}_weight"] * abs(
                    safe_divide(baseline[r], base_pred[r]) * cand_pred[r] / target[r] - 1
                )
                for r in RESPONSES
            )
            expected.append((diff, point))
        expected.sort(key=lambda item: item[0])

        results = recommend(
            baseline, target, small_ranges, linear_coefficients, count=10, percent_inputs=False
        )

        assert len(results) == 10
        assert_allclose([r.score for r in results], [e[0] for e in expected[:10]], rtol=1e-9)
        assert_allclose(
            [[r.design_params[name] for name in PREDICTORS] for r in results],
            [e[1] for e in expected[:10]]
        )

    def test_sorted_and_capped(self, baseline, linear_coefficients, small_ranges):
        results = recommend(
            baseline, _target(baseline), small_ranges, linear_coefficients,
            count=500, percent_inputs=False
        )
        scores = [r.score for r in results]
        assert len(results) == 72
        assert scores == sorted(scores)

    @pytest.mark.parametrize("chunk_size", [1, 7, 72, 10_000])
    def test_chunk_size_independent(self, baseline, linear_coefficients, small_ranges, chunk_size):
        """Ties keep enumeration order whatever the chunk size."""
        target = _target(baseline, tar=1.0, nicotine=0.0, co=0.0)
        reference = recommend(
            baseline, target, small_ranges, linear_coefficients,
            count=20, percent_inputs=False, chunk_size=72
        )
        results = recommend(
            baseline, target, small_ranges, linear_coefficients,
            count=20, percent_inputs=False, chunk_size=chunk_size
        )
        assert [r.design_params for r in results] == [r.design_params for r in reference]
        assert_allclose([r.score for r in results], [r.score for r in reference], rtol=1e-12, atol=1e-12)

    def test_predicted_vs_adjusted(self, baseline, linear_coefficients, small_ranges):
        measured = dict(baseline, tar=baseline['tar'] * 1.1)
        results = recommend(
            measured, _target(measured), small_ranges, linear_coefficients,
            count=3, percent_inputs=False
        )
        for result in results:
            raw = predict_raw(result.design_params, linear_coefficients)
            assert_allclose(result.predicted_yields['tar'], raw['tar'])
            assert_allclose(result.adjusted_yields['tar'], raw['tar'] * 1.1)
            assert_allclose(result.adjusted_yields['co'], raw['co'])

    def test_zero_target_contributes_full_weight(self, baseline, linear_coefficients, small_ranges):
        target = dict(_target(baseline, tar=1.0, nicotine=0.0, co=0.0), tar=0)
        results = recommend(
            baseline, target, small_ranges, linear_coefficients, count=5, percent_inputs=False
        )
        assert_allclose([r.score for r in results], 1.0)

    def test_weights_do_not_need_to_sum_to_one(self, baseline, linear_coefficients, small_ranges):
        target = _target(baseline, tar=3.0, nicotine=2.0, co=5.0)
        results = recommend(baseline, target, small_ranges, linear_coefficients, percent_inputs=False)
        assert len(results) == 72

    def test_negative_weight(self, baseline, linear_coefficients, small_ranges):
        target = _target(baseline, co=-0.1)
        with pytest.raises(InputValidationError, match="nonnegative"):
            recommend(baseline, target, small_ranges, linear_coefficients, percent_inputs=False)

    def test_excessive_search_space(self, baseline, linear_coefficients):
        ranges = {name: {'min': 0, 'max': 100, 'step': 1} for name in PREDICTORS}
        with pytest.raises(ExcessiveSearchSpaceError, match="exceeding"):
            recommend(
                baseline, _target(baseline), ranges, linear_coefficients,
                max_candidates=1_000_000, percent_inputs=False
            )

    def test_oversized_axis_rejected_before_enumeration(self, baseline, linear_coefficients, monkeypatch):
        def enumerate_axis(rng):
            raise AssertionError("grid axis enumerated before the size check")

        monkeypatch.setattr(search, "grid_values", enumerate_axis)
        ranges = {name: {'min': 1, 'max': 1, 'step': 0} for name in PREDICTORS}
        ranges['permeability'] = {'min': 0, 'max': 1, 'step': '1e-12'}
        with pytest.raises(ExcessiveSearchSpaceError, match="1000000000001 candidates"):
            recommend(
                baseline, _target(baseline), ranges, linear_coefficients,
                max_candidates=10, percent_inputs=False
            )

    def test_time_budget(self, baseline, linear_coefficients, small_ranges, monkeypatch):
        clock = itertools.count(step=10.0)
        monkeypatch.setattr(search.time, "monotonic", lambda: next(clock))
        with pytest.raises(ExcessiveSearchSpaceError, match="time budget"):
            recommend(
                baseline, _target(baseline), small_ranges, linear_coefficients,
                chunk_size=8, time_budget=5.0, percent_inputs=False
            )

    def test_missing_range(self, baseline, linear_coefficients, small_ranges):
        del small_ranges['citrate']
        with pytest.raises(InputValidationError, match="citrate"):
            recommend(baseline, _target(baseline), small_ranges, linear_coefficients)

    def test_stats(self, baseline, linear_coefficients, small_ranges):
        stats = SearchStats()
        recommend(
            baseline, SearchTarget.from_record(_target(baseline)), small_ranges,
            linear_coefficients, chunk_size=10, percent_inputs=False, stats=stats
        )
        assert stats.grid_shape == (3, 2, 2, 2, 3)
        assert stats.total_candidates == 72
        assert stats.chunks == 8
