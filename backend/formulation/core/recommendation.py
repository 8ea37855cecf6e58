"""
Inverse design: grid search for auxiliary-material parameters meeting target yields.

Given a baseline sample with measured yields, target yields with relative
weights, and a closed range plus step for each of the five parameters, the
search enumerates every point of the Cartesian grid and scores it by the
weighted relative deviation of its predicted yields from the target:

    scale[r] = measured[r] / basePred[r]
    diff     = sum_r  w[r] * | scale[r] * candPred[r] / target[r] - 1 |

Lower is better. The best ``count`` candidates are returned in ascending
order of ``diff``.

Grid points are produced lazily in fixed-size chunks from the flat grid
index (C order: filter ventilation varies slowest, citrate fastest) and
scored with vectorized numpy operations. A running top-N with a stable sort
keeps ties in enumeration order, so the result does not depend on the
chunk size.

The grid size is computed from the ranges before any axis is enumerated;
a grid larger than the configured ceiling raises ExcessiveSearchSpaceError
instead of running.

Ventilation and citrate are entered as whole-number percentages by users.
``normalize_percent_inputs`` converts baseline values and range bounds to
the fractional units the regression was fitted in.
"""

import logging
import math
import time
from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .errors import ExcessiveSearchSpaceError, InputValidationError
from .params import (
    PERCENT_FIELDS,
    PREDICTORS,
    RESPONSES,
    LinearCoefficients,
    field_value,
    to_decimal,
    to_float,
)
from .prediction import predict_matrix, safe_divide


logger = logging.getLogger(__name__)

DEFAULT_RECOMMEND_COUNT = 100
DEFAULT_MAX_CANDIDATES = 2_000_000
DEFAULT_CHUNK_SIZE = 65_536

_HUNDRED = Decimal(100)


@dataclass
class ParameterRange:
    """Closed interval and step for one design parameter."""
    minimum: Decimal
    maximum: Decimal
    step: Decimal

    def scaled(self, divisor: Decimal) -> "ParameterRange":
        return ParameterRange(
            minimum=self.minimum / divisor,
            maximum=self.maximum / divisor,
            step=self.step / divisor,
        )


@dataclass
class SearchTarget:
    """Desired yields and their relative importance.

    Weights must be nonnegative; they are not required to sum to 1.
    """
    yields: Dict[str, float]
    weights: Dict[str, float]

    @classmethod
    def from_record(cls, record: Any) -> "SearchTarget":
        """Read ``tar``/``nicotine``/``co`` and ``<response>_weight`` fields."""
        yields = {r: to_float(field_value(record, r), r) for r in RESPONSES}
        weights = {}
        for r in RESPONSES:
            name = f"{r}_weight"
            weights[r] = to_float(field_value(record, name), name)
        return cls(yields=yields, weights=weights)


@dataclass
class Recommendation:
    """One ranked candidate of the search.

    Attributes:
        design_params: The five parameter values, in model units.
        predicted_yields: Raw model predictions for the candidate.
        adjusted_yields: Predictions scaled by the baseline measured/predicted
            ratio; these are what the score compares to the target.
        score: Weighted relative deviation from the target (lower is better).
    """
    design_params: Dict[str, float]
    predicted_yields: Dict[str, float]
    adjusted_yields: Dict[str, float]
    score: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "design_params": dict(self.design_params),
            "predicted_yields": dict(self.predicted_yields),
            "adjusted_yields": dict(self.adjusted_yields),
            "score": self.score,
        }


@dataclass
class SearchStats:
    """Bookkeeping of one search run."""
    grid_shape: Tuple[int, ...] = ()
    total_candidates: int = 0
    elapsed_seconds: float = 0.0
    chunks: int = 0


def as_range(value: Any, name: str) -> ParameterRange:
    """Build a ParameterRange from a ParameterRange, mapping or object.

    Mappings and objects provide ``min``, ``max`` and ``step``. The step may
    be omitted (or zero) only when ``min == max``.

    Raises:
        InputValidationError: If bounds are missing or not finite, the range
            is inverted, or the step is not positive for a non-degenerate range.
    """
    if isinstance(value, ParameterRange):
        rng = value
    else:
        minimum = to_decimal(field_value(value, "min"), f"{name}.min")
        maximum = to_decimal(field_value(value, "max"), f"{name}.max")
        try:
            raw_step = field_value(value, "step")
        except InputValidationError:
            raw_step = None
        step = Decimal(0) if raw_step is None else to_decimal(raw_step, f"{name}.step")
        rng = ParameterRange(minimum=minimum, maximum=maximum, step=step)

    if rng.minimum > rng.maximum:
        raise InputValidationError(
            f"Range for '{name}' is inverted: min {rng.minimum} > max {rng.maximum}"
        )
    if rng.minimum != rng.maximum and rng.step <= 0:
        raise InputValidationError(f"Step for '{name}' must be positive, got {rng.step}")
    return rng


def grid_count(rng: ParameterRange) -> int:
    """Number of grid points, ``floor((max - min) / step) + 1``."""
    if rng.minimum == rng.maximum:
        return 1
    steps = ((rng.maximum - rng.minimum) / rng.step).to_integral_value(rounding=ROUND_FLOOR)
    return int(steps) + 1


def grid_values(rng: ParameterRange) -> np.ndarray:
    """Grid ``{min, min + step, ..., <= max}`` computed exactly in Decimal.

    Examples:
        >>> grid_values(ParameterRange(Decimal("0.1"), Decimal("0.3"), Decimal("0.05")))
        array([0.1 , 0.15, 0.2 , 0.25, 0.3 ])
    """
    return np.array([float(rng.minimum + k * rng.step) for k in range(grid_count(rng))])


def grid_size(ranges: Mapping[str, ParameterRange]) -> int:
    """Total number of candidates of the Cartesian grid."""
    return math.prod(grid_count(ranges[name]) for name in PREDICTORS)


def normalize_percent_inputs(
    baseline: Mapping[str, Decimal],
    ranges: Mapping[str, ParameterRange],
    fields: Sequence[str] = PERCENT_FIELDS
) -> Tuple[Dict[str, Decimal], Dict[str, ParameterRange]]:
    """Divide percentage-unit fields by 100 in the baseline and the ranges.

    Args:
        baseline: Baseline predictor and yield values.
        ranges: Range per predictor.
        fields: Fields entered as percentages.

    Returns:
        New (baseline, ranges) with the given fields in fractional units.
    """
    new_baseline = dict(baseline)
    new_ranges = dict(ranges)
    for name in fields:
        if name in new_baseline:
            new_baseline[name] = new_baseline[name] / _HUNDRED
        if name in new_ranges:
            new_ranges[name] = new_ranges[name].scaled(_HUNDRED)
    return new_baseline, new_ranges


def prepare_inputs(
    baseline: Any,
    ranges: Mapping[str, Any],
    percent_inputs: bool = True
) -> Tuple[Dict[str, Decimal], Dict[str, ParameterRange]]:
    """Validate baseline and ranges and convert them to model units."""
    baseline_values = {
        name: to_decimal(field_value(baseline, name), name)
        for name in PREDICTORS + RESPONSES
    }
    missing = [name for name in PREDICTORS if name not in ranges]
    if missing:
        raise InputValidationError(f"Missing ranges for: {', '.join(missing)}")
    parsed = {name: as_range(ranges[name], name) for name in PREDICTORS}

    if percent_inputs:
        baseline_values, parsed = normalize_percent_inputs(baseline_values, parsed)
    return baseline_values, parsed


def recommend(
    baseline: Any,
    target: Any,
    ranges: Mapping[str, Any],
    coefficients: Mapping[str, LinearCoefficients],
    count: int = DEFAULT_RECOMMEND_COUNT,
    max_candidates: int = DEFAULT_MAX_CANDIDATES,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    time_budget: Optional[float] = None,
    percent_inputs: bool = True,
    stats: Optional[SearchStats] = None
) -> List[Recommendation]:
    """Search the parameter grid for the candidates closest to the target.

    Args:
        baseline: Record with the five predictors and the measured yields.
        target: SearchTarget, or a record with target yields and
            ``<response>_weight`` fields.
        ranges: Range per predictor (ParameterRange, or ``min``/``max``/``step``
            records).
        coefficients: Coefficient sets keyed by response type.
        count: Number of best candidates to return.
        max_candidates: Grid size ceiling.
        chunk_size: Number of grid points scored per vectorized block.
        time_budget: Optional wall-clock limit in seconds.
        percent_inputs: Whether ventilation and citrate (baseline and ranges)
            are given in percent and must be divided by 100.
        stats: Optional SearchStats filled in with run bookkeeping.

    Returns:
        Up to ``count`` recommendations sorted by non-decreasing score.

    Raises:
        InputValidationError: On invalid baseline, target, weights or ranges.
        ExcessiveSearchSpaceError: If the grid exceeds ``max_candidates`` or
            the search exceeds ``time_budget``.
    """
    if count < 1:
        raise InputValidationError(f"count must be at least 1, got {count}")
    if chunk_size < 1:
        raise InputValidationError(f"chunk_size must be at least 1, got {chunk_size}")

    if not isinstance(target, SearchTarget):
        target = SearchTarget.from_record(target)
    weights = np.array([target.weights[r] for r in RESPONSES], dtype=float)
    if np.any(weights < 0):
        raise InputValidationError("Target weights must be nonnegative")
    target_yields = np.array([target.yields[r] for r in RESPONSES], dtype=float)

    baseline_values, parsed_ranges = prepare_inputs(baseline, ranges, percent_inputs)

    # Axes are only enumerated once the size is known to be within the limit
    total = grid_size(parsed_ranges)
    if total > max_candidates:
        raise ExcessiveSearchSpaceError(
            f"Search grid has {total} candidates, exceeding the limit of {max_candidates}; "
            "narrow the ranges or increase the steps"
        )
    grids = [grid_values(parsed_ranges[name]) for name in PREDICTORS]
    shape = tuple(len(g) for g in grids)
    logger.info(f"Recommendation search over {total} candidates (grid {shape})")

    base_x = np.array([[float(baseline_values[name]) for name in PREDICTORS]])
    base_pred = predict_matrix(base_x, coefficients)[0]
    measured = [float(baseline_values[r]) for r in RESPONSES]
    scale = np.array([safe_divide(m, p) for m, p in zip(measured, base_pred)])

    started = time.monotonic()
    best_index = np.empty(0, dtype=np.int64)
    best_score = np.empty(0, dtype=float)
    chunks = 0

    for chunk_start in range(0, total, chunk_size):
        flat = np.arange(chunk_start, min(chunk_start + chunk_size, total), dtype=np.int64)
        x = _grid_points(grids, shape, flat)
        scores = _score(predict_matrix(x, coefficients) * scale, target_yields, weights)

        merged_score = np.concatenate([best_score, scores])
        merged_index = np.concatenate([best_index, flat])
        order = np.argsort(merged_score, kind="stable")[:count]
        best_score = merged_score[order]
        best_index = merged_index[order]
        chunks += 1

        if time_budget is not None and time.monotonic() - started > time_budget:
            raise ExcessiveSearchSpaceError(
                f"Search exceeded the time budget of {time_budget} s "
                f"after {min(chunk_start + chunk_size, total)} of {total} candidates"
            )

    x_best = _grid_points(grids, shape, best_index)
    raw_best = predict_matrix(x_best, coefficients) if len(best_index) else np.empty((0, 3))
    results = [
        Recommendation(
            design_params={name: float(x_best[i, j]) for j, name in enumerate(PREDICTORS)},
            predicted_yields={r: float(raw_best[i, k]) for k, r in enumerate(RESPONSES)},
            adjusted_yields={r: float(raw_best[i, k] * scale[k]) for k, r in enumerate(RESPONSES)},
            score=float(best_score[i]),
        )
        for i in range(len(best_index))
    ]

    if stats is not None:
        stats.grid_shape = shape
        stats.total_candidates = total
        stats.elapsed_seconds = time.monotonic() - started
        stats.chunks = chunks
    return results


def _grid_points(grids: List[np.ndarray], shape: Tuple[int, ...], flat: np.ndarray) -> np.ndarray:
    """Parameter vectors (k, 5) for flat grid indices."""
    if len(flat) == 0:
        return np.empty((0, len(grids)))
    index = np.unravel_index(flat, shape)
    return np.column_stack([grid[i] for grid, i in zip(grids, index)])


def _score(adjusted: np.ndarray, target: np.ndarray, weights: np.ndarray) -> np.ndarray:
    """Weighted sum of |adjusted / target - 1|; a zero target contributes ratio 0."""
    usable = (target != 0) & np.isfinite(target)
    ratio = np.divide(
        adjusted,
        target,
        out=np.zeros_like(adjusted),
        where=usable[np.newaxis, :]
    )
    return np.abs(ratio - 1.0) @ weights
