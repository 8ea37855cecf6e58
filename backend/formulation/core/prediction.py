"""
Forward prediction of smoke yields from auxiliary-material parameters.

Two modes are provided:

- Raw: the fitted affine model evaluated directly,
  ``intercept + sum(predictor_i * coef_i)``.
- Scaled: the candidate prediction anchored to a baseline sample whose
  yields were actually measured,

      result[r] = measured[r] * candPred[r] / basePred[r]

  which cancels the systematic bias of the regression at the baseline.
  Scaled prediction is the mode used for every user-facing result.

A zero or non-finite baseline prediction makes the ratio undefined. The
result then degrades to 0 instead of raising.
"""

import math
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np

from .errors import InputValidationError
from .params import RESPONSES, LinearCoefficients, field_value, predictor_vector, response_vector


YIELD_DECIMALS = 2


def safe_divide(numerator: float, denominator: float) -> float:
    """Divide, returning 0 when the denominator is zero or not finite.

    Examples:
        >>> safe_divide(1.0, 4.0)
        0.25
        >>> safe_divide(1.0, 0.0)
        0.0
        >>> safe_divide(1.0, float("nan"))
        0.0
    """
    if denominator == 0 or not math.isfinite(denominator):
        return 0.0
    return numerator / denominator


def round_yield(value: float, decimals: int = YIELD_DECIMALS) -> float:
    """Round a yield half-up to ``decimals`` places; non-finite values become 0."""
    if not math.isfinite(value):
        return 0.0
    quantum = Decimal(1).scaleb(-decimals)
    exact = Decimal(repr(float(value)))
    with localcontext() as ctx:
        # Enough digits for every integer digit plus the kept decimals
        ctx.prec = max(ctx.prec, exact.adjusted() + decimals + 2)
        return float(exact.quantize(quantum, rounding=ROUND_HALF_UP))


def check_coefficients(coefficients: Mapping[str, LinearCoefficients]) -> None:
    """Ensure one coefficient set per response is present."""
    missing = [r for r in RESPONSES if r not in coefficients]
    if missing:
        raise InputValidationError(f"Missing coefficients for: {', '.join(missing)}")


def predict_raw(
    params: Any,
    coefficients: Mapping[str, LinearCoefficients]
) -> Dict[str, float]:
    """Evaluate the linear model for one parameter vector.

    Args:
        params: Record carrying the five predictor fields.
        coefficients: Coefficient sets keyed by response type.

    Returns:
        Dictionary of raw predictions keyed by response type.

    Raises:
        InputValidationError: If a predictor is missing or not finite, or a
            response has no coefficients.
    """
    check_coefficients(coefficients)
    x = predictor_vector(params)
    return {response: float(coefficients[response].predict(x)) for response in RESPONSES}


def predict_scaled(
    baseline: Any,
    candidate: Any,
    coefficients: Mapping[str, LinearCoefficients]
) -> Dict[str, float]:
    """Predict candidate yields scaled by the baseline's measured/predicted ratio.

    Args:
        baseline: Record with the five predictors and the three measured yields.
        candidate: Record with the five predictors.
        coefficients: Coefficient sets keyed by response type.

    Returns:
        Dictionary of predicted yields rounded to 2 decimals.
    """
    base_pred = predict_raw(baseline, coefficients)
    cand_pred = predict_raw(candidate, coefficients)
    measured = dict(zip(RESPONSES, response_vector(baseline)))

    return {
        response: round_yield(
            measured[response] * safe_divide(cand_pred[response], base_pred[response])
        )
        for response in RESPONSES
    }


def predict_candidates(
    baseline: Any,
    candidates: Sequence[Any],
    coefficients: Mapping[str, LinearCoefficients]
) -> List[Dict[str, Any]]:
    """Scaled prediction for a list of candidates.

    Each row holds the predicted yields, then the candidate key (its index
    when none is given) is attached.
    """
    rows = []
    for index, candidate in enumerate(candidates):
        row: Dict[str, Any] = dict(predict_scaled(baseline, candidate, coefficients))
        row["key"] = _candidate_key(candidate, index)
        rows.append(row)
    return rows


def predict_matrix(
    x: np.ndarray,
    coefficients: Mapping[str, LinearCoefficients]
) -> np.ndarray:
    """Raw predictions for a (k, 5) block, returned as (k, 3) in RESPONSES order."""
    check_coefficients(coefficients)
    return np.column_stack([coefficients[r].predict(x) for r in RESPONSES])


def _candidate_key(candidate: Any, index: int) -> str:
    try:
        key: Optional[Any] = field_value(candidate, "key")
    except InputValidationError:
        key = None
    return str(key) if key not in (None, "") else str(index)
