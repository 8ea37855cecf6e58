"""
Field remapping between storage records and the numeric core.

Samples, baselines and coefficient sets are stored with decimal text so the
exact measured values survive a round trip. The regression, prediction and
recommendation code works on float vectors in a fixed field order. This
module owns that order and the conversions in both directions:

- ``PREDICTORS`` / ``RESPONSES``: the five auxiliary-material parameters and
  the three smoke yields, in the column order of every matrix in the core.
- ``predictor_vector`` / ``response_vector``: any record (ORM row, pydantic
  model, plain dict) to a float array, with finiteness validation.
- ``LinearCoefficients`` with ``coefficients_from_rows`` (storage to
  computation) and ``coefficient_row_values`` (computation to storage).
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, Optional, Tuple

import numpy as np

from .errors import InputValidationError


PREDICTORS: Tuple[str, ...] = (
    "filter_ventilation",    # 滤嘴通风率 (fraction)
    "filter_pressure_drop",  # 滤棒压降 (Pa)
    "permeability",          # 透气度 (CU)
    "quantitative",          # 定量 (g/m2)
    "citrate",               # 柠檬酸根 (fraction)
)

RESPONSES: Tuple[str, ...] = ("tar", "nicotine", "co")

COEFFICIENT_FIELDS: Tuple[str, ...] = tuple(f"{name}_coef" for name in PREDICTORS)

# Entered as whole-number percentages in the UI, stored as fractions.
PERCENT_FIELDS: Tuple[str, ...] = ("filter_ventilation", "citrate")

# Potassium ratio coefficient is reserved in the schema and never fitted.
POTASSIUM_SENTINEL = "null"

_MISSING = object()


def field_value(record: Any, name: str) -> Any:
    """Read a field from a mapping or an attribute-bearing object.

    Raises:
        InputValidationError: If the field is absent.
    """
    if isinstance(record, Mapping):
        value = record.get(name, _MISSING)
    else:
        value = getattr(record, name, _MISSING)
    if value is _MISSING:
        raise InputValidationError(f"Missing required field '{name}'")
    return value


def to_float(value: Any, field: str) -> float:
    """Convert a decimal-like value to a finite float.

    Accepts ``Decimal``, ``int``, ``float`` and numeric strings.

    Raises:
        InputValidationError: If the value is missing, not numeric, or not finite.
    """
    if value is None or isinstance(value, bool):
        raise InputValidationError(f"Field '{field}' must be a number, got {value!r}")
    try:
        result = float(value)
    except (TypeError, ValueError, InvalidOperation):
        raise InputValidationError(f"Field '{field}' must be a number, got {value!r}")
    if not math.isfinite(result):
        raise InputValidationError(f"Field '{field}' must be finite, got {value!r}")
    return result


def to_decimal(value: Any, field: str) -> Decimal:
    """Convert a value to a finite ``Decimal``.

    Floats go through ``str`` so ``0.1`` becomes ``Decimal('0.1')`` rather
    than its binary expansion.

    Raises:
        InputValidationError: If the value is missing, not numeric, or not finite.
    """
    if value is None or isinstance(value, bool):
        raise InputValidationError(f"Field '{field}' must be a number, got {value!r}")
    try:
        if isinstance(value, Decimal):
            result = value
        elif isinstance(value, float):
            result = Decimal(repr(value))
        else:
            result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InputValidationError(f"Field '{field}' must be a number, got {value!r}")
    if not result.is_finite():
        raise InputValidationError(f"Field '{field}' must be finite, got {value!r}")
    return result


def format_decimal(value: float) -> str:
    """Format a float for decimal-text storage (shortest round-trip repr)."""
    return repr(float(value))


def predictor_vector(record: Any) -> np.ndarray:
    """Extract the five predictors of a record as a float array."""
    return np.array([to_float(field_value(record, name), name) for name in PREDICTORS])


def response_vector(record: Any) -> np.ndarray:
    """Extract the three measured yields of a record as a float array."""
    return np.array([to_float(field_value(record, name), name) for name in RESPONSES])


@dataclass
class LinearCoefficients:
    """One response variable's fitted linear model.

    Attributes:
        response: Response type (tar, nicotine or co).
        intercept: Constant term.
        weights: Coefficients in ``PREDICTORS`` order, shape (5,).
        batch_no: Batch the coefficients belong to, if loaded from storage.
    """
    response: str
    intercept: float
    weights: np.ndarray
    batch_no: Optional[int] = None

    def predict(self, x: np.ndarray) -> np.ndarray:
        """Affine prediction for one vector (5,) or a block of vectors (k, 5)."""
        return self.intercept + np.asarray(x, dtype=float) @ self.weights


def coefficients_from_rows(rows: Iterable[Any]) -> Dict[str, LinearCoefficients]:
    """Map stored coefficient rows to computation objects keyed by response.

    Rows may come in any order; each of tar, nicotine and co must appear
    exactly once. The potassium coefficient is ignored.

    Raises:
        InputValidationError: If a response is missing, repeated or unknown,
            or a coefficient is not a finite number.
    """
    result: Dict[str, LinearCoefficients] = {}
    for row in rows:
        response = field_value(row, "response_type")
        if response not in RESPONSES:
            raise InputValidationError(f"Unknown response type '{response}'")
        if response in result:
            raise InputValidationError(f"Duplicate coefficients for response '{response}'")
        batch_no = field_value(row, "batch_no") if _has_field(row, "batch_no") else None
        result[response] = LinearCoefficients(
            response=response,
            intercept=to_float(field_value(row, "intercept"), "intercept"),
            weights=np.array([
                to_float(field_value(row, name), name) for name in COEFFICIENT_FIELDS
            ]),
            batch_no=int(batch_no) if batch_no is not None else None,
        )

    missing = [r for r in RESPONSES if r not in result]
    if missing:
        raise InputValidationError(f"Incomplete coefficient batch, missing: {', '.join(missing)}")
    return result


def coefficient_row_values(weights: np.ndarray, response: str) -> Dict[str, str]:
    """Storage field values for one response column of a 6x3 weight matrix.

    Row 5 is the intercept, rows 0-4 the predictor coefficients.
    """
    column = RESPONSES.index(response)
    values = {"intercept": format_decimal(weights[len(PREDICTORS), column])}
    for i, name in enumerate(COEFFICIENT_FIELDS):
        values[name] = format_decimal(weights[i, column])
    values["potassium_coef"] = POTASSIUM_SENTINEL
    return values


def _has_field(record: Any, name: str) -> bool:
    if isinstance(record, Mapping):
        return name in record
    return hasattr(record, name)
