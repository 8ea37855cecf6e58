"""
Multivariate linear regression of smoke yields on auxiliary-material parameters.

This module fits an ordinary least squares model relating the five
auxiliary-material parameters (filter ventilation, filter pressure drop,
paper permeability, paper basis weight, citrate) to the three measured
smoke yields (tar, nicotine, CO). All three responses are solved at once
with an intercept column appended to the design matrix:

    [X | 1] @ W = Y,    W has shape (6, 3)

Rows 0-4 of W are the predictor coefficients and row 5 is the intercept,
one column per response.

Key features:
- Single SVD-based least squares solve (``numpy.linalg.lstsq``)
- Rank deficiency detection with an optional minimum-norm fallback
- Fit diagnostics (R², RMSE) per response

References:
- NumPy linear algebra documentation (lstsq)
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Tuple

import numpy as np

from .errors import InputValidationError, InsufficientDataError, RegressionSingularError
from .params import (
    PREDICTORS,
    RESPONSES,
    LinearCoefficients,
    field_value,
    predictor_vector,
    response_vector,
)


logger = logging.getLogger(__name__)

N_PARAMETERS = len(PREDICTORS) + 1  # predictors + intercept
DEFAULT_MIN_SAMPLES = N_PARAMETERS


@dataclass
class RegressionResult:
    """Result of a multivariate linear regression fit.

    Attributes:
        weights: Weight matrix of shape (6, 3). Rows 0-4 are predictor
            coefficients in ``PREDICTORS`` order, row 5 is the intercept.
            Columns follow ``RESPONSES``.
        n_samples: Number of samples used in the fit.
        rank: Numerical rank of the augmented design matrix.
        rank_deficient: True when rank < 6 and the minimum-norm solution
            was kept. Coefficients are then not uniquely determined.
        singular_values: Singular values of the augmented design matrix.
        r_squared: Coefficient of determination per response.
        rmse: Root mean square error per response.
    """
    weights: np.ndarray
    n_samples: int
    rank: int
    rank_deficient: bool
    singular_values: np.ndarray
    r_squared: Dict[str, float]
    rmse: Dict[str, float]

    def coefficients(self) -> Dict[str, LinearCoefficients]:
        """Split the weight matrix into one coefficient set per response."""
        return {
            response: LinearCoefficients(
                response=response,
                intercept=float(self.weights[len(PREDICTORS), j]),
                weights=self.weights[:len(PREDICTORS), j].astype(float),
            )
            for j, response in enumerate(RESPONSES)
        }

    def predict(self, x: np.ndarray) -> np.ndarray:
        """Predict all three responses for a (5,) vector or (k, 5) block."""
        x = np.atleast_2d(np.asarray(x, dtype=float))
        return add_intercept(x) @ self.weights


def add_intercept(x: np.ndarray) -> np.ndarray:
    """Append a constant column of ones to a design matrix."""
    return np.hstack([x, np.ones((x.shape[0], 1))])


def build_design_matrices(samples: Iterable[Any]) -> Tuple[np.ndarray, np.ndarray]:
    """Build the predictor matrix X (n x 5) and response matrix Y (n x 3).

    Args:
        samples: Sample records (ORM rows, pydantic models or dicts) carrying
            the five predictor fields and the three yield fields.

    Returns:
        Tuple of (X, Y) float arrays.

    Raises:
        InputValidationError: If any sample has a missing or non-finite
            numeric field. The message names the sample code when known.
    """
    x_rows = []
    y_rows = []
    for index, sample in enumerate(samples):
        try:
            x_rows.append(predictor_vector(sample))
            y_rows.append(response_vector(sample))
        except InputValidationError as e:
            try:
                label = f"sample '{field_value(sample, 'code')}'"
            except InputValidationError:
                label = f"sample #{index + 1}"
            raise InputValidationError(f"Invalid {label}: {e.message}") from e

    if not x_rows:
        return np.empty((0, len(PREDICTORS))), np.empty((0, len(RESPONSES)))
    return np.vstack(x_rows), np.vstack(y_rows)


def fit_linear_model(
    x_data: np.ndarray,
    y_data: np.ndarray,
    min_samples: int = DEFAULT_MIN_SAMPLES,
    allow_rank_deficient: bool = True
) -> RegressionResult:
    """Fit OLS with intercept for all responses in one solve.

    Args:
        x_data: Predictor matrix of shape (n, 5).
        y_data: Response matrix of shape (n, 3).
        min_samples: Minimum number of samples required. The default of 6
            (predictors + intercept) is the smallest well-posed system.
        allow_rank_deficient: If True, a rank-deficient design keeps the
            minimum-norm least squares solution and is flagged on the result.
            If False, it raises RegressionSingularError.

    Returns:
        RegressionResult with the 6x3 weight matrix and diagnostics.

    Raises:
        InputValidationError: If shapes mismatch or values are not finite.
        InsufficientDataError: If fewer than ``min_samples`` samples are given.
        RegressionSingularError: If the solve fails, the weights are not
            finite, or the design is rank-deficient and not allowed.

    Examples:
        >>> x = np.random.rand(10, 5)
        >>> y = x @ np.array([[1, 0, 0], [0, 1, 0], [0, 0, 1], [1, 1, 1], [0, 0, 0]]) + 2
        >>> result = fit_linear_model(x, y)
        >>> result.weights.shape
        (6, 3)
    """
    x_data = np.asarray(x_data, dtype=float)
    y_data = np.asarray(y_data, dtype=float)

    if x_data.ndim != 2 or x_data.shape[1] != len(PREDICTORS):
        raise InputValidationError(
            f"x_data must have shape (n, {len(PREDICTORS)}), got {x_data.shape}"
        )
    if y_data.ndim != 2 or y_data.shape[1] != len(RESPONSES):
        raise InputValidationError(
            f"y_data must have shape (n, {len(RESPONSES)}), got {y_data.shape}"
        )
    if x_data.shape[0] != y_data.shape[0]:
        raise InputValidationError("x_data and y_data must have same number of rows")
    if not (np.all(np.isfinite(x_data)) and np.all(np.isfinite(y_data))):
        raise InputValidationError("Regression inputs must be finite")

    n_samples = x_data.shape[0]
    if n_samples < min_samples:
        raise InsufficientDataError(
            f"At least {min_samples} samples required for fitting, got {n_samples}"
        )

    design = add_intercept(x_data)

    try:
        weights, _, rank, singular_values = np.linalg.lstsq(design, y_data, rcond=None)
    except np.linalg.LinAlgError as e:
        raise RegressionSingularError(f"Least squares solve failed: {str(e)}") from e

    if not np.all(np.isfinite(weights)):
        raise RegressionSingularError("Regression produced non-finite coefficients")

    rank_deficient = int(rank) < N_PARAMETERS
    if rank_deficient:
        if not allow_rank_deficient:
            raise RegressionSingularError(
                f"Design matrix is rank-deficient (rank {rank} < {N_PARAMETERS}); "
                "predictors are collinear or constant"
            )
        logger.warning(
            f"Rank-deficient design (rank {rank} < {N_PARAMETERS}), "
            "keeping minimum-norm solution"
        )

    y_pred = design @ weights
    r_squared = {
        response: float(calculate_r_squared(y_data[:, j], y_pred[:, j]))
        for j, response in enumerate(RESPONSES)
    }
    rmse = {
        response: float(calculate_rmse(y_data[:, j], y_pred[:, j]))
        for j, response in enumerate(RESPONSES)
    }

    return RegressionResult(
        weights=weights,
        n_samples=n_samples,
        rank=int(rank),
        rank_deficient=rank_deficient,
        singular_values=singular_values,
        r_squared=r_squared,
        rmse=rmse
    )


def fit_samples(
    samples: Iterable[Any],
    min_samples: int = DEFAULT_MIN_SAMPLES,
    allow_rank_deficient: bool = True
) -> RegressionResult:
    """Build the design matrices from sample records and fit them."""
    x_data, y_data = build_design_matrices(samples)
    return fit_linear_model(
        x_data,
        y_data,
        min_samples=min_samples,
        allow_rank_deficient=allow_rank_deficient
    )


def calculate_r_squared(
    y_actual: np.ndarray,
    y_predicted: np.ndarray
) -> float:
    """Calculate coefficient of determination (R²).

    R² = 1 - SS_res / SS_tot

    Args:
        y_actual: Actual observed values.
        y_predicted: Model predicted values.

    Returns:
        R² value. 1.0 for a perfect fit; a constant response gives 1.0
        when it is reproduced exactly and 0.0 otherwise.
    """
    y_actual = np.asarray(y_actual)
    y_predicted = np.asarray(y_predicted)

    ss_res = np.sum((y_actual - y_predicted) ** 2)
    ss_tot = np.sum((y_actual - np.mean(y_actual)) ** 2)

    if ss_tot == 0:
        return 1.0 if ss_res == 0 else 0.0

    return 1 - (ss_res / ss_tot)


def calculate_rmse(
    y_actual: np.ndarray,
    y_predicted: np.ndarray
) -> float:
    """Calculate root mean square error (same units as the yields)."""
    y_actual = np.asarray(y_actual)
    y_predicted = np.asarray(y_predicted)

    return np.sqrt(np.mean((y_actual - y_predicted) ** 2))
