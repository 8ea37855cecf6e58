"""
Regression runs over a sample group, persisted as coefficient batches.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
from sqlalchemy.orm import Session
import logging

from formulation.config import Settings, get_settings
from formulation.core.errors import NotFoundError
from formulation.core.params import RESPONSES, LinearCoefficients, coefficient_row_values, coefficients_from_rows
from formulation.core.regression import RegressionResult, fit_samples
from formulation.db.coefficients import CoefficientStore
from formulation.db.database import transaction
from formulation.db.samples import SampleStore
from formulation.models.coefficient import CoefficientSet

logger = logging.getLogger(__name__)


@dataclass
class FitSummary:
    """Outcome of fitting one group."""
    group_name: str
    batch_no: int
    result: RegressionResult
    rows: List[CoefficientSet]


def fit(db: Session, group_name: str, settings: Optional[Settings] = None) -> FitSummary:
    """
    Fit the group's samples and store the coefficients as a new batch.

    The three coefficient rows are written in one transaction.

    Raises:
        NotFoundError: If the group has no samples
        InsufficientDataError: If there are fewer samples than required
        RegressionSingularError: If the regression cannot be solved
    """
    settings = settings or get_settings()
    samples = SampleStore(db).list_by_group(group_name)
    if not samples:
        raise NotFoundError(f"Group '{group_name}' has no samples")

    # Oldest first so the design matrix follows insertion order
    samples = list(reversed(samples))
    result = fit_samples(
        samples,
        min_samples=settings.min_regression_samples,
        allow_rank_deficient=settings.allow_rank_deficient
    )

    store = CoefficientStore(db)
    with transaction(db):
        batch_no = store.next_batch(group_name)
        rows = store.insert_batch(
            group_name,
            batch_no,
            {response: coefficient_row_values(result.weights, response) for response in RESPONSES}
        )

    logger.info(
        f"Fitted group '{group_name}' on {result.n_samples} samples as batch {batch_no} "
        f"(rank {result.rank})"
    )
    return FitSummary(group_name=group_name, batch_no=batch_no, result=result, rows=rows)


def load_latest_coefficients(db: Session, group_name: str) -> Tuple[int, Dict[str, LinearCoefficients]]:
    """Latest batch number of a group and its coefficients keyed by response."""
    rows = CoefficientStore(db).latest(group_name)
    return rows[0].batch_no, coefficients_from_rows(rows)
