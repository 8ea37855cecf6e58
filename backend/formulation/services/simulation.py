"""
Forward simulation of candidate formulations against a measured baseline.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
from sqlalchemy.orm import Session
import logging

from formulation.core.errors import InputValidationError
from formulation.core.params import PREDICTORS, field_value, to_decimal
from formulation.core.prediction import predict_candidates, predict_raw
from formulation.db.database import transaction
from formulation.db.history import SimulationHistoryStore
from formulation.services.modeling import load_latest_coefficients

logger = logging.getLogger(__name__)


@dataclass
class SimulationOutcome:
    group_name: str
    batch_no: int
    results: List[Dict[str, Any]] = field(default_factory=list)
    record_id: Optional[int] = None


def candidate_values(candidate: Any, index: int) -> Dict[str, Any]:
    """Stored form of a candidate: its key and the five predictors as text."""
    values: Dict[str, Any] = {
        name: str(to_decimal(field_value(candidate, name), name)) for name in PREDICTORS
    }
    try:
        key = field_value(candidate, "key")
    except InputValidationError:
        key = None
    values["key"] = str(key) if key not in (None, "") else str(index)
    return values


def simulate(
    db: Session,
    group_name: str,
    baseline: Any,
    candidates: Sequence[Any],
    save: bool = False
) -> SimulationOutcome:
    """
    Predict every candidate with the group's latest coefficients.

    Args:
        db: Database session
        group_name: Group whose latest coefficient batch is used
        baseline: Baseline predictors and measured yields
        candidates: Candidate predictor vectors, optionally keyed
        save: Store the run in the simulation history

    Raises:
        NotFoundError: If the group has no coefficients
    """
    batch_no, coefficients = load_latest_coefficients(db, group_name)
    results = predict_candidates(baseline, candidates, coefficients)
    outcome = SimulationOutcome(group_name=group_name, batch_no=batch_no, results=results)

    if save:
        with transaction(db):
            record = SimulationHistoryStore(db).create(
                group_name,
                baseline,
                [candidate_values(c, i) for i, c in enumerate(candidates)],
                results,
                batch_no=batch_no
            )
        outcome.record_id = record.id
        logger.info(f"Saved simulation {record.id} for group '{group_name}'")
    return outcome


def simulate_raw(db: Session, group_name: str, params: Any) -> Dict[str, Any]:
    """Unscaled model output for one parameter vector."""
    batch_no, coefficients = load_latest_coefficients(db, group_name)
    result: Dict[str, Any] = dict(predict_raw(params, coefficients))
    result.update(group_name=group_name, batch_no=batch_no)
    return result
