"""
Recommendation searches with application defaults applied.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional
from sqlalchemy.orm import Session
import logging

from formulation.config import Settings, get_settings
from formulation.core.params import PERCENT_FIELDS, PREDICTORS, field_value, to_decimal
from formulation.core.recommendation import SearchStats, SearchTarget, recommend
from formulation.db.database import transaction
from formulation.db.history import RecommendationHistoryStore
from formulation.services.modeling import load_latest_coefficients

logger = logging.getLogger(__name__)


@dataclass
class RecommendationOutcome:
    group_name: str
    batch_no: int
    total_candidates: int
    results: List[Dict[str, Any]] = field(default_factory=list)
    record_id: Optional[int] = None


def resolve_ranges(
    ranges: Any,
    settings: Settings,
    percent_inputs: bool = True
) -> Dict[str, Dict[str, Any]]:
    """
    Read the five ranges, filling in the default step where none is given.

    Default steps are configured in UI units; when inputs are not in percent
    the ventilation and citrate defaults are divided by 100.
    """
    resolved = {}
    for name in PREDICTORS:
        rng = field_value(ranges, name)
        values = {
            "min": field_value(rng, "min"),
            "max": field_value(rng, "max"),
            "step": _optional_field(rng, "step"),
        }
        if values["step"] is None and name in settings.default_steps:
            step = to_decimal(settings.default_steps[name], f"{name}.step")
            if not percent_inputs and name in PERCENT_FIELDS:
                step = step / Decimal(100)
            values["step"] = step
        resolved[name] = values
    return resolved


def run_recommendation(
    db: Session,
    group_name: str,
    baseline: Any,
    target: Any,
    ranges: Any,
    count: Optional[int] = None,
    percent_inputs: bool = True,
    time_budget: Optional[float] = None,
    save: bool = False,
    settings: Optional[Settings] = None
) -> RecommendationOutcome:
    """
    Search the design grid with the group's latest coefficients.

    Args:
        db: Database session
        group_name: Group whose latest coefficient batch is used
        baseline: Baseline predictors and measured yields
        target: Target yields with ``<response>_weight`` fields
        ranges: min/max/step per predictor
        count: Number of results; settings default when omitted, capped at
            ``max_recommend_count``
        percent_inputs: Ventilation and citrate are given in percent
        time_budget: Wall-clock limit in seconds; settings default when omitted
        save: Store the search in the recommendation history

    Raises:
        NotFoundError: If the group has no coefficients
        InputValidationError: On malformed ranges or targets
        ExcessiveSearchSpaceError: If the grid is too large or the search
            runs out of time
    """
    settings = settings or get_settings()
    count = min(count or settings.default_recommend_count, settings.max_recommend_count)
    if time_budget is None:
        time_budget = settings.search_time_budget_seconds

    batch_no, coefficients = load_latest_coefficients(db, group_name)
    resolved = resolve_ranges(ranges, settings, percent_inputs)
    stats = SearchStats()
    recommendations = recommend(
        baseline,
        SearchTarget.from_record(target),
        resolved,
        coefficients,
        count=count,
        max_candidates=settings.max_search_candidates,
        chunk_size=settings.search_chunk_size,
        time_budget=time_budget,
        percent_inputs=percent_inputs,
        stats=stats
    )
    results = [r.to_dict() for r in recommendations]
    outcome = RecommendationOutcome(
        group_name=group_name,
        batch_no=batch_no,
        total_candidates=stats.total_candidates,
        results=results
    )
    logger.info(
        f"Recommendation for group '{group_name}': {stats.total_candidates} candidates "
        f"in {stats.elapsed_seconds:.2f}s, returned {len(results)}"
    )

    if save:
        with transaction(db):
            record = RecommendationHistoryStore(db).create(
                group_name,
                count,
                baseline,
                target,
                _json_ranges(resolved),
                results
            )
        outcome.record_id = record.id
    return outcome


def _optional_field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _json_ranges(ranges: Mapping[str, Mapping[str, Any]]) -> Dict[str, Dict[str, str]]:
    return {
        name: {key: str(value) for key, value in rng.items() if value is not None}
        for name, rng in ranges.items()
    }
