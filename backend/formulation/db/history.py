"""
History Store: saved simulation and recommendation runs.
"""
from typing import Any, Dict, List, Mapping, Optional, Sequence
from sqlalchemy import select
from sqlalchemy.orm import Session

from formulation.core.params import PREDICTORS, RESPONSES, field_value, to_decimal
from formulation.db.crud import CRUDBase
from formulation.models.history import RecommendationRecord, SimulationRecord


def _decimal_text(record: Any, name: str) -> str:
    return str(to_decimal(field_value(record, name), name))


def _baseline_values(baseline: Any) -> Dict[str, str]:
    return {name: _decimal_text(baseline, name) for name in PREDICTORS + RESPONSES}


class SimulationHistoryStore(CRUDBase[SimulationRecord]):
    """Saved simulation runs."""

    def __init__(self, db: Session):
        super().__init__(SimulationRecord, db)

    def list_all(self, group_name: Optional[str] = None) -> List[SimulationRecord]:
        stmt = select(SimulationRecord)
        if group_name:
            stmt = stmt.where(SimulationRecord.group_name == group_name)
        stmt = stmt.order_by(SimulationRecord.created_at.desc(), SimulationRecord.id.desc())
        return list(self.db.execute(stmt).scalars().all())

    def create(
        self,
        group_name: str,
        baseline: Any,
        candidates: Sequence[Mapping[str, Any]],
        results: Sequence[Mapping[str, Any]],
        batch_no: Optional[int] = None
    ) -> SimulationRecord:
        data: Dict[str, Any] = _baseline_values(baseline)
        data.update(
            group_name=group_name,
            batch_no=batch_no,
            candidates=[dict(c) for c in candidates],
            results=[dict(r) for r in results],
        )
        return self.add(data)


class RecommendationHistoryStore(CRUDBase[RecommendationRecord]):
    """Saved recommendation searches."""

    def __init__(self, db: Session):
        super().__init__(RecommendationRecord, db)

    def list_all(self, group_name: Optional[str] = None) -> List[RecommendationRecord]:
        stmt = select(RecommendationRecord)
        if group_name:
            stmt = stmt.where(RecommendationRecord.group_name == group_name)
        stmt = stmt.order_by(RecommendationRecord.created_at.desc(), RecommendationRecord.id.desc())
        return list(self.db.execute(stmt).scalars().all())

    def create(
        self,
        group_name: str,
        recommend_count: int,
        baseline: Any,
        target: Any,
        ranges: Mapping[str, Any],
        results: Sequence[Mapping[str, Any]]
    ) -> RecommendationRecord:
        """
        Save one search.

        Each target yield is stored in its own column, together with its
        weight (``<response>_weight`` on ``target``).
        """
        data: Dict[str, Any] = _baseline_values(baseline)
        for response in RESPONSES:
            data[f"target_{response}"] = _decimal_text(target, response)
            data[f"{response}_weight"] = _decimal_text(target, f"{response}_weight")
        data.update(
            group_name=group_name,
            recommend_count=recommend_count,
            ranges=dict(ranges),
            results=[dict(r) for r in results],
        )
        return self.add(data)
