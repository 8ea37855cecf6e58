"""
Coefficient Store: fitted coefficient sets per (group, batch).
"""
from typing import Any, Dict, List, Mapping, Optional
from sqlalchemy import select, func, delete
from sqlalchemy.orm import Session
import logging

from formulation.core.errors import InputValidationError, NotFoundError
from formulation.core.params import COEFFICIENT_FIELDS, POTASSIUM_SENTINEL, RESPONSES
from formulation.db.crud import CRUDBase
from formulation.models.coefficient import CoefficientSet

logger = logging.getLogger(__name__)


def _response_order(row: CoefficientSet) -> int:
    return RESPONSES.index(row.response_type) if row.response_type in RESPONSES else len(RESPONSES)


class CoefficientStore(CRUDBase[CoefficientSet]):
    """Coefficient sets of one session."""

    def __init__(self, db: Session):
        super().__init__(CoefficientSet, db)

    def list_by_group(self, group_name: str, response_type: str = "") -> List[CoefficientSet]:
        """All coefficient sets of a group, newest batch first.

        Args:
            group_name: Sample group
            response_type: Optional fuzzy filter on the response type
        """
        stmt = select(CoefficientSet).where(CoefficientSet.group_name == group_name)
        if response_type:
            stmt = stmt.where(CoefficientSet.response_type.contains(response_type, autoescape=True))
        stmt = stmt.order_by(CoefficientSet.batch_no.desc(), CoefficientSet.id.desc())
        return list(self.db.execute(stmt).scalars().all())

    def list_by_group_and_batch(self, group_name: str, batch_no: int) -> List[CoefficientSet]:
        """Coefficient sets of one batch, ordered tar, nicotine, co."""
        stmt = select(CoefficientSet).where(
            CoefficientSet.group_name == group_name,
            CoefficientSet.batch_no == batch_no
        )
        rows = list(self.db.execute(stmt).scalars().all())
        return sorted(rows, key=_response_order)

    def latest_batch(self, group_name: str) -> Optional[int]:
        """Highest batch number of a group, or None if it has no coefficients."""
        stmt = select(func.max(CoefficientSet.batch_no)).where(
            CoefficientSet.group_name == group_name
        )
        return self.db.execute(stmt).scalar()

    def next_batch(self, group_name: str) -> int:
        """0 for a group without coefficients, else the latest batch + 1."""
        latest = self.latest_batch(group_name)
        return 0 if latest is None else latest + 1

    def latest(self, group_name: str) -> List[CoefficientSet]:
        """Coefficient sets of the latest batch of a group.

        Raises:
            NotFoundError: If the group has no coefficients yet
        """
        batch_no = self.latest_batch(group_name)
        if batch_no is None:
            raise NotFoundError(f"No coefficients found for group '{group_name}'")
        return self.list_by_group_and_batch(group_name, batch_no)

    def insert_batch(
        self,
        group_name: str,
        batch_no: int,
        rows: Mapping[str, Mapping[str, Any]]
    ) -> List[CoefficientSet]:
        """
        Add the three coefficient sets of one regression run.

        Args:
            group_name: Sample group
            batch_no: Batch number of the run
            rows: Storage values keyed by response type; each needs
                ``intercept`` and one ``<predictor>_coef`` per predictor

        Returns:
            The new rows, ordered tar, nicotine, co

        Raises:
            InputValidationError: If the responses are not exactly tar,
                nicotine and co, or a coefficient field is missing
        """
        if sorted(rows) != sorted(RESPONSES):
            raise InputValidationError(
                f"A coefficient batch needs exactly {', '.join(RESPONSES)}; got {', '.join(rows)}"
            )

        created = []
        for response in RESPONSES:
            values = rows[response]
            missing = [f for f in ("intercept",) + COEFFICIENT_FIELDS if f not in values]
            if missing:
                raise InputValidationError(
                    f"Coefficients for '{response}' missing: {', '.join(missing)}"
                )
            data: Dict[str, Any] = {f: str(values[f]) for f in ("intercept",) + COEFFICIENT_FIELDS}
            data.update(
                group_name=group_name,
                batch_no=batch_no,
                response_type=response,
                potassium_coef=POTASSIUM_SENTINEL,
            )
            created.append(self.add(data))
        return created

    def delete_by_group(self, group_name: str) -> int:
        """Delete every coefficient set of a group; returns the number removed."""
        result = self.db.execute(
            delete(CoefficientSet).where(CoefficientSet.group_name == group_name)
        )
        self.db.flush()
        if result.rowcount:
            logger.info(f"Deleted {result.rowcount} coefficient sets of group '{group_name}'")
        return int(result.rowcount or 0)
