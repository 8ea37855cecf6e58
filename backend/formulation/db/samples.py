"""
Sample Store: measured specimens grouped by group name.
"""
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple
from sqlalchemy import select, func, delete
from sqlalchemy.orm import Session
from pydantic import BaseModel
import logging

from formulation.core.errors import DuplicateCodeError, InputValidationError, NotFoundError
from formulation.core.params import PREDICTORS, RESPONSES, to_decimal
from formulation.db.crud import CRUDBase, storage_values
from formulation.db.coefficients import CoefficientStore
from formulation.models.sample import Sample

logger = logging.getLogger(__name__)

DECIMAL_FIELDS = tuple(f for f in PREDICTORS if f != "filter_pressure_drop") + RESPONSES


def sample_values(
    obj_in: BaseModel | Dict[str, Any],
    group_name: Optional[str] = None,
    row: Optional[int] = None
) -> Dict[str, Any]:
    """
    Validate one sample and convert it to storage values.

    Args:
        obj_in: Schema or dict with the sample fields
        group_name: Overrides any group name on the input
        row: 1-based row number used in error messages

    Returns:
        Column values for a ``Sample``

    Raises:
        InputValidationError: If a field is missing or not a finite number
    """
    data = storage_values(obj_in)
    where = f" (row {row})" if row is not None else ""
    if group_name is not None:
        data["group_name"] = group_name

    for name in ("group_name", "code"):
        if not str(data.get(name) or "").strip():
            raise InputValidationError(f"Sample{where}: '{name}' is required")

    values: Dict[str, Any] = {
        "group_name": str(data["group_name"]),
        "code": str(data["code"]),
    }
    try:
        for name in DECIMAL_FIELDS:
            values[name] = str(to_decimal(data.get(name), name))
        pressure_drop = to_decimal(data.get("filter_pressure_drop"), "filter_pressure_drop")
        if pressure_drop != pressure_drop.to_integral_value():
            raise InputValidationError(
                f"filter_pressure_drop must be an integer, got {data.get('filter_pressure_drop')!r}"
            )
        values["filter_pressure_drop"] = int(pressure_drop)
        potassium = data.get("potassium_ratio")
        values["potassium_ratio"] = (
            None if potassium in (None, "") else str(to_decimal(potassium, "potassium_ratio"))
        )
    except InputValidationError as e:
        raise InputValidationError(f"Sample '{values['code']}'{where}: {e.message}") from e
    return values


class SampleStore(CRUDBase[Sample]):
    """Samples of one session."""

    def __init__(self, db: Session):
        super().__init__(Sample, db)

    def list_groups(self) -> List[str]:
        """Distinct group names, most recently created group first."""
        stmt = (
            select(Sample.group_name)
            .group_by(Sample.group_name)
            .order_by(func.max(Sample.created_at).desc(), func.max(Sample.id).desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def list_by_group(self, group_name: str) -> List[Sample]:
        """Samples of a group, newest first."""
        stmt = (
            select(Sample)
            .where(Sample.group_name == group_name)
            .order_by(Sample.created_at.desc(), Sample.id.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def find_by_code_and_group(self, code: str, group_name: str) -> List[Sample]:
        """Samples of a group whose code contains ``code``."""
        stmt = (
            select(Sample)
            .where(
                Sample.group_name == group_name,
                Sample.code.contains(code, autoescape=True)
            )
            .order_by(Sample.created_at.desc(), Sample.id.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def count_by_group(self, group_name: str) -> int:
        stmt = select(func.count()).select_from(Sample).where(Sample.group_name == group_name)
        return int(self.db.execute(stmt).scalar_one())

    def existing_codes(self, group_name: str, codes: Sequence[str]) -> Set[str]:
        if not codes:
            return set()
        stmt = select(Sample.code).where(
            Sample.group_name == group_name,
            Sample.code.in_(list(codes))
        )
        return set(self.db.execute(stmt).scalars().all())

    def create(self, obj_in: BaseModel | Dict[str, Any]) -> Sample:
        """
        Add one sample.

        Raises:
            InputValidationError: If a field is missing or malformed
            DuplicateCodeError: If the code already exists in the group
        """
        values = sample_values(obj_in)
        if self.existing_codes(values["group_name"], [values["code"]]):
            raise DuplicateCodeError(values["code"], values["group_name"])
        return self.add(values)

    def create_many(self, group_name: str, rows: Sequence[BaseModel | Dict[str, Any]]) -> List[Sample]:
        """
        Add a batch of samples to one group.

        Every row is validated before anything is added, so a bad row leaves
        the store untouched. Run inside a transaction to make it durable.

        Raises:
            InputValidationError: Naming the first malformed row
            DuplicateCodeError: Naming the first row whose code exists in the
                group or repeats an earlier row of the batch
        """
        if not rows:
            raise InputValidationError("No samples to import")

        prepared = [sample_values(row, group_name, index) for index, row in enumerate(rows, start=1)]
        existing = self.existing_codes(group_name, [values["code"] for values in prepared])

        seen: Set[str] = set()
        for index, values in enumerate(prepared, start=1):
            code = values["code"]
            if code in existing or code in seen:
                raise DuplicateCodeError(code, group_name, row=index)
            seen.add(code)

        created = [Sample(**values) for values in prepared]
        self.db.add_all(created)
        self.db.flush()
        logger.info(f"Imported {len(created)} samples into group '{group_name}'")
        return created

    def delete_by_id(self, id: int) -> Sample:
        """
        Delete one sample.

        Removing the last sample of a group also removes the group's
        coefficient sets.
        """
        sample = self.delete(id)
        if self.count_by_group(sample.group_name) == 0:
            CoefficientStore(self.db).delete_by_group(sample.group_name)
        return sample

    def delete_by_group(self, group_name: str) -> Tuple[int, int]:
        """
        Delete a group's samples and coefficient sets.

        Returns:
            (samples deleted, coefficient sets deleted)

        Raises:
            NotFoundError: If the group has neither
        """
        result = self.db.execute(delete(Sample).where(Sample.group_name == group_name))
        samples_deleted = int(result.rowcount or 0)
        coefficients_deleted = CoefficientStore(self.db).delete_by_group(group_name)
        if samples_deleted == 0 and coefficients_deleted == 0:
            raise NotFoundError(f"Group '{group_name}' not found")
        self.db.flush()
        logger.info(f"Deleted group '{group_name}': {samples_deleted} samples")
        return samples_deleted, coefficients_deleted
