"""
Typed failures raised by the modeling, prediction and recommendation engine.

Every error carries the HTTP status the API layer reports it with, so the
routers never need to translate them one by one.
"""
from typing import Optional


class FormulationError(Exception):
    """Base class for all domain errors."""
    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputValidationError(FormulationError):
    """Malformed, missing or non-finite numeric input."""
    status_code = 422


class InsufficientDataError(FormulationError):
    """Too few samples to fit a well-posed regression."""
    status_code = 422


class RegressionSingularError(FormulationError):
    """Design matrix is not usable or the solve produced non-finite weights."""
    status_code = 422


class NotFoundError(FormulationError):
    """Referenced group, batch, sample or record does not exist."""
    status_code = 404


class ExcessiveSearchSpaceError(FormulationError):
    """Recommendation grid exceeds the candidate ceiling or time budget."""
    status_code = 413


class DuplicateCodeError(FormulationError):
    """Sample code already exists within its group.

    Attributes:
        code: The duplicated sample code.
        group_name: Group the code collides in.
        row: 1-based row of the failing record in a bulk import, if any.
    """
    status_code = 409

    def __init__(self, code: str, group_name: str, row: Optional[int] = None):
        if row is None:
            message = f"Sample code '{code}' already exists in group '{group_name}'"
        else:
            message = f"Row {row}: sample code '{code}' already exists in group '{group_name}'"
        super().__init__(message)
        self.code = code
        self.group_name = group_name
        self.row = row
