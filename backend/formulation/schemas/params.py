"""
Shared pydantic types for parameter and yield vectors.

Numbers are accepted as JSON numbers or decimal strings and serialized back
as decimal strings.
"""
from decimal import Decimal
from pydantic import BaseModel, Field
from typing import Annotated, Optional


DecimalValue = Annotated[Decimal, Field(allow_inf_nan=False)]


class ParameterVector(BaseModel):
    """The five auxiliary-material design parameters."""
    filter_ventilation: DecimalValue = Field(..., description="Filter ventilation rate")
    filter_pressure_drop: DecimalValue = Field(..., description="Filter rod pressure drop (Pa)")
    permeability: DecimalValue = Field(..., description="Paper permeability (CU)")
    quantitative: DecimalValue = Field(..., description="Paper basis weight (g/m2)")
    citrate: DecimalValue = Field(..., description="Citrate content")


class YieldVector(BaseModel):
    """The three smoke yields, mg/cig."""
    tar: DecimalValue = Field(..., description="Tar yield")
    nicotine: DecimalValue = Field(..., description="Nicotine yield")
    co: DecimalValue = Field(..., description="Carbon monoxide yield")


class StandardParams(ParameterVector, YieldVector):
    """Baseline sample: design parameters plus measured yields."""


class PredictionCandidate(ParameterVector):
    """Candidate design parameters with an optional caller-side key."""
    key: Optional[str] = Field(None, description="Identifier echoed in the result row")
