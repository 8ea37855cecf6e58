"""
Pydantic schemas for forward simulation.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from formulation.schemas.params import ParameterVector, PredictionCandidate, StandardParams


class SimulationRequest(BaseModel):
    """Baseline plus candidates to predict with a group's latest coefficients."""
    group_name: str = Field(..., min_length=1, description="Sample group")
    standard_params: StandardParams = Field(..., description="Baseline parameters and measured yields")
    prediction_params: List[PredictionCandidate] = Field(..., min_length=1)
    save: bool = Field(default=False, description="Store the run in the simulation history")


class PredictedYields(BaseModel):
    """Ratio-scaled predicted yields for one candidate, rounded to 2 decimals."""
    key: str
    tar: float
    nicotine: float
    co: float


class SimulationResponse(BaseModel):
    """Schema for simulation response."""
    group_name: str
    batch_no: int
    results: List[PredictedYields]
    record_id: Optional[int] = None


class RawPredictionRequest(BaseModel):
    """One parameter vector to evaluate with the raw model."""
    group_name: str = Field(..., min_length=1)
    params: ParameterVector


class RawPredictionResponse(BaseModel):
    """Unscaled model output."""
    group_name: str
    batch_no: int
    tar: float
    nicotine: float
    co: float
