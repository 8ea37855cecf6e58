"""
Pydantic schemas for the recommendation search.
"""
from pydantic import BaseModel, Field, model_validator
from typing import Dict, List, Optional
from formulation.schemas.params import DecimalValue, StandardParams


class ParameterRangeIn(BaseModel):
    """Closed interval and optional step for one parameter."""
    min: DecimalValue
    max: DecimalValue
    step: Optional[DecimalValue] = Field(None, ge=0, description="Grid step; defaults per parameter")

    @model_validator(mode="after")
    def check_bounds(self):
        if self.min > self.max:
            raise ValueError(f"min ({self.min}) must not exceed max ({self.max})")
        return self


class DesignRanges(BaseModel):
    """Search range for each design parameter."""
    filter_ventilation: ParameterRangeIn
    filter_pressure_drop: ParameterRangeIn
    permeability: ParameterRangeIn
    quantitative: ParameterRangeIn
    citrate: ParameterRangeIn


class TargetParams(BaseModel):
    """Desired yields and their weights."""
    tar: DecimalValue = Field(..., ge=0)
    nicotine: DecimalValue = Field(..., ge=0)
    co: DecimalValue = Field(..., ge=0)
    tar_weight: DecimalValue = Field(..., ge=0)
    nicotine_weight: DecimalValue = Field(..., ge=0)
    co_weight: DecimalValue = Field(..., ge=0)


class RecommendationRequest(BaseModel):
    """Baseline, target and ranges for a recommendation search."""
    group_name: str = Field(..., min_length=1)
    standard_params: StandardParams
    target_params: TargetParams
    design_ranges: DesignRanges
    count: Optional[int] = Field(None, ge=1, description="Number of candidates to return")
    percent_inputs: bool = Field(
        default=True,
        description="Ventilation and citrate of baseline and ranges are given in percent"
    )
    time_budget_seconds: Optional[float] = Field(None, gt=0)
    save: bool = Field(default=False, description="Store the run in the recommendation history")


class RecommendationItem(BaseModel):
    """One ranked candidate."""
    design_params: Dict[str, float]
    predicted_yields: Dict[str, float]
    adjusted_yields: Dict[str, float]
    score: float


class RecommendationResponse(BaseModel):
    """Schema for recommendation response."""
    group_name: str
    batch_no: int
    total_candidates: int
    results: List[RecommendationItem]
    record_id: Optional[int] = None
