"""
Pydantic schemas for saved simulation and recommendation runs.
"""
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Dict, List, Optional
from formulation.schemas.params import PredictionCandidate, StandardParams
from formulation.schemas.prediction import PredictedYields
from formulation.schemas.recommendation import DesignRanges, RecommendationItem, TargetParams


class SimulationRecordCreate(BaseModel):
    """A simulation run to store as is."""
    group_name: str = Field(..., min_length=1)
    batch_no: Optional[int] = None
    standard_params: StandardParams
    prediction_params: List[PredictionCandidate] = Field(..., min_length=1)
    results: List[PredictedYields] = Field(default_factory=list)


class SimulationRecordResponse(BaseModel):
    """A saved simulation run."""
    id: int
    group_name: str
    batch_no: Optional[int] = None
    filter_ventilation: str
    filter_pressure_drop: str
    permeability: str
    quantitative: str
    citrate: str
    tar: str
    nicotine: str
    co: str
    candidates: List[Dict[str, Any]]
    results: Optional[List[Dict[str, Any]]] = None
    created_at: datetime

    class Config:
        from_attributes = True


class RecommendationRecordCreate(BaseModel):
    """A recommendation search to store as is."""
    group_name: str = Field(..., min_length=1)
    recommend_count: int = Field(..., ge=1)
    standard_params: StandardParams
    target_params: TargetParams
    design_ranges: DesignRanges
    results: List[RecommendationItem] = Field(default_factory=list)


class RecommendationRecordResponse(BaseModel):
    """A saved recommendation search."""
    id: int
    group_name: str
    recommend_count: int
    filter_ventilation: str
    filter_pressure_drop: str
    permeability: str
    quantitative: str
    citrate: str
    tar: str
    nicotine: str
    co: str
    target_tar: str
    target_nicotine: str
    target_co: str
    tar_weight: str
    nicotine_weight: str
    co_weight: str
    ranges: Dict[str, Any]
    results: Optional[List[Dict[str, Any]]] = None
    created_at: datetime

    class Config:
        from_attributes = True
