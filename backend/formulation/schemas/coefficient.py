"""
Pydantic schemas for coefficient sets and regression runs.
"""
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Dict, List, Optional


class CoefficientSetResponse(BaseModel):
    """One response's stored linear model."""
    id: int
    group_name: str
    batch_no: int
    response_type: str
    intercept: str
    filter_ventilation_coef: str
    filter_pressure_drop_coef: str
    permeability_coef: str
    quantitative_coef: str
    citrate_coef: str
    potassium_coef: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class FitResponse(BaseModel):
    """Result of regenerating the coefficients of a group."""
    group_name: str
    batch_no: int = Field(..., description="New batch number")
    n_samples: int
    rank: int = Field(..., description="Rank of the design matrix with intercept")
    rank_deficient: bool = Field(..., description="True when predictors are collinear")
    r_squared: Dict[str, float]
    rmse: Dict[str, float]
    coefficients: List[CoefficientSetResponse]
