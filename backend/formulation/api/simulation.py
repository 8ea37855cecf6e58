"""
Forward simulation endpoints.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from formulation.db.database import get_db
from formulation.schemas.prediction import (
    RawPredictionRequest,
    RawPredictionResponse,
    SimulationRequest,
    SimulationResponse
)
from formulation.services.simulation import simulate, simulate_raw

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/simulation", tags=["simulation"])


@router.post("/predict", response_model=SimulationResponse)
async def predict(request: SimulationRequest, db: Session = Depends(get_db)):
    """
    Predict yields of candidate formulations.

    Each candidate's raw prediction is scaled by the baseline's
    measured/predicted ratio and rounded to 2 decimals.
    """
    outcome = simulate(
        db,
        request.group_name,
        request.standard_params,
        request.prediction_params,
        save=request.save
    )
    return SimulationResponse(
        group_name=outcome.group_name,
        batch_no=outcome.batch_no,
        results=outcome.results,
        record_id=outcome.record_id
    )


@router.post("/predict-raw", response_model=RawPredictionResponse)
async def predict_raw(request: RawPredictionRequest, db: Session = Depends(get_db)):
    """Evaluate the latest model without baseline scaling."""
    return simulate_raw(db, request.group_name, request.params)
