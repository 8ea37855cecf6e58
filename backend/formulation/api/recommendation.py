"""
Recommendation search endpoint.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from formulation.config import Settings, get_settings
from formulation.db.database import get_db
from formulation.schemas.recommendation import RecommendationRequest, RecommendationResponse
from formulation.services.recommendation import run_recommendation

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recommendation", tags=["recommendation"])


@router.post("/search", response_model=RecommendationResponse)
def search(
    request: RecommendationRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """
    Grid-search design parameters whose predicted yields best match the target.

    Ventilation and citrate (baseline and ranges) are read as percentages
    unless ``percent_inputs`` is false. Returned design parameters are in
    model units.
    """
    outcome = run_recommendation(
        db,
        request.group_name,
        request.standard_params,
        request.target_params,
        request.design_ranges,
        count=request.count,
        percent_inputs=request.percent_inputs,
        time_budget=request.time_budget_seconds,
        save=request.save,
        settings=settings
    )
    return RecommendationResponse(
        group_name=outcome.group_name,
        batch_no=outcome.batch_no,
        total_candidates=outcome.total_candidates,
        results=outcome.results,
        record_id=outcome.record_id
    )
