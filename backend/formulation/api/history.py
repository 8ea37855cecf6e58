"""
Saved simulation and recommendation runs.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from formulation.db.database import get_db, transaction
from formulation.db.history import RecommendationHistoryStore, SimulationHistoryStore
from formulation.schemas.history import (
    RecommendationRecordCreate,
    RecommendationRecordResponse,
    SimulationRecordCreate,
    SimulationRecordResponse
)
from formulation.services.simulation import candidate_values

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/history", tags=["history"])


@router.get("/simulations", response_model=List[SimulationRecordResponse])
async def list_simulations(
    group: Optional[str] = Query(None, description="Only runs of this group"),
    db: Session = Depends(get_db)
):
    """List saved simulations, newest first."""
    return SimulationHistoryStore(db).list_all(group)


@router.post("/simulations", response_model=SimulationRecordResponse, status_code=status.HTTP_201_CREATED)
async def create_simulation(record: SimulationRecordCreate, db: Session = Depends(get_db)):
    """Save a simulation run."""
    with transaction(db):
        created = SimulationHistoryStore(db).create(
            record.group_name,
            record.standard_params,
            [candidate_values(c, i) for i, c in enumerate(record.prediction_params)],
            [r.model_dump() for r in record.results],
            batch_no=record.batch_no
        )
    return created


@router.get("/simulations/{record_id}", response_model=SimulationRecordResponse)
async def get_simulation(record_id: int, db: Session = Depends(get_db)):
    """Get a saved simulation by ID."""
    return SimulationHistoryStore(db).get_or_raise(record_id)


@router.delete("/simulations/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_simulation(record_id: int, db: Session = Depends(get_db)):
    """Delete a saved simulation."""
    with transaction(db):
        SimulationHistoryStore(db).delete(record_id)
    return None


@router.get("/recommendations", response_model=List[RecommendationRecordResponse])
async def list_recommendations(
    group: Optional[str] = Query(None, description="Only searches of this group"),
    db: Session = Depends(get_db)
):
    """List saved recommendation searches, newest first."""
    return RecommendationHistoryStore(db).list_all(group)


@router.post(
    "/recommendations",
    response_model=RecommendationRecordResponse,
    status_code=status.HTTP_201_CREATED
)
async def create_recommendation(record: RecommendationRecordCreate, db: Session = Depends(get_db)):
    """Save a recommendation search."""
    with transaction(db):
        created = RecommendationHistoryStore(db).create(
            record.group_name,
            record.recommend_count,
            record.standard_params,
            record.target_params,
            record.design_ranges.model_dump(mode="json", exclude_none=True),
            [r.model_dump() for r in record.results]
        )
    return created


@router.get("/recommendations/{record_id}", response_model=RecommendationRecordResponse)
async def get_recommendation(record_id: int, db: Session = Depends(get_db)):
    """Get a saved recommendation search by ID."""
    return RecommendationHistoryStore(db).get_or_raise(record_id)


@router.delete("/recommendations/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_recommendation(record_id: int, db: Session = Depends(get_db)):
    """Delete a saved recommendation search."""
    with transaction(db):
        RecommendationHistoryStore(db).delete(record_id)
    return None
