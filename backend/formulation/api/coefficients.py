"""
Coefficient endpoints: regression runs and stored batches.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List
import logging

from formulation.config import Settings, get_settings
from formulation.core.errors import NotFoundError
from formulation.db.coefficients import CoefficientStore
from formulation.db.database import get_db, transaction
from formulation.schemas.coefficient import CoefficientSetResponse, FitResponse
from formulation.services.modeling import fit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/coefficients", tags=["coefficients"])


@router.post("/{group_name}/fit", response_model=FitResponse, status_code=status.HTTP_201_CREATED)
async def fit_group(
    group_name: str,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """
    Fit tar, nicotine and CO on the group's samples.

    The coefficients are stored as the group's next batch.
    """
    summary = fit(db, group_name, settings)
    result = summary.result
    return FitResponse(
        group_name=group_name,
        batch_no=summary.batch_no,
        n_samples=result.n_samples,
        rank=result.rank,
        rank_deficient=result.rank_deficient,
        r_squared=result.r_squared,
        rmse=result.rmse,
        coefficients=[CoefficientSetResponse.model_validate(row) for row in summary.rows]
    )


@router.get("/{group_name}", response_model=List[CoefficientSetResponse])
async def list_coefficients(
    group_name: str,
    response_type: str = Query("", alias="type", description="Fuzzy match on response type"),
    db: Session = Depends(get_db)
):
    """All coefficient sets of a group, newest batch first."""
    return CoefficientStore(db).list_by_group(group_name, response_type)


@router.get("/{group_name}/latest", response_model=List[CoefficientSetResponse])
async def latest_coefficients(group_name: str, db: Session = Depends(get_db)):
    """Coefficient sets of the latest batch."""
    return CoefficientStore(db).latest(group_name)


@router.get("/{group_name}/batches/{batch_no}", response_model=List[CoefficientSetResponse])
async def batch_coefficients(group_name: str, batch_no: int, db: Session = Depends(get_db)):
    """Coefficient sets of one batch, ordered tar, nicotine, co."""
    rows = CoefficientStore(db).list_by_group_and_batch(group_name, batch_no)
    if not rows:
        raise NotFoundError(f"Batch {batch_no} of group '{group_name}' not found")
    return rows


@router.delete("/{coefficient_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_coefficient(coefficient_id: int, db: Session = Depends(get_db)):
    """Delete one coefficient set."""
    with transaction(db):
        CoefficientStore(db).delete(coefficient_id)
    return None
