"""
Sample management endpoints.

Provides endpoints for:
- Listing groups and samples
- Creating single samples and bulk imports
- Deleting samples and whole groups
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from formulation.db.database import get_db, transaction
from formulation.db.samples import SampleStore
from formulation.schemas.sample import (
    GroupDeleteResponse,
    SampleCreate,
    SampleImportRequest,
    SampleImportResponse,
    SampleResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/samples", tags=["samples"])


@router.get("/groups", response_model=List[str])
async def list_groups(db: Session = Depends(get_db)):
    """List group names, most recently created first."""
    return SampleStore(db).list_groups()


@router.get("", response_model=List[SampleResponse])
async def list_samples(
    group: str = Query(..., min_length=1, description="Sample group"),
    code: Optional[str] = Query(None, description="Fuzzy match on sample code"),
    db: Session = Depends(get_db)
):
    """List the samples of a group, newest first."""
    store = SampleStore(db)
    if code:
        return store.find_by_code_and_group(code, group)
    return store.list_by_group(group)


@router.get("/{sample_id}", response_model=SampleResponse)
async def get_sample(sample_id: int, db: Session = Depends(get_db)):
    """Get a sample by ID."""
    return SampleStore(db).get_or_raise(sample_id)


@router.post("", response_model=SampleResponse, status_code=status.HTTP_201_CREATED)
async def create_sample(sample: SampleCreate, db: Session = Depends(get_db)):
    """Create a sample; its code must be new within the group."""
    with transaction(db):
        created = SampleStore(db).create(sample)
    logger.info(f"Created sample '{created.code}' in group '{created.group_name}'")
    return created


@router.post("/import", response_model=SampleImportResponse, status_code=status.HTTP_201_CREATED)
async def import_samples(request: SampleImportRequest, db: Session = Depends(get_db)):
    """
    Insert parsed rows into one group.

    Either every row is stored or none is; the error names the first
    failing row.
    """
    with transaction(db):
        created = SampleStore(db).create_many(request.group_name, request.samples)
    return SampleImportResponse(
        group_name=request.group_name,
        imported_count=len(created),
        ids=[s.id for s in created]
    )


@router.delete("/groups/{group_name}", response_model=GroupDeleteResponse)
async def delete_group(group_name: str, db: Session = Depends(get_db)):
    """Delete a group's samples and coefficient sets."""
    with transaction(db):
        samples_deleted, coefficients_deleted = SampleStore(db).delete_by_group(group_name)
    return GroupDeleteResponse(
        group_name=group_name,
        samples_deleted=samples_deleted,
        coefficients_deleted=coefficients_deleted
    )


@router.delete("/{sample_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_sample(sample_id: int, db: Session = Depends(get_db)):
    """Delete a sample; the last sample of a group takes its coefficients with it."""
    with transaction(db):
        SampleStore(db).delete_by_id(sample_id)
    return None
