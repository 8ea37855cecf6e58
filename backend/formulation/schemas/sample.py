"""
Pydantic schemas for Sample model.
"""
from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional
from formulation.schemas.params import DecimalValue


class SampleFields(BaseModel):
    """Measured values of one sample."""
    code: str = Field(..., min_length=1, max_length=255, description="Sample code, unique per group")
    filter_ventilation: DecimalValue = Field(..., description="Filter ventilation rate (fraction)")
    filter_pressure_drop: int = Field(..., description="Filter rod pressure drop (Pa)")
    permeability: DecimalValue = Field(..., description="Paper permeability (CU)")
    quantitative: DecimalValue = Field(..., description="Paper basis weight (g/m2)")
    citrate: DecimalValue = Field(..., description="Citrate content (fraction)")
    potassium_ratio: Optional[DecimalValue] = Field(None, description="Potassium salt ratio")
    tar: DecimalValue = Field(..., description="Tar yield (mg/cig)")
    nicotine: DecimalValue = Field(..., description="Nicotine yield (mg/cig)")
    co: DecimalValue = Field(..., description="CO yield (mg/cig)")


class SampleCreate(SampleFields):
    """Schema for creating a sample."""
    group_name: str = Field(..., min_length=1, max_length=255, description="Sample group name")


class SampleImportRequest(BaseModel):
    """Already-parsed rows to insert into one group, all or nothing."""
    group_name: str = Field(..., min_length=1, max_length=255)
    samples: List[SampleFields] = Field(..., min_length=1)


class SampleImportResponse(BaseModel):
    """Result of a bulk import."""
    group_name: str
    imported_count: int
    ids: List[int]


class SampleResponse(SampleCreate):
    """Schema for sample response."""
    id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class GroupDeleteResponse(BaseModel):
    """Counts of rows removed with a group."""
    group_name: str
    samples_deleted: int
    coefficients_deleted: int
