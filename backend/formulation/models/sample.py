"""
Formulation sample model.
"""
from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint
from datetime import datetime
from formulation.db.database import Base


class Sample(Base):
    """
    Model for storing one measured cigarette specimen.

    Numeric fields other than the pressure drop are kept as decimal text so
    the values read back exactly as they were measured.

    Attributes:
        id: Primary key
        group_name: Sample group (one regression population)
        code: Sample code, unique within its group
        filter_ventilation: Filter ventilation rate (fraction)
        filter_pressure_drop: Filter rod pressure drop (Pa)
        permeability: Paper permeability (CU)
        quantitative: Paper basis weight (g/m2)
        citrate: Citrate content (fraction)
        potassium_ratio: Potassium salt ratio (not used by the model)
        tar: Measured tar yield (mg/cig)
        nicotine: Measured nicotine yield (mg/cig)
        co: Measured carbon monoxide yield (mg/cig)
        created_at: Creation timestamp
    """
    __tablename__ = "samples"
    __table_args__ = (
        UniqueConstraint("group_name", "code", name="uq_samples_group_code"),
    )

    id = Column(Integer, primary_key=True, index=True)
    group_name = Column(String(255), nullable=False, index=True)
    code = Column(String(255), nullable=False)

    # Auxiliary-material parameters
    filter_ventilation = Column(String(64), nullable=False)
    filter_pressure_drop = Column(Integer, nullable=False)  # Pa
    permeability = Column(String(64), nullable=False)  # CU
    quantitative = Column(String(64), nullable=False)  # g/m2
    citrate = Column(String(64), nullable=False)
    potassium_ratio = Column(String(64), nullable=True)

    # Smoke yields, mg/cig
    tar = Column(String(64), nullable=False)
    nicotine = Column(String(64), nullable=False)
    co = Column(String(64), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Sample(id={self.id}, group='{self.group_name}', code='{self.code}')>"
