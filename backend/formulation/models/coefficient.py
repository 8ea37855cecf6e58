"""
Regression coefficient storage.
"""
from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint
from datetime import datetime
from formulation.db.database import Base


class CoefficientSet(Base):
    """
    Model for storing one response's fitted linear model.

    A regression run writes three rows (tar, nicotine, co) sharing one batch
    number within its group. Rows are never updated.

    Attributes:
        id: Primary key
        group_name: Sample group the model was fitted on
        batch_no: Sequential fit number within the group, starting at 0
        response_type: tar, nicotine or co
        intercept: Constant term
        *_coef: One coefficient per auxiliary-material parameter
        potassium_coef: Reserved, always the "null" sentinel
    """
    __tablename__ = "coefficient_sets"
    __table_args__ = (
        UniqueConstraint("group_name", "batch_no", "response_type", name="uq_coefficients_batch_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    group_name = Column(String(255), nullable=False, index=True)
    batch_no = Column(Integer, nullable=False)
    response_type = Column(String(16), nullable=False)

    intercept = Column(String(64), nullable=False)
    filter_ventilation_coef = Column(String(64), nullable=False)
    filter_pressure_drop_coef = Column(String(64), nullable=False)
    permeability_coef = Column(String(64), nullable=False)
    quantitative_coef = Column(String(64), nullable=False)
    citrate_coef = Column(String(64), nullable=False)
    potassium_coef = Column(String(64), nullable=True, default="null")

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return (
            f"<CoefficientSet(id={self.id}, group='{self.group_name}', "
            f"batch={self.batch_no}, type='{self.response_type}')>"
        )
