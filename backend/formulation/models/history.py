"""
Saved simulation and recommendation runs.
"""
from sqlalchemy import Column, Integer, String, DateTime, JSON
from datetime import datetime
from formulation.db.database import Base


class SimulationRecord(Base):
    """
    A saved forward-simulation run.

    Attributes:
        group_name: Sample group whose coefficients were used
        batch_no: Coefficient batch used
        filter_ventilation ... co: Baseline parameters and measured yields
        candidates: Candidate parameter vectors as submitted
        results: Predicted yields per candidate
    """
    __tablename__ = "simulation_records"

    id = Column(Integer, primary_key=True, index=True)
    group_name = Column(String(255), nullable=False)
    batch_no = Column(Integer, nullable=True)

    filter_ventilation = Column(String(64), nullable=False)
    filter_pressure_drop = Column(String(64), nullable=False)
    permeability = Column(String(64), nullable=False)
    quantitative = Column(String(64), nullable=False)
    citrate = Column(String(64), nullable=False)
    tar = Column(String(64), nullable=False)
    nicotine = Column(String(64), nullable=False)
    co = Column(String(64), nullable=False)

    candidates = Column(JSON, nullable=False)
    results = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<SimulationRecord(id={self.id}, group='{self.group_name}')>"


class RecommendationRecord(Base):
    """
    A saved recommendation search.

    Attributes:
        group_name: Sample group whose coefficients were used
        recommend_count: Number of candidates requested
        filter_ventilation ... co: Baseline parameters and measured yields
        target_tar, target_nicotine, target_co: Target yields
        tar_weight, nicotine_weight, co_weight: Target weights
        ranges: Range and step per parameter as submitted
        results: Ranked candidates
    """
    __tablename__ = "recommendation_records"

    id = Column(Integer, primary_key=True, index=True)
    group_name = Column(String(255), nullable=False)
    recommend_count = Column(Integer, nullable=False)

    filter_ventilation = Column(String(64), nullable=False)
    filter_pressure_drop = Column(String(64), nullable=False)
    permeability = Column(String(64), nullable=False)
    quantitative = Column(String(64), nullable=False)
    citrate = Column(String(64), nullable=False)
    tar = Column(String(64), nullable=False)
    nicotine = Column(String(64), nullable=False)
    co = Column(String(64), nullable=False)

    target_tar = Column(String(64), nullable=False)
    target_nicotine = Column(String(64), nullable=False)
    target_co = Column(String(64), nullable=False)
    tar_weight = Column(String(64), nullable=False)
    nicotine_weight = Column(String(64), nullable=False)
    co_weight = Column(String(64), nullable=False)

    ranges = Column(JSON, nullable=False)
    results = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<RecommendationRecord(id={self.id}, group='{self.group_name}')>"
