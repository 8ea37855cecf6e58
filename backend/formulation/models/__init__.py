"""
SQLAlchemy models package.
"""
from formulation.models.sample import Sample
from formulation.models.coefficient import CoefficientSet
from formulation.models.history import SimulationRecord, RecommendationRecord

__all__ = [
    "Sample",
    "CoefficientSet",
    "SimulationRecord",
    "RecommendationRecord"
]
