"""
Pydantic schemas package.
"""
from formulation.schemas.params import (
    ParameterVector,
    YieldVector,
    StandardParams,
    PredictionCandidate
)
from formulation.schemas.sample import (
    SampleFields,
    SampleCreate,
    SampleImportRequest,
    SampleImportResponse,
    SampleResponse,
    GroupDeleteResponse
)
from formulation.schemas.coefficient import (
    CoefficientSetResponse,
    FitResponse
)
from formulation.schemas.prediction import (
    SimulationRequest,
    SimulationResponse,
    PredictedYields,
    RawPredictionRequest,
    RawPredictionResponse
)
from formulation.schemas.recommendation import (
    ParameterRangeIn,
    DesignRanges,
    TargetParams,
    RecommendationRequest,
    RecommendationItem,
    RecommendationResponse
)
from formulation.schemas.history import (
    SimulationRecordCreate,
    SimulationRecordResponse,
    RecommendationRecordCreate,
    RecommendationRecordResponse
)

__all__ = [
    "ParameterVector",
    "YieldVector",
    "StandardParams",
    "PredictionCandidate",
    "SampleFields",
    "SampleCreate",
    "SampleImportRequest",
    "SampleImportResponse",
    "SampleResponse",
    "GroupDeleteResponse",
    "CoefficientSetResponse",
    "FitResponse",
    "SimulationRequest",
    "SimulationResponse",
    "PredictedYields",
    "RawPredictionRequest",
    "RawPredictionResponse",
    "ParameterRangeIn",
    "DesignRanges",
    "TargetParams",
    "RecommendationRequest",
    "RecommendationItem",
    "RecommendationResponse",
    "SimulationRecordCreate",
    "SimulationRecordResponse",
    "RecommendationRecordCreate",
    "RecommendationRecordResponse"
]
