"""
Pydantic Schemas — Data Models
===============================
Defines the data contracts of the HeartGuard intake engine: validation
outcomes, the wire payload sent to the scoring service, the decoded
service response, and the immutable prediction result kept in history.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Annotated, Literal, Mapping

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer

PredictionLabel = Literal["Presence", "Absence"]
RiskLevel = Literal["Low", "Medium", "High"]


# ===================================================================
# Validation
# ===================================================================

class ValidationOutcome(BaseModel):
    """Blocking errors and advisory warnings for one form snapshot."""
    errors: list[str] = []
    warnings: list[str] = []

    @property
    def is_valid(self) -> bool:
        return not self.errors


# ===================================================================
# Wire contract — POST /predict
# ===================================================================

class PredictionRequest(BaseModel):
    """Request body expected by the scoring service.

    Field names are Pythonic; the aliases carry the exact wire casing, so
    serialise with ``model_dump(by_alias=True)``.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    age: float = Field(..., alias="Age")
    sex: int = Field(..., alias="Sex")
    chest_pain_type: int = Field(..., alias="chest_pain_type")
    bp: float = Field(..., alias="BP")
    cholesterol: float = Field(..., alias="Cholesterol")
    fbs_over_120: int = Field(..., alias="fbs_over_120")
    ekg_results: int = Field(..., alias="ekg_results")
    max_hr: float = Field(..., alias="Max_HR")
    exercise_angina: int = Field(..., alias="exercise_angina")
    st_depression: float = Field(..., alias="ST_depression")
    slope_st: int = Field(..., alias="slope_st")
    num_vessels_fluro: int = Field(..., alias="num_vessels_fluro")
    thallium: float = Field(..., alias="Thallium")


class PredictionResponse(BaseModel):
    """Successful response body returned by the scoring service."""
    prediction: PredictionLabel
    risk_level: RiskLevel
    probability: float = Field(..., ge=0.0, le=1.0)
    confidence: str


# ===================================================================
# Session models
# ===================================================================

def new_result_id() -> str:
    return uuid.uuid4().hex


# Read-only copy of the form values a result was computed from.
FrozenSnapshot = Annotated[
    Mapping[str, str],
    AfterValidator(lambda value: MappingProxyType(dict(value))),
    PlainSerializer(dict, return_type=dict),
]


class PredictionResult(BaseModel):
    """One completed assessment. Immutable once created."""
    model_config = ConfigDict(frozen=True)

    prediction_label: PredictionLabel
    risk_level: RiskLevel
    probability: float = Field(..., ge=0.0, le=1.0)
    confidence_text: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    source_snapshot: FrozenSnapshot = Field(default_factory=lambda: MappingProxyType({}))
    id: str = Field(default_factory=new_result_id)

    @classmethod
    def from_response(
        cls, response: PredictionResponse, snapshot: dict[str, str]
    ) -> "PredictionResult":
        return cls(
            prediction_label=response.prediction,
            risk_level=response.risk_level,
            probability=response.probability,
            confidence_text=response.confidence,
            source_snapshot=dict(snapshot),
        )
