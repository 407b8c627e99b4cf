from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class Coordinate(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address: Optional[str] = Field(None, description="Human-readable place description, when known")


class Symptom(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str


class Specialist(BaseModel):
    name: str
    description: str = ""
    contact: str = ""
    location: Optional[Coordinate] = None
    # Derived during ranking only; catalog entries never carry it
    distance: Optional[float] = Field(None, description="Distance from the caller in km")


class Disease(BaseModel):
    id: int
    name: str
    description: str = ""
    symptoms: List[int] = Field(default_factory=list, description="Symptom ids, treated as a set")
    severity: Optional[str] = None
    risk_factors: Optional[List[str]] = None
    common_age_groups: Optional[List[str]] = None
    treatment_options: Optional[List[str]] = None
    specialists: Optional[List[Specialist]] = None


class PredictionResult(BaseModel):
    disease: Disease
    match_count: int
    total_symptoms: int
    confidence: float = Field(..., ge=0, le=100)


class PermissionState(str, Enum):
    UNSET = "unset"
    GRANTED = "granted"
    DENIED = "denied"


class PredictRequest(BaseModel):
    symptom_ids: List[int] = Field(default_factory=list)
    location: Optional[Coordinate] = None


class PredictionItem(BaseModel):
    result: PredictionResult
    symptom_names: List[str]


class PredictResponse(BaseModel):
    count: int
    items: List[PredictionItem]
