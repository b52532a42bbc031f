from pydantic import BaseModel, Field
from typing import List, Optional
from estimator.core.enums import QuoteStatus, StepKind


class ServiceQuoteRequest(BaseModel):
    service_id: Optional[str] = None
    vehicle_type: Optional[str] = None
    engine_type: Optional[str] = None
    complexity: List[str] = Field(default_factory=list)
    service_call: bool = False


class PackageQuoteRequest(BaseModel):
    package_id: Optional[str] = None
    vehicle_type: Optional[str] = None
    engine_type: Optional[str] = None
    vehicle_age: Optional[str] = None


class StepOut(BaseModel):
    kind: StepKind
    axis: str
    label: str
    key: Optional[str] = None
    multiplier: Optional[float] = None
    min: Optional[float] = None
    max: Optional[float] = None
    text: str


class QuoteResponse(BaseModel):
    status: QuoteStatus
    min: Optional[int] = None
    max: Optional[int] = None
    breakdown: List[StepOut] = Field(default_factory=list)
    summary: Optional[str] = None
    missing: List[str] = Field(default_factory=list)
