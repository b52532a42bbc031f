from pydantic import BaseModel
from typing import Dict, List, Optional


class PriceRangeOut(BaseModel):
    min: float
    max: float


class CatalogEntryOut(BaseModel):
    id: str
    name: str
    category: str
    base_price: PriceRangeOut
    description: Optional[str] = None
    included: List[str] = []


class CoefficientAxisOut(BaseModel):
    name: str
    label: str
    multipliers: Dict[str, float]
    surcharges: Dict[str, PriceRangeOut] = {}


class SurchargeAxisOut(BaseModel):
    name: str
    label: str
    surcharges: Dict[str, PriceRangeOut]


class FlatFeeOut(BaseModel):
    name: str
    label: str
    amount: PriceRangeOut


class SchemeOut(BaseModel):
    name: str
    coefficient_axes: List[CoefficientAxisOut]
    surcharge_axes: List[SurchargeAxisOut] = []
    fees: List[FlatFeeOut] = []
