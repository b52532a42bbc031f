"""Rule catalog: coefficient and surcharge tables plus the axes that use them"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Mapping, Optional

from estimator.core.enums import VehicleType, EngineType, VehicleAge, Complexity
from estimator.core.errors import ConfigurationError
from estimator.core.metrics import unknown_rule_keys

logger = logging.getLogger(__name__)

NEUTRAL_MULTIPLIER = Decimal("1")


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class PriceRange:
    min: Decimal
    max: Decimal

    @classmethod
    def of(cls, low, high) -> "PriceRange":
        return cls(to_decimal(low), to_decimal(high))

    def __add__(self, other: "PriceRange") -> "PriceRange":
        return PriceRange(self.min + other.min, self.max + other.max)

    def scale(self, factor: Decimal) -> "PriceRange":
        return PriceRange(self.min * factor, self.max * factor)


ZERO_RANGE = PriceRange(Decimal("0"), Decimal("0"))

CoefficientTable = Mapping[str, Decimal]
SurchargeTable = Mapping[str, PriceRange]


@dataclass(frozen=True)
class CoefficientAxis:
    """Single-choice axis applied multiplicatively.

    ``linked_surcharges`` maps some of the axis keys to an additive range
    that joins the surcharge phase when that key is selected.
    """
    name: str
    label: str
    table: CoefficientTable
    linked_surcharges: SurchargeTable = field(default_factory=dict)
    linked_labels: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class SurchargeAxis:
    """Multi-choice axis; every selected key adds its range."""
    name: str
    label: str
    table: SurchargeTable


@dataclass(frozen=True)
class FlatFee:
    name: str
    label: str
    amount: PriceRange


@dataclass(frozen=True)
class PricingScheme:
    name: str
    coefficient_axes: tuple[CoefficientAxis, ...]
    surcharge_axes: tuple[SurchargeAxis, ...] = ()
    fees: tuple[FlatFee, ...] = ()

    def fee(self, name: str) -> Optional[FlatFee]:
        for fee in self.fees:
            if fee.name == name:
                return fee
        return None


def resolve_coefficient(key: Optional[str], table: CoefficientTable, axis: str = "") -> Decimal:
    if not key:
        return NEUTRAL_MULTIPLIER
    if key not in table:
        report_unknown_key(axis, key)
        return NEUTRAL_MULTIPLIER
    return table[key]


def resolve_surcharge(key: Optional[str], table: SurchargeTable, axis: str = "") -> PriceRange:
    if not key:
        return ZERO_RANGE
    if key not in table:
        report_unknown_key(axis, key)
        return ZERO_RANGE
    return table[key]


def report_unknown_key(axis: str, key: str) -> None:
    logger.warning(f"Unknown rule key '{key}' on axis '{axis or 'unnamed'}', using neutral value")
    unknown_rule_keys.labels(axis=axis or "unnamed").inc()


VEHICLE_MULTIPLIERS: dict[str, Decimal] = {
    VehicleType.SEDAN.value: Decimal("1.00"),
    VehicleType.COUPE.value: Decimal("1.00"),
    VehicleType.SUV.value: Decimal("1.10"),
    VehicleType.MINIVAN.value: Decimal("1.15"),
    VehicleType.TRUCK_1500.value: Decimal("1.20"),
    VehicleType.TRUCK_2500.value: Decimal("1.30"),
    VehicleType.COMMERCIAL.value: Decimal("1.35"),
}

ENGINE_MULTIPLIERS: dict[str, Decimal] = {
    EngineType.FOUR_CYLINDER.value: Decimal("1.00"),
    EngineType.SIX_CYLINDER.value: Decimal("1.15"),
    EngineType.EIGHT_CYLINDER.value: Decimal("1.25"),
    EngineType.TURBO_SUPERCHARGED.value: Decimal("1.00"),
}

ENGINE_SURCHARGES: dict[str, PriceRange] = {
    EngineType.TURBO_SUPERCHARGED.value: PriceRange.of(20, 40),
}

PACKAGE_ENGINE_MULTIPLIERS: dict[str, Decimal] = {
    EngineType.FOUR_CYLINDER.value: Decimal("1.00"),
    EngineType.SIX_CYLINDER.value: Decimal("1.15"),
    EngineType.EIGHT_CYLINDER.value: Decimal("1.25"),
}

VEHICLE_AGE_MULTIPLIERS: dict[str, Decimal] = {
    VehicleAge.RECENT.value: Decimal("1.00"),
    VehicleAge.DECADE.value: Decimal("1.10"),
    VehicleAge.OLDER.value: Decimal("1.15"),
    VehicleAge.CLASSIC.value: Decimal("1.25"),
}

COMPLEXITY_SURCHARGES: dict[str, PriceRange] = {
    Complexity.EUROPEAN.value: PriceRange.of(40, 80),
    Complexity.OLDER_VEHICLE.value: PriceRange.of(20, 50),
    Complexity.RUST_HARD_ACCESS.value: PriceRange.of(30, 60),
    Complexity.LUXURY.value: PriceRange.of(20, 40),
    Complexity.HYBRID_ELECTRIC.value: PriceRange.of(30, 70),
}

SERVICE_CALL_FEE = PriceRange.of(90, 200)

VEHICLE_AXIS = CoefficientAxis("vehicle", "Vehicle", VEHICLE_MULTIPLIERS)
ENGINE_AXIS = CoefficientAxis(
    "engine",
    "Engine",
    ENGINE_MULTIPLIERS,
    linked_surcharges=ENGINE_SURCHARGES,
    linked_labels={EngineType.TURBO_SUPERCHARGED.value: "Turbo/Supercharged"},
)
# Package quotes are purely multiplicative; turbo has no entry and resolves neutral.
PACKAGE_ENGINE_AXIS = CoefficientAxis("engine", "Engine", PACKAGE_ENGINE_MULTIPLIERS)
VEHICLE_AGE_AXIS = CoefficientAxis("vehicle_age", "Vehicle Age", VEHICLE_AGE_MULTIPLIERS)
COMPLEXITY_AXIS = SurchargeAxis("complexity", "Complexity", COMPLEXITY_SURCHARGES)

SERVICE_SCHEME = PricingScheme(
    name="service",
    coefficient_axes=(VEHICLE_AXIS, ENGINE_AXIS),
    surcharge_axes=(COMPLEXITY_AXIS,),
    fees=(FlatFee("service_call", "Service Call", SERVICE_CALL_FEE),),
)

PACKAGE_SCHEME = PricingScheme(
    name="package",
    coefficient_axes=(VEHICLE_AXIS, PACKAGE_ENGINE_AXIS, VEHICLE_AGE_AXIS),
)

SCHEMES: dict[str, PricingScheme] = {
    SERVICE_SCHEME.name: SERVICE_SCHEME,
    PACKAGE_SCHEME.name: PACKAGE_SCHEME,
}


def _check_range(rng: PriceRange, source: str) -> None:
    if not rng.min.is_finite() or not rng.max.is_finite():
        raise ConfigurationError(f"amount must be finite, got {rng.min}-{rng.max}", source)
    if rng.min < 0 or rng.max < 0:
        raise ConfigurationError(f"negative amount {rng.min}-{rng.max}", source)
    if rng.min > rng.max:
        raise ConfigurationError(f"min {rng.min} exceeds max {rng.max}", source)


def validate_scheme(scheme: PricingScheme) -> None:
    for axis in scheme.coefficient_axes:
        for key, factor in axis.table.items():
            if not factor.is_finite() or factor <= 0:
                raise ConfigurationError(
                    f"multiplier must be positive, got {factor}",
                    f"{scheme.name}.{axis.name}.{key}",
                )
        for key, rng in axis.linked_surcharges.items():
            _check_range(rng, f"{scheme.name}.{axis.name}.{key}")
    for axis in scheme.surcharge_axes:
        for key, rng in axis.table.items():
            _check_range(rng, f"{scheme.name}.{axis.name}.{key}")
    for fee in scheme.fees:
        _check_range(fee.amount, f"{scheme.name}.{fee.name}")


def validate_rules() -> None:
    """Raise ConfigurationError if any shipped rule table is malformed."""
    for scheme in SCHEMES.values():
        validate_scheme(scheme)
    logger.info(f"Validated rule tables for schemes: {', '.join(SCHEMES)}")
