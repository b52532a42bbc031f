from enum import Enum


class VehicleType(str, Enum):
    SEDAN = "sedan"
    COUPE = "coupe"
    SUV = "suv"
    MINIVAN = "minivan"
    TRUCK_1500 = "truck1500"
    TRUCK_2500 = "truck2500"
    COMMERCIAL = "commercial"

    def __str__(self):
        return self.value


class EngineType(str, Enum):
    FOUR_CYLINDER = "4-cylinder"
    SIX_CYLINDER = "6-cylinder"
    EIGHT_CYLINDER = "8-cylinder"
    TURBO_SUPERCHARGED = "turbo-supercharged"

    def __str__(self):
        return self.value


class VehicleAge(str, Enum):
    RECENT = "2020-2025"
    DECADE = "2010-2019"
    OLDER = "2000-2009"
    CLASSIC = "pre-2000"

    def __str__(self):
        return self.value


class Complexity(str, Enum):
    EUROPEAN = "european"
    OLDER_VEHICLE = "older-vehicle"
    RUST_HARD_ACCESS = "rust-hard-access"
    LUXURY = "luxury"
    HYBRID_ELECTRIC = "hybrid-electric"

    def __str__(self):
        return self.value


class QuoteStatus(str, Enum):
    COMPUTED = "computed"
    INCOMPLETE = "incomplete"

    def __str__(self):
        return self.value


class StepKind(str, Enum):
    BASE = "base"
    MULTIPLIER = "multiplier"
    SURCHARGE = "surcharge"
    FEE = "fee"

    def __str__(self):
        return self.value
