import pytest
from decimal import Decimal

from estimator.core.errors import ConfigurationError
from estimator.services.rules import (
    COMPLEXITY_SURCHARGES,
    ENGINE_MULTIPLIERS,
    SCHEMES,
    VEHICLE_MULTIPLIERS,
    ZERO_RANGE,
    CoefficientAxis,
    FlatFee,
    PriceRange,
    PricingScheme,
    SurchargeAxis,
    resolve_coefficient,
    resolve_surcharge,
    validate_rules,
    validate_scheme,
)


class TestRuleResolver:

    @pytest.mark.parametrize("key,expected", [
        ("sedan", Decimal("1.00")),
        ("suv", Decimal("1.10")),
        ("minivan", Decimal("1.15")),
        ("truck1500", Decimal("1.20")),
        ("truck2500", Decimal("1.30")),
        ("commercial", Decimal("1.35")),
    ])
    def test_vehicle_coefficients(self, key, expected):
        assert resolve_coefficient(key, VEHICLE_MULTIPLIERS, "vehicle") == expected

    @pytest.mark.parametrize("key", [None, "", "spaceship"])
    def test_missing_or_unknown_coefficient_is_neutral(self, key):
        assert resolve_coefficient(key, ENGINE_MULTIPLIERS, "engine") == Decimal("1")

    def test_surcharge_lookup(self):
        assert resolve_surcharge("european", COMPLEXITY_SURCHARGES, "complexity") == PriceRange.of(40, 80)

    @pytest.mark.parametrize("key", [None, "", "chrome-bumper"])
    def test_missing_or_unknown_surcharge_is_zero(self, key):
        assert resolve_surcharge(key, COMPLEXITY_SURCHARGES, "complexity") == ZERO_RANGE

    def test_resolver_never_raises_for_user_input(self):
        assert resolve_coefficient("x" * 500, {}, "") == Decimal("1")
        assert resolve_surcharge("🚗", {}, "") == ZERO_RANGE


class TestPriceRange:

    def test_add_sums_each_bound(self):
        assert PriceRange.of(40, 80) + PriceRange.of(20, 50) == PriceRange.of(60, 130)

    def test_scale_multiplies_both_bounds(self):
        assert PriceRange.of(60, 120).scale(Decimal("1.10")) == PriceRange.of("66.00", "132.00")

    def test_of_accepts_floats_without_binary_noise(self):
        assert PriceRange.of(0.1, 0.2).min == Decimal("0.1")


class TestRuleValidation:

    def test_shipped_tables_are_valid(self):
        validate_rules()
        assert set(SCHEMES) == {"service", "package"}

    def test_zero_multiplier_rejected(self):
        scheme = PricingScheme(
            name="broken",
            coefficient_axes=(CoefficientAxis("vehicle", "Vehicle", {"sedan": Decimal("0")}),),
        )
        with pytest.raises(ConfigurationError, match="broken.vehicle.sedan"):
            validate_scheme(scheme)

    def test_negative_surcharge_rejected(self):
        scheme = PricingScheme(
            name="broken",
            coefficient_axes=(),
            surcharge_axes=(SurchargeAxis("complexity", "Complexity", {"rust": PriceRange.of(-10, 20)}),),
        )
        with pytest.raises(ConfigurationError, match="negative"):
            validate_scheme(scheme)

    def test_non_finite_surcharge_rejected(self):
        scheme = PricingScheme(
            name="broken",
            coefficient_axes=(),
            surcharge_axes=(SurchargeAxis("complexity", "Complexity", {"rust": PriceRange.of(10, "Infinity")}),),
        )
        with pytest.raises(ConfigurationError, match="finite"):
            validate_scheme(scheme)

    def test_package_engine_has_no_linked_surcharges(self):
        engine = SCHEMES["package"].coefficient_axes[1]
        assert engine.name == "engine"
        assert engine.linked_surcharges == {}
        assert "turbo-supercharged" not in engine.table

    def test_inverted_fee_rejected(self):
        scheme = PricingScheme(
            name="broken",
            coefficient_axes=(),
            fees=(FlatFee("service_call", "Service Call", PriceRange.of(200, 90)),),
        )
        with pytest.raises(ConfigurationError, match="exceeds"):
            validate_scheme(scheme)

    def test_inverted_linked_surcharge_rejected(self):
        axis = CoefficientAxis(
            "engine", "Engine", {"turbo": Decimal("1")},
            linked_surcharges={"turbo": PriceRange.of(40, 20)},
        )
        with pytest.raises(ConfigurationError):
            validate_scheme(PricingScheme(name="broken", coefficient_axes=(axis,)))

    def test_configuration_error_is_value_error(self):
        err = ConfigurationError("bad", "services.oil-change")
        assert isinstance(err, ValueError)
        assert str(err) == "services.oil-change: bad"
        assert err.source == "services.oil-change"
