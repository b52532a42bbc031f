import json
import pytest
from decimal import Decimal

from estimator.core.config import settings
from estimator.core.errors import ConfigurationError
from estimator.services.catalog import (
    PACKAGE_CATEGORY,
    build_entries,
    get_catalog,
    get_service_description,
    get_service_price,
    load_catalog,
)


class TestEmbeddedCatalog:

    def test_counts(self, catalog):
        assert len(catalog.services) == 42
        assert len(catalog.packages) == 4

    def test_ids_are_unique(self, catalog):
        ids = [s.id for s in catalog.services]
        assert len(ids) == len(set(ids))

    def test_every_base_range_is_ordered(self, catalog):
        for entry in catalog.services + catalog.packages:
            assert 0 <= entry.base_price.min <= entry.base_price.max

    def test_lookup_by_id(self, catalog):
        oil = catalog.get_service("oil-change")
        assert oil.base_price.min == Decimal("60")
        assert oil.base_price.max == Decimal("120")
        assert oil.category == "A. Oil Change"

        assert catalog.get_service("nope") is None
        assert catalog.get_service(None) is None

    def test_packages(self, catalog):
        package = catalog.get_package("package-c")
        assert package.name == "Service C"
        assert package.category == PACKAGE_CATEGORY
        assert (package.base_price.min, package.base_price.max) == (Decimal("400"), Decimal("700"))
        assert "Fuel Filter" in package.included

    def test_categories_keep_first_seen_order(self, catalog):
        categories = catalog.categories()
        assert len(categories) == 13
        assert categories[0] == "A. Oil Change"
        assert categories[-1].startswith("M. ")

    def test_grouped(self, catalog):
        groups = catalog.grouped()
        assert [s.id for s in groups["E. Starter / Alternator"]] == ["starter-replacement", "alternator-replacement"]
        assert sum(len(v) for v in groups.values()) == len(catalog.services)

    def test_get_catalog_is_cached(self):
        assert get_catalog() is get_catalog()


class TestCatalogFile:

    def _write(self, tmp_path, data):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return str(path)

    def test_services_override(self, tmp_path):
        path = self._write(tmp_path, {"services": [
            {"id": "wiper-blades", "name": "Wiper Blades", "category": "Z. Misc", "min": 20, "max": 45},
        ]})
        loaded = load_catalog(path)

        assert [s.id for s in loaded.services] == ["wiper-blades"]
        assert len(loaded.packages) == 4

    def test_min_above_max_is_fatal(self, tmp_path):
        path = self._write(tmp_path, {"services": [{"id": "bad", "min": 300, "max": 100}]})
        with pytest.raises(ConfigurationError, match="exceeds"):
            load_catalog(path)

    def test_negative_price_is_fatal(self, tmp_path):
        path = self._write(tmp_path, {"packages": [{"id": "bad", "min": -1, "max": 100}]})
        with pytest.raises(ConfigurationError, match="negative"):
            load_catalog(path)

    @pytest.mark.parametrize("bound", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_price_is_fatal(self, tmp_path, bound):
        path = tmp_path / "catalog.json"
        path.write_text('{"services": [{"id": "odd", "min": 0, "max": %s}]}' % bound, encoding="utf-8")
        with pytest.raises(ConfigurationError, match="finite"):
            load_catalog(str(path))

    def test_duplicate_id_is_fatal(self, tmp_path):
        path = self._write(tmp_path, {"services": [
            {"id": "dup", "min": 1, "max": 2},
            {"id": "dup", "min": 3, "max": 4},
        ]})
        with pytest.raises(ConfigurationError, match="duplicate"):
            load_catalog(path)

    @pytest.mark.parametrize("raw", [
        {"id": "no-max", "min": 10},
        {"id": "text", "min": "cheap", "max": 10},
        {"min": 1, "max": 2},
    ])
    def test_malformed_entry_is_fatal(self, raw):
        with pytest.raises(ConfigurationError, match="malformed"):
            build_entries([raw], "services")

    def test_non_object_entry_is_fatal(self):
        with pytest.raises(ConfigurationError):
            build_entries(["oil-change"], "services")

    def test_unreadable_file_is_fatal(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_catalog(str(path))

        with pytest.raises(ConfigurationError):
            load_catalog(str(tmp_path / "missing.json"))

    def test_digest_tracks_content(self, tmp_path, catalog):
        path = self._write(tmp_path, {"services": [
            {"id": "wiper-blades", "name": "Wiper Blades", "category": "Z. Misc", "min": 20, "max": 45},
        ]})

        assert load_catalog().digest == catalog.digest
        assert load_catalog(path).digest != catalog.digest

    def test_top_level_must_be_object(self, tmp_path):
        path = self._write(tmp_path, [{"id": "x", "min": 1, "max": 2}])
        with pytest.raises(ConfigurationError, match="JSON object"):
            load_catalog(path)


class TestServicePrice:

    @pytest.mark.parametrize("service_type,expected", [
        ("oil-change", 90.0),
        ("Full Brake Service", 490.0),
        ("electrical diagnostics", 120.0),
        ("ignition-coil", 42.5),
    ])
    def test_catalog_midpoint(self, catalog, service_type, expected):
        assert get_service_price(service_type, catalog) == expected

    def test_fallback_keyword(self, catalog):
        assert get_service_price("brake_job", catalog) == 255.0
        assert get_service_price("routine_maintenance", catalog) == 100.0

    def test_default_when_nothing_matches(self, catalog):
        assert get_service_price("windshield", catalog) == 150.0

    def test_blank_service_type_matches_nothing(self, catalog):
        assert catalog.match_service("") is None
        assert catalog.match_service("   ") is None
        assert get_service_price("", catalog) == 150.0

    def test_description(self, catalog):
        assert get_service_description("oil change", catalog) == "Oil Change (labor only, without materials)"
        assert get_service_description("windshield", catalog) == "windshield"


class TestSettings:

    def test_defaults(self):
        assert settings.QUOTE_CACHE_TTL > 0
        assert settings.API_TITLE
        assert isinstance(settings.REDIS_URL, str)
