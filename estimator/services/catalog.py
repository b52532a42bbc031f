"""Service catalog: priceable services and bundled maintenance packages.

Entries are validated once when the catalog is built. A malformed entry
raises ConfigurationError so the application never starts with it.
"""
import json
import logging
import re
from dataclasses import asdict, dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from functools import cached_property, lru_cache
from pathlib import Path
from typing import Iterable, Optional

from estimator.core.config import settings
from estimator.core.errors import ConfigurationError
from estimator.services.rules import PriceRange, to_decimal
from estimator.utils.hashing import payload_hash

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogEntry:
    id: str
    name: str
    category: str
    base_price: PriceRange
    description: Optional[str] = None
    included: tuple[str, ...] = field(default_factory=tuple)


# (id, name, category, min, max, description)
SERVICES = [
    ("oil-change", "Oil Change (labor only, without materials)", "A. Oil Change", 60, 120, "Oil change labor only"),
    ("front-pads", "Front Brake Pads Replacement", "B. Brake System", 120, 190, None),
    ("rear-pads", "Rear Brake Pads Replacement", "B. Brake System", 120, 190, None),
    ("front-pads-rotors", "Front Pads + Rotors Replacement", "B. Brake System", 220, 350, None),
    ("rear-pads-rotors", "Rear Pads + Rotors Replacement", "B. Brake System", 220, 350, None),
    ("full-brake-service", "Full Brake Service (all 4 wheels)", "B. Brake System", 380, 600, None),
    ("obd2-diagnostic", "OBD2 Diagnostic (basic)", "C. Diagnostics", 90, 120, None),
    ("electrical-diagnostics", "Electrical / Wiring Diagnostics (hourly rate)", "C. Diagnostics", 95, 145, "per hour"),
    ("ac-inspection", "A/C Inspection (Labor Only)", "D. AC Service", 80, 120,
     "Complete A/C system inspection and diagnostics"),
    ("ac-pressure-check", "A/C Pressure Check (Labor Only)", "D. AC Service", 90, 140,
     "Diagnostic pressure measurement and system analysis"),
    ("ac-vacuum-test", "A/C Vacuum Test (Labor Only)", "D. AC Service", 120, 180,
     "Evacuation test for moisture and leaks"),
    ("ac-recharge-r134a", "A/C Recharge - R134a (Labor Only)", "D. AC Service", 120, 180,
     "Standard refrigerant recharge"),
    ("ac-recharge-r1234yf", "A/C Recharge - R1234yf (Labor Only)", "D. AC Service", 150, 220,
     "Newer eco-friendly refrigerant recharge"),
    ("full-ac-service", "Full A/C Service (Labor Only)", "D. AC Service", 280, 500,
     "Complete service including vacuum, test, and recharge"),
    ("ac-ozone-treatment", "A/C Ozone Treatment (Labor Only)", "D. AC Service", 150, 250,
     "Ozone odor elimination treatment"),
    ("ac-anti-mold-cleaning", "A/C Anti-Mold HVAC Cleaning (Labor Only)", "D. AC Service", 180, 300,
     "Deep HVAC system cleaning and sanitization"),
    ("starter-replacement", "Starter Replacement", "E. Starter / Alternator", 180, 350, None),
    ("alternator-replacement", "Alternator Replacement", "E. Starter / Alternator", 180, 320, None),
    ("spark-plugs", "Spark Plugs Replacement", "F. Spark Plugs / Ignition Coils", 120, 250, None),
    ("ignition-coil", "Ignition Coil Replacement (per cylinder)", "F. Spark Plugs / Ignition Coils", 25, 60, "each"),
    ("control-arm", "Control Arm Replacement (per side)", "G. Suspension / Control Arms", 150, 350, None),
    ("ball-joint", "Ball Joint Replacement", "G. Suspension / Control Arms", 120, 250, None),
    ("tie-rod", "Tie Rod Replacement", "G. Suspension / Control Arms", 90, 180, None),
    ("sway-bar-link", "Sway Bar Link Replacement", "G. Suspension / Control Arms", 80, 140, None),
    ("cv-axle-front", "CV Axle Replacement (front, per side)", "H. CV Axles / Half Shafts", 180, 350, None),
    ("cv-axle-rear", "CV Axle Replacement (rear, per side)", "H. CV Axles / Half Shafts", 180, 350, None),
    ("headlight-bulb", "Headlight Bulb Replacement", "I. Electrical / Lighting", 40, 90, None),
    ("tail-light-bulb", "Tail Light Bulb Replacement", "I. Electrical / Lighting", 30, 70, None),
    ("headlight-sanding", "Headlight Sanding + Polishing (1 light)", "J. Headlight Restoration / Polishing",
     70, 150, "starting at $70+"),
    ("full-headlight-restoration", "Full Headlight Restoration (both lights, multi-stage + ceramic)",
     "J. Headlight Restoration / Polishing", 140, 250, None),
    ("exterior-wash-wax", "Exterior Wash + Wax", "K. Mobile Detailing", 150, 500, "Custom pricing - photos required"),
    ("interior-deep-clean", "Interior Deep Clean", "K. Mobile Detailing", 150, 500, "Custom pricing - photos required"),
    ("interior-shampoo", "Full Interior Shampoo", "K. Mobile Detailing", 200, 600, "Custom pricing - photos required"),
    ("exterior-polish", "Full Exterior Polish", "K. Mobile Detailing", 200, 600, "Custom pricing - photos required"),
    ("detailing-package", "Complete Mobile Detailing Package", "K. Mobile Detailing", 400, 1200,
     "Custom pricing - photos required"),
    ("service-call", "Service Call / Mobile Mechanic First Hour", "L. Other Services", 90, 200, "starting at $90"),
    ("jump-start", "Jump Start / Boost", "L. Other Services", 40, 70, None),
    ("battery-replacement", "Battery Replacement", "L. Other Services", 50, 120, None),
    ("battery-test", "Battery / Alternator Test", "L. Other Services", 40, 60, None),
    ("valve-cover-gasket", "Valve Cover Gasket Replacement",
     "M. Valve Cover Gaskets / Spark Plug Tube Seals / Gasket Kits", 150, 700,
     "Price varies by make, model, access, engine layout"),
    ("valve-cover-spark-plug-seals", "Valve Cover Gasket + Spark Plug Tube Seals Replacement",
     "M. Valve Cover Gaskets / Spark Plug Tube Seals / Gasket Kits", 200, 750,
     "Price varies by make, model, access, engine layout"),
    ("full-valve-kit", "Full Valve Cover Gasket Kit Installation",
     "M. Valve Cover Gaskets / Spark Plug Tube Seals / Gasket Kits", 250, 800,
     "Includes cleaning, sealing, replacing gaskets, spark plug tube seals if applicable. "
     "Price varies by make, model, access, engine layout"),
]

PACKAGE_CATEGORY = "Maintenance Packages"

PACKAGES = [
    {
        "id": "package-a",
        "name": "Service A",
        "description": "Essential maintenance for regular vehicle upkeep",
        "min": 120,
        "max": 200,
        "included": [
            "Oil Change (Labor Only)",
            "Engine Oil Filter",
            "Fluid Level Check",
            "Battery Test",
        ],
    },
    {
        "id": "package-b",
        "name": "Service B",
        "description": "Comprehensive service for optimal performance",
        "min": 250,
        "max": 450,
        "included": [
            "Oil Change (Labor Only)",
            "Engine Oil Filter",
            "Cabin Air Filter",
            "Spark Plugs Replacement",
            "Brake Inspection",
            "Battery Test",
            "Fluid Top-Off",
        ],
    },
    {
        "id": "package-c",
        "name": "Service C",
        "description": "Full vehicle inspection and preventive maintenance",
        "min": 400,
        "max": 700,
        "included": [
            "Oil Change (Labor Only)",
            "Engine Oil Filter",
            "Cabin Air Filter",
            "Fuel Filter",
            "Spark Plugs Replacement",
            "Brake System Check",
            "Suspension Inspection",
            "Battery & Alternator Test",
            "Fluid Check & Top-Off",
            "Headlight Inspection",
        ],
    },
    {
        "id": "package-d",
        "name": "Service D",
        "description": "Complete vehicle care with diagnostics and advanced services",
        "min": 600,
        "max": 1000,
        "included": [
            "Oil Change (Labor Only)",
            "Engine Oil Filter",
            "Cabin Air Filter",
            "Fuel Filter",
            "Spark Plugs Replacement",
            "Full Brake Service",
            "Suspension Inspection",
            "Battery & Alternator Test",
            "OBD Computer Diagnostic",
            "Electrical Diagnostics",
            "Fluid Check & Top-Off",
            "Headlight Inspection",
        ],
    },
]

# Invoice defaults for service types that match no catalog entry
FALLBACK_PRICES = {
    "oil_change": 90,
    "oil-change": 90,
    "diagnostics": 120,
    "obd": 120,
    "brake": 255,
    "brake_job": 255,
    "suspension": 235,
    "ac": 390,
    "ac_service": 390,
    "electrical": 120,
    "battery": 85,
    "battery_replacement": 85,
    "starter": 265,
    "alternator": 250,
    "routine_maintenance": 100,
    "detailing": 400,
    "service_call": 145,
}
DEFAULT_SERVICE_PRICE = 150.0


@dataclass(frozen=True)
class Catalog:
    services: tuple[CatalogEntry, ...]
    packages: tuple[CatalogEntry, ...]

    def get_service(self, service_id: Optional[str]) -> Optional[CatalogEntry]:
        return _find(self.services, service_id)

    def get_package(self, package_id: Optional[str]) -> Optional[CatalogEntry]:
        return _find(self.packages, package_id)

    @cached_property
    def digest(self) -> str:
        """Content hash of every entry; changes whenever the catalog does."""
        return payload_hash({
            "services": [asdict(s) for s in self.services],
            "packages": [asdict(p) for p in self.packages],
        })

    def categories(self) -> list[str]:
        return list(dict.fromkeys(s.category for s in self.services))

    def grouped(self) -> dict[str, list[CatalogEntry]]:
        groups: dict[str, list[CatalogEntry]] = {c: [] for c in self.categories()}
        for service in self.services:
            groups[service.category].append(service)
        return groups

    def match_service(self, service_type: str) -> Optional[CatalogEntry]:
        """Loose lookup used for free-text service types on invoices."""
        normalized = re.sub(r"\s+", "-", service_type.strip().lower())
        # blank text is a substring of every name
        if not normalized:
            return None
        for service in self.services:
            sid = service.id.lower()
            if sid == normalized or normalized in service.name.lower() or sid in normalized:
                return service
        return None


def _find(entries: Iterable[CatalogEntry], entry_id: Optional[str]) -> Optional[CatalogEntry]:
    if not entry_id:
        return None
    for entry in entries:
        if entry.id == entry_id:
            return entry
    return None


def build_entry(raw: dict, source: str) -> CatalogEntry:
    try:
        entry_id = str(raw["id"])
        low = to_decimal(raw["min"])
        high = to_decimal(raw["max"])
    except (KeyError, TypeError, ArithmeticError) as e:
        raise ConfigurationError(f"malformed catalog entry {raw!r} ({e})", source)

    if not low.is_finite() or not high.is_finite():
        raise ConfigurationError(f"base price must be finite, got {low}-{high}", f"{source}.{entry_id}")
    if low < 0 or high < 0:
        raise ConfigurationError(f"negative base price {low}-{high}", f"{source}.{entry_id}")
    if low > high:
        raise ConfigurationError(f"base price min {low} exceeds max {high}", f"{source}.{entry_id}")

    return CatalogEntry(
        id=entry_id,
        name=str(raw.get("name") or entry_id),
        category=str(raw.get("category") or ""),
        base_price=PriceRange(low, high),
        description=raw.get("description"),
        included=tuple(raw.get("included") or ()),
    )


def build_entries(raws: Iterable[dict], source: str) -> tuple[CatalogEntry, ...]:
    entries = []
    seen = set()
    for raw in raws:
        if not isinstance(raw, dict):
            raise ConfigurationError(f"expected an object, got {raw!r}", source)
        entry = build_entry(raw, source)
        if entry.id in seen:
            raise ConfigurationError(f"duplicate id '{entry.id}'", source)
        seen.add(entry.id)
        entries.append(entry)
    return tuple(entries)


def _embedded_services() -> list[dict]:
    return [
        {"id": sid, "name": name, "category": category, "min": low, "max": high, "description": description}
        for sid, name, category, low, high, description in SERVICES
    ]


def _embedded_packages() -> list[dict]:
    return [dict(pkg, category=PACKAGE_CATEGORY) for pkg in PACKAGES]


def load_catalog(path: Optional[str] = None) -> Catalog:
    """Build the catalog from the embedded tables or a JSON file.

    The file may carry ``services`` and/or ``packages`` lists; a missing list
    falls back to the embedded one. Raises ConfigurationError on bad data.
    """
    raw_services = _embedded_services()
    raw_packages = _embedded_packages()

    if path:
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"cannot read catalog file ({e})", path)
        if not isinstance(data, dict):
            raise ConfigurationError("catalog file must hold a JSON object", path)
        raw_services = data.get("services", raw_services)
        raw_packages = [dict(p, category=p.get("category") or PACKAGE_CATEGORY) if isinstance(p, dict) else p
                        for p in data.get("packages", raw_packages)]
        logger.info(f"Loading catalog from {path}")

    catalog = Catalog(
        services=build_entries(raw_services, "services"),
        packages=build_entries(raw_packages, "packages"),
    )
    logger.info(f"Catalog loaded: {len(catalog.services)} services, {len(catalog.packages)} packages")
    return catalog


@lru_cache(maxsize=1)
def get_catalog() -> Catalog:
    return load_catalog(settings.CATALOG_FILE or None)


def get_service_price(service_type: str, catalog: Optional[Catalog] = None) -> float:
    """Default invoice price: midpoint of the matched base range, to the cent."""
    catalog = catalog or get_catalog()
    service = catalog.match_service(service_type)
    if service:
        midpoint = (service.base_price.min + service.base_price.max) / 2
        return float(midpoint.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))

    lowered = service_type.lower()
    for key, price in FALLBACK_PRICES.items():
        if key in lowered:
            return float(price)
    return DEFAULT_SERVICE_PRICE


def get_service_description(service_type: str, catalog: Optional[Catalog] = None) -> str:
    catalog = catalog or get_catalog()
    service = catalog.match_service(service_type)
    return service.name if service else service_type
