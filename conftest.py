import pytest
from httpx import AsyncClient, ASGITransport

from estimator.main import app
from estimator.core.enums import VehicleType, EngineType
from estimator.services.catalog import load_catalog
from estimator.services.pricing import QuoteSelections


@pytest.fixture(scope="session")
def catalog():
    return load_catalog()


@pytest.fixture
async def test_client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def make_selections():
    """Build service-scheme selections with the usual defaults"""
    def _make(vehicle=VehicleType.SEDAN.value, engine=EngineType.FOUR_CYLINDER.value,
              complexity=None, service_call=False, **extra):
        coefficients = {"vehicle": vehicle, "engine": engine}
        coefficients.update(extra)
        return QuoteSelections(
            coefficients=coefficients,
            surcharges={"complexity": list(complexity or [])},
            fees=["service_call"] if service_call else [],
        )
    return _make


@pytest.fixture
def valid_service_quote():
    return {
        "service_id": "oil-change",
        "vehicle_type": "suv",
        "engine_type": "6-cylinder",
        "complexity": [],
        "service_call": True
    }


@pytest.fixture
def valid_package_quote():
    return {
        "package_id": "package-b",
        "vehicle_type": "suv",
        "engine_type": "6-cylinder",
        "vehicle_age": "2010-2019"
    }
