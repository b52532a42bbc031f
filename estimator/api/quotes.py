"""Quote endpoints with optional Redis caching"""
import json
import logging
from fastapi import APIRouter

from estimator.schemas.quote import PackageQuoteRequest, QuoteResponse, ServiceQuoteRequest
from estimator.services.catalog import get_catalog
from estimator.services.pricing import QuoteSelections, quote_package, quote_service
from estimator.core.redis import get_redis
from estimator.core.config import settings
from estimator.core.metrics import cache_hits, cache_misses
from estimator.core.response_builders import build_quote_response
from estimator.utils.hashing import quote_cache_key

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/quotes", tags=["quotes"])


def service_selections(req: ServiceQuoteRequest) -> QuoteSelections:
    return QuoteSelections(
        coefficients={"vehicle": req.vehicle_type, "engine": req.engine_type},
        surcharges={"complexity": list(req.complexity)},
        fees=["service_call"] if req.service_call else [],
    )


def package_selections(req: PackageQuoteRequest) -> QuoteSelections:
    return QuoteSelections(
        coefficients={
            "vehicle": req.vehicle_type,
            "engine": req.engine_type,
            "vehicle_age": req.vehicle_age,
        },
    )


async def _cached(scheme: str, payload: dict):
    redis = get_redis()
    if redis is None:
        return None, None

    cache_key = quote_cache_key(scheme, payload, get_catalog().digest)
    try:
        cached = await redis.get(cache_key)
        if cached:
            cache_hits.labels(scheme=scheme).inc()
            return cache_key, QuoteResponse.model_validate(json.loads(cached))
    except Exception as e:
        logger.warning(f"Cache retrieval failed: {e}")
    cache_misses.labels(scheme=scheme).inc()
    return cache_key, None


async def _store(cache_key, response: QuoteResponse):
    redis = get_redis()
    if redis is None or cache_key is None:
        return
    try:
        await redis.set(cache_key, response.model_dump_json(), ex=settings.QUOTE_CACHE_TTL)
    except Exception as e:
        logger.warning(f"Cache write failed: {e}")


@router.post("/service", response_model=QuoteResponse)
async def service_quote(req: ServiceQuoteRequest):
    payload = req.model_dump()
    payload["complexity"] = sorted(set(req.complexity))

    cache_key, cached = await _cached("service", payload)
    if cached is not None:
        return cached

    result = build_quote_response(quote_service(req.service_id, service_selections(req)))
    await _store(cache_key, result)
    return result


@router.post("/package", response_model=QuoteResponse)
async def package_quote(req: PackageQuoteRequest):
    cache_key, cached = await _cached("package", req.model_dump())
    if cached is not None:
        return cached

    result = build_quote_response(quote_package(req.package_id, package_selections(req)))
    await _store(cache_key, result)
    return result
