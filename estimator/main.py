from fastapi import FastAPI, Request
from contextlib import asynccontextmanager
from starlette.responses import Response, JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from estimator.api import catalog, quotes
from estimator.core.config import settings
from estimator.core.redis import init_redis, close_redis, get_redis
from estimator.core.metrics import request_count, request_duration, redis_connected, catalog_entries, get_metrics_text
from estimator.services.catalog import get_catalog, load_catalog
from estimator.services.rules import validate_rules
import time
import logging

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        try:
            response = await call_next(request)
            duration = time.time() - start_time

            request_count.labels(
                method=request.method,
                endpoint=request.url.path,
                status=response.status_code
            ).inc()

            request_duration.labels(
                method=request.method,
                endpoint=request.url.path
            ).observe(duration)

            return response
        except Exception:
            duration = time.time() - start_time
            request_count.labels(
                method=request.method,
                endpoint=request.url.path,
                status=500
            ).inc()
            request_duration.labels(
                method=request.method,
                endpoint=request.url.path
            ).observe(duration)
            raise


def load_pricing_config():
    """Validate rule tables and re-read the catalog source.

    Raises ConfigurationError on bad data. The cached catalog served to
    requests is left untouched.
    """
    validate_rules()
    return load_catalog(settings.CATALOG_FILE or None)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting...")

    validate_rules()
    loaded = get_catalog()
    catalog_entries.labels(kind="service").set(len(loaded.services))
    catalog_entries.labels(kind="package").set(len(loaded.packages))

    try:
        client = await init_redis()
        redis_connected.set(1 if client is not None else 0)
    except Exception as e:
        logger.error(f"Redis connection failed, quote caching disabled: {e}")
        redis_connected.set(0)

    yield

    logger.info("Application shutting down...")
    await close_redis()
    redis_connected.set(0)
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan
)

app.add_middleware(MetricsMiddleware)

app.include_router(catalog.router)
app.include_router(quotes.router)


@app.get("/metrics", tags=["monitoring"])
async def metrics():
    return Response(
        content=get_metrics_text(),
        media_type="text/plain; version=0.0.4; charset=utf-8"
    )


@app.get("/health", tags=["monitoring"])
async def health_check():
    redis = get_redis()

    return {
        "status": "healthy",
        "service": settings.API_TITLE,
        "version": settings.API_VERSION,
        "dependencies": {
            "redis": "connected" if redis is not None else "disabled",
            "catalog": f"{len(get_catalog().services)} services",
        }
    }


@app.get("/readiness", tags=["monitoring"])
async def readiness_check():
    try:
        load_pricing_config()
    except ValueError as e:
        return JSONResponse(status_code=503, content={"ready": False, "reason": str(e)})

    return {
        "ready": True,
        "service": settings.API_TITLE
    }


@app.get("/", tags=["root"])
async def root():
    return {
        "message": settings.API_TITLE,
        "version": settings.API_VERSION,
        "docs": "/docs",
        "health": "/health",
        "metrics": "/metrics"
    }
