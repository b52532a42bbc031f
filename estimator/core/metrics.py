"""Prometheus metrics for monitoring"""
from prometheus_client import Counter, Histogram, Gauge, CollectorRegistry

registry = CollectorRegistry()

request_count = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status'],
    registry=registry
)

request_duration = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    registry=registry
)

quotes_computed = Counter(
    'quotes_computed_total',
    'Total quotes priced to a range',
    ['scheme'],
    registry=registry
)

quotes_incomplete = Counter(
    'quotes_incomplete_total',
    'Total quote requests missing a required selection',
    ['scheme'],
    registry=registry
)

unknown_rule_keys = Counter(
    'unknown_rule_keys_total',
    'Selections that resolved to a neutral value because the key is not in the table',
    ['axis'],
    registry=registry
)

cache_hits = Counter(
    'cache_hits_total',
    'Total quote cache hits',
    ['scheme'],
    registry=registry
)

cache_misses = Counter(
    'cache_misses_total',
    'Total quote cache misses',
    ['scheme'],
    registry=registry
)

catalog_entries = Gauge(
    'catalog_entries',
    'Number of priceable entries loaded',
    ['kind'],
    registry=registry
)

redis_connected = Gauge(
    'redis_connected',
    'Redis connection status (1=connected, 0=disconnected)',
    registry=registry
)


def get_metrics_text() -> str:
    """Generate Prometheus metrics in text format"""
    from prometheus_client import generate_latest
    return generate_latest(registry).decode('utf-8')
