import hashlib, json

def payload_hash(payload: dict) -> str:
    s = json.dumps(payload, sort_keys=True, default=str)
    return hashlib.sha256(s.encode()).hexdigest()

def quote_cache_key(scheme: str, payload: dict, version: str = "") -> str:
    # version ties cached quotes to the catalog they were priced from
    return f"quote:{scheme}:{version[:16]}:{payload_hash(payload)}"
