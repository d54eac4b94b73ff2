from __future__ import annotations

from collections.abc import Callable, Mapping
from threading import RLock

from backend.provider_lookup import get_provider_scan_metrics_snapshot
from backend.tmdb_client import get_tmdb_metrics_snapshot

_LOCK = RLock()
_METRICS: dict[str, int] = {
    "http_requests_total": 0,
    "http_errors_5xx_total": 0,
    "http_requests_cancelled_total": 0,
    "cache_json_hit_total": 0,
    "cache_json_miss_total": 0,
    "cache_evictions_total": 0,
    "cache_refresh_total": 0,
    "cache_read_retries_total": 0,
}

# Contadores que viven en backend/ (no importan server/): se leen al renderizar.
# prefijo -> snapshot
_BACKEND_SOURCES: dict[str, Callable[[], Mapping[str, int]]] = {
    "tmdb": get_tmdb_metrics_snapshot,
    "provider_scan": get_provider_scan_metrics_snapshot,
}


def inc(name: str, value: int = 1) -> None:
    with _LOCK:
        _METRICS[name] = _METRICS.get(name, 0) + value


def snapshot() -> dict[str, int]:
    with _LOCK:
        out = dict(_METRICS)
    for prefix, source in _BACKEND_SOURCES.items():
        for k, v in source().items():
            out[f"{prefix}_{k}_total"] = int(v)
    return out


def render_prometheus() -> str:
    lines: list[str] = []
    for k, v in sorted(snapshot().items()):
        lines.append(f"# TYPE {k} counter")
        lines.append(f"{k} {v}")
    return "\n".join(lines) + "\n"
