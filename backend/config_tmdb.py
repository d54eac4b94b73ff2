from __future__ import annotations

from typing import Final

from backend.config_base import (
    _cap_float_min,
    _cap_int,
    _get_env_float,
    _get_env_int,
    _get_env_str,
    _parse_env_csv_tokens,
)

# ============================================================
# TMDb (API + timeouts + retry + circuit breaker)
# ============================================================

TMDB_API_KEY: str | None = _get_env_str("TMDB_API_KEY", None)
TMDB_BASE_URL: str = _get_env_str("TMDB_BASE_URL", "https://api.themoviedb.org/3") or "https://api.themoviedb.org/3"

TMDB_DEFAULT_LANGUAGE: str = _get_env_str("TMDB_DEFAULT_LANGUAGE", "en-US") or "en-US"

TMDB_HTTP_TIMEOUT_SECONDS: float = _cap_float_min(
    "TMDB_HTTP_TIMEOUT_SECONDS",
    _get_env_float("TMDB_HTTP_TIMEOUT_SECONDS", 10.0),
    min_v=0.5,
)
TMDB_HTTP_RETRY_TOTAL: int = _cap_int(
    "TMDB_HTTP_RETRY_TOTAL",
    _get_env_int("TMDB_HTTP_RETRY_TOTAL", 2),
    min_v=0,
    max_v=10,
)
TMDB_HTTP_RETRY_BACKOFF_FACTOR: float = _cap_float_min(
    "TMDB_HTTP_RETRY_BACKOFF_FACTOR",
    _get_env_float("TMDB_HTTP_RETRY_BACKOFF_FACTOR", 0.5),
    min_v=0.0,
)
TMDB_HTTP_POOL_SIZE: int = _cap_int(
    "TMDB_HTTP_POOL_SIZE",
    _get_env_int("TMDB_HTTP_POOL_SIZE", 8),
    min_v=1,
    max_v=64,
)
TMDB_HTTP_USER_AGENT: str = _get_env_str("TMDB_HTTP_USER_AGENT", "movie-metadata-api/1.0") or "movie-metadata-api/1.0"

TMDB_CIRCUIT_FAILURE_THRESHOLD: int = _cap_int(
    "TMDB_CIRCUIT_FAILURE_THRESHOLD",
    _get_env_int("TMDB_CIRCUIT_FAILURE_THRESHOLD", 5),
    min_v=1,
    max_v=100,
)
TMDB_CIRCUIT_OPEN_SECONDS: float = _cap_float_min(
    "TMDB_CIRCUIT_OPEN_SECONDS",
    _get_env_float("TMDB_CIRCUIT_OPEN_SECONDS", 20.0),
    min_v=0.1,
)

# Campos para `append_to_response` en /movie/{id}.
# Lo consume quien construye el cliente (server/api/deps.py), no el cliente en sí.
DEFAULT_APPEND_TO_RESPONSE_MOVIE_FIELDS: Final[tuple[str, ...]] = (
    "videos",
    "images",
    "credits",
    "releases",
    "keywords",
    "similar",
    "recommendations",
)

TMDB_APPEND_TO_RESPONSE: tuple[str, ...] = tuple(
    _parse_env_csv_tokens(_get_env_str("TMDB_APPEND_TO_RESPONSE", "") or "")
) or DEFAULT_APPEND_TO_RESPONSE_MOVIE_FIELDS
