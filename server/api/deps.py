from __future__ import annotations

from backend import config_tmdb
from backend.library_store import JsonLibraryStore
from backend.metadata_normalizer import MetadataNormalizer
from backend.provider_lookup import ProviderIdentityResolver
from backend.resilience import CircuitBreaker
from backend.tmdb_client import TmdbClient
from server.api import paths
from server.api.caching.file_cache import FileCache
from server.api.settings import Settings

_SETTINGS = Settings.from_env()
_FILE_CACHE = FileCache(_SETTINGS)

# Un cliente por proceso: comparte Session (pool HTTP) y circuit breaker.
_TMDB_CLIENT = TmdbClient(
    api_key=config_tmdb.TMDB_API_KEY,
    base_url=config_tmdb.TMDB_BASE_URL,
    append_to_response=config_tmdb.TMDB_APPEND_TO_RESPONSE,
    timeout_seconds=config_tmdb.TMDB_HTTP_TIMEOUT_SECONDS,
    retry_total=config_tmdb.TMDB_HTTP_RETRY_TOTAL,
    retry_backoff_factor=config_tmdb.TMDB_HTTP_RETRY_BACKOFF_FACTOR,
    pool_size=config_tmdb.TMDB_HTTP_POOL_SIZE,
    user_agent=config_tmdb.TMDB_HTTP_USER_AGENT,
    breaker=CircuitBreaker(
        failure_threshold=config_tmdb.TMDB_CIRCUIT_FAILURE_THRESHOLD,
        open_seconds=config_tmdb.TMDB_CIRCUIT_OPEN_SECONDS,
    ),
)


def get_settings() -> Settings:
    return _SETTINGS


def get_file_cache() -> FileCache:
    return _FILE_CACHE


def get_tmdb_client() -> TmdbClient:
    return _TMDB_CLIENT


def get_metadata_normalizer() -> MetadataNormalizer:
    return MetadataNormalizer(_TMDB_CLIENT, default_language=config_tmdb.TMDB_DEFAULT_LANGUAGE)


def get_library_store() -> JsonLibraryStore:
    # paths.LIBRARY_SNAPSHOT_PATH se lee en cada carga (los tests lo parchean)
    return JsonLibraryStore(lambda: _FILE_CACHE.load_json(paths.LIBRARY_SNAPSHOT_PATH))


def get_provider_resolver() -> ProviderIdentityResolver:
    store = get_library_store()
    return ProviderIdentityResolver(library_store=store, user_store=store)
