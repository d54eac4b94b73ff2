from __future__ import annotations

"""
backend/tmdb_client.py

Cliente HTTP mínimo de TMDb v3 para el normalizador de metadata.

Endpoints
---------
- GET /movie/{id}?language=..&append_to_response=..&include_image_language=..
- GET /collection/{id}?language=..

Política
--------
- 404 -> None (el caller decide si eso es NotFound o "sin colección").
- Cualquier otro fallo (red, 5xx, 401, JSON inválido, circuito abierto)
  -> UpstreamUnavailable.
- requests.Session por cliente con Retry de urllib3 (429/5xx, respeta Retry-After).
- CircuitBreaker por endpoint ("movie" / "collection"): si TMDb está caído
  fallamos rápido en vez de encadenar timeouts.
- Cancelación cooperativa: se comprueba el token antes y después de cada
  llamada; una request cancelada no penaliza al breaker.

Métricas locales (thread-safe) consultables vía get_tmdb_metrics_snapshot().
"""

import threading
from collections.abc import Mapping, Sequence
from typing import Final

import requests  # type: ignore[import-not-found]
from requests.adapters import HTTPAdapter  # type: ignore[import-not-found]
from requests.exceptions import RequestException  # type: ignore[import-not-found]
from urllib3.util.retry import Retry  # type: ignore[import-not-found]

from backend import logger as _logger
from backend.cancellation import CancellationToken, check_cancelled
from backend.errors import RequestCancelled, UpstreamUnavailable
from backend.resilience import CircuitBreaker, CircuitOpenError, call_guarded
from backend.tmdb_language import image_languages_param

_RETRY_STATUS: Final[tuple[int, ...]] = (429, 500, 502, 503, 504)


# ============================================================
# MÉTRICAS (telemetría local)
# ============================================================

_METRICS_LOCK = threading.Lock()
_METRICS: dict[str, int] = {
    "requests": 0,
    "failures": 0,
    "not_found": 0,
    "circuit_open": 0,
    "cancelled": 0,
}


def _m_inc(key: str, delta: int = 1) -> None:
    with _METRICS_LOCK:
        _METRICS[key] = int(_METRICS.get(key, 0)) + int(delta)


def get_tmdb_metrics_snapshot() -> dict[str, int]:
    with _METRICS_LOCK:
        return dict(_METRICS)


def reset_tmdb_metrics() -> None:
    with _METRICS_LOCK:
        for k in list(_METRICS.keys()):
            _METRICS[k] = 0


# ============================================================
# Errores internos (nunca salen del módulo)
# ============================================================


class _TmdbHttpError(Exception):
    def __init__(self, status: int) -> None:
        super().__init__(f"TMDb HTTP {status}")
        self.status = status


def _is_breaker_failure(exc: BaseException) -> bool:
    # cancelación: sin veredicto sobre la salud de TMDb
    return not isinstance(exc, RequestCancelled)


# ============================================================
# Cliente
# ============================================================


class TmdbClient:
    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = "https://api.themoviedb.org/3",
        append_to_response: Sequence[str] = (),
        timeout_seconds: float = 10.0,
        retry_total: int = 2,
        retry_backoff_factor: float = 0.5,
        pool_size: int = 8,
        user_agent: str = "movie-metadata-api/1.0",
        session: requests.Session | None = None,
        breaker: CircuitBreaker | None = None,
    ) -> None:
        self._api_key = (api_key or "").strip()
        self._base_url = base_url.rstrip("/")
        self._append = ",".join(a.strip() for a in append_to_response if a and a.strip())
        self._timeout = max(0.5, float(timeout_seconds))
        self._retry_total = max(0, int(retry_total))
        self._retry_backoff = max(0.0, float(retry_backoff_factor))
        self._pool_size = max(1, int(pool_size))
        self._user_agent = user_agent
        self._session = session
        self._session_lock = threading.Lock()
        self._breaker = breaker if breaker is not None else CircuitBreaker()

    @property
    def has_api_key(self) -> bool:
        return bool(self._api_key)

    def _get_session(self) -> requests.Session:
        if self._session is not None:
            return self._session

        with self._session_lock:
            if self._session is not None:
                return self._session

            session = requests.Session()
            retries = Retry(
                total=self._retry_total,
                backoff_factor=self._retry_backoff,
                status_forcelist=_RETRY_STATUS,
                allowed_methods=("GET",),
                raise_on_status=False,
                respect_retry_after_header=True,
            )
            adapter = HTTPAdapter(
                max_retries=retries,
                pool_connections=self._pool_size,
                pool_maxsize=self._pool_size,
            )
            session.mount("https://", adapter)
            session.mount("http://", adapter)
            session.headers.update(
                {
                    "User-Agent": self._user_agent,
                    "Accept": "application/json",
                }
            )

            self._session = session
            return session

    # --------------------------------------------------------
    # Núcleo HTTP
    # --------------------------------------------------------

    def _http_get_json(self, path: str, params: Mapping[str, str]) -> Mapping[str, object] | None:
        """GET -> dict | None (404). Lanza _TmdbHttpError / RequestException / ValueError."""
        _m_inc("requests")
        url = f"{self._base_url}{path}"
        query = {"api_key": self._api_key, **params}

        resp = self._get_session().get(url, params=query, timeout=self._timeout)
        if resp.status_code == 404:
            return None
        if resp.status_code != 200:
            raise _TmdbHttpError(resp.status_code)

        data = resp.json()
        if not isinstance(data, Mapping):
            raise ValueError(f"unexpected TMDb payload type: {type(data).__name__}")
        return data

    def _get(
        self,
        *,
        key: str,
        path: str,
        params: Mapping[str, str],
        cancel: CancellationToken | None,
    ) -> Mapping[str, object] | None:
        if not self._api_key:
            raise UpstreamUnavailable("TMDB_API_KEY is not configured")

        check_cancelled(cancel)

        def _call() -> Mapping[str, object] | None:
            out = self._http_get_json(path, params)
            # la respuesta llegó, pero el cliente ya no la quiere
            check_cancelled(cancel)
            return out

        try:
            data = call_guarded(breaker=self._breaker, key=key, fn=_call, is_failure=_is_breaker_failure)
        except RequestCancelled:
            _m_inc("cancelled")
            raise
        except CircuitOpenError as exc:
            _m_inc("circuit_open")
            _logger.debug_ctx("TMDB", f"{exc}")
            raise UpstreamUnavailable(f"TMDb {key} temporarily unavailable ({exc.reason})") from exc
        except (RequestException, _TmdbHttpError, ValueError) as exc:
            _m_inc("failures")
            _logger.warning(f"TMDb request failed path={path}: {exc!r}")
            raise UpstreamUnavailable(f"TMDb {key} request failed") from exc

        if data is None:
            _m_inc("not_found")
            _logger.debug_ctx("TMDB", f"404 path={path}")
        return data

    # --------------------------------------------------------
    # API pública
    # --------------------------------------------------------

    def fetch_movie(
        self,
        movie_id: int,
        language: str,
        *,
        cancel: CancellationToken | None = None,
    ) -> Mapping[str, object] | None:
        params: dict[str, str] = {
            "language": language,
            "include_image_language": image_languages_param(language),
        }
        if self._append:
            params["append_to_response"] = self._append
        return self._get(key="movie", path=f"/movie/{int(movie_id)}", params=params, cancel=cancel)

    def fetch_collection(
        self,
        collection_id: int,
        language: str,
        *,
        cancel: CancellationToken | None = None,
    ) -> Mapping[str, object] | None:
        return self._get(
            key="collection",
            path=f"/collection/{int(collection_id)}",
            params={"language": language},
            cancel=cancel,
        )
