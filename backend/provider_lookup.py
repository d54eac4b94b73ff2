from __future__ import annotations

"""
backend/provider_lookup.py

¿Existe en la biblioteca visible de un usuario algún item con un provider id
concreto (p.ej. Tmdb=123)?

- Escaneo lineal de los items visibles; para en el primer match.
- Un item roto (provider_ids malformado, valor no string, cualquier error
  inspeccionándolo) se reporta por `on_item_error` y se salta: nunca aborta
  el escaneo.
- Sin índice, sin caché y sin paginación: O(n) en items visibles.
"""

import threading
import uuid
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass

from backend import logger as _logger
from backend.errors import NotFound
from backend.library_store import LibraryItem, LibraryStore, UserStore

ItemErrorCallback = Callable[[LibraryItem, Exception], None]


# ============================================================
# MÉTRICAS (telemetría local)
# ============================================================

_METRICS_LOCK = threading.Lock()
_METRICS: dict[str, int] = {
    "items": 0,
    "item_errors": 0,
}


def _m_inc(key: str, delta: int = 1) -> None:
    with _METRICS_LOCK:
        _METRICS[key] = int(_METRICS.get(key, 0)) + int(delta)


def get_provider_scan_metrics_snapshot() -> dict[str, int]:
    with _METRICS_LOCK:
        return dict(_METRICS)


def reset_provider_scan_metrics() -> None:
    with _METRICS_LOCK:
        for k in list(_METRICS.keys()):
            _METRICS[k] = 0


# ============================================================
# Escaneo
# ============================================================


@dataclass(frozen=True)
class ItemInspection:
    item: LibraryItem
    matched: bool
    error: Exception | None = None

    @property
    def item_id(self) -> str:
        return self.item.id


def inspect_items(items: Iterable[LibraryItem], provider: str, external_id: str) -> Iterator[ItemInspection]:
    """Un resultado por item; los fallos de un item se devuelven, no se lanzan."""
    for item in items:
        try:
            value = item.provider_id(provider)
        except Exception as exc:
            yield ItemInspection(item=item, matched=False, error=exc)
            continue
        yield ItemInspection(item=item, matched=value is not None and value == external_id)


def _log_item_error(item: LibraryItem, exc: Exception) -> None:
    _logger.warning(f"Error checking provider IDs for item {item.id} ({item.name!r}): {exc!r}")


class ProviderIdentityResolver:
    def __init__(
        self,
        *,
        library_store: LibraryStore,
        user_store: UserStore,
        on_item_error: ItemErrorCallback | None = None,
    ) -> None:
        self._library_store = library_store
        self._user_store = user_store
        self._on_item_error = on_item_error or _log_item_error

    def exists(self, provider: str, external_id: str, user_id: uuid.UUID) -> bool:
        user = self._user_store.get_user(user_id)
        if user is None:
            raise NotFound(f"User {user_id} not found.")

        _logger.info(f"ProviderLookup: checking {provider}={external_id} for user {user_id}")

        checked = 0
        for outcome in inspect_items(self._library_store.list_visible_items(user), provider, external_id):
            checked += 1
            _m_inc("items")

            if outcome.error is not None:
                _m_inc("item_errors")
                try:
                    self._on_item_error(outcome.item, outcome.error)
                except Exception as cb_exc:
                    # el canal de diagnóstico tampoco puede abortar el escaneo
                    _logger.debug_ctx("PROVIDER", f"on_item_error failed: {cb_exc!r}")
                continue

            if outcome.matched:
                _logger.info(f"ProviderLookup: found match {provider}={external_id} after {checked} items")
                return True

        _logger.info(f"ProviderLookup: no match for {provider}={external_id} (checked {checked} items)")
        return False
