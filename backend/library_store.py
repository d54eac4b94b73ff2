from __future__ import annotations

"""
backend/library_store.py

Usuarios + items de biblioteca sobre un snapshot JSON.

Formato del snapshot
--------------------
{
  "users": [
    {"id": "<uuid>", "name": "...", "enabled_libraries": ["lib-a"],
     "max_parental_rating": 13, "is_disabled": false}
  ],
  "items": [
    {"id": "...", "name": "...", "library_id": "lib-a",
     "parental_rating": 12, "provider_ids": {"Tmdb": "123", "Imdb": "tt0123"}}
  ]
}

Visibilidad (list_visible_items)
--------------------------------
- usuario deshabilitado -> nada
- enabled_libraries vacío/ausente -> todas las bibliotecas
- max_parental_rating ausente -> sin límite; items sin rating -> siempre visibles

`provider_ids` se guarda crudo: validarlo es responsabilidad de quien lo lee
(un item roto no debe tumbar la carga del snapshot entero).
"""

import uuid
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from backend import logger as _logger
from backend.config_base import _FALSE_SET, _TRUE_SET


class MalformedItemError(ValueError):
    """El item existe pero su mapping de provider ids no es usable."""


@dataclass(frozen=True)
class User:
    id: uuid.UUID
    name: str = ""
    enabled_libraries: frozenset[str] = frozenset()
    max_parental_rating: int | None = None
    is_disabled: bool = False

    def can_see_library(self, library_id: str | None) -> bool:
        if not self.enabled_libraries:
            return True
        return library_id is not None and library_id in self.enabled_libraries

    def can_see_rating(self, parental_rating: int | None) -> bool:
        if self.max_parental_rating is None or parental_rating is None:
            return True
        return parental_rating <= self.max_parental_rating


@dataclass(frozen=True)
class LibraryItem:
    id: str
    name: str | None = None
    library_id: str | None = None
    parental_rating: int | None = None
    provider_ids: object = field(default=None, compare=False)

    def provider_id(self, provider: str) -> str | None:
        """
        Valor para `provider`: primero clave exacta y, si no está, clave
        sin distinguir mayúsculas. Lanza MalformedItemError si el mapping o
        el valor encontrado no son strings.
        """
        raw = self.provider_ids
        if raw is None:
            return None
        if not isinstance(raw, Mapping):
            raise MalformedItemError(f"provider_ids is {type(raw).__name__}, expected object")

        if provider in raw:
            value = raw[provider]
        else:
            wanted = provider.casefold()
            match = next((k for k in raw if isinstance(k, str) and k.casefold() == wanted), None)
            if match is None:
                return None
            value = raw[match]

        if value is None:
            return None
        if not isinstance(value, str):
            raise MalformedItemError(f"provider id for {provider!r} is {type(value).__name__}, expected string")
        return value


class UserStore(Protocol):
    def get_user(self, user_id: uuid.UUID) -> User | None: ...


class LibraryStore(Protocol):
    def list_visible_items(self, user: User) -> Iterable[LibraryItem]: ...


# ============================================================================
# Parseo defensivo
# ============================================================================


def _opt_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    return None


def _opt_bool(value: object, *, name: str) -> bool:
    """bool tal cual; strings con los mismos tokens que el .env; resto -> False."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        s = value.strip().lower()
        if s in _TRUE_SET:
            return True
        if s in _FALSE_SET:
            return False
    _logger.warning(f"Invalid bool for {name!r}: {value!r}, using False")
    return False


def _opt_str(value: object) -> str | None:
    return value if isinstance(value, str) else None


def _parse_user(raw: Mapping[str, Any]) -> User | None:
    try:
        uid = uuid.UUID(str(raw.get("id")))
    except ValueError:
        _logger.warning(f"Skipping user with invalid id: {raw.get('id')!r}")
        return None

    libs = raw.get("enabled_libraries")
    enabled = frozenset(x for x in libs if isinstance(x, str)) if isinstance(libs, list) else frozenset()

    return User(
        id=uid,
        name=_opt_str(raw.get("name")) or "",
        enabled_libraries=enabled,
        max_parental_rating=_opt_int(raw.get("max_parental_rating")),
        is_disabled=_opt_bool(raw.get("is_disabled"), name="is_disabled"),
    )


def _parse_item(raw: Mapping[str, Any]) -> LibraryItem | None:
    item_id = raw.get("id")
    if item_id is None or isinstance(item_id, (dict, list)):
        return None
    return LibraryItem(
        id=str(item_id),
        name=_opt_str(raw.get("name")),
        library_id=_opt_str(raw.get("library_id")),
        parental_rating=_opt_int(raw.get("parental_rating")),
        provider_ids=raw.get("provider_ids"),
    )


def _records(snapshot: Mapping[str, Any], key: str) -> list[Mapping[str, Any]]:
    rows = snapshot.get(key)
    if not isinstance(rows, list):
        return []
    return [r for r in rows if isinstance(r, Mapping)]


# ============================================================================
# Store
# ============================================================================


class JsonLibraryStore:
    """
    UserStore + LibraryStore sobre un snapshot JSON.

    `load_snapshot` lo inyecta el server (FileCache.load_json sobre
    LIBRARY_SNAPSHOT_PATH); cada llamada pide su propio snapshot.
    """

    def __init__(self, load_snapshot: Callable[[], object]) -> None:
        self._load_snapshot = load_snapshot

    def _snapshot(self) -> Mapping[str, Any]:
        data = self._load_snapshot()
        if not isinstance(data, Mapping):
            raise ValueError(f"library snapshot must be a JSON object, got {type(data).__name__}")
        return data

    def snapshot_stats(self) -> dict[str, int]:
        """Conteo de usuarios/items del snapshot; lanza si no se puede leer."""
        snap = self._snapshot()
        return {"users": len(_records(snap, "users")), "items": len(_records(snap, "items"))}

    def get_user(self, user_id: uuid.UUID) -> User | None:
        for raw in _records(self._snapshot(), "users"):
            user = _parse_user(raw)
            if user is not None and user.id == user_id:
                return user
        return None

    def list_visible_items(self, user: User) -> Iterator[LibraryItem]:
        if user.is_disabled:
            return
        for raw in _records(self._snapshot(), "items"):
            item = _parse_item(raw)
            if item is None:
                continue
            if user.can_see_library(item.library_id) and user.can_see_rating(item.parental_rating):
                yield item
