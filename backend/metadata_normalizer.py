from __future__ import annotations

"""
backend/metadata_normalizer.py

Normaliza un registro /movie/{id} de TMDb (con append_to_response) a
NormalizedMovie.

Principios
----------
- Campos opcionales ausentes NUNCA rompen el mapeo: listas -> (), escalares -> None.
- La colección ("belongs_to_collection") se pide aparte, después del fetch
  principal y solo si el registro la declara. Si ese fetch falla o vuelve vacío,
  la película se devuelve sin colección.
- "similar" se mapea a resúmenes ligeros, sin normalización recursiva.
- map_movie() es pura: mismas entradas -> NormalizedMovie iguales.
- Errores:
    * registro principal inexistente -> NotFound
    * cualquier fallo inesperado del mapeo -> Internal (se captura entero, no por campo)
    * cancelación -> RequestCancelled, nunca se convierte en Internal
"""

from collections.abc import Mapping
from typing import Protocol

from backend import logger as _logger
from backend.cancellation import CancellationToken, check_cancelled
from backend.errors import (
    InvalidInput,
    Internal,
    MetadataServiceError,
    NotFound,
    RequestCancelled,
    UpstreamUnavailable,
)
from backend.image_aggregator import aggregate_record_images
from backend.metadata_models import (
    CollectionRef,
    NormalizedMovie,
    Person,
    ProductionCompany,
    SimilarMovie,
    Trailer,
)
from backend.rating_resolver import rating_entries_from_record, resolve_official_rating
from backend.role_classifier import PersonRole, classify_crew
from backend.tmdb_language import DEFAULT_LANGUAGE, resolve_language

_TRAILER_TYPES = frozenset({"trailer", "teaser"})
_TRAILER_SITE = "youtube"


class MovieMetadataProvider(Protocol):
    def fetch_movie(
        self, movie_id: int, language: str, *, cancel: CancellationToken | None = None
    ) -> Mapping[str, object] | None: ...

    def fetch_collection(
        self, collection_id: int, language: str, *, cancel: CancellationToken | None = None
    ) -> Mapping[str, object] | None: ...


# ============================================================================
# AUX: lectura defensiva del payload
# ============================================================================


def _str(value: object) -> str | None:
    return value if isinstance(value, str) else None


def _non_empty_str(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    return None


def _float(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return None


def _mappings(value: object) -> list[Mapping[str, object]]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, Mapping)]


def _sub_list(record: Mapping[str, object], block: str, key: str) -> list[Mapping[str, object]]:
    """record[block][key] como lista de mappings; [] si falta cualquier nivel."""
    container = record.get(block)
    if not isinstance(container, Mapping):
        return []
    return _mappings(container.get(key))


# ============================================================================
# MAPEO (puro)
# ============================================================================


def _map_people(record: Mapping[str, object]) -> tuple[Person, ...]:
    cast = [
        Person(
            id=_int(c.get("id")),
            name=_str(c.get("name")),
            role=PersonRole.ACTOR,
            character=_str(c.get("character")),
            profile_path=_str(c.get("profile_path")),
        )
        for c in _sub_list(record, "credits", "cast")
    ]
    crew = [
        Person(
            id=_int(c.get("id")),
            name=_str(c.get("name")),
            role=classify_crew(_str(c.get("job")), _str(c.get("department"))),
            job=_str(c.get("job")),
            department=_str(c.get("department")),
            profile_path=_str(c.get("profile_path")),
        )
        for c in _sub_list(record, "credits", "crew")
    ]
    return tuple(cast + crew)


def _is_trailer(video: Mapping[str, object]) -> bool:
    vtype = (_str(video.get("type")) or "").casefold()
    site = (_str(video.get("site")) or "").casefold()
    return vtype in _TRAILER_TYPES and site == _TRAILER_SITE


def _map_trailers(record: Mapping[str, object]) -> tuple[Trailer, ...]:
    return tuple(
        Trailer(
            id=_str(v.get("id")),
            key=_str(v.get("key")),
            name=_str(v.get("name")),
            site=_str(v.get("site")),
            type=_str(v.get("type")),
            size=_int(v.get("size")),
        )
        for v in _sub_list(record, "videos", "results")
        if _is_trailer(v)
    )


def _map_companies(record: Mapping[str, object]) -> tuple[ProductionCompany, ...]:
    return tuple(
        ProductionCompany(
            id=_int(pc.get("id")),
            name=_str(pc.get("name")),
            logo_path=_str(pc.get("logo_path")),
            origin_country=_str(pc.get("origin_country")),
        )
        for pc in _mappings(record.get("production_companies"))
    )


def _names(items: list[Mapping[str, object]]) -> tuple[str, ...]:
    out: list[str] = []
    for item in items:
        name = _str(item.get("name"))
        if name is not None:
            out.append(name)
    return tuple(out)


def _map_keywords(record: Mapping[str, object]) -> tuple[str, ...]:
    # /movie/{id}?append_to_response=keywords -> {"keywords": {"keywords": [...]}}
    return _names(_sub_list(record, "keywords", "keywords"))


def _map_similar(record: Mapping[str, object]) -> tuple[SimilarMovie, ...]:
    return tuple(
        SimilarMovie(
            id=_int(s.get("id")),
            title=_str(s.get("title")),
            poster_path=_str(s.get("poster_path")),
            release_date=_non_empty_str(s.get("release_date")),
            community_rating=_float(s.get("vote_average")),
        )
        for s in _sub_list(record, "similar", "results")
    )


def map_collection(payload: Mapping[str, object], *, fallback_id: int) -> CollectionRef:
    cid = _int(payload.get("id"))
    return CollectionRef(
        id=cid if cid is not None else fallback_id,
        name=_str(payload.get("name")),
        poster_path=_str(payload.get("poster_path")),
        backdrop_path=_str(payload.get("backdrop_path")),
    )


def declared_collection_id(record: Mapping[str, object]) -> int | None:
    btc = record.get("belongs_to_collection")
    if not isinstance(btc, Mapping):
        return None
    return _int(btc.get("id"))


def map_movie(
    record: Mapping[str, object],
    language: str,
    *,
    collection: CollectionRef | None = None,
) -> NormalizedMovie:
    return NormalizedMovie(
        tmdb_id=_int(record.get("id")),
        imdb_id=_non_empty_str(record.get("imdb_id")),
        title=_str(record.get("title")),
        original_title=_str(record.get("original_title")),
        original_language=_str(record.get("original_language")),
        overview=_str(record.get("overview")),
        tagline=_str(record.get("tagline")),
        release_date=_non_empty_str(record.get("release_date")),
        runtime_minutes=_int(record.get("runtime")),
        homepage=_non_empty_str(record.get("homepage")),
        poster_path=_str(record.get("poster_path")),
        backdrop_path=_str(record.get("backdrop_path")),
        official_rating=resolve_official_rating(rating_entries_from_record(record), language),
        community_rating=_float(record.get("vote_average")),
        vote_count=_int(record.get("vote_count")),
        popularity=_float(record.get("popularity")),
        genres=_names(_mappings(record.get("genres"))),
        keywords=_map_keywords(record),
        production_companies=_map_companies(record),
        images=aggregate_record_images(record.get("images"), language) or (),
        people=_map_people(record),
        trailers=_map_trailers(record),
        belongs_to_collection=collection,
        similar_movies=_map_similar(record),
    )


# ============================================================================
# ORQUESTACIÓN (fetch + mapeo)
# ============================================================================


class MetadataNormalizer:
    def __init__(self, provider: MovieMetadataProvider, *, default_language: str = DEFAULT_LANGUAGE) -> None:
        self._provider = provider
        self._default_language = resolve_language(default_language)

    def normalize(
        self,
        movie_id: int,
        language: str | None = None,
        *,
        cancel: CancellationToken | None = None,
    ) -> NormalizedMovie:
        if movie_id <= 0:
            raise InvalidInput("Valid TMDb ID (movieId) is required.")

        lang = resolve_language(language, default=self._default_language)
        check_cancelled(cancel)

        record = self._provider.fetch_movie(movie_id, lang, cancel=cancel)
        if record is None:
            _logger.info(f"Movie with TMDb ID {movie_id} not found.")
            raise NotFound(f"Movie with TMDb ID {movie_id} not found.")

        return self.normalize_record(record, lang, cancel=cancel)

    def normalize_record(
        self,
        record: Mapping[str, object],
        language: str | None = None,
        *,
        cancel: CancellationToken | None = None,
    ) -> NormalizedMovie:
        lang = resolve_language(language, default=self._default_language)
        if not isinstance(record, Mapping):
            _logger.error(f"TMDb movie record is not an object: {type(record).__name__}")
            raise Internal("TMDb movie record is not an object")

        collection = self._fetch_collection(record, lang, cancel=cancel)
        check_cancelled(cancel)

        try:
            return map_movie(record, lang, collection=collection)
        except MetadataServiceError:
            raise
        except Exception as exc:
            _logger.exception(f"Error mapping TMDb movie {record.get('id')!r}")
            raise Internal(f"Error mapping TMDb movie {record.get('id')!r}") from exc

    def _fetch_collection(
        self,
        record: Mapping[str, object],
        language: str,
        *,
        cancel: CancellationToken | None,
    ) -> CollectionRef | None:
        collection_id = declared_collection_id(record)
        if collection_id is None:
            return None

        check_cancelled(cancel)
        try:
            payload = self._provider.fetch_collection(collection_id, language, cancel=cancel)
        except RequestCancelled:
            raise
        except UpstreamUnavailable as exc:
            _logger.warning(f"Collection {collection_id} unavailable; continuing without it: {exc}")
            return None
        except Exception as exc:
            _logger.warning(f"Collection {collection_id} fetch failed; continuing without it: {exc!r}")
            return None

        if payload is None:
            _logger.debug_ctx("TMDB", f"Collection {collection_id} not found")
            return None

        try:
            return map_collection(payload, fallback_id=collection_id)
        except (AttributeError, TypeError) as exc:
            _logger.warning(f"Collection {collection_id} malformed; continuing without it: {exc!r}")
            return None
