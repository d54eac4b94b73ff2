from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable

import pytest

from backend.errors import UpstreamUnavailable

USER_ALL = uuid.UUID("11111111-1111-1111-1111-111111111111")
USER_KIDS = uuid.UUID("22222222-2222-2222-2222-222222222222")
USER_DISABLED = uuid.UUID("33333333-3333-3333-3333-333333333333")


_MOVIE_RECORD: dict[str, Any] = {
    "id": 603,
    "imdb_id": "tt0133093",
    "title": "The Matrix",
    "original_title": "The Matrix",
    "original_language": "en",
    "overview": "A hacker learns the truth.",
    "tagline": "Welcome to the Real World.",
    "release_date": "1999-03-30",
    "runtime": 136,
    "homepage": "",
    "poster_path": "/poster.jpg",
    "backdrop_path": "/backdrop.jpg",
    "vote_average": 8.2,
    "vote_count": 25000,
    "popularity": 80.5,
    "genres": [{"id": 28, "name": "Action"}, {"id": 878, "name": "Science Fiction"}],
    "keywords": {"keywords": [{"id": 1, "name": "simulation"}, {"id": 2, "name": "hacker"}]},
    "production_companies": [
        {"id": 79, "name": "Village Roadshow", "logo_path": "/vr.png", "origin_country": "US"},
    ],
    "belongs_to_collection": {"id": 2344, "name": "The Matrix Collection"},
    "releases": {
        "countries": [
            {"iso_3166_1": "FR", "certification": "U"},
            {"iso_3166_1": "US", "certification": "R", "primary": True},
        ]
    },
    "images": {
        "backdrops": [{"file_path": "/b1.jpg", "iso_639_1": None, "width": 1920, "height": 1080}],
        "logos": [],
        "posters": [{"file_path": "/p1.jpg", "iso_639_1": "en", "width": 500, "height": 750}],
    },
    "credits": {
        "cast": [{"id": 6384, "name": "Keanu Reeves", "character": "Neo", "profile_path": "/k.jpg"}],
        "crew": [
            {"id": 9339, "name": "Lilly Wachowski", "job": "Director", "department": "Directing"},
            {"id": 9340, "name": "Lana Wachowski", "job": "Screenplay", "department": "Writing"},
            {"id": 1, "name": "Joel Silver", "job": "Producer", "department": "Production"},
            {"id": 2, "name": "Some Gaffer", "job": "Gaffer", "department": "Lighting"},
        ],
    },
    "videos": {
        "results": [
            {"id": "v1", "key": "abc", "name": "Trailer", "site": "YouTube", "type": "Trailer", "size": 1080},
            {"id": "v2", "key": "def", "name": "Teaser", "site": "youtube", "type": "teaser", "size": 720},
            {"id": "v3", "key": "ghi", "name": "Clip", "site": "YouTube", "type": "Clip", "size": 1080},
            {"id": "v4", "key": "jkl", "name": "Vimeo", "site": "Vimeo", "type": "Trailer", "size": 1080},
        ]
    },
    "similar": {
        "results": [
            {"id": 604, "title": "The Matrix Reloaded", "poster_path": "/r.jpg", "release_date": "2003-05-15", "vote_average": 7.0},
        ]
    },
}

_COLLECTION: dict[str, Any] = {
    "id": 2344,
    "name": "The Matrix Collection",
    "poster_path": "/cp.jpg",
    "backdrop_path": "/cb.jpg",
}


@pytest.fixture()
def movie_record() -> dict[str, Any]:
    return copy.deepcopy(_MOVIE_RECORD)


@pytest.fixture()
def collection_payload() -> dict[str, Any]:
    return copy.deepcopy(_COLLECTION)


@dataclass
class FakeProvider:
    """Proveedor de metadata en memoria; registra las llamadas."""

    movies: dict[int, dict[str, Any]] = field(default_factory=dict)
    collections: dict[int, dict[str, Any]] = field(default_factory=dict)
    collection_error: Exception | None = None
    on_fetch_movie: Callable[[], None] | None = None
    calls: list[tuple[str, int, str]] = field(default_factory=list)

    def fetch_movie(self, movie_id, language, *, cancel=None):
        self.calls.append(("movie", movie_id, language))
        if self.on_fetch_movie is not None:
            self.on_fetch_movie()
        return self.movies.get(movie_id)

    def fetch_collection(self, collection_id, language, *, cancel=None):
        self.calls.append(("collection", collection_id, language))
        if self.collection_error is not None:
            raise self.collection_error
        return self.collections.get(collection_id)


@pytest.fixture()
def fake_provider(movie_record, collection_payload) -> FakeProvider:
    return FakeProvider(movies={603: movie_record}, collections={2344: collection_payload})


@pytest.fixture()
def unavailable_error() -> UpstreamUnavailable:
    return UpstreamUnavailable("TMDb collection request failed")


@pytest.fixture()
def library_snapshot() -> dict[str, Any]:
    return {
        "users": [
            {"id": str(USER_ALL), "name": "admin"},
            {
                "id": str(USER_KIDS),
                "name": "kids",
                "enabled_libraries": ["family"],
                "max_parental_rating": 7,
            },
            {"id": str(USER_DISABLED), "name": "old", "is_disabled": True},
            {"id": "not-a-uuid", "name": "broken"},
        ],
        "items": [
            {"id": "m1", "name": "The Matrix", "library_id": "movies", "parental_rating": 17, "provider_ids": {"Tmdb": "603", "Imdb": "tt0133093"}},
            {"id": "m2", "name": "Broken", "library_id": "movies", "provider_ids": ["not", "a", "map"]},
            {"id": "m3", "name": "Toy Story", "library_id": "family", "parental_rating": 0, "provider_ids": {"tmdb": "862"}},
            {"id": "m4", "name": "Unrated", "library_id": "family", "provider_ids": {"Tmdb": 123}},
            {"id": "m5", "name": "Up", "library_id": "family", "parental_rating": 7, "provider_ids": {"Tmdb": "14160"}},
        ],
    }
