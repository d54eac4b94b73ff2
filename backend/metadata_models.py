from __future__ import annotations

"""
backend/metadata_models.py

Value objects del contrato público de /ExternalMetadata/Movie.

- Inmutables (frozen) y construidos por request.
- Colecciones como tuplas: nunca None, como mucho vacías.
- to_dict() emite las claves en camelCase, que es lo que consumen los clientes.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from backend.role_classifier import PersonRole


class ImageType(str, Enum):
    BACKDROP = "Backdrop"
    LOGO = "Logo"
    POSTER = "Poster"


@dataclass(frozen=True)
class Image:
    file_path: str | None
    width: int
    height: int
    language: str
    vote_average: float
    vote_count: int
    image_type: ImageType

    def to_dict(self) -> dict[str, Any]:
        return {
            "filePath": self.file_path,
            "width": self.width,
            "height": self.height,
            "iso6391": self.language,
            "voteAverage": self.vote_average,
            "voteCount": self.vote_count,
            "imageType": self.image_type.value,
        }


@dataclass(frozen=True)
class Person:
    id: int | None
    name: str | None
    role: PersonRole
    character: str | None = None
    job: str | None = None
    department: str | None = None
    profile_path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "character": self.character,
            "job": self.job,
            "department": self.department,
            "profilePath": self.profile_path,
            "personType": self.role.value,
        }


@dataclass(frozen=True)
class ProductionCompany:
    id: int | None
    name: str | None
    logo_path: str | None
    origin_country: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "logoPath": self.logo_path,
            "originCountry": self.origin_country,
        }


@dataclass(frozen=True)
class Trailer:
    id: str | None
    key: str | None
    name: str | None
    site: str | None
    type: str | None
    size: int | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "key": self.key,
            "name": self.name,
            "site": self.site,
            "type": self.type,
            "size": self.size,
        }


@dataclass(frozen=True)
class CollectionRef:
    id: int
    name: str | None
    poster_path: str | None
    backdrop_path: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "posterPath": self.poster_path,
            "backdropPath": self.backdrop_path,
        }


@dataclass(frozen=True)
class SimilarMovie:
    id: int | None
    title: str | None
    poster_path: str | None
    release_date: str | None
    community_rating: float | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "posterPath": self.poster_path,
            "releaseDate": self.release_date,
            "communityRating": self.community_rating,
        }


@dataclass(frozen=True)
class NormalizedMovie:
    tmdb_id: int | None
    imdb_id: str | None = None
    title: str | None = None
    original_title: str | None = None
    original_language: str | None = None
    overview: str | None = None
    tagline: str | None = None
    release_date: str | None = None
    runtime_minutes: int | None = None
    homepage: str | None = None
    poster_path: str | None = None
    backdrop_path: str | None = None
    official_rating: str | None = None
    community_rating: float | None = None
    vote_count: int | None = None
    popularity: float | None = None
    genres: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()
    production_companies: tuple[ProductionCompany, ...] = ()
    images: tuple[Image, ...] = ()
    people: tuple[Person, ...] = ()
    trailers: tuple[Trailer, ...] = ()
    belongs_to_collection: CollectionRef | None = None
    similar_movies: tuple[SimilarMovie, ...] = ()

    @property
    def cast(self) -> tuple[Person, ...]:
        return tuple(p for p in self.people if p.role is PersonRole.ACTOR)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tmdbId": self.tmdb_id,
            "imdbId": self.imdb_id,
            "title": self.title,
            "originalTitle": self.original_title,
            "originalLanguage": self.original_language,
            "overview": self.overview,
            "tagline": self.tagline,
            "releaseDate": self.release_date,
            "runtimeMinutes": self.runtime_minutes,
            "homepage": self.homepage,
            "posterPath": self.poster_path,
            "backdropPath": self.backdrop_path,
            "officialRating": self.official_rating,
            "communityRating": self.community_rating,
            "voteCount": self.vote_count,
            "popularity": self.popularity,
            "genres": list(self.genres),
            "keywords": list(self.keywords),
            "productionCompanies": [c.to_dict() for c in self.production_companies],
            "images": [i.to_dict() for i in self.images],
            "people": [p.to_dict() for p in self.people],
            "trailers": [t.to_dict() for t in self.trailers],
            "belongsToCollection": (
                self.belongs_to_collection.to_dict() if self.belongs_to_collection else None
            ),
            "similarMovies": [s.to_dict() for s in self.similar_movies],
        }
