import pytest

from backend.cancellation import CancellationToken
from backend.errors import Internal, InvalidInput, NotFound, RequestCancelled
from backend.metadata_models import CollectionRef, ImageType
from backend.metadata_normalizer import MetadataNormalizer, declared_collection_id, map_movie
from backend.role_classifier import PersonRole


def test_normalize_full_record(fake_provider):
    movie = MetadataNormalizer(fake_provider).normalize(603, "en-US")

    assert movie.tmdb_id == 603
    assert movie.imdb_id == "tt0133093"
    assert movie.title == "The Matrix"
    assert movie.runtime_minutes == 136
    assert movie.homepage is None
    assert movie.official_rating == "R"
    assert movie.community_rating == 8.2
    assert movie.genres == ("Action", "Science Fiction")
    assert movie.keywords == ("simulation", "hacker")
    assert [c.name for c in movie.production_companies] == ["Village Roadshow"]

    assert [(i.file_path, i.image_type, i.language) for i in movie.images] == [
        ("/b1.jpg", ImageType.BACKDROP, ""),
        ("/p1.jpg", ImageType.POSTER, "en-US"),
    ]

    assert [(p.name, p.role) for p in movie.people] == [
        ("Keanu Reeves", PersonRole.ACTOR),
        ("Lilly Wachowski", PersonRole.DIRECTOR),
        ("Lana Wachowski", PersonRole.WRITER),
        ("Joel Silver", PersonRole.PRODUCER),
        ("Some Gaffer", PersonRole.UNKNOWN),
    ]
    assert movie.cast[0].character == "Neo"

    assert [t.key for t in movie.trailers] == ["abc", "def"]

    assert movie.belongs_to_collection == CollectionRef(
        id=2344, name="The Matrix Collection", poster_path="/cp.jpg", backdrop_path="/cb.jpg"
    )
    assert [(s.id, s.title, s.community_rating) for s in movie.similar_movies] == [
        (604, "The Matrix Reloaded", 7.0)
    ]

    assert fake_provider.calls == [("movie", 603, "en-US"), ("collection", 2344, "en-US")]


def test_language_defaults_to_en_us(fake_provider):
    MetadataNormalizer(fake_provider).normalize(603, None)
    assert fake_provider.calls[0] == ("movie", 603, "en-US")


def test_rating_follows_requested_locale(fake_provider):
    movie = MetadataNormalizer(fake_provider).normalize(603, "fr-FR")
    assert movie.official_rating == "U"


def test_invalid_movie_id(fake_provider):
    with pytest.raises(InvalidInput):
        MetadataNormalizer(fake_provider).normalize(0, "en-US")
    assert fake_provider.calls == []


def test_missing_record_is_not_found(fake_provider):
    with pytest.raises(NotFound):
        MetadataNormalizer(fake_provider).normalize(999, "en-US")


def test_no_collection_declared_means_single_fetch(fake_provider, movie_record):
    movie_record.pop("belongs_to_collection")
    fake_provider.movies[603] = movie_record

    movie = MetadataNormalizer(fake_provider).normalize(603, "en-US")

    assert movie.belongs_to_collection is None
    assert [c[0] for c in fake_provider.calls] == ["movie"]


def test_collection_unavailable_is_not_fatal(fake_provider, unavailable_error):
    fake_provider.collection_error = unavailable_error

    movie = MetadataNormalizer(fake_provider).normalize(603, "en-US")

    assert movie.belongs_to_collection is None
    assert movie.title == "The Matrix"


def test_collection_unexpected_error_is_not_fatal(fake_provider):
    fake_provider.collection_error = ConnectionError("socket reset")

    movie = MetadataNormalizer(fake_provider).normalize(603, "en-US")

    assert movie.belongs_to_collection is None
    assert movie.title == "The Matrix"


def test_collection_not_found_is_not_fatal(fake_provider):
    fake_provider.collections.clear()
    movie = MetadataNormalizer(fake_provider).normalize(603, "en-US")
    assert movie.belongs_to_collection is None


def test_collection_cancellation_propagates(fake_provider):
    fake_provider.collection_error = RequestCancelled("client disconnected")
    with pytest.raises(RequestCancelled):
        MetadataNormalizer(fake_provider).normalize(603, "en-US")


def test_cancelled_before_fetch(fake_provider):
    token = CancellationToken()
    token.cancel("gone")

    with pytest.raises(RequestCancelled):
        MetadataNormalizer(fake_provider).normalize(603, "en-US", cancel=token)
    assert fake_provider.calls == []


def test_cancelled_after_movie_fetch_skips_collection(fake_provider):
    token = CancellationToken()
    fake_provider.on_fetch_movie = lambda: token.cancel("gone")

    with pytest.raises(RequestCancelled):
        MetadataNormalizer(fake_provider).normalize(603, "en-US", cancel=token)
    assert [c[0] for c in fake_provider.calls] == ["movie"]


def test_mapping_failure_becomes_internal(fake_provider, monkeypatch):
    import backend.metadata_normalizer as mod

    def _boom(*args, **kwargs):
        raise KeyError("unexpected shape")

    monkeypatch.setattr(mod, "map_movie", _boom)

    with pytest.raises(Internal):
        MetadataNormalizer(fake_provider).normalize(603, "en-US")


def test_minimal_record_maps_to_empty_collections():
    movie = map_movie({"id": 1}, "en-US")

    assert movie.tmdb_id == 1
    assert movie.title is None
    assert movie.official_rating is None
    assert movie.release_date is None
    assert movie.genres == ()
    assert movie.images == ()
    assert movie.people == ()
    assert movie.trailers == ()
    assert movie.similar_movies == ()
    assert movie.belongs_to_collection is None


def test_malformed_blocks_are_ignored():
    record = {
        "id": 1,
        "genres": "Action",
        "credits": {"cast": "nope", "crew": [None, {"name": "X", "job": "Director"}]},
        "videos": [],
        "similar": {"results": [{"id": 2, "release_date": ""}]},
    }
    movie = map_movie(record, "en-US")

    assert movie.genres == ()
    assert [(p.name, p.role) for p in movie.people] == [("X", PersonRole.DIRECTOR)]
    assert movie.trailers == ()
    assert movie.similar_movies[0].release_date is None


def test_map_movie_is_pure(movie_record):
    collection = CollectionRef(id=2344, name="C", poster_path=None, backdrop_path=None)

    first = map_movie(movie_record, "en-US", collection=collection)
    second = map_movie(movie_record, "en-US", collection=collection)

    assert first == second
    assert first.to_dict() == second.to_dict()


def test_normalize_is_deterministic_for_fixed_responses(fake_provider):
    normalizer = MetadataNormalizer(fake_provider)
    assert normalizer.normalize(603, "es-ES") == normalizer.normalize(603, "es-ES")


def test_declared_collection_id():
    assert declared_collection_id({"belongs_to_collection": {"id": 5}}) == 5
    assert declared_collection_id({"belongs_to_collection": None}) is None
    assert declared_collection_id({"belongs_to_collection": {"id": "5"}}) is None
    assert declared_collection_id({}) is None


def test_to_dict_uses_camel_case(fake_provider):
    payload = MetadataNormalizer(fake_provider).normalize(603, "en-US").to_dict()

    assert payload["tmdbId"] == 603
    assert payload["officialRating"] == "R"
    assert payload["images"][0]["imageType"] == "Backdrop"
    assert payload["people"][1]["personType"] == "Director"
    assert payload["belongsToCollection"]["posterPath"] == "/cp.jpg"
    assert payload["similarMovies"][0]["communityRating"] == 7.0


def test_non_mapping_record_becomes_internal(fake_provider):
    fake_provider.movies[603] = ["not", "a", "record"]

    with pytest.raises(Internal):
        MetadataNormalizer(fake_provider).normalize(603, "en-US")

    assert [c[0] for c in fake_provider.calls] == ["movie"]


def test_configured_default_language(fake_provider):
    normalizer = MetadataNormalizer(fake_provider, default_language="es-ES")

    normalizer.normalize(603)
    normalizer.normalize(603, "  ")
    normalizer.normalize(603, "fr-FR")

    movie_langs = [lang for kind, _, lang in fake_provider.calls if kind == "movie"]
    assert movie_langs == ["es-ES", "es-ES", "fr-FR"]


def test_internal_failures_are_logged_as_errors(fake_provider, monkeypatch):
    import backend.metadata_normalizer as mod

    logged = []
    monkeypatch.setattr(mod._logger, "exception", lambda msg, *a, **k: logged.append(("exception", msg)))
    monkeypatch.setattr(mod._logger, "error", lambda msg, *a, **k: logged.append(("error", msg)))

    def _boom(*args, **kwargs):
        raise KeyError("unexpected shape")

    monkeypatch.setattr(mod, "map_movie", _boom)
    with pytest.raises(Internal):
        MetadataNormalizer(fake_provider).normalize(603, "en-US")

    fake_provider.movies[604] = "not a record"
    with pytest.raises(Internal):
        MetadataNormalizer(fake_provider).normalize(604, "en-US")

    assert [kind for kind, _ in logged] == ["exception", "error"]
