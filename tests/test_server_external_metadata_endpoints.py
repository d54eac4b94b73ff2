import pytest

pytest.importorskip("httpx")

from fastapi.testclient import TestClient

from backend.metadata_normalizer import MetadataNormalizer
from server.api.app import create_app
import server.api.deps as deps


def _client(provider):
    app = create_app()
    app.dependency_overrides[deps.get_metadata_normalizer] = lambda: MetadataNormalizer(provider)
    return TestClient(app)


def test_movie_ok(fake_provider):
    res = _client(fake_provider).get("/ExternalMetadata/Movie", params={"movieId": 603, "language": "es-ES"})

    assert res.status_code == 200
    body = res.json()
    assert body["tmdbId"] == 603
    assert body["title"] == "The Matrix"
    assert body["belongsToCollection"]["id"] == 2344
    assert [t["key"] for t in body["trailers"]] == ["abc", "def"]
    assert fake_provider.calls[0] == ("movie", 603, "es-ES")
    assert res.headers.get("X-Request-ID")


def test_language_defaults_to_en_us(fake_provider):
    res = _client(fake_provider).get("/ExternalMetadata/Movie", params={"movieId": 603})

    assert res.status_code == 200
    assert res.json()["officialRating"] == "R"
    assert fake_provider.calls[0] == ("movie", 603, "en-US")


@pytest.mark.parametrize("movie_id", [0, -5])
def test_non_positive_movie_id_is_400(fake_provider, movie_id):
    res = _client(fake_provider).get("/ExternalMetadata/Movie", params={"movieId": movie_id})

    assert res.status_code == 400
    assert "movieId" in res.json()["detail"]
    assert fake_provider.calls == []


def test_missing_movie_id_is_422(fake_provider):
    res = _client(fake_provider).get("/ExternalMetadata/Movie")
    assert res.status_code == 422


def test_unknown_movie_is_404(fake_provider):
    res = _client(fake_provider).get("/ExternalMetadata/Movie", params={"movieId": 1})

    assert res.status_code == 404
    assert res.json()["detail"] == "Movie with TMDb ID 1 not found."


def test_upstream_failure_is_generic_500(fake_provider, unavailable_error):
    class DownProvider:
        def fetch_movie(self, movie_id, language, *, cancel=None):
            raise unavailable_error

        def fetch_collection(self, collection_id, language, *, cancel=None):
            raise AssertionError("not reached")

    res = _client(DownProvider()).get(
        "/ExternalMetadata/Movie", params={"movieId": 603}, headers={"X-Request-ID": "req-42"}
    )

    assert res.status_code == 500
    body = res.json()
    assert body["detail"] == "Internal Server Error"
    assert body["request_id"] == "req-42"
    assert body["error_id"]
    assert "TMDb" not in res.text


def test_collection_failure_still_returns_movie(fake_provider, unavailable_error):
    fake_provider.collection_error = unavailable_error

    res = _client(fake_provider).get("/ExternalMetadata/Movie", params={"movieId": 603})

    assert res.status_code == 200
    assert res.json()["belongsToCollection"] is None
