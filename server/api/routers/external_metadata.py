# /ExternalMetadata/Movie
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query, Request

from backend.cancellation import CancellationToken
from backend.metadata_models import NormalizedMovie
from backend.metadata_normalizer import MetadataNormalizer
from server.api.cancellation import run_cancellable
from server.api.deps import get_metadata_normalizer, get_settings
from server.api.settings import Settings

router = APIRouter()


@router.get("/ExternalMetadata/Movie")
async def external_movie(
    request: Request,
    movie_id: int = Query(..., alias="movieId", description="TMDb movie id (> 0)"),
    language: str | None = Query(None, description="Locale, p.ej. es-ES (por defecto TMDB_DEFAULT_LANGUAGE)"),
    normalizer: MetadataNormalizer = Depends(get_metadata_normalizer),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    def _work(token: CancellationToken) -> NormalizedMovie:
        return normalizer.normalize(movie_id, language, cancel=token)

    movie = await run_cancellable(request, _work, poll_interval_s=settings.disconnect_poll_interval_s)
    return movie.to_dict()
