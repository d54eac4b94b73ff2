from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response

from backend.library_store import JsonLibraryStore
from backend.tmdb_client import TmdbClient
from server.api import paths
from server.api.deps import get_library_store, get_tmdb_client
from server.api.services import metrics

router = APIRouter()


@router.get("/health")
def health() -> dict[str, Any]:
    return {"ok": True, "ts": datetime.now(timezone.utc).isoformat()}


@router.get("/ready")
def ready(
    store: JsonLibraryStore = Depends(get_library_store),
    tmdb: TmdbClient = Depends(get_tmdb_client),
) -> dict[str, Any]:
    """
    Readiness:
    - el snapshot de biblioteca existe y es un objeto JSON legible.
    - hay TMDB_API_KEY (sin ella /ExternalMetadata/Movie siempre da 500).
    """
    issues: dict[str, str] = {}
    library: dict[str, int] = {}

    p = paths.LIBRARY_SNAPSHOT_PATH
    if not p.exists():
        issues["library_snapshot"] = f"missing: {p}"
    else:
        try:
            library = store.snapshot_stats()
        except Exception as exc:
            issues["library_snapshot"] = f"unreadable: {p} ({exc!r})"

    if not tmdb.has_api_key:
        issues["tmdb_api_key"] = "missing: TMDB_API_KEY"

    if issues:
        raise HTTPException(status_code=503, detail={"ready": False, "issues": issues})

    return {"ready": True, "library": library, "ts": datetime.now(timezone.utc).isoformat()}


@router.get("/metrics")
def metrics_endpoint() -> Response:
    body = metrics.render_prometheus()
    return Response(content=body, media_type="text/plain; version=0.0.4")
