# /Library/ProviderLookup/Exists
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query

from backend.provider_lookup import ProviderIdentityResolver
from server.api.deps import get_provider_resolver

router = APIRouter()


# def (no async): el escaneo es bloqueante y FastAPI lo manda al threadpool
@router.get("/Library/ProviderLookup/Exists")
def provider_exists(
    provider: str = Query(..., min_length=1, description="Nombre del proveedor, p.ej. Tmdb"),
    external_id: str = Query(..., alias="id", min_length=1),
    user_id: uuid.UUID = Query(..., alias="userId"),
    resolver: ProviderIdentityResolver = Depends(get_provider_resolver),
) -> bool:
    return resolver.exists(provider, external_id, user_id)
