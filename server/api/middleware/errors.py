# exception handlers (error_id)
from __future__ import annotations

import uuid
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from backend.errors import MetadataServiceError, RequestCancelled
from server.api.logging_config import configure_logging
from server.api.services import metrics
from server.api.settings import Settings


def _internal_error_payload(request: Request, error_id: str) -> dict[str, Any]:
    req_id = getattr(request.state, "request_id", None)
    payload: dict[str, Any] = {"detail": "Internal Server Error", "error_id": error_id}
    if isinstance(req_id, str) and req_id:
        payload["request_id"] = req_id
    return payload


def build_exception_handler(settings: Settings):
    logger = configure_logging(settings)

    async def handler(request: Request, exc: Exception) -> JSONResponse:
        error_id = uuid.uuid4().hex
        req_id = getattr(request.state, "request_id", None)

        logger.exception(
            "unhandled_exception",
            extra={"error_id": error_id, "request_id": req_id, "path": request.url.path},
        )
        metrics.inc("http_errors_5xx_total", 1)

        return JSONResponse(status_code=500, content=_internal_error_payload(request, error_id))

    return handler


def build_domain_exception_handler(settings: Settings):
    """
    Errores de dominio (backend.errors):

    - public (InvalidInput / NotFound) -> status propio + mensaje
    - RequestCancelled -> 499, log info (el cliente ya no escucha)
    - resto (UpstreamUnavailable / Internal) -> 500 genérico con error_id;
      el detalle solo va al log
    """
    logger = configure_logging(settings)

    async def handler(request: Request, exc: MetadataServiceError) -> JSONResponse:
        req_id = getattr(request.state, "request_id", None)

        if isinstance(exc, RequestCancelled):
            logger.info(
                "request_cancelled",
                extra={"request_id": req_id, "path": request.url.path, "reason": exc.message},
            )
            metrics.inc("http_requests_cancelled_total", 1)
            return JSONResponse(status_code=exc.status_code, content={"detail": "Client Closed Request"})

        if exc.public:
            return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

        error_id = uuid.uuid4().hex
        logger.exception(
            "domain_error",
            exc_info=exc,
            extra={
                "error_id": error_id,
                "request_id": req_id,
                "path": request.url.path,
                "error_type": type(exc).__name__,
            },
        )
        metrics.inc("http_errors_5xx_total", 1)
        return JSONResponse(status_code=500, content=_internal_error_payload(request, error_id))

    return handler
