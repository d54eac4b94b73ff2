"""
backend/errors.py

Taxonomía de errores del servicio.

- InvalidInput / NotFound: se devuelven tal cual al cliente (400 / 404).
- UpstreamUnavailable / Internal: se capturan en el borde HTTP, se loguean con
  detalle completo y el cliente solo recibe un 500 genérico.
- RequestCancelled: el cliente abandonó la request; nunca es Internal.
"""

from __future__ import annotations


class MetadataServiceError(Exception):
    """Base de todos los errores de dominio."""

    status_code: int = 500
    public: bool = False

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class InvalidInput(MetadataServiceError):
    status_code = 400
    public = True


class NotFound(MetadataServiceError):
    status_code = 404
    public = True


class UpstreamUnavailable(MetadataServiceError):
    """Fallo transitorio alcanzando al proveedor de metadata (TMDb)."""


class Internal(MetadataServiceError):
    """Fallo inesperado durante el mapeo/agregación."""


class RequestCancelled(MetadataServiceError):
    # 499: convención nginx "client closed request"
    status_code = 499
