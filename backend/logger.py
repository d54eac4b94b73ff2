from __future__ import annotations

"""
backend/logger.py

Logger central del backend (fachada sobre `logging`).

API estable
-----------
- debug / info / warning / error / exception
- debug_ctx(tag, msg) (debug contextual alineado con SILENT/DEBUG)

Política
--------
- SILENT_MODE=True: suprime debug/info/warning (salvo always=True). `error()` siempre emite.
- DEBUG_MODE=True: habilita `debug_ctx`.
- El logging nunca debe romper una request.

Notas técnicas
--------------
- No importamos `backend.config_base` directamente (evitamos circular imports).
  Leemos el módulo desde `sys.modules` si ya está importado.
- Inicialización idempotente.
- Respetamos handlers existentes (uvicorn/gunicorn): solo hacemos basicConfig
  si el root no tiene ninguno.
"""

import logging
import sys
from types import ModuleType, TracebackType
from typing import Final, Mapping, TypedDict

from typing_extensions import TypeAlias, Unpack

_ExcInfoTuple: TypeAlias = tuple[type[BaseException], BaseException, TracebackType | None]
ExcInfo: TypeAlias = bool | _ExcInfoTuple | BaseException | None


class LogKwargs(TypedDict, total=False):
    """Subconjunto útil de kwargs soportados por logging.Logger.*."""

    exc_info: ExcInfo
    stack_info: bool
    stacklevel: int
    extra: Mapping[str, object] | None


LOGGER_NAME: Final[str] = "movie_metadata"

_LOGGER: logging.Logger | None = None
_CONFIGURED: bool = False

_NOISY_LOGGERS: Final[tuple[str, ...]] = (
    "urllib3",
    "urllib3.connectionpool",
    "requests",
    "requests.packages.urllib3",
)


# ============================================================================
# FLAGS (sin importar backend.config_base directamente)
# ============================================================================


def _safe_get_cfg() -> ModuleType | None:
    mod = sys.modules.get("backend.config_base")
    return mod if isinstance(mod, ModuleType) else None


def _cfg_bool(name: str, default: bool = False) -> bool:
    cfg = _safe_get_cfg()
    if cfg is None:
        return default
    return bool(getattr(cfg, name, default))


def _cfg_str(name: str, default: str | None = None) -> str | None:
    cfg = _safe_get_cfg()
    if cfg is None:
        return default
    v = getattr(cfg, name, default)
    if v is None:
        return None
    s = str(v).strip()
    return s or default


def is_silent_mode() -> bool:
    return _cfg_bool("SILENT_MODE", False)


def is_debug_mode() -> bool:
    return _cfg_bool("DEBUG_MODE", False)


def _resolve_level_from_config() -> int:
    """
    Prioridad:
      1) LOG_LEVEL explícito
      2) DEBUG_MODE
      3) INFO
    """
    lvl = _cfg_str("LOG_LEVEL", None)
    if lvl:
        mapped = logging.getLevelName(lvl.strip().upper())
        if isinstance(mapped, int):
            return mapped

    if is_debug_mode():
        return logging.DEBUG
    return logging.INFO


def _configure_external_loggers() -> None:
    """urllib3/requests a WARNING salvo HTTP_DEBUG=True."""
    if _cfg_bool("HTTP_DEBUG", False):
        return
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _ensure_configured() -> logging.Logger:
    global _LOGGER, _CONFIGURED

    if _CONFIGURED and _LOGGER is not None:
        return _LOGGER

    level = _resolve_level_from_config()
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )

    _configure_external_loggers()

    _LOGGER = logging.getLogger(LOGGER_NAME)
    _LOGGER.setLevel(level)
    _CONFIGURED = True
    return _LOGGER


def get_logger() -> logging.Logger:
    """Devuelve el logger principal, asegurando inicialización."""
    return _ensure_configured()


def _should_log(*, always: bool = False) -> bool:
    if always:
        return True
    return not is_silent_mode()


# ============================================================================
# API PÚBLICA
# ============================================================================


def debug(msg: str, *args: object, always: bool = False, **kwargs: Unpack[LogKwargs]) -> None:
    if not _should_log(always=always):
        return
    _ensure_configured().debug(msg, *args, **kwargs)


def info(msg: str, *args: object, always: bool = False, **kwargs: Unpack[LogKwargs]) -> None:
    if not _should_log(always=always):
        return
    _ensure_configured().info(msg, *args, **kwargs)


def warning(msg: str, *args: object, always: bool = False, **kwargs: Unpack[LogKwargs]) -> None:
    if not _should_log(always=always):
        return
    _ensure_configured().warning(msg, *args, **kwargs)


def error(msg: str, *args: object, **kwargs: Unpack[LogKwargs]) -> None:
    """ERROR siempre se emite (ignora SILENT_MODE)."""
    _ensure_configured().error(msg, *args, **kwargs)


def exception(msg: str, *args: object, **kwargs: Unpack[LogKwargs]) -> None:
    """Como error(), con traceback de la excepción en curso."""
    _ensure_configured().exception(msg, *args, **kwargs)


def debug_ctx(tag: str, msg: object) -> None:
    """
    Debug contextual con tag.

    - DEBUG_MODE=False -> no-op
    - DEBUG_MODE=True  -> info("[TAG][DEBUG] ...")
    """
    if not is_debug_mode():
        return

    t = (tag or "DEBUG").strip().upper()
    info(f"[{t}][DEBUG] {msg}")
