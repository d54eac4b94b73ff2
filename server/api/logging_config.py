# logger del API + fichero de log opcional por arranque
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from backend.logger import LOGGER_NAME as BACKEND_LOGGER_NAME
from server.api.settings import Settings, _env_bool, _env_str

API_LOGGER_NAME = "movie_metadata_api"

_FILE_HANDLER_TAG = "_movie_metadata_api_file_handler"
_FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_LOGGER_FILE_PATH_SENTINEL: object = object()
_LOGGER_FILE_PATH_CACHED: Path | None | object = _LOGGER_FILE_PATH_SENTINEL

SERVER_DIR = Path(__file__).resolve().parents[1]


@dataclass(frozen=True)
class LogFileOptions:
    """LOGGER_FILE_* (solo se leen si LOGGER_FILE_ENABLED=1)."""

    explicit_path: str
    directory: str
    prefix: str
    timestamp_format: str
    include_pid: bool

    @staticmethod
    def from_env() -> "LogFileOptions":
        return LogFileOptions(
            explicit_path=_env_str("LOGGER_FILE_PATH", "").strip(),
            directory=_env_str("LOGGER_FILE_DIR", "logs"),
            prefix=_sanitize_filename_component(_env_str("LOGGER_FILE_PREFIX", "run")) or "run",
            timestamp_format=_env_str("LOGGER_FILE_TIMESTAMP_FORMAT", "%Y-%m-%d_%H-%M-%S"),
            include_pid=_env_bool("LOGGER_FILE_INCLUDE_PID", True),
        )

    def target(self, *, base: Path) -> Path:
        if self.explicit_path:
            return _resolve_dir(self.explicit_path, base=base).resolve()

        ts = datetime.now().strftime(self.timestamp_format)
        pid_part = f"_{os.getpid()}" if self.include_pid else ""
        return (_resolve_dir(self.directory, base=base) / f"{self.prefix}_{ts}{pid_part}.log").resolve()


def _sanitize_filename_component(value: str) -> str:
    s = (value or "").strip()
    if not s:
        return ""
    out = [ch if (ch.isalnum() or ch in ("-", "_", ".")) else "_" for ch in s]
    return "".join(out).strip("._-")


def _resolve_dir(raw: str, *, base: Path) -> Path:
    p = Path(raw)
    return p if p.is_absolute() else (base / p)


def _build_logger_file_path() -> Path | None:
    """Ruta del fichero de log; se calcula una vez por proceso."""
    global _LOGGER_FILE_PATH_CACHED

    if _LOGGER_FILE_PATH_CACHED is not _LOGGER_FILE_PATH_SENTINEL:
        return None if _LOGGER_FILE_PATH_CACHED is None else _LOGGER_FILE_PATH_CACHED  # type: ignore[return-value]

    if not _env_bool("LOGGER_FILE_ENABLED", False):
        _LOGGER_FILE_PATH_CACHED = None
        return None

    _LOGGER_FILE_PATH_CACHED = LogFileOptions.from_env().target(base=SERVER_DIR)
    return _LOGGER_FILE_PATH_CACHED


def _our_file_handlers(root: logging.Logger) -> list[logging.Handler]:
    return [h for h in root.handlers if getattr(h, _FILE_HANDLER_TAG, False)]


def _has_our_file_handler(root: logging.Logger) -> bool:
    return bool(_our_file_handlers(root))


def _ensure_file_handler(root: logging.Logger, *, level: str) -> None:
    path = _build_logger_file_path()
    if path is None:
        return

    existing = _our_file_handlers(root)
    if existing:
        for handler in existing:
            handler.setLevel(level)
        return

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, mode="a", encoding="utf-8", delay=True)
    except OSError as exc:
        # sin fichero seguimos con los handlers de uvicorn
        logging.getLogger(API_LOGGER_NAME).warning("log file disabled (%s): %r", path, exc)
        return

    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT))
    setattr(handler, _FILE_HANDLER_TAG, True)
    root.addHandler(handler)


def configure_logging(settings: Settings) -> logging.Logger:
    """
    Configuración mínima:
    - Respetamos handlers/format de quien ejecute (uvicorn, gunicorn, etc.).
    - LOG_LEVEL aplica a root, al logger del API y al de backend/ (TMDb,
      normalizador, lookup) para que ambos niveles vayan a la par.
    """
    root = logging.getLogger()
    root.setLevel(settings.log_level)
    _ensure_file_handler(root, level=settings.log_level)

    logging.getLogger(BACKEND_LOGGER_NAME).setLevel(settings.log_level)

    logger = logging.getLogger(API_LOGGER_NAME)
    logger.setLevel(settings.log_level)
    return logger
