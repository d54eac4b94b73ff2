from __future__ import annotations

from server.api.caching.file_cache import FileCache

__all__ = ["FileCache"]
