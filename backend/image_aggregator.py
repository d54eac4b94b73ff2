from __future__ import annotations

"""
backend/image_aggregator.py

Une backdrops + logos + posters de TMDb en una única secuencia.

- Orden fijo por tipo (backdrops, logos, posters) y orden interno del proveedor.
- Sin reordenar ni deduplicar.
- Idioma de cada imagen ajustado con adjust_image_language().
- Si no queda ninguna imagen -> None (no tupla vacía).
"""

from collections.abc import Iterable, Mapping

from backend.metadata_models import Image, ImageType
from backend.tmdb_language import adjust_image_language


def _int_or_zero(value: object) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    return 0


def _float_or_zero(value: object) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    return 0.0


def _map_image(raw: Mapping[str, object], image_type: ImageType, requested_language: str) -> Image:
    lang = raw.get("iso_639_1")
    file_path = raw.get("file_path")
    return Image(
        file_path=file_path if isinstance(file_path, str) else None,
        width=_int_or_zero(raw.get("width")),
        height=_int_or_zero(raw.get("height")),
        language=adjust_image_language(lang if isinstance(lang, str) else None, requested_language),
        vote_average=_float_or_zero(raw.get("vote_average")),
        vote_count=_int_or_zero(raw.get("vote_count")),
        image_type=image_type,
    )


def aggregate_images(
    backdrops: Iterable[object] | None,
    logos: Iterable[object] | None,
    posters: Iterable[object] | None,
    requested_language: str,
) -> tuple[Image, ...] | None:
    groups: tuple[tuple[Iterable[object] | None, ImageType], ...] = (
        (backdrops, ImageType.BACKDROP),
        (logos, ImageType.LOGO),
        (posters, ImageType.POSTER),
    )

    out: list[Image] = []
    for raw_images, image_type in groups:
        if not raw_images:
            continue
        for raw in raw_images:
            if isinstance(raw, Mapping):
                out.append(_map_image(raw, image_type, requested_language))

    return tuple(out) if out else None


def aggregate_record_images(images: object, requested_language: str) -> tuple[Image, ...] | None:
    """Atajo para el bloque "images" de /movie/{id} (puede faltar)."""
    if not isinstance(images, Mapping):
        return None

    def _list(key: str) -> list[object] | None:
        v = images.get(key)
        return v if isinstance(v, list) else None

    return aggregate_images(_list("backdrops"), _list("logos"), _list("posters"), requested_language)
