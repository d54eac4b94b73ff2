from __future__ import annotations

"""
backend/tmdb_language.py

Helpers de idioma para TMDb.

- normalize_language("en-us") -> "en-US" (TMDb exige la región en mayúsculas)
- image_languages_param("es-ES") -> "es-ES,es,null,en"
- adjust_image_language("en", "en-US") -> "en-US"

Módulo silencioso (sin logs) y sin config: funciones puras.
"""

from typing import Final

DEFAULT_LANGUAGE: Final[str] = "en-US"


def resolve_language(language: str | None, *, default: str = DEFAULT_LANGUAGE) -> str:
    """None/vacío -> `default` (o DEFAULT_LANGUAGE si también viene vacío); resto tal cual (strip)."""
    fallback = (default or "").strip() or DEFAULT_LANGUAGE
    if language is None:
        return fallback
    s = language.strip()
    return s or fallback


def normalize_language(language: str | None) -> str:
    if not language:
        return ""
    parts = language.split("-")
    if len(parts) == 2:
        return f"{parts[0]}-{parts[1].upper()}"
    return language


def image_languages_param(preferred_language: str | None) -> str:
    """
    Valor para `include_image_language`.

    TMDb solo entiende códigos de 2 letras en imágenes, así que para "xx-YY"
    mandamos ambos. "null" incluye imágenes sin texto y "en" se añade siempre
    como último recurso.
    """
    languages: list[str] = []
    lang = normalize_language(preferred_language)
    if lang:
        languages.append(lang)
        if len(lang) == 5:
            languages.append(lang[:2])

    languages.append("null")

    if lang.lower() != "en":
        languages.append("en")

    seen: set[str] = set()
    out: list[str] = []
    for code in languages:
        if code not in seen:
            seen.add(code)
            out.append(code)
    return ",".join(out)


def adjust_image_language(image_language: str | None, requested_language: str) -> str:
    """
    Si la imagen trae "en" y se pidió "en-US", devolvemos "en-US" para que el
    consumidor la trate como del idioma solicitado.

    Sin idioma (imagen "agnóstica") -> "" siempre, nunca el locale pedido.
    """
    if not image_language:
        return ""
    if (
        requested_language
        and len(requested_language) > 2
        and len(image_language) == 2
        and requested_language.lower().startswith(image_language.lower())
    ):
        return requested_language
    return image_language
