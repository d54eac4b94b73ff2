from __future__ import annotations

"""
backend/rating_resolver.py

Resolución de la clasificación por edades oficial (certification) a partir de
las entradas por país de TMDb y del locale pedido.

Cadena de fallback (gana siempre la primera entrada en orden del proveedor):
  1) país del locale ("es-ES" -> "ES")
  2) "US" si el locale no tiene región, empieza por "en" o la región es "US"
  3) cualquier país con certification no vacía
  4) None

Nunca devuelve "": o None o una certification no vacía.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class RatingEntry:
    region: str
    certification: str = ""
    is_primary: bool = False


def region_from_locale(locale: str) -> str:
    """Subtag tras el último guion, en mayúsculas; "" si no hay guion."""
    if "-" not in (locale or ""):
        return ""
    return locale.rsplit("-", 1)[1].strip().upper()


def _certification(entry: RatingEntry) -> str:
    return (entry.certification or "").strip()


def _first_for_region(entries: Sequence[RatingEntry], region: str) -> str | None:
    for entry in entries:
        cert = _certification(entry)
        if cert and (entry.region or "").strip().upper() == region:
            return cert
    return None


def resolve_official_rating(entries: Iterable[RatingEntry], locale: str) -> str | None:
    items = list(entries)
    if not items:
        return None

    region = region_from_locale(locale)

    if region:
        found = _first_for_region(items, region)
        if found is not None:
            return found

    if not region or (locale or "").lower().startswith("en") or region == "US":
        found = _first_for_region(items, "US")
        if found is not None:
            return found

    for entry in items:
        cert = _certification(entry)
        if cert:
            return cert
    return None


# ============================================================================
# Extracción desde el payload TMDb
# ============================================================================


def _str_or_empty(value: object) -> str:
    return value if isinstance(value, str) else ""


def rating_entries_from_record(record: Mapping[str, object]) -> list[RatingEntry]:
    """
    Soporta los dos formatos de TMDb:

    - "releases": {"countries": [{"iso_3166_1", "certification", "primary"}]}
    - "release_dates": {"results": [{"iso_3166_1", "release_dates": [{"certification"}]}]}

    Si viene "releases" se usa solo ese (es lo que pide append_to_response).
    """
    out: list[RatingEntry] = []

    releases = record.get("releases")
    if isinstance(releases, Mapping):
        countries = releases.get("countries")
        if isinstance(countries, list):
            for c in countries:
                if not isinstance(c, Mapping):
                    continue
                out.append(
                    RatingEntry(
                        region=_str_or_empty(c.get("iso_3166_1")),
                        certification=_str_or_empty(c.get("certification")),
                        is_primary=bool(c.get("primary")),
                    )
                )
        return out

    release_dates = record.get("release_dates")
    if not isinstance(release_dates, Mapping):
        return out
    results = release_dates.get("results")
    if not isinstance(results, list):
        return out

    for r in results:
        if not isinstance(r, Mapping):
            continue
        region = _str_or_empty(r.get("iso_3166_1"))
        dates = r.get("release_dates")
        cert = ""
        if isinstance(dates, list):
            for d in dates:
                if isinstance(d, Mapping) and _str_or_empty(d.get("certification")).strip():
                    cert = _str_or_empty(d.get("certification"))
                    break
        out.append(RatingEntry(region=region, certification=cert))
    return out
