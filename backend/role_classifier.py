from __future__ import annotations

"""
backend/role_classifier.py

Clasificación de un miembro del crew (job/department de TMDb) en un PersonRole.

Las reglas son datos: tupla ordenada de (predicado, rol), gana la primera que
encaja. Añadir un rol = añadir una regla.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Final


class PersonRole(str, Enum):
    ACTOR = "Actor"
    DIRECTOR = "Director"
    WRITER = "Writer"
    PRODUCER = "Producer"
    UNKNOWN = "Unknown"


# (job, department) ya en casefold
CrewPredicate = Callable[[str, str], bool]


@dataclass(frozen=True)
class RoleRule:
    role: PersonRole
    matches: CrewPredicate


CREW_ROLE_RULES: Final[tuple[RoleRule, ...]] = (
    RoleRule(PersonRole.DIRECTOR, lambda job, dept: job == "director"),
    RoleRule(PersonRole.WRITER, lambda job, dept: dept == "writing"),
    RoleRule(PersonRole.PRODUCER, lambda job, dept: dept == "production" and "producer" in job),
)


def classify_crew(
    job: str | None,
    department: str | None,
    *,
    rules: tuple[RoleRule, ...] = CREW_ROLE_RULES,
) -> PersonRole:
    j = (job or "").strip().casefold()
    d = (department or "").strip().casefold()
    for rule in rules:
        if rule.matches(j, d):
            return rule.role
    return PersonRole.UNKNOWN
