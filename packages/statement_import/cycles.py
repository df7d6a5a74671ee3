"""Pay-cycle assignment.

A month has two pay days: the salary day and, optionally, an advance day.
Each transaction or debt belongs to the cycle whose pay day is nearest to its
day of month. Ties go to the salary cycle.
"""

from __future__ import annotations

from .locale_parsing import parse_date
from .models import ADVANCE_CYCLE, SALARY_CYCLE, Cycle, UserSettings


def assign_cycle(day: int, settings: UserSettings) -> Cycle:
    if not settings.has_advance:
        return SALARY_CYCLE
    dist_salary = abs(day - settings.salary_day)
    dist_advance = abs(day - settings.advance_day)
    return ADVANCE_CYCLE if dist_advance < dist_salary else SALARY_CYCLE


def cycle_for_date(date_text: str, settings: UserSettings, *, default: Cycle = SALARY_CYCLE) -> Cycle:
    """Cycle for a ``dd/mm/yyyy`` date string; ``default`` when unresolvable."""

    d = parse_date(date_text)
    if d is None:
        return default
    return assign_cycle(d.day, settings)


__all__ = ["assign_cycle", "cycle_for_date"]
