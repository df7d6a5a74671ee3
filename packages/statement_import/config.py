"""Explicit configuration passed into parsers, the classifier and the importer.

Nothing in the import core reads ambient state; callers build one
:class:`ImportConfig` (usually from the stored settings snapshot) and pass it
down with the category mappings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from .categories import CATEGORY_KEYWORDS, DEFAULT_CATEGORY
from .models import SALARY_CYCLE, Cycle, UserSettings

# Display length for candidate descriptions.
DESCRIPTION_MAX_LEN = 30


@dataclass(frozen=True, slots=True)
class ImportConfig:
    fallback_category: str = DEFAULT_CATEGORY
    keywords: tuple[tuple[str, str], ...] = CATEGORY_KEYWORDS
    settings: UserSettings = field(default_factory=UserSettings)
    default_cycle: Cycle = SALARY_CYCLE
    today: date = field(default_factory=date.today)
    description_max_len: int = DESCRIPTION_MAX_LEN


__all__ = ["DESCRIPTION_MAX_LEN", "ImportConfig"]
