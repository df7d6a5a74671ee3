"""Category resolution and learning for imported transactions.

Resolution order for a candidate:

1. learned mapping keyed by ``"<sender>-<amount:.2f>"`` (specific),
2. learned mapping keyed by ``"<sender>"`` (generic),
3. the static keyword table, matched by containment against
   ``sender + description`` (first hit wins),
4. the fallback category.

Mappings are plain ``dict[str, str]`` snapshots. Nothing here mutates its
input; :func:`learn` returns an updated copy which the caller persists.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from decimal import Decimal
from typing import Protocol

DEFAULT_CATEGORY = "Outros"

# Ordered (keyword, category) pairs.
CATEGORY_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("uber", "Transporte"),
    ("99app", "Transporte"),
    ("posto", "Transporte"),
    ("shell", "Transporte"),
    ("ifood", "Alimentação"),
    ("zema", "Alimentação"),
    ("mercado", "Mercado"),
    ("atacad", "Mercado"),
    ("carrefour", "Mercado"),
    ("farmacia", "Saúde"),
    ("drogasil", "Saúde"),
    ("netflix", "Lazer"),
    ("amazon", "Casa"),
    ("shopee", "Casa"),
    ("magalu", "Casa"),
    ("vivo", "Casa"),
    ("claro", "Casa"),
    ("tim", "Casa"),
    ("google", "Serviços"),
)

SENDER_MAX_LEN = 40

_LONG_REFERENCE_RE = re.compile(r"[\d.\-/]{9,}")
_DAY_MONTH_RE = re.compile(r"\d{2}/\d{2}")
_BOILERPLATE_RE = re.compile(r"Docto\.")


def normalize_sender(raw: str | None) -> str:
    """Strip reference numbers, ``dd/mm`` fragments and boilerplate tokens.

    Case is preserved; lookups lower-case separately. The result is capped at
    40 characters.
    """

    if not raw:
        return ""
    s = _LONG_REFERENCE_RE.sub("", raw)
    s = _DAY_MONTH_RE.sub("", s)
    s = _BOILERPLATE_RE.sub("", s)
    s = " ".join(s.split())
    return s[:SENDER_MAX_LEN].strip()


def generic_key(sender: str) -> str:
    return sender.lower().strip()


def specific_key(sender: str, amount: Decimal | float) -> str:
    return f"{generic_key(sender)}-{abs(amount):.2f}"


def classify(
    sender: str,
    amount: Decimal | float | None,
    description: str,
    mappings: Mapping[str, str] | None = None,
    *,
    keywords: tuple[tuple[str, str], ...] = CATEGORY_KEYWORDS,
    fallback: str = DEFAULT_CATEGORY,
) -> str:
    """Return the best category for a transaction (see module docstring)."""

    clean = normalize_sender(sender)
    if clean and mappings:
        if amount is not None:
            hit = mappings.get(specific_key(clean, amount))
            if hit:
                return hit
        hit = mappings.get(generic_key(clean))
        if hit:
            return hit

    haystack = f"{clean} {description}".lower()
    for keyword, category in keywords:
        if keyword in haystack:
            return category
    return fallback


def learn(
    mappings: Mapping[str, str],
    sender: str | None,
    category: str | None,
    *,
    amount: Decimal | float | None = None,
) -> dict[str, str]:
    """Return ``mappings`` updated with ``sender -> category``.

    The generic key is always written. When ``amount`` is given the specific
    ``sender-amount`` key is written as well, which lets one merchant map to
    different categories by price. Re-learning an identical pair yields an
    equal mapping.
    """

    updated = dict(mappings)
    if not sender or not sender.strip() or not category:
        return updated
    updated[generic_key(sender)] = category
    if amount is not None:
        updated[specific_key(sender, amount)] = category
    return updated


class CategoryMappingStore(Protocol):
    """Read/learn interface the import core expects from its host."""

    def get(self) -> dict[str, str]: ...

    def learn(
        self, sender: str, category: str, *, amount: Decimal | float | None = None
    ) -> dict[str, str]: ...


class InMemoryCategoryStore:
    """Process-local :class:`CategoryMappingStore` (tests, embedding hosts)."""

    def __init__(self, mappings: Mapping[str, str] | None = None) -> None:
        self._mappings: dict[str, str] = dict(mappings or {})

    def get(self) -> dict[str, str]:
        return dict(self._mappings)

    def learn(
        self, sender: str, category: str, *, amount: Decimal | float | None = None
    ) -> dict[str, str]:
        self._mappings = learn(self._mappings, sender, category, amount=amount)
        return dict(self._mappings)


__all__ = [
    "CATEGORY_KEYWORDS",
    "DEFAULT_CATEGORY",
    "CategoryMappingStore",
    "InMemoryCategoryStore",
    "classify",
    "generic_key",
    "learn",
    "normalize_sender",
    "specific_key",
]
