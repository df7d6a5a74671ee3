"""Helpers shared by every provider adapter.

The central piece is :func:`make_candidate`, which turns the raw fields an
adapter extracted (date text, description, sender hint, amount, direction)
into a normalized :class:`~statement_import.models.ImportedTransaction`:
sender cleaned, category resolved, installments detected, provisional cycle
assigned and ``needs_review`` set.
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Mapping
from decimal import Decimal

from ..categories import SENDER_MAX_LEN, classify, normalize_sender
from ..config import ImportConfig
from ..cycles import cycle_for_date
from ..locale_parsing import normalize_date_text
from ..models import ImportedTransaction, Installments, TransactionType

# A bare "(dd/mm)" is a date, so the marker needs a "parc" prefix.
_INSTALLMENT_RE = re.compile(
    r"\bparc(?:ela)?\.?\s*\(?(\d{1,2})\s*(?:/|de)\s*(\d{1,2})\b\)?", re.IGNORECASE
)


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def clean_text(value: str | None) -> str:
    """Collapse internal whitespace (including newlines) and strip."""

    if not value:
        return ""
    return " ".join(value.split())


def new_candidate_id() -> str:
    return uuid.uuid4().hex[:12]


def detect_installments(text: str) -> Installments | None:
    """Find an installment marker such as ``Parcela 2/10`` or ``Parc. (3/12)``."""

    for m in _INSTALLMENT_RE.finditer(text):
        current, total = int(m.group(1)), int(m.group(2))
        if total >= 1 and 1 <= current <= total:
            return Installments(current=current, total=total)
    return None


def make_candidate(
    *,
    date: str,
    description: str,
    sender: str,
    amount: Decimal | None,
    type: TransactionType,
    mappings: Mapping[str, str] | None,
    config: ImportConfig,
) -> ImportedTransaction:
    full_description = clean_text(description)
    clean_sender = normalize_sender(sender) or full_description[:SENDER_MAX_LEN].strip()
    magnitude = abs(amount) if amount is not None else None
    date_text = normalize_date_text(date)

    category = classify(
        sender,
        magnitude,
        full_description,
        mappings,
        keywords=config.keywords,
        fallback=config.fallback_category,
    )

    return ImportedTransaction(
        id=new_candidate_id(),
        date=date_text,
        description=full_description[: config.description_max_len].strip(),
        sender=clean_sender,
        amount=magnitude,
        type=type,
        category=category,
        cycle=cycle_for_date(date_text, config.settings, default=config.default_cycle),
        installments=detect_installments(full_description),
    )


__all__ = [
    "clean_text",
    "detect_installments",
    "make_candidate",
    "new_candidate_id",
    "normalize_newlines",
]
