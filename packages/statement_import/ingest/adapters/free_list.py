"""Adapter for hand-typed lists: one record per line.

A line looks like ``20/12/2025 Supermercado  150,00`` or
``Farmácia R$ 32,90 - 05/01``. The date token is optional; when it leads the
line the year may be omitted (current year). Amounts prefixed with ``R$``
win over bare numbers; otherwise the last number on the line is taken.
Everything left over, minus currency words and edge punctuation, is the
description. Lists carry no direction signal, so every record is an expense.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from ...config import ImportConfig
from ...locale_parsing import normalize_date_text, parse_amount
from ...models import ImportedTransaction
from ..utils import clean_text, make_candidate, normalize_newlines

FALLBACK_DESCRIPTION = "Item importado"

_LEADING_DATE_RE = re.compile(r"^(\d{1,2}[/-]\d{1,2}(?:[/-]\d{2,4})?)(?![\d/-])")
_ANY_DATE_RE = re.compile(r"(?<![\d/-])(\d{1,2}[/-]\d{1,2}[/-]\d{2,4})(?![\d/-])")
_CURRENCY_AMOUNT_RE = re.compile(r"-?\s?R\$\s?-?\s?\d(?:[\d.,]*\d)?")
_PLAIN_NUMBER_RE = re.compile(r"(?<![\w/])-?\d+(?:[.,]\d+)*(?![\w/])")
_CURRENCY_WORDS_RE = re.compile(r"R\$|\breais\b|\bBRL\b", re.IGNORECASE)
_EDGE_PUNCT = " \t-–—:;,.|*"


def _take_date(line: str, default_year: int) -> tuple[str, str]:
    """Return ``(date_text, rest)``; ``date_text`` is ``""`` when absent."""

    m = _LEADING_DATE_RE.match(line)
    if m:
        resolved = normalize_date_text(m.group(1), default_year=default_year)
        if resolved:
            return resolved, line[m.end() :]
    m = _ANY_DATE_RE.search(line)
    if m:
        resolved = normalize_date_text(m.group(1))
        if resolved:
            return resolved, line[: m.start()] + " " + line[m.end() :]
    return "", line


def _take_amount(rest: str) -> tuple[str, str] | None:
    matches = list(_CURRENCY_AMOUNT_RE.finditer(rest))
    if matches:
        m = matches[0]
    else:
        matches = list(_PLAIN_NUMBER_RE.finditer(rest))
        if not matches:
            return None
        m = matches[-1]
    return m.group(0), rest[: m.start()] + " " + rest[m.end() :]


def clean_description(text: str) -> str:
    s = clean_text(_CURRENCY_WORDS_RE.sub(" ", text)).strip(_EDGE_PUNCT)
    return s if len(s) >= 2 else FALLBACK_DESCRIPTION


def parse(
    text: str,
    mappings: Mapping[str, str] | None = None,
    *,
    config: ImportConfig | None = None,
) -> list[ImportedTransaction]:
    cfg = config or ImportConfig()
    results: list[ImportedTransaction] = []

    for raw_line in normalize_newlines(text).split("\n"):
        line = raw_line.strip()
        if len(line) < 5:
            continue

        date_text, rest = _take_date(line, cfg.today.year)
        taken = _take_amount(rest)
        if taken is None:
            continue
        amount_text, rest = taken
        amount = parse_amount(amount_text)
        if amount is None or amount == 0:
            continue

        description = clean_description(rest)
        results.append(
            make_candidate(
                date=date_text,
                description=description,
                sender=description,
                amount=amount,
                type="expense",
                mappings=mappings,
                config=cfg,
            )
        )
    return results
