"""Fingerprint-based duplicate detection against already stored records.

A fingerprint is a heuristic similarity key, not a hash:

``"<dd/mm>|<abs amount, 2 decimals>|<first 15 alnum chars of label>"``

The year is left out on purpose so that re-importing a statement that spans
a year boundary still matches. Collisions between unrelated transactions are
accepted; flags only inform the reviewer and never remove candidates.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Iterable
from decimal import Decimal

from .locale_parsing import parse_date
from .models import Debt, ImportedTransaction, Transaction

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")
_LABEL_PREFIX_LEN = 15


def _day_month(date_text: str) -> str:
    d = parse_date(date_text)
    if d is None:
        return (date_text or "").strip()[:5]
    return f"{d.day:02d}/{d.month:02d}"


def make_fingerprint(date_text: str, amount: Decimal | float | None, label: str) -> str:
    magnitude = abs(Decimal(str(amount))) if amount is not None else Decimal(0)
    key = _NON_ALNUM_RE.sub("", (label or "").lower())[:_LABEL_PREFIX_LEN]
    return f"{_day_month(date_text)}|{magnitude:.2f}|{key}"


def fingerprint(tx: ImportedTransaction) -> str:
    """Fingerprint of a candidate (label is sender, else description)."""

    return make_fingerprint(tx.date, tx.amount, tx.label)


def build_existing_set(
    transactions: Iterable[Transaction], debts: Iterable[Debt]
) -> frozenset[str]:
    """Fingerprint every stored income transaction and every debt."""

    fps: set[str] = set()
    for t in transactions:
        if t.type == "income":
            fps.add(make_fingerprint(t.date, t.amount, t.description))
    for d in debts:
        fps.add(make_fingerprint(d.purchase_date or d.due_date, d.installment_amount, d.name))
    return frozenset(fps)


def mark_duplicates(
    candidates: Iterable[ImportedTransaction], existing: frozenset[str] | set[str]
) -> list[ImportedTransaction]:
    """Return the candidates with ``is_duplicate`` set from ``existing``.

    Order and length are preserved. Re-running over its own output yields the
    same flags.
    """

    out: list[ImportedTransaction] = []
    for c in candidates:
        flag = fingerprint(c) in existing
        out.append(c if c.is_duplicate == flag else dataclasses.replace(c, is_duplicate=flag))
    return out


__all__ = ["build_existing_set", "fingerprint", "make_fingerprint", "mark_duplicates"]
