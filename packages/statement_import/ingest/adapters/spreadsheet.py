"""Adapter for spreadsheet exports already converted to a cell grid.

Expected columns: date, description, amount. The first row is a header.
Date cells may be spreadsheet day serials (numbers, or 5-digit strings) or
text dates; amount cells may be numbers or locale-formatted strings.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import TypeAlias

from ...config import ImportConfig
from ...locale_parsing import (
    format_date,
    normalize_date_text,
    parse_amount,
    spreadsheet_serial_to_datetime,
)
from ...models import ImportedTransaction
from ..utils import clean_text, make_candidate

Cell: TypeAlias = str | int | float | None
Grid: TypeAlias = Sequence[Sequence[Cell]]

_SERIAL_TEXT_RE = re.compile(r"^\d{5}$")


def _serial_date(serial: float) -> str:
    converted = spreadsheet_serial_to_datetime(serial)
    return format_date(converted.date()) if converted else ""


def resolve_date_cell(value: Cell) -> str:
    if isinstance(value, bool) or value is None:
        return ""
    if isinstance(value, (int, float)):
        return _serial_date(float(value))
    text = str(value).strip()
    if _SERIAL_TEXT_RE.match(text):
        return _serial_date(float(text))
    return normalize_date_text(text)



def resolve_amount_cell(value: Cell) -> Decimal | None:
    if isinstance(value, bool):
        return None
    return parse_amount(value)


def parse(
    grid: Grid,
    mappings: Mapping[str, str] | None = None,
    *,
    config: ImportConfig | None = None,
) -> list[ImportedTransaction]:
    cfg = config or ImportConfig()
    results: list[ImportedTransaction] = []

    for row in list(grid)[1:]:
        if len(row) < 3:
            continue
        date_cell, desc_cell, value_cell = row[0], row[1], row[2]
        description = clean_text(str(desc_cell)) if desc_cell is not None else ""
        if not description or value_cell in (None, ""):
            continue

        amount = resolve_amount_cell(value_cell)
        if amount is None or amount <= 0:
            continue

        results.append(
            make_candidate(
                date=resolve_date_cell(date_cell),
                description=description,
                sender=description,
                amount=amount,
                type="expense",
                mappings=mappings,
                config=cfg,
            )
        )
    return results
