"""Adapter for Bradesco checking-account statements (statement-table layout).

The statement is a table of ``Data | Histórico | Docto. | Crédito | Débito |
Saldo``. Extracted text prints the date only on the first row of each day,
so the text is cut into chunks at every ``dd/mm/yyyy`` and each chunk is
split into cells on runs of two or more spaces (or line breaks). A row is
closed by two consecutive money cells: the transaction value followed by the
running balance. A lone money cell (e.g. ``SALDO ANTERIOR``) closes nothing
and resets the pending description.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping

from ...config import ImportConfig
from ...locale_parsing import parse_amount
from ...models import ImportedTransaction
from ..utils import clean_text, make_candidate, normalize_newlines

_CHUNK_SPLIT_RE = re.compile(r"(?=\d{2}/\d{2}/\d{4})")
_CHUNK_DATE_RE = re.compile(r"^(\d{2}/\d{2}/\d{4})")
_CELL_SPLIT_RE = re.compile(r"\s{2,}|\t")
_MONEY_CELL_RE = re.compile(r"^-?[\d.]*\d,\d{2}-?$")
_NUMERIC_CELL_RE = re.compile(r"^[\d.,]+$")
_NON_TRANSACTION_RE = re.compile(r"^(SALDO ANTERIOR|Total|COD\. LANC\.)", re.IGNORECASE)
_CREDIT_RE = re.compile(r"crédito|credito|rem:|transf saldo|dep", re.IGNORECASE)

# Applied in order, first occurrence only.
_SENDER_BOILERPLATE: tuple[re.Pattern[str], ...] = (
    re.compile(r"REM:|DES:", re.IGNORECASE),
    re.compile(r"PIX QR CODE ESTATICO|PIX QR CODE DINAMICO", re.IGNORECASE),
    re.compile(r"TRANSFERENCIA PIX", re.IGNORECASE),
    re.compile(r"\d{2}/\d{2}"),
    re.compile(r"\s+\d{6,}\s*"),
)


def extract_sender(description: str) -> str:
    s = description
    for pattern in _SENDER_BOILERPLATE:
        s = pattern.sub(" ", s, count=1)
    return clean_text(s)


def _cells(content: str) -> list[str]:
    return [
        cell.strip()
        for line in content.split("\n")
        for cell in _CELL_SPLIT_RE.split(line)
        if cell.strip()
    ]


def _rows(cells: list[str]) -> Iterator[tuple[list[str], str]]:
    """Yield ``(description_cells, value)`` for each value/balance pair."""

    pending: list[str] = []
    i = 0
    while i < len(cells):
        cell = cells[i]
        if _MONEY_CELL_RE.match(cell):
            if i + 1 < len(cells) and _MONEY_CELL_RE.match(cells[i + 1]):
                yield pending, cell
                i += 2
            else:
                i += 1
            pending = []
            continue
        pending.append(cell)
        i += 1


def parse(
    text: str,
    mappings: Mapping[str, str] | None = None,
    *,
    config: ImportConfig | None = None,
) -> list[ImportedTransaction]:
    cfg = config or ImportConfig()
    results: list[ImportedTransaction] = []

    for chunk in _CHUNK_SPLIT_RE.split(normalize_newlines(text)):
        chunk = chunk.strip()
        if len(chunk) < 10:
            continue
        m = _CHUNK_DATE_RE.match(chunk)
        if not m:
            continue
        current_date = m.group(1)

        for desc_cells, value in _rows(_cells(chunk[len(current_date) :])):
            # Numeric-only cells are document numbers (Docto. column).
            while desc_cells and _NUMERIC_CELL_RE.match(desc_cells[0]):
                desc_cells = desc_cells[1:]
            while desc_cells and _NUMERIC_CELL_RE.match(desc_cells[-1]):
                desc_cells = desc_cells[:-1]
            description = clean_text(" ".join(desc_cells))
            if len(description) < 4 or _NON_TRANSACTION_RE.match(description):
                continue

            amount = parse_amount(value)
            if amount is None or amount == 0:
                continue

            results.append(
                make_candidate(
                    date=current_date,
                    description=description,
                    sender=extract_sender(description),
                    amount=amount,
                    type="income" if _CREDIT_RE.search(description) else "expense",
                    mappings=mappings,
                    config=cfg,
                )
            )
    return results
