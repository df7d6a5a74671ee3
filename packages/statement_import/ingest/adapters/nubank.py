"""Adapter for Nubank account statements (card-issuer layout).

A ``dd MON yyyy`` marker sets the date context, ``Total de entradas`` /
``Total de saídas`` headers switch between income and expense sections, and
description lines accumulate until a bare value line (``1.234,56``) closes
the record::

    03 MAR 2025
    Total de entradas + 1.500,00
    Transferência recebida pelo Pix
    JOAO SILVA - •••.123.456-•• - BANCO XYZ
    1.500,00
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from ...config import ImportConfig
from ...locale_parsing import month_number, parse_amount
from ...models import ImportedTransaction, TransactionType
from ..fsm import LineStateMachine, ParserState, RecordBuffer
from ..utils import make_candidate

_DATE_RE = re.compile(r"(\d{2})\s(JAN|FEV|MAR|ABR|MAI|JUN|JUL|AGO|SET|OUT|NOV|DEZ)\s(\d{4})")
_VALUE_ONLY_RE = re.compile(r"^([\d.]*,\d{2})$")
_TOTAL_RE = re.compile(r"^\+\s|Total de")
_INCOME_HEADER = "total de entradas"
_EXPENSE_HEADERS = ("total de saídas", "total de saidas")


def extract_sender(description: str) -> str:
    if "pelo Pix" in description:
        return description.split("pelo Pix", 1)[1].strip().split(" - ")[0]
    if "Pagamento de fatura" in description:
        return "Fatura Nubank"
    return description


class _NubankMachine(LineStateMachine):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.current_date = ""
        self.section: TransactionType | None = None

    def _switch_section(self, lower: str) -> bool:
        if lower.startswith(_INCOME_HEADER):
            section: TransactionType = "income"
        elif lower.startswith(_EXPENSE_HEADERS):
            section = "expense"
        else:
            return False
        self.flush(partial=False)
        self.section = section
        return True

    def feed(self, line: str) -> None:
        m = _DATE_RE.search(line)
        if m:
            self.flush(partial=False)
            month = month_number(m.group(2))
            if month is not None:
                self.current_date = f"{m.group(1)}/{month:02d}/{m.group(3)}"
            # Some extractions keep the section header on the date line.
            self._switch_section(line[m.end() :].strip().lower())
            return

        if self._switch_section(line.lower()):
            return

        if _VALUE_ONLY_RE.match(line):
            if self.buffer is not None:
                self.buffer.value = line
                self.flush(partial=False)
            return

        if self.current_date and self.section and len(line) > 2 and not _TOTAL_RE.search(line):
            if self.buffer is None:
                self.buffer = RecordBuffer(date=self.current_date)
                self.state = ParserState.AWAITING_VALUE
            self.buffer.description.append(line)

    def build(self, buf: RecordBuffer, *, partial: bool) -> ImportedTransaction | None:
        # Description without a closing value line is header/footer noise,
        # including at end of input.
        description = buf.text
        if not buf.value or not description or self.section is None:
            return None
        amount = parse_amount(buf.value)
        if amount is not None and amount == 0:
            return None
        return make_candidate(
            date=buf.date,
            description=description,
            sender=extract_sender(description),
            amount=amount,
            type=self.section,
            mappings=self.mappings,
            config=self.config,
        )


def parse(
    text: str,
    mappings: Mapping[str, str] | None = None,
    *,
    config: ImportConfig | None = None,
) -> list[ImportedTransaction]:
    return _NubankMachine(mappings, config=config).run(text)
