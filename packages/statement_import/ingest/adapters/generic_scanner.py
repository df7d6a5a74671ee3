"""Fallback line scanner for statements from unrecognized providers.

Recognizes several date shapes (``dd/mm/yy[yy]``, ``dd-mm-yyyy``, ``dd MON``,
``dd MON yyyy``, ``5 de março de 2025``) and a trailing value-only line
(``-R$ 1.234,56``). Lines between a date and a value are buffered as the
description; balance/total/footer lines are dropped wherever they appear.
Direction comes from description keywords, falling back to the value sign.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from ...config import ImportConfig
from ...locale_parsing import format_date, parse_amount, parse_date
from ...models import ImportedTransaction, TransactionType
from ..fsm import LineStateMachine, ParserState, RecordBuffer
from ..utils import make_candidate

_DATE_RE = re.compile(
    r"(\d{2}[/-]\d{2}[/-]\d{2,4})"
    r"|(\d{2}\s(?:JAN|FEV|MAR|ABR|MAI|JUN|JUL|AGO|SET|OUT|NOV|DEZ)(?:\s\d{4})?)"
    r"|(\d{1,2} de \w+ de \d{4})",
    re.IGNORECASE,
)
_VALUE_ONLY_RE = re.compile(r"^(-)?\s?(?:R\$\s)?([\d.,]+,\d{2})$")
_JUNK_RE = re.compile(
    r"saldo|total|lançamento|anterior|fatura|fale com a gente|sac:|ouvidoria:|cpf:"
    r"|agência:|conta:|data/hora|descrição das|movimentações|extrato gerado",
    re.IGNORECASE,
)
_INCOME_RE = re.compile(r"recebid|cr[ée]dito|entrada")
_EXPENSE_RE = re.compile(r"pagamento|enviad|d[ée]bito|saída|compra")


def infer_direction(description: str, *, negative: bool) -> TransactionType:
    lower = description.lower()
    if _INCOME_RE.search(lower):
        return "income"
    if _EXPENSE_RE.search(lower):
        return "expense"
    return "expense" if negative else "income"


class _GenericMachine(LineStateMachine):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.current_date = ""

    def _append(self, text: str) -> None:
        if self.buffer is None:
            self.buffer = RecordBuffer(date=self.current_date)
            self.state = ParserState.AWAITING_VALUE
        self.buffer.description.append(text)

    def feed(self, line: str) -> None:
        if len(line) < 2 or _JUNK_RE.search(line):
            return

        value_match = _VALUE_ONLY_RE.match(line)
        date_match = _DATE_RE.search(line)
        if date_match and not value_match:
            self.flush(partial=False)
            resolved = parse_date(date_match.group(0), default_year=self.config.today.year)
            self.current_date = format_date(resolved) if resolved else ""
            rest = line.replace(date_match.group(0), "", 1).strip()
            if len(rest) > 2:
                self._append(rest)
            return

        if value_match:
            if self.buffer is not None:
                self.buffer.value = line
                self.flush(partial=False)
            return

        self._append(line)

    def build(self, buf: RecordBuffer, *, partial: bool) -> ImportedTransaction | None:
        # No value line means no record, even at end of input; the free-list
        # parser picks up single-line "date description amount" text.
        description = buf.text
        m = _VALUE_ONLY_RE.match(buf.value)
        if m is None or not description:
            return None
        amount = parse_amount(m.group(2))
        if amount is not None and amount == 0:
            return None
        return make_candidate(
            date=buf.date,
            description=description,
            sender=description,
            amount=amount,
            type=infer_direction(description, negative=m.group(1) == "-"),
            mappings=self.mappings,
            config=self.config,
        )


def parse(
    text: str,
    mappings: Mapping[str, str] | None = None,
    *,
    config: ImportConfig | None = None,
) -> list[ImportedTransaction]:
    return _GenericMachine(mappings, config=config).run(text)
