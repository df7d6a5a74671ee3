"""Adapter for PicPay wallet statements.

Layout, one field per line: ``dd/mm/yyyy``, ``hh:mm:ss``, description
line(s), then ``- R$ 1.500,75`` (minus for outflows). A new date line closes
the previous record.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from ...config import ImportConfig
from ...locale_parsing import parse_amount
from ...models import ImportedTransaction
from ..fsm import LineStateMachine, ParserState, RecordBuffer
from ..utils import make_candidate

_DATE_RE = re.compile(r"^\d{2}/\d{2}/\d{4}$")
_TIME_RE = re.compile(r"^\d{2}:\d{2}:\d{2}$")
_VALUE_RE = re.compile(r"^-?\s?R\$\s?[\d.,]+$")

# Boilerplate descriptions replaced by a fixed short sender label.
_SENDER_LABELS: tuple[tuple[str, str], ...] = (
    ("Pagamento de boleto", "Pagamento Boleto"),
    ("Recarga em carteira", "Recarga PicPay"),
)


def extract_sender(description: str) -> str:
    for prefix, label in _SENDER_LABELS:
        if description.startswith(prefix):
            return label
    return description


class _PicPayMachine(LineStateMachine):
    def feed(self, line: str) -> None:
        if _DATE_RE.match(line):
            self.start(ParserState.AWAITING_TIME, date=line)
            return

        buf = self.buffer
        if buf is None:
            return
        if self.state is ParserState.AWAITING_TIME:
            if _TIME_RE.match(line):
                buf.time = line
                self.state = ParserState.AWAITING_VALUE
            return
        if _VALUE_RE.match(line):
            if not buf.value:
                buf.value = line
                self.state = ParserState.AWAITING_ANCHOR
            return
        if len(line) > 2:
            buf.description.append(line)

    def build(self, buf: RecordBuffer, *, partial: bool) -> ImportedTransaction | None:
        description = buf.text
        if not buf.value:
            return None
        if not partial and not (buf.time and description):
            return None

        amount = parse_amount(buf.value)
        if amount is not None and amount == 0:
            return None
        return make_candidate(
            date=buf.date,
            description=description,
            sender=extract_sender(description) if description else "",
            amount=amount,
            type="expense" if "-" in buf.value else "income",
            mappings=self.mappings,
            config=self.config,
        )


def parse(
    text: str,
    mappings: Mapping[str, str] | None = None,
    *,
    config: ImportConfig | None = None,
) -> list[ImportedTransaction]:
    return _PicPayMachine(mappings, config=config).run(text)
