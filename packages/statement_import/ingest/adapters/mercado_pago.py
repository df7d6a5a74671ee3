"""Adapter for Mercado Pago account statements (transfer-app layout).

Records are laid out one field per line::

    03-03-2025
    Transferência Pix recebida JOAO SILVA
    123456789012            <- internal reference, ignored
    R$ 500,00

A strict ``dd-mm-yyyy`` line starts a record, the first ``R$ <number>`` line
is its value (negative for outflows) and every other line in between or after
it is description.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from ...config import ImportConfig
from ...locale_parsing import parse_amount
from ...models import ImportedTransaction
from ..fsm import LineStateMachine, ParserState, RecordBuffer
from ..utils import make_candidate

_DATE_RE = re.compile(r"^\d{2}-\d{2}-\d{4}$")
_VALUE_RE = re.compile(r"^R\$\s?-?[\d.,]+$")
_REFERENCE_RE = re.compile(r"^\d{10,}$")
_SECTION_HEADER = "DETALHE DOS MOVIMENTOS"
_WALLET_LABEL = "Mercado Pago"


def extract_sender(description: str) -> str:
    for marker in ("Transferência Pix recebida", "Transferência Pix enviada"):
        if marker in description:
            return description.replace(marker, "").strip()
    if description.startswith("Compra de"):
        return description.removeprefix("Compra de").strip()
    if description.startswith("Pagamento "):
        return description.removeprefix("Pagamento ").strip()
    if description.startswith("Rendimentos"):
        return _WALLET_LABEL
    return description


class _MercadoPagoMachine(LineStateMachine):
    def feed(self, line: str) -> None:
        if _DATE_RE.match(line):
            self.start(ParserState.AWAITING_VALUE, date=line.replace("-", "/"))
            return

        buf = self.buffer
        if buf is None:
            return
        if not buf.value and _VALUE_RE.match(line):
            buf.value = line
            self.state = ParserState.AWAITING_ANCHOR
        elif (
            not _REFERENCE_RE.match(line)
            and len(line) > 2
            and not line.startswith(_SECTION_HEADER)
        ):
            buf.description.append(line)

    def build(self, buf: RecordBuffer, *, partial: bool) -> ImportedTransaction | None:
        description = buf.text
        if not buf.value:
            return None
        if not partial and not description:
            return None

        amount = parse_amount(buf.value)
        if amount is not None and amount == 0:
            return None
        return make_candidate(
            date=buf.date,
            description=description,
            sender=extract_sender(description) if description else "",
            amount=amount,
            type="expense" if amount is not None and amount < 0 else "income",
            mappings=self.mappings,
            config=self.config,
        )


def parse(
    text: str,
    mappings: Mapping[str, str] | None = None,
    *,
    config: ImportConfig | None = None,
) -> list[ImportedTransaction]:
    return _MercadoPagoMachine(mappings, config=config).run(text)
