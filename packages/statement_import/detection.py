"""Bank/provider detection by keyword sniffing.

Statement text is lower-cased and checked against an ordered table of
provider-identifying phrases (legal names, wallet brands) found in headers
and footers. The first provider with a matching phrase wins, so table order
is the tie-break when a statement mentions more than one brand (e.g. a wallet
named inside a bank statement).
"""

from __future__ import annotations

from enum import StrEnum


class Provider(StrEnum):
    NUBANK = "nubank"
    BRADESCO = "bradesco"
    MERCADO_PAGO = "mercado_pago"
    PICPAY = "picpay"
    GENERIC = "generic"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES: dict[Provider, str] = {
    Provider.NUBANK: "Nubank",
    Provider.BRADESCO: "Bradesco",
    Provider.MERCADO_PAGO: "Mercado Pago",
    Provider.PICPAY: "PicPay",
    Provider.GENERIC: "Genérico",
}

# Priority order matters.
_KEYWORDS: tuple[tuple[Provider, tuple[str, ...]], ...] = (
    (Provider.NUBANK, ("nu pagamentos", "nubank")),
    (Provider.BRADESCO, ("bradesco",)),
    (Provider.MERCADO_PAGO, ("mercado pago", "mercadopago")),
    (Provider.PICPAY, ("picpay",)),
)


def detect_provider(text: str) -> Provider:
    """Classify ``text`` as one of the known providers or ``GENERIC``."""

    lower = text.lower()
    for provider, keywords in _KEYWORDS:
        if any(k in lower for k in keywords):
            return provider
    return Provider.GENERIC


__all__ = ["Provider", "detect_provider"]
