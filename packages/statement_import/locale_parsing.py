"""Locale-aware amount and date parsing (pt-BR conventions).

Amounts use ``.`` for thousands and ``,`` for decimals ("R$ 1.234,56"), but
pasted statements and spreadsheets routinely mix conventions, so
:func:`parse_amount` decides per string which separator is the decimal one.
Dates are day-first (``dd/mm/yyyy``); month names are Portuguese.

All parsers here return ``None`` on failure instead of raising. Callers must
check before use.
"""

from __future__ import annotations

import math
import re
import unicodedata
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation

# Keys are upper-case and accent-free; see ``month_number``.
MONTH_MAP: dict[str, int] = {
    "JAN": 1,
    "FEV": 2,
    "MAR": 3,
    "ABR": 4,
    "MAI": 5,
    "JUN": 6,
    "JUL": 7,
    "AGO": 8,
    "SET": 9,
    "OUT": 10,
    "NOV": 11,
    "DEZ": 12,
    "JANEIRO": 1,
    "FEVEREIRO": 2,
    "MARCO": 3,
    "ABRIL": 4,
    "MAIO": 5,
    "JUNHO": 6,
    "JULHO": 7,
    "AGOSTO": 8,
    "SETEMBRO": 9,
    "OUTUBRO": 10,
    "NOVEMBRO": 11,
    "DEZEMBRO": 12,
}

MONTHS_FULL: tuple[str, ...] = (
    "Janeiro",
    "Fevereiro",
    "Março",
    "Abril",
    "Maio",
    "Junho",
    "Julho",
    "Agosto",
    "Setembro",
    "Outubro",
    "Novembro",
    "Dezembro",
)

# Spreadsheet serial 0 is 1899-12-30 (serial 25569 is 1970-01-01).
_SPREADSHEET_EPOCH = datetime(1899, 12, 30)
# 9999-12-31, the last day a datetime can hold.
_MAX_SERIAL = 2958465

_ISO_PREFIX_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")
_NUMERIC_DATE_RE = re.compile(r"^(\d{1,2})[/-](\d{1,2})(?:[/-](\d{4}|\d{2}))?$")
_NAMED_DATE_RE = re.compile(
    r"^(\d{1,2})(?:\s+de)?\s+([^\W\d_]+)\.?(?:(?:\s+de)?\s+(\d{4}))?$", re.IGNORECASE
)
_AMOUNT_BODY_RE = re.compile(r"^\d+(?:\.\d+)?$")


def _strip_accents(s: str) -> str:
    decomposed = unicodedata.normalize("NFKD", s)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def month_number(name: str) -> int | None:
    """Return 1..12 for a Portuguese month name or 3-letter abbreviation."""

    key = _strip_accents(name.strip().rstrip(".")).upper()
    if not key:
        return None
    return MONTH_MAP.get(key) or MONTH_MAP.get(key[:3])


def expand_year(raw: str) -> int:
    """Map a 2-digit year to ``2000 + YY``; 4-digit years pass through."""

    year = int(raw)
    return 2000 + year if len(raw) <= 2 else year


def _safe_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_date(raw: str | None, *, default_year: int | None = None) -> date | None:
    """Parse a day-first date string.

    Accepted shapes: ``dd/mm/yyyy``, ``dd-mm-yyyy``, ``dd/mm/yy``, a
    ``YYYY-MM-DD`` prefix (ISO, time suffix ignored), ``dd MON yyyy``,
    ``dd de MONTH de yyyy``. When ``default_year`` is given, year-less shapes
    (``dd/mm``, ``dd MON``) are accepted too. Returns ``None`` on failure.
    """

    if raw is None:
        return None
    s = " ".join(str(raw).split())
    if not s:
        return None

    m = _ISO_PREFIX_RE.match(s)
    if m:
        return _safe_date(int(m.group(1)), int(m.group(2)), int(m.group(3)))

    m = _NUMERIC_DATE_RE.match(s)
    if m:
        day, month, year_raw = m.groups()
        if year_raw is None:
            if default_year is None:
                return None
            year = default_year
        else:
            year = expand_year(year_raw)
        return _safe_date(year, int(month), int(day))

    m = _NAMED_DATE_RE.match(s)
    if m:
        day, month_name, year_raw = m.groups()
        month = month_number(month_name)
        if month is None:
            return None
        if year_raw is None:
            if default_year is None:
                return None
            year = default_year
        else:
            year = int(year_raw)
        return _safe_date(year, month, int(day))

    return None


def format_date(d: date) -> str:
    """Render ``d`` in the canonical display order ``dd/mm/yyyy``."""

    return f"{d.day:02d}/{d.month:02d}/{d.year:04d}"


def normalize_date_text(raw: str | None, *, default_year: int | None = None) -> str:
    """Return ``raw`` re-rendered as ``dd/mm/yyyy`` or ``""`` when unresolvable."""

    d = parse_date(raw, default_year=default_year)
    return format_date(d) if d else ""


def spreadsheet_serial_to_datetime(serial: float) -> datetime | None:
    """Convert a spreadsheet day serial (with fractional time) to a datetime.

    The fractional part is nudged by 1e-7 days before truncating to whole
    seconds so values like ``0.5`` do not land on 11:59:59. Non-finite values
    and serials outside ``1.._MAX_SERIAL`` return ``None``.
    """

    if not math.isfinite(serial) or not 1 <= serial < _MAX_SERIAL + 1:
        return None
    days = math.floor(serial)
    base = _SPREADSHEET_EPOCH + timedelta(days=days)
    fractional = serial - days + 0.0000001
    total_seconds = min(math.floor(86400 * fractional), 86399)
    seconds = total_seconds % 60
    total_seconds -= seconds
    hours = total_seconds // 3600
    minutes = (total_seconds // 60) % 60
    return base.replace(hour=hours, minute=minutes, second=seconds)


def parse_amount(raw: str | int | float | Decimal | None) -> Decimal | None:
    """Parse a locale-formatted money string into a signed ``Decimal``.

    Rules
    -----
    - A leading ``R$`` marker, whitespace, ``+``/``-`` signs and surrounding
      parentheses are stripped; ``-`` (leading or trailing) and parentheses
      make the result negative.
    - Both ``.`` and ``,`` present: the right-most one is the decimal
      separator and the other is removed as a thousands separator.
    - Only ``,`` present: the last ``,`` is the decimal separator.
    - Only ``.`` present: the last ``.`` is decimal when at most two digits
      follow it; otherwise every ``.`` is a thousands separator.

    Returns ``None`` for empty or unparseable input.
    """

    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float, Decimal)):
        try:
            d = Decimal(str(raw))
        except InvalidOperation:
            return None
        return d if d.is_finite() else None

    s = "".join(str(raw).split())
    if not s:
        return None

    negative = False
    while True:
        changed = False
        if s.startswith("+"):
            s = s[1:]
            changed = True
        elif s.startswith("-"):
            negative = True
            s = s[1:]
            changed = True
        if s.upper().startswith("R$"):
            s = s[2:]
            changed = True
        elif s.startswith("$"):
            s = s[1:]
            changed = True
        if s.startswith("(") and s.endswith(")") and len(s) >= 2:
            negative = True
            s = s[1:-1]
            changed = True
        if not changed:
            break
    if s.endswith("-"):
        negative = True
        s = s[:-1]

    has_comma = "," in s
    has_dot = "." in s
    if has_comma and has_dot:
        if s.rfind(",") > s.rfind("."):
            s = s.replace(".", "")
            head, _, tail = s.rpartition(",")
            s = head.replace(",", "") + "." + tail
        else:
            s = s.replace(",", "")
            head, _, tail = s.rpartition(".")
            s = head.replace(".", "") + "." + tail
    elif has_comma:
        head, _, tail = s.rpartition(",")
        s = head.replace(",", "") + "." + tail
    elif has_dot:
        head, _, tail = s.rpartition(".")
        if len(tail) <= 2:
            s = head.replace(".", "") + "." + tail
        else:
            s = s.replace(".", "")

    if not _AMOUNT_BODY_RE.match(s):
        return None
    try:
        d = Decimal(s)
    except InvalidOperation:
        return None
    return -d if negative else d


def format_amount(amount: Decimal) -> str:
    """Render ``amount`` as ``1.234,56`` (no currency symbol)."""

    q = f"{abs(amount):,.2f}"
    body = q.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"-{body}" if amount < 0 else body


def format_brl(amount: Decimal) -> str:
    """Render ``amount`` as ``R$ 1.234,56``."""

    return f"R$ {format_amount(amount)}"


__all__ = [
    "MONTH_MAP",
    "MONTHS_FULL",
    "expand_year",
    "format_amount",
    "format_brl",
    "format_date",
    "month_number",
    "normalize_date_text",
    "parse_amount",
    "parse_date",
    "spreadsheet_serial_to_datetime",
]
