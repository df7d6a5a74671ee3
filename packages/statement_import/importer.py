"""Import orchestration: detection, parser fallback chain, sorting and flags.

:func:`process_text` is the single entry point for pasted or extracted text;
:func:`process_grid` does the same for spreadsheet cell grids. Both return an
:class:`ImportOutcome` and never raise for bad input: any exception from the
parser chain is logged and reported as ``ImportStatus.FAILED`` with no
candidates (partial output of a failed attempt is not trusted).
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TypeAlias

from .config import ImportConfig
from .detection import Provider, detect_provider
from .duplicates import mark_duplicates
from .ingest.adapters import (
    bradesco,
    free_list,
    generic_scanner,
    mercado_pago,
    nubank,
    picpay,
    spreadsheet,
)
from .ingest.utils import normalize_newlines
from .locale_parsing import parse_date
from .logging_setup import get_logger
from .models import ImportedTransaction

logger = get_logger("statement_import.importer")

TextParser: TypeAlias = Callable[..., list[ImportedTransaction]]

PROVIDER_PARSERS: dict[Provider, TextParser] = {
    Provider.NUBANK: nubank.parse,
    Provider.BRADESCO: bradesco.parse,
    Provider.MERCADO_PAGO: mercado_pago.parse,
    Provider.PICPAY: picpay.parse,
}


class ImportMode(StrEnum):
    BANK = "bank"
    LIST = "list"


class ImportStatus(StrEnum):
    FOUND = "found"
    NOTHING_FOUND = "nothing_found"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ImportOutcome:
    """Result of one processing attempt.

    ``complete`` is sorted by date and duplicate-flagged; ``incomplete``
    holds candidates that must be finished by hand (missing date, amount or
    description) in parse order.
    """

    status: ImportStatus
    provider: Provider | None = None
    complete: tuple[ImportedTransaction, ...] = ()
    incomplete: tuple[ImportedTransaction, ...] = ()
    parser: str | None = None
    error: str | None = field(default=None, compare=False)

    @property
    def found(self) -> int:
        return len(self.complete) + len(self.incomplete)

    @property
    def duplicates(self) -> int:
        return sum(1 for c in self.complete if c.is_duplicate)

    def summary(self) -> str:
        if self.status is ImportStatus.FAILED:
            return "processing failed"
        if self.status is ImportStatus.NOTHING_FOUND:
            return "nothing found"
        text = f"{self.found} found, {self.duplicates} duplicates"
        if self.incomplete:
            text += f", {len(self.incomplete)} need review"
        return text


def sort_by_date(candidates: Iterable[ImportedTransaction]) -> list[ImportedTransaction]:
    """Stable ascending sort on the resolved date (unresolved dates last)."""

    def _key(c: ImportedTransaction) -> tuple[int, object]:
        d = parse_date(c.date)
        return (0, d) if d is not None else (1, 0)

    return sorted(candidates, key=_key)


def partition(
    candidates: Iterable[ImportedTransaction],
) -> tuple[list[ImportedTransaction], list[ImportedTransaction]]:
    complete: list[ImportedTransaction] = []
    incomplete: list[ImportedTransaction] = []
    for c in candidates:
        (complete if c.is_complete else incomplete).append(c)
    return complete, incomplete


def _run_chain(
    text: str,
    mode: ImportMode,
    mappings: Mapping[str, str] | None,
    config: ImportConfig,
) -> tuple[Provider | None, str, list[ImportedTransaction]]:
    if mode is ImportMode.LIST:
        return None, "free_list", free_list.parse(text, mappings, config=config)

    provider = detect_provider(text)
    logger.info("importer:detected provider=%s", provider.value)

    dedicated = PROVIDER_PARSERS.get(provider)
    if dedicated is not None:
        results = dedicated(text, mappings, config=config)
        if results:
            return provider, provider.value, results
        logger.info("importer:fallback from=%s to=generic_scanner", provider.value)

    results = generic_scanner.parse(text, mappings, config=config)
    if results:
        return provider, "generic_scanner", results

    logger.info("importer:fallback from=generic_scanner to=free_list")
    return provider, "free_list", free_list.parse(text, mappings, config=config)


def _finish(
    provider: Provider | None,
    parser_name: str,
    results: list[ImportedTransaction],
    existing: frozenset[str] | set[str],
) -> ImportOutcome:
    complete, incomplete = partition(results)
    complete = mark_duplicates(sort_by_date(complete), existing)
    status = ImportStatus.FOUND if results else ImportStatus.NOTHING_FOUND
    outcome = ImportOutcome(
        status=status,
        provider=provider,
        complete=tuple(complete),
        incomplete=tuple(incomplete),
        parser=parser_name,
    )
    logger.info(
        "importer:parsed parser=%s count=%d duplicates=%d incomplete=%d",
        parser_name,
        outcome.found,
        outcome.duplicates,
        len(outcome.incomplete),
    )
    return outcome


def process_text(
    text: str,
    *,
    mode: ImportMode | str = ImportMode.BANK,
    mappings: Mapping[str, str] | None = None,
    existing: frozenset[str] | set[str] = frozenset(),
    config: ImportConfig | None = None,
) -> ImportOutcome:
    """Run the full import pipeline over raw statement or list text.

    In ``bank`` mode the detected provider's parser runs first; zero results
    (or an unrecognized provider) fall back to the generic scanner and then
    to the free-form list parser. ``list`` mode runs the list parser only.
    """

    cfg = config or ImportConfig()
    mode = ImportMode(mode)
    try:
        provider, parser_name, results = _run_chain(
            normalize_newlines(text), mode, mappings, cfg
        )
    except Exception as exc:
        logger.exception("importer:failed mode=%s", mode.value)
        return ImportOutcome(status=ImportStatus.FAILED, error=str(exc))
    return _finish(provider, parser_name, results, existing)


def process_grid(
    grid: spreadsheet.Grid,
    *,
    mappings: Mapping[str, str] | None = None,
    existing: frozenset[str] | set[str] = frozenset(),
    config: ImportConfig | None = None,
) -> ImportOutcome:
    """Run the spreadsheet-row parser over a cell grid (header row first)."""

    cfg = config or ImportConfig()
    try:
        results = spreadsheet.parse(grid, mappings, config=cfg)
    except Exception as exc:
        logger.exception("importer:failed mode=grid")
        return ImportOutcome(status=ImportStatus.FAILED, error=str(exc))
    return _finish(None, "spreadsheet", results, existing)


__all__ = [
    "PROVIDER_PARSERS",
    "ImportMode",
    "ImportOutcome",
    "ImportStatus",
    "partition",
    "process_grid",
    "process_text",
    "sort_by_date",
]
