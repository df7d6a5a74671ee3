"""Public interface for the ``statement_import`` package.

This module exposes the import pipeline entry points and the public
models/types as the stable import surface. There is no runtime logic here,
only symbol re-exports.
"""

from .categories import InMemoryCategoryStore, classify, learn
from .config import ImportConfig
from .detection import Provider, detect_provider
from .duplicates import build_existing_set, fingerprint, mark_duplicates
from .importer import ImportMode, ImportOutcome, ImportStatus, process_grid, process_text
from .locale_parsing import parse_amount, parse_date, spreadsheet_serial_to_datetime
from .models import (
    CommitBatch,
    Debt,
    DebtPayment,
    FinancialState,
    ImportedTransaction,
    Installments,
    Transaction,
    UserSettings,
)
from .persistence import JsonStateStore, StateFileError
from .review import IncompleteReviewError, change_category, merge_reviewed, prepare_commit

__all__ = [
    # Pipeline
    "process_text",
    "process_grid",
    "detect_provider",
    "classify",
    "learn",
    "fingerprint",
    "build_existing_set",
    "mark_duplicates",
    "change_category",
    "merge_reviewed",
    "prepare_commit",
    "parse_amount",
    "parse_date",
    "spreadsheet_serial_to_datetime",
    # Models / types
    "ImportConfig",
    "ImportMode",
    "ImportOutcome",
    "ImportStatus",
    "ImportedTransaction",
    "Installments",
    "Provider",
    "Transaction",
    "Debt",
    "DebtPayment",
    "CommitBatch",
    "FinancialState",
    "UserSettings",
    # Storage
    "InMemoryCategoryStore",
    "JsonStateStore",
    # Errors
    "IncompleteReviewError",
    "StateFileError",
]
