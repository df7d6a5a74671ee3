"""Review and confirmation transforms.

The review surface (UI, CLI) edits candidates through
:meth:`ImportedTransaction.with_changes`; this module adds the operations
around it: category edits that feed the learning loop, merging completed
manual-review items back into the main list, and turning the confirmed list
into a :class:`~statement_import.models.CommitBatch` for the persistence
collaborator. Nothing here writes to storage.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal

from .categories import DEFAULT_CATEGORY, learn
from .config import ImportConfig
from .duplicates import mark_duplicates
from .importer import sort_by_date
from .locale_parsing import MONTHS_FULL
from .logging_setup import get_logger
from .models import CommitBatch, Debt, DebtPayment, ImportedTransaction, Transaction

logger = get_logger("statement_import.review")

INCOME_FALLBACK_CATEGORY = "Salário"


class IncompleteReviewError(ValueError):
    """Raised when confirmation is attempted with unfinished candidates."""

    def __init__(self, pending: Sequence[ImportedTransaction]) -> None:
        self.pending = tuple(pending)
        details = ", ".join(f"{c.id} ({'/'.join(c.missing_fields())})" for c in self.pending)
        super().__init__(f"{len(self.pending)} item(s) still need review: {details}")


def change_category(
    candidate: ImportedTransaction,
    category: str,
    mappings: Mapping[str, str],
) -> tuple[ImportedTransaction, dict[str, str]]:
    """Set ``category`` on a candidate and learn it for the candidate's sender."""

    updated = candidate.with_changes(category=category)
    return updated, learn(mappings, candidate.sender, category)


def merge_reviewed(
    complete: Iterable[ImportedTransaction],
    reviewed: Iterable[ImportedTransaction],
    existing: frozenset[str] | set[str] = frozenset(),
) -> list[ImportedTransaction]:
    """Merge hand-completed items back, re-sort by date and re-flag duplicates."""

    merged = [*complete, *reviewed]
    pending = [c for c in merged if not c.is_complete]
    if pending:
        raise IncompleteReviewError(pending)
    return mark_duplicates(sort_by_date(merged), existing)


def _to_transaction(c: ImportedTransaction, amount: Decimal) -> Transaction:
    return Transaction(
        id=str(uuid.uuid4()),
        description=c.label,
        amount=float(amount),
        type="income",
        category=c.category or INCOME_FALLBACK_CATEGORY,
        date=c.date,
        cycle=c.cycle,
    )


def _to_debt(c: ImportedTransaction, amount: Decimal, billing_month: str) -> Debt:
    current, total = (c.installments.current, c.installments.total) if c.installments else (1, 1)
    return Debt(
        id=str(uuid.uuid4()),
        name=c.label,
        total_amount=float(amount * total),
        installment_amount=float(amount),
        due_date=c.date,
        purchase_date=c.date,
        current_installment=current,
        total_installments=total,
        billing_month=billing_month,
        cycle=c.cycle,
        category=c.category or DEFAULT_CATEGORY,
        payment_method="Pix" if "Pix" in c.description else "Cartão",
    )


def prepare_commit(
    candidates: Iterable[ImportedTransaction],
    mappings: Mapping[str, str],
    *,
    config: ImportConfig | None = None,
) -> CommitBatch:
    """Promote confirmed candidates into stored records.

    Incomes become :class:`Transaction`, expenses become :class:`Debt`, and
    candidates linked to an open debt become :class:`DebtPayment`. Zero
    amounts are discarded. Every candidate with a sender and category also
    teaches the generic mapping for that sender.
    """

    cfg = config or ImportConfig()
    items = list(candidates)
    pending = [c for c in items if not c.is_complete]
    if pending:
        raise IncompleteReviewError(pending)

    billing_month = MONTHS_FULL[cfg.today.month - 1]
    learned = dict(mappings)
    transactions: list[Transaction] = []
    debts: list[Debt] = []
    payments: list[DebtPayment] = []
    discarded = 0

    for c in items:
        if c.amount is None or c.amount == 0:
            discarded += 1
            continue
        if c.sender and c.category:
            learned = learn(learned, c.sender, c.category)

        if c.linked_debt_id:
            payments.append(DebtPayment(debt_id=c.linked_debt_id, amount=c.amount, date=c.date))
        elif c.type == "income":
            transactions.append(_to_transaction(c, c.amount))
        else:
            debts.append(_to_debt(c, c.amount, billing_month))

    logger.info(
        "review:prepared transactions=%d debts=%d payments=%d discarded=%d",
        len(transactions),
        len(debts),
        len(payments),
        discarded,
    )
    return CommitBatch(
        transactions=tuple(transactions),
        debts=tuple(debts),
        payments=tuple(payments),
        category_mappings=learned,
        discarded=discarded,
    )


__all__ = [
    "IncompleteReviewError",
    "change_category",
    "merge_reviewed",
    "prepare_commit",
]
