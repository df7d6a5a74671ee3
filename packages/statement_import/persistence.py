"""JSON snapshot store for the financial state.

The import core never touches storage; this module is the reference
collaborator used by the CLI. The whole :class:`FinancialState` lives in one
JSON file (camelCase keys). Writes go to ``<path>.tmp`` first and are moved
into place with ``os.replace`` so a crash never leaves a truncated snapshot.

Public surface:
- ``JsonStateStore``: ``load``/``save`` plus the interfaces the core expects
  (``get``/``learn`` for category mappings, ``list_transactions``/
  ``list_debts`` for duplicate detection, ``commit`` for confirmation).
- ``apply_debt_payment``: pay (fully or partially) an open debt in a state.
"""

from __future__ import annotations

import contextlib
import json
import os
import uuid
from decimal import Decimal
from pathlib import Path

from pydantic import ValidationError

from .categories import learn as learn_mapping
from .logging_setup import get_logger
from .models import CommitBatch, Debt, DebtPayment, FinancialState, Transaction

logger = get_logger("statement_import.persistence")

DEFAULT_STATE_FILENAME = "finance_state.json"


class StateFileError(RuntimeError):
    """The snapshot file exists but cannot be read or validated."""


def apply_debt_payment(state: FinancialState, payment: DebtPayment) -> bool:
    """Apply ``payment`` to the debt it references; return ``False`` if absent.

    Paying the installment amount or more removes the debt. A smaller payment
    splits it into a paid part named ``"<name> (Parcial Paga)"`` and a
    remaining part named ``"Restante - <name>"``; both keep the original
    installment amount as ``total_amount``.
    """

    for cycle in state.cycles:
        for idx, debt in enumerate(cycle.debts):
            if debt.id != payment.debt_id:
                continue
            paid = float(payment.amount)
            remaining = debt.installment_amount - paid
            del cycle.debts[idx]
            if remaining <= 0:
                return True
            base = debt.model_copy(update={"total_amount": debt.installment_amount})
            cycle.debts.append(
                base.model_copy(
                    update={
                        "id": str(uuid.uuid4()),
                        "name": f"{debt.name} (Parcial Paga)",
                        "installment_amount": paid,
                        "paid_amount": paid,
                    }
                )
            )
            cycle.debts.append(
                base.model_copy(
                    update={
                        "id": str(uuid.uuid4()),
                        "name": f"Restante - {debt.name}",
                        "installment_amount": remaining,
                        "paid_amount": 0.0,
                    }
                )
            )
            return True
    return False


class JsonStateStore:
    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)

    def load(self) -> FinancialState:
        """Read the snapshot; a missing file yields the default state."""

        if not self.path.exists():
            return FinancialState()
        try:
            text = self.path.read_text(encoding="utf-8")
            return FinancialState.model_validate_json(text)
        except (OSError, UnicodeDecodeError, ValidationError) as exc:
            raise StateFileError(f"cannot read state file {os.fspath(self.path)}: {exc}") from exc

    def save(self, state: FinancialState) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        payload = state.model_dump(mode="json", by_alias=True)
        try:
            if self.path.parent and not self.path.parent.exists():
                self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
            os.replace(tmp, self.path)
        except Exception:
            with contextlib.suppress(FileNotFoundError):
                tmp.unlink()
            raise
        logger.debug("persistence:saved path=%s", os.fspath(self.path))

    # -- category mapping store -------------------------------------------

    def get(self) -> dict[str, str]:
        return dict(self.load().category_mappings)

    def learn(
        self, sender: str, category: str, *, amount: Decimal | float | None = None
    ) -> dict[str, str]:
        state = self.load()
        state.category_mappings = learn_mapping(
            state.category_mappings, sender, category, amount=amount
        )
        self.save(state)
        return dict(state.category_mappings)

    # -- existing records ---------------------------------------------------

    def list_transactions(self) -> list[Transaction]:
        return self.load().all_transactions()

    def list_debts(self) -> list[Debt]:
        return self.load().all_debts()

    # -- confirmation sink --------------------------------------------------

    def commit(self, batch: CommitBatch) -> FinancialState:
        """Persist a prepared batch in one write and return the new state."""

        state = self.load()
        for t in batch.transactions:
            state.cycle(t.cycle).transactions.append(t)
        for d in batch.debts:
            state.cycle(d.cycle).debts.append(d)
        missing = 0
        for p in batch.payments:
            if not apply_debt_payment(state, p):
                missing += 1
                logger.warning("persistence:payment_unmatched debt_id=%s", p.debt_id)
        state.category_mappings = {**state.category_mappings, **batch.category_mappings}
        self.save(state)
        logger.info(
            "persistence:committed transactions=%d debts=%d payments=%d unmatched=%d",
            len(batch.transactions),
            len(batch.debts),
            len(batch.payments) - missing,
            missing,
        )
        return state


__all__ = [
    "DEFAULT_STATE_FILENAME",
    "JsonStateStore",
    "StateFileError",
    "apply_debt_payment",
]
