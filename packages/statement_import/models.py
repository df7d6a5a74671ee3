"""Data models for ``statement_import``.

Two families live here:

- In-memory import records (frozen ``dataclass``es): :class:`ImportedTransaction`
  candidates produced by the parsers, plus the :class:`CommitBatch` handed to
  the confirmation sink.
- Stored state (pydantic models): the snapshot the persistence collaborator
  keeps on disk. Field aliases are camelCase so snapshots keep the key shape
  used by the budgeting front-end (``categoryMappings``, ``installmentAmount``).
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .locale_parsing import normalize_date_text, parse_amount, parse_date

TransactionType: TypeAlias = Literal["income", "expense"]
Cycle: TypeAlias = Literal["day_05", "day_20"]

SALARY_CYCLE: Cycle = "day_05"
ADVANCE_CYCLE: Cycle = "day_20"

# ---------------------------------------------------------------------------
# Import candidates
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Installments:
    """An installment plan position such as ``2/10``."""

    current: int
    total: int

    def __post_init__(self) -> None:
        if self.total < 1 or not 1 <= self.current <= self.total:
            raise ValueError(f"invalid installment position {self.current}/{self.total}")


@dataclass(frozen=True, slots=True)
class ImportedTransaction:
    """A parsed, not-yet-confirmed transaction awaiting user review.

    ``amount`` is a non-negative magnitude; direction lives in ``type``.
    ``amount=None`` and ``date=""`` mean the parser could not resolve the
    field and the candidate must be completed by hand (see
    :meth:`missing_fields`).
    """

    id: str
    date: str
    description: str
    sender: str
    amount: Decimal | None
    type: TransactionType
    category: str
    cycle: Cycle
    installments: Installments | None = None
    is_duplicate: bool = False
    needs_review: bool = True
    linked_debt_id: str | None = None

    @property
    def label(self) -> str:
        """Sender when present, else the description."""

        return self.sender or self.description

    def missing_fields(self) -> tuple[str, ...]:
        """Names of fields that still block confirmation."""

        missing: list[str] = []
        if parse_date(self.date) is None:
            missing.append("date")
        if self.amount is None:
            missing.append("amount")
        if not self.label.strip():
            missing.append("description")
        return tuple(missing)

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields()

    def with_changes(self, **changes: Any) -> ImportedTransaction:
        """Return a copy with reviewed fields replaced.

        This is the only update path used by review front-ends. Amount strings
        are parsed with the locale rules and stored as magnitudes, dates are
        re-rendered as ``dd/mm/yyyy`` when resolvable, and ``(current, total)``
        tuples become :class:`Installments`. Unless ``needs_review`` is passed
        explicitly, an edit counts as a human confirmation and clears it.
        """

        unknown = sorted(set(changes) - _CANDIDATE_FIELDS)
        if unknown:
            raise AttributeError(f"ImportedTransaction has no field(s): {', '.join(unknown)}")
        if "id" in changes:
            raise AttributeError("ImportedTransaction.id cannot be changed")

        if "amount" in changes:
            amt = parse_amount(changes["amount"])
            changes["amount"] = abs(amt) if amt is not None else None
        if "date" in changes:
            raw = "" if changes["date"] is None else str(changes["date"]).strip()
            changes["date"] = normalize_date_text(raw) or raw
        if isinstance(changes.get("installments"), tuple):
            current, total = changes["installments"]
            changes["installments"] = Installments(int(current), int(total))
        if changes.get("type") not in (None, "income", "expense"):
            raise ValueError(f"invalid transaction type: {changes['type']!r}")
        changes.setdefault("needs_review", False)
        return dataclasses.replace(self, **changes)


_CANDIDATE_FIELDS: frozenset[str] = frozenset(f.name for f in dataclasses.fields(ImportedTransaction))


# ---------------------------------------------------------------------------
# Stored state (JSON snapshot)
# ---------------------------------------------------------------------------


class _StoredModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
    )


class Transaction(_StoredModel):
    id: str
    description: str
    amount: float
    type: TransactionType
    category: str
    date: str
    cycle: Cycle
    is_fixed: bool = False
    is_paid: bool = False
    needs_review: bool = False


class Debt(_StoredModel):
    id: str
    name: str
    total_amount: float
    installment_amount: float
    due_date: str
    cycle: Cycle
    paid_amount: float = 0.0
    purchase_date: str | None = None
    current_installment: int = 1
    total_installments: int = 1
    is_fixed: bool = False
    billing_month: str | None = None
    category: str | None = None
    payment_method: str | None = None
    is_paid: bool = False
    needs_review: bool = False


class Category(_StoredModel):
    id: str
    name: str
    type: TransactionType
    color: str | None = None


class FinancialCycle(_StoredModel):
    id: str
    type: Cycle
    month: str | None = None
    transactions: list[Transaction] = Field(default_factory=list)
    debts: list[Debt] = Field(default_factory=list)


class UserSettings(_StoredModel):
    salary_day: int = 5
    has_advance: bool = True
    advance_day: int = 20
    theme: Literal["light", "dark", "system"] = "system"

    @field_validator("salary_day", "advance_day")
    @classmethod
    def _day_of_month(cls, v: int) -> int:
        if 1 <= v <= 31:
            return v
        raise ValueError("pay day must be within 1..31")


def _default_cycles() -> list[FinancialCycle]:
    return [
        FinancialCycle(id="c1", type=SALARY_CYCLE),
        FinancialCycle(id="c2", type=ADVANCE_CYCLE),
    ]


def _default_categories() -> list[Category]:
    seed = (
        ("cat1", "Salário", "income", "#10b981"),
        ("cat2", "Casa", "expense", "#3b82f6"),
        ("cat3", "Mercado", "expense", "#f59e0b"),
        ("cat4", "Transporte", "expense", "#ef4444"),
        ("cat5", "Lazer", "expense", "#8b5cf6"),
        ("cat6", "Saúde", "expense", "#ec4899"),
        ("cat7", "Educação", "expense", "#14b8a6"),
        ("cat8", "Outros", "expense", "#64748b"),
    )
    return [Category(id=i, name=n, type=t, color=c) for i, n, t, c in seed]


class FinancialState(_StoredModel):
    """Top-level schema of the persisted state snapshot."""

    cycles: list[FinancialCycle] = Field(default_factory=_default_cycles)
    categories: list[Category] = Field(default_factory=_default_categories)
    settings: UserSettings = Field(default_factory=UserSettings)
    category_mappings: dict[str, str] = Field(default_factory=dict)
    view_date: str | None = None

    def cycle(self, cycle_type: Cycle) -> FinancialCycle:
        for c in self.cycles:
            if c.type == cycle_type:
                return c
        created = FinancialCycle(id=f"c-{cycle_type}", type=cycle_type)
        self.cycles.append(created)
        return created

    def all_transactions(self) -> list[Transaction]:
        return [t for c in self.cycles for t in c.transactions]

    def all_debts(self) -> list[Debt]:
        return [d for c in self.cycles for d in c.debts]


# ---------------------------------------------------------------------------
# Confirmation payload
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DebtPayment:
    """A payment recorded against an existing open debt."""

    debt_id: str
    amount: Decimal
    date: str


@dataclass(frozen=True, slots=True)
class CommitBatch:
    """Everything the confirmation sink needs to persist one import."""

    transactions: tuple[Transaction, ...] = ()
    debts: tuple[Debt, ...] = ()
    payments: tuple[DebtPayment, ...] = ()
    category_mappings: dict[str, str] = field(default_factory=dict)
    discarded: int = 0

    @property
    def is_empty(self) -> bool:
        return not (self.transactions or self.debts or self.payments)


__all__ = [
    "ADVANCE_CYCLE",
    "SALARY_CYCLE",
    "Category",
    "CommitBatch",
    "Cycle",
    "Debt",
    "DebtPayment",
    "FinancialCycle",
    "FinancialState",
    "ImportedTransaction",
    "Installments",
    "Transaction",
    "TransactionType",
    "UserSettings",
]
