from decimal import Decimal

from statement_import.duplicates import (
    build_existing_set,
    fingerprint,
    make_fingerprint,
    mark_duplicates,
)
from statement_import.models import Debt, ImportedTransaction, Transaction


def _cand(**overrides) -> ImportedTransaction:
    fields = {
        "id": "c1",
        "date": "05/03/2025",
        "description": "Supermercado Bom Preco",
        "sender": "Supermercado Bom Preco",
        "amount": Decimal("150.00"),
        "type": "expense",
        "category": "Mercado",
        "cycle": "day_05",
    }
    fields.update(overrides)
    return ImportedTransaction(**fields)


def test_fingerprint_shape():
    assert fingerprint(_cand()) == "05/03|150.00|supermercadobom"


def test_fingerprint_is_stable_and_ignores_year():
    a = _cand(date="05/03/2024")
    b = _cand(id="c2", date="05/03/2025")
    assert fingerprint(a) == fingerprint(a)
    assert fingerprint(a) == fingerprint(b)


def test_fingerprint_uses_description_when_sender_blank():
    c = _cand(sender="", description="Conta de Luz")
    assert fingerprint(c).endswith("|contadeluz")


def test_fingerprint_unresolved_date_uses_raw_prefix():
    assert make_fingerprint("", Decimal("1"), "x") == "|1.00|x"
    assert make_fingerprint(" 2025-03-05", 1.5, "x") == "05/03|1.50|x"


def test_build_existing_set_income_transactions_and_debts():
    transactions = [
        Transaction(
            id="t1", description="Salario ACME", amount=5000.0, type="income",
            category="Salário", date="05/03/2025", cycle="day_05",
        ),
        Transaction(
            id="t2", description="Aluguel", amount=1200.0, type="expense",
            category="Casa", date="10/03/2025", cycle="day_05",
        ),
    ]
    debts = [
        Debt(
            id="d1", name="Geladeira", total_amount=3000.0, installment_amount=300.0,
            due_date="20/03/2025", purchase_date="02/01/2025", cycle="day_20",
        ),
        Debt(
            id="d2", name="Internet", total_amount=99.9, installment_amount=99.9,
            due_date="15/03/2025", cycle="day_20",
        ),
    ]

    existing = build_existing_set(transactions, debts)

    assert existing == frozenset(
        {
            "05/03|5000.00|salarioacme",
            "02/01|300.00|geladeira",
            "15/03|99.90|internet",
        }
    )


def test_mark_duplicates_flags_without_removing():
    fresh = _cand(id="c2", description="Padaria", sender="Padaria", amount=Decimal("9"))
    dup = _cand()
    existing = {fingerprint(dup)}

    marked = mark_duplicates([fresh, dup], existing)

    assert [c.id for c in marked] == ["c2", "c1"]
    assert [c.is_duplicate for c in marked] == [False, True]


def test_mark_duplicates_is_idempotent():
    cands = [_cand(), _cand(id="c2", amount=Decimal("1"))]
    existing = frozenset({fingerprint(cands[0])})
    once = mark_duplicates(cands, existing)
    assert mark_duplicates(once, existing) == once


def test_mark_duplicates_clears_stale_flags():
    stale = _cand(is_duplicate=True)
    assert mark_duplicates([stale], frozenset())[0].is_duplicate is False
