from datetime import date
from decimal import Decimal

import pytest

from statement_import.config import ImportConfig
from statement_import.duplicates import fingerprint
from statement_import.models import ImportedTransaction, Installments
from statement_import.review import (
    IncompleteReviewError,
    change_category,
    merge_reviewed,
    prepare_commit,
)


def _cand(**overrides) -> ImportedTransaction:
    fields = {
        "id": "c1",
        "date": "05/03/2025",
        "description": "Compra Loja",
        "sender": "Loja",
        "amount": Decimal("100.00"),
        "type": "expense",
        "category": "Casa",
        "cycle": "day_05",
    }
    fields.update(overrides)
    return ImportedTransaction(**fields)


def test_with_changes_normalizes_fields():
    c = _cand(amount=None, date="")
    updated = c.with_changes(amount="R$ 1.234,56", date="5-3-25", installments=(2, 10))

    assert updated.amount == Decimal("1234.56")
    assert updated.date == "05/03/2025"
    assert updated.installments == Installments(2, 10)
    assert updated.needs_review is False
    assert updated.id == c.id
    assert c.amount is None  # original untouched


def test_with_changes_rejects_unknown_and_id_fields():
    with pytest.raises(AttributeError):
        _cand().with_changes(colour="red")
    with pytest.raises(AttributeError):
        _cand().with_changes(id="other")
    with pytest.raises(ValueError):
        _cand().with_changes(type="refund")


def test_with_changes_can_keep_review_flag():
    assert _cand().with_changes(category="Lazer", needs_review=True).needs_review is True


def test_change_category_learns_sender():
    updated, mappings = change_category(_cand(), "Lazer", {"outra": "Casa"})
    assert updated.category == "Lazer"
    assert mappings == {"outra": "Casa", "loja": "Lazer"}


def test_merge_reviewed_sorts_and_flags():
    complete = [_cand(id="a", date="10/03/2025"), _cand(id="b", date="12/03/2025")]
    fixed = _cand(id="c", date="").with_changes(date="01/03/2025", amount="7,00", sender="Padaria")
    existing = {fingerprint(fixed)}

    merged = merge_reviewed(complete, [fixed], existing)

    assert [c.id for c in merged] == ["c", "a", "b"]
    assert [c.is_duplicate for c in merged] == [True, False, False]


def test_merge_reviewed_blocks_unfinished_items():
    with pytest.raises(IncompleteReviewError) as exc:
        merge_reviewed([], [_cand(date="")])
    assert "date" in str(exc.value)


def test_prepare_commit_promotes_candidates():
    config = ImportConfig(today=date(2025, 3, 20))
    cands = [
        _cand(id="inc", type="income", sender="ACME LTDA", amount=Decimal("5000"), category=""),
        _cand(
            id="exp",
            description="Pix Geladeira Parcela 2/10",
            sender="Geladeira",
            amount=Decimal("300"),
            installments=Installments(2, 10),
            cycle="day_20",
        ),
        _cand(id="zero", amount=Decimal("0")),
        _cand(id="pay", linked_debt_id="debt-1", amount=Decimal("50")),
    ]

    batch = prepare_commit(cands, {}, config=config)

    [tx] = batch.transactions
    assert (tx.description, tx.amount, tx.type, tx.category) == ("ACME LTDA", 5000.0, "income", "Salário")

    [debt] = batch.debts
    assert debt.name == "Geladeira"
    assert (debt.installment_amount, debt.total_amount) == (300.0, 3000.0)
    assert (debt.current_installment, debt.total_installments) == (2, 10)
    assert (debt.due_date, debt.purchase_date) == ("05/03/2025", "05/03/2025")
    assert debt.billing_month == "Março"
    assert debt.payment_method == "Pix"
    assert debt.cycle == "day_20"

    [payment] = batch.payments
    assert (payment.debt_id, payment.amount) == ("debt-1", Decimal("50"))

    assert batch.discarded == 1
    assert batch.category_mappings == {"geladeira": "Casa", "loja": "Casa"}


def test_prepare_commit_card_payment_method_default():
    batch = prepare_commit([_cand()], {})
    assert batch.debts[0].payment_method == "Cartão"


def test_prepare_commit_refuses_incomplete():
    with pytest.raises(IncompleteReviewError) as exc:
        prepare_commit([_cand(), _cand(id="blank", amount=None)], {})
    assert [c.id for c in exc.value.pending] == ["blank"]


def test_prepare_commit_checks_amounts_before_promoting():
    batch = prepare_commit(
        [_cand(id="zero", amount=Decimal("0")), _cand(id="paid", amount=Decimal("40"))], {}
    )
    assert batch.discarded == 1
    assert [d.installment_amount for d in batch.debts] == [40.0]
    with pytest.raises(IncompleteReviewError):
        prepare_commit([_cand(amount=None)], {})
