import json
from decimal import Decimal

import pytest

from statement_import.models import CommitBatch, Debt, DebtPayment, FinancialState, Transaction
from statement_import.persistence import JsonStateStore, StateFileError, apply_debt_payment


def _debt(**overrides) -> Debt:
    fields = {
        "id": "d1",
        "name": "Geladeira",
        "total_amount": 1000.0,
        "installment_amount": 100.0,
        "due_date": "20/03/2025",
        "cycle": "day_20",
    }
    fields.update(overrides)
    return Debt(**fields)


def test_missing_file_loads_default_state(tmp_path):
    state = JsonStateStore(tmp_path / "nope.json").load()
    assert [c.type for c in state.cycles] == ["day_05", "day_20"]
    assert state.settings.salary_day == 5
    assert "Outros" in [c.name for c in state.categories]


def test_save_uses_camel_case_keys_and_round_trips(tmp_path):
    path = tmp_path / "nested" / "state.json"
    store = JsonStateStore(path)
    state = FinancialState(category_mappings={"loja": "Casa"})
    state.cycle("day_20").debts.append(_debt())

    store.save(state)

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["categoryMappings"] == {"loja": "Casa"}
    assert raw["cycles"][1]["debts"][0]["installmentAmount"] == 100.0
    assert not path.with_suffix(".json.tmp").exists()
    assert store.load() == state


def test_invalid_snapshot_raises_state_file_error(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(StateFileError):
        JsonStateStore(path).load()

    path.write_text(json.dumps({"settings": {"salaryDay": 45}}), encoding="utf-8")
    with pytest.raises(StateFileError):
        JsonStateStore(path).load()


def test_learn_persists_mapping(tmp_path):
    store = JsonStateStore(tmp_path / "state.json")
    store.learn("Loja", "Casa", amount=Decimal("10"))
    assert JsonStateStore(tmp_path / "state.json").get() == {"loja": "Casa", "loja-10.00": "Casa"}


def test_partial_payment_splits_debt():
    state = FinancialState()
    state.cycle("day_20").debts.append(_debt())

    assert apply_debt_payment(state, DebtPayment(debt_id="d1", amount=Decimal("30"), date="21/03/2025"))

    debts = state.cycle("day_20").debts
    assert [d.name for d in debts] == ["Geladeira (Parcial Paga)", "Restante - Geladeira"]
    assert [d.installment_amount for d in debts] == [30.0, 70.0]
    assert [d.paid_amount for d in debts] == [30.0, 0.0]
    assert all(d.total_amount == 100.0 for d in debts)
    assert "d1" not in {d.id for d in debts}


def test_full_payment_removes_debt():
    state = FinancialState()
    state.cycle("day_20").debts.append(_debt())
    assert apply_debt_payment(state, DebtPayment(debt_id="d1", amount=Decimal("100"), date="x"))
    assert state.all_debts() == []


def test_payment_for_unknown_debt():
    assert apply_debt_payment(FinancialState(), DebtPayment("nope", Decimal("1"), "")) is False


def test_commit_places_records_by_cycle(tmp_path):
    store = JsonStateStore(tmp_path / "state.json")
    store.save(FinancialState(cycles=[], category_mappings={"old": "Casa"}))
    batch = CommitBatch(
        transactions=(
            Transaction(
                id="t1", description="ACME", amount=10.0, type="income",
                category="Salário", date="05/03/2025", cycle="day_05",
            ),
        ),
        debts=(_debt(),),
        category_mappings={"acme": "Salário"},
    )

    store.commit(batch)

    state = store.load()
    assert [t.id for t in store.list_transactions()] == ["t1"]
    assert [d.id for d in store.list_debts()] == ["d1"]
    assert state.cycle("day_20").debts[0].id == "d1"
    assert state.category_mappings == {"old": "Casa", "acme": "Salário"}
