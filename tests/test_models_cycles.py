from decimal import Decimal

import pytest

from statement_import.cycles import assign_cycle, cycle_for_date
from statement_import.models import (
    FinancialState,
    ImportedTransaction,
    Installments,
    UserSettings,
)


def test_assign_cycle_nearest_pay_day():
    settings = UserSettings()
    assert assign_cycle(15, settings) == "day_20"
    assert assign_cycle(12, settings) == "day_05"
    assert assign_cycle(28, settings) == "day_20"


def test_assign_cycle_tie_goes_to_salary():
    assert assign_cycle(10, UserSettings(salary_day=5, advance_day=15)) == "day_05"


def test_assign_cycle_without_advance():
    assert assign_cycle(20, UserSettings(has_advance=False)) == "day_05"


def test_cycle_for_unresolved_date_uses_default():
    assert cycle_for_date("", UserSettings(), default="day_20") == "day_20"
    assert cycle_for_date("19/03/2025", UserSettings()) == "day_20"


def test_user_settings_validate_pay_days():
    with pytest.raises(ValueError):
        UserSettings(salary_day=0)


def test_installments_validation():
    with pytest.raises(ValueError):
        Installments(current=3, total=2)


def test_missing_fields_and_label():
    c = ImportedTransaction(
        id="x", date="", description="", sender="", amount=None,
        type="expense", category="Outros", cycle="day_05",
    )
    assert c.missing_fields() == ("date", "amount", "description")
    assert not c.is_complete

    done = c.with_changes(date="01/03/2025", amount=Decimal("1"), description="Pão")
    assert done.label == "Pão"
    assert done.is_complete


def test_state_accepts_camel_case_snapshot():
    state = FinancialState.model_validate(
        {
            "settings": {"salaryDay": 6, "hasAdvance": False},
            "categoryMappings": {"loja": "Casa"},
            "cycles": [
                {
                    "id": "c1",
                    "type": "day_05",
                    "debts": [
                        {
                            "id": "d1", "name": "Luz", "totalAmount": 90, "installmentAmount": 90,
                            "dueDate": "10/03/2025", "cycle": "day_05", "unknownKey": 1,
                        }
                    ],
                }
            ],
        }
    )
    assert state.settings.salary_day == 6
    assert state.category_mappings == {"loja": "Casa"}
    assert state.all_debts()[0].installment_amount == 90.0
