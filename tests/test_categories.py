from decimal import Decimal

from statement_import.categories import (
    DEFAULT_CATEGORY,
    InMemoryCategoryStore,
    classify,
    learn,
    normalize_sender,
    specific_key,
)


def test_specific_mapping_wins_over_generic():
    mappings = {"padaria joao-12.00": "Lazer", "padaria joao": "Mercado"}
    assert classify("Padaria Joao", Decimal("12.00"), "", mappings) == "Lazer"
    assert classify("Padaria Joao", Decimal("13.00"), "", mappings) == "Mercado"


def test_generic_mapping_is_case_insensitive():
    assert classify("PADARIA JOAO", Decimal("5"), "", {"padaria joao": "Mercado"}) == "Mercado"


def test_mapping_wins_over_keyword_table():
    assert classify("Uber Eats", Decimal("30"), "", {"uber eats": "Lazer"}) == "Lazer"


def test_keyword_table_matches_sender_and_description():
    assert classify("UBER *TRIP", Decimal("10"), "") == "Transporte"
    assert classify("Pagamento", Decimal("10"), "compra DROGASIL 123") == "Saúde"


def test_keyword_table_order_first_hit_wins():
    # "posto" (Transporte) precedes "mercado" (Mercado) in the table.
    assert classify("Posto do Mercado", Decimal("10"), "") == "Transporte"


def test_fallback_category():
    assert classify("Fulano", Decimal("10"), "xyz") == DEFAULT_CATEGORY
    assert classify("Fulano", None, "xyz", fallback="Diversos") == "Diversos"


def test_custom_keyword_table():
    keywords = (("padoca", "Mercado"),)
    assert classify("Padoca Central", Decimal("8"), "", keywords=keywords) == "Mercado"
    assert classify("Uber", Decimal("8"), "", keywords=keywords) == DEFAULT_CATEGORY


def test_normalize_sender_strips_references_and_dates():
    assert normalize_sender("PIX 12345678901 05/03 Docto. Loja") == "PIX Loja"
    assert normalize_sender("Cpf 123.456.789-00 Maria") == "Cpf Maria"
    assert normalize_sender(None) == ""


def test_normalize_sender_caps_length():
    assert len(normalize_sender("A" * 80)) == 40


def test_specific_key_uses_two_decimals_and_magnitude():
    assert specific_key("Loja X", Decimal("-12.5")) == "loja x-12.50"


def test_learn_is_pure_and_idempotent():
    original: dict[str, str] = {}
    once = learn(original, "  Loja  ", "Casa")
    assert original == {}
    assert once == {"loja": "Casa"}
    assert learn(once, "Loja", "Casa") == once


def test_learn_with_amount_writes_both_keys():
    updated = learn({}, "Loja", "Casa", amount=Decimal("10"))
    assert updated == {"loja": "Casa", "loja-10.00": "Casa"}


def test_learn_ignores_blank_sender_or_category():
    assert learn({"a": "b"}, "", "Casa") == {"a": "b"}
    assert learn({"a": "b"}, "Loja", "") == {"a": "b"}


def test_in_memory_store_round_trip():
    store = InMemoryCategoryStore({"x": "y"})
    assert store.learn("Loja", "Casa") == {"x": "y", "loja": "Casa"}
    snapshot = store.get()
    snapshot["mutated"] = "1"
    assert "mutated" not in store.get()
