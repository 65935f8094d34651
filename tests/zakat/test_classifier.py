"""Tests for barakah.zakat.classifier."""

from decimal import Decimal

import pytest

from barakah.core.exceptions import InvalidInputError
from barakah.zakat.classifier import (
    ASSET_USE_QUESTION,
    COMMON_LINE_ITEMS,
    DEPOSIT_QUESTION,
    FINANCING_QUESTION,
    GENERIC_QUESTION,
    TERM_QUESTION,
    classify_category_entry,
    classify_line_item,
    create_category_entry,
    create_common_items,
    create_gold_item,
    create_line_item,
    normalize_name,
)
from barakah.zakat.currency import CurrencyNormalizer
from barakah.zakat.models import BusinessCategory, CategoryEntry, Classification, GoldKarat

Z = Classification.ZAKATABLE
D = Classification.DEDUCTIBLE
E = Classification.EXEMPT
ND = Classification.NOT_DEDUCTIBLE
NC = Classification.NEEDS_CLARIFICATION


class TestNormalizeName:
    def test_collapses_separators(self):
        assert normalize_name("  Short-term   Investments ") == "short term investments"
        assert normalize_name("Accounts_Receivable/Net") == "accounts receivable net"


class TestArchetypes:
    def test_cash_on_hand(self):
        result = classify_line_item("Cash on Hand")
        assert result.classification is Z
        assert "liquid" in result.islamic_ruling

    def test_bank_loan_is_not_deductible(self):
        result = classify_line_item("Bank Loan")
        assert result.classification is ND
        assert result.clarification_question is None

    def test_short_term_investments_ask_about_term(self):
        result = classify_line_item("Short-term Investments")
        assert result.classification is NC
        assert result.clarification_question == TERM_QUESTION

    def test_accounts_payable_asks_about_financing(self):
        result = classify_line_item("Accounts Payable")
        assert result.classification is NC
        assert result.clarification_question == FINANCING_QUESTION

    def test_security_deposits_ask_who_paid(self):
        result = classify_line_item("security deposits")
        assert result.classification is NC
        assert result.clarification_question == DEPOSIT_QUESTION

    @pytest.mark.parametrize("name", ["Zakat Already Paid", "urgent debts"])
    def test_individual_deductions(self, name):
        result = classify_line_item(name)
        assert result.classification is D
        assert result.clarification_question is None

    @pytest.mark.parametrize("name", ["Gold Bullion", "Silver coins"])
    def test_precious_metals_are_zakatable(self, name):
        assert classify_line_item(name).classification is Z

class TestKeywordRules:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("Petty Cash", Z),
            ("ACCOUNTS-RECEIVABLE", Z),
            ("Inventory - Finished Goods", Z),
            ("Raw Materials", Z),
            ("Sukuk Al-Ijara", Z),
            ("Trade Payables", D),
            ("Wages Payable", D),
            ("VAT Payable", D),
            ("Murabaha Payable", D),
            ("Office Furniture", E),
            ("Land", E),
            ("Goodwill", E),
            ("Retained Earnings", E),
            ("Home Mortgage", ND),
            ("Long-term Debt", ND),
            ("Interest Payable", ND),
        ],
    )
    def test_outcome(self, name, expected):
        assert classify_line_item(name).classification is expected

    def test_asset_use_questions_name_the_asset(self):
        assert classify_line_item("Delivery Equipment").clarification_question == ASSET_USE_QUESTION.format(
            noun="equipment"
        )
        assert classify_line_item("Real Estate").clarification_question == ASSET_USE_QUESTION.format(
            noun="property"
        )
        assert classify_line_item("Company Fleet").clarification_question == ASSET_USE_QUESTION.format(
            noun="vehicle"
        )

    def test_unrecognized_gets_generic_question(self):
        result = classify_line_item("Mystery Widget")
        assert result.classification is NC
        assert result.clarification_question == GENERIC_QUESTION
        assert result.islamic_ruling is None

    def test_keyword_needs_word_start(self):
        # "ppe" must not match inside "shipper"
        assert classify_line_item("Shipper fees").clarification_question == GENERIC_QUESTION
        assert classify_line_item("PPE - net").classification is E

    def test_every_result_has_ruling_or_question(self):
        for name in ("Cash", "Equipment", "Bank Loan", "Gizmo", "Tax Payable", "Deposit"):
            result = classify_line_item(name)
            if result.classification is NC:
                assert result.clarification_question
            else:
                assert result.islamic_ruling


class TestCategoryEntries:
    def test_islamic_current_liability_is_deductible(self):
        result = classify_category_entry("Murabaha Facility", BusinessCategory.CURRENT_LIABILITIES, True)
        assert result.classification is D

    def test_conventional_current_liability_is_not_deductible(self):
        # Even a name that would be deductible on its own
        result = classify_category_entry("Accounts Payable", BusinessCategory.CURRENT_LIABILITIES, False)
        assert result.classification is ND

    @pytest.mark.parametrize("islamic", [True, False])
    def test_long_term_liabilities_never_deductible(self, islamic):
        result = classify_category_entry("Term Loan", BusinessCategory.LONG_TERM_LIABILITIES, islamic)
        assert result.classification is ND

    def test_term_type_settles_investments(self):
        short = classify_category_entry("Investment Fund", BusinessCategory.CURRENT_ASSETS, term_type="short")
        long = classify_category_entry("Investment Fund", BusinessCategory.CURRENT_ASSETS, term_type="long")
        assert short.classification is Z
        assert long.classification is E

    def test_fixed_assets_default_to_exempt(self):
        assert classify_category_entry("Building", BusinessCategory.FIXED_ASSETS).classification is E
        assert classify_category_entry("Gizmo", BusinessCategory.FIXED_ASSETS).classification is E

    def test_fixed_assets_keep_specific_questions(self):
        result = classify_category_entry("Equipment", BusinessCategory.FIXED_ASSETS)
        assert result.classification is NC
        assert result.clarification_question == ASSET_USE_QUESTION.format(noun="equipment")

    def test_liability_name_under_current_assets_asks(self):
        result = classify_category_entry("Wages Payable", BusinessCategory.CURRENT_ASSETS)
        assert result.classification is NC
        assert result.clarification_question == GENERIC_QUESTION

    def test_current_asset_uses_keyword_rules(self):
        assert classify_category_entry("Inventory", BusinessCategory.CURRENT_ASSETS).classification is Z


class TestFactories:
    def test_create_line_item(self):
        item = create_line_item("Bank Loan", "10000")
        assert item.classification is ND
        assert item.amount == Decimal("10000")
        assert item.islamic_ruling

    def test_create_line_item_converts(self):
        item = create_line_item("Cash", 100, "EUR", normalizer=CurrencyNormalizer("USD"))
        assert item.currency == "EUR"
        assert item.amount == Decimal("100")
        assert item.converted_amount == Decimal("100") * (Decimal("1") / Decimal("0.92"))

    def test_create_category_entry(self):
        entry = create_category_entry(
            "Murabaha", 5000, "current_liabilities", is_islamic_financing=True, description="Supplier"
        )
        assert isinstance(entry, CategoryEntry)
        assert entry.classification is D
        assert entry.description == "Supplier"

    def test_common_items(self):
        items = create_common_items("GBP")
        assert len(items) == len(COMMON_LINE_ITEMS) == 20
        assert all(item.amount == 0 and item.currency == "GBP" for item in items)
        assert len({item.name for item in items}) == 20
        by_name = {item.name: item for item in items}
        assert by_name["Bank Loan"].classification is ND
        assert by_name["Cash on Hand"].classification is Z
        assert by_name["Security Deposits"].classification is NC


class TestGoldItems:
    @pytest.mark.parametrize(
        "karat, expected",
        [
            ("24k", Decimal("3540.00")),
            ("21k", Decimal("3097.500")),
            (GoldKarat.K18, Decimal("2655.000")),
        ],
    )
    def test_valued_by_purity(self, karat, expected):
        item = create_gold_item(40, karat, "88.50")
        assert item.amount == expected
        assert item.classification is Z
        assert item.clarification_question is None

    def test_default_name(self):
        assert create_gold_item(10, "21k", 100).name == "Gold (21k)"
        assert create_gold_item(10, "21k", 100, name="Bangles").name == "Bangles"

    def test_converted_with_normalizer(self):
        item = create_gold_item(10, "24k", 100, "EUR", normalizer=CurrencyNormalizer("EUR"))
        assert item.converted_amount == Decimal("1000")

    def test_unknown_karat(self):
        with pytest.raises(InvalidInputError, match="Unknown gold karat"):
            create_gold_item(10, "14k", 100)

    def test_negative_weight(self):
        with pytest.raises(InvalidInputError):
            create_gold_item(-1, "24k", 100)
