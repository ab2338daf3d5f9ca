"""Tests for the currency table and amount formatting."""

from decimal import Decimal

import pytest
from voice_expense.currency import CurrencyTable, format_amount
from voice_expense.rules import RulesError


class TestFormatAmount:
    """Test suite for format_amount."""

    @pytest.mark.parametrize("amount, code, expected", [
        (1234.5, "USD", "$1,234.50"),
        ("50", "BDT", "৳50.00"),
        (Decimal("2.345"), "USD", "$2.35"),
        ("1,000", "USD", "$1,000.00"),
        ("12.50", "EUR", "€12.50"),
    ])
    def test_formatting(self, amount, code, expected):
        assert format_amount(amount, code) == expected

    def test_huge_amount(self):
        assert format_amount("9" * 30, "USD") == "$" + "999," * 9 + "999.00"

    def test_unknown_code_uses_default(self):
        assert format_amount(5, "XYZ") == "$5.00"

    @pytest.mark.parametrize("amount", ["abc", None, float("nan"), ""])
    def test_non_numeric_renders_zero(self, amount):
        assert format_amount(amount, "GBP") == "£0.00"


class TestCurrencyTable:
    """Lookup by symbol and word."""

    def setup_method(self):
        """Set up test fixtures."""
        self.table = CurrencyTable()

    def test_word_lookup(self):
        assert self.table.code_for_word("Taka") == "BDT"
        assert self.table.code_for_word("rs.") == "INR"
        assert self.table.code_for_word("shells") is None

    def test_shared_symbol_goes_to_first_entry(self):
        assert self.table.code_for_symbol("¥") == "JPY"

    def test_words_longest_first(self):
        words = self.table.words

        assert words.index("dollars") < words.index("dollar")

    def test_undefined_default_rejected(self, tmp_path):
        (tmp_path / "currencies.yml").write_text(
            "default: XYZ\ncurrencies:\n  - code: USD\n    display: $\n", encoding="utf-8")

        with pytest.raises(RulesError):
            CurrencyTable(rules_dir=tmp_path)
