"""Tests for spoken number parsing."""

from decimal import Decimal

import pytest
from voice_expense.parsers.spoken_numbers import NumberWords, parse_spoken_number


class TestParseSpokenNumber:
    """Test suite for parse_spoken_number."""

    @pytest.mark.parametrize("phrase, expected", [
        ("five", "5"),
        ("twenty five", "25"),
        ("one hundred and fifty", "150"),
        ("two thousand five hundred", "2500"),
        ("hundred", "100"),
        ("two hundred thousand", "200000"),
        ("twelve point five", "12.5"),
        ("one point zero five", "1.05"),
    ])
    def test_english(self, phrase, expected):
        assert parse_spoken_number(phrase) == Decimal(expected)

    @pytest.mark.parametrize("phrase, expected", [
        ("ek sau", "100"),
        ("paanch sau", "500"),
        ("teen aur char", "7"),
        ("bees aur paanch", "25"),
    ])
    def test_transliterated(self, phrase, expected):
        assert parse_spoken_number(phrase) == Decimal(expected)

    def test_rounds_to_two_decimals(self):
        assert parse_spoken_number("three point one four one") == Decimal("3.14")
        assert parse_spoken_number("two point nine nine five") == Decimal("3.00")

    def test_huge_whole_part_with_fraction(self):
        value = parse_spoken_number("hundred " * 20 + "point one two three")

        assert value is not None
        assert value > Decimal(10) ** 39

    def test_currency_word_ends_scan(self):
        assert parse_spoken_number("twenty dollars five") == Decimal("20")

    @pytest.mark.parametrize("phrase", ["", "zero", "hello there", "and"])
    def test_nothing_usable(self, phrase):
        assert parse_spoken_number(phrase) is None


class TestNumberWords:
    """Lexicon loading."""

    def test_words_longest_first(self):
        words = NumberWords().words

        assert words.index("fourteen") < words.index("four")

    def test_custom_lexicon(self, tmp_path):
        (tmp_path / "number_words.yml").write_text(
            "numbers:\n  uno: 1\n  dos: 2\n  cien: 100\nconnectors: [y]\n", encoding="utf-8")

        words = NumberWords(rules_dir=tmp_path)

        assert words.parse("dos cien y uno") == Decimal("201")
        assert words.parse("twenty") is None
