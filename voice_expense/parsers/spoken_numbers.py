"""Spoken number words ("twenty five", "ek sau") to numeric values."""

import logging
from decimal import Decimal, ROUND_HALF_UP
from functools import lru_cache
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Optional, Union

from ..currency import default_currency_table
from ..rules import load_rules, require, RulesError

logger = logging.getLogger(__name__)

RULES_FILE = "number_words.yml"

HUNDRED = 100
THOUSAND = 1000
CENTS = Decimal("0.01")


class NumberWords:
    """
    Lexicon-driven parser for numbers spoken as words.

    Tokens are read left to right. Ones and tens add to the current group,
    "hundred" multiplies the group, "thousand" multiplies it and flushes it
    into the running total. After "point" or "dot" single digits are read as
    fractional digits. A stop word (a currency name) ends the scan.
    """

    def __init__(self, rules_dir: Optional[Union[str, Path]] = None,
                 stop_words: Iterable[str] = ()):
        data = load_rules(RULES_FILE, rules_dir)

        numbers = require(data, 'numbers', RULES_FILE)
        if not isinstance(numbers, dict) or not numbers:
            raise RulesError(f"{RULES_FILE}: 'numbers' must be a non-empty mapping")

        self.values: Dict[str, int] = {str(word).lower(): int(value) for word, value in numbers.items()}
        self.connectors: FrozenSet[str] = frozenset(w.lower() for w in data.get('connectors', []))
        self.decimal_points: FrozenSet[str] = frozenset(w.lower() for w in data.get('decimal_points', []))
        self.stop_words: FrozenSet[str] = frozenset(w.lower() for w in stop_words)

    @property
    def words(self):
        """Number words, longest first, for building alternations."""
        return sorted(self.values, key=len, reverse=True)

    def parse(self, phrase: str) -> Optional[Decimal]:
        """
        Convert a spoken phrase to a value rounded to two decimals.

        Returns:
            Positive Decimal, or None when the phrase has no usable number
        """
        tokens = phrase.lower().split() if phrase else []

        total = 0
        current = 0
        fraction = ""

        i = 0
        while i < len(tokens):
            token = tokens[i]
            i += 1

            if token in self.connectors:
                continue

            if token in self.decimal_points:
                total += current
                current = 0
                while i < len(tokens) and self.values.get(tokens[i], 10) < 10:
                    fraction += str(self.values[tokens[i]])
                    i += 1
                continue

            if token in self.stop_words:
                break

            value = self.values.get(token)
            if value is None:
                continue

            if value == HUNDRED:
                current = (current or 1) * HUNDRED
            elif value == THOUSAND:
                total += (current or 1) * THOUSAND
                current = 0
            else:
                current += value

        result = Decimal(total + current)
        if fraction:
            fractional = Decimal(f"0.{fraction}")
            if len(fraction) > 2:
                # Only the fraction is rounded so huge whole parts stay within context precision
                fractional = fractional.quantize(CENTS, rounding=ROUND_HALF_UP)
            result += fractional

        return result if result > 0 else None


@lru_cache(maxsize=1)
def _default_number_words() -> NumberWords:
    return NumberWords(stop_words=default_currency_table().words)


def parse_spoken_number(phrase: str) -> Optional[Decimal]:
    """Parse a spoken number with the packaged lexicon."""
    return _default_number_words().parse(phrase)
