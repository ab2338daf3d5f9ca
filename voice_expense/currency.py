"""Currency table: detection of symbols and words, and display formatting."""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from .rules import load_rules, require, RulesError

logger = logging.getLogger(__name__)

RULES_FILE = "currencies.yml"


@dataclass(frozen=True)
class Currency:
    code: str
    name: str
    display: str
    symbols: Tuple[str, ...] = ()
    words: Tuple[str, ...] = ()


class CurrencyTable:
    """Lookup of currencies by code, symbol and spoken word."""

    def __init__(self, rules_dir: Optional[Union[str, Path]] = None):
        data = load_rules(RULES_FILE, rules_dir)

        self.currencies: Dict[str, Currency] = {}
        self._by_symbol: Dict[str, str] = {}
        self._by_word: Dict[str, str] = {}

        for entry in require(data, 'currencies', RULES_FILE):
            if not isinstance(entry, dict) or 'code' not in entry:
                raise RulesError(f"{RULES_FILE}: every currency needs a code")

            code = str(entry['code']).upper()
            currency = Currency(
                code=code,
                name=str(entry.get('name', code)),
                display=str(entry.get('display', code)),
                symbols=tuple(str(s) for s in entry.get('symbols') or ()),
                words=tuple(str(w).lower() for w in entry.get('words') or ()),
            )
            self.currencies[code] = currency

            # First entry wins when two currencies share a symbol (¥)
            for symbol in currency.symbols:
                self._by_symbol.setdefault(symbol, code)
            for word in currency.words:
                self._by_word.setdefault(word, code)

        self.default_code = str(data.get('default', 'USD')).upper()
        if self.default_code not in self.currencies:
            raise RulesError(f"{RULES_FILE}: default currency {self.default_code} is not defined")

    @property
    def symbols(self) -> List[str]:
        return sorted(self._by_symbol, key=len, reverse=True)

    @property
    def words(self) -> List[str]:
        """Currency words, longest first."""
        return sorted(self._by_word, key=len, reverse=True)

    def code_for_symbol(self, symbol: str) -> Optional[str]:
        return self._by_symbol.get(symbol)

    def code_for_word(self, word: str) -> Optional[str]:
        return self._by_word.get(word.lower().rstrip('.'))

    def get(self, code: Optional[str]) -> Currency:
        """Currency for a code, falling back to the default currency."""
        if code and code.upper() in self.currencies:
            return self.currencies[code.upper()]
        return self.currencies[self.default_code]

    def format_amount(self, amount, currency_code: Optional[str] = None) -> str:
        """
        Render an amount for display, e.g. ``$1,234.50``.

        Non-numeric amounts render as zero with the currency prefix.
        """
        currency = self.get(currency_code)
        try:
            value = Decimal(str(amount).replace(',', ''))
        except (InvalidOperation, ValueError):
            return f"{currency.display}0.00"

        if not value.is_finite():
            return f"{currency.display}0.00"

        with localcontext() as ctx:
            ctx.prec = max(ctx.prec, value.adjusted() + 3)
            value = value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        return f"{currency.display}{value:,.2f}"


@lru_cache(maxsize=1)
def default_currency_table() -> CurrencyTable:
    return CurrencyTable()


def format_amount(amount, currency_code: str = "USD") -> str:
    """Format an amount with the packaged currency table."""
    return default_currency_table().format_amount(amount, currency_code)
