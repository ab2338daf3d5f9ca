"""Amount parsing across symbol, currency word, spoken and bare number forms."""

import re
import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import List, Optional, Union

from .base import BaseParser, AmountResult, Candidate, Span, TranscriptContext, rank_candidates
from .spoken_numbers import NumberWords
from ..currency import CurrencyTable

logger = logging.getLogger(__name__)

# Digits with optional comma thousands separators and up to two decimals
NUMBER = r'(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d{1,2})?'

MIN_BARE_INTEGER = 1
MAX_BARE_INTEGER = 1_000_000
THOUSAND = Decimal(1000)


def _to_decimal(number: str) -> Optional[Decimal]:
    try:
        return Decimal(number.replace(',', ''))
    except InvalidOperation:
        return None


class AmountParser(BaseParser):
    """Specialized parser for extracting the spoken amount of an expense."""

    def __init__(self, rules_dir: Optional[Union[str, Path]] = None,
                 currency_table: Optional[CurrencyTable] = None,
                 number_words: Optional[NumberWords] = None):
        super().__init__()

        self.currency_table = currency_table or CurrencyTable(rules_dir)
        self.number_words = number_words or NumberWords(rules_dir, stop_words=self.currency_table.words)

        symbols = '|'.join(re.escape(s) for s in self.currency_table.symbols)
        currency_words = '|'.join(re.escape(w) for w in self.currency_table.words)
        number_words = '|'.join(re.escape(w) for w in self.number_words.words)
        joiners = '|'.join(re.escape(w) for w in sorted(self.number_words.connectors | self.number_words.decimal_points))

        word = rf'(?:{number_words})\b'
        spoken = rf'{word}(?:\s+(?:(?:{joiners})\s+)?{word})*'

        # Amount families in discovery order (kind, pattern, confidence)
        self.amount_patterns = [
            ('symbol', re.compile(rf'(?P<symbol>{symbols})\s*(?P<number>{NUMBER})(?!\d)'), 0.95),
            ('explicit', re.compile(rf'(?<![\d.,])(?P<number>{NUMBER})\s*(?P<word>{currency_words})\b'), 0.95),
            ('spoken', re.compile(rf'\b(?P<spoken>{spoken})(?:\s+(?P<word>{currency_words}))?\b'), 0.85),
            ('k_notation', re.compile(r'(?<![\d.,])(?P<number>\d+(?:\.\d+)?)\s*k\b'), 0.90),
            ('decimal', re.compile(r'\b(?P<number>(?:\d{1,3}(?:,\d{3})+|\d+)\.\d{1,2})\b'), 0.75),
            ('integer', re.compile(r'\b(?P<number>\d{1,3}(?:,\d{3})+|\d+)\b'), 0.60),
        ]

        if not symbols:
            self.amount_patterns = [p for p in self.amount_patterns if p[0] != 'symbol']
        if not currency_words:
            self.amount_patterns = [p for p in self.amount_patterns if p[0] != 'explicit']

    def parse(self, context: TranscriptContext) -> AmountResult:
        """
        Extract the most likely amount from the transcript.

        Args:
            context: Transcript context with the normalized text

        Returns:
            AmountResult; value is None when no candidate was found
        """
        candidates = self.find_candidates(context.lower_text)
        best = self.select_best(candidates)

        if best is None:
            self._log_result(None)
            return AmountResult()

        self._log_result(best.value, best.confidence)
        return AmountResult(
            value=best.value,
            span=best.span,
            confidence=best.confidence,
            raw_text=best.raw_text,
            currency=best.tag,
        )

    def find_candidates(self, text: str) -> List[Candidate]:
        """Collect amount candidates from every family, in family order."""
        candidates: List[Candidate] = []

        for kind, pattern, confidence in self.amount_patterns:
            for match in pattern.finditer(text):
                span = Span(match.start(), match.end())

                # Bare numbers already covered by a stronger family are skipped
                if kind in ('decimal', 'integer') and any(c.span.contains(span) for c in candidates):
                    continue

                value = self._match_value(kind, match)
                if value is None:
                    continue
                if kind == 'integer' and not MIN_BARE_INTEGER <= value <= MAX_BARE_INTEGER:
                    continue

                candidates.append(Candidate(
                    value=value,
                    raw_text=match.group(0),
                    span=span,
                    confidence=confidence,
                    kind=kind,
                    tag=self._match_currency(match),
                ))

        self.logger.debug(f"Found {len(candidates)} amount candidates")
        return candidates

    @staticmethod
    def select_best(candidates: List[Candidate]) -> Optional[Candidate]:
        """Drop same-value overlapping duplicates, then prefer confidence and position."""
        unique: List[Candidate] = []
        for candidate in candidates:
            if not any(u.value == candidate.value and u.span.overlaps(candidate.span) for u in unique):
                unique.append(candidate)

        return rank_candidates(unique, key=lambda c: (-c.confidence, c.span.start))

    def _match_value(self, kind: str, match: 're.Match[str]') -> Optional[Decimal]:
        if kind == 'spoken':
            return self.number_words.parse(match.group('spoken'))

        value = _to_decimal(match.group('number'))
        if value is None:
            return None
        if kind == 'k_notation':
            value = value * THOUSAND
        return value if value > 0 else None

    def _match_currency(self, match: 're.Match[str]') -> Optional[str]:
        groups = match.groupdict()
        if groups.get('symbol'):
            return self.currency_table.code_for_symbol(groups['symbol'])
        if groups.get('word'):
            return self.currency_table.code_for_word(groups['word'])
        return None
