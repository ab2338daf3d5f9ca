"""Voice expense parsing: runs the field parsers and assembles the result."""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from .currency import CurrencyTable
from .parsers import Normalizer, AmountParser, CategoryParser, DateParser, TitleGenerator, NumberWords
from .parsers.base import TranscriptContext
from .parsers.category_parser import UNCATEGORIZED
from .review import ValidationResult, validate_expense

logger = logging.getLogger(__name__)

# Weights of the field confidences in the overall score
WEIGHTS = {'amount': 0.5, 'category': 0.3, 'title': 0.2}

CONFIRMATION_THRESHOLD = 0.7
AMOUNT_CONFIRMATION_THRESHOLD = 0.65


@dataclass(frozen=True)
class ConfidenceScores:
    overall: float = 0.0
    title: float = 0.0
    amount: float = 0.0
    category: float = 0.0


@dataclass(frozen=True)
class ParsedExpense:
    """
    Structured expense extracted from one transcript.

    ``amount`` is a decimal string, empty when it could not be determined.
    ``date`` is an ISO date, or None meaning the caller should use today.
    """
    title: str
    amount: str
    category: str
    date: Optional[str] = None
    confidence: ConfidenceScores = field(default_factory=ConfidenceScores)
    needs_confirmation: bool = True
    raw_transcript: Any = None
    currency: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'amount': self.amount,
            'category': self.category,
            'date': self.date,
            'currency': self.currency,
            'confidence': {
                'overall': self.confidence.overall,
                'title': self.confidence.title,
                'amount': self.confidence.amount,
                'category': self.confidence.category,
            },
            'needs_confirmation': self.needs_confirmation,
            'raw_transcript': self.raw_transcript,
        }


class VoiceExpenseParser:
    """
    Turns a transcribed utterance into a ParsedExpense.

    Rule tables are loaded once here and only read while parsing, so one
    instance can be shared between threads.
    """

    def __init__(self,
                 rules_dir: Optional[Union[str, Path]] = None,
                 uncategorized_label: str = UNCATEGORIZED,
                 day_first: bool = False):
        """
        Initialize the field parsers.

        Args:
            rules_dir: Directory with replacement rule tables; missing files fall back to the packaged ones
            uncategorized_label: Category reported when nothing matched
            day_first: Read ambiguous numeric dates (03/04/2025) as day/month

        Raises:
            RulesError: if a rule table is missing or malformed
            ValueError: if uncategorized_label is blank
        """
        if not uncategorized_label or not uncategorized_label.strip():
            raise ValueError("uncategorized_label must not be blank")

        self.uncategorized_label = uncategorized_label

        currency_table = CurrencyTable(rules_dir)
        self.normalizer = Normalizer(rules_dir)
        self.amount_parser = AmountParser(
            currency_table=currency_table,
            number_words=NumberWords(rules_dir, stop_words=currency_table.words),
        )
        self.category_parser = CategoryParser(rules_dir)
        self.date_parser = DateParser(day_first=day_first)
        self.title_generator = TitleGenerator()

        logger.info(f"Initialized voice expense parser"
                    f"{f' with rules from {rules_dir}' if rules_dir else ''}")

    def parse(self, transcript: Optional[str],
              valid_categories: Sequence[str] = (),
              reference_date: Optional[Union[date, datetime]] = None) -> ParsedExpense:
        """
        Parse one transcript.

        Args:
            transcript: Transcribed utterance, e.g. "50 taka orange juice yesterday"
            valid_categories: Caller's taxonomy; the result category is one of these or the uncategorized label
            reference_date: Anchor for relative dates, defaults to today

        Returns:
            ParsedExpense; never raises for any transcript
        """
        text = self.normalizer.normalize(transcript)
        context = TranscriptContext(text=text, valid_categories=valid_categories, reference_date=reference_date)

        amount = self.amount_parser.parse(context)
        category = self.category_parser.parse(context)
        expense_date = self.date_parser.parse(context)
        title = self.title_generator.generate(context.lower_text, amount, expense_date, category)

        scores = ConfidenceScores(
            overall=round(
                amount.confidence * WEIGHTS['amount']
                + category.confidence * WEIGHTS['category']
                + title.confidence * WEIGHTS['title'], 4),
            title=title.confidence,
            amount=amount.confidence,
            category=category.confidence,
        )

        needs_confirmation = (
            scores.overall < CONFIRMATION_THRESHOLD
            or scores.amount < AMOUNT_CONFIRMATION_THRESHOLD
            or (amount.value is not None and category.category is None)
        )

        parsed = ParsedExpense(
            title=title.text,
            amount=amount.text,
            category=category.category or self.uncategorized_label,
            date=expense_date.iso_date,
            confidence=scores,
            needs_confirmation=needs_confirmation,
            raw_transcript=transcript,
            currency=amount.currency,
        )

        logger.debug(f"Parsed expense: title={parsed.title}, amount={parsed.amount or '?'}, "
                     f"category={parsed.category}, date={parsed.date}, overall={scores.overall}")
        return parsed

    def parse_batch(self, transcripts: Optional[Iterable[Optional[str]]],
                    valid_categories: Sequence[str] = (),
                    reference_date: Optional[Union[date, datetime]] = None) -> List[ParsedExpense]:
        """Parse transcripts independently, results in input order."""
        return [self.parse(t, valid_categories, reference_date) for t in (transcripts or [])]

    def validate(self, parsed: ParsedExpense) -> ValidationResult:
        return validate_expense(parsed, uncategorized_label=self.uncategorized_label)


@lru_cache(maxsize=1)
def default_parser() -> VoiceExpenseParser:
    """Shared parser built from the packaged rule tables."""
    return VoiceExpenseParser()


def parse(transcript: Optional[str],
          valid_categories: Sequence[str] = (),
          reference_date: Optional[Union[date, datetime]] = None) -> ParsedExpense:
    return default_parser().parse(transcript, valid_categories, reference_date)


def parse_batch(transcripts: Optional[Iterable[Optional[str]]],
                valid_categories: Sequence[str] = (),
                reference_date: Optional[Union[date, datetime]] = None) -> List[ParsedExpense]:
    return default_parser().parse_batch(transcripts, valid_categories, reference_date)


def validate(parsed: ParsedExpense) -> ValidationResult:
    return validate_expense(parsed)
