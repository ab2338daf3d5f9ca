"""Base classes and value types shared by the transcript parsers."""

import re
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Generic, Iterable, List, Optional, Sequence, Tuple, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar('T')

# Characters allowed on either side of a keyword match
BOUNDARY_CHARS = r'\s,;.!?'

_WHITESPACE = re.compile(r'\s+')


@dataclass(frozen=True)
class Span:
    """Half-open [start, end) character range in the normalized text."""
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start

    def overlaps(self, other: 'Span') -> bool:
        return self.start < other.end and other.start < self.end

    def contains(self, other: 'Span') -> bool:
        return self.start <= other.start and other.end <= self.end


def merge_spans(spans: Iterable[Span]) -> Tuple[Span, ...]:
    """Merge overlapping or touching spans into a sorted tuple."""
    merged: List[Span] = []
    for span in sorted(spans, key=lambda s: (s.start, s.end)):
        if merged and span.start <= merged[-1].end:
            last = merged[-1]
            merged[-1] = Span(last.start, max(last.end, span.end))
        else:
            merged.append(span)
    return tuple(merged)


def remove_spans(text: str, spans: Iterable[Span]) -> str:
    """Return the text outside the given spans, pieces joined by single spaces."""
    parts = []
    last_end = 0
    for span in merge_spans(spans):
        if span.start > last_end:
            parts.append(text[last_end:span.start])
        last_end = max(last_end, span.end)
    if last_end < len(text):
        parts.append(text[last_end:])
    return _WHITESPACE.sub(' ', ' '.join(parts)).strip()


def whole_word_pattern(phrase: str) -> 're.Pattern[str]':
    """
    Compile a pattern that only matches phrase as a complete token sequence.

    The match must be flanked by whitespace, sentence punctuation or a string
    edge, so "auto" never fires inside "automobile" or "auto-pay".
    """
    body = r'\s+'.join(re.escape(word) for word in phrase.lower().split())
    return re.compile(rf'(?<![^{BOUNDARY_CHARS}]){body}(?![^{BOUNDARY_CHARS}])')


@dataclass(frozen=True)
class Candidate(Generic[T]):
    """A provisional match for one field, never a final decision."""
    value: T
    raw_text: str
    span: Span
    confidence: float
    priority: int = 0
    kind: str = ""
    tag: Optional[str] = None  # family specific annotation, e.g. currency code


def rank_candidates(candidates: Sequence[Candidate], key: Callable[[Candidate], tuple]) -> Optional[Candidate]:
    """Return the first candidate under the given sort key, or None."""
    if not candidates:
        return None
    return sorted(candidates, key=key)[0]


@dataclass(frozen=True)
class AmountResult:
    value: Optional[Decimal] = None
    span: Optional[Span] = None
    confidence: float = 0.0
    raw_text: Optional[str] = None
    currency: Optional[str] = None

    @property
    def text(self) -> str:
        """Amount rendered for ParsedExpense; empty string when unknown."""
        if self.value is None:
            return ""
        # Plain notation at any magnitude; quantize would overflow the context precision
        integral = self.value.to_integral_value()
        if self.value == integral:
            return format(integral, "f")
        return format(self.value, "f")


@dataclass(frozen=True)
class CategoryResult:
    category: Optional[str] = None
    span: Optional[Span] = None
    confidence: float = 0.0
    raw_text: Optional[str] = None


@dataclass(frozen=True)
class DateResult:
    iso_date: Optional[str] = None
    span: Optional[Span] = None
    raw_text: Optional[str] = None


@dataclass(frozen=True)
class TitleResult:
    text: str
    confidence: float
    used_fallback: bool = False


@dataclass
class TranscriptContext:
    """Context information about one transcript for parsing."""
    text: str
    valid_categories: Sequence[str] = ()
    reference_date: Optional[Union[date, datetime]] = None
    lower_text: str = field(init=False)

    def __post_init__(self):
        if not isinstance(self.text, str):
            self.text = ''
        self.lower_text = self.text.lower()
        if isinstance(self.valid_categories, str):
            self.valid_categories = (self.valid_categories,)
        # Taxonomy is copied so the caller's sequence is never held or mutated
        self.valid_categories = tuple(
            name for name in dict.fromkeys(self.valid_categories or ())
            if isinstance(name, str) and name.strip()
        )
        if self.reference_date is None:
            self.reference_date = date.today()
        elif isinstance(self.reference_date, datetime):
            self.reference_date = self.reference_date.date()


class BaseParser(ABC):
    """Base class for all transcript field parsers."""

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def parse(self, context: TranscriptContext):
        """
        Parse the specific field from transcript context.

        Args:
            context: Transcript context with normalized text and caller inputs

        Returns:
            Field result; an empty result (never None, never raised) when nothing matched
        """
        pass

    def _log_result(self, value, confidence: Optional[float] = None):
        """Log parsing result for debugging."""
        if value is None:
            self.logger.debug("Parsing found no candidate")
        elif confidence is None:
            self.logger.debug(f"Parsed: {value}")
        else:
            self.logger.debug(f"Parsed: {value} (confidence: {confidence:.2f})")
