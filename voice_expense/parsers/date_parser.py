"""Date parsing for relative ("yesterday", "last friday") and absolute expressions."""

import re
import logging
from datetime import date, timedelta
from typing import List, Optional

from dateutil.relativedelta import relativedelta, MO, TU, WE, TH, FR, SA, SU

from .base import BaseParser, Candidate, DateResult, Span, TranscriptContext, rank_candidates

logger = logging.getLogger(__name__)

MONTHS = [
    ('january', 'jan'), ('february', 'feb'), ('march', 'mar'), ('april', 'apr'),
    ('may', 'may'), ('june', 'jun'), ('july', 'jul'), ('august', 'aug'),
    ('september', 'sept|sep'), ('october', 'oct'), ('november', 'nov'), ('december', 'dec'),
]

WEEKDAYS = {
    'monday': MO, 'tuesday': TU, 'wednesday': WE, 'thursday': TH,
    'friday': FR, 'saturday': SA, 'sunday': SU,
}

MIN_YEAR = 2000
MAX_YEAR = 2100
MAX_DAYS_AGO = 365

_MONTH_LOOKUP = {}
for _number, (_name, _short) in enumerate(MONTHS, 1):
    _MONTH_LOOKUP[_name] = _number
    for _abbr in _short.split('|'):
        _MONTH_LOOKUP[_abbr] = _number

_MONTH = '|'.join(sorted(_MONTH_LOOKUP, key=len, reverse=True))
_ORDINAL = r'(?:st|nd|rd|th)?'
_WEEKDAY = '|'.join(WEEKDAYS)


def most_recent_weekday(reference: date, weekday) -> date:
    """Most recent past occurrence of weekday, 1-7 days before reference."""
    return reference + relativedelta(days=-1, weekday=weekday(-1))


class DateParser(BaseParser):
    """Specialized parser for extracting the expense date."""

    def __init__(self, day_first: bool = False):
        super().__init__()
        self.day_first = day_first

        # Relative expressions (pattern, offset from reference date)
        self.relative_patterns: List[tuple] = [
            (r'\bday\s+before\s+yesterday\b', lambda ref, m: ref - timedelta(days=2)),
            (r'\bday\s+after\s+tomorrow\b', lambda ref, m: ref + timedelta(days=2)),
            (r'\byesterday\b', lambda ref, m: ref - timedelta(days=1)),
            (r'\btoday\b', lambda ref, m: ref),
            (r'\btomorrow\b', lambda ref, m: ref + timedelta(days=1)),
            (r'\b(?:this\s+morning|this\s+evening|tonight|just\s+now|earlier\s+today)\b', lambda ref, m: ref),
            (r'\blast\s+night\b', lambda ref, m: ref - timedelta(days=1)),
            (r'\b(\d+)\s+days?\s+ago\b', self._days_ago),
            (r'\b(?:a|one)\s+week\s+ago\b', lambda ref, m: ref - timedelta(days=7)),
            (r'\blast\s+week\b', lambda ref, m: ref - timedelta(days=7)),
            (rf'\blast\s+({_WEEKDAY})\b', self._weekday),
            (rf'\b(?:on\s+)?({_WEEKDAY})\b', self._weekday),
        ]

        # Absolute expressions (pattern, builder); builders return None for impossible dates
        self.absolute_patterns: List[tuple] = [
            (rf'\b(\d{{1,2}}){_ORDINAL}\s+({_MONTH})\b(?:,?\s+(\d{{4}})\b)?', self._day_month),
            (rf'\b({_MONTH})\s+(\d{{1,2}}){_ORDINAL}\b(?:,?\s+(\d{{4}})\b)?', self._month_day),
            (r'\b(\d{1,2})[/-](\d{1,2})[/-](\d{4})\b', self._numeric),
            (r'\b(\d{4})[/-](\d{1,2})[/-](\d{1,2})\b', self._iso),
        ]

        self.relative_patterns = [(re.compile(p), f) for p, f in self.relative_patterns]
        self.absolute_patterns = [(re.compile(p), f) for p, f in self.absolute_patterns]

    def parse(self, context: TranscriptContext) -> DateResult:
        """
        Extract the expense date as an ISO string.

        Args:
            context: Transcript context with reference_date for relative expressions

        Returns:
            DateResult; iso_date is None when the transcript names no date
        """
        candidates = self.find_candidates(context.lower_text, context.reference_date)
        best = rank_candidates(candidates, key=lambda c: (c.span.start, -c.span.length))

        if best is None:
            self._log_result(None)
            return DateResult()

        self._log_result(f"{best.value} from '{best.raw_text}'")
        return DateResult(iso_date=best.value, span=best.span, raw_text=best.raw_text)

    def find_candidates(self, text: str, reference: date) -> List[Candidate]:
        candidates = []
        for kind, patterns in (('relative', self.relative_patterns), ('absolute', self.absolute_patterns)):
            for pattern, builder in patterns:
                for match in pattern.finditer(text):
                    resolved = builder(reference, match)
                    if resolved is None:
                        continue
                    candidates.append(Candidate(
                        value=resolved.isoformat(),
                        raw_text=match.group(0),
                        span=Span(match.start(), match.end()),
                        confidence=1.0,
                        kind=kind,
                    ))
        return candidates

    @staticmethod
    def _days_ago(reference: date, match) -> Optional[date]:
        days = int(match.group(1))
        if not 1 <= days <= MAX_DAYS_AGO:
            return None
        return reference - timedelta(days=days)

    @staticmethod
    def _weekday(reference: date, match) -> date:
        return most_recent_weekday(reference, WEEKDAYS[match.group(1)])

    def _day_month(self, reference: date, match) -> Optional[date]:
        return self._named(match.group(3), _MONTH_LOOKUP[match.group(2)], match.group(1), reference)

    def _month_day(self, reference: date, match) -> Optional[date]:
        return self._named(match.group(3), _MONTH_LOOKUP[match.group(1)], match.group(2), reference)

    def _named(self, year, month, day, reference: date) -> Optional[date]:
        """Named-month dates ignore an out-of-range year and use the reference year."""
        resolved = self._build(year, month, day, reference)
        if resolved is None and year is not None and not MIN_YEAR <= int(year) <= MAX_YEAR:
            self.logger.debug(f"Ignoring out-of-range year {year}")
            resolved = self._build(None, month, day, reference)
        return resolved

    def _numeric(self, reference: date, match) -> Optional[date]:
        first, second, year = match.group(1), match.group(2), match.group(3)
        orders = [(second, first), (first, second)] if self.day_first else [(first, second), (second, first)]
        for month, day in orders:
            resolved = self._build(year, month, day, reference)
            if resolved is not None:
                return resolved
        return None

    def _iso(self, reference: date, match) -> Optional[date]:
        return self._build(match.group(1), match.group(2), match.group(3), reference)

    @staticmethod
    def _build(year, month, day, reference: date) -> Optional[date]:
        """Construct a calendar date, rejecting impossible ones and out-of-range years."""
        if year is None:
            year = reference.year
        else:
            year = int(year)
            if not MIN_YEAR <= year <= MAX_YEAR:
                return None
        try:
            return date(year, int(month), int(day))
        except ValueError:
            return None
