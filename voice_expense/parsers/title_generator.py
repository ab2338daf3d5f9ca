"""Title generation from the words left after removing amount and date."""

import re
import logging
from typing import Optional

from .base import BaseParser, AmountResult, CategoryResult, DateResult, TitleResult, TranscriptContext, remove_spans

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Expense"
TITLE_CONFIDENCE = 0.9
FALLBACK_CONFIDENCE = 0.5


class TitleGenerator(BaseParser):
    """Builds a short title that keeps the user's own wording."""

    def __init__(self):
        super().__init__()

        # Filler patterns, each applied once in this order
        self.filler_patterns = [re.compile(p, re.IGNORECASE) for p in (
            # Leading action verbs
            r'^(?:i\s+)?(?:spent|added?|recorded?|logged?|expense\s+(?:of|for)?|pay(?:ment)?\s+(?:of|for)?'
            r'|bought|paid\s+for?|cost\s+of?|gave|transferred|sent)\s+',
            # Leading prepositions
            r'^\s*(?:on|for|at|to|in|from|with|via|through)\s+',
            # Trailing hedges
            r'\s*\b(?:like|just|maybe|perhaps|probably|around|about|approximately|roughly|something'
            r'|kind\s+of|sort\s+of|more\s+or\s+less)\s*$',
            # Trailing time words
            r'\s*\b(?:today|yesterday|tonight|this\s+morning|this\s+evening|just\s+now|earlier)\s*$',
        )]

        self.lone_preposition = re.compile(r'^(?:on|for|at|to|in|from)$', re.IGNORECASE)

    def parse(self, context: TranscriptContext) -> TitleResult:
        """Title for a transcript with nothing else extracted."""
        return self.generate(context.lower_text, AmountResult(), DateResult())

    def generate(self, text: str, amount: AmountResult, date: DateResult,
                 category: Optional[CategoryResult] = None) -> TitleResult:
        """
        Generate a title from the normalized transcript.

        Only the amount and date spans are removed; the category keyword stays
        in the title ("orange juice 50tk" -> "Orange Juice").

        Args:
            text: Normalized, lower-cased transcript
            amount: Selected amount, its span is removed
            date: Selected date, its span is removed
            category: Selected category, its phrase is the fallback title

        Returns:
            TitleResult with title-cased text
        """
        spans = [result.span for result in (amount, date) if result.span is not None]
        title = remove_spans(text or "", spans)

        for pattern in self.filler_patterns:
            title = pattern.sub('', title, count=1)
        title = title.strip()

        used_fallback = False
        if not title or self.lone_preposition.match(title):
            used_fallback = True
            title = category.raw_text if category is not None and category.raw_text else DEFAULT_TITLE

        title = capitalize_words(title)
        confidence = FALLBACK_CONFIDENCE if used_fallback else TITLE_CONFIDENCE

        self._log_result(title, confidence)
        return TitleResult(text=title, confidence=confidence, used_fallback=used_fallback)


def capitalize_words(text: str) -> str:
    """Upper-case the first letter of each word and lower-case the rest."""
    return ' '.join(word[:1].upper() + word[1:].lower() for word in text.split(' '))
