"""Voice Expense Extractor - Turn transcribed expense notes into structured records."""

__version__ = "1.0.0"
__author__ = "Voice Expense Team"
__email__ = ""

from .currency import format_amount
from .expense import VoiceExpenseParser, ParsedExpense, ConfidenceScores, parse, parse_batch, validate
from .parsers.category_parser import UNCATEGORIZED
from .parsers.title_generator import DEFAULT_TITLE
from .review import ValidationResult, ReviewQueue, ReviewItem
from .rules import RulesError, load_categories

__all__ = [
    'VoiceExpenseParser',
    'ParsedExpense',
    'ConfidenceScores',
    'ValidationResult',
    'ReviewQueue',
    'ReviewItem',
    'RulesError',
    'UNCATEGORIZED',
    'DEFAULT_TITLE',
    'parse',
    'parse_batch',
    'validate',
    'format_amount',
    'load_categories',
]
