"""Transcript parsing components - one focused parser per expense field."""

from .normalizer import Normalizer
from .amount_parser import AmountParser
from .category_parser import CategoryParser
from .date_parser import DateParser
from .title_generator import TitleGenerator
from .spoken_numbers import NumberWords, parse_spoken_number

__all__ = [
    'Normalizer', 'AmountParser', 'CategoryParser', 'DateParser', 'TitleGenerator',
    'NumberWords', 'parse_spoken_number',
]
