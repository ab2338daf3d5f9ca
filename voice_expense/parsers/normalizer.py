"""Transcript normalization: fixes common speech-to-text mishears."""

import re
import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

from ..rules import load_rules, require, RulesError

logger = logging.getLogger(__name__)

RULES_FILE = "normalization.yml"

_WHITESPACE = re.compile(r'\s+')


class Normalizer:
    """Applies the ordered rewrite rules from normalization.yml."""

    def __init__(self, rules_dir: Optional[Union[str, Path]] = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.rules = self._compile(load_rules(RULES_FILE, rules_dir))
        self.logger.debug(f"Loaded {len(self.rules)} normalization rules")

    @staticmethod
    def _compile(data: dict) -> List[Tuple['re.Pattern[str]', str]]:
        compiled = []
        for entry in require(data, 'rules', RULES_FILE):
            if not isinstance(entry, dict) or 'replacement' not in entry or not entry.get('variants'):
                raise RulesError(f"{RULES_FILE}: every rule needs a replacement and variants")

            # Longer variants first so "take a" wins over a shorter prefix
            variants = sorted((str(v) for v in entry['variants']), key=len, reverse=True)
            alternation = '|'.join(
                r'\s+'.join(re.escape(word) for word in variant.split())
                for variant in variants
            )
            pattern = re.compile(rf'\b(?:{alternation})\b', re.IGNORECASE)
            compiled.append((pattern, str(entry['replacement'])))
        return compiled

    def normalize(self, text: Optional[str]) -> str:
        """
        Rewrite known mishears to canonical tokens and tidy whitespace.

        Args:
            text: Raw transcript, may be None

        Returns:
            Normalized transcript; empty string for empty or non-string input
        """
        if not text or not isinstance(text, str):
            return ""

        normalized = text.strip()
        for pattern, replacement in self.rules:
            normalized = pattern.sub(replacement, normalized)

        normalized = _WHITESPACE.sub(' ', normalized).strip()
        if normalized != text:
            self.logger.debug(f"Normalized '{text}' -> '{normalized}'")
        return normalized
