"""Category matching against the caller's taxonomy and the keyword alias table."""

import re
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .base import BaseParser, Candidate, CategoryResult, Span, TranscriptContext, rank_candidates, whole_word_pattern
from ..rules import load_rules, require, RulesError

logger = logging.getLogger(__name__)

RULES_FILE = "category_aliases.yml"

EXACT_PRIORITY = 10
EXACT_CONFIDENCE = 1.0
ALIAS_CONFIDENCE = 0.85

# Category reported when nothing in the taxonomy matched
UNCATEGORIZED = "Uncategorized"


@dataclass(frozen=True)
class AliasGroup:
    """Keywords that point at one canonical category."""
    category: str
    priority: int
    keywords: Tuple[Tuple[str, 're.Pattern[str]'], ...]


class CategoryParser(BaseParser):
    """Specialized parser for picking the expense category."""

    def __init__(self, rules_dir: Optional[Union[str, Path]] = None):
        super().__init__()

        data = load_rules(RULES_FILE, rules_dir)
        self.alias_groups = self._compile_groups(require(data, 'groups', RULES_FILE))
        self.legacy_names: Dict[str, str] = {
            str(old): str(new) for old, new in (data.get('legacy_names') or {}).items()
        }

        self.logger.debug(f"Loaded {len(self.alias_groups)} alias groups, "
                          f"{sum(len(g.keywords) for g in self.alias_groups)} keywords")

    @staticmethod
    def _compile_groups(groups) -> List[AliasGroup]:
        compiled = []
        for group in groups:
            if not isinstance(group, dict) or 'category' not in group:
                raise RulesError(f"{RULES_FILE}: every alias group needs a category")

            priority = int(group.get('priority', 0))
            if not 0 <= priority < EXACT_PRIORITY:
                raise RulesError(f"{RULES_FILE}: priority {priority} for {group['category']} "
                                 f"must be below {EXACT_PRIORITY}")

            # Keywords repeated inside one group only need matching once
            keywords = dict.fromkeys(str(k).lower() for k in group.get('keywords') or ())
            compiled.append(AliasGroup(
                category=str(group['category']),
                priority=priority,
                keywords=tuple((k, whole_word_pattern(k)) for k in keywords if k.strip()),
            ))
        return compiled

    def parse(self, context: TranscriptContext) -> CategoryResult:
        """
        Pick the best category from the caller's taxonomy.

        Args:
            context: Transcript context; valid_categories is the taxonomy

        Returns:
            CategoryResult; category is None when nothing matched
        """
        candidates = self.find_candidates(context.lower_text, context.valid_categories)
        best = self.select_best(candidates)

        if best is None:
            self._log_result(None)
            return CategoryResult()

        self._log_result(f"{best.value} via '{best.raw_text}'", best.confidence)
        return CategoryResult(
            category=best.value,
            span=best.span,
            confidence=best.confidence,
            raw_text=best.raw_text,
        )

    def find_candidates(self, text: str, valid_categories: Sequence[str]) -> List[Candidate]:
        """Collect exact-name and alias candidates; only the first occurrence of each counts."""
        candidates: List[Candidate] = []
        if not text or not valid_categories:
            return candidates

        for category in valid_categories:
            match = whole_word_pattern(category).search(text)
            if match:
                candidates.append(Candidate(
                    value=category,
                    raw_text=match.group(0),
                    span=Span(match.start(), match.end()),
                    confidence=EXACT_CONFIDENCE,
                    priority=EXACT_PRIORITY,
                    kind='exact',
                ))

        for group in self.alias_groups:
            target = self.resolve_target(group.category, valid_categories)
            if target is None:
                continue

            for keyword, pattern in group.keywords:
                match = pattern.search(text)
                if match:
                    candidates.append(Candidate(
                        value=target,
                        raw_text=match.group(0),
                        span=Span(match.start(), match.end()),
                        confidence=ALIAS_CONFIDENCE,
                        priority=group.priority,
                        kind='alias',
                    ))

        self.logger.debug(f"Found {len(candidates)} category candidates")
        return candidates

    def resolve_target(self, category: str, valid_categories: Sequence[str]) -> Optional[str]:
        """
        Map an alias group's category onto the caller's taxonomy.

        The canonical name is used when the caller has it; otherwise the
        caller's legacy name for the same category, if any.
        """
        if category in valid_categories:
            return category
        for name in valid_categories:
            if self.legacy_names.get(name) == category:
                return name
        return None

    @staticmethod
    def select_best(candidates: List[Candidate]) -> Optional[Candidate]:
        """Keep the strongest candidate per (category, start) and rank the rest."""
        unique: Dict[Tuple[str, int], Candidate] = {}
        for candidate in candidates:
            key = (candidate.value, candidate.span.start)
            existing = unique.get(key)
            if existing is None or (candidate.priority, candidate.confidence) > (existing.priority, existing.confidence):
                unique[key] = candidate

        return rank_candidates(
            list(unique.values()),
            key=lambda c: (-c.priority, -c.confidence, c.span.start, -c.span.length, c.value),
        )
