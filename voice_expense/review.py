"""Validation of parsed expenses and a review queue for uncertain ones."""

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from .parsers.category_parser import UNCATEGORIZED
from .parsers.title_generator import DEFAULT_TITLE

if TYPE_CHECKING:
    from .expense import ParsedExpense

logger = logging.getLogger(__name__)

INVALID_AMOUNT = "Invalid or missing amount"
MISSING_TITLE = "Missing descriptive title"
MISSING_CATEGORY = "Missing category"
LOW_CONFIDENCE = "Low confidence - please review"


@dataclass(frozen=True)
class ValidationResult:
    """Semantic problems with a parsed expense, reported as data."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {'is_valid': self.is_valid, 'errors': list(self.errors), 'warnings': list(self.warnings)}


def _positive_amount(amount: Optional[str]) -> bool:
    if not amount:
        return False
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        return False
    return value.is_finite() and value > 0


def validate_expense(parsed: 'ParsedExpense', uncategorized_label: str = UNCATEGORIZED) -> ValidationResult:
    """
    Check a parsed expense for missing or placeholder fields.

    Args:
        parsed: Result of VoiceExpenseParser.parse, left untouched
        uncategorized_label: Category value that counts as "no category"

    Returns:
        ValidationResult with errors and the low-confidence warning
    """
    errors = []

    if not _positive_amount(parsed.amount):
        errors.append(INVALID_AMOUNT)

    if not parsed.title or parsed.title == DEFAULT_TITLE:
        errors.append(MISSING_TITLE)

    if not parsed.category or parsed.category == uncategorized_label:
        errors.append(MISSING_CATEGORY)

    warnings = [LOW_CONFIDENCE] if parsed.needs_confirmation else []

    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)


@dataclass
class ReviewItem:
    """Represents an expense that needs manual review."""
    transcript: str
    reason: str
    suggested_title: Optional[str] = None
    suggested_amount: Optional[str] = None
    suggested_category: Optional[str] = None
    suggested_date: Optional[str] = None
    confidence_scores: Optional[Dict[str, float]] = None


class ReviewQueue:
    """Collects parsed expenses that failed validation or need confirmation."""

    def __init__(self, uncategorized_label: str = UNCATEGORIZED):
        self.items: List[ReviewItem] = []
        self.uncategorized_label = uncategorized_label

    def add_item(self,
                 transcript: str,
                 reason: str,
                 suggested_title: Optional[str] = None,
                 suggested_amount: Optional[str] = None,
                 suggested_category: Optional[str] = None,
                 suggested_date: Optional[str] = None,
                 confidence_scores: Optional[Dict[str, float]] = None):
        """Add an item to the review queue."""
        item = ReviewItem(
            transcript=transcript,
            reason=reason,
            suggested_title=suggested_title,
            suggested_amount=suggested_amount,
            suggested_category=suggested_category,
            suggested_date=suggested_date,
            confidence_scores=confidence_scores,
        )
        self.items.append(item)
        logger.debug(f"Added to review queue: '{transcript}' - {reason}")

    def add_from_expense(self, parsed: 'ParsedExpense',
                         validation: Optional[ValidationResult] = None) -> Optional[ValidationResult]:
        """
        Queue a parsed expense when it is invalid or flagged for confirmation.

        Returns:
            The validation result when the expense was queued, otherwise None
        """
        if validation is None:
            validation = validate_expense(parsed, self.uncategorized_label)

        if validation.is_valid and not validation.warnings:
            return None

        reason = "; ".join(validation.errors + validation.warnings)
        self.add_item(
            transcript=str(parsed.raw_transcript or ""),
            reason=reason,
            suggested_title=parsed.title,
            suggested_amount=parsed.amount or None,
            suggested_category=parsed.category,
            suggested_date=parsed.date,
            confidence_scores=parsed.to_dict()['confidence'],
        )
        logger.info(f"Sending '{parsed.raw_transcript}' to review: {reason}")
        return validation

    def get_summary(self) -> Dict[str, Any]:
        """Get summary statistics for the review queue."""
        if not self.items:
            return {"total": 0}

        reason_counts: Dict[str, int] = {}
        for item in self.items:
            for reason in item.reason.split(';'):
                reason = reason.strip()
                reason_counts[reason] = reason_counts.get(reason, 0) + 1

        return {
            "total": len(self.items),
            "missing_amount": reason_counts.get(INVALID_AMOUNT, 0),
            "missing_category": reason_counts.get(MISSING_CATEGORY, 0),
            "low_confidence": reason_counts.get(LOW_CONFIDENCE, 0),
            "reason_breakdown": reason_counts,
        }

    def clear(self):
        """Clear all items from the review queue."""
        self.items.clear()
        logger.info("Review queue cleared")
