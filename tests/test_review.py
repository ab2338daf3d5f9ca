"""Tests for expense validation and the review queue."""

import pytest
from voice_expense.expense import ConfidenceScores, ParsedExpense
from voice_expense.review import (
    INVALID_AMOUNT, LOW_CONFIDENCE, MISSING_CATEGORY, MISSING_TITLE,
    ReviewQueue, validate_expense,
)


def make_expense(**overrides):
    fields = dict(
        title="Coffee",
        amount="5",
        category="Food & Dining",
        date="2025-06-09",
        confidence=ConfidenceScores(overall=0.91, title=0.9, amount=0.95, category=0.85),
        needs_confirmation=False,
        raw_transcript="coffee 5 dollars yesterday",
    )
    fields.update(overrides)
    return ParsedExpense(**fields)


class TestValidateExpense:
    """Test suite for validate_expense."""

    def test_valid(self):
        result = validate_expense(make_expense())

        assert result.is_valid
        assert result.errors == []
        assert result.warnings == []

    @pytest.mark.parametrize("amount", ["", "0", "-5", "abc", "NaN"])
    def test_invalid_amount(self, amount):
        result = validate_expense(make_expense(amount=amount))

        assert not result.is_valid
        assert result.errors == [INVALID_AMOUNT]

    def test_placeholder_title(self):
        assert validate_expense(make_expense(title="Expense")).errors == [MISSING_TITLE]

    def test_uncategorized(self):
        assert validate_expense(make_expense(category="Uncategorized")).errors == [MISSING_CATEGORY]

    def test_custom_uncategorized_label(self):
        expense = make_expense(category="Misc")

        assert validate_expense(expense).is_valid
        assert validate_expense(expense, uncategorized_label="Misc").errors == [MISSING_CATEGORY]

    def test_needs_confirmation_is_a_warning(self):
        result = validate_expense(make_expense(needs_confirmation=True))

        assert result.is_valid
        assert result.warnings == [LOW_CONFIDENCE]

    def test_errors_in_field_order(self):
        result = validate_expense(make_expense(amount="", title="Expense", category="Uncategorized"))

        assert result.errors == [INVALID_AMOUNT, MISSING_TITLE, MISSING_CATEGORY]

    def test_does_not_modify_expense(self):
        expense = make_expense(amount="")
        validate_expense(expense)

        assert expense == make_expense(amount="")

    def test_to_dict(self):
        assert validate_expense(make_expense()).to_dict() == {'is_valid': True, 'errors': [], 'warnings': []}


class TestReviewQueue:
    """Test suite for ReviewQueue."""

    def setup_method(self):
        """Set up test fixtures."""
        self.queue = ReviewQueue()

    def test_valid_expense_not_queued(self):
        assert self.queue.add_from_expense(make_expense()) is None
        assert self.queue.items == []

    def test_invalid_expense_queued(self):
        validation = self.queue.add_from_expense(make_expense(amount="", needs_confirmation=True))

        assert validation is not None
        assert not validation.is_valid
        item = self.queue.items[0]
        assert item.transcript == "coffee 5 dollars yesterday"
        assert item.reason == f"{INVALID_AMOUNT}; {LOW_CONFIDENCE}"
        assert item.suggested_amount is None
        assert item.suggested_title == "Coffee"
        assert item.confidence_scores['overall'] == 0.91

    def test_warning_only_is_queued(self):
        self.queue.add_from_expense(make_expense(needs_confirmation=True))

        assert len(self.queue.items) == 1

    def test_custom_label(self):
        queue = ReviewQueue(uncategorized_label="Misc")
        queue.add_from_expense(make_expense(category="Misc"))

        assert queue.items[0].reason == MISSING_CATEGORY

    def test_summary(self):
        self.queue.add_from_expense(make_expense(amount="", needs_confirmation=True))
        self.queue.add_from_expense(make_expense(category="Uncategorized", needs_confirmation=True))
        self.queue.add_from_expense(make_expense())

        summary = self.queue.get_summary()

        assert summary["total"] == 2
        assert summary["missing_amount"] == 1
        assert summary["missing_category"] == 1
        assert summary["low_confidence"] == 2
        assert summary["reason_breakdown"][LOW_CONFIDENCE] == 2

    def test_empty_summary(self):
        assert self.queue.get_summary() == {"total": 0}

    def test_add_item_and_clear(self):
        self.queue.add_item("lunch", "Manual check")
        assert len(self.queue.items) == 1

        self.queue.clear()
        assert self.queue.items == []
