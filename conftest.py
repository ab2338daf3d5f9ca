"""Shared pytest fixtures."""

from datetime import date

import pytest

REFERENCE_DATE = date(2025, 6, 10)  # a Tuesday

CORE_CATEGORIES = ["Food & Dining", "Transport", "Others"]


@pytest.fixture
def reference_date():
    return REFERENCE_DATE


@pytest.fixture
def core_categories():
    return list(CORE_CATEGORIES)
