"""Tests for Excel and JSON export."""

import json

from openpyxl import load_workbook
from voice_expense.expense import ConfidenceScores, ParsedExpense
from voice_expense.export import HEADERS, ExcelExporter, export_json
from voice_expense.review import validate_expense


def make_expense(transcript, title, amount, category, needs_confirmation=False):
    return ParsedExpense(
        title=title,
        amount=amount,
        category=category,
        date="2025-06-09",
        confidence=ConfidenceScores(overall=0.91, title=0.9, amount=0.95, category=0.85),
        needs_confirmation=needs_confirmation,
        raw_transcript=transcript,
    )


def header_row(ws):
    for row in range(1, ws.max_row + 1):
        if ws.cell(row=row, column=1).value == "Transcript":
            return row
    raise AssertionError("header row not found")


class TestExcelExporter:
    """Test suite for ExcelExporter."""

    def setup_method(self):
        """Set up test fixtures."""
        self.expenses = [
            make_expense("coffee", "Coffee", "", "Food & Dining", needs_confirmation=True),
            make_expense("10.50 lunch", "Lunch", "10.50", "Food & Dining"),
            make_expense("uber 5 dollars", "Uber", "5", "Transport"),
        ]

    def test_ok_rows_before_review_rows(self, tmp_path):
        output = tmp_path / "expenses.xlsx"
        ExcelExporter(output).export_expenses(self.expenses)

        ws = load_workbook(output)["Expenses"]
        header = header_row(ws)

        assert [ws.cell(row=header, column=c).value for c in range(1, len(HEADERS) + 1)] == HEADERS
        assert ws.cell(row=header + 1, column=1).value == "10.50 lunch"
        assert ws.cell(row=header + 2, column=1).value == "uber 5 dollars"
        assert ws.cell(row=header + 3, column=1).value == "coffee"
        assert ws.cell(row=header + 3, column=7).value == "REVIEW"
        assert ws.cell(row=header + 1, column=3).value == 10.5

    def test_default_sheet_removed(self, tmp_path):
        output = tmp_path / "expenses.xlsx"
        ExcelExporter(output).export_expenses(self.expenses)

        assert load_workbook(output).sheetnames == ["Expenses"]

    def test_summary_section(self, tmp_path):
        output = tmp_path / "expenses.xlsx"
        ExcelExporter(output).export_expenses(self.expenses, include_summary=True)

        ws = load_workbook(output)["Expenses"]

        assert ws["A1"].value == "EXPENSE SUMMARY"
        assert ws["B3"].value == 3
        assert ws["E3"].value == "$15.50"
        assert ws["H3"].value == 1
        assert ws["A7"].value == "Food & Dining"
        assert ws["B7"].value == 2
        assert ws["C7"].value == "$10.50"

    def test_summary_currency(self, tmp_path):
        output = tmp_path / "expenses.xlsx"
        ExcelExporter(output, currency_code="BDT").export_expenses(self.expenses, include_summary=True)

        assert load_workbook(output)["Expenses"]["E3"].value == "৳15.50"

    def test_empty_export(self, tmp_path):
        output = tmp_path / "nested" / "empty.xlsx"
        ExcelExporter(output).export_expenses([], include_summary=True)

        ws = load_workbook(output)["Expenses"]
        assert ws["A1"].value == "No expenses to summarize"

    def test_create_expense_row(self):
        row = ExcelExporter.create_expense_row(self.expenses[0])

        assert row["Amount"] == ""
        assert row["Review Status"] == "REVIEW"
        assert "Invalid or missing amount" in row["Review Reason"]
        assert row["Confidence"] == 0.91


class TestExportJson:

    def test_records_with_validation(self, tmp_path):
        expenses = [
            make_expense("uber 5 dollars", "Uber", "5", "Transport"),
            make_expense("coffee", "Coffee", "", "Food & Dining", needs_confirmation=True),
        ]
        validations = [validate_expense(e) for e in expenses]
        output = tmp_path / "out.json"

        export_json(expenses, validations, output)

        records = json.loads(output.read_text(encoding="utf-8"))
        assert [r["raw_transcript"] for r in records] == ["uber 5 dollars", "coffee"]
        assert records[0]["validation"]["is_valid"] is True
        assert records[1]["validation"]["is_valid"] is False
        assert records[1]["confidence"]["overall"] == 0.91
