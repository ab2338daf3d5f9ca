"""Excel and JSON export of parsed expenses."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment
from openpyxl.utils import get_column_letter

from .currency import format_amount
from .expense import ParsedExpense
from .review import ValidationResult, validate_expense

logger = logging.getLogger(__name__)

HEADERS = ["Transcript", "Date", "Amount", "Category", "Title", "Confidence",
           "Review Status", "Review Reason"]
COLUMN_WIDTHS = [45, 12, 12, 22, 30, 12, 14, 45]


class ExcelExporter:
    """Export parsed expenses to a single consolidated Excel sheet."""

    def __init__(self, output_path: Path, currency_code: str = "USD"):
        """
        Initialize Excel exporter.

        Args:
            output_path: Path for the output Excel file
            currency_code: Currency used for totals in the summary section
        """
        self.output_path = Path(output_path)
        self.currency_code = currency_code
        self.workbook = Workbook()

    def export_expenses(self,
                        parsed_list: Sequence[ParsedExpense],
                        include_summary: bool = False,
                        validations: Optional[Sequence[ValidationResult]] = None):
        """
        Export parsed expenses, rows needing review last.

        Args:
            parsed_list: Parsed expenses in input order
            include_summary: Whether to add the summary section above the rows
            validations: Validation results matching parsed_list; computed when omitted
        """
        if validations is None:
            validations = [validate_expense(parsed) for parsed in parsed_list]

        rows = [self.create_expense_row(parsed, validation)
                for parsed, validation in zip(parsed_list, validations)]

        try:
            if "Sheet" in self.workbook.sheetnames:
                self.workbook.remove(self.workbook["Sheet"])

            self._create_consolidated_sheet(rows, include_summary)

            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            self.workbook.save(str(self.output_path))

            logger.info(f"Excel file exported to: {self.output_path}")

        except Exception as e:
            logger.error(f"Failed to export Excel file: {e}")
            raise

    def _create_consolidated_sheet(self, rows: List[Dict[str, Any]], include_summary: bool):
        ws = self.workbook.create_sheet("Expenses")

        current_row = 1
        if include_summary:
            current_row = self._add_summary_section(ws, rows, current_row)
            current_row += 2

        ws.cell(row=current_row, column=1, value="ALL EXPENSES").font = Font(bold=True, size=14)
        current_row += 2

        for col, header in enumerate(HEADERS, 1):
            cell = ws.cell(row=current_row, column=col, value=header)
            cell.font = Font(bold=True)
            cell.fill = PatternFill(start_color="E6E6E6", end_color="E6E6E6", fill_type="solid")
            cell.alignment = Alignment(horizontal="center")
        current_row += 1

        ok_rows = [row for row in rows if row["Review Status"] == "OK"]
        review_rows = [row for row in rows if row["Review Status"] != "OK"]

        for row in ok_rows + review_rows:
            for col, header in enumerate(HEADERS, 1):
                ws.cell(row=current_row, column=col, value=row[header])
            current_row += 1

        for i, width in enumerate(COLUMN_WIDTHS, 1):
            ws.column_dimensions[get_column_letter(i)].width = width

        logger.info(f"Created consolidated sheet with {len(ok_rows)} OK and {len(review_rows)} review rows")

    def _add_summary_section(self, ws, rows: List[Dict[str, Any]], start_row: int) -> int:
        """Add totals and a per-category breakdown above the expense rows."""
        if not rows:
            ws.cell(row=start_row, column=1, value="No expenses to summarize")
            return start_row + 1

        df = pd.DataFrame(rows)
        df["Amount"] = pd.to_numeric(df["Amount"], errors="coerce")

        ws.cell(row=start_row, column=1, value="EXPENSE SUMMARY").font = Font(bold=True, size=14)
        current_row = start_row + 2

        ws.cell(row=current_row, column=1, value="Total Expenses:").font = Font(bold=True)
        ws.cell(row=current_row, column=2, value=len(df))

        ws.cell(row=current_row, column=4, value="Total Amount:").font = Font(bold=True)
        ws.cell(row=current_row, column=5, value=format_amount(df["Amount"].sum(), self.currency_code))

        ws.cell(row=current_row, column=7, value="Needs Review:").font = Font(bold=True)
        ws.cell(row=current_row, column=8, value=int((df["Review Status"] != "OK").sum()))
        current_row += 2

        ws.cell(row=current_row, column=1, value="Category Breakdown:").font = Font(bold=True)
        current_row += 1

        for col, header in enumerate(["Category", "Count", "Amount"], 1):
            ws.cell(row=current_row, column=col, value=header).font = Font(bold=True)
        current_row += 1

        breakdown = (df.groupby("Category")
                     .agg(count=("Title", "size"), sum=("Amount", "sum"))
                     .sort_values("sum", ascending=False))
        for category, data in breakdown.iterrows():
            ws.cell(row=current_row, column=1, value=category)
            ws.cell(row=current_row, column=2, value=int(data["count"]))
            ws.cell(row=current_row, column=3, value=format_amount(data["sum"], self.currency_code))
            current_row += 1

        return current_row

    @staticmethod
    def create_expense_row(parsed: ParsedExpense, validation: Optional[ValidationResult] = None) -> Dict[str, Any]:
        """
        Build one sheet row for a parsed expense.

        Args:
            parsed: Parsed expense
            validation: Its validation result; computed when omitted

        Returns:
            Dict keyed by the sheet headers
        """
        if validation is None:
            validation = validate_expense(parsed)

        needs_review = not validation.is_valid or bool(validation.warnings)
        reason = "; ".join(validation.errors + validation.warnings)

        return {
            "Transcript": str(parsed.raw_transcript or ""),
            "Date": parsed.date or "",
            "Amount": float(parsed.amount) if parsed.amount else "",
            "Category": parsed.category,
            "Title": parsed.title,
            "Confidence": parsed.confidence.overall,
            "Review Status": "REVIEW" if needs_review else "OK",
            "Review Reason": reason,
        }


def export_json(parsed_list: Sequence[ParsedExpense],
                validations: Sequence[ValidationResult],
                output_path: Path):
    """Write parsed expenses with their validation results as a JSON array."""
    records = [
        {**parsed.to_dict(), 'validation': validation.to_dict()}
        for parsed, validation in zip(parsed_list, validations)
    ]

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(records, f, ensure_ascii=False, indent=2)

    logger.info(f"JSON file exported to: {output_path}")
