"""
Bonus sheet workbook: one row per employee with monthly leave counts,
the wage basis and the bonus, followed by a TOTAL row.
"""
from typing import List, Dict, Any, Sequence, Tuple
from io import BytesIO
import logging

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side
from openpyxl.utils import get_column_letter

logger = logging.getLogger(__name__)

MONTH_COLUMNS = ["JAN", "FEB", "MAR", "APR", "MAY", "JUN", "JUL", "AUG", "SEP", "OCT", "NOV", "DEC"]

# (header, row key) pairs of the bonus sheet after the monthly leave columns
BONUS_TAIL_COLUMNS: Sequence[Tuple[str, str]] = (
    ("No of Leaves", "total_leaves"),
    ("TOTAL DAYS", "total_days"),
    ("T.W.DAYS", "tw_days"),
    ("PER MONTH WAGES", "per_month_wages"),
    ("CTC", "ctc"),
    ("Leave Difference", "leave_difference"),
    ("Calculated Bonus", "calculated_bonus"),
    ("Actual Bonus", "actual_bonus"),
)

CURRENCY_KEYS = {"per_month_wages", "ctc", "calculated_bonus", "actual_bonus"}


class ExcelExporter:
    """Writes report rows into a styled openpyxl workbook."""

    HEADER_FILL = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
    HEADER_FONT = Font(color="FFFFFF", bold=True, size=11)
    TOTAL_FILL = PatternFill(start_color="E7E6E6", end_color="E7E6E6", fill_type="solid")
    BORDER = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )
    CURRENCY_FORMAT = '₹#,##0.00'

    def _write_headers(self, ws, headers: List[str]) -> None:
        for col_num, header in enumerate(headers, 1):
            cell = ws.cell(row=1, column=col_num, value=header)
            cell.font = self.HEADER_FONT
            cell.fill = self.HEADER_FILL
            cell.alignment = Alignment(horizontal='center', vertical='center')
            cell.border = self.BORDER

    def export_bonus_sheet(self, rows: List[Dict[str, Any]], year: int) -> BytesIO:
        """
        Export the yearly bonus calculation.

        Args:
            rows: Bonus rows as returned by the bonus service
            year: Calculation year (sheet title)

        Returns:
            BytesIO with Excel file
        """
        wb = Workbook()
        ws = wb.active
        ws.title = f"Bonus {year}"

        headers = ["SL.NO", "NAME"] + MONTH_COLUMNS + [h for h, _ in BONUS_TAIL_COLUMNS]
        self._write_headers(ws, headers)

        first_tail_col = 3 + len(MONTH_COLUMNS)
        for row_num, row in enumerate(rows, 2):
            months = row.get("monthly_leaves", {})
            values = [row_num - 1, row.get("name", "")]
            values += [months.get(m, 0) for m in MONTH_COLUMNS]
            values += [row.get(key, 0) for _, key in BONUS_TAIL_COLUMNS]

            for col_num, value in enumerate(values, 1):
                cell = ws.cell(row=row_num, column=col_num, value=value)
                cell.border = self.BORDER
                if col_num >= first_tail_col:
                    key = BONUS_TAIL_COLUMNS[col_num - first_tail_col][1]
                    if key in CURRENCY_KEYS:
                        cell.number_format = self.CURRENCY_FORMAT

        ws.column_dimensions["B"].width = 28
        for col in range(3, len(headers) + 1):
            ws.column_dimensions[get_column_letter(col)].width = 12

        # Totals row
        total_row = len(rows) + 2
        ws.cell(total_row, 2, "TOTAL").font = Font(bold=True)
        bonus_col = len(headers)
        total_bonus = sum(float(r.get("actual_bonus", 0) or 0) for r in rows)
        cell = ws.cell(total_row, bonus_col, round(total_bonus, 2))
        cell.number_format = self.CURRENCY_FORMAT
        for col in (2, bonus_col):
            ws.cell(total_row, col).font = Font(bold=True)
            ws.cell(total_row, col).fill = self.TOTAL_FILL

        output = BytesIO()
        wb.save(output)
        output.seek(0)

        logger.info(f"Exported bonus sheet {year} with {len(rows)} employees to Excel")

        return output
