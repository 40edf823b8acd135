"""
XLSX rendering (``ledger_services.reports.renderer``).

Lays a ``ReportDocument`` out as a single-sheet workbook with openpyxl:
a heading block, a summary block, then one row per transaction.
"""

from __future__ import annotations

from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font

from ledger_services.reports.models import ReportDocument

XLSX_CONTENT_TYPE = (
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
)

COLUMNS = ("Date", "Description", "Type", "Category", "Account", "Amount")
MONEY_FORMAT = "#,##0.00"

_BOLD = Font(bold=True)


def render_xlsx(document: ReportDocument) -> bytes:
    """Render the document; returns the workbook file as bytes."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Report"

    ws.append([document.title])
    ws["A1"].font = Font(bold=True, size=16)
    ws.append(["Report Period", document.period_label])
    ws.append(["User", document.owner_name])
    ws.append(["Generated", document.generated_at.strftime("%Y-%m-%d %H:%M:%S %Z").strip()])
    ws.append([])

    ws.append(["Summary"])
    ws.cell(row=ws.max_row, column=1).font = _BOLD
    for label, value in (
        ("Total Income", document.totals.total_income),
        ("Total Expenses", document.totals.total_expenses),
        ("Net", document.totals.net),
    ):
        ws.append([label, value])
        ws.cell(row=ws.max_row, column=2).number_format = MONEY_FORMAT
    ws.append([])

    ws.append(list(COLUMNS))
    header_row = ws.max_row
    for col in range(1, len(COLUMNS) + 1):
        ws.cell(row=header_row, column=col).font = _BOLD

    for row in document.rows:
        ws.append(
            [
                row.transaction_date,
                row.description,
                row.transaction_type,
                row.category_name,
                row.account_name,
                row.amount,
            ]
        )
        ws.cell(row=ws.max_row, column=1).number_format = "yyyy-mm-dd"
        ws.cell(row=ws.max_row, column=len(COLUMNS)).number_format = MONEY_FORMAT

    for letter, width in zip("ABCDEF", (12, 40, 10, 20, 20, 14)):
        ws.column_dimensions[letter].width = width

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
