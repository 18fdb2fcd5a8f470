"""Write a printable invoice workbook."""

from __future__ import annotations

import logging
import os
from datetime import date
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, Side

from invoice import format_hours
from models import ContractInfo, InvoiceBreakdown, InvoiceProfile
from utils import month_label

logger = logging.getLogger(__name__)

YEN_FORMAT = '"¥"#,##0;-"¥"#,##0'
THIN = Side(style="thin")


def get_export_dir(db_path: Path) -> Path:
    """Export directory from RETAINER_EXPORT_DIR or invoices/ beside the database."""
    if env_dir := os.environ.get("RETAINER_EXPORT_DIR"):
        return Path(env_dir)
    return db_path.parent / "invoices"


def invoice_filename(month: str) -> str:
    return f"invoice-{month}.xlsx"


def line_items(month: str, breakdown: InvoiceBreakdown, contract: ContractInfo) -> list[tuple[str, str, int]]:
    """(description, detail, amount) rows shown on the invoice."""
    items = [(
        f"業務委託費 {month_label(month)}分",
        f"基本時間 {format_hours(contract.base_hours)}",
        breakdown.base_amount,
    )]
    if breakdown.overtime_hours > 0:
        items.append((
            "超過時間精算",
            f"{format_hours(breakdown.overtime_hours)} × ¥{breakdown.hourly_rate:,}",
            breakdown.adjustment,
        ))
    elif breakdown.undertime_hours > 0:
        items.append((
            "不足時間控除",
            f"{format_hours(breakdown.undertime_hours)} × ¥{breakdown.hourly_rate:,}",
            breakdown.adjustment,
        ))
    return items


def export_invoice(
    path: Path,
    month: str,
    breakdown: InvoiceBreakdown,
    contract: ContractInfo,
    profile: InvoiceProfile,
    issue_date: date | None = None,
) -> Path:
    """Write the invoice for a month as a single-sheet xlsx workbook."""
    issue_date = issue_date or date.today()

    wb = Workbook()
    ws = wb.active
    ws.title = month
    ws.column_dimensions["A"].width = 28
    ws.column_dimensions["B"].width = 24
    ws.column_dimensions["C"].width = 16

    ws["A1"] = "請求書"
    ws["A1"].font = Font(size=18, bold=True)
    ws["C1"] = f"発行日 {issue_date.isoformat()}"
    ws["C1"].alignment = Alignment(horizontal="right")

    # Client block
    ws["A3"] = f"{profile.client_company} 御中" if profile.client_company else ""
    ws["A4"] = f"{profile.client_name} 様" if profile.client_name else ""
    ws["A5"] = profile.client_address

    # Sender block
    ws["C3"] = profile.sender_name
    ws["C4"] = profile.sender_address
    ws["C5"] = profile.sender_phone
    ws["C6"] = profile.sender_email
    for row in range(3, 7):
        ws.cell(row=row, column=3).alignment = Alignment(horizontal="right")

    ws["A8"] = "ご請求金額"
    ws["A8"].font = Font(bold=True)
    ws["B8"] = breakdown.final_amount
    ws["B8"].number_format = YEN_FORMAT
    ws["B8"].font = Font(size=14, bold=True)

    header_row = 10
    for col, title in enumerate(("品目", "内訳", "金額"), start=1):
        cell = ws.cell(row=header_row, column=col, value=title)
        cell.font = Font(bold=True)
        cell.border = Border(bottom=THIN)

    row = header_row + 1
    for description, detail, amount in line_items(month, breakdown, contract):
        ws.cell(row=row, column=1, value=description)
        ws.cell(row=row, column=2, value=detail)
        ws.cell(row=row, column=3, value=amount).number_format = YEN_FORMAT
        row += 1

    ws.cell(row=row, column=2, value="合計").font = Font(bold=True)
    total = ws.cell(row=row, column=3, value=breakdown.final_amount)
    total.number_format = YEN_FORMAT
    total.font = Font(bold=True)
    total.border = Border(top=THIN)

    row += 1
    ws.cell(row=row, column=1, value=f"稼働時間 {format_hours(breakdown.total_hours)}")

    row += 2
    ws.cell(row=row, column=1, value="お振込先").font = Font(bold=True)
    for label, value in (
        ("銀行名", profile.bank_name),
        ("支店名", profile.branch_name),
        ("口座種別", profile.account_type),
        ("口座番号", profile.account_number),
        ("口座名義", profile.account_holder),
    ):
        row += 1
        ws.cell(row=row, column=1, value=label)
        ws.cell(row=row, column=2, value=value)

    ws.print_area = f"A1:C{row}"
    ws.page_setup.orientation = "portrait"
    ws.page_setup.fitToWidth = 1

    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)
    logger.info("Exported invoice for %s to %s", month, path)
    return path
