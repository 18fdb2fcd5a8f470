"""Custom widgets for the retainer invoice application."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from textual.widgets import Static
from rich.text import Text

from invoice import format_hours, format_yen
from models import ContractInfo, DashboardSummary, InvoiceBreakdown, InvoiceProfile
from utils import month_label

VIEW_TITLES = {
    "dashboard": "Dashboard",
    "timesheet": "Timesheet",
    "settings": "Settings",
    "invoice": "Invoice",
}

PROFILE_LABELS = {
    "sender_name": "Name",
    "sender_address": "Address",
    "sender_phone": "Phone",
    "sender_email": "Email",
    "bank_name": "Bank",
    "branch_name": "Branch",
    "account_type": "Account type",
    "account_number": "Account no.",
    "account_holder": "Account holder",
    "client_company": "Client company",
    "client_name": "Client contact",
    "client_address": "Client address",
}


class MonthHeader(Static):
    """Shows the current view on the left and month navigation on the right."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.month = ""
        self.view_mode = "dashboard"

    def update_display(self, view_mode: str, month: str):
        self.view_mode = view_mode
        self.month = month

        title = VIEW_TITLES.get(view_mode, view_mode.title()).upper()
        month_nav = f"◄ {month_label(month)} ►"

        text = Text()
        text.append(title, style="bold")
        spacing = 60 - len(title) - len(month_nav)
        text.append(" " * max(spacing, 2))
        text.append(month_nav, style="bold")
        self.update(text)

    def on_click(self, event) -> None:
        """Clicking the left half goes back a month, the right half forward."""
        if event.x < self.size.width // 2:
            self.app.action_prev_month()  # type: ignore[attr-defined]
        else:
            self.app.action_next_month()  # type: ignore[attr-defined]


class DashboardPanel(Static):
    """Hours progress and the projected invoice for the month."""

    def update_display(self, summary: DashboardSummary):
        b = summary.breakdown
        text = Text()

        text.append(f"  Logged hours     {format_hours(b.total_hours):>10}   of {format_hours(summary.base_hours)}   ({summary.progress}%)\n")
        text.append(f"  Days worked      {summary.worked_days:>10}   of {summary.business_days} business days\n")

        if summary.remaining_business_days:
            per_day = summary.hours_per_remaining_day or Decimal("0")
            text.append(
                f"  Remaining        {format_hours(summary.remaining_hours):>10}   "
                f"over {summary.remaining_business_days} business days ({format_hours(per_day)}/day)\n"
            )
        else:
            text.append(f"  Remaining        {format_hours(summary.remaining_hours):>10}\n", style="dim")

        text.append("\n")
        if b.overtime_hours > 0:
            text.append(f"  Overtime         {format_hours(b.overtime_hours):>10}   {format_yen(b.adjustment):>12}\n", style="green")
        elif b.undertime_hours > 0:
            text.append(f"  Undertime        {format_hours(b.undertime_hours):>10}   {format_yen(b.adjustment):>12}\n", style="red")
        else:
            text.append(f"  On base hours    {'':>10}   {format_yen(0):>12}\n", style="dim")

        text.append(f"  Invoice amount   {'':>10}   {format_yen(b.final_amount):>12}", style="bold")
        self.update(text)


class MonthTotal(Static):
    """Running total under the timesheet table."""

    def update_display(self, month: str, total_hours: Decimal, entry_count: int, base_hours: Decimal):
        text = Text()
        text.append(f"{month_label(month)}  ")
        text.append(f"{entry_count} entries  ", style="dim" if entry_count == 0 else "")
        text.append(f"Total {format_hours(total_hours)} / {format_hours(base_hours)}", style="bold")
        self.update(text)


class SettingsPanel(Static):
    """Contract terms and invoice profile, with blank fields flagged."""

    def update_display(self, contract: ContractInfo, profile: InvoiceProfile, hourly_rate: int):
        text = Text()
        text.append("Contract  (c to edit)\n", style="bold")
        text.append(f"  Monthly fee      {format_yen(contract.monthly_fee)}\n")
        text.append(f"  Base hours       {format_hours(contract.base_hours)}\n")
        text.append(f"  Hourly rate      {format_yen(hourly_rate)}\n\n")

        missing = profile.missing_fields()
        text.append("Invoice profile  (p to edit)\n", style="bold")
        for name, label in PROFILE_LABELS.items():
            value = getattr(profile, name)
            if value.strip():
                text.append(f"  {label:<16} {value}\n")
            else:
                text.append(f"  {label:<16} -\n", style="dim")

        if missing:
            text.append(f"\n{len(missing)} field(s) blank", style="yellow")
        else:
            text.append("\nProfile complete", style="green")
        self.update(text)


class InvoicePreview(Static):
    """Plain-text rendering of the invoice for the selected month."""

    def update_display(
        self,
        month: str,
        breakdown: InvoiceBreakdown,
        contract: ContractInfo,
        profile: InvoiceProfile,
        issue_date: date,
    ):
        text = Text()
        text.append("請求書 INVOICE", style="bold")
        text.append(f"{'Issued ' + issue_date.isoformat():>46}\n\n")

        if profile.client_company:
            text.append(f"{profile.client_company} 御中\n", style="bold")
        if profile.client_name:
            text.append(f"{profile.client_name} 様\n")
        if profile.client_address:
            text.append(f"{profile.client_address}\n")
        text.append("\n")

        for line in (profile.sender_name, profile.sender_address, profile.sender_phone, profile.sender_email):
            if line:
                text.append(f"{line:>60}\n")
        text.append("\n")

        text.append(f"Amount due  {format_yen(breakdown.final_amount)}\n\n", style="bold")

        text.append(f"{'Item':<30}{'Detail':<18}{'Amount':>12}\n", style="underline")
        text.append(f"{'Retainer ' + month_label(month):<30}{'Base ' + format_hours(contract.base_hours):<18}{format_yen(breakdown.base_amount):>12}\n")
        if breakdown.overtime_hours > 0:
            detail = f"{format_hours(breakdown.overtime_hours)} x {format_yen(breakdown.hourly_rate)}"
            text.append(f"{'Overtime':<30}{detail:<18}{format_yen(breakdown.adjustment):>12}\n")
        elif breakdown.undertime_hours > 0:
            detail = f"{format_hours(breakdown.undertime_hours)} x {format_yen(breakdown.hourly_rate)}"
            text.append(f"{'Undertime':<30}{detail:<18}{format_yen(breakdown.adjustment):>12}\n")
        text.append(f"{'Total':>48}{format_yen(breakdown.final_amount):>12}\n", style="bold")
        text.append(f"Hours worked {format_hours(breakdown.total_hours)}\n\n", style="dim")

        text.append("Remit to\n", style="bold")
        text.append(f"  {profile.bank_name} {profile.branch_name}\n")
        text.append(f"  {profile.account_type} {profile.account_number}\n")
        text.append(f"  {profile.account_holder}")
        self.update(text)
