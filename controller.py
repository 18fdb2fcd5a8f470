"""Application state and the operations the views call."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from pathlib import Path

from export import export_invoice, get_export_dir, invoice_filename
from invoice import compute_breakdown
from models import ContractInfo, DashboardSummary, InvoiceBreakdown, InvoiceProfile, TimeEntry
from storage import Repository
from timesheet import TimeEntryStore, validate
from utils import current_month, get_business_days, month_bounds, parse_month, remaining_business_days, shift_month

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    entries: TimeEntryStore = field(default_factory=TimeEntryStore)
    contract: ContractInfo = field(default_factory=ContractInfo)
    profile: InvoiceProfile = field(default_factory=InvoiceProfile)
    selected_month: str = field(default_factory=current_month)


class InvoiceController:
    """Owns the application state and writes every change through to the repository."""

    def __init__(self, repository: Repository, today: date | None = None):
        self.repository = repository
        self.today = today or date.today()

        records = repository.load()
        self.state = AppState(
            entries=TimeEntryStore(records.entries, on_change=repository.save),
            contract=records.contract,
            profile=records.profile,
            selected_month=current_month(self.today),
        )

    # --- Time entries ---

    def add_entry(self, entry_date: str, hours) -> tuple[TimeEntry | None, str | None]:
        """Add an entry. Returns (entry, None) or (None, error message)."""
        error = validate(entry_date, hours)
        if error:
            return None, error
        return self.state.entries.add(entry_date, hours), None

    def update_entry(self, entry_id: str, hours) -> TimeEntry | None:
        return self.state.entries.update(entry_id, hours)

    def delete_entry(self, entry_id: str) -> bool:
        return self.state.entries.delete(entry_id)

    def month_entries(self, month: str | None = None) -> list[TimeEntry]:
        return self.state.entries.for_month(month or self.state.selected_month)

    # --- Settings ---

    def update_contract(self, monthly_fee, base_hours) -> ContractInfo:
        """Replace the contract. Raises InvalidConfiguration for unusable values."""
        contract = ContractInfo(monthly_fee=monthly_fee, base_hours=base_hours)
        self.state.contract = contract
        self.repository.save(contract)
        logger.info("Contract set to ¥%s for %sh", contract.monthly_fee, contract.base_hours)
        return contract

    def update_profile(self, **changes: str) -> InvoiceProfile:
        """Change invoice profile fields. Unknown field names raise ValueError."""
        unknown = set(changes) - set(InvoiceProfile.field_names())
        if unknown:
            raise ValueError(f"Unknown profile fields: {', '.join(sorted(unknown))}")
        profile = replace(self.state.profile, **{k: str(v).strip() for k, v in changes.items()})
        self.state.profile = profile
        self.repository.save(profile)
        logger.info("Invoice profile updated (%s)", ", ".join(sorted(changes)) or "no changes")
        return profile

    # --- Month selection ---

    def select_month(self, month: str) -> str:
        parse_month(month)
        self.state.selected_month = month
        return month

    def shift_month(self, delta: int) -> str:
        return self.select_month(shift_month(self.state.selected_month, delta))

    # --- Derived views ---

    def breakdown(self, month: str | None = None) -> InvoiceBreakdown:
        """Recompute the invoice breakdown from the current state."""
        month = month or self.state.selected_month
        return compute_breakdown(month, self.state.entries, self.state.contract)

    def dashboard(self, month: str | None = None) -> DashboardSummary:
        month = month or self.state.selected_month
        breakdown = self.breakdown(month)
        start, end = month_bounds(month)
        remaining_days = len(remaining_business_days(month, self.today))
        remaining_hours = max(Decimal("0"), self.state.contract.base_hours - breakdown.total_hours)

        per_day = None
        if remaining_days:
            per_day = (remaining_hours / remaining_days).quantize(Decimal("0.01"))

        return DashboardSummary(
            month=month,
            breakdown=breakdown,
            base_hours=self.state.contract.base_hours,
            worked_days=self.state.entries.worked_days(month),
            business_days=len(get_business_days(start, end)),
            remaining_business_days=remaining_days,
            remaining_hours=remaining_hours,
            hours_per_remaining_day=per_day,
        )

    def export_invoice(self, directory: Path | None = None, month: str | None = None) -> Path:
        """Write the printable invoice for a month and return its path."""
        month = month or self.state.selected_month
        directory = directory or get_export_dir(self.repository.db_path)
        return export_invoice(
            directory / invoice_filename(month),
            month,
            self.breakdown(month),
            self.state.contract,
            self.state.profile,
            issue_date=self.today,
        )
