"""Tests for controller.py - application state and write-through."""

from datetime import date
from decimal import Decimal

import pytest
from openpyxl import load_workbook

from controller import InvoiceController
from models import ContractInfo, InvalidConfiguration, InvoiceProfile
from storage import Repository


class TestStartup:
    """Tests for loading state when the controller starts."""

    def test_defaults_on_empty_storage(self, controller):
        """Test a fresh database gives default state."""
        state = controller.state
        assert len(state.entries) == 0
        assert state.contract == ContractInfo()
        assert state.profile == InvoiceProfile()

    def test_selected_month_is_current(self, controller):
        """Test the selected month starts at today's month."""
        assert controller.state.selected_month == "2024-03"

    def test_loads_saved_state(self, repository, sample_entries, sample_contract, sample_profile, today):
        """Test previously saved records are loaded."""
        repository.save(sample_entries)
        repository.save(ContractInfo(monthly_fee=300000, base_hours=Decimal("100")))
        repository.save(sample_profile)

        controller = InvoiceController(repository, today=today)
        assert controller.state.entries.entries == sample_entries
        assert controller.state.contract.monthly_fee == 300000
        assert controller.state.profile == sample_profile


class TestEntryWriteThrough:
    """Tests that entry changes are persisted immediately."""

    def test_add_is_persisted(self, controller, repository):
        entry, error = controller.add_entry("2024-03-01", "8")

        assert error is None
        assert repository.load().entries == [entry]

    def test_add_invalid_returns_error(self, controller, repository):
        """Test rejected input reports why and saves nothing."""
        entry, error = controller.add_entry("2024-03-01", "0")

        assert entry is None
        assert error == "Hours must be greater than zero"
        assert repository.read_raw("timeEntries") is None

    def test_add_empty_date_returns_error(self, controller):
        entry, error = controller.add_entry("", "8")
        assert entry is None
        assert error == "Date is required"

    def test_update_is_persisted(self, controller, repository):
        entry, _ = controller.add_entry("2024-03-01", "8")
        controller.update_entry(entry.id, "6.5")

        assert repository.load().entries[0].hours == Decimal("6.5")

    def test_delete_is_persisted(self, controller, repository):
        entry, _ = controller.add_entry("2024-03-01", "8")
        controller.add_entry("2024-03-02", "8")

        assert controller.delete_entry(entry.id) is True
        assert [e.date for e in repository.load().entries] == ["2024-03-02"]

    def test_delete_missing(self, controller):
        assert controller.delete_entry("missing") is False

    def test_month_entries_uses_selected_month(self, controller):
        controller.add_entry("2024-02-28", "8")
        controller.add_entry("2024-03-01", "8")

        assert [e.date for e in controller.month_entries()] == ["2024-03-01"]
        assert [e.date for e in controller.month_entries("2024-02")] == ["2024-02-28"]


class TestSettings:
    """Tests for contract and profile updates."""

    def test_update_contract(self, controller, repository):
        contract = controller.update_contract("350000", "120")

        assert contract == ContractInfo(monthly_fee=350000, base_hours=Decimal("120"))
        assert controller.state.contract == contract
        assert repository.load().contract == contract

    def test_update_contract_rejects_zero_base_hours(self, controller, repository):
        """Test an invalid contract raises and leaves state untouched."""
        with pytest.raises(InvalidConfiguration):
            controller.update_contract(400000, 0)

        assert controller.state.contract == ContractInfo()
        assert repository.read_raw("contract") is None

    def test_update_profile(self, controller, repository):
        profile = controller.update_profile(sender_name="  Taro  ", bank_name="みずほ銀行")

        assert profile.sender_name == "Taro"
        assert profile.bank_name == "みずほ銀行"
        assert profile.account_type == "普通"
        assert repository.load().profile == profile

    def test_update_profile_unknown_field(self, controller):
        with pytest.raises(ValueError, match="favourite_colour"):
            controller.update_profile(favourite_colour="blue")


class TestMonthSelection:
    """Tests for month navigation."""

    def test_shift_month_back_across_year(self, controller):
        controller.select_month("2024-01")
        assert controller.shift_month(-1) == "2023-12"
        assert controller.state.selected_month == "2023-12"

    def test_shift_month_forward(self, controller):
        assert controller.shift_month(1) == "2024-04"

    def test_select_invalid_month(self, controller):
        with pytest.raises(ValueError):
            controller.select_month("2024-3")
        assert controller.state.selected_month == "2024-03"


class TestDerivedViews:
    """Tests for breakdown and dashboard figures."""

    def test_breakdown_recomputed_after_changes(self, controller):
        """Test the breakdown reflects the latest entries and contract."""
        controller.add_entry("2024-03-01", "150")
        assert controller.breakdown().final_amount == 428570

        controller.update_contract(500000, 160)
        assert controller.breakdown().final_amount == 468750

    def test_breakdown_for_other_month(self, controller):
        controller.add_entry("2024-02-01", "140")
        assert controller.breakdown("2024-02").final_amount == 400000

    def test_dashboard_current_month(self, controller):
        """Test pace figures for the month containing today."""
        controller.add_entry("2024-03-01", "60")
        controller.add_entry("2024-03-04", "20")
        summary = controller.dashboard()

        assert summary.worked_days == 2
        assert summary.remaining_hours == Decimal("60")
        # March 2024: 21 weekdays, 20 (Vernal Equinox Day) is a holiday
        assert summary.business_days == 20
        # From Fri 15th: 15, 18, 19, 21, 22, 25-29
        assert summary.remaining_business_days == 10
        assert summary.hours_per_remaining_day == Decimal("6.00")
        assert summary.progress == Decimal("57.1")

    def test_dashboard_past_month(self, controller):
        """Test a past month has no remaining days."""
        summary = controller.dashboard("2024-02")
        assert summary.remaining_business_days == 0
        assert summary.hours_per_remaining_day is None

    def test_dashboard_over_base_hours(self, controller):
        controller.add_entry("2024-03-01", "200")
        summary = controller.dashboard()
        assert summary.remaining_hours == 0
        assert summary.hours_per_remaining_day == Decimal("0.00")


class TestExport:
    """Tests for writing the printable invoice."""

    def test_export_to_directory(self, controller, tmp_path, sample_profile):
        controller.update_profile(**{name: getattr(sample_profile, name) for name in InvoiceProfile.field_names()})
        controller.add_entry("2024-03-01", "150")

        path = controller.export_invoice(tmp_path / "out")

        assert path == tmp_path / "out" / "invoice-2024-03.xlsx"
        ws = load_workbook(path).active
        assert ws["B8"].value == 428570

    def test_export_default_directory_from_env(self, controller, tmp_path):
        """Test RETAINER_EXPORT_DIR is used when no directory is given."""
        path = controller.export_invoice()
        assert path.parent == tmp_path / "invoices"
        assert path.exists()

    def test_export_other_month(self, controller, tmp_path):
        path = controller.export_invoice(tmp_path, month="2024-01")
        assert path.name == "invoice-2024-01.xlsx"


def test_repository_is_swappable(today):
    """Test any object with load/save works as the repository."""
    from storage import StoredRecords

    class MemoryRepository:
        db_path = None

        def __init__(self):
            self.saved = []

        def load(self):
            return StoredRecords()

        def save(self, record):
            self.saved.append(record)

    repo = MemoryRepository()
    controller = InvoiceController(repo, today=today)  # type: ignore[arg-type]
    controller.add_entry("2024-03-01", "8")
    controller.update_contract(1000, 10)

    assert len(repo.saved) == 2
    assert repo.saved[1] == ContractInfo(monthly_fee=1000, base_hours=Decimal("10"))


def test_today_defaults_to_real_date(repository):
    assert InvoiceController(repository).today == date.today()
