"""Tests for invoice.py - breakdown calculation and formatting."""

from decimal import Decimal

import pytest

from invoice import compute_breakdown, format_hours, format_yen, monthly_hours, round_half_up
from models import ContractInfo, TimeEntry


class TestRoundHalfUp:
    """Tests for round_half_up function."""

    @pytest.mark.parametrize("value,expected", [
        ("2857.142857", 2857),
        ("2.5", 3),
        ("2.4999", 2),
        ("-2.5", -2),
        ("-2.6", -3),
        ("0", 0),
        ("28570", 28570),
    ])
    def test_rounding(self, value, expected):
        """Test halves round toward positive infinity."""
        assert round_half_up(Decimal(value)) == expected

    def test_returns_int(self):
        """Test the result is a plain int."""
        assert isinstance(round_half_up(Decimal("1.2")), int)


class TestMonthlyHours:
    """Tests for monthly_hours function."""

    def test_prefix_match(self, sample_entries):
        """Test entries are matched by date prefix."""
        assert monthly_hours("2024-03", sample_entries) == Decimal("16.75")

    def test_no_entries(self):
        """Test no entries sum to zero."""
        assert monthly_hours("2024-03", []) == 0


class TestComputeBreakdown:
    """Tests for compute_breakdown function."""

    def test_exactly_base_hours(self, sample_contract, entries_for_hours):
        """Test hitting base hours bills the flat fee."""
        b = compute_breakdown("2024-03", entries_for_hours("140"), sample_contract)

        assert b.total_hours == Decimal("140")
        assert b.adjustment == 0
        assert b.final_amount == 400000
        assert b.overtime_hours == 0
        assert b.undertime_hours == 0

    def test_overtime(self, sample_contract, entries_for_hours):
        """Test ten hours over adds ten hours at the rounded rate."""
        b = compute_breakdown("2024-03", entries_for_hours("150"), sample_contract)

        assert b.hourly_rate == 2857
        assert b.adjustment == 28570
        assert b.final_amount == 428570
        assert b.overtime_hours == Decimal("10")
        assert b.undertime_hours == 0

    def test_undertime(self, sample_contract, entries_for_hours):
        """Test ten hours under deducts ten hours at the rounded rate."""
        b = compute_breakdown("2024-03", entries_for_hours("130"), sample_contract)

        assert b.adjustment == -28570
        assert b.final_amount == 371430
        assert b.undertime_hours == Decimal("10")
        assert b.overtime_hours == 0

    def test_base_amount_is_monthly_fee(self, sample_contract, entries_for_hours):
        """Test base amount reports the flat fee."""
        b = compute_breakdown("2024-03", entries_for_hours("1"), sample_contract)
        assert b.base_amount == 400000

    def test_no_entries_deducts_everything(self, sample_contract):
        """Test a month with no hours deducts all base hours."""
        b = compute_breakdown("2024-03", [], sample_contract)

        assert b.total_hours == 0
        assert b.undertime_hours == Decimal("140")
        assert b.adjustment == -399980
        assert b.final_amount == 20

    def test_rate_rounded_before_applying(self, sample_contract, entries_for_hours):
        """Test fractional hours use the already-rounded rate."""
        b = compute_breakdown("2024-03", entries_for_hours("140.5"), sample_contract)

        # 0.5 * 2857 = 1428.5 -> 1429 (not 0.5 * 2857.142857 = 1428.57 -> 1429)
        assert b.adjustment == 1429
        assert b.final_amount == 401429

    def test_negative_half_rounds_up(self, entries_for_hours):
        """Test a negative half-yen adjustment rounds toward zero."""
        contract = ContractInfo(monthly_fee=10, base_hours=Decimal("1"))
        b = compute_breakdown("2024-03", entries_for_hours("0.95"), contract)

        # -0.05 * 10 = -0.5 -> 0
        assert b.adjustment == 0
        assert b.final_amount == 10

    def test_only_counts_target_month(self, sample_entries, sample_contract):
        """Test entries outside the month are ignored."""
        b = compute_breakdown("2024-02", sample_entries, sample_contract)
        assert b.total_hours == Decimal("8")

    def test_at_most_one_of_over_or_under(self, sample_contract):
        """Test overtime and undertime are never both nonzero."""
        for hours in ["0", "139.75", "140", "140.25", "300"]:
            entries = [TimeEntry(id="x", date="2024-03-01", hours=Decimal(hours))]
            b = compute_breakdown("2024-03", entries, sample_contract)
            assert b.overtime_hours == 0 or b.undertime_hours == 0

    def test_idempotent(self, sample_entries, sample_contract):
        """Test the same inputs always give the same breakdown."""
        first = compute_breakdown("2024-03", sample_entries, sample_contract)
        second = compute_breakdown("2024-03", sample_entries, sample_contract)
        assert first == second

    def test_custom_contract(self, entries_for_hours):
        """Test a non-default contract."""
        contract = ContractInfo(monthly_fee=500000, base_hours=Decimal("160"))
        b = compute_breakdown("2024-03", entries_for_hours("170"), contract)

        # 500000 / 160 = 3125
        assert b.hourly_rate == 3125
        assert b.adjustment == 31250
        assert b.final_amount == 531250


class TestFormatting:
    """Tests for format_yen and format_hours."""

    def test_format_yen(self):
        assert format_yen(428570) == "¥428,570"
        assert format_yen(0) == "¥0"

    def test_format_yen_negative(self):
        assert format_yen(-28570) == "-¥28,570"

    def test_format_hours(self):
        assert format_hours(Decimal("140")) == "140h"
        assert format_hours(Decimal("7.50")) == "7.5h"
        assert format_hours(Decimal("0")) == "0h"

    def test_format_hours_large_values_stay_plain(self):
        """Test big totals are not shown in exponent form."""
        assert format_hours(Decimal("1234567.5")) == "1234567.5h"
        assert format_hours(Decimal("1000")) == "1000h"
