"""Monthly invoice amount calculation."""

from __future__ import annotations

from decimal import Decimal, ROUND_FLOOR
from typing import Iterable

from models import ContractInfo, InvoiceBreakdown, TimeEntry

ZERO = Decimal("0")
HALF = Decimal("0.5")


def round_half_up(value: Decimal) -> int:
    """Round to the nearest integer, halves toward positive infinity.

    -2.5 rounds to -2, 2.5 rounds to 3.
    """
    return int((value + HALF).to_integral_value(rounding=ROUND_FLOOR))


def monthly_hours(month: str, entries: Iterable[TimeEntry]) -> Decimal:
    """Sum hours of entries dated within the YYYY-MM month."""
    return sum((e.hours for e in entries if e.date.startswith(month)), ZERO)


def compute_breakdown(month: str, entries: Iterable[TimeEntry], contract: ContractInfo) -> InvoiceBreakdown:
    """Work out the invoice for a month from the logged hours and the contract.

    The hourly rate is rounded on its own before it is applied to the
    over/under hours, so rate * hours can differ slightly from the
    adjustment for fractional hours.
    """
    total_hours = monthly_hours(month, entries)
    fee = Decimal(contract.monthly_fee)

    hourly_rate = round_half_up(fee / contract.base_hours)
    diff = total_hours - contract.base_hours
    adjustment = round_half_up(diff * hourly_rate)

    return InvoiceBreakdown(
        total_hours=total_hours,
        base_amount=contract.monthly_fee,
        hourly_rate=hourly_rate,
        overtime_hours=max(ZERO, diff),
        undertime_hours=max(ZERO, -diff),
        adjustment=adjustment,
        final_amount=round_half_up(fee + adjustment),
    )


def format_yen(amount: int | Decimal) -> str:
    """Format an amount as ¥1,234 (negatives as -¥1,234)."""
    sign = "-" if amount < 0 else ""
    return f"{sign}¥{abs(int(amount)):,}"


def format_hours(hours: Decimal) -> str:
    """Format hours without trailing zeros, e.g. 7.5h or 140h."""
    return f"{hours.normalize():f}h"
