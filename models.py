from __future__ import annotations

from dataclasses import dataclass, fields
from decimal import Decimal

DEFAULT_MONTHLY_FEE = 400000
DEFAULT_BASE_HOURS = Decimal("140")
DEFAULT_ACCOUNT_TYPE = "普通"

# Hours are stored as JSON numbers; two places keep them exact through a float
HOURS_PLACES = 2


def fits_hours_places(value: Decimal) -> bool:
    """True if value has no more than HOURS_PLACES decimal places."""
    return value.normalize().as_tuple().exponent >= -HOURS_PLACES


class InvalidConfiguration(ValueError):
    """Raised when contract settings cannot produce an invoice."""


@dataclass
class TimeEntry:
    id: str
    date: str
    hours: Decimal

    @property
    def month(self) -> str:
        """The YYYY-MM month this entry falls in."""
        return self.date[:7]


@dataclass
class ContractInfo:
    monthly_fee: int = DEFAULT_MONTHLY_FEE
    base_hours: Decimal = DEFAULT_BASE_HOURS

    def __post_init__(self):
        try:
            fee = Decimal(str(self.monthly_fee))
            base = Decimal(str(self.base_hours))
        except ArithmeticError:
            raise InvalidConfiguration("Monthly fee and base hours must be numbers") from None

        if not fee.is_finite() or fee != fee.to_integral_value():
            raise InvalidConfiguration("Monthly fee must be a whole number of yen")
        if fee < 0:
            raise InvalidConfiguration("Monthly fee cannot be negative")
        if not base.is_finite() or base <= 0:
            raise InvalidConfiguration("Base hours must be greater than zero")
        if not fits_hours_places(base):
            raise InvalidConfiguration(f"Base hours allow at most {HOURS_PLACES} decimal places")

        self.monthly_fee = int(fee)
        self.base_hours = base


@dataclass
class InvoiceProfile:
    sender_name: str = ""
    sender_address: str = ""
    sender_phone: str = ""
    sender_email: str = ""
    bank_name: str = ""
    branch_name: str = ""
    account_type: str = DEFAULT_ACCOUNT_TYPE
    account_number: str = ""
    account_holder: str = ""
    client_company: str = ""
    client_name: str = ""
    client_address: str = ""

    @classmethod
    def field_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    def missing_fields(self) -> list[str]:
        """Names of fields that are still blank."""
        return [name for name in self.field_names() if not getattr(self, name).strip()]


@dataclass(frozen=True)
class InvoiceBreakdown:
    total_hours: Decimal
    base_amount: int
    hourly_rate: int
    overtime_hours: Decimal
    undertime_hours: Decimal
    adjustment: int
    final_amount: int


@dataclass
class DashboardSummary:
    month: str
    breakdown: InvoiceBreakdown
    base_hours: Decimal
    worked_days: int
    business_days: int
    remaining_business_days: int
    remaining_hours: Decimal
    hours_per_remaining_day: Decimal | None = None

    @property
    def progress(self) -> Decimal:
        """Logged hours as a percentage of base hours."""
        return (self.breakdown.total_hours / self.base_hours * 100).quantize(Decimal("0.1"))
