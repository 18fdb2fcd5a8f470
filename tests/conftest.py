"""Shared fixtures for tests."""

from __future__ import annotations

import os
import tempfile
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Generator

import pytest

# Point storage at a throwaway database before anything imports it
_test_db_dir = tempfile.mkdtemp()
os.environ["RETAINER_DB"] = str(Path(_test_db_dir) / "retainer.db")


@pytest.fixture
def repository(tmp_path: Path):
    """A repository backed by a fresh database file."""
    from storage import Repository

    return Repository(tmp_path / "test_retainer.db")


@pytest.fixture
def today() -> date:
    return date(2024, 3, 15)


@pytest.fixture
def controller(repository, today):
    """Controller over an empty repository, with a fixed 'today'."""
    from controller import InvoiceController

    return InvoiceController(repository, today=today)


@pytest.fixture
def store():
    """An empty TimeEntryStore."""
    from timesheet import TimeEntryStore

    return TimeEntryStore()


@pytest.fixture
def sample_entries():
    """Entries spread over February and March 2024."""
    from models import TimeEntry

    return [
        TimeEntry(id="a", date="2024-02-28", hours=Decimal("8")),
        TimeEntry(id="b", date="2024-03-01", hours=Decimal("7.5")),
        TimeEntry(id="c", date="2024-03-04", hours=Decimal("8")),
        TimeEntry(id="d", date="2024-03-04", hours=Decimal("1.25")),
    ]


@pytest.fixture
def sample_contract():
    """The default retainer: 400,000 yen for 140 hours."""
    from models import ContractInfo

    return ContractInfo(monthly_fee=400000, base_hours=Decimal("140"))


@pytest.fixture
def sample_profile():
    """A fully filled-in invoice profile."""
    from models import InvoiceProfile

    return InvoiceProfile(
        sender_name="山田 太郎",
        sender_address="東京都渋谷区1-2-3",
        sender_phone="090-0000-0000",
        sender_email="taro@example.com",
        bank_name="みずほ銀行",
        branch_name="渋谷支店",
        account_type="普通",
        account_number="1234567",
        account_holder="ヤマダ タロウ",
        client_company="株式会社サンプル",
        client_name="佐藤 花子",
        client_address="東京都千代田区4-5-6",
    )


@pytest.fixture
def entries_for_hours():
    """Build a list of entries for March 2024 summing to the given hours."""
    from models import TimeEntry

    def build(total: str) -> list[TimeEntry]:
        return [TimeEntry(id="total", date="2024-03-10", hours=Decimal(total))]

    return build


@pytest.fixture(autouse=True)
def _isolate_export_dir(tmp_path: Path, monkeypatch) -> Generator[None, None, None]:
    """Keep invoice exports inside the test's temp directory."""
    monkeypatch.setenv("RETAINER_EXPORT_DIR", str(tmp_path / "invoices"))
    yield
