from __future__ import annotations

import json
import logging
import os
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from models import ContractInfo, InvoiceProfile, TimeEntry
from utils import parse_date

logger = logging.getLogger(__name__)

ENTRIES_KEY = "timeEntries"
CONTRACT_KEY = "contract"
PROFILE_KEY = "invoiceInfo"

# InvoiceProfile attribute -> stored JSON field
PROFILE_FIELDS = {
    "sender_name": "senderName",
    "sender_address": "senderAddress",
    "sender_phone": "senderPhone",
    "sender_email": "senderEmail",
    "bank_name": "bankName",
    "branch_name": "branchName",
    "account_type": "accountType",
    "account_number": "accountNumber",
    "account_holder": "accountHolder",
    "client_company": "clientCompany",
    "client_name": "clientName",
    "client_address": "clientAddress",
}


def _get_db_path() -> Path:
    """Get database path from environment variable or default location."""
    if env_path := os.environ.get("RETAINER_DB"):
        return Path(env_path)
    return Path(__file__).parent / "data" / "retainer.db"


DB_PATH = _get_db_path()


def get_connection(db_path: Path | None = None) -> sqlite3.Connection:
    path = db_path or DB_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: Path | None = None):
    """Create the records table if it doesn't exist."""
    conn = get_connection(db_path)
    conn.executescript("""
        CREATE TABLE IF NOT EXISTS records (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
    """)
    conn.commit()
    conn.close()


# --- Serialization ---


def _number(value: Decimal) -> int | float:
    """Decimal to a JSON number, keeping whole values as ints."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def _decimal(value) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (int, Decimal, str)):
        raise ValueError(f"Expected a number, got {value!r}")
    return Decimal(str(value))


def _loads(text: str):
    # Fractional numbers come back as the exact Decimal written, not via float
    return json.loads(text, parse_float=Decimal)


def entries_to_json(entries: list[TimeEntry]) -> str:
    return json.dumps(
        [{"id": e.id, "date": e.date, "hours": _number(e.hours)} for e in entries],
        ensure_ascii=False,
    )


def entries_from_json(text: str) -> list[TimeEntry]:
    data = _loads(text)
    if not isinstance(data, list):
        raise ValueError("Expected a list of time entries")

    entries = []
    seen_ids = set()
    for item in data:
        entry = TimeEntry(id=str(item["id"]), date=str(item["date"]), hours=_decimal(item["hours"]))
        parse_date(entry.date)
        if not entry.hours.is_finite() or entry.hours < 0:
            raise ValueError(f"Invalid hours {entry.hours} on {entry.date}")
        if entry.id in seen_ids:
            raise ValueError(f"Duplicate entry id {entry.id!r}")
        seen_ids.add(entry.id)
        entries.append(entry)
    return entries


def contract_to_json(contract: ContractInfo) -> str:
    return json.dumps({
        "monthlyFee": contract.monthly_fee,
        "baseHours": _number(contract.base_hours),
    })


def contract_from_json(text: str) -> ContractInfo:
    data = _loads(text)
    return ContractInfo(
        monthly_fee=_decimal(data["monthlyFee"]),
        base_hours=_decimal(data["baseHours"]),
    )


def profile_to_json(profile: InvoiceProfile) -> str:
    return json.dumps(
        {key: getattr(profile, attr) for attr, key in PROFILE_FIELDS.items()},
        ensure_ascii=False,
    )


def profile_from_json(text: str) -> InvoiceProfile:
    data = _loads(text)
    if not isinstance(data, dict):
        raise ValueError("Expected an invoice profile object")
    # Fields absent from older saves keep their defaults
    values = {attr: str(data[key]) for attr, key in PROFILE_FIELDS.items() if data.get(key) is not None}
    return InvoiceProfile(**values)


# --- Repository ---


@dataclass
class StoredRecords:
    """The three persisted records, as loaded at startup."""

    entries: list[TimeEntry] = field(default_factory=list)
    contract: ContractInfo = field(default_factory=ContractInfo)
    profile: InvoiceProfile = field(default_factory=InvoiceProfile)


class Repository:
    """Loads and saves the time entries, contract and invoice profile.

    Each record is stored whole as JSON text under a fixed key and is
    overwritten on every save.
    """

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or DB_PATH
        init_db(self.db_path)

    def read_raw(self, key: str) -> str | None:
        conn = get_connection(self.db_path)
        row = conn.execute("SELECT value FROM records WHERE key = ?", (key,)).fetchone()
        conn.close()
        return row["value"] if row else None

    def write_raw(self, key: str, value: str) -> None:
        conn = get_connection(self.db_path)
        conn.execute(
            "INSERT OR REPLACE INTO records (key, value, updated_at) VALUES (?, ?, ?)",
            (key, value, datetime.now().isoformat(timespec="seconds")),
        )
        conn.commit()
        conn.close()

    def _load_record(self, key: str, parse, default):
        text = self.read_raw(key)
        if text is None:
            return default
        try:
            return parse(text)
        except (ValueError, KeyError, TypeError, ArithmeticError) as exc:
            # json.JSONDecodeError and InvalidConfiguration are ValueErrors
            logger.warning("Ignoring unreadable %r record, using defaults: %s", key, exc)
            return default

    def load(self) -> StoredRecords:
        """Read all three records. Missing or unreadable ones fall back to defaults."""
        defaults = StoredRecords()
        return StoredRecords(
            entries=self._load_record(ENTRIES_KEY, entries_from_json, defaults.entries),
            contract=self._load_record(CONTRACT_KEY, contract_from_json, defaults.contract),
            profile=self._load_record(PROFILE_KEY, profile_from_json, defaults.profile),
        )

    def save(self, record: list[TimeEntry] | ContractInfo | InvoiceProfile) -> None:
        """Serialize a whole record and overwrite its key."""
        if isinstance(record, ContractInfo):
            self.write_raw(CONTRACT_KEY, contract_to_json(record))
        elif isinstance(record, InvoiceProfile):
            self.write_raw(PROFILE_KEY, profile_to_json(record))
        elif isinstance(record, list):
            self.write_raw(ENTRIES_KEY, entries_to_json(record))
        else:
            raise TypeError(f"Cannot save {type(record).__name__}")

    def last_saved(self, key: str) -> datetime | None:
        """When a record was last written, if ever."""
        conn = get_connection(self.db_path)
        row = conn.execute("SELECT updated_at FROM records WHERE key = ?", (key,)).fetchone()
        conn.close()
        return datetime.fromisoformat(row["updated_at"]) if row else None
