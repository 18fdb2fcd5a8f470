#!/usr/bin/env python3
"""Retainer invoice TUI application."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.coordinate import Coordinate
from textual.widgets import DataTable, Footer

import storage
from controller import InvoiceController
from invoice import format_hours
from logging_config import setup_logging
from models import ContractInfo, TimeEntry
from screens import AddEntryScreen, ConfirmScreen, EditContractScreen, EditHoursScreen, EditProfileScreen
from widgets import DashboardPanel, InvoicePreview, MonthHeader, MonthTotal, SettingsPanel

logger = logging.getLogger(__name__)

VIEW_WIDGETS = {
    "dashboard": ["#dashboard-panel"],
    "timesheet": ["#entries-table-container", "#month-total"],
    "settings": ["#settings-panel"],
    "invoice": ["#invoice-preview"],
}


class EntriesDataTable(DataTable):
    """DataTable that hands left/right to the app for month navigation."""

    def on_key(self, event) -> None:
        if event.key == "left":
            if hasattr(self.app, "action_prev_month"):
                self.app.action_prev_month()  # type: ignore[attr-defined]
            event.prevent_default()
            event.stop()
        elif event.key == "right":
            if hasattr(self.app, "action_next_month"):
                self.app.action_next_month()  # type: ignore[attr-defined]
            event.prevent_default()
            event.stop()


class InvoiceApp(App):
    """Main retainer invoice application."""

    CSS = """
    Screen {
        background: $surface;
    }

    #month-header {
        height: auto;
        background: $primary;
        color: $text;
        padding: 0 1;
        text-style: bold;
    }

    #dashboard-panel, #settings-panel, #invoice-preview {
        height: auto;
        padding: 1 2;
        color: $text;
    }

    #entries-table {
        height: 1fr;
        margin: 1 2;
    }

    #month-total {
        height: auto;
        padding: 0 2 1 2;
        color: $text;
    }

    .hidden {
        display: none;
    }

    DataTable {
        height: 100%;
    }

    DataTable > .datatable--cursor {
        background: $secondary;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("left", "prev_month", "◄", show=False),
        Binding("right", "next_month", "►", show=False),
        Binding("d", "dashboard_view", "Dashboard"),
        Binding("t", "timesheet_view", "Timesheet"),
        Binding("s", "settings_view", "Settings"),
        Binding("i", "invoice_view", "Invoice"),
        Binding("n", "goto_this_month", "This month"),
        # Timesheet view
        Binding("a", "add_entry", "Add"),
        Binding("e", "edit_entry", "Edit"),
        Binding("x", "delete_entry", "Delete"),
        # Settings view
        Binding("c", "edit_contract", "Contract"),
        Binding("p", "edit_profile", "Profile"),
        # Invoice view
        Binding("P", "print_invoice", "Print"),
    ]

    VIEW_ACTIONS = {
        "add_entry": "timesheet",
        "edit_entry": "timesheet",
        "delete_entry": "timesheet",
        "edit_contract": "settings",
        "edit_profile": "settings",
        "print_invoice": "invoice",
    }

    def __init__(self, repository: storage.Repository | None = None, today: date | None = None):
        super().__init__()
        self.controller = InvoiceController(repository or storage.Repository(), today=today)

        # View mode: "dashboard", "timesheet", "settings" or "invoice"
        self.view_mode = "dashboard"

    @property
    def month(self) -> str:
        return self.controller.state.selected_month

    def compose(self) -> ComposeResult:
        yield MonthHeader(id="month-header")
        yield DashboardPanel(id="dashboard-panel")
        yield Container(EntriesDataTable(id="entries-table"), id="entries-table-container", classes="hidden")
        yield MonthTotal(id="month-total", classes="hidden")
        yield SettingsPanel(id="settings-panel", classes="hidden")
        yield InvoicePreview(id="invoice-preview", classes="hidden")
        yield Footer()

    def on_mount(self):
        self._setup_entries_table()
        self.refresh_bindings()
        self._refresh_display()

    def _setup_entries_table(self):
        table = self.query_one("#entries-table", DataTable)
        table.cursor_type = "row"
        table.add_column("Day", width=4)
        table.add_column("Date", width=12)
        table.add_column("Hours", width=8)

    @staticmethod
    def _weekday(entry_date: str) -> str:
        """Short weekday name for a YYYY-MM-DD string, blank if unparseable."""
        try:
            return date.fromisoformat(entry_date).strftime("%a")
        except ValueError:
            return ""

    def _entry_row(self, entry: TimeEntry) -> tuple[str, str, str]:
        return (self._weekday(entry.date), entry.date, format_hours(entry.hours))

    def _refresh_display(self):
        self.query_one("#month-header", MonthHeader).update_display(self.view_mode, self.month)

        if self.view_mode == "dashboard":
            self._refresh_dashboard()
        elif self.view_mode == "timesheet":
            self._refresh_timesheet()
        elif self.view_mode == "settings":
            self._refresh_settings()
        elif self.view_mode == "invoice":
            self._refresh_invoice()

    def _refresh_dashboard(self):
        self.query_one("#dashboard-panel", DashboardPanel).update_display(self.controller.dashboard())

    def _refresh_timesheet(self):
        table = self.query_one("#entries-table", DataTable)
        current_row = table.cursor_row
        table.clear()

        entries = self.controller.month_entries()
        for entry in entries:
            table.add_row(*self._entry_row(entry), key=entry.id)
        if entries:
            table.move_cursor(row=min(current_row, len(entries) - 1))

        total = sum((e.hours for e in entries), Decimal("0"))
        self.query_one("#month-total", MonthTotal).update_display(
            self.month, total, len(entries), self.controller.state.contract.base_hours
        )

    def _refresh_settings(self):
        state = self.controller.state
        self.query_one("#settings-panel", SettingsPanel).update_display(
            state.contract, state.profile, self.controller.breakdown().hourly_rate
        )

    def _refresh_invoice(self):
        state = self.controller.state
        self.query_one("#invoice-preview", InvoicePreview).update_display(
            self.month, self.controller.breakdown(), state.contract, state.profile, self.controller.today
        )

    def _set_view_mode(self, mode: str):
        """Switch view and toggle widget visibility."""
        self.view_mode = mode

        for view, widget_ids in VIEW_WIDGETS.items():
            for widget_id in widget_ids:
                widget = self.query_one(widget_id)
                if view == mode:
                    widget.remove_class("hidden")
                else:
                    widget.add_class("hidden")

        self.refresh_bindings()
        self._refresh_display()

        if mode == "timesheet":
            self.query_one("#entries-table", DataTable).focus()

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        """Only offer view-specific actions in their view."""
        if action == f"{self.view_mode}_view":
            return False
        if action in self.VIEW_ACTIONS:
            return True if self.VIEW_ACTIONS[action] == self.view_mode else None
        return True

    def _get_selected_entry(self) -> TimeEntry | None:
        """Get the entry under the cursor in the timesheet table."""
        table = self.query_one("#entries-table", DataTable)
        if table.row_count == 0:
            return None
        row_key = table.coordinate_to_cell_key(Coordinate(table.cursor_row, 0)).row_key
        if row_key and row_key.value:
            return self.controller.state.entries.get(str(row_key.value))
        return None

    def _default_entry_date(self) -> str:
        """Today when it falls in the selected month, else the month's first day."""
        today = self.controller.today
        if today.strftime("%Y-%m") == self.month:
            return today.isoformat()
        return f"{self.month}-01"

    # --- Navigation ---

    def action_prev_month(self):
        self.controller.shift_month(-1)
        self._refresh_display()

    def action_next_month(self):
        self.controller.shift_month(1)
        self._refresh_display()

    def action_goto_this_month(self):
        self.controller.select_month(self.controller.today.strftime("%Y-%m"))
        self._refresh_display()

    def action_dashboard_view(self):
        self._set_view_mode("dashboard")

    def action_timesheet_view(self):
        self._set_view_mode("timesheet")

    def action_settings_view(self):
        self._set_view_mode("settings")

    def action_invoice_view(self):
        self._set_view_mode("invoice")

    # --- Timesheet ---

    def action_add_entry(self):
        self.push_screen(AddEntryScreen(self._default_entry_date()), self._on_entry_added)

    def _on_entry_added(self, result: tuple[str, str] | None) -> None:
        if not result:
            return
        entry_date, hours = result
        entry, error = self.controller.add_entry(entry_date, hours)
        if error:
            self.notify(error, severity="error")
            return

        # Follow the new entry if it lands in another month
        if entry and not entry.date.startswith(self.month):
            self.controller.select_month(entry.month)
        self._refresh_display()
        self.notify(f"Logged {format_hours(entry.hours)} on {entry.date}")

    def action_edit_entry(self):
        entry = self._get_selected_entry()
        if entry:
            self.push_screen(EditHoursScreen(entry), self._on_entry_edited)

    def _on_entry_edited(self, result: tuple[str, str] | None) -> None:
        if not result:
            return
        entry_id, hours = result
        if self.controller.update_entry(entry_id, hours) is None:
            self.notify("Could not update entry", severity="error")
        self._refresh_display()

    def action_delete_entry(self):
        entry = self._get_selected_entry()
        if not entry:
            return

        def do_delete(confirmed: bool | None) -> None:
            if confirmed:
                self.controller.delete_entry(entry.id)
                self._refresh_display()
                self.notify(f"Deleted {entry.date}")

        self.push_screen(
            ConfirmScreen(f"Delete {format_hours(entry.hours)} on {entry.date}?"),
            do_delete,
        )

    # --- Settings ---

    def action_edit_contract(self):
        self.push_screen(EditContractScreen(self.controller.state.contract), self._on_contract_edited)

    def _on_contract_edited(self, result: ContractInfo | None) -> None:
        if result:
            self.controller.update_contract(result.monthly_fee, result.base_hours)
            self._refresh_display()
            self.notify("Contract saved")

    def action_edit_profile(self):
        self.push_screen(EditProfileScreen(self.controller.state.profile), self._on_profile_edited)

    def _on_profile_edited(self, result: dict[str, str] | None) -> None:
        if result:
            self.controller.update_profile(**result)
            self._refresh_display()
            self.notify("Profile saved")

    # --- Invoice ---

    def action_print_invoice(self):
        """Write the printable invoice for the selected month."""
        missing = self.controller.state.profile.missing_fields()
        path = self.controller.export_invoice()
        if missing:
            self.notify(f"Saved {path.name} ({len(missing)} profile field(s) blank)", severity="warning")
        else:
            self.notify(f"Saved {path}")


def main():
    import sys
    db_path = storage.DB_PATH
    if len(sys.argv) > 1 and sys.argv[1] == "--db-info":
        print(f"Database: {db_path}")
        if db_path.exists():
            repository = storage.Repository(db_path)
            for key in (storage.ENTRIES_KEY, storage.CONTRACT_KEY, storage.PROFILE_KEY):
                saved = repository.last_saved(key)
                print(f"{key}: {saved.strftime('%Y-%m-%d %H:%M:%S') if saved else 'not saved'}")
        else:
            print("Status: Does not exist (will be created on first run)")
        return

    setup_logging(db_path.parent / "retainer.log")
    logger.info("Starting with database %s", db_path)
    app = InvoiceApp()
    app.run()


if __name__ == "__main__":
    main()
