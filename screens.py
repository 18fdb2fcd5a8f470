"""Modal screens for the retainer invoice application."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.widgets import Button, Input, Label
from textual.screen import ModalScreen

from models import HOURS_PLACES, ContractInfo, InvalidConfiguration, InvoiceProfile, TimeEntry, fits_hours_places
from timesheet import validate
from widgets import PROFILE_LABELS

DIALOG_CSS = """
    .dialog {
        width: 60;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: thick $primary;
    }

    .dialog-title {
        width: 100%;
        text-align: center;
        text-style: bold;
        margin-bottom: 1;
    }

    .field-group {
        width: 100%;
        height: auto;
        margin-bottom: 1;
    }

    .field-label {
        height: 1;
        margin-bottom: 0;
        color: $text-muted;
    }

    .field-group Input {
        width: 100%;
    }

    .dialog-buttons {
        width: 100%;
        height: auto;
        margin-top: 1;
        align: center middle;
    }

    .dialog-buttons Button {
        width: auto;
        min-width: 12;
        margin: 0 2;
    }
"""


class ConfirmScreen(ModalScreen[bool]):
    """Simple confirmation dialog."""

    CSS = """
    ConfirmScreen {
        align: center middle;
    }

    #confirm-dialog {
        width: 50;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: thick $warning;
    }

    #confirm-buttons {
        width: 100%;
        height: auto;
        margin-top: 1;
    }

    #confirm-buttons Button {
        width: 1fr;
        margin: 0 1;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
        Binding("y", "confirm", "Yes"),
        Binding("n", "cancel", "No"),
    ]

    def __init__(self, message: str):
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        with Vertical(id="confirm-dialog"):
            yield Label(self.message)
            with Horizontal(id="confirm-buttons"):
                yield Button("Yes (Y)", variant="warning", id="yes")
                yield Button("No (N)", variant="default", id="no")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "yes")

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)


class AddEntryScreen(ModalScreen[tuple[str, str] | None]):
    """Modal screen for logging hours on a date.

    Returns (date, hours_string) or None if cancelled.
    """

    CSS = "AddEntryScreen { align: center middle; }" + DIALOG_CSS

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    FIELD_ORDER = ["entry-date", "entry-hours"]

    def __init__(self, default_date: str = ""):
        super().__init__()
        self.default_date = default_date

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Label("Add Time Entry", classes="dialog-title")
            with Vertical(classes="field-group"):
                yield Label("Date (YYYY-MM-DD)", classes="field-label")
                yield Input(value=self.default_date, placeholder="2024-03-01", id="entry-date")
            with Vertical(classes="field-group"):
                yield Label("Hours", classes="field-label")
                yield Input(placeholder="8", id="entry-hours")
            with Horizontal(classes="dialog-buttons"):
                yield Button("Add", variant="primary", id="save")
                yield Button("Cancel", variant="default", id="cancel")

    def on_mount(self) -> None:
        """Start on hours when the date is already filled in."""
        field_id = "entry-hours" if self.default_date else "entry-date"
        self.query_one(f"#{field_id}", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        """Move to next field on Enter, or save if on last field."""
        current_id = event.input.id
        if current_id in self.FIELD_ORDER and current_id != self.FIELD_ORDER[-1]:
            next_id = self.FIELD_ORDER[self.FIELD_ORDER.index(current_id) + 1]
            self.query_one(f"#{next_id}", Input).focus()
        else:
            self._save()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel":
            self.dismiss(None)
        elif event.button.id == "save":
            self._save()

    def action_cancel(self) -> None:
        self.dismiss(None)

    def _save(self) -> None:
        entry_date = self.query_one("#entry-date", Input).value.strip()
        hours = self.query_one("#entry-hours", Input).value.strip()

        error = validate(entry_date, hours)
        if error:
            self.app.notify(error, severity="error")
            return

        self.dismiss((entry_date, hours))


class EditHoursScreen(ModalScreen[tuple[str, str] | None]):
    """Modal screen for changing the hours of an existing entry.

    Returns (entry_id, hours_string) or None if cancelled.
    """

    CSS = "EditHoursScreen { align: center middle; }" + DIALOG_CSS

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, entry: TimeEntry):
        super().__init__()
        self.entry = entry

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Label(f"Edit {self.entry.date}", classes="dialog-title")
            with Vertical(classes="field-group"):
                yield Label("Hours", classes="field-label")
                yield Input(value=f"{self.entry.hours}", placeholder="0", id="edit-hours")
            with Horizontal(classes="dialog-buttons"):
                yield Button("Save", variant="primary", id="save")
                yield Button("Cancel", variant="default", id="cancel")

    def on_mount(self) -> None:
        self.query_one("#edit-hours", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self._save()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel":
            self.dismiss(None)
        elif event.button.id == "save":
            self._save()

    def action_cancel(self) -> None:
        self.dismiss(None)

    def _save(self) -> None:
        hours_str = self.query_one("#edit-hours", Input).value.strip()

        if not hours_str:
            self.app.notify("Hours is required", severity="error")
            return

        try:
            hours = Decimal(hours_str)
        except InvalidOperation:
            self.app.notify("Invalid hours value", severity="error")
            return
        if not hours.is_finite() or hours < 0:
            self.app.notify("Hours cannot be negative", severity="error")
            return
        if not fits_hours_places(hours):
            self.app.notify(f"Hours allow at most {HOURS_PLACES} decimal places", severity="error")
            return

        self.dismiss((self.entry.id, hours_str))


class EditContractScreen(ModalScreen[ContractInfo | None]):
    """Modal screen for the monthly fee and base hours."""

    CSS = "EditContractScreen { align: center middle; }" + DIALOG_CSS

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    FIELD_ORDER = ["monthly-fee", "base-hours"]

    def __init__(self, contract: ContractInfo):
        super().__init__()
        self.contract = contract

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Label("Contract", classes="dialog-title")
            with Vertical(classes="field-group"):
                yield Label("Monthly fee (yen)", classes="field-label")
                yield Input(value=str(self.contract.monthly_fee), placeholder="400000", id="monthly-fee")
            with Vertical(classes="field-group"):
                yield Label("Base hours", classes="field-label")
                yield Input(value=str(self.contract.base_hours), placeholder="140", id="base-hours")
            with Horizontal(classes="dialog-buttons"):
                yield Button("Save", variant="primary", id="save")
                yield Button("Cancel", variant="default", id="cancel")

    def on_mount(self) -> None:
        self.query_one("#monthly-fee", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == self.FIELD_ORDER[0]:
            self.query_one(f"#{self.FIELD_ORDER[1]}", Input).focus()
        else:
            self._save()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel":
            self.dismiss(None)
        elif event.button.id == "save":
            self._save()

    def action_cancel(self) -> None:
        self.dismiss(None)

    def _save(self) -> None:
        fee = self.query_one("#monthly-fee", Input).value.strip().replace(",", "")
        base_hours = self.query_one("#base-hours", Input).value.strip()

        try:
            contract = ContractInfo(monthly_fee=fee, base_hours=base_hours)  # type: ignore[arg-type]
        except InvalidConfiguration as exc:
            self.app.notify(str(exc), severity="error")
            return

        self.dismiss(contract)


class EditProfileScreen(ModalScreen[dict[str, str] | None]):
    """Modal screen for sender, bank and client details.

    Returns the changed fields or None if cancelled.
    """

    CSS = """
    EditProfileScreen {
        align: center middle;
    }

    #profile-fields {
        height: auto;
        max-height: 30;
    }
    """ + DIALOG_CSS

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, profile: InvoiceProfile):
        super().__init__()
        self.profile = profile

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Label("Invoice Profile", classes="dialog-title")
            with VerticalScroll(id="profile-fields"):
                for name, label in PROFILE_LABELS.items():
                    with Vertical(classes="field-group"):
                        yield Label(label, classes="field-label")
                        yield Input(value=getattr(self.profile, name), id=f"profile-{name.replace('_', '-')}")
            with Horizontal(classes="dialog-buttons"):
                yield Button("Save", variant="primary", id="save")
                yield Button("Cancel", variant="default", id="cancel")

    def on_mount(self) -> None:
        self.query_one("#profile-sender-name", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        """Move to next field on Enter, or save if on last field."""
        names = list(PROFILE_LABELS)
        current = (event.input.id or "").removeprefix("profile-").replace("-", "_")
        if current in names and current != names[-1]:
            next_name = names[names.index(current) + 1]
            self.query_one(f"#profile-{next_name.replace('_', '-')}", Input).focus()
        else:
            self._save()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel":
            self.dismiss(None)
        elif event.button.id == "save":
            self._save()

    def action_cancel(self) -> None:
        self.dismiss(None)

    def _save(self) -> None:
        changes = {}
        for name in PROFILE_LABELS:
            value = self.query_one(f"#profile-{name.replace('_', '-')}", Input).value.strip()
            if value != getattr(self.profile, name):
                changes[name] = value
        self.dismiss(changes)
