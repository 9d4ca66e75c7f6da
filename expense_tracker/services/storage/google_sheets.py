"""
Google Sheets Storage Implementation

One worksheet per record type: Expenses, Users and AuditLog. Row 1 of each
sheet holds the column names below; every later row is one record, keyed
by the id in column A.

NOTES:
- Sheets has no transactions; every write touches a single row
- Filtering happens in Python after reading the owner's rows
- Rows can be edited by hand, so reads tolerate short rows, blank cells and
  categories outside the enumeration
- Writes are retried with exponential backoff and surface as StorageError
"""

import json
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional
from uuid import UUID

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from expense_tracker.config import GoogleSheetsSettings
from expense_tracker.models.audit import AuditEvent, AuditEventType, AuditSeverity
from expense_tracker.models.expense import Expense, ExpenseCategory
from expense_tracker.models.user import User
from expense_tracker.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    ExpenseStorageInterface,
    StorageError,
    UserStorageInterface,
    sort_newest_first,
)


logger = structlog.get_logger(__name__)


# Column mappings for Expenses sheet
EXPENSE_COLUMNS = [
    "id",
    "owner_id",
    "amount",
    "category",
    "note",
    "date",
    "created_at",
    "updated_at",
]

# Column mappings for Users sheet
USER_COLUMNS = [
    "id",
    "email",
    "name",
    "monthly_budget",
    "created_at",
]

# Column mappings for Audit sheet
AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "owner_id",
    "entity_type",
    "entity_id",
    "description",
    "details_json",
    "error_message",
    "is_user_action",
]


def _safe_getter(row: list):
    """Build an accessor that tolerates short rows and empty cells."""
    def safe_get(index: int, default: str = "") -> str:
        try:
            return row[index] if row[index] else default
        except IndexError:
            return default
    return safe_get


def _find_row_index(sheet: gspread.Worksheet, record_id: str) -> Optional[int]:
    """1-based sheet row holding record_id in column A (row 1 is the header)."""
    all_rows = sheet.get_all_values()
    for idx, row in enumerate(all_rows[1:], start=2):
        if row and row[0] == record_id:
            return idx
    return None


def _write_row(sheet: gspread.Worksheet, record_id: str, row: list) -> None:
    """Overwrite the row for record_id, or append a new one."""
    idx = _find_row_index(sheet, record_id)
    if idx is None:
        sheet.append_row(row, value_input_option="RAW")
        return
    for col_idx, value in enumerate(row, start=1):
        sheet.update_cell(idx, col_idx, value)


class GoogleSheetsClient:
    """
    Authorized handle on the configured spreadsheet.

    Worksheets are created on first use, with their header row.
    """

    def __init__(self, settings: GoogleSheetsSettings):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """Authorize with the service-account key file (retried)."""
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Open the spreadsheet by id, once."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def _get_or_create_sheet(
        self,
        title: str,
        columns: list[str],
        rows: int,
    ) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_expenses_sheet(self) -> gspread.Worksheet:
        """Get or create the Expenses worksheet."""
        return self._get_or_create_sheet(
            self._settings.expenses_sheet_name, EXPENSE_COLUMNS, rows=1000
        )

    def get_users_sheet(self) -> gspread.Worksheet:
        """Get or create the Users worksheet."""
        return self._get_or_create_sheet(
            self._settings.users_sheet_name, USER_COLUMNS, rows=200
        )

    def get_audit_sheet(self) -> gspread.Worksheet:
        """Get or create the AuditLog worksheet."""
        return self._get_or_create_sheet(
            self._settings.audit_sheet_name, AUDIT_COLUMNS, rows=5000
        )


class GoogleSheetsExpenseStorage(ExpenseStorageInterface):
    """
    Google Sheets implementation of expense storage.

    Expenses are stored one per row. Amounts are written as plain decimal
    strings so no precision is lost to spreadsheet number formatting.
    """

    def __init__(self, client: GoogleSheetsClient):
        self._client = client

    def _expense_to_row(self, expense: Expense) -> list:
        """Convert an Expense to a spreadsheet row."""
        return [
            str(expense.id),
            str(expense.owner_id),
            str(expense.amount),
            getattr(expense.category, "value", expense.category),
            expense.note,
            expense.date.isoformat(),
            expense.created_at.isoformat(),
            expense.updated_at.isoformat(),
        ]

    def _row_to_expense(self, row: list) -> Expense:
        """
        Convert a spreadsheet row to an Expense.

        Sheets can be edited by hand, so a category outside the enumeration
        is kept as-is and left for the aggregator to bucket. Every other
        field is still validated; a failing row raises ValueError.
        """
        safe_get = _safe_getter(row)

        fields = dict(
            id=UUID(safe_get(0)),
            owner_id=UUID(safe_get(1)),
            amount=Decimal(safe_get(2)),
            note=safe_get(4),
            date=datetime.fromisoformat(safe_get(5)),
            created_at=datetime.fromisoformat(safe_get(6)),
            updated_at=datetime.fromisoformat(safe_get(7) or safe_get(6)),
        )

        raw_category = safe_get(3)
        try:
            category = ExpenseCategory(raw_category)
        except ValueError:
            logger.warning(
                "unknown_expense_category",
                expense_id=safe_get(0),
                category=raw_category,
            )
            checked = Expense(category=ExpenseCategory.MISC, **fields)
            return checked.model_copy(update={"category": raw_category})

        return Expense(category=category, **fields)

    def _read_owner_rows(self, owner_id: UUID) -> list[Expense]:
        sheet = self._client.get_expenses_sheet()
        all_rows = sheet.get_all_values()[1:]  # Skip header

        expenses = []
        for row in all_rows:
            if not row or not row[0]:  # Skip empty rows
                continue
            if len(row) < 2 or row[1] != str(owner_id):
                continue
            try:
                expenses.append(self._row_to_expense(row))
            except (ValueError, InvalidOperation) as e:
                logger.warning("malformed_expense_row", row_id=row[0], error=str(e))
        return expenses

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def save_expense(self, expense: Expense) -> Expense:
        """Insert or overwrite an expense row."""
        try:
            sheet = self._client.get_expenses_sheet()
            _write_row(sheet, str(expense.id), self._expense_to_row(expense))
            return expense
        except Exception as e:
            raise StorageError(f"Failed to save expense: {e}")

    def get_expense(self, owner_id: UUID, expense_id: UUID) -> Optional[Expense]:
        """Retrieve an owned expense by its ID."""
        try:
            for expense in self._read_owner_rows(owner_id):
                if expense.id == expense_id:
                    return expense
            return None
        except Exception as e:
            raise StorageError(f"Failed to get expense: {e}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def delete_expense(self, owner_id: UUID, expense_id: UUID) -> bool:
        """Delete an owned expense."""
        try:
            sheet = self._client.get_expenses_sheet()
            all_rows = sheet.get_all_values()

            for idx, row in enumerate(all_rows[1:], start=2):
                if (
                    row
                    and row[0] == str(expense_id)
                    and len(row) > 1
                    and row[1] == str(owner_id)
                ):
                    sheet.delete_rows(idx)
                    return True

            return False
        except Exception as e:
            raise StorageError(f"Failed to delete expense: {e}")

    def list_expenses(
        self,
        owner_id: UUID,
        category: Optional[ExpenseCategory] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> list[Expense]:
        """List an owner's expenses with optional filters."""
        try:
            expenses = []
            for expense in self._read_owner_rows(owner_id):
                if category and expense.category != category:
                    continue
                if date_from and expense.date < date_from:
                    continue
                if date_to and expense.date > date_to:
                    continue
                expenses.append(expense)

            return sort_newest_first(expenses)
        except Exception as e:
            raise StorageError(f"Failed to list expenses: {e}")


class GoogleSheetsUserStorage(UserStorageInterface):
    """Google Sheets implementation of user storage."""

    def __init__(self, client: GoogleSheetsClient):
        self._client = client

    def _user_to_row(self, user: User) -> list:
        return [
            str(user.id),
            user.email,
            user.name,
            str(user.monthly_budget),
            user.created_at.isoformat(),
        ]

    def _row_to_user(self, row: list) -> User:
        safe_get = _safe_getter(row)
        return User(
            id=UUID(safe_get(0)),
            email=safe_get(1),
            name=safe_get(2),
            monthly_budget=Decimal(safe_get(3, "0")),
            created_at=datetime.fromisoformat(safe_get(4)),
        )

    def _find(self, predicate) -> Optional[User]:
        sheet = self._client.get_users_sheet()
        for row in sheet.get_all_values()[1:]:
            if row and row[0] and predicate(row):
                return self._row_to_user(row)
        return None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def save_user(self, user: User) -> User:
        """Insert or overwrite a user row."""
        try:
            sheet = self._client.get_users_sheet()
            _write_row(sheet, str(user.id), self._user_to_row(user))
            return user
        except Exception as e:
            raise StorageError(f"Failed to save user: {e}")

    def get_user(self, user_id: UUID) -> Optional[User]:
        try:
            return self._find(lambda row: row[0] == str(user_id))
        except Exception as e:
            raise StorageError(f"Failed to get user: {e}")

    def get_user_by_email(self, email: str) -> Optional[User]:
        email = email.strip().lower()
        try:
            return self._find(lambda row: len(row) > 1 and row[1].lower() == email)
        except Exception as e:
            raise StorageError(f"Failed to get user: {e}")


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """Append-only audit log in the AuditLog worksheet."""

    def __init__(self, client: GoogleSheetsClient):
        self._client = client

    def _row_to_event(self, row: list) -> AuditEvent:
        """Rebuild an AuditEvent from its 11 columns."""
        safe_get = _safe_getter(row)

        return AuditEvent(
            event_id=UUID(safe_get(0)),
            timestamp=datetime.fromisoformat(safe_get(1)),
            event_type=AuditEventType(safe_get(2)),
            severity=AuditSeverity(safe_get(3)),
            owner_id=UUID(safe_get(4)) if safe_get(4) else None,
            entity_type=safe_get(5) or None,
            entity_id=UUID(safe_get(6)) if safe_get(6) else None,
            description=safe_get(7),
            details=json.loads(safe_get(8)) if safe_get(8) else {},
            error_message=safe_get(9) or None,
            is_user_action=safe_get(10).lower() == "true",
        )

    def _read_events(self) -> list[AuditEvent]:
        sheet = self._client.get_audit_sheet()
        events = []
        for row in sheet.get_all_values()[1:]:
            if not row or not row[0]:
                continue
            try:
                events.append(self._row_to_event(row))
            except ValueError as e:
                logger.warning("malformed_audit_row", row_id=row[0], error=str(e))
        return events

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            sheet = self._client.get_audit_sheet()
            sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except Exception as e:
            raise StorageError(f"Failed to write audit event: {e}")

    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        """Get events by entity."""
        try:
            events = [
                e for e in self._read_events()
                if e.entity_type == entity_type and e.entity_id == entity_id
            ]
            events.sort(key=lambda e: e.timestamp)
            return events
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")

    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Get recent events."""
        try:
            events = self._read_events()
            # Sort newest first
            events.sort(key=lambda e: e.timestamp, reverse=True)
            return events[:limit]
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")
