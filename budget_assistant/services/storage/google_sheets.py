"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is kept as an alternative ledger backend because:
1. Non-technical users can look at their budgets directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions and no auto-increment (ids are max(id) + 1)
- Limited query capabilities (we filter and sum in Python)

Column names match the SQL tables, so a sheet can be exported to the
database later without reshaping.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from budget_assistant.config import GoogleSheetsSettings, get_settings
from budget_assistant.models.ledger import Budget, Transaction, TransactionType
from budget_assistant.services.storage.interface import (
    ConnectionError,
    LedgerStorageInterface,
    StorageError,
)


# Column mappings for Budgets sheet
BUDGET_COLUMNS = [
    "id",
    "category",
    "monthly_limit",
    "budget_year",
    "budget_month",
    "notes",
    "alert_threshold",
    "is_active",
    "created_at",
    "updated_at",
]

# Column mappings for Transactions sheet
TRANSACTION_COLUMNS = [
    "id",
    "amount",
    "description",
    "date",
    "category",
    "type",
    "created_at",
    "updated_at",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
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
        """Get the configured spreadsheet."""
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

    def _get_or_create_sheet(self, title: str, columns: list[str]) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=1000,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_budgets_sheet(self) -> gspread.Worksheet:
        """Get or create the Budgets worksheet."""
        return self._get_or_create_sheet(self._settings.budgets_sheet_name, BUDGET_COLUMNS)

    def get_transactions_sheet(self) -> gspread.Worksheet:
        """Get or create the Transactions worksheet."""
        return self._get_or_create_sheet(
            self._settings.transactions_sheet_name,
            TRANSACTION_COLUMNS,
        )


def _safe_getter(row: list) -> Callable[..., str]:
    """Index into a sheet row, tolerating short rows and blank cells."""
    def safe_get(index: int, default: str = "") -> str:
        try:
            return row[index] if row[index] else default
        except IndexError:
            return default
    return safe_get


def _next_id(rows: list[list]) -> int:
    ids = []
    for row in rows:
        if row and row[0]:
            try:
                ids.append(int(row[0]))
            except ValueError:
                continue
    return max(ids, default=0) + 1


class GoogleSheetsLedgerStorage(LedgerStorageInterface):
    """
    Google Sheets implementation of ledger storage.

    One budget or transaction per row. Reads fetch the whole sheet
    and filter in Python; malformed rows are skipped.
    """

    def __init__(
        self,
        client: Optional[GoogleSheetsClient] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._client = client or GoogleSheetsClient()
        self._clock = clock

    # ---------------------------
    # row conversion
    # ---------------------------

    def _budget_to_row(self, budget: Budget) -> list:
        return [
            str(budget.id),
            budget.category,
            str(budget.monthly_limit),
            str(budget.year),
            str(budget.month),
            budget.notes or "",
            str(budget.alert_threshold),
            "TRUE" if budget.is_active else "FALSE",
            budget.created_at.isoformat() if budget.created_at else "",
            budget.updated_at.isoformat() if budget.updated_at else "",
        ]

    def _row_to_budget(self, row: list) -> Budget:
        safe_get = _safe_getter(row)
        return Budget(
            id=int(safe_get(0)),
            category=safe_get(1),
            monthly_limit=Decimal(safe_get(2)),
            year=int(safe_get(3)),
            month=int(safe_get(4)),
            notes=safe_get(5) or None,
            alert_threshold=Decimal(safe_get(6, "80")),
            is_active=safe_get(7, "TRUE").upper() == "TRUE",
            created_at=datetime.fromisoformat(safe_get(8)) if safe_get(8) else None,
            updated_at=datetime.fromisoformat(safe_get(9)) if safe_get(9) else None,
        )

    def _transaction_to_row(self, transaction: Transaction) -> list:
        return [
            str(transaction.id),
            str(transaction.amount),
            transaction.description,
            transaction.transaction_date.isoformat(),
            transaction.category,
            transaction.type.value,
            transaction.created_at.isoformat() if transaction.created_at else "",
            transaction.updated_at.isoformat() if transaction.updated_at else "",
        ]

    def _row_to_transaction(self, row: list) -> Transaction:
        safe_get = _safe_getter(row)
        return Transaction(
            id=int(safe_get(0)),
            amount=Decimal(safe_get(1)),
            description=safe_get(2),
            transaction_date=date.fromisoformat(safe_get(3)),
            category=safe_get(4),
            type=TransactionType(safe_get(5)),
            created_at=datetime.fromisoformat(safe_get(6)) if safe_get(6) else None,
            updated_at=datetime.fromisoformat(safe_get(7)) if safe_get(7) else None,
        )

    def _load_budgets(self) -> list[Budget]:
        try:
            all_rows = self._client.get_budgets_sheet().get_all_values()[1:]
        except Exception as e:
            raise StorageError(f"Failed to read budgets: {e}")

        budgets = []
        for row in all_rows:
            if not row or not row[0]:  # Skip empty rows
                continue
            try:
                budgets.append(self._row_to_budget(row))
            except (ValueError, InvalidOperation):
                continue  # Skip malformed rows
        return budgets

    def _load_transactions(self) -> list[Transaction]:
        try:
            all_rows = self._client.get_transactions_sheet().get_all_values()[1:]
        except Exception as e:
            raise StorageError(f"Failed to read transactions: {e}")

        transactions = []
        for row in all_rows:
            if not row or not row[0]:
                continue
            try:
                transactions.append(self._row_to_transaction(row))
            except (ValueError, InvalidOperation):
                continue
        return transactions

    # ---------------------------
    # budgets
    # ---------------------------

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def save_budget(self, budget: Budget) -> Budget:
        """Append a budget row with the next free id."""
        try:
            sheet = self._client.get_budgets_sheet()
            now = self._clock()
            stored = budget.model_copy(update={
                "id": _next_id(sheet.get_all_values()[1:]),
                "created_at": now,
                "updated_at": now,
            })
            sheet.append_row(self._budget_to_row(stored), value_input_option="RAW")
            return stored
        except Exception as e:
            raise StorageError(f"Failed to save budget: {e}")

    def find_active_budget(
        self,
        category: str,
        year: int,
        month: int,
    ) -> Optional[Budget]:
        for budget in self._load_budgets():
            if (
                budget.is_active
                and budget.category == category
                and budget.year == year
                and budget.month == month
            ):
                return budget
        return None

    def list_active_budgets(self) -> list[Budget]:
        budgets = [b for b in self._load_budgets() if b.is_active]
        budgets.sort(key=lambda b: (b.category, b.id))
        return budgets

    # ---------------------------
    # transactions
    # ---------------------------

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def save_transaction(self, transaction: Transaction) -> Transaction:
        """Append a transaction row with the next free id."""
        try:
            sheet = self._client.get_transactions_sheet()
            now = self._clock()
            stored = transaction.model_copy(update={
                "id": _next_id(sheet.get_all_values()[1:]),
                "created_at": now,
                "updated_at": now,
            })
            sheet.append_row(self._transaction_to_row(stored), value_input_option="RAW")
            return stored
        except Exception as e:
            raise StorageError(f"Failed to save transaction: {e}")

    def sum_by_type_between(
        self,
        transaction_type: TransactionType,
        date_from: date,
        date_to: date,
    ) -> Decimal:
        return sum(
            (
                t.amount
                for t in self._load_transactions()
                if t.type == transaction_type
                and date_from <= t.transaction_date <= date_to
            ),
            Decimal("0"),
        )

    def sum_expenses_by_category_between(
        self,
        category: str,
        date_from: date,
        date_to: date,
    ) -> Decimal:
        return sum(
            (
                t.amount
                for t in self.list_transactions_by_category_between(category, date_from, date_to)
                if t.type == TransactionType.EXPENSE
            ),
            Decimal("0"),
        )

    def list_transactions_by_category_between(
        self,
        category: str,
        date_from: date,
        date_to: date,
    ) -> list[Transaction]:
        transactions = [
            t for t in self._load_transactions()
            if t.category == category and date_from <= t.transaction_date <= date_to
        ]
        transactions.sort(key=lambda t: (t.transaction_date, t.id))
        return transactions

    def list_recent_transactions(self, limit: int = 10) -> list[Transaction]:
        transactions = self._load_transactions()
        # Sort newest first; id breaks ties within the same timestamp
        transactions.sort(
            key=lambda t: (t.created_at or datetime.min, t.id),
            reverse=True,
        )
        return transactions[:limit]
