"""
Tests for the Google Sheets ledger backend.

Uses in-memory fake worksheets; gspread is never called.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal

from budget_assistant.models.ledger import Budget, Transaction, TransactionType
from budget_assistant.services.budget_service import BudgetService
from budget_assistant.services.storage.google_sheets import (
    BUDGET_COLUMNS,
    TRANSACTION_COLUMNS,
    GoogleSheetsLedgerStorage,
)


class FakeWorksheet:
    """The two worksheet calls the storage uses."""

    def __init__(self, header: list[str]):
        self.rows = [list(header)]

    def get_all_values(self) -> list[list[str]]:
        return [list(row) for row in self.rows]

    def append_row(self, row, value_input_option=None):
        self.rows.append([str(value) for value in row])


class FakeSheetsClient:
    def __init__(self):
        self.budgets = FakeWorksheet(BUDGET_COLUMNS)
        self.transactions = FakeWorksheet(TRANSACTION_COLUMNS)

    def get_budgets_sheet(self):
        return self.budgets

    def get_transactions_sheet(self):
        return self.transactions


class TickingClock:
    """datetime.now() stand-in that advances one second per call."""

    def __init__(self):
        self._now = datetime(2025, 6, 15, 9, 0, 0)

    def __call__(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now


def make_storage():
    client = FakeSheetsClient()
    return GoogleSheetsLedgerStorage(client=client, clock=TickingClock()), client


def expense(amount, category="Food", when=date(2025, 6, 10), ttype=TransactionType.EXPENSE):
    return Transaction(
        amount=Decimal(amount),
        description="Test",
        transaction_date=when,
        category=category,
        type=ttype,
    )


class TestGoogleSheetsLedgerStorage:
    """Tests for GoogleSheetsLedgerStorage over fake worksheets."""

    def test_save_budget_appends_row_with_next_id(self):
        storage, client = make_storage()

        first = storage.save_budget(Budget(category="Food", monthly_limit=Decimal("500"), year=2025, month=6))
        second = storage.save_budget(Budget(category="Fun", monthly_limit=Decimal("50"), year=2025, month=6))

        assert (first.id, second.id) == (1, 2)
        assert len(client.budgets.rows) == 3
        assert client.budgets.rows[1][:5] == ["1", "Food", "500", "2025", "6"]
        assert client.budgets.rows[1][7] == "TRUE"

    def test_find_and_list_active_budgets(self):
        storage, _ = make_storage()
        storage.save_budget(Budget(category="Transport", monthly_limit=Decimal("1"), year=2025, month=6))
        storage.save_budget(Budget(category="Food", monthly_limit=Decimal("1"), year=2025, month=6))
        storage.save_budget(Budget(
            category="Old", monthly_limit=Decimal("1"), year=2025, month=6, is_active=False
        ))

        assert storage.find_active_budget("Food", 2025, 6).category == "Food"
        assert storage.find_active_budget("Old", 2025, 6) is None
        assert [b.category for b in storage.list_active_budgets()] == ["Food", "Transport"]

    def test_sums_filter_by_type_category_and_period(self):
        storage, _ = make_storage()
        storage.save_transaction(expense("10"))
        storage.save_transaction(expense("5", when=date(2025, 6, 30)))
        storage.save_transaction(expense("99", when=date(2025, 7, 1)))
        storage.save_transaction(expense("7", category="Fun"))
        storage.save_transaction(expense("1000", category="Salary", ttype=TransactionType.INCOME))

        june = (date(2025, 6, 1), date(2025, 6, 30))
        assert storage.sum_by_type_between(TransactionType.EXPENSE, *june) == Decimal("22")
        assert storage.sum_by_type_between(TransactionType.INCOME, *june) == Decimal("1000")
        assert storage.sum_expenses_by_category_between("Food", *june) == Decimal("15")
        assert len(storage.list_transactions_by_category_between("Food", *june)) == 2

    def test_recent_transactions_newest_first(self):
        storage, _ = make_storage()
        for amount in ["1", "2", "3"]:
            storage.save_transaction(expense(amount))

        recent = storage.list_recent_transactions(limit=2)
        assert [t.amount for t in recent] == [Decimal("3"), Decimal("2")]

    def test_malformed_rows_are_skipped(self):
        storage, client = make_storage()
        storage.save_transaction(expense("10"))
        client.transactions.rows.append(["x", "not-a-number", "", "", "", "", "", ""])
        client.transactions.rows.append([])

        assert len(storage.list_recent_transactions()) == 1

    def test_domain_service_runs_on_sheets_backend(self):
        storage, _ = make_storage()
        service = BudgetService(storage, clock=lambda: date(2025, 6, 15))

        assert service.create_budget("Food", Decimal("500")).ok
        assert service.create_budget("Food", Decimal("500")).kind is not None
        service.add_transaction(Decimal("75"), "Groceries", "Food", "expense")

        text = service.get_all_budgets().value
        assert "💸 Spent: $75.00 (15.0%)" in text
        assert "💵 Remaining: $425.00" in text
