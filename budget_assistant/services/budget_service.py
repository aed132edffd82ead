"""
Budget Domain Service

This is the ONLY place where ledger business rules live:
1. Input validation (positive amounts, threshold range, ISO dates, types)
2. Defaults (current year/month, today, 80% alert threshold)
3. Deduplication of active budgets per (category, year, month)
4. Aggregation (spending per budget, monthly totals)

DESIGN DECISION: Operations never raise. Each one returns an
OperationResult carrying either the value or a classified error:
- The five text operations carry the user-facing text as their value
- get_summary carries a BudgetSummary; callers unwrap failures to zero

KNOWN RACE: create_budget checks for an existing active budget and then
inserts, without a lock. Two concurrent calls for the same period can
both insert. Single-user deployments don't hit this.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Optional

from budget_assistant.audit.logger import AuditLogger
from budget_assistant.errors import (
    BudgetAssistantError,
    ConflictError,
    UnhandledError,
)
from budget_assistant.models.ledger import (
    DEFAULT_ALERT_THRESHOLD,
    Budget,
    BudgetStatus,
    BudgetSummary,
    Transaction,
    TransactionType,
)
from budget_assistant.models.result import OperationResult
from budget_assistant.queries.aggregates import (
    budget_status,
    money,
    month_period,
)
from budget_assistant.services.storage.interface import LedgerStorageInterface
from budget_assistant.validation.validator import (
    LedgerValidator,
    parse_iso_date,
    parse_transaction_type,
)


NO_BUDGETS_MESSAGE = "📋 No active budgets found. Create your first budget to get started!"
NO_TRANSACTIONS_MESSAGE = "📝 No transactions found. Add your first transaction to get started!"


# =============================================================================
# RENDERING
# =============================================================================

def render_budget_created(budget: Budget) -> str:
    threshold = budget.alert_threshold.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return (
        "✅ Budget created successfully!\n"
        f"📋 Category: {budget.category}\n"
        f"💰 Monthly Limit: ${money(budget.monthly_limit)}\n"
        f"📅 Period: {budget.period_label}\n"
        f"⚠️ Alert Threshold: {threshold}%\n"
        f"📝 Notes: {budget.notes if budget.notes is not None else 'None'}\n"
    )


def render_transaction_added(transaction: Transaction) -> str:
    return (
        f"{transaction.type.marker} Transaction added successfully!\n"
        f"💵 Amount: ${money(transaction.amount)}\n"
        f"📝 Description: {transaction.description}\n"
        f"🏷️ Category: {transaction.category}\n"
        f"📅 Date: {transaction.formatted_date}\n"
        f"🔄 Type: {transaction.type.value}\n"
    )


def render_budget_statuses(statuses: list[BudgetStatus]) -> str:
    if not statuses:
        return NO_BUDGETS_MESSAGE

    lines = ["📋 **Current Active Budgets:**\n\n"]
    for status in statuses:
        budget = status.budget
        lines.append(
            f"{status.marker} **{budget.category}**\n"
            f"  💰 Budget: ${money(budget.monthly_limit)}\n"
            f"  💸 Spent: ${money(status.spent)} ({status.display_percent}%)\n"
            f"  💵 Remaining: ${money(status.remaining)}\n"
            f"  📅 Period: {budget.period_label}\n"
        )
        if budget.notes and budget.notes.strip():
            lines.append(f"  📝 Notes: {budget.notes}\n")
        lines.append("\n")
    return "".join(lines)


def render_category_spending(
    category: str,
    year: int,
    month: int,
    spent: Decimal,
    count: int,
) -> str:
    return (
        f"💳 **{category} Spending for {month}/{year}:**\n"
        "\n"
        f"💸 Total Spent: ${money(spent)}\n"
        f"📊 Number of Transactions: {count}\n"
    )


def render_monthly_summary(year: int, month: int, summary: BudgetSummary) -> str:
    status = "Positive ✅" if summary.net_amount >= 0 else "Negative ⚠️"
    return (
        f"📊 **Monthly Summary for {month}/{year}:**\n"
        "\n"
        f"💰 Total Income: ${money(summary.total_income)}\n"
        f"💸 Total Expenses: ${money(summary.total_expenses)}\n"
        f"💵 Net Amount: ${money(summary.net_amount)}\n"
        f"📈 Status: {status}\n"
    )


def render_recent_transactions(transactions: list[Transaction]) -> str:
    if not transactions:
        return NO_TRANSACTIONS_MESSAGE

    lines = ["📝 **Recent Transactions:**\n\n"]
    for transaction in transactions:
        lines.append(
            f"{transaction.type.marker} ${money(transaction.amount)} - {transaction.description}\n"
            f"  🏷️ {transaction.category} | 📅 {transaction.formatted_date}\n"
        )
    return "".join(lines)


# =============================================================================
# SERVICE
# =============================================================================

class BudgetService:
    """
    Ledger operations exposed to the agent as tools.

    Synchronous; each write is a single storage call.
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        validator: Optional[LedgerValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Callable[[], date] = date.today,
        recent_limit: int = 10,
        default_alert_threshold: Decimal = DEFAULT_ALERT_THRESHOLD,
    ):
        """
        Initialize the service.

        Args:
            storage: Ledger storage backend
            validator: Rule checks (default LedgerValidator())
            audit_logger: Audit trail (default AuditLogger())
            clock: Returns "today"; drives every default period and date
            recent_limit: How many transactions get_recent_transactions returns
            default_alert_threshold: Used when create_budget gets no threshold
        """
        self._storage = storage
        self._validator = validator or LedgerValidator()
        self._audit_logger = audit_logger or AuditLogger()
        self._clock = clock
        self._recent_limit = recent_limit
        self._default_alert_threshold = Decimal(str(default_alert_threshold))

    def _run(self, operation: str, error_prefix: str, action: Callable) -> OperationResult:
        """Run an operation, classifying whatever it raises."""
        try:
            return OperationResult.success(action())
        except BudgetAssistantError as e:
            self._audit_logger.log_operation_rejected(operation, e.kind.value, e.message)
            return OperationResult.failure(e)
        except Exception as e:
            self._audit_logger.log_operation_failed(operation, str(e))
            return OperationResult.failure(UnhandledError(f"{error_prefix}: {e}"))

    def _period(self, year: Optional[int], month: Optional[int]) -> tuple[int, int]:
        today = self._clock()
        year = year if year is not None else today.year
        month = month if month is not None else today.month
        self._validator.raise_for(self._validator.validate_period(month))
        return year, month

    # ---------------------------
    # writes
    # ---------------------------

    def create_budget(
        self,
        category: str,
        monthly_limit: Decimal,
        year: Optional[int] = None,
        month: Optional[int] = None,
        notes: Optional[str] = None,
        alert_threshold: Optional[Decimal] = None,
    ) -> OperationResult[str]:
        """Create an active budget for a category and month."""
        def action() -> str:
            today = self._clock()
            budget_year = year if year is not None else today.year
            budget_month = month if month is not None else today.month
            threshold = (
                alert_threshold if alert_threshold is not None
                else self._default_alert_threshold
            )

            self._validator.raise_for(self._validator.validate_budget(
                category=category,
                monthly_limit=monthly_limit,
                month=budget_month,
                alert_threshold=threshold,
            ))
            name = category.strip()

            existing = self._storage.find_active_budget(name, budget_year, budget_month)
            if existing is not None:
                raise ConflictError(
                    f"❌ Budget for {name} already exists for "
                    f"{budget_month}/{budget_year}. "
                    f"Current limit: ${money(existing.monthly_limit)}"
                )

            stored = self._storage.save_budget(Budget(
                category=name,
                monthly_limit=monthly_limit,
                year=budget_year,
                month=budget_month,
                notes=notes,
                alert_threshold=threshold,
                is_active=True,
            ))
            self._audit_logger.log_budget_created(
                budget_id=stored.id,
                category=stored.category,
                monthly_limit=money(stored.monthly_limit),
                period=stored.period_label,
            )
            return render_budget_created(stored)

        return self._run("createBudget", "❌ Error creating budget", action)

    def add_transaction(
        self,
        amount: Decimal,
        description: str,
        category: str,
        transaction_type: str,
        transaction_date: Optional[str] = None,
    ) -> OperationResult[str]:
        """Record an income or expense."""
        def action() -> str:
            self._validator.raise_for(self._validator.validate_transaction(amount, category))
            when = parse_iso_date(transaction_date, default=self._clock())
            parsed_type = parse_transaction_type(transaction_type)

            stored = self._storage.save_transaction(Transaction(
                amount=amount,
                description=description or "",
                transaction_date=when,
                category=category.strip(),
                type=parsed_type,
            ))
            self._audit_logger.log_transaction_added(
                transaction_id=stored.id,
                transaction_type=stored.type.value,
                amount=money(stored.amount),
                category=stored.category,
            )
            return render_transaction_added(stored)

        return self._run("addTransaction", "❌ Error adding transaction", action)

    # ---------------------------
    # reads
    # ---------------------------

    def budget_statuses(self) -> OperationResult[list[BudgetStatus]]:
        """Every active budget with what was spent in its own period."""
        def action() -> list[BudgetStatus]:
            statuses = []
            for budget in self._storage.list_active_budgets():
                start, end = month_period(budget.year, budget.month)
                spent = self._storage.sum_expenses_by_category_between(
                    budget.category, start, end
                )
                statuses.append(budget_status(budget, spent or Decimal("0")))
            return statuses

        return self._run("budgetStatuses", "❌ Error retrieving budgets", action)

    def get_all_budgets(self) -> OperationResult[str]:
        statuses = self.budget_statuses()
        if not statuses.ok:
            return statuses
        return OperationResult.success(render_budget_statuses(statuses.value))

    def get_spending_summary(
        self,
        category: Optional[str] = None,
        year: Optional[int] = None,
        month: Optional[int] = None,
    ) -> OperationResult[str]:
        """
        Spending for one category, or the month's overall totals.

        A blank category counts as no category.
        """
        def action() -> str:
            period_year, period_month = self._period(year, month)
            start, end = month_period(period_year, period_month)

            if category is not None and category.strip():
                name = category.strip()
                spent = self._storage.sum_expenses_by_category_between(name, start, end)
                transactions = self._storage.list_transactions_by_category_between(
                    name, start, end
                )
                return render_category_spending(
                    name, period_year, period_month, spent, len(transactions)
                )

            summary = self._totals(start, end)
            return render_monthly_summary(period_year, period_month, summary)

        return self._run("getSpendingSummary", "❌ Error getting spending summary", action)

    def get_recent_transactions(self) -> OperationResult[str]:
        def action() -> str:
            return render_recent_transactions(
                self._storage.list_recent_transactions(self._recent_limit)
            )

        return self._run("getRecentTransactions", "❌ Error getting recent transactions", action)

    def get_summary(
        self,
        year: Optional[int] = None,
        month: Optional[int] = None,
    ) -> OperationResult[BudgetSummary]:
        """Income/expense totals for a month as structured data."""
        def action() -> BudgetSummary:
            period_year, period_month = self._period(year, month)
            return self._totals(*month_period(period_year, period_month))

        return self._run("getSummary", "❌ Error getting summary", action)

    def _totals(self, start: date, end: date) -> BudgetSummary:
        income = self._storage.sum_by_type_between(TransactionType.INCOME, start, end)
        expenses = self._storage.sum_by_type_between(TransactionType.EXPENSE, start, end)
        return BudgetSummary.of(income, expenses)
