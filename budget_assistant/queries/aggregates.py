"""
Period and Budget Arithmetic

DESIGN DECISION: All money math is Decimal with explicit HALF_UP rounding.
The numbers shown to users must be reproducible by hand:

- A period is the closed range [first day, last day] of a calendar month
- percent used = (spent / limit rounded HALF_UP to 4 places) x 100
- The threshold comparison uses that value as is; users see it
  rounded HALF_UP to one decimal
"""

import calendar
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from budget_assistant.models.ledger import Budget, BudgetStatus


FOUR_PLACES = Decimal("0.0001")
ONE_PLACE = Decimal("0.1")
CENTS = Decimal("0.01")
HUNDRED = Decimal("100")


def month_period(year: int, month: int) -> tuple[date, date]:
    """First and last day of a calendar month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def percent_used(spent: Decimal, monthly_limit: Decimal) -> Decimal:
    ratio = (spent / monthly_limit).quantize(FOUR_PLACES, rounding=ROUND_HALF_UP)
    return ratio * HUNDRED


def one_decimal(value: Decimal) -> Decimal:
    return value.quantize(ONE_PLACE, rounding=ROUND_HALF_UP)


def money(value: Decimal) -> str:
    """Two-decimal amount without the currency sign, e.g. '45.50'."""
    return str(Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP))


def budget_status(budget: Budget, spent: Decimal) -> BudgetStatus:
    """Spending status of a budget given what was spent in its period."""
    used = percent_used(spent, budget.monthly_limit)
    return BudgetStatus(
        budget=budget,
        spent=spent,
        remaining=budget.monthly_limit - spent,
        percent_used=used,
        display_percent=one_decimal(used),
        over_threshold=used >= budget.alert_threshold,
    )
