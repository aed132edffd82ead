"""Period and budget arithmetic."""

from budget_assistant.queries.aggregates import (
    budget_status,
    money,
    month_period,
    one_decimal,
    percent_used,
)

__all__ = [
    "budget_status",
    "money",
    "month_period",
    "one_decimal",
    "percent_used",
]
