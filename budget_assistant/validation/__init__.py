"""Input validation for ledger writes."""

from budget_assistant.validation.validator import (
    INVALID_TYPE_MESSAGE,
    LedgerValidator,
    parse_iso_date,
    parse_transaction_type,
)

__all__ = [
    "INVALID_TYPE_MESSAGE",
    "LedgerValidator",
    "parse_iso_date",
    "parse_transaction_type",
]
