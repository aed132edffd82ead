"""Services package."""

from budget_assistant.services.budget_service import BudgetService
from budget_assistant.services.storage import (
    ChatMemoryInterface,
    ConnectionError,
    GoogleSheetsClient,
    GoogleSheetsLedgerStorage,
    InMemoryChatMemory,
    LedgerStorageInterface,
    SqlChatMemory,
    SqlLedgerStorage,
    StorageError,
    create_ledger_engine,
)

__all__ = [
    # Domain service
    "BudgetService",
    # Storage services
    "ChatMemoryInterface",
    "ConnectionError",
    "GoogleSheetsClient",
    "GoogleSheetsLedgerStorage",
    "InMemoryChatMemory",
    "LedgerStorageInterface",
    "SqlChatMemory",
    "SqlLedgerStorage",
    "StorageError",
    "create_ledger_engine",
]
