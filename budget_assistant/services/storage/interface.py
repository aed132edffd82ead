"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for ledger storage.
This allows us to:
1. Use a SQL database (SQLAlchemy) as the default backend
2. Keep the Google Sheets backend for users who want to see their data
3. Keep business rules out of storage entirely

The ledger store is PURE storage: no validation, no deduplication,
no defaults. Those live in the domain service.
"""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Optional

from budget_assistant.models.chat import ChatMessage
from budget_assistant.models.ledger import Budget, Transaction, TransactionType


class LedgerStorageInterface(ABC):
    """
    Abstract interface for budget and transaction storage.

    Any storage implementation (SQL, Google Sheets, etc.)
    must implement these methods.
    """

    @abstractmethod
    def save_budget(self, budget: Budget) -> Budget:
        """
        Insert a new budget row.

        Returns:
            The stored budget with id and timestamps set

        Raises:
            StorageError: If the write fails
        """

    @abstractmethod
    def find_active_budget(
        self,
        category: str,
        year: int,
        month: int,
    ) -> Optional[Budget]:
        """
        Find an active budget for the exact (category, year, month).

        Returns:
            The first matching active budget, or None
        """

    @abstractmethod
    def list_active_budgets(self) -> list[Budget]:
        """
        List all active budgets ordered by category.
        """

    @abstractmethod
    def save_transaction(self, transaction: Transaction) -> Transaction:
        """
        Insert a new transaction row.

        Returns:
            The stored transaction with id and timestamps set

        Raises:
            StorageError: If the write fails
        """

    @abstractmethod
    def sum_by_type_between(
        self,
        transaction_type: TransactionType,
        date_from: date,
        date_to: date,
    ) -> Decimal:
        """
        Sum of amounts for one type with date in [date_from, date_to].

        Returns Decimal("0") when nothing matches.
        """

    @abstractmethod
    def sum_expenses_by_category_between(
        self,
        category: str,
        date_from: date,
        date_to: date,
    ) -> Decimal:
        """
        Sum of EXPENSE amounts for one category with date in [date_from, date_to].

        Returns Decimal("0") when nothing matches.
        """

    @abstractmethod
    def list_transactions_by_category_between(
        self,
        category: str,
        date_from: date,
        date_to: date,
    ) -> list[Transaction]:
        """
        All transactions (any type) of one category in the date range.
        """

    @abstractmethod
    def list_recent_transactions(self, limit: int = 10) -> list[Transaction]:
        """
        Most recently created transactions, newest first.
        """


class ChatMemoryInterface(ABC):
    """
    Abstract interface for conversation memory.

    Memory is an append-only log per conversation id. The only
    destructive operation is clearing a whole conversation.
    """

    @abstractmethod
    def add(self, conversation_id: str, messages: list[ChatMessage]) -> None:
        """Append messages to a conversation, in order."""

    @abstractmethod
    def get(self, conversation_id: str, last_n: Optional[int] = None) -> list[ChatMessage]:
        """
        Stored turns in order (oldest first).

        Args:
            last_n: Only return the last N turns when given
        """

    @abstractmethod
    def clear(self, conversation_id: str) -> None:
        """Delete every turn of a conversation."""


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
