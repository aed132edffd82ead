"""
SQL Storage Implementation

DESIGN DECISION: SQLAlchemy 2.0 is the default ledger backend because:
1. The persisted shape is plainly relational (budgets, transactions)
2. Sums over a date range belong in the database, not in Python
3. SQLite works out of the box; any SQLAlchemy URL works in production

Every public method opens its own short session via session_scope().
There are no multi-entity transactions: one write, one commit.

NOTE: Nothing here enforces "one active budget per (category, year,
month)". There is no unique index; the check lives in the
domain service and is not atomic with the insert.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Integer,
    Numeric,
    String,
    Text,
    create_engine,
    delete,
    func,
    select,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    Session,
    mapped_column,
    sessionmaker,
)
from sqlalchemy.pool import StaticPool

from budget_assistant.models.chat import ChatMessage, ChatRole
from budget_assistant.models.ledger import Budget, Transaction, TransactionType
from budget_assistant.services.storage.interface import (
    ChatMemoryInterface,
    LedgerStorageInterface,
    StorageError,
)


class Base(DeclarativeBase):
    pass


# ---------------------------
# budgets
# ---------------------------


class BudgetRow(Base):
    __tablename__ = "budgets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    monthly_limit: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    budget_year: Mapped[int] = mapped_column(Integer, nullable=False)
    budget_month: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)
    alert_threshold: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)


# ---------------------------
# transactions
# ---------------------------


class TransactionRow(Base):
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    # Stored as the enum name (INCOME / EXPENSE)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)


# ---------------------------
# chat_memory
# ---------------------------


class ChatMessageRow(Base):
    __tablename__ = "chat_memory"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    conversation_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


def create_ledger_engine(database_url: str, *, echo: bool = False) -> Engine:
    """
    Create an engine for the ledger database and make sure tables exist.

    In-memory SQLite gets a StaticPool so every session sees the same
    database (in-memory DBs are per-connection by default).
    """
    kwargs: dict = {"echo": echo}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url or database_url.rstrip("/") in ("sqlite:", "sqlite+pysqlite:"):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True

    engine = create_engine(database_url, **kwargs)
    create_schema(engine)
    return engine


def create_schema(engine: Engine) -> None:
    """Create all ledger tables that don't exist yet."""
    Base.metadata.create_all(bind=engine)


class _SqlStore:
    """Shared session handling for the SQL stores."""

    def __init__(self, engine: Engine):
        self._engine = engine
        self._session_maker = sessionmaker(bind=engine, expire_on_commit=False, class_=Session)

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Provide a transactional scope around a series of operations."""
        session = self._session_maker()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"Database operation failed: {e}") from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


def _money(value) -> Decimal:
    """Normalize a SUM/COALESCE result to a 2-place Decimal."""
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(Decimal("0.01"))


class SqlLedgerStorage(_SqlStore, LedgerStorageInterface):
    """
    SQLAlchemy implementation of ledger storage.

    Budgets and transactions map one-to-one onto the budgets and
    transactions tables.
    """

    @staticmethod
    def _row_to_budget(row: BudgetRow) -> Budget:
        return Budget(
            id=row.id,
            category=row.category,
            monthly_limit=_money(row.monthly_limit),
            year=row.budget_year,
            month=row.budget_month,
            notes=row.notes,
            alert_threshold=Decimal(str(row.alert_threshold)),
            is_active=row.is_active,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    @staticmethod
    def _row_to_transaction(row: TransactionRow) -> Transaction:
        return Transaction(
            id=row.id,
            amount=_money(row.amount),
            description=row.description,
            transaction_date=row.date,
            category=row.category,
            type=TransactionType(row.type),
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def save_budget(self, budget: Budget) -> Budget:
        now = datetime.now()
        row = BudgetRow(
            category=budget.category,
            monthly_limit=budget.monthly_limit,
            budget_year=budget.year,
            budget_month=budget.month,
            notes=budget.notes,
            alert_threshold=budget.alert_threshold,
            is_active=budget.is_active,
            created_at=now,
            updated_at=now,
        )
        with self.session_scope() as session:
            session.add(row)
            session.flush()
            return self._row_to_budget(row)

    def find_active_budget(
        self,
        category: str,
        year: int,
        month: int,
    ) -> Optional[Budget]:
        stmt = (
            select(BudgetRow)
            .where(
                BudgetRow.category == category,
                BudgetRow.budget_year == year,
                BudgetRow.budget_month == month,
                BudgetRow.is_active.is_(True),
            )
            .order_by(BudgetRow.id)
            .limit(1)
        )
        with self.session_scope() as session:
            row = session.execute(stmt).scalars().first()
            return self._row_to_budget(row) if row else None

    def list_active_budgets(self) -> list[Budget]:
        stmt = (
            select(BudgetRow)
            .where(BudgetRow.is_active.is_(True))
            .order_by(BudgetRow.category, BudgetRow.id)
        )
        with self.session_scope() as session:
            return [self._row_to_budget(row) for row in session.execute(stmt).scalars()]

    def save_transaction(self, transaction: Transaction) -> Transaction:
        now = datetime.now()
        row = TransactionRow(
            amount=transaction.amount,
            description=transaction.description,
            date=transaction.transaction_date,
            category=transaction.category,
            type=transaction.type.value,
            created_at=now,
            updated_at=now,
        )
        with self.session_scope() as session:
            session.add(row)
            session.flush()
            return self._row_to_transaction(row)

    def sum_by_type_between(
        self,
        transaction_type: TransactionType,
        date_from: date,
        date_to: date,
    ) -> Decimal:
        stmt = select(func.coalesce(func.sum(TransactionRow.amount), 0)).where(
            TransactionRow.type == transaction_type.value,
            TransactionRow.date.between(date_from, date_to),
        )
        with self.session_scope() as session:
            return _money(session.execute(stmt).scalar())

    def sum_expenses_by_category_between(
        self,
        category: str,
        date_from: date,
        date_to: date,
    ) -> Decimal:
        stmt = select(func.coalesce(func.sum(TransactionRow.amount), 0)).where(
            TransactionRow.category == category,
            TransactionRow.type == TransactionType.EXPENSE.value,
            TransactionRow.date.between(date_from, date_to),
        )
        with self.session_scope() as session:
            return _money(session.execute(stmt).scalar())

    def list_transactions_by_category_between(
        self,
        category: str,
        date_from: date,
        date_to: date,
    ) -> list[Transaction]:
        stmt = (
            select(TransactionRow)
            .where(
                TransactionRow.category == category,
                TransactionRow.date.between(date_from, date_to),
            )
            .order_by(TransactionRow.date, TransactionRow.id)
        )
        with self.session_scope() as session:
            return [self._row_to_transaction(row) for row in session.execute(stmt).scalars()]

    def list_recent_transactions(self, limit: int = 10) -> list[Transaction]:
        # id breaks ties between rows created within the same clock tick
        stmt = (
            select(TransactionRow)
            .order_by(TransactionRow.created_at.desc(), TransactionRow.id.desc())
            .limit(limit)
        )
        with self.session_scope() as session:
            return [self._row_to_transaction(row) for row in session.execute(stmt).scalars()]


class SqlChatMemory(_SqlStore, ChatMemoryInterface):
    """Conversation memory stored in the chat_memory table."""

    def add(self, conversation_id: str, messages: list[ChatMessage]) -> None:
        with self.session_scope() as session:
            for message in messages:
                session.add(ChatMessageRow(
                    conversation_id=conversation_id,
                    role=message.role.value,
                    content=message.content,
                    created_at=message.created_at,
                ))

    def get(self, conversation_id: str, last_n: Optional[int] = None) -> list[ChatMessage]:
        stmt = (
            select(ChatMessageRow)
            .where(ChatMessageRow.conversation_id == conversation_id)
            .order_by(ChatMessageRow.id.desc())
        )
        if last_n is not None:
            stmt = stmt.limit(last_n)
        with self.session_scope() as session:
            rows = list(session.execute(stmt).scalars())
        rows.reverse()
        return [
            ChatMessage(
                role=ChatRole(row.role),
                content=row.content,
                created_at=row.created_at,
            )
            for row in rows
        ]

    def clear(self, conversation_id: str) -> None:
        with self.session_scope() as session:
            session.execute(
                delete(ChatMessageRow).where(ChatMessageRow.conversation_id == conversation_id)
            )
