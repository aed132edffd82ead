"""
Shared fixtures.

Every test runs against an in-memory SQLite ledger and a fixed
"today" of 2025-06-15. No network calls anywhere.
"""

from datetime import date

import pytest

from budget_assistant.audit import AuditLogger
from budget_assistant.services.budget_service import BudgetService
from budget_assistant.services.storage import (
    InMemoryChatMemory,
    SqlChatMemory,
    SqlLedgerStorage,
    create_ledger_engine,
)
from budget_assistant.tools import ToolRegistry, build_budget_tools


FIXED_TODAY = date(2025, 6, 15)


class RecordingLogger:
    """Stands in for a structlog logger and keeps every call."""

    def __init__(self):
        self.records: list[tuple[str, str, dict]] = []

    def _record(self, level: str, event: str, **kwargs):
        self.records.append((level, event, kwargs))

    def info(self, event, **kwargs):
        self._record("info", event, **kwargs)

    def warning(self, event, **kwargs):
        self._record("warning", event, **kwargs)

    def error(self, event, **kwargs):
        self._record("error", event, **kwargs)

    def event_types(self) -> list[str]:
        return [kwargs["event_type"] for _, _, kwargs in self.records]


@pytest.fixture
def recording_logger():
    return RecordingLogger()


@pytest.fixture
def audit_logger(recording_logger):
    return AuditLogger(logger=recording_logger)


@pytest.fixture
def engine():
    engine = create_ledger_engine("sqlite:///:memory:")
    yield engine
    engine.dispose()


@pytest.fixture
def storage(engine):
    return SqlLedgerStorage(engine)


@pytest.fixture
def sql_memory(engine):
    return SqlChatMemory(engine)


@pytest.fixture
def memory():
    return InMemoryChatMemory()


@pytest.fixture
def service(storage, audit_logger):
    return BudgetService(
        storage,
        audit_logger=audit_logger,
        clock=lambda: FIXED_TODAY,
    )


@pytest.fixture
def registry(service, audit_logger):
    return ToolRegistry(build_budget_tools(service), audit_logger=audit_logger)
