"""
Tool Registry & Dispatch

DESIGN DECISION: The tool table is STATIC. build_budget_tools() lists
every tool explicitly: name, description, JSON input schema, argument
model and invoker. Nothing is discovered by reflection, so:
1. The schema the agent sees is exactly the schema written here
2. Argument coercion is a pydantic model per tool
3. An empty registry is valid and simply means "no tools"

Dispatch NEVER raises. Unknown tools and bad arguments come back as
error results the agent can read and recover from.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Iterable, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from budget_assistant.audit.logger import AuditLogger
from budget_assistant.errors import ErrorKind
from budget_assistant.models.ledger import BudgetSummary
from budget_assistant.models.result import OperationResult
from budget_assistant.services.budget_service import BudgetService


# =============================================================================
# RESULT TYPES
# =============================================================================

class ToolShape(str, Enum):
    """What a tool returns."""
    TEXT = "text"
    STRUCTURED = "structured"


class TextContent(BaseModel):
    """One text block of a tool result."""
    type: Literal["text"] = "text"
    text: str


class ToolResult(BaseModel):
    """
    Result of one tool call.

    Structured tools put the JSON text of their record in the first
    content block and the same record in `structured`.
    """

    content: list[TextContent] = Field(default_factory=list)
    structured: Optional[dict[str, Any]] = None
    is_error: bool = Field(
        default=False,
        description="True when the call could not be dispatched at all"
    )
    error_kind: Optional[ErrorKind] = Field(
        default=None,
        description="Classified failure, also set when a tool answered with an error message"
    )

    @property
    def first_text(self) -> Optional[str]:
        for block in self.content:
            if block.type == "text":
                return block.text
        return None

    @classmethod
    def text(cls, text: str, error_kind: Optional[ErrorKind] = None) -> "ToolResult":
        return cls(content=[TextContent(text=text)], error_kind=error_kind)

    @classmethod
    def error(cls, message: str, kind: ErrorKind) -> "ToolResult":
        return cls(content=[TextContent(text=message)], is_error=True, error_kind=kind)


# =============================================================================
# ARGUMENT MODELS
# =============================================================================

class ToolArguments(BaseModel):
    """
    Base for tool argument models.

    Accepts the camelCase wire names and snake_case names alike;
    unknown keys are ignored.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class CreateBudgetArguments(ToolArguments):
    category: str
    monthly_limit: Decimal
    year: Optional[int] = None
    month: Optional[int] = None
    notes: Optional[str] = None
    alert_threshold: Optional[Decimal] = None


class AddTransactionArguments(ToolArguments):
    amount: Decimal
    description: str
    category: str
    type: str
    date: Optional[str] = None


class SpendingSummaryArguments(ToolArguments):
    category: Optional[str] = None
    year: Optional[int] = None
    month: Optional[int] = None


class PeriodArguments(ToolArguments):
    year: Optional[int] = None
    month: Optional[int] = None


class NoArguments(ToolArguments):
    pass


# =============================================================================
# TOOL TABLE
# =============================================================================

@dataclass(frozen=True)
class ToolDefinition:
    """One entry of the static tool table."""

    name: str
    description: str
    input_schema: dict[str, Any]
    shape: ToolShape
    arguments: type[ToolArguments]
    invoker: Callable[[Any], OperationResult]

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }

    def function_declaration(self) -> dict[str, Any]:
        """Gemini function declaration; parameterless tools omit parameters."""
        declaration = {"name": self.name, "description": self.description}
        if self.input_schema.get("properties"):
            declaration["parameters"] = self.input_schema
        return declaration


def _schema(properties: dict[str, dict], required: Iterable[str] = ()) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "object", "properties": properties}
    required = list(required)
    if required:
        schema["required"] = required
    return schema


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"]) or "arguments"
        parts.append(f"{location}: {detail['msg']}")
    return "; ".join(parts)


class ToolRegistry:
    """
    Name -> ToolDefinition table with dispatch and introspection.

    Usage:
        registry = ToolRegistry(build_budget_tools(service))
        result = registry.dispatch("getSummary", {"year": 2025, "month": 6})
    """

    def __init__(
        self,
        tools: Optional[Iterable[ToolDefinition]] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._tools: dict[str, ToolDefinition] = {}
        self._audit_logger = audit_logger or AuditLogger()
        for tool in tools or ():
            self.register(tool)

    def register(self, tool: ToolDefinition) -> None:
        if tool.name in self._tools:
            raise ValueError(f"Tool already registered: {tool.name}")
        self._tools[tool.name] = tool

    def get(self, name: str) -> Optional[ToolDefinition]:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def dispatch(
        self,
        name: str,
        arguments: Optional[dict[str, Any]] = None,
        correlation_id: Optional[UUID] = None,
    ) -> ToolResult:
        """
        Resolve, coerce arguments, invoke.

        Returns:
            ToolResult; is_error is set for unknown tools, bad
            arguments and invokers that raised
        """
        arguments = arguments or {}
        self._audit_logger.log_tool_invoked(name, arguments, correlation_id)

        tool = self._tools.get(name)
        if tool is None:
            return self._dispatch_failed(
                name, ErrorKind.TRANSPORT, f"❌ Unknown tool: {name}", correlation_id
            )

        try:
            parsed = tool.arguments.model_validate(arguments)
        except ValidationError as e:
            return self._dispatch_failed(
                name,
                ErrorKind.VALIDATION,
                f"❌ Invalid arguments for {name}: {_format_validation_error(e)}",
                correlation_id,
            )

        try:
            outcome = tool.invoker(parsed)
        except Exception as e:
            return self._dispatch_failed(
                name, ErrorKind.UNHANDLED, f"❌ Error running {name}: {e}", correlation_id
            )

        if tool.shape is ToolShape.STRUCTURED:
            record = outcome.unwrap_or(BudgetSummary.empty())
            return ToolResult(
                content=[TextContent(text=record.model_dump_json(by_alias=True))],
                structured=record.model_dump(mode="json", by_alias=True),
                error_kind=outcome.kind,
            )
        return ToolResult.text(outcome.as_text(), error_kind=outcome.kind)

    def _dispatch_failed(
        self,
        name: str,
        kind: ErrorKind,
        message: str,
        correlation_id: Optional[UUID],
    ) -> ToolResult:
        self._audit_logger.log_tool_dispatch_failed(name, kind.value, message, correlation_id)
        return ToolResult.error(message, kind)

    def describe(self, mcp_endpoint: str = "/mcp/messages") -> dict[str, Any]:
        """Introspection read: every tool with its schema."""
        try:
            tools = [tool.describe() for tool in self._tools.values()]
            return {
                "status": "available",
                "totalTools": len(tools),
                "tools": tools,
                "mcpEndpoint": mcp_endpoint,
            }
        except Exception as e:
            return {
                "status": "error",
                "error": str(e),
                "totalTools": 0,
            }

    def function_declarations(self) -> list[dict[str, Any]]:
        return [tool.function_declaration() for tool in self._tools.values()]


def build_budget_tools(service: BudgetService) -> list[ToolDefinition]:
    """The six ledger tools, bound to one domain service."""
    return [
        ToolDefinition(
            name="createBudget",
            description="Create a new budget for a category with monthly limit and alert threshold",
            input_schema=_schema(
                {
                    "category": {
                        "type": "string",
                        "description": "Budget category name (e.g., Food, Transportation)",
                    },
                    "monthlyLimit": {
                        "type": "number",
                        "description": "Monthly budget limit amount",
                    },
                    "year": {
                        "type": "integer",
                        "description": "Budget year (default: current year)",
                    },
                    "month": {
                        "type": "integer",
                        "description": "Budget month (default: current month)",
                    },
                    "notes": {
                        "type": "string",
                        "description": "Optional notes about the budget",
                    },
                    "alertThreshold": {
                        "type": "number",
                        "description": "Alert threshold percentage (default: 80%)",
                    },
                },
                required=["category", "monthlyLimit"],
            ),
            shape=ToolShape.TEXT,
            arguments=CreateBudgetArguments,
            invoker=lambda args: service.create_budget(
                category=args.category,
                monthly_limit=args.monthly_limit,
                year=args.year,
                month=args.month,
                notes=args.notes,
                alert_threshold=args.alert_threshold,
            ),
        ),
        ToolDefinition(
            name="addTransaction",
            description="Add a new income or expense transaction",
            input_schema=_schema(
                {
                    "amount": {
                        "type": "number",
                        "description": "Transaction amount (positive number)",
                    },
                    "description": {
                        "type": "string",
                        "description": "Description of the transaction",
                    },
                    "category": {
                        "type": "string",
                        "description": "Transaction category",
                    },
                    "type": {
                        "type": "string",
                        "description": "Transaction type: INCOME or EXPENSE",
                    },
                    "date": {
                        "type": "string",
                        "description": "Transaction date in YYYY-MM-DD format (default: today)",
                    },
                },
                required=["amount", "description", "category", "type"],
            ),
            shape=ToolShape.TEXT,
            arguments=AddTransactionArguments,
            invoker=lambda args: service.add_transaction(
                amount=args.amount,
                description=args.description,
                category=args.category,
                transaction_type=args.type,
                transaction_date=args.date,
            ),
        ),
        ToolDefinition(
            name="getAllBudgets",
            description="Get all active budgets with current spending status",
            input_schema=_schema({}),
            shape=ToolShape.TEXT,
            arguments=NoArguments,
            invoker=lambda args: service.get_all_budgets(),
        ),
        ToolDefinition(
            name="getSpendingSummary",
            description="Get spending summary for a specific month or category",
            input_schema=_schema({
                "category": {
                    "type": "string",
                    "description": "Category to filter by (optional)",
                },
                "year": {
                    "type": "integer",
                    "description": "Year (default: current year)",
                },
                "month": {
                    "type": "integer",
                    "description": "Month (default: current month)",
                },
            }),
            shape=ToolShape.TEXT,
            arguments=SpendingSummaryArguments,
            invoker=lambda args: service.get_spending_summary(
                category=args.category,
                year=args.year,
                month=args.month,
            ),
        ),
        ToolDefinition(
            name="getRecentTransactions",
            description="Get recent transactions (last 10)",
            input_schema=_schema({}),
            shape=ToolShape.TEXT,
            arguments=NoArguments,
            invoker=lambda args: service.get_recent_transactions(),
        ),
        ToolDefinition(
            name="getSummary",
            description="Get budget summary with totals as structured data",
            input_schema=_schema({
                "year": {
                    "type": "integer",
                    "description": "Year (default: current year)",
                },
                "month": {
                    "type": "integer",
                    "description": "Month (default: current month)",
                },
            }),
            shape=ToolShape.STRUCTURED,
            arguments=PeriodArguments,
            invoker=lambda args: service.get_summary(year=args.year, month=args.month),
        ),
    ]
