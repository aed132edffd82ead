"""
Error taxonomy for Budget Assistant.

Every failure inside the core is classified into one of a small set of
kinds. Operations carry the kind internally (see models/result.py) and
only collapse it into text or a zero-valued summary at the outer edge.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Classification of operation failures."""
    VALIDATION = "validation"    # bad amount/limit/threshold/date/type
    CONFLICT = "conflict"        # duplicate active budget for a period
    DECODE = "decode"            # malformed structured payload from a tool
    TRANSPORT = "transport"      # tool invocation itself failed
    UNHANDLED = "unhandled"      # anything else


class BudgetAssistantError(Exception):
    """Base exception for all classified failures."""

    kind: ErrorKind = ErrorKind.UNHANDLED

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BudgetAssistantError):
    """Input rejected before any write."""
    kind = ErrorKind.VALIDATION


class ConflictError(BudgetAssistantError):
    """An active budget already exists for the requested period."""
    kind = ErrorKind.CONFLICT


class DecodeError(BudgetAssistantError):
    """A tool result could not be decoded into the expected structure."""
    kind = ErrorKind.DECODE


class TransportError(BudgetAssistantError):
    """The tool invocation channel failed or is missing."""
    kind = ErrorKind.TRANSPORT


class UnhandledError(BudgetAssistantError):
    """Any fault not covered by the other kinds."""
    kind = ErrorKind.UNHANDLED
