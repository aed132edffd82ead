"""
Budget Assistant - Source Package

A conversational budget ledger: monthly category budgets and
income/expense transactions managed through named tools that an
AI agent (or a direct caller) can invoke.

DESIGN PRINCIPLES:
1. The agent only acts through tools
2. Tools never raise - failures become user-facing messages
3. Structured reads never need the agent
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Budget Assistant Team"
