"""
AI Agents for Budget Assistant

DESIGN DECISION: The conversational agent is behind a small ChatAgent
interface. The conversation service only needs "given a system
instruction, the history and a new message, produce a reply", so:
1. Gemini is the production implementation
2. Tests plug in stub agents without any network
3. Another provider is one subclass away

CRITICAL BOUNDARIES:
- The agent CAN call ledger tools through the registry it is handed
- The agent CANNOT touch storage directly
- Every number it reports about the ledger comes from a tool result

The LLM is a TRANSLATOR, not an ORACLE. It turns "I spent 45 on
groceries" into addTransaction(...) and tool text back into a reply.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional
from uuid import UUID

import google.generativeai as genai

from budget_assistant.config import GeminiSettings, get_settings
from budget_assistant.models.chat import ChatMessage, ChatRole
from budget_assistant.tools.registry import ToolRegistry


class AgentError(Exception):
    """The agent could not produce a reply."""
    pass


class ChatAgent(ABC):
    """
    Produces one assistant reply per user message.

    Implementations may dispatch any number of registry tools
    before answering.
    """

    @abstractmethod
    async def reply(
        self,
        system_instruction: str,
        history: list[ChatMessage],
        message: str,
        tools: ToolRegistry,
        correlation_id: Optional[UUID] = None,
    ) -> str:
        """
        Generate a reply.

        Args:
            system_instruction: Dated instruction for this turn
            history: Stored turns, oldest first (not including message)
            message: The new user message
            tools: Registry to dispatch tool calls into (may be empty)
            correlation_id: Passed to every tool dispatch of this turn

        Raises:
            AgentError: Or anything the provider raises; the
                        conversation service turns it into an apology
        """


class GeminiChatAgent(ChatAgent):
    """
    Gemini agent with manual function calling.

    FLOW:
    1. Send history + message with the registry's function declarations
    2. If the model answers with function calls, dispatch each one
       and send the results back as function responses
    3. Repeat until the model answers in text, at most max_tool_rounds
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model_factory: Optional[Callable[..., Any]] = None,
    ):
        """
        Initialize the agent.

        Args:
            settings: Gemini settings (default from environment)
            model_factory: Builds the model; defaults to
                           genai.GenerativeModel after genai.configure()
        """
        self._settings = settings or get_settings().gemini
        if model_factory is None:
            genai.configure(api_key=self._settings.api_key)
            model_factory = genai.GenerativeModel
        self._model_factory = model_factory

    def _build_model(self, system_instruction: str, tools: ToolRegistry):
        declarations = tools.function_declarations()
        return self._model_factory(
            model_name=self._settings.model_name,
            system_instruction=system_instruction,
            tools=[{"function_declarations": declarations}] if declarations else None,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            },
        )

    @staticmethod
    def _to_content(role: ChatRole, text: str):
        # Gemini calls the assistant side "model"
        gemini_role = "model" if role == ChatRole.ASSISTANT else "user"
        return genai.protos.Content(
            role=gemini_role,
            parts=[genai.protos.Part(text=text)],
        )

    @staticmethod
    def _function_calls(response) -> list:
        candidates = getattr(response, "candidates", None)
        if not candidates:
            return []
        # Only the first candidate is used
        content = getattr(candidates[0], "content", None)
        calls = []
        for part in getattr(content, "parts", None) or []:
            call = getattr(part, "function_call", None)
            if call is not None and getattr(call, "name", ""):
                calls.append(call)
        return calls

    async def reply(
        self,
        system_instruction: str,
        history: list[ChatMessage],
        message: str,
        tools: ToolRegistry,
        correlation_id: Optional[UUID] = None,
    ) -> str:
        model = self._build_model(system_instruction, tools)

        contents = [self._to_content(turn.role, turn.content) for turn in history]
        contents.append(self._to_content(ChatRole.USER, message))

        response = await model.generate_content_async(contents)

        for _ in range(self._settings.max_tool_rounds):
            calls = self._function_calls(response)
            if not calls:
                return response.text.strip()

            contents.append(response.candidates[0].content)
            parts = []
            for call in calls:
                result = tools.dispatch(call.name, dict(call.args or {}), correlation_id)
                parts.append(genai.protos.Part(
                    function_response=genai.protos.FunctionResponse(
                        name=call.name,
                        response={"result": result.first_text or ""},
                    )
                ))
            contents.append(genai.protos.Content(role="user", parts=parts))

            response = await model.generate_content_async(contents)

        if self._function_calls(response):
            raise AgentError(
                f"Model still requesting tools after {self._settings.max_tool_rounds} rounds"
            )
        return response.text.strip()
