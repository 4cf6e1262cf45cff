"""Conversational assistant for automation questions.

Each ChatSession owns its history; there is no shared module-level chat.
A failed call discards the session history so the next message starts a
fresh conversation.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Literal, Optional, Union

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from pydantic import BaseModel

from shared.config import Configuration
from shared.errors import ChatError, ValidationError
from shared.utils import get_text_llm
from .prompts import SYSTEM_PROMPT

_logger = logging.getLogger("chat")

EMPTY_REPLY = "No pude generar una respuesta."


class ChatMessage(BaseModel):
    role: Literal["user", "model"]
    content: str


def _coerce_text(message: BaseMessage) -> str:
    """Extract plain text from an AIMessage-like object robustly."""
    content = getattr(message, "content", None)
    if isinstance(content, str):
        return content.strip()
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text" and part.get("text"):
                parts.append(part["text"])
        return "\n".join(parts).strip()
    return ""


def _safe_preview(text: str, limit: int = 2000) -> str:
    if text is None:
        return ""
    s = str(text)
    return s if len(s) <= limit else s[:limit] + "... [truncated]"


class ChatSession:
    """One chat conversation with the automation assistant."""

    def __init__(
        self,
        config: Optional[Configuration] = None,
        history: Optional[Iterable[Union[ChatMessage, dict]]] = None,
        *,
        llm: Optional[BaseChatModel] = None,
    ):
        """Initialize the session.

        Args:
            config: Configuration with API keys and model settings
            history: Prior turns to seed the conversation with
            llm: Chat model to use instead of the configured text model
        """
        self.config = config
        self._llm = llm
        self.history: List[ChatMessage] = [
            m if isinstance(m, ChatMessage) else ChatMessage(**m) for m in (history or [])
        ]

    @property
    def llm(self) -> BaseChatModel:
        if self._llm is None:
            self._llm = get_text_llm(self.config or Configuration())
        return self._llm

    def _to_messages(self, new_message: str) -> List[BaseMessage]:
        messages: List[BaseMessage] = [SystemMessage(content=SYSTEM_PROMPT)]
        for m in self.history:
            messages.append(HumanMessage(content=m.content) if m.role == "user" else AIMessage(content=m.content))
        messages.append(HumanMessage(content=new_message))
        return messages

    async def send(self, message: str) -> str:
        """Send a message and return the assistant's reply.

        Raises:
            ValidationError: the message is blank.
            ChatError: the model call failed; the session has been reset.
        """
        if not message or not message.strip():
            raise ValidationError("Escribe un mensaje.")

        _logger.info("USER: %s", _safe_preview(message))
        try:
            response = await self.llm.ainvoke(self._to_messages(message))
        except Exception as e:
            _logger.error("Chat call failed, resetting session: %r", e)
            self.reset()
            raise ChatError() from e

        reply = _coerce_text(response) or EMPTY_REPLY
        self.history.append(ChatMessage(role="user", content=message))
        self.history.append(ChatMessage(role="model", content=reply))
        _logger.info("ASSISTANT: %s", _safe_preview(reply))
        return reply

    def reset(self) -> None:
        """Clear the chat history."""
        self.history = []
