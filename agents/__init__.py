"""Conversational agents."""
from .chat_agent import ChatMessage, ChatSession

__all__ = ["ChatMessage", "ChatSession"]
