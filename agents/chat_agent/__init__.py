"""Chat assistant session."""
from .agent import ChatMessage, ChatSession

__all__ = ["ChatMessage", "ChatSession"]
