"""Shared configuration, errors and utilities."""
from .config import Configuration
from .errors import (
    AdvisorError,
    ChatError,
    GenerationError,
    GenerationInProgressError,
    ImportFormatError,
    PersistenceError,
    StorageQuotaExceededError,
    StorageReadError,
    ValidationError,
)
from .utils import get_orchestrator_llm, get_text_llm

__all__ = [
    "Configuration",
    "AdvisorError",
    "ChatError",
    "GenerationError",
    "GenerationInProgressError",
    "ImportFormatError",
    "PersistenceError",
    "StorageQuotaExceededError",
    "StorageReadError",
    "ValidationError",
    "get_orchestrator_llm",
    "get_text_llm",
]
