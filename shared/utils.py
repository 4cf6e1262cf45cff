"""LLM factories for the planning workflow and the chat assistant."""
from typing import Optional, Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.runnables import Runnable
from langchain_openai import ChatOpenAI

from .config import Configuration
from .callbacks import ChatMessagesLogger

_ENDPOINT_SUFFIXES = ("/chat/completions", "/completions")


def _normalize_base_url(url: Optional[str]) -> Optional[str]:
    """Reduce a pasted endpoint URL to the API root ChatOpenAI expects."""
    if not url:
        return None
    root = url.strip().rstrip("/")
    for suffix in _ENDPOINT_SUFFIXES:
        if root.endswith(suffix):
            return root[: -len(suffix)]
    return root


def _chat_model(cfg: Configuration, model: str, *, temperature: float) -> ChatOpenAI:
    return ChatOpenAI(
        model=model,
        api_key=cfg.openai_api_key,
        base_url=_normalize_base_url(cfg.openai_base_url),
        streaming=False,
        timeout=cfg.openai_timeout,
        max_retries=cfg.openai_max_retries,
        temperature=temperature,
        callbacks=[ChatMessagesLogger()],
    )


def get_orchestrator_llm(cfg: Configuration, *, tools: Sequence = ()) -> Runnable:
    """Model that drives the research step of plan generation.

    Args:
        cfg: Configuration instance with API key and model settings
        tools: Tools to bind, e.g. ``web_search``

    Returns:
        ChatOpenAI instance, bound to ``tools`` when any are given
    """
    llm = _chat_model(cfg, cfg.orchestrator_model, temperature=1.0)
    return llm.bind_tools(list(tools)) if tools else llm


def get_text_llm(cfg: Configuration, *, temperature: float = 0.7) -> BaseChatModel:
    """Model that writes the plan sections and answers chat messages."""
    return _chat_model(cfg, cfg.text_model, temperature=temperature)
