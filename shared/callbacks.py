"""LangChain callbacks for request introspection."""
from __future__ import annotations

import json
import logging
from typing import Any, List

from langchain_core.callbacks import BaseCallbackHandler
from langchain_core.messages import BaseMessage
from langchain_core.outputs import LLMResult

_logger = logging.getLogger("chat")


def _preview(text: Any, limit: int = 300) -> str:
    try:
        s = str(text)
        return s if len(s) <= limit else s[:limit] + "... [truncated]"
    except Exception:
        return "[unprintable]"


class ChatMessagesLogger(BaseCallbackHandler):
    """Logs a compact view of the messages sent to the model and of its answer.

    Tool calls are logged by name only, which is enough to follow the
    research loop of the planning workflow.
    """

    def on_chat_model_start(
        self,
        serialized: dict[str, Any],
        messages: List[List[BaseMessage]],
        run_id: Any,
        parent_run_id: Any = None,
        **kwargs: Any,
    ) -> None:
        if not _logger.handlers:
            return
        batch = messages[0] if messages else []
        compact = []
        for m in batch:
            entry: dict[str, Any] = {"role": m.type}
            tool_calls = getattr(m, "tool_calls", None)
            if tool_calls:
                entry["tool_calls"] = [tc.get("name") for tc in tool_calls]
            if isinstance(m.content, str) and m.content:
                entry["content"] = _preview(m.content, 180)
            compact.append(entry)
        _logger.info("LLM REQ MESSAGES: %s", json.dumps(compact, ensure_ascii=False))

    def on_llm_end(self, response: LLMResult, *, run_id: Any, **kwargs: Any) -> None:
        if not _logger.handlers:
            return
        generations = response.generations[0] if response.generations else []
        text = generations[0].text if generations else ""
        _logger.info("LLM RESP: %s", _preview(text, 180))
