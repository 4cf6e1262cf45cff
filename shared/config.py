"""Configuration for the automation advisor.

Values come from the environment (``.env`` is loaded by the entrypoints) and
can be overridden per run through ``RunnableConfig["configurable"]``.
"""
import json
import os
from dataclasses import dataclass, field, fields
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Callable, Dict, Optional

from langchain_core.runnables import RunnableConfig, ensure_config

MODEL_CONFIG_PATH = Path(__file__).resolve().parent.parent / "model_config.json"

DEFAULT_MODELS = {
    "orchestrator_model": "gpt-4o",
    "text_model": "gpt-4o-mini",
}

OUTPUT_FORMATS = ("json", "markdown")


@lru_cache(maxsize=1)
def _model_defaults() -> Dict[str, str]:
    """Model names from ``model_config.json``, falling back to DEFAULT_MODELS."""
    if not MODEL_CONFIG_PATH.exists():
        return dict(DEFAULT_MODELS)
    data = json.loads(MODEL_CONFIG_PATH.read_text(encoding="utf-8"))
    return {key: data.get(key) or default for key, default in DEFAULT_MODELS.items()}


def _env(name: str, default: Optional[str] = None, cast: Callable[[str], Any] = str) -> Callable[[], Any]:
    def factory():
        value = os.getenv(name)
        if value is None or value == "":
            return cast(default) if default is not None else None
        return cast(value)
    return factory


def _model(key: str) -> Callable[[], str]:
    return lambda: _model_defaults()[key]


@dataclass(kw_only=True)
class Configuration:
    """Settings shared by the planning workflow, the chat and the storage.

    - OpenAI and Tavily credentials and networking
    - orchestrator (research) and text (writing, chat) models
    - plan output format and generation timeout
    - storage key and quota for the saved project list
    """

    openai_api_key: Optional[str] = field(
        default_factory=_env("OPENAI_API_KEY"),
        metadata={"description": "OpenAI API key"},
    )
    openai_base_url: Optional[str] = field(
        default_factory=_env("OPENAI_BASE_URL"),
        metadata={"description": "API root of an OpenAI-compatible gateway"},
    )
    openai_timeout: int = field(
        default_factory=_env("OPENAI_TIMEOUT", "60", int),
        metadata={"description": "HTTP timeout (seconds) per LLM call"},
    )
    openai_max_retries: int = field(
        default_factory=_env("OPENAI_MAX_RETRIES", "1", int),
        metadata={"description": "Retries per LLM call"},
    )
    tavily_api_key: Optional[str] = field(
        default_factory=_env("TAVILY_API_KEY"),
        metadata={"description": "Tavily key; without it plans are written with no web sources"},
    )

    orchestrator_model: Annotated[str, {"__template_metadata__": {"kind": "llm"}}] = field(
        default_factory=_model("orchestrator_model"),
        metadata={"description": "Model that researches tools with web_search"},
    )
    text_model: Annotated[str, {"__template_metadata__": {"kind": "llm"}}] = field(
        default_factory=_model("text_model"),
        metadata={"description": "Model that writes the plan and answers chat messages"},
    )

    plan_output_format: str = field(
        default_factory=_env("PLAN_OUTPUT_FORMAT", "json"),
        metadata={"description": "'json' (structured sections) or 'markdown' (legacy headers)"},
    )
    generation_timeout: float = field(
        default_factory=_env("GENERATION_TIMEOUT", "180", float),
        metadata={"description": "Upper bound (seconds) for one plan generation"},
    )

    storage_key: str = field(
        default_factory=_env("STORAGE_KEY", "automation_advisor.projects"),
        metadata={"description": "Key holding the saved project list"},
    )
    storage_quota_bytes: Optional[int] = field(
        default_factory=lambda: _env("STORAGE_QUOTA_BYTES", str(5 * 1024 * 1024), int)() or None,
        metadata={"description": "Size limit of the stored project list; 0 disables it"},
    )

    @classmethod
    def from_runnable_config(cls, config: Optional[RunnableConfig] = None) -> "Configuration":
        """Build from ``config["configurable"]``; unknown keys are ignored."""
        configurable = ensure_config(config or {}).get("configurable", {})
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in configurable.items() if k in names})

    def validate(self) -> None:
        """Raise ValueError when a setting makes the advisor unusable."""
        if not self.openai_api_key:
            raise ValueError(
                "OPENAI_API_KEY environment variable is not set. "
                "Please set it in your .env file or environment."
            )
        if self.plan_output_format not in OUTPUT_FORMATS:
            raise ValueError(
                f"PLAN_OUTPUT_FORMAT must be one of {', '.join(OUTPUT_FORMATS)}, "
                f"got {self.plan_output_format!r}."
            )
