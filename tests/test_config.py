import pytest

from shared.config import Configuration
from shared.utils import _normalize_base_url


def test_environment_values(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("GENERATION_TIMEOUT", "30")
    monkeypatch.setenv("STORAGE_QUOTA_BYTES", "0")
    monkeypatch.delenv("PLAN_OUTPUT_FORMAT", raising=False)

    cfg = Configuration()

    assert cfg.openai_api_key == "sk-test"
    assert cfg.generation_timeout == 30.0
    assert cfg.storage_quota_bytes is None
    assert cfg.plan_output_format == "json"
    cfg.validate()


def test_from_runnable_config_ignores_unknown_keys():
    cfg = Configuration.from_runnable_config(
        {"configurable": {"openai_api_key": "k", "text_model": "m", "thread_id": "x"}}
    )
    assert cfg.openai_api_key == "k"
    assert cfg.text_model == "m"


def test_validate_rejects_missing_key_and_bad_format():
    with pytest.raises(ValueError):
        Configuration(openai_api_key=None).validate()
    with pytest.raises(ValueError):
        Configuration(openai_api_key="k", plan_output_format="yaml").validate()


@pytest.mark.parametrize(
    "url, expected",
    [
        (None, None),
        ("http://host:8000/v1/", "http://host:8000/v1"),
        ("http://host:8000/v1/chat/completions", "http://host:8000/v1"),
    ],
)
def test_normalize_base_url(url, expected):
    assert _normalize_base_url(url) == expected
