import pytest
from pydantic import ValidationError

from config import DEFAULT_BASE_URL, DEFAULT_MODEL, Settings


def test_defaults_without_environment():
    s = Settings.from_env({})
    assert s.openai_api_key is None
    assert s.has_credential is False
    assert s.openai_base_url == DEFAULT_BASE_URL
    assert s.model == DEFAULT_MODEL
    assert s.temperature == 1.0


def test_values_read_from_environment():
    s = Settings.from_env({
        "OPENAI_API_KEY": "sk-abc",
        "OPENAI_BASE_URL": "https://proxy.example/v1/",
        "OPENAI_MODEL": "gpt-4o-mini",
        "OPENAI_TEMPERATURE": "0.7",
        "OPENAI_TIMEOUT": "15",
        "OPENAI_MAX_RETRIES": "2",
    })
    assert s.has_credential is True
    assert s.openai_base_url == "https://proxy.example/v1"
    assert s.model == "gpt-4o-mini"
    assert s.temperature == 0.7
    assert s.request_timeout == 15.0
    assert s.transport_retries == 2


def test_empty_key_is_missing():
    assert Settings.from_env({"OPENAI_API_KEY": ""}).has_credential is False


def test_malformed_number_fails_fast():
    with pytest.raises(ValidationError):
        Settings.from_env({"OPENAI_TEMPERATURE": "hot"})
