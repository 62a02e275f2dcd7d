import pytest
import requests

from activities import LAST_RESORT_ACTIVITY, SOURCE_FALLBACKS
from ai_client import API_ERROR, ActivitySource, build_session
from config import Settings
from conftest import FakeResponse, FakeSession, completion


def first(n):
    return 0


def usable(result):
    return result.success and result.activity is not None and result.activity.title and result.activity.description


def test_no_credential_uses_static_pool_without_network():
    session = FakeSession()
    source = ActivitySource(Settings(), session=session, random_index=first)
    result = source.obtain_activity()
    assert usable(result)
    assert result.activity == SOURCE_FALLBACKS[0]
    assert result.error is None
    assert session.calls == []


def test_blank_credential_counts_as_missing():
    session = FakeSession()
    result = ActivitySource(Settings(openai_api_key="   "), session=session).obtain_activity()
    assert result.activity in SOURCE_FALLBACKS
    assert session.calls == []


def test_valid_json_response(keyed_settings):
    session = FakeSession(completion('{"title":"Dance in Public","description":"Find a busy public area and dance."}'))
    result = ActivitySource(keyed_settings, session=session).obtain_activity()
    assert result.activity.title == "Dance in Public"
    assert result.error is None

    call = session.calls[0]
    assert call["url"] == "https://llm.example/v1/chat/completions"
    assert call["json"]["model"] == "gpt-4o"
    assert call["json"]["temperature"] == 1.0
    assert call["json"]["messages"][0]["role"] == "user"
    assert "ONLY return the raw JSON object" in call["json"]["messages"][0]["content"]
    assert call["headers"]["Authorization"] == "Bearer sk-test"
    assert call["timeout"] == 60.0


def test_recoverable_text(keyed_settings):
    session = FakeSession(completion("Try 'Sing in Public' - walk outside and sing a song for one minute"))
    result = ActivitySource(keyed_settings, session=session).obtain_activity()
    assert result.activity.title == "Sing in Public"
    assert result.error is None


def test_unrecoverable_text_falls_back(keyed_settings):
    session = FakeSession(completion("```json\n```"))
    result = ActivitySource(keyed_settings, session=session, random_index=lambda n: 2).obtain_activity()
    assert result.activity == SOURCE_FALLBACKS[2]
    assert result.error is None


@pytest.mark.parametrize("failure", [
    requests.ConnectionError("boom"),
    requests.Timeout("slow"),
    FakeResponse(status_code=429, text="rate limited"),
    FakeResponse(status_code=200, payload=None),
    FakeResponse(status_code=200, payload={"choices": []}),
    FakeResponse(status_code=200, payload={"choices": [{"message": {"content": None}}]}),
])
def test_transport_failures_fall_back_with_error_tag(keyed_settings, failure):
    session = FakeSession(failure)
    result = ActivitySource(keyed_settings, session=session, random_index=first).obtain_activity()
    assert usable(result)
    assert result.activity == SOURCE_FALLBACKS[0]
    assert result.error == API_ERROR


def test_unexpected_error_returns_last_resort(keyed_settings):
    def broken(n):
        raise RuntimeError("bad rng")

    session = FakeSession(requests.ConnectionError("boom"))
    result = ActivitySource(keyed_settings, session=session, random_index=broken).obtain_activity()
    assert result.activity == LAST_RESORT_ACTIVITY


def test_build_session_mounts_retry_adapter_only_when_asked():
    plain = build_session(0)
    assert plain.get_adapter("https://x").max_retries.total == 0
    retrying = build_session(3)
    retry = retrying.get_adapter("https://x").max_retries
    assert retry.total == 3
    assert 429 in retry.status_forcelist
