"""Shared fixtures: fake HTTP session for the generation API and a manual scheduler."""
import sys
from pathlib import Path

root_dir = Path(__file__).parent.parent
if str(root_dir) not in sys.path:
    sys.path.insert(0, str(root_dir))

import pytest
import requests

from config import Settings


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else ""

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON body")
        return self._payload


def completion(content):
    return FakeResponse(payload={"choices": [{"message": {"role": "assistant", "content": content}}]})


class FakeSession:
    """Stands in for requests.Session: records calls and replays queued responses or errors."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class ManualScheduler:
    """Records scheduled callbacks; tests fire them to simulate elapsed time."""

    def __init__(self):
        self.scheduled = []

    def __call__(self, delay, callback):
        handle = ScheduledCall(delay, callback)
        self.scheduled.append(handle)
        return handle

    def advance(self, seconds):
        for handle in self.scheduled:
            if not handle.cancelled and not handle.fired and handle.delay <= seconds:
                handle.fired = True
                handle.callback()


class ScheduledCall:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True


@pytest.fixture
def keyed_settings():
    return Settings(openai_api_key="sk-test", openai_base_url="https://llm.example/v1")


@pytest.fixture
def scheduler():
    return ManualScheduler()
