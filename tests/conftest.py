"""
Shared test fakes
=================

Stand-ins for the HTTP collaborators so no test touches the network.
"""
import base64
import json as jsonlib

import pytest
import requests

from storage.memory import InMemoryBlobStore, InMemoryHistoryStore

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image-bytes"
PNG_DATA_URI = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode()


class FakeResponse:
    """Minimal requests.Response replacement"""

    def __init__(self, status_code=200, json_body=None, text=None, content=b""):
        self.status_code = status_code
        self._json = json_body
        self.text = text if text is not None else (jsonlib.dumps(json_body) if json_body is not None else "")
        self.content = content

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._json is None:
            raise ValueError("No JSON body")
        return self._json

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


class FakeSession:
    """Returns queued responses (or raises queued exceptions) and records calls"""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def _next(self, method, url, kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def post(self, url, **kwargs):
        return self._next("POST", url, kwargs)

    def get(self, url, **kwargs):
        return self._next("GET", url, kwargs)


def chat_response(content):
    return FakeResponse(200, {"choices": [{"message": {"role": "assistant", "content": content}}]})


def image_response(data_uri):
    return FakeResponse(200, {"choices": [{"message": {"images": [{"image_url": {"url": data_uri}}]}}]})


class FakeTextProvider:
    """Records chat messages and returns a fixed reply"""

    def __init__(self, reply="a,b\n1,2", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def chat(self, messages):
        self.calls.append(messages)
        if self.error:
            raise self.error
        return self.reply


class FakeImageProvider:
    """Plays back one outcome per call: a data URI, None or an exception"""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.prompts = []

    def generate_image(self, prompt):
        self.prompts.append(prompt)
        outcome = self.outcomes[len(self.prompts) - 1]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeFetcher:
    def __init__(self, results=None):
        self.results = results or []
        self.queries = []

    def search(self, query):
        self.queries.append(query)
        return list(self.results)


@pytest.fixture
def blob_store():
    return InMemoryBlobStore(base_url="https://storage.test/")


@pytest.fixture
def history_store():
    return InMemoryHistoryStore()
