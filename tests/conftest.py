import base64
import json

import httpx
import pytest

from coderunner.core.config import Settings


def b64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def record(status_id: int, token: str = "tok-1", **fields):
    payload = {
        "token": token,
        "stdout": None,
        "stderr": None,
        "compile_output": None,
        "message": None,
        "exit_code": None,
        "time": None,
        "memory": None,
        "status": {"id": status_id, "description": ""},
    }
    payload.update(fields)
    return payload


class FakeJudge0:
    """Scripted Judge0 server for httpx.MockTransport.

    ``polls`` is consumed one item per GET /submissions/{token}; the last item
    repeats. Items may be a record dict, an httpx.Response or an exception.
    """

    def __init__(self, polls=(), *, token="tok-1", create=None, languages=None):
        self.polls = list(polls)
        self.token = token
        self.create = create
        self.languages = languages if languages is not None else [{"id": 71, "name": "Python (3.8.1)"}]
        self.calls: list[httpx.Request] = []

    @property
    def creates(self) -> list[httpx.Request]:
        return [r for r in self.calls if r.method == "POST" and r.url.path == "/submissions"]

    @property
    def fetches(self) -> list[httpx.Request]:
        return [r for r in self.calls if r.method == "GET" and r.url.path.startswith("/submissions/")]

    def body(self, request: httpx.Request) -> dict:
        return json.loads(request.content)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        path = request.url.path
        if request.method == "POST" and path == "/submissions":
            item = self.create if self.create is not None else {"token": self.token}
            return self._respond(item, status_code=201)
        if request.method == "GET" and path.startswith("/submissions/"):
            if not self.polls:
                return httpx.Response(404, json={"error": "Not found"})
            item = self.polls.pop(0) if len(self.polls) > 1 else self.polls[0]
            return self._respond(item)
        if request.method == "GET" and path == "/languages":
            return httpx.Response(200, json=self.languages)
        if request.method == "GET" and path == "/statuses":
            return httpx.Response(200, json=[{"id": 1, "description": "In Queue"}, {"id": 3, "description": "Accepted"}])
        return httpx.Response(404, json={"error": "Not found"})

    @staticmethod
    def _respond(item, status_code=200) -> httpx.Response:
        if isinstance(item, Exception):
            raise item
        if isinstance(item, httpx.Response):
            return item
        return httpx.Response(status_code, json=item)


@pytest.fixture
def make_settings():
    def _make(**overrides) -> Settings:
        settings = Settings()
        settings.judge0_api_url = "http://judge0.test"
        settings.judge0_timeout_s = 2.0
        settings.judge0_poll_interval_ms = 0
        settings.judge0_max_poll_attempts = 5
        settings.judge0_encoding = "plain"
        settings.judge0_use_wait = False
        settings.judge0_batch_concurrency = 4
        settings.metadata_cache_seconds = 60
        settings.read_cache_disabled = False
        for key, value in overrides.items():
            setattr(settings, key, value)
        return settings

    return _make


@pytest.fixture
def anyio_backend():
    return "asyncio"
