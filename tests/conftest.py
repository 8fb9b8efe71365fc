from __future__ import annotations

import sys
from pathlib import Path


_REPO_ROOT = Path(__file__).resolve().parents[1]
_SRC = _REPO_ROOT / "src"
if _SRC.exists():
    sys.path.insert(0, str(_SRC))

import json

import httpx
import pytest


class RecordingApi:
    """Stand-in backend: records requests and answers with canned responses."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responses: list[httpx.Response] = []

    def reply(self, status_code: int = 200, **kwargs) -> None:
        self.responses.append(httpx.Response(status_code, **kwargs))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            return httpx.Response(200, json={})
        return self.responses.pop(0)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self):
        return json.loads(self.last.content)

    def http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url="http://api.test",
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
def api() -> RecordingApi:
    return RecordingApi()


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    for name in ("API_URL", "DEFAULT_FORMAT", "LOG_LEVEL", "PROJECT"):
        monkeypatch.delenv(f"PIPELINE_CLIENT_{name}", raising=False)
