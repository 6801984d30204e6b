from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import pytest

from jira_automated import JiraClient

JIRA_URL = "https://jira.example.com/"
API_URL = "https://jira.example.com/rest/api/latest/"


class FakeResponse:
    def __init__(
        self,
        status_code: int = 200,
        payload: Any = None,
        *,
        reason: str = "OK",
        text: Optional[str] = None,
    ):
        self.status_code = status_code
        self.reason = reason
        if text is not None:
            self.content = text.encode("utf-8")
        elif payload is None:
            self.content = b""
        else:
            self.content = json.dumps(payload).encode("utf-8")

    def json(self) -> Any:
        return json.loads(self.content.decode("utf-8"))


class FakeTransport:
    """Stands in for requests.Session.request; replays queued responses."""

    def __init__(self):
        self.calls: List[Dict[str, Any]] = []
        self.responses: List[FakeResponse] = []

    def queue(self, *responses: FakeResponse) -> None:
        self.responses.extend(responses)

    def __call__(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        files = kwargs.get("files")
        if files:
            # Read upload contents while the client still holds the file open
            kwargs["uploaded"] = {
                field: (name, handle.read()) for field, (name, handle) in files.items()
            }
        self.calls.append({"method": method, "url": url, **kwargs})
        if not self.responses:
            raise AssertionError(f"unexpected request: {method} {url}")
        return self.responses.pop(0)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def jira(monkeypatch, transport) -> JiraClient:
    client = JiraClient(JIRA_URL, "batch", "s3cret")
    monkeypatch.setattr(client.session, "request", transport)
    return client


def issue(key: str, summary: str = "", status: str = "Open") -> Dict[str, Any]:
    return {"key": key, "fields": {"summary": summary, "status": {"name": status}}}


def search_response(
    issues: List[Dict[str, Any]], *, total: int, start: int, max_results: int
) -> FakeResponse:
    return FakeResponse(
        200,
        {
            "total": total,
            "startAt": start,
            "maxResults": max_results,
            "issues": issues,
        },
    )
