"""
Shared fixtures for PhaseNav tests.
"""

import httpx
import pytest

from phasenav.classroom import ProgressStore


PAGE_URL = "http://site.test/BRD_phase/Overview.html"


def module_document(body: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head><title>Module</title></head>
<body>
<nav>menu</nav>
<div class="content-body">{body}</div>
</body>
</html>"""


class FakeSite:
    """In-memory HTTP site; records every request it serves."""

    def __init__(self):
        self.pages: dict[str, tuple[int, str]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, path: str, body: str, status: int = 200):
        self.pages[path] = (status, body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path in self.pages:
            status, body = self.pages[request.url.path]
            return httpx.Response(status, text=body, headers={"content-type": "text/html"})
        # Any module document not registered explicitly
        return httpx.Response(
            200,
            text=module_document(f"<p>{request.url.path}</p>"),
            headers={"content-type": "text/html"},
        )

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def store(tmp_path):
    return ProgressStore(db_path=tmp_path / "progress.db")


@pytest.fixture
def site():
    return FakeSite()
