import pytest
import requests


class FakeResponse:
    def __init__(self, text="", status_code=200):
        self.text = text
        self.content = text.encode("utf-8")
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


@pytest.fixture
def fake_web(monkeypatch):
    """Serve canned bodies from a url -> text (or exception) map; records requested URLs."""
    pages = {}
    requested = []

    def fake_get(url, timeout=None, headers=None):
        requested.append(url)
        page = pages.get(url)
        if page is None:
            return FakeResponse(status_code=404)
        if isinstance(page, Exception):
            raise page
        return FakeResponse(page)

    monkeypatch.setattr(requests, "get", fake_get)
    fake_get.pages = pages
    fake_get.requested = requested
    return fake_get
