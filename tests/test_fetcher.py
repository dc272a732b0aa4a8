import pytest
import requests
from bs4 import ParserRejectedMarkup
from requests.structures import CaseInsensitiveDict

import imgcrawler.fetcher as fetcher_module
from imgcrawler.fetcher import PageFetcher, is_html


class FakeResponse:
    def __init__(self, url, status_code=200, content=b"", content_type="text/html"):
        self.url = url
        self.status_code = status_code
        self.content = content
        self.headers = CaseInsensitiveDict()
        if content_type is not None:
            self.headers["Content-Type"] = content_type

    @property
    def text(self):
        return self.content.decode("utf-8")


@pytest.fixture
def calls(monkeypatch):
    recorded = []
    responses = {}

    def fake_get(session, url, **kwargs):
        recorded.append((url, dict(session.headers), kwargs))
        response = responses[url]
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(requests.Session, "get", fake_get)
    return recorded, responses


def test_fetch_page_parses_html_and_follows_redirects(calls):
    recorded, responses = calls
    responses["http://example.test/"] = FakeResponse(
        "http://example.test/home", content=b"<html><a href='/b'>b</a></html>"
    )
    fetcher = PageFetcher(user_agent="TestBot/1.0", timeout=3)
    result = fetcher.fetch_page("http://example.test/")

    assert result.ok
    assert result.final_url == "http://example.test/home"
    assert result.document.find("a")["href"] == "/b"
    url, headers, kwargs = recorded[0]
    assert headers["User-Agent"] == "TestBot/1.0"
    assert kwargs == {"timeout": 3, "allow_redirects": True}
    fetcher.close()


def test_fetch_page_without_user_agent_keeps_default(calls):
    recorded, responses = calls
    responses["http://example.test/"] = FakeResponse("http://example.test/", content=b"<p></p>")
    PageFetcher().fetch_page("http://example.test/")
    assert recorded[0][1]["User-Agent"].startswith("python-requests")


def test_fetch_page_reports_network_errors(calls):
    _, responses = calls
    responses["http://down.test/"] = requests.ConnectionError("refused")
    result = PageFetcher().fetch_page("http://down.test/")
    assert not result.ok
    assert result.status_code is None
    assert "ConnectionError" in result.error


def test_fetch_page_reports_http_errors(calls):
    _, responses = calls
    responses["http://example.test/missing"] = FakeResponse("http://example.test/missing", status_code=404)
    result = PageFetcher().fetch_page("http://example.test/missing")
    assert result.error == "HTTP 404"
    assert result.status_code == 404
    assert result.document is None


def test_fetch_page_skips_non_html(calls):
    _, responses = calls
    responses["http://example.test/doc.pdf"] = FakeResponse(
        "http://example.test/doc.pdf", content=b"%PDF", content_type="application/pdf"
    )
    result = PageFetcher().fetch_page("http://example.test/doc.pdf")
    assert result.ok
    assert result.document is None


def test_fetch_bytes_returns_payload_and_type(calls):
    _, responses = calls
    responses["http://example.test/a.png"] = FakeResponse(
        "http://example.test/a.png", content=b"\x89PNG", content_type="image/png"
    )
    result = PageFetcher().fetch_bytes("http://example.test/a.png")
    assert result.ok
    assert result.content == b"\x89PNG"
    assert result.content_type == "image/png"


def test_is_html():
    assert is_html(None)
    assert is_html("text/html; charset=utf-8")
    assert not is_html("image/png")


def test_fetch_page_reports_rejected_markup(calls, monkeypatch):
    _, responses = calls
    responses["http://example.test/"] = FakeResponse("http://example.test/", content=b"<p></p>")

    def reject(markup, features):
        raise ParserRejectedMarkup("unparseable")

    monkeypatch.setattr(fetcher_module, "BeautifulSoup", reject)
    result = PageFetcher().fetch_page("http://example.test/")
    assert result.error == "parse error: unparseable"
    assert result.document is None
