from __future__ import annotations

import httpx
import pytest

from conftest import MockWeb
from minipaper.config import USER_AGENT
from minipaper.exceptions import TransportError
from minipaper.fetcher import FetchResponse, Fetcher

URL = "https://example.com/news/story"


def test_fetch_returns_status_body_and_content_type(web: MockWeb, fetcher: Fetcher) -> None:
    web.add_html(URL, "<p>café</p>")

    response = fetcher.fetch(URL)

    assert response == FetchResponse(
        url=URL,
        status_code=200,
        content="<p>café</p>".encode("utf-8"),
        content_type="text/html; charset=utf-8",
    )
    assert response.ok
    assert response.text == "<p>café</p>"


def test_non_2xx_is_data_not_an_error(web: MockWeb, fetcher: Fetcher) -> None:
    web.add_html(URL, "gone", status_code=410)

    response = fetcher.fetch(URL)

    assert response.status_code == 410
    assert not response.ok


def test_text_replaces_invalid_utf8() -> None:
    response = FetchResponse(url=URL, status_code=200, content=b"ok \xff")
    assert response.text == "ok \ufffd"
    assert response.content_type == ""


def test_sends_browser_user_agent() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers["user-agent"])
        return httpx.Response(200, content=b"")

    with Fetcher(transport=httpx.MockTransport(handler)) as fetcher:
        fetcher.fetch(URL)

    assert seen == [USER_AGENT]


@pytest.mark.parametrize(
    "error, message",
    [
        (httpx.ConnectTimeout("connect timed out"), "timed out"),
        (httpx.ConnectError("connection refused"), "connection refused"),
    ],
)
def test_network_failures_raise_transport_error(
    web: MockWeb, fetcher: Fetcher, error: Exception, message: str
) -> None:
    web.add(URL, error)

    with pytest.raises(TransportError, match=message) as excinfo:
        fetcher.fetch(URL)

    assert excinfo.value.url == URL
