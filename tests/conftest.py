from __future__ import annotations

import io
from collections.abc import Iterator
from pathlib import Path
from typing import Optional, Union

import httpx
import pytest
from PIL import Image

from minipaper.exceptions import CompileError
from minipaper.fetcher import Fetcher
from minipaper.layout import AssembledDocument

PARAGRAPHS = [
    "City officials announced on Monday that the riverside park will reopen next spring "
    "after a two-year restoration project that replaced the old seawall and planted "
    "hundreds of native trees along the walking paths.",
    "The project was funded through a combination of federal grants and a local bond "
    "measure approved by voters, and came in slightly under its original budget "
    "despite delays caused by flooding during the second winter.",
    "Residents who attended the announcement said they were looking forward to the "
    "return of the weekend farmers market, which had temporarily moved to a parking "
    "lot on the other side of town while construction was underway.",
]

Route = Union[httpx.Response, Exception]


def make_page(
    body: str,
    title: Optional[str] = "Test Title",
    container: Optional[str] = "article",
    outside: str = "",
) -> str:
    """Wrap body markup in a page, optionally inside a content container."""
    heading = f"<h1>{title}</h1>" if title is not None else ""
    if container == "article":
        content = f"<article>{heading}{body}</article>"
    elif container:
        content = f'<div class="{container}">{heading}{body}</div>'
    else:
        content = f"{heading}{body}"
    return (
        "<html><head><title>Page</title></head><body>"
        "<nav><a href='/'>Home</a></nav>"
        f"{content}{outside}"
        "<footer><p>Copyright notice for the whole site</p></footer>"
        "</body></html>"
    )


def paragraphs_html(paragraphs: list[str] = PARAGRAPHS) -> str:
    return "".join(f"<p>{p}</p>" for p in paragraphs)


class MockWeb:
    """Maps URLs to canned responses for an httpx MockTransport."""

    def __init__(self) -> None:
        self.routes: dict[str, Route] = {}
        self.requests: list[str] = []

    def add(self, url: str, route: Route) -> None:
        self.routes[url] = route

    def add_html(self, url: str, html: str, status_code: int = 200) -> None:
        self.routes[url] = httpx.Response(
            status_code,
            content=html.encode("utf-8"),
            headers={"content-type": "text/html; charset=utf-8"},
        )

    def add_bytes(self, url: str, data: bytes, content_type: str = "image/png") -> None:
        self.routes[url] = httpx.Response(
            200, content=data, headers={"content-type": content_type}
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        route = self.routes.get(url)
        if route is None:
            return httpx.Response(404, content=b"not found")
        if isinstance(route, Exception):
            raise route
        return httpx.Response(
            route.status_code, content=route.content, headers=route.headers
        )


class FakeRenderer:
    """Stands in for pandoc; records what it was asked to compile."""

    def __init__(self, error: Optional[CompileError] = None) -> None:
        self.error = error
        self.documents: list[AssembledDocument] = []
        self.images_present: list[bool] = []

    def render(
        self,
        document: AssembledDocument,
        output_path: Optional[Union[str, Path]] = None,
    ) -> Optional[bytes]:
        self.documents.append(document)
        self.images_present = [p.exists() for p in document.image_paths]
        if self.error is not None:
            raise self.error
        pdf = b"%PDF-1.4 fake newspaper"
        if output_path:
            Path(output_path).write_bytes(pdf)
            return None
        return pdf


def image_bytes(fmt: str = "PNG", size: tuple[int, int] = (40, 30)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, (200, 30, 30)).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def web() -> MockWeb:
    return MockWeb()


@pytest.fixture
def fetcher(web: MockWeb) -> Iterator[Fetcher]:
    client_fetcher = Fetcher(transport=httpx.MockTransport(web.handler))
    yield client_fetcher
    client_fetcher.close()


@pytest.fixture
def fake_renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def png_bytes() -> bytes:
    return image_bytes("PNG")
