from __future__ import annotations

import httpx
from bs4 import BeautifulSoup

from conftest import PARAGRAPHS, MockWeb, make_page, paragraphs_html
from minipaper.config import ExtractionRules
from minipaper.extractor import ContentExtractor, ImagePiece, TextPiece, extract_from_url
from minipaper.fetcher import Fetcher

URL = "https://example.com/news/story"


def _texts(result) -> list[str]:
    return [p.value for p in result.pieces if isinstance(p, TextPiece)]


def test_extracts_title_and_paragraphs_in_order() -> None:
    result = ContentExtractor().extract(make_page(paragraphs_html()), URL)

    assert result.succeeded
    assert result.title == "Test Title"
    assert result.structured
    assert result.pieces == tuple(TextPiece(p) for p in PARAGRAPHS)
    assert result.plain_text == "\n\n".join(PARAGRAPHS)
    assert result.char_count == len(result.plain_text)
    assert result.word_count == len(" ".join(PARAGRAPHS).split())
    assert result.source_url == URL
    assert result.error is None


def test_accepts_parsed_document() -> None:
    soup = BeautifulSoup(make_page(paragraphs_html()), "lxml")
    result = ContentExtractor().extract(soup, URL)
    assert len(result.pieces) == 3


def test_filters_low_value_images_and_keeps_page_order() -> None:
    body = (
        f"<p>{PARAGRAPHS[0]}</p>"
        '<img src="/img/logo-icon.png" width="10" height="10">'
        '<figure><img src="/img/hero.jpg" width="1200" height="800"></figure>'
        f"<p>{PARAGRAPHS[1]}</p>"
        f"<p>{PARAGRAPHS[2]}</p>"
    )
    result = ContentExtractor().extract(make_page(body), URL)

    hero = "https://example.com/img/hero.jpg"
    assert result.image_urls == (hero,)
    assert result.pieces == (
        TextPiece(PARAGRAPHS[0]),
        ImagePiece(hero),
        TextPiece(PARAGRAPHS[1]),
        TextPiece(PARAGRAPHS[2]),
    )


def test_image_references_are_absolute_deduplicated_and_capped() -> None:
    images = "".join(f'<img src="//cdn.example.com/photo-{i}.jpg">' for i in range(12))
    images += '<img src="//cdn.example.com/photo-0.jpg"><img>'
    result = ContentExtractor().extract(make_page(paragraphs_html() + images), URL)

    assert len(result.image_urls) == 10
    assert result.image_urls[0] == "https://cdn.example.com/photo-0.jpg"
    assert all(u.startswith("https://") for u in result.image_urls)
    # Pieces keep every reference, including the repeat
    assert sum(isinstance(p, ImagePiece) for p in result.pieces) == 13


def test_boilerplate_social_and_legal_text_is_dropped() -> None:
    noise = [
        "Share this post with your friends",
        "Subscribe to our newsletter today",
        "Sign in to continue reading",
        "Comments are closed for this story",
        "Restacks from other readers here",
        "Top stories of the week so far",
        "Latest updates from our team",
        "Previous article in this series",
        "Ready for more? Keep reading",
        "Follow @reporter for live updates",
        "Find us on twitter.com/newsroom today",
        "© 2024 Example Media Group",
        "Privacy policy and cookie settings",
        "Terms of use apply to this site",
        "Collection notice for our readers",
        "Too short",
    ]
    keep = [
        "share this with lowercase is fine",
        "Read our Terms of service elsewhere",
    ]
    body = "".join(f"<p>{t}</p>" for t in noise + keep) + paragraphs_html()
    result = ContentExtractor().extract(make_page(body), URL)

    assert _texts(result) == keep + PARAGRAPHS


def test_headings_are_kept_and_other_tags_ignored() -> None:
    body = (
        "<h2>A heading about the park</h2>"
        "<div>Loose div text that is not a paragraph</div>"
        "<ul><li>A list item that is ignored</li></ul>"
        + paragraphs_html()
        + "<h6>A small closing heading</h6>"
    )
    result = ContentExtractor().extract(make_page(body), URL)

    assert _texts(result) == (
        ["A heading about the park"] + PARAGRAPHS + ["A small closing heading"]
    )


def test_nested_containers_do_not_duplicate_pieces() -> None:
    page = make_page(
        f'<main><div class="post-content">{paragraphs_html()}</div></main>'
    )
    result = ContentExtractor().extract(page, URL)
    assert _texts(result) == PARAGRAPHS


def test_falls_back_to_all_paragraphs_when_content_is_short() -> None:
    short = "A short note about the park reopening next spring, with little detail."
    page = make_page(
        f"<p>{short}</p>",
        container=None,
        outside='<div class="sidebar"><p>Sidebar paragraph</p><img src="/hero.jpg"></div>',
    )
    result = ContentExtractor().extract(page, URL)

    expected = "\n\n".join(
        [short, "Sidebar paragraph", "Copyright notice for the whole site"]
    )
    assert result.succeeded
    assert not result.structured
    assert result.plain_text == expected
    assert result.pieces == (TextPiece(expected),)
    assert result.image_urls == ()
    assert result.char_count == len(expected)


def test_fallback_discards_images_from_short_articles() -> None:
    page = make_page('<p>Only a short caption here.</p><img src="/hero.jpg">')
    result = ContentExtractor().extract(page, URL)

    assert not result.structured
    assert result.image_urls == ()
    assert not any(isinstance(p, ImagePiece) for p in result.pieces)


def test_default_title_when_h1_missing_or_empty() -> None:
    extractor = ContentExtractor()
    assert extractor.extract(make_page(paragraphs_html(), title=None), URL).title == (
        "Untitled Article"
    )
    assert extractor.extract(make_page(paragraphs_html(), title="  "), URL).title == (
        "Untitled Article"
    )


def test_plain_text_is_truncated_but_counts_are_not() -> None:
    rules = ExtractionRules(max_plain_text_chars=100)
    result = ContentExtractor(rules=rules).extract(make_page(paragraphs_html()), URL)

    full = "\n\n".join(PARAGRAPHS)
    assert result.plain_text == full[:100]
    assert result.char_count == len(full)
    assert result.word_count == len(full.split())
    assert _texts(result) == PARAGRAPHS


def test_custom_rules_change_selectors_and_filters() -> None:
    rules = ExtractionRules(
        content_selectors=(".story *",),
        boilerplate_pattern=r"^Advertisement",
        fallback_threshold=10,
    )
    page = make_page(
        "<p>Advertisement: buy our premium plan</p>" + paragraphs_html(),
        container="story",
    )
    result = ContentExtractor(rules=rules).extract(page, URL)

    assert result.structured
    assert _texts(result) == PARAGRAPHS


def test_traversal_errors_become_failed_results() -> None:
    result = ContentExtractor().extract(object(), URL)  # type: ignore[arg-type]

    assert not result.succeeded
    assert result.title == "Error"
    assert result.plain_text.startswith("Failed to extract article:")
    assert result.pieces == ()
    assert result.image_urls == ()
    assert (result.char_count, result.word_count) == (0, 0)


def test_extract_url_success(web: MockWeb, fetcher: Fetcher) -> None:
    web.add_html(URL, make_page(paragraphs_html()))
    with ContentExtractor(fetcher=fetcher) as extractor:
        result = extractor.extract_url(URL)
    assert result.succeeded
    assert result.title == "Test Title"


def test_extract_url_http_error(web: MockWeb, fetcher: Fetcher) -> None:
    web.add_html(URL, "<html></html>", status_code=503)
    result = ContentExtractor(fetcher=fetcher).extract_url(URL)

    assert not result.succeeded
    assert result.title == "Error"
    assert result.plain_text == "HTTP error: 503"
    assert result.error == "HTTP error: 503"
    assert (result.char_count, result.word_count) == (0, 0)


def test_extract_url_transport_error(web: MockWeb, fetcher: Fetcher) -> None:
    web.add(URL, httpx.ReadTimeout("read timed out"))
    result = ContentExtractor(fetcher=fetcher).extract_url(URL)

    assert not result.succeeded
    assert result.plain_text.startswith("Failed to fetch article:")
    assert "timed out" in result.plain_text


def test_extract_from_url(web: MockWeb, fetcher: Fetcher) -> None:
    web.add_html(URL, make_page(paragraphs_html(), title="Wrapped"))
    result = extract_from_url(URL, fetcher=fetcher)

    assert result.succeeded
    assert result.title == "Wrapped"
    assert web.requests == [URL]
