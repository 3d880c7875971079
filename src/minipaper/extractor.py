"""
Content Extractor - Fetch articles and extract their text and images in order.

Uses httpx (through ``Fetcher``) for fetching and BeautifulSoup with lxml for
parsing. Text and images are kept in the order they appear on the page so the
newspaper can interleave them the same way.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional, Union

from bs4 import BeautifulSoup, Tag

from .config import ARTICLE_TIMEOUT, ExtractionRules
from .exceptions import ExtractionError, TransportError
from .fetcher import Fetcher
from .images import dedupe_image_urls, is_low_value_image, resolve_image_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextPiece:
    """A paragraph or heading of article text."""

    value: str


@dataclass(frozen=True)
class ImagePiece:
    """An absolute reference to an article image."""

    source_url: str


ContentPiece = Union[TextPiece, ImagePiece]


@dataclass(frozen=True)
class ExtractionResult:
    """Represents the extracted content of one article URL."""

    title: str
    source_url: str
    succeeded: bool
    pieces: tuple[ContentPiece, ...] = ()
    plain_text: str = ""
    image_urls: tuple[str, ...] = ()
    char_count: int = 0
    word_count: int = 0
    structured: bool = False  # False for fallback and failed results
    error: Optional[str] = None

    @classmethod
    def failure(cls, source_url: str, message: str) -> "ExtractionResult":
        """Build a failed result carrying a diagnostic message."""
        return cls(
            title="Error",
            source_url=source_url,
            succeeded=False,
            plain_text=message,
            error=message,
        )

    @property
    def has_content(self) -> bool:
        return self.succeeded and bool(self.plain_text)


@dataclass
class _Accumulator:
    pieces: list = field(default_factory=list)
    texts: list = field(default_factory=list)
    images: list = field(default_factory=list)


def count_words(text: str) -> int:
    """Count runs of non-whitespace characters."""
    return len(text.split())


class ContentExtractor:
    """Extract article titles, text and images from web pages."""

    def __init__(
        self,
        rules: Optional[ExtractionRules] = None,
        fetcher: Optional[Fetcher] = None,
        timeout: float = ARTICLE_TIMEOUT,
    ):
        """
        Initialize the extractor.

        Args:
            rules: Selectors and filters (defaults to ``ExtractionRules()``)
            fetcher: Transport for ``extract_url``; created lazily if omitted
            timeout: Timeout in seconds for article pages
        """
        self.rules = rules or ExtractionRules()
        self.timeout = timeout
        self._fetcher = fetcher
        self._owns_fetcher = fetcher is None
        self._boilerplate = re.compile(self.rules.boilerplate_pattern)
        self._social = re.compile(self.rules.social_pattern)
        self._legal = re.compile(self.rules.legal_pattern)

    @property
    def fetcher(self) -> Fetcher:
        if self._fetcher is None:
            self._fetcher = Fetcher(timeout=self.timeout)
        return self._fetcher

    def close(self):
        """Close the fetcher if this extractor created it."""
        if self._owns_fetcher and self._fetcher is not None:
            self._fetcher.close()
            self._fetcher = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def extract_url(self, url: str) -> ExtractionResult:
        """
        Fetch a URL and extract its article content.

        Never raises: transport and parsing problems become a failed result.
        """
        try:
            response = self.fetcher.fetch(url, timeout=self.timeout)
        except TransportError as e:
            logger.warning("Failed to fetch %s: %s", url, e.reason)
            return ExtractionResult.failure(url, f"Failed to fetch article: {e.reason}")

        if not response.ok:
            logger.warning("HTTP %s for %s", response.status_code, url)
            return ExtractionResult.failure(url, f"HTTP error: {response.status_code}")

        return self.extract(response.text, url)

    def extract(
        self, document: Union[BeautifulSoup, str], source_url: str
    ) -> ExtractionResult:
        """
        Extract article content from a parsed page.

        Args:
            document: Parsed page, or raw HTML to parse with lxml
            source_url: URL the page came from (base for relative images)

        Returns:
            ExtractionResult; ``succeeded`` is False if anything went wrong
        """
        try:
            if isinstance(document, str):
                document = BeautifulSoup(document, "lxml")
            if not isinstance(document, BeautifulSoup):
                raise ExtractionError(
                    f"expected a parsed page, got {type(document).__name__}"
                )
            return self._extract(document, source_url)
        except Exception as e:
            logger.warning("Failed to extract %s: %s", source_url, e)
            return ExtractionResult.failure(source_url, f"Failed to extract article: {e}")

    def _extract(self, soup: BeautifulSoup, source_url: str) -> ExtractionResult:
        title = self._extract_title(soup)
        found = self._walk_content(soup, source_url)

        content = "\n\n".join(found.texts)
        structured = True
        if len(content) < self.rules.fallback_threshold:
            logger.debug(
                "Only %d characters in content areas of %s, using all paragraphs",
                len(content),
                source_url,
            )
            content = self._all_paragraphs(soup)
            pieces = (TextPiece(content),) if content.strip() else ()
            image_urls = ()
            structured = False
        else:
            pieces = tuple(found.pieces)
            image_urls = tuple(dedupe_image_urls(found.images, self.rules.max_images))

        return ExtractionResult(
            title=title,
            source_url=source_url,
            succeeded=True,
            pieces=pieces,
            plain_text=content[: self.rules.max_plain_text_chars],
            image_urls=image_urls,
            char_count=len(content),
            word_count=count_words(content),
            structured=structured,
        )

    def _extract_title(self, soup: BeautifulSoup) -> str:
        """Text of the first h1, or the default title."""
        h1 = soup.find("h1")
        if h1 is not None:
            title = h1.get_text().strip()
            if title:
                return title
        return self.rules.default_title

    def _walk_content(self, soup: BeautifulSoup, source_url: str) -> _Accumulator:
        """Collect text and image pieces from the content areas in page order."""
        found = _Accumulator()

        for node in soup.select(self.rules.content_selector):
            if not isinstance(node, Tag):
                continue

            if node.name == "img":
                src = node.get("src")
                if not src or is_low_value_image(src, self.rules.low_value_image_patterns):
                    continue
                img_url = resolve_image_url(src, source_url)
                found.pieces.append(ImagePiece(img_url))
                found.images.append(img_url)
                continue

            if node.name in self.rules.text_tags:
                text = node.get_text().strip()
                if self._is_noise(text):
                    continue
                found.pieces.append(TextPiece(text))
                found.texts.append(text)

        return found

    def _is_noise(self, text: str) -> bool:
        """Check if text looks like navigation, social or legal boilerplate."""
        if len(text) < self.rules.min_text_length:
            return True
        if self._boilerplate.match(text):
            return True
        if self._social.search(text):
            return True
        if self._legal.match(text):
            return True
        return False

    def _all_paragraphs(self, soup: BeautifulSoup) -> str:
        """Every paragraph of the page, separated by blank lines."""
        return "\n\n".join(p.get_text().strip() for p in soup.find_all("p"))


def extract_from_url(
    url: str,
    rules: Optional[ExtractionRules] = None,
    fetcher: Optional[Fetcher] = None,
) -> ExtractionResult:
    """Convenience function to extract content from a URL."""
    with ContentExtractor(rules=rules, fetcher=fetcher) as extractor:
        return extractor.extract_url(url)
