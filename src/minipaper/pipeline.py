"""
Newspaper pipeline - From a list of URLs to a finished PDF.

Articles are fetched and extracted one at a time. Images are downloaded into
a temporary directory that only lives for one generation request.
"""

import logging
import tempfile
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence, Union

from .config import PREVIEW_CHARS, ExtractionRules
from .extractor import ContentExtractor, ExtractionResult
from .fetcher import Fetcher
from .images import ImageStore
from .layout import AssembledDocument, DocumentAssembler, LayoutConfig
from .renderer import PDFRenderer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArticleDiagnostics:
    """Read-only summary of one extracted article."""

    url: str
    title: str
    char_count: int
    word_count: int
    succeeded: bool
    message: Optional[str] = None
    preview: str = ""

    @classmethod
    def from_result(
        cls, result: ExtractionResult, preview_chars: int = PREVIEW_CHARS
    ) -> "ArticleDiagnostics":
        """Summarize a result; failed results preview their error message."""
        return cls(
            url=result.source_url,
            title=result.title,
            char_count=result.char_count,
            word_count=result.word_count,
            succeeded=result.succeeded,
            message=result.error,
            preview=result.plain_text[:preview_chars],
        )


@dataclass(frozen=True)
class GeneratedNewspaper:
    """A compiled newspaper and the articles that went into it."""

    document: AssembledDocument
    articles: tuple[ExtractionResult, ...]
    pdf: Optional[bytes] = None


def parse_url_list(text: str) -> list[str]:
    """One URL per line; surrounding whitespace and blank lines are dropped."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def output_filename(title: str, today: Optional[date] = None) -> str:
    """ASCII download filename such as ``The_Daily_Brief_2024-05-01.pdf``."""
    today = today or date.today()
    # Only allow ASCII alphanumeric characters and basic punctuation
    clean = "".join(c if c.isascii() and (c.isalnum() or c in " -_") else "" for c in title)
    clean = clean.strip().replace(" ", "_") or "newspaper"
    return f"{clean}_{today.isoformat()}.pdf"


def format_diagnostics(diagnostics: Sequence[ArticleDiagnostics]) -> str:
    """Plain-text diagnostics view, one block per article."""
    lines = []
    for i, diag in enumerate(diagnostics, start=1):
        lines.append(
            f"Article {i}: {diag.title}\n"
            f"  Characters: {diag.char_count} | Words: {diag.word_count}"
            f" | Success: {diag.succeeded}"
        )
    return "\n\n".join(lines)


class NewspaperGenerator:
    """Fetch articles, assemble the newspaper and compile it."""

    def __init__(
        self,
        fetcher: Optional[Fetcher] = None,
        rules: Optional[ExtractionRules] = None,
        assembler: Optional[DocumentAssembler] = None,
        renderer: Optional[PDFRenderer] = None,
    ):
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or Fetcher()
        self.extractor = ContentExtractor(rules=rules, fetcher=self.fetcher)
        self.assembler = assembler or DocumentAssembler()
        self.renderer = renderer or PDFRenderer()

    def close(self):
        if self._owns_fetcher:
            self.fetcher.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def fetch_articles(
        self,
        urls: Iterable[str],
        on_result: Optional[Callable[[ExtractionResult], None]] = None,
    ) -> list[ExtractionResult]:
        """Extract every URL in order; failures stay in the list as data."""
        results = []
        for url in urls:
            logger.info("Fetching %s", url)
            result = self.extractor.extract_url(url)
            results.append(result)
            if on_result is not None:
                on_result(result)
        return results

    def diagnostics(self, results: Iterable[ExtractionResult]) -> list[ArticleDiagnostics]:
        return [ArticleDiagnostics.from_result(r) for r in results]

    def assemble(
        self,
        results: Sequence[ExtractionResult],
        config: LayoutConfig,
        image_dir: Optional[Path] = None,
        today: Optional[date] = None,
    ) -> AssembledDocument:
        """Assemble the source, downloading images into ``image_dir`` if given."""
        image_store = None
        if config.include_images and image_dir is not None:
            image_store = ImageStore(image_dir, self.fetcher)
        return self.assembler.assemble(results, config, image_store=image_store, today=today)

    def generate(
        self,
        articles: Sequence[Union[str, ExtractionResult]],
        config: LayoutConfig,
        output_path: Optional[Union[str, Path]] = None,
        today: Optional[date] = None,
    ) -> GeneratedNewspaper:
        """
        Build and compile the newspaper.

        Args:
            articles: URLs to fetch, or results already extracted for preview
            config: Layout options
            output_path: Path to save PDF. If None, the PDF bytes are returned
                on the result.
            today: Date printed under the title

        Returns:
            GeneratedNewspaper with the document source and PDF

        Raises:
            CompileError: If the typesetting compiler fails
        """
        results = [
            a if isinstance(a, ExtractionResult) else self.extractor.extract_url(a)
            for a in articles
        ]

        # Removed on every exit path, compile failures included
        with tempfile.TemporaryDirectory(prefix="minipaper-images-") as image_dir:
            document = self.assemble(results, config, Path(image_dir), today=today)
            logger.info(
                "Assembled %d of %d articles (%d images)",
                document.article_count,
                len(results),
                len(document.image_paths),
            )
            pdf = self.renderer.render(document, output_path=output_path)

        return GeneratedNewspaper(document=document, articles=tuple(results), pdf=pdf)
