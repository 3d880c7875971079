"""
Layout Composer - Assemble extracted articles into one newspaper document.

Produces Pandoc Markdown with a YAML front-matter carrying the LaTeX page
setup. Articles are laid out in two columns (whole document) or three
columns (a multicols block around all articles), within per-article and
whole-document character budgets.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Iterable, Optional

from jinja2 import Environment, FileSystemLoader

from .config import (
    DEFAULT_ARTICLE_TITLE,
    DEFAULT_NEWSPAPER_TITLE,
    PARAGRAPH_CHAR_LIMIT,
    PER_ARTICLE_CHAR_BUDGET,
    PER_ARTICLE_IMAGE_BUDGET,
    TOTAL_CHAR_BUDGET,
)
from .extractor import ExtractionResult, ImagePiece, TextPiece
from .images import ImageStore
from .normalizer import normalize, truncate_escaped

logger = logging.getLogger(__name__)

ARTICLE_SPACING = "\\vspace{0.2cm}\n\n"
SEPARATORS = {
    2: "\\hrulefill\n\n",
    # A full rule is unstable inside multicols
    3: "\\vspace{0.1cm}\n\n",
}

_BLANK_LINE = re.compile(r"\n\s*\n")


@dataclass
class LayoutConfig:
    """Options for newspaper assembly."""

    column_count: int = 2  # 2 or 3
    include_images: bool = False
    title: str = DEFAULT_NEWSPAPER_TITLE
    per_article_char_budget: int = PER_ARTICLE_CHAR_BUDGET
    per_article_image_budget: int = PER_ARTICLE_IMAGE_BUDGET
    total_char_budget: int = TOTAL_CHAR_BUDGET
    paragraph_char_limit: int = PARAGRAPH_CHAR_LIMIT

    def __post_init__(self):
        if self.column_count not in (2, 3):
            raise ValueError(f"column_count must be 2 or 3, got {self.column_count}")
        for name in (
            "per_article_char_budget",
            "per_article_image_budget",
            "total_char_budget",
            "paragraph_char_limit",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")


@dataclass(frozen=True)
class AssembledDocument:
    """The typesetting-ready newspaper source."""

    source_text: str
    article_count: int = 0
    image_paths: tuple[Path, ...] = ()


def yaml_quote(value: str) -> str:
    """Single-quoted YAML scalar; backslashes stay literal."""
    return "'" + value.replace("'", "''") + "'"


def image_directive(path: Path) -> str:
    """Include an image at full column width."""
    return f"\\noindent\\includegraphics[width=\\linewidth]{{{Path(path).as_posix()}}}\n\n"


def heading(title: str, column_count: int) -> str:
    """Article heading for the given column mode."""
    if column_count == 3:
        # Markdown headings are not parsed inside the raw multicols block
        return f"\\subsection*{{{title}}}\n\n"
    return f"# {title}\n\n"


class DocumentAssembler:
    """Compose the newspaper source from extraction results."""

    def __init__(self, templates_dir: Optional[Path] = None):
        """Initialize with optional custom templates directory."""
        if templates_dir is None:
            templates_dir = Path(__file__).parent / "templates"

        self.templates_dir = templates_dir
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.env.filters["yaml_quote"] = yaml_quote

    def assemble(
        self,
        results: Iterable[ExtractionResult],
        config: Optional[LayoutConfig] = None,
        image_store: Optional[ImageStore] = None,
        today: Optional[date] = None,
    ) -> AssembledDocument:
        """
        Compose the complete newspaper document.

        Args:
            results: Extraction results in newspaper order
            config: Layout options
            image_store: Downloads images for structured articles; without
                one, image pieces are skipped
            today: Date printed under the title (defaults to today)

        Returns:
            AssembledDocument ready for the typesetting compiler
        """
        if config is None:
            config = LayoutConfig()
        columns = config.column_count

        parts = [self._front_matter(config, today or date.today())]
        if columns == 2:
            parts.append("\\RaggedRight\n\n")
        else:
            parts.append("\\begin{multicols}{3}\n\n")

        total_chars = 0
        article_count = 0
        image_paths: list[Path] = []

        for result in results:
            if not result.has_content:
                if not result.succeeded:
                    logger.info("Skipping failed article %s", result.source_url)
                continue

            remaining = config.total_char_budget - total_chars
            if remaining <= 0:
                logger.warning(
                    "Total character budget reached, skipping %s", result.source_url
                )
                continue

            if config.include_images and result.structured and result.pieces:
                body, chars, images = self._structured_body(
                    result, config, image_store, remaining
                )
            else:
                body, chars = self._flat_body(result, config, remaining)
                images = []

            # Only commit the heading once the body is known to be non-empty
            if not body:
                logger.info("No printable content for %s", result.source_url)
                continue

            title = normalize(result.title) or DEFAULT_ARTICLE_TITLE
            parts.append(heading(title, columns))
            parts.extend(body)
            parts.append(ARTICLE_SPACING)
            parts.append(SEPARATORS[columns])

            total_chars += chars
            article_count += 1
            image_paths.extend(images)

        if columns == 3:
            parts.append("\\end{multicols}\n")

        return AssembledDocument(
            source_text="".join(parts),
            article_count=article_count,
            image_paths=tuple(image_paths),
        )

    def _front_matter(self, config: LayoutConfig, today: date) -> str:
        template = self.env.get_template("frontmatter.md.j2")
        return template.render(
            title=normalize(config.title),
            date=today.strftime("%B %d, %Y"),
            columns=config.column_count,
        )

    def _structured_body(
        self,
        result: ExtractionResult,
        config: LayoutConfig,
        image_store: Optional[ImageStore],
        remaining: int,
    ) -> tuple[list[str], int, list[Path]]:
        """Emit text and images in page order until the budget is used up."""
        char_limit = min(config.per_article_char_budget, remaining)
        blocks: list[str] = []
        images: list[Path] = []
        char_count = 0

        for piece in result.pieces:
            if char_count >= char_limit:
                break

            if isinstance(piece, TextPiece):
                text = normalize(piece.value)
                if not text:
                    continue
                if char_count + len(text) > char_limit:
                    break
                blocks.append(f"{text}\n\n")
                char_count += len(text)
            elif isinstance(piece, ImagePiece):
                if image_store is None or len(images) >= config.per_article_image_budget:
                    continue
                local_path = image_store.fetch(piece.source_url)
                if local_path is None:
                    continue
                blocks.append(image_directive(local_path))
                images.append(local_path)
            else:
                raise TypeError(f"Unknown content piece: {piece!r}")

        return blocks, char_count, images

    def _flat_body(
        self,
        result: ExtractionResult,
        config: LayoutConfig,
        remaining: int,
    ) -> tuple[list[str], int]:
        """Plain text body, paragraph by paragraph."""
        text = normalize(result.plain_text)
        if not text:
            return [], 0

        paragraphs = []
        char_count = 0
        for paragraph in _BLANK_LINE.split(text):
            if not paragraph.strip():
                continue
            paragraph = truncate_escaped(paragraph, config.paragraph_char_limit)
            if char_count + len(paragraph) > remaining:
                break
            paragraphs.append(paragraph)
            char_count += len(paragraph)

        if not paragraphs:
            return [], 0
        return ["\n\n".join(paragraphs) + "\n\n"], char_count


def compose_document(
    results: Iterable[ExtractionResult],
    column_count: int = 2,
    title: str = DEFAULT_NEWSPAPER_TITLE,
) -> str:
    """Convenience function to assemble a text-only newspaper source."""
    assembler = DocumentAssembler()
    config = LayoutConfig(column_count=column_count, title=title)
    return assembler.assemble(results, config).source_text
