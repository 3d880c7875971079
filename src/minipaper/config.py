"""
Configuration - Named limits and the heuristic rule set used for extraction.

Every threshold is a module constant so callers can read it, and every rule
can be overridden per extractor through ``ExtractionRules``.
"""

from dataclasses import dataclass

# Extraction
FALLBACK_THRESHOLD = 500
MAX_PLAIN_TEXT_CHARS = 60_000
MIN_TEXT_LENGTH = 10
MAX_IMAGES_PER_RESULT = 10

# Assembly
PER_ARTICLE_CHAR_BUDGET = 60_000
PER_ARTICLE_IMAGE_BUDGET = 5
PARAGRAPH_CHAR_LIMIT = 5_000
TOTAL_CHAR_BUDGET = 600_000
DEFAULT_NEWSPAPER_TITLE = "The Daily Brief"
DEFAULT_ARTICLE_TITLE = "Untitled Article"

# Preview
PREVIEW_CHARS = 500

# Transport
ARTICLE_TIMEOUT = 30.0
IMAGE_TIMEOUT = 10.0
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

CONTENT_SELECTORS = (
    "article *",
    "main *",
    ".post-content *",
    ".entry-content *",
)

TEXT_TAGS = ("h2", "h3", "h4", "h5", "h6", "p")

LOW_VALUE_IMAGE_PATTERNS = ("w_80", "h_80", "32x32", "icon", "logo", "avatar")

# Case-sensitive and anchored at the start of the text
BOILERPLATE_PATTERN = (
    r"^(Share|Subscribe|Sign in|Comments?|Restacks?|Top|Latest|Previous|Ready for more)"
)
SOCIAL_PATTERN = r"twitter\.com|facebook\.com|@"
LEGAL_PATTERN = r"^(©|Privacy|Terms|Collection notice)"


@dataclass(frozen=True)
class ExtractionRules:
    """Selectors, filters and thresholds for content extraction."""

    content_selectors: tuple[str, ...] = CONTENT_SELECTORS
    text_tags: tuple[str, ...] = TEXT_TAGS
    low_value_image_patterns: tuple[str, ...] = LOW_VALUE_IMAGE_PATTERNS
    boilerplate_pattern: str = BOILERPLATE_PATTERN
    social_pattern: str = SOCIAL_PATTERN
    legal_pattern: str = LEGAL_PATTERN
    min_text_length: int = MIN_TEXT_LENGTH
    fallback_threshold: int = FALLBACK_THRESHOLD
    max_plain_text_chars: int = MAX_PLAIN_TEXT_CHARS
    max_images: int = MAX_IMAGES_PER_RESULT
    default_title: str = DEFAULT_ARTICLE_TITLE

    @property
    def content_selector(self) -> str:
        """The candidate selectors joined into one CSS selector list."""
        return ", ".join(self.content_selectors)
