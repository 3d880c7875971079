"""
Image Resolver - Absolute image URLs, low-value filtering and local caching.

Images are downloaded once per request into a temporary directory so the
LaTeX compiler can include them by absolute path.
"""

import hashlib
import io
import logging
from pathlib import Path, PurePosixPath
from typing import Iterable, Optional
from urllib.parse import urljoin, urlparse

from PIL import Image, UnidentifiedImageError

from .config import IMAGE_TIMEOUT, LOW_VALUE_IMAGE_PATTERNS, MAX_IMAGES_PER_RESULT
from .exceptions import TransportError
from .fetcher import Fetcher

logger = logging.getLogger(__name__)

# Extensions kept as-is when naming local files
URL_EXTENSIONS = {"jpg", "jpeg", "png", "gif"}


def resolve_image_url(raw_ref: str, base_url: str) -> str:
    """
    Resolve an image reference to an absolute URL.

    Absolute references are returned unchanged, protocol-relative ones get
    ``https:`` and everything else is resolved against ``base_url``.
    """
    raw_ref = raw_ref.strip()
    if urlparse(raw_ref).scheme:
        return raw_ref
    if raw_ref.startswith("//"):
        return f"https:{raw_ref}"
    return urljoin(base_url, raw_ref)


def is_low_value_image(
    ref: str, patterns: Iterable[str] = LOW_VALUE_IMAGE_PATTERNS
) -> bool:
    """Check if an image reference looks like an icon, logo or avatar."""
    ref_lower = ref.lower()
    return any(p.lower() in ref_lower for p in patterns)


def dedupe_image_urls(
    urls: Iterable[str], cap: int = MAX_IMAGES_PER_RESULT
) -> list[str]:
    """Drop repeated URLs, keeping first-seen order, and cap the count."""
    seen = set()
    unique = []
    for url in urls:
        if url in seen:
            continue
        seen.add(url)
        unique.append(url)
        if len(unique) >= cap:
            break
    return unique


def url_extension(url: str) -> str:
    """File extension from a URL path, defaulting to jpg."""
    suffix = PurePosixPath(urlparse(url).path).suffix.lstrip(".").lower()
    return suffix if suffix in URL_EXTENSIONS else "jpg"


class ImageStore:
    """Download article images into a request-scoped directory."""

    def __init__(
        self,
        directory: Path,
        fetcher: Fetcher,
        timeout: float = IMAGE_TIMEOUT,
    ):
        """
        Initialize the store.

        Args:
            directory: Directory that receives the downloaded files
            fetcher: Transport used for image downloads
            timeout: Timeout in seconds for each image
        """
        self.directory = Path(directory)
        self.fetcher = fetcher
        self.timeout = timeout
        self._cache: dict[str, Optional[Path]] = {}

    @property
    def paths(self) -> list[Path]:
        """Local files downloaded so far."""
        return [p for p in self._cache.values() if p is not None]

    def fetch(self, url: str) -> Optional[Path]:
        """
        Download an image and return its absolute local path.

        Returns:
            Path to the stored file, or None if the image could not be used
        """
        if url in self._cache:
            return self._cache[url]
        path = self._download(url)
        self._cache[url] = path
        return path

    def _download(self, url: str) -> Optional[Path]:
        if url.startswith("data:"):
            return None

        try:
            response = self.fetcher.fetch(url, timeout=self.timeout)
        except TransportError as e:
            logger.warning("Could not fetch image %s: %s", url, e.reason)
            return None

        if response.status_code != 200:
            logger.warning("Skipping image %s: HTTP %s", url, response.status_code)
            return None

        try:
            data, extension = self._prepare(response.content, url_extension(url))
        except (UnidentifiedImageError, OSError, ValueError) as e:
            logger.warning("Skipping image %s: %s", url, e)
            return None

        self.directory.mkdir(parents=True, exist_ok=True)
        digest = hashlib.sha1(url.encode("utf-8")).hexdigest()
        destination = (self.directory / f"img_{digest}.{extension}").resolve()
        try:
            destination.write_bytes(data)
        except OSError as e:
            logger.warning("Failed to write image %s: %s", destination, e)
            return None

        logger.debug("Stored image %s as %s", url, destination.name)
        return destination

    def _prepare(self, data: bytes, extension: str) -> tuple[bytes, str]:
        """Validate image bytes and convert formats pdflatex cannot include."""
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            if img.format == "JPEG":
                return data, extension if extension in ("jpg", "jpeg") else "jpg"
            if img.format == "PNG":
                return data, "png"

            # Convert to RGB(A) PNG
            if img.mode not in ("RGB", "RGBA"):
                img = img.convert("RGBA")
            buffer = io.BytesIO()
            img.save(buffer, format="PNG", optimize=True)
            return buffer.getvalue(), "png"
