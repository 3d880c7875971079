"""Error types raised across the newspaper pipeline."""

from typing import Optional


class MiniPaperError(Exception):
    """Base class for all MiniPaper errors."""


class TransportError(MiniPaperError):
    """A page or image could not be fetched (network failure or timeout)."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class ExtractionError(MiniPaperError):
    """Traversing a parsed page failed.

    Never escapes ``ContentExtractor.extract``; it is converted into a failed
    ``ExtractionResult`` there.
    """


class CompileError(MiniPaperError):
    """The typesetting compiler failed to produce a PDF."""

    def __init__(self, message: str, diagnostics: Optional[str] = None):
        super().__init__(message)
        self.diagnostics = diagnostics or ""

    def __str__(self) -> str:
        message = super().__str__()
        if self.diagnostics:
            return f"{message}\n{self.diagnostics}"
        return message
