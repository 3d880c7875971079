"""
Text Normalizer - Make extracted text safe for LaTeX.

Replaces typographic characters with ASCII equivalents, escapes LaTeX's
reserved characters and strips everything else pdflatex may choke on.
Accented and non-Latin characters are dropped, not transliterated.
"""

import re
from typing import Optional, Union

TYPOGRAPHIC_REPLACEMENTS = {
    "\u2018": "'",
    "\u2019": "'",
    "\u201c": '"',
    "\u201d": '"',
    "\u2013": "--",
    "\u2014": "---",
    "\u2026": "...",
    # Bullets
    "\u2022": "-",
    "\u2023": "-",
    "\u25e6": "-",
    "\u2043": "-",
    "\u2219": "-",
}

# Applied in a single pass, so inserted backslashes and braces are never
# escaped a second time.
LATEX_ESCAPES = {
    "#": r"\#",
    "\\": r"\textbackslash{}",
    "&": r"\&",
    "%": r"\%",
    "$": r"\$",
    "_": r"\_",
    "{": r"\{",
    "}": r"\}",
    "~": r"\textasciitilde{}",
    "^": r"\textasciicircum{}",
    "<": r"\textless{}",
    ">": r"\textgreater{}",
    "|": r"\textbar{}",
}

_TYPOGRAPHIC_TABLE = str.maketrans(TYPOGRAPHIC_REPLACEMENTS)
_LATEX_TABLE = str.maketrans(LATEX_ESCAPES)
_UNSAFE_CHARS = re.compile(r"[^\x20-\x7E\n]")


def coerce_text(text: Union[str, bytes, None]) -> str:
    """Return valid text, dropping undecodable bytes and lone surrogates."""
    if text is None:
        return ""
    if isinstance(text, bytes):
        return text.decode("utf-8", errors="ignore")
    return text.encode("utf-8", errors="ignore").decode("utf-8")


def replace_typography(text: str) -> str:
    return text.translate(_TYPOGRAPHIC_TABLE)


def escape_latex(text: str) -> str:
    return text.translate(_LATEX_TABLE)


def ascii_safe(text: str) -> str:
    """Strip every character outside printable ASCII and newline."""
    return _UNSAFE_CHARS.sub("", text)


def normalize(text: Optional[Union[str, bytes]]) -> str:
    """
    Convert arbitrary extracted text into LaTeX-safe printable ASCII.

    Args:
        text: Raw text (``None`` and empty input yield an empty string)

    Returns:
        Escaped text containing only printable ASCII characters and newlines
    """
    text = coerce_text(text)
    if not text:
        return ""
    text = replace_typography(text)
    text = escape_latex(text)
    return ascii_safe(text)


_PARTIAL_ESCAPE = re.compile(r"\\(?:[A-Za-z]+\{?)?$")


def truncate_escaped(text: str, limit: int) -> str:
    """Cut normalized text to ``limit`` characters without splitting an escape."""
    if len(text) <= limit:
        return text
    return _PARTIAL_ESCAPE.sub("", text[:limit])
