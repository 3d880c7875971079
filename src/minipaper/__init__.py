"""
MiniPaper - Article URLs to Mini Newspaper PDF Generator

Collect web articles, extract their text and images, and typeset them into
a single multi-column newspaper PDF.
"""

__version__ = "0.1.0"

from .extractor import ContentExtractor, ExtractionResult, ImagePiece, TextPiece
from .layout import AssembledDocument, DocumentAssembler, LayoutConfig
from .normalizer import normalize
from .pipeline import NewspaperGenerator
from .renderer import PDFRenderer

__all__ = [
    "__version__",
    "AssembledDocument",
    "ContentExtractor",
    "DocumentAssembler",
    "ExtractionResult",
    "ImagePiece",
    "LayoutConfig",
    "NewspaperGenerator",
    "PDFRenderer",
    "TextPiece",
    "normalize",
]
