"""
PDF Renderer - Typeset the assembled newspaper source into a PDF.

Runs pandoc with the pdflatex engine in a scratch directory. Compiler
diagnostics are passed through verbatim in ``CompileError``.
"""

import logging
import subprocess
import tempfile
from pathlib import Path
from typing import Optional, Sequence, Union

from .exceptions import CompileError
from .layout import AssembledDocument

logger = logging.getLogger(__name__)


class PDFRenderer:
    """Render an assembled document to PDF with pandoc."""

    def __init__(
        self,
        command: str = "pandoc",
        pdf_engine: str = "pdflatex",
        timeout: float = 300.0,
        extra_args: Sequence[str] = (),
    ):
        """
        Initialize the PDF renderer.

        Args:
            command: pandoc executable
            pdf_engine: LaTeX engine passed to ``--pdf-engine``
            timeout: Seconds before the compiler is killed
            extra_args: Additional command line arguments for pandoc
        """
        self.command = command
        self.pdf_engine = pdf_engine
        self.timeout = timeout
        self.extra_args = tuple(extra_args)

    def build_command(self, source_path: Path, pdf_path: Path) -> list[str]:
        return [
            self.command,
            str(source_path),
            "--from=markdown",
            f"--pdf-engine={self.pdf_engine}",
            "-o",
            str(pdf_path),
            *self.extra_args,
        ]

    def render(
        self,
        document: AssembledDocument,
        output_path: Optional[Union[str, Path]] = None,
    ) -> Optional[bytes]:
        """
        Compile the document to PDF.

        Args:
            document: Assembled newspaper source
            output_path: Path to save PDF. If None, returns bytes.

        Returns:
            PDF bytes if output_path is None, otherwise None

        Raises:
            CompileError: If the compiler is missing, fails or times out
        """
        with tempfile.TemporaryDirectory(prefix="minipaper-build-") as build_dir:
            source_path = Path(build_dir) / "newspaper.md"
            pdf_path = Path(build_dir) / "newspaper.pdf"
            source_path.write_text(document.source_text, encoding="utf-8")

            cmd = self.build_command(source_path, pdf_path)
            logger.debug("Running %s", " ".join(cmd))
            try:
                completed = subprocess.run(
                    cmd,
                    cwd=build_dir,
                    capture_output=True,
                    text=True,
                    timeout=self.timeout,
                )
            except FileNotFoundError as e:
                raise CompileError(f"Compiler not found: {self.command}") from e
            except subprocess.TimeoutExpired as e:
                raise CompileError(
                    f"PDF generation timed out after {self.timeout:g}s",
                    _decode(e.stderr),
                ) from e

            if completed.returncode != 0:
                logger.warning("PDF generation failed with exit code %s", completed.returncode)
                raise CompileError(
                    f"PDF generation failed (exit code {completed.returncode})",
                    completed.stderr or completed.stdout,
                )
            if not pdf_path.exists():
                raise CompileError("PDF generation produced no output", completed.stderr)

            pdf_bytes = pdf_path.read_bytes()

        if output_path:
            output_path = Path(output_path)
            output_path.write_bytes(pdf_bytes)
            return None
        return pdf_bytes


def _decode(stream: Union[bytes, str, None]) -> str:
    if stream is None:
        return ""
    if isinstance(stream, bytes):
        return stream.decode("utf-8", errors="replace")
    return stream


def render_to_pdf(document: AssembledDocument, output_path: Union[str, Path]) -> None:
    """Convenience function to render a document to a PDF file."""
    PDFRenderer().render(document, output_path=output_path)
