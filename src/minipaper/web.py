"""
MiniPaper Web Interface - Browser-based UI for building newspapers.

A simple FastAPI application: paste article URLs, preview the per-article
diagnostics, and download the generated PDF.
"""

import base64
import io
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse, StreamingResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, Field

from . import __version__
from .config import DEFAULT_NEWSPAPER_TITLE
from .exceptions import CompileError
from .layout import LayoutConfig
from .pipeline import (
    ArticleDiagnostics,
    NewspaperGenerator,
    output_filename,
    parse_url_list,
)


# Initialize FastAPI app
app = FastAPI(
    title="MiniPaper",
    description="Turn article URLs into a printable mini newspaper",
    version=__version__,
)

# Set up templates
templates_dir = Path(__file__).parent / "web_templates"
templates = Jinja2Templates(directory=str(templates_dir))


class ArticlesRequest(BaseModel):
    """Request model for article diagnostics."""

    urls: list[str] = Field(min_length=1)


class GenerationRequest(BaseModel):
    """Request model for newspaper generation."""

    urls: list[str] = Field(min_length=1)
    title: str = DEFAULT_NEWSPAPER_TITLE
    columns: int = Field(2, ge=2, le=3)
    include_images: bool = False


class ArticleSummary(BaseModel):
    """Per-article diagnostics shown before generation."""

    url: str
    title: str
    char_count: int
    word_count: int
    succeeded: bool
    message: Optional[str] = None
    preview: str = ""

    @classmethod
    def from_diagnostics(cls, diag: ArticleDiagnostics) -> "ArticleSummary":
        return cls(
            url=diag.url,
            title=diag.title,
            char_count=diag.char_count,
            word_count=diag.word_count,
            succeeded=diag.succeeded,
            message=diag.message,
            preview=diag.preview,
        )


def get_generator() -> NewspaperGenerator:
    """Create the generator used for one request."""
    return NewspaperGenerator()


def _clean_urls(urls: list[str]) -> list[str]:
    return parse_url_list("\n".join(urls))


@app.get("/", response_class=HTMLResponse)
async def home(request: Request):
    """Render the home page with the newspaper form."""
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "version": __version__,
            "default_title": DEFAULT_NEWSPAPER_TITLE,
        },
    )


@app.post("/api/articles")
def api_articles(request: ArticlesRequest) -> list[ArticleSummary]:
    """
    Fetch the articles and return their diagnostics.

    Nothing is compiled; failed articles are reported, not raised.
    """
    urls = _clean_urls(request.urls)
    if not urls:
        raise HTTPException(status_code=422, detail="Please enter at least one URL")

    with get_generator() as generator:
        results = generator.fetch_articles(urls)
        return [
            ArticleSummary.from_diagnostics(d) for d in generator.diagnostics(results)
        ]


@app.post("/generate")
def generate_newspaper(
    urls: str = Form(...),
    title: str = Form(DEFAULT_NEWSPAPER_TITLE),
    columns: int = Form(2),
    include_images: bool = Form(False),
):
    """
    Build the newspaper and return it for download.

    ``urls`` holds one article URL per line, as typed into the form.
    """
    url_list = parse_url_list(urls)
    if not url_list:
        raise HTTPException(status_code=422, detail="Please enter at least one URL")
    try:
        config = LayoutConfig(column_count=columns, include_images=include_images, title=title)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    try:
        with get_generator() as generator:
            newspaper = generator.generate(url_list, config)
    except CompileError as e:
        raise HTTPException(
            status_code=500,
            detail=f"PDF generation failed: {e}",
        )

    filename = output_filename(title)
    return StreamingResponse(
        io.BytesIO(newspaper.pdf),
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Content-Length": str(len(newspaper.pdf)),
        },
    )


@app.post("/api/generate", response_class=JSONResponse)
def api_generate(request: GenerationRequest):
    """
    API endpoint for newspaper generation.

    Returns JSON with PDF bytes encoded as base64.
    """
    url_list = _clean_urls(request.urls)
    if not url_list:
        raise HTTPException(status_code=422, detail="Please enter at least one URL")

    config = LayoutConfig(
        column_count=request.columns,
        include_images=request.include_images,
        title=request.title,
    )

    with get_generator() as generator:
        try:
            newspaper = generator.generate(url_list, config)
        except CompileError as e:
            return JSONResponse(
                status_code=500,
                content={"success": False, "error": str(e)},
            )
        articles = [
            ArticleSummary.from_diagnostics(d).model_dump()
            for d in generator.diagnostics(newspaper.articles)
        ]

    return {
        "success": True,
        "filename": output_filename(request.title),
        "article_count": newspaper.document.article_count,
        "articles": articles,
        "pdf_base64": base64.b64encode(newspaper.pdf).decode("ascii"),
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}
