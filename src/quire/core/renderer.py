"""Page rendering with caching.

Converts a Document's Markdown body to HTML (through the file cache when one
is configured) and merges it into the layout the document asks for.
"""

import datetime
import logging
from dataclasses import dataclass, field
from email.utils import format_datetime
from pathlib import Path, PurePosixPath
from typing import Any

from quire.core.cache import FileCache, compute_content_hash
from quire.core.document import Document
from quire.core.layouts import LayoutEngine
from quire.core.markdown import ConversionResult, MarkdownConverter, TocEntry, strip_tags
from quire.core.types import Slug
from quire.errors import RenderError

logger = logging.getLogger(__name__)

FILE_LIKE_SUFFIXES = (".html", ".htm", ".xml", ".json", ".txt")


def slug_url(slug: str) -> str:
    """Site-relative URL for a slug."""
    if not slug:
        return "/"
    if PurePosixPath(slug).suffix in FILE_LIKE_SUFFIXES:
        return f"/{slug}"
    return f"/{slug}/"


def output_path_for(slug: str) -> Path:
    """Output file path, relative to the output directory, for a slug."""
    if not slug:
        return Path("index.html")
    if PurePosixPath(slug).suffix in FILE_LIKE_SUFFIXES:
        return Path(slug)
    return Path(slug) / "index.html"


def summarize(text: str, words: int) -> str:
    """Return the first ``words`` words of plain text."""
    tokens = text.split()
    if len(tokens) <= words:
        return " ".join(tokens)
    return " ".join(tokens[:words]) + "…"


@dataclass
class RenderedPage:
    """Output produced from a single Document."""

    slug: Slug
    html_body: str
    layout: str
    html: str
    title: str
    source_path: Path | None = None
    path: Path | None = None
    date: datetime.date | None = None
    summary: str = ""
    toc: list[TocEntry] = field(default_factory=list)
    terms: dict[str, list[str]] = field(default_factory=dict)
    aliases: list[str] = field(default_factory=list)
    from_cache: bool = False

    @property
    def url(self) -> str:
        return slug_url(self.slug)

    @property
    def output_path(self) -> Path:
        return output_path_for(self.slug)

    def to_listing(self) -> dict[str, Any]:
        """Summary used by listing pages and feeds."""
        pub_date = None
        if self.date is not None:
            moment = datetime.datetime.combine(self.date, datetime.time(), datetime.UTC)
            pub_date = format_datetime(moment)
        return {
            "title": self.title,
            "url": self.url,
            "slug": self.slug,
            "date": self.date.isoformat() if self.date else None,
            "pub_date": pub_date,
            "summary": self.summary,
        }


class PageRenderer:
    """Renders documents into pages.

    Markdown conversion results are cached by document path and content hash
    when a FileCache is given.
    """

    def __init__(
        self,
        layouts: LayoutEngine,
        cache: FileCache | None = None,
        *,
        converter: MarkdownConverter | None = None,
        summary_length: int = 20,
        taxonomies: dict[str, str] | None = None,
    ) -> None:
        """Initialize renderer.

        Args:
            layouts: LayoutEngine used to apply layouts
            cache: FileCache for converted bodies, or None to disable caching
            converter: Markdown converter (default options when omitted)
            summary_length: Words used for summaries when no excerpt is set
            taxonomies: Taxonomy name -> front matter key, recorded on pages
        """
        self._layouts = layouts
        self._cache = cache
        self._converter = converter or MarkdownConverter()
        self._summary_length = summary_length
        self._taxonomies = taxonomies or {}

    def render(self, document: Document) -> RenderedPage:
        """Render a document.

        Args:
            document: Parsed source document

        Returns:
            RenderedPage with the final HTML

        Raises:
            RenderError: If the document has no title or its layout fails
        """
        conversion, from_cache = self._convert(document)

        title = document.title or conversion.title or ""
        if not title:
            raise RenderError("missing required field 'title'", document.path)

        if ".." in document.slug.split("/"):
            raise RenderError(f"url '{document.url}' points outside the site", document.path)

        summary = document.excerpt or summarize(
            strip_tags(conversion.html),
            self._summary_length,
        )

        page = RenderedPage(
            slug=document.slug,
            html_body=conversion.html,
            layout=document.layout,
            html="",
            title=title,
            source_path=document.source_path,
            path=document.path,
            date=document.date,
            summary=summary,
            toc=conversion.toc,
            terms={
                key: document.terms(key) for key in sorted(self._taxonomies.values())
            },
            aliases=document.aliases,
            from_cache=from_cache,
        )

        try:
            page.html = self._layouts.render(document.layout, self._context(document, page))
        except RenderError as e:
            raise RenderError(e.message, document.path) from e

        return page

    def _convert(self, document: Document) -> tuple[ConversionResult, bool]:
        """Convert the body, consulting the cache first."""
        if self._cache is None:
            return self._converter.convert(document.body), False

        key = document.path.with_suffix("").as_posix()
        content_hash = compute_content_hash(document.body, self._converter.options_key)

        cached = self._cache.get(key, content_hash)
        if cached is not None:
            logger.debug(f"Cache hit for {document.path}")
            toc = [
                TocEntry(level=int(e["level"]), title=str(e["title"]), id=str(e["id"]))
                for e in cached.meta["toc"]
            ]
            return ConversionResult(html=cached.html, title=cached.meta["title"], toc=toc), True

        result = self._converter.convert(document.body)
        try:
            self._cache.set(
                key,
                result.html,
                result.title,
                content_hash,
                [entry.to_dict() for entry in result.toc],
            )
        except OSError as e:
            logger.warning(f"Could not cache {document.path}: {e}")
        return result, False

    def _context(self, document: Document, page: RenderedPage) -> dict[str, Any]:
        """Template variables for a document layout."""
        image = document.image
        image_url = image.get("preview") if isinstance(image, dict) else image
        return {
            "page": {
                "title": page.title,
                "slug": page.slug,
                "url": page.url,
                "date": page.date.isoformat() if page.date else None,
                "modified": document.modified.isoformat() if document.modified else None,
                "authors": document.authors,
                "categories": document.categories,
                "tags": document.tags,
                "summary": page.summary,
                "image": image,
                "image_url": image_url,
                "comments_enabled": document.comments_enabled,
                "toc": [entry.to_dict() for entry in page.toc],
                "params": document.front_matter,
            },
            "content": page.html_body,
        }
