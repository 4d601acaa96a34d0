"""Markdown to HTML conversion.

Uses mistune with a heading-aware renderer that assigns anchor ids, collects
the table of contents and optionally lifts the first H1 out as the title.
"""

import html
import logging
import re
from dataclasses import dataclass
from typing import Any

import mistune
from mistune import HTMLRenderer

logger = logging.getLogger(__name__)

MARKDOWN_PLUGINS = ["table", "strikethrough", "footnotes", "url"]

TAG_RE = re.compile(r"<[^>]+>")
NON_WORD_RE = re.compile(r"[^\w\s-]")
WHITESPACE_RE = re.compile(r"[\s_]+")


@dataclass(frozen=True)
class TocEntry:
    """Table of contents entry."""

    level: int
    title: str
    id: str

    def to_dict(self) -> dict[str, str | int]:
        """Convert to dictionary for JSON serialization."""
        return {"level": self.level, "title": self.title, "id": self.id}


@dataclass
class ConversionResult:
    """Result of converting a markdown body."""

    html: str
    title: str | None
    toc: list[TocEntry]


def strip_tags(fragment: str) -> str:
    """Reduce an HTML fragment to plain text."""
    return html.unescape(TAG_RE.sub("", fragment)).strip()


def slugify(text: str) -> str:
    """Turn heading text into an anchor id."""
    cleaned = NON_WORD_RE.sub("", text.lower())
    return WHITESPACE_RE.sub("-", cleaned).strip("-") or "section"


class _HeadingRenderer(HTMLRenderer):
    """HTML renderer that records headings as they are rendered."""

    def __init__(self, *, escape: bool, extract_title: bool) -> None:
        super().__init__(escape=escape)
        self._extract_title = extract_title
        self._used_ids: dict[str, int] = {}
        self.title: str | None = None
        self.toc: list[TocEntry] = []

    def heading(self, text: str, level: int, **attrs: Any) -> str:
        plain = strip_tags(text)

        if self._extract_title and level == 1 and self.title is None:
            self.title = plain
            return ""

        anchor = self._unique_id(slugify(plain))
        self.toc.append(TocEntry(level=level, title=plain, id=anchor))
        return f'<h{level} id="{anchor}">{text}</h{level}>\n'

    def _unique_id(self, base: str) -> str:
        count = self._used_ids.get(base, 0)
        self._used_ids[base] = count + 1
        return base if count == 0 else f"{base}-{count}"


class MarkdownConverter:
    """Convert Markdown bodies to HTML."""

    def __init__(self, *, unsafe: bool = True, extract_title: bool = True) -> None:
        """Initialize converter.

        Args:
            unsafe: Pass raw HTML through instead of escaping it
            extract_title: Remove the first H1 from the output and report it as title
        """
        self._unsafe = unsafe
        self._extract_title = extract_title

    @property
    def options_key(self) -> str:
        """Identifies the conversion options for cache keys."""
        return f"unsafe={self._unsafe};extract_title={self._extract_title}"

    def convert(self, markdown_text: str) -> ConversionResult:
        """Convert Markdown text to HTML.

        Args:
            markdown_text: Markdown source text

        Returns:
            ConversionResult with HTML, extracted title and ToC
        """
        logger.debug(f"Converting {len(markdown_text)} characters of markdown")
        renderer = _HeadingRenderer(
            escape=not self._unsafe,
            extract_title=self._extract_title,
        )
        markdown = mistune.create_markdown(renderer=renderer, plugins=MARKDOWN_PLUGINS)
        body = markdown(markdown_text)
        if not isinstance(body, str):
            raise TypeError("mistune returned tokens instead of HTML")
        return ConversionResult(html=body, title=renderer.title, toc=list(renderer.toc))
