"""Source document model.

Front matter is kept as an open string-keyed map; the accessors below only
interpret the fields the build needs and leave everything else to layouts.
"""

import datetime
import re
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any

from quire.core.frontmatter import parse_front_matter
from quire.core.loader import SourceFile
from quire.core.types import Slug

JEKYLL_DATE_PREFIX_RE = re.compile(r"^\d{4}-\d{2}-\d{2}-")
REPEATED_SLASHES_RE = re.compile(r"/{2,}")
INDEX_FILE = "index.html"


def normalize_slug(url: str) -> Slug:
    """Normalize a URL value into a slug.

    Args:
        url: URL from front matter (e.g., "/spring-boot-paging/")

    Returns:
        Slug without leading or trailing slashes ("" for the home page);
        a trailing ``index.html`` is dropped so ``guide/index.html`` is ``guide``.
    """
    collapsed = REPEATED_SLASHES_RE.sub("/", url.strip()).strip("/")
    if collapsed == INDEX_FILE or collapsed.endswith(f"/{INDEX_FILE}"):
        collapsed = collapsed.removesuffix(INDEX_FILE).rstrip("/")
    return Slug(collapsed)


def slug_from_path(path: Path) -> Slug:
    """Derive a slug from a document path relative to the content root.

    ``index.md`` maps to its directory and a Jekyll-style date prefix
    (``2020-01-31-``) is dropped from the file name.
    """
    posix = PurePosixPath(path.as_posix()).with_suffix("")
    parts = list(posix.parts)
    if parts and parts[-1] in ("index", "_index"):
        parts.pop()
    elif parts:
        parts[-1] = JEKYLL_DATE_PREFIX_RE.sub("", parts[-1])
    return normalize_slug("/".join(parts))


def _as_list(value: object) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if item is not None and str(item).strip()]
    text = str(value).strip()
    return [text] if text else []


def _as_date(value: object) -> datetime.date | None:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return datetime.datetime.fromisoformat(value.strip()).date()
        except ValueError:
            return None
    return None


@dataclass(frozen=True)
class Document:
    """A parsed Markdown source."""

    path: Path
    source_path: Path
    front_matter: dict[str, Any] = field(default_factory=dict)
    body: str = ""

    @classmethod
    def from_source(cls, source: SourceFile) -> "Document":
        """Parse a loaded source file.

        Raises:
            MalformedFrontMatterError: If the front matter block is invalid
        """
        metadata, body = parse_front_matter(source.text, source.path)
        return cls(
            path=source.path,
            source_path=source.source_path,
            front_matter=metadata,
            body=body,
        )

    def get(self, key: str, default: Any = None) -> Any:
        return self.front_matter.get(key, default)

    @property
    def title(self) -> str:
        value = self.front_matter.get("title")
        return str(value).strip() if value is not None else ""

    @property
    def url(self) -> str:
        value = self.front_matter.get("url")
        return str(value).strip() if value is not None else ""

    @property
    def slug(self) -> Slug:
        """Slug from the ``url`` field, falling back to the file path."""
        if self.url:
            return normalize_slug(self.url)
        return slug_from_path(self.path)

    @property
    def layout(self) -> str:
        value = self.front_matter.get("layout")
        return str(value).strip() if value else "default"

    @property
    def date(self) -> datetime.date | None:
        return _as_date(self.front_matter.get("date"))

    @property
    def modified(self) -> datetime.date | None:
        return _as_date(self.front_matter.get("modified"))

    @property
    def authors(self) -> list[str]:
        return _as_list(self.front_matter.get("authors"))

    @property
    def categories(self) -> list[str]:
        return _as_list(self.front_matter.get("categories"))

    @property
    def tags(self) -> list[str]:
        return _as_list(self.front_matter.get("tags"))

    @property
    def aliases(self) -> list[str]:
        return _as_list(self.front_matter.get("aliases"))

    @property
    def excerpt(self) -> str | None:
        value = self.front_matter.get("excerpt")
        return str(value).strip() if value else None

    @property
    def image(self) -> dict[str, Any] | str | None:
        return self.front_matter.get("image")

    @property
    def draft(self) -> bool:
        return bool(self.front_matter.get("draft", False))

    @property
    def comments_enabled(self) -> bool:
        comments = self.front_matter.get("comments")
        if isinstance(comments, dict):
            return bool(comments.get("enabled", True))
        if isinstance(comments, bool):
            return comments
        return True

    def terms(self, key: str) -> list[str]:
        """Taxonomy terms stored under a front matter key."""
        return _as_list(self.front_matter.get(key))
