"""Error types raised by the build pipeline.

Per-document errors (front matter, rendering) are recoverable: the build
records them and moves on to the next document. Duplicate slugs are detected
once all pages are rendered. A missing content root is reported with the
builtin ``FileNotFoundError``/``NotADirectoryError`` and stops the build.
"""

from pathlib import Path


class QuireError(Exception):
    """Base class for build errors."""


class DocumentError(QuireError):
    """Error tied to a single source document."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}" if path is not None else message)


class MalformedFrontMatterError(DocumentError):
    """Front matter block is unterminated or not a YAML mapping."""


class RenderError(DocumentError):
    """Document could not be turned into a page."""


class DuplicateSlugError(QuireError):
    """Several documents claim the same URL slug."""

    def __init__(self, slug: str, paths: list[Path]) -> None:
        self.slug = slug
        self.paths = list(paths)
        joined = ", ".join(str(p) for p in self.paths)
        super().__init__(f"Duplicate slug '/{slug}' used by: {joined}")
