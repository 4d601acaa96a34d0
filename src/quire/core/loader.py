"""Source enumeration for the content tree.

Walks the content root and yields Markdown sources in a stable order so that
"first document wins" decisions are reproducible between builds.
"""

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIXES = (".md", ".markdown")


@dataclass(frozen=True)
class SourceFile:
    """Raw content of a single source document."""

    path: Path
    source_path: Path
    text: str


class ContentLoader:
    """Enumerates Markdown documents under a content root.

    Iterating a loader walks the tree from scratch every time, so the same
    instance can be reused across rebuilds.
    """

    def __init__(self, source_dir: Path) -> None:
        """Initialize loader.

        Args:
            source_dir: Root directory containing markdown sources
        """
        self._source_dir = source_dir
        self._skipped: list[Path] = []

    @property
    def source_dir(self) -> Path:
        """Root directory containing markdown sources."""
        return self._source_dir

    @property
    def skipped(self) -> list[Path]:
        """Files skipped during the most recent enumeration."""
        return list(self._skipped)

    def sources(self) -> Iterator[SourceFile]:
        """Return a lazy sequence of source files.

        The content root is checked before the first file is read.

        Returns:
            Iterator of SourceFile in sorted relative path order

        Raises:
            FileNotFoundError: If the content root doesn't exist
            NotADirectoryError: If the content root is not a directory
        """
        if not self._source_dir.exists():
            raise FileNotFoundError(f"Content directory not found: {self._source_dir}")
        if not self._source_dir.is_dir():
            raise NotADirectoryError(f"Content path is not a directory: {self._source_dir}")

        # Surfaces permission problems on the root itself
        next(self._source_dir.iterdir(), None)

        self._skipped = []
        return self._read_all()

    def __iter__(self) -> Iterator[SourceFile]:
        return self.sources()

    def _read_all(self) -> Iterator[SourceFile]:
        for source_path in self._discover():
            relative = source_path.relative_to(self._source_dir)
            try:
                text = source_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Skipping unreadable file {relative}: {e}")
                self._skipped.append(relative)
                continue
            yield SourceFile(path=relative, source_path=source_path, text=text)

    def _discover(self) -> list[Path]:
        """Collect markdown files, ignoring hidden files and directories."""
        found: list[Path] = []
        for dirpath, dirnames, filenames in os.walk(self._source_dir, onerror=self._walk_error):
            dirnames[:] = [d for d in dirnames if not d.startswith(".")]
            for filename in filenames:
                if filename.startswith("."):
                    continue
                if Path(filename).suffix.lower() not in MARKDOWN_SUFFIXES:
                    continue
                found.append(Path(dirpath) / filename)
        return sorted(found, key=lambda p: p.relative_to(self._source_dir).as_posix())

    def _walk_error(self, error: OSError) -> None:
        """Report directories that cannot be listed; their files are skipped."""
        logger.warning(f"Skipping unreadable directory {error.filename}: {error.strerror}")
