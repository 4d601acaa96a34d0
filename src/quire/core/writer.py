"""Output directory writer."""

import logging
import shutil
from pathlib import Path

from quire.core.renderer import RenderedPage

logger = logging.getLogger(__name__)


class OutputWriter:
    """Writes rendered pages and auxiliary files below the output directory."""

    def __init__(self, output_dir: Path) -> None:
        """Initialize writer.

        Args:
            output_dir: Destination directory for the built site
        """
        self._output_dir = output_dir

    @property
    def output_dir(self) -> Path:
        """Destination directory for the built site."""
        return self._output_dir

    def prepare(self, *, clean: bool = False) -> None:
        """Create the output directory, optionally emptying it first."""
        if clean and self._output_dir.exists():
            logger.info(f"Cleaning output directory {self._output_dir}")
            shutil.rmtree(self._output_dir)
        self._output_dir.mkdir(parents=True, exist_ok=True)

    def write_page(self, page: RenderedPage) -> Path:
        """Write a page to its slug-derived location.

        Returns:
            Absolute path of the written file
        """
        return self.write_file(page.output_path, page.html)

    def write_file(self, relative: Path, content: str) -> Path:
        """Write text content below the output directory.

        Raises:
            ValueError: If the path escapes the output directory
        """
        target = self._resolve(relative)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        logger.debug(f"Wrote {target}")
        return target

    def copy_static(self, static_dir: Path) -> int:
        """Copy static files verbatim into the output directory.

        Returns:
            Number of files copied
        """
        if not static_dir.is_dir():
            logger.warning(f"Static directory not found: {static_dir}")
            return 0

        copied = 0
        for source in sorted(static_dir.rglob("*")):
            if not source.is_file():
                continue
            target = self._resolve(source.relative_to(static_dir))
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)
            copied += 1
        return copied

    def _resolve(self, relative: Path) -> Path:
        root = self._output_dir.resolve()
        target = (root / relative).resolve()
        if not target.is_relative_to(root):
            raise ValueError(f"Refusing to write outside output directory: {relative}")
        return target
