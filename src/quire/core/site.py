"""Site structure for rendered pages.

SiteBuilder is the accumulator of seen slugs: pages are added in load order,
the first page for a slug owns it, and later claimants are recorded as
conflicts. Site is the finalized, read-only view handed to derived pages and
the writer.
"""

from pathlib import Path

from quire.core.document import normalize_slug
from quire.core.renderer import RenderedPage
from quire.errors import DuplicateSlugError


def _chronological_key(page: RenderedPage) -> tuple[int, int, str]:
    if page.date is None:
        return (1, 0, page.slug)
    return (0, -page.date.toordinal(), page.slug)


class Site:
    """Finalized set of pages with slug lookups.

    Stores pages in a flat list in the order they were accepted, with an index
    from slug to position for O(1) lookups.
    """

    __slots__ = ("_pages", "_slug_index")

    def __init__(self, pages: list[RenderedPage]) -> None:
        """Initialize site structure.

        Args:
            pages: Pages with unique slugs
        """
        self._pages = list(pages)
        self._slug_index = {page.slug: i for i, page in enumerate(self._pages)}

    def __len__(self) -> int:
        return len(self._pages)

    @property
    def pages(self) -> list[RenderedPage]:
        """All pages in acceptance order."""
        return list(self._pages)

    def get_page(self, slug: str) -> RenderedPage | None:
        """Get page by slug.

        Args:
            slug: Page slug or URL (e.g., "guide" or "/guide/")

        Returns:
            RenderedPage if found, None otherwise
        """
        idx = self._slug_index.get(normalize_slug(slug))
        if idx is None:
            return None
        return self._pages[idx]

    def has_slug(self, slug: str) -> bool:
        return normalize_slug(slug) in self._slug_index

    def chronological(self) -> list[RenderedPage]:
        """Document pages, newest first; undated pages last, by slug."""
        return sorted(
            (page for page in self._pages if page.path is not None),
            key=_chronological_key,
        )

    def terms(self, key: str) -> dict[str, list[RenderedPage]]:
        """Group document pages by the terms stored under a front matter key.

        Args:
            key: Taxonomy front matter key (e.g., "categories")

        Returns:
            Mapping of term to pages, terms sorted case-insensitively
        """
        grouped: dict[str, list[RenderedPage]] = {}
        for page in self.chronological():
            for term in page.terms.get(key, []):
                grouped.setdefault(term, []).append(page)
        return {term: grouped[term] for term in sorted(grouped, key=lambda t: (t.lower(), t))}


class SiteBuilder:
    """Accumulator that enforces unique output files.

    Pages are keyed by the file they publish, so two slugs that map to the
    same output path are treated as the same slug.
    """

    def __init__(self) -> None:
        self._pages: list[RenderedPage] = []
        self._owners: dict[Path, RenderedPage] = {}
        self._conflicts: dict[Path, list[Path]] = {}

    def add_page(self, page: RenderedPage) -> bool:
        """Add a document page.

        Args:
            page: Rendered document page

        Returns:
            True if the page owns its output file, False if an earlier page does
        """
        key = page.output_path
        owner = self._owners.get(key)
        if owner is not None:
            paths = self._conflicts.setdefault(key, [_page_path(owner)])
            paths.append(_page_path(page))
            return False

        self._owners[key] = page
        self._pages.append(page)
        return True

    def add_generated(self, page: RenderedPage) -> bool:
        """Add a derived page unless its output file is already taken.

        Derived pages never displace or conflict with document pages.

        Returns:
            True if the page was added
        """
        key = page.output_path
        if key in self._owners:
            return False
        self._owners[key] = page
        self._pages.append(page)
        return True

    @property
    def conflicts(self) -> list[DuplicateSlugError]:
        """One error per output file claimed by more than one document."""
        return [
            DuplicateSlugError(self._owners[key].slug, paths)
            for key, paths in self._conflicts.items()
        ]

    def build(self) -> Site:
        """Build the Site instance."""
        return Site(self._pages)


def _page_path(page: RenderedPage) -> Path:
    if page.path is not None:
        return page.path
    if page.source_path is not None:
        return page.source_path
    return Path(page.url)
