"""Derived listing pages: paginated home, taxonomy terms and the RSS feed.

All derived pages are computed from a finalized Site, so they only ever see
pages that survived the slug uniqueness check.
"""

from collections.abc import Sequence
from typing import Any, TypeVar

from quire.core.layouts import LayoutEngine
from quire.core.markdown import slugify
from quire.core.renderer import RenderedPage, slug_url
from quire.core.site import Site
from quire.core.types import Slug

T = TypeVar("T")

FEED_SLUG = Slug("index.xml")
FEED_SIZE = 20


def paginate(items: Sequence[T], per_page: int) -> list[list[T]]:
    """Split items into pages of at most ``per_page`` entries."""
    return [list(items[i : i + per_page]) for i in range(0, len(items), per_page)]


def term_slugs(terms: Sequence[str]) -> dict[str, str]:
    """Map terms to unique URL segments.

    Terms that slugify alike ("C#" and "C++") get numbered suffixes in the
    given order: ``c``, ``c-1``.
    """
    slugs: dict[str, str] = {}
    taken: set[str] = set()
    for term in terms:
        base = slugify(term)
        candidate = base
        suffix = 0
        while candidate in taken:
            suffix += 1
            candidate = f"{base}-{suffix}"
        taken.add(candidate)
        slugs[term] = candidate
    return slugs


def _generated(slug: str, layout: str, title: str, html: str) -> RenderedPage:
    return RenderedPage(slug=Slug(slug), html_body="", layout=layout, html=html, title=title)


def build_home_pages(
    site: Site,
    layouts: LayoutEngine,
    per_page: int,
    *,
    title: str = "",
) -> list[RenderedPage]:
    """Render the paginated list of all document pages.

    Page 1 lives at ``/`` and later pages at ``/page/N/``.

    Args:
        site: Finalized site
        layouts: LayoutEngine for the ``list`` layout
        per_page: Entries per page
        title: Heading shown on listing pages

    Returns:
        Listing pages, page 1 first
    """
    chunks = paginate(site.chronological(), per_page)
    total = len(chunks)
    pages: list[RenderedPage] = []

    for number, chunk in enumerate(chunks, start=1):
        slug = "" if number == 1 else f"page/{number}"
        prev_url = None
        if number == 2:
            prev_url = "/"
        elif number > 2:
            prev_url = slug_url(f"page/{number - 1}")
        next_url = slug_url(f"page/{number + 1}") if number < total else None

        context: dict[str, Any] = {
            "page": {"title": title, "slug": slug, "url": slug_url(slug)},
            "pages": [page.to_listing() for page in chunk],
            "paginator": {
                "number": number,
                "total": total,
                "prev_url": prev_url,
                "next_url": next_url,
            },
        }
        pages.append(_generated(slug, "list", title, layouts.render("list", context)))

    return pages


def build_taxonomy_pages(
    site: Site,
    layouts: LayoutEngine,
    taxonomies: dict[str, str],
) -> list[RenderedPage]:
    """Render a terms index and one page per term for every taxonomy.

    Args:
        site: Finalized site
        layouts: LayoutEngine for the ``terms`` and ``taxonomy`` layouts
        taxonomies: Singular name -> front matter key (e.g., "tag" -> "tags")

    Returns:
        Terms index pages followed by their term pages
    """
    pages: list[RenderedPage] = []

    for singular, key in sorted(taxonomies.items()):
        grouped = site.terms(key)
        if not grouped:
            continue

        slugs = term_slugs(list(grouped))
        taxonomy = {"singular": singular, "plural": key}
        terms = [
            {
                "name": term,
                "url": slug_url(f"{key}/{slugs[term]}"),
                "count": len(members),
            }
            for term, members in grouped.items()
        ]

        index_title = key.capitalize()
        index_context: dict[str, Any] = {
            "page": {"title": index_title, "slug": key, "url": slug_url(key)},
            "taxonomy": taxonomy,
            "terms": terms,
        }
        pages.append(
            _generated(key, "terms", index_title, layouts.render("terms", index_context)),
        )

        for term, members in grouped.items():
            slug = f"{key}/{slugs[term]}"
            context: dict[str, Any] = {
                "page": {"title": term, "slug": slug, "url": slug_url(slug)},
                "taxonomy": taxonomy,
                "term": term,
                "pages": [page.to_listing() for page in members],
                "paginator": None,
            }
            pages.append(_generated(slug, "taxonomy", term, layouts.render("taxonomy", context)))

    return pages


def build_feed(site: Site, layouts: LayoutEngine, size: int = FEED_SIZE) -> RenderedPage:
    """Render the RSS feed of the newest document pages."""
    context: dict[str, Any] = {
        "page": {"title": "", "slug": FEED_SLUG, "url": slug_url(FEED_SLUG)},
        "pages": [page.to_listing() for page in site.chronological()[:size]],
    }
    return _generated(FEED_SLUG, "rss.xml", "", layouts.render("rss.xml", context))
