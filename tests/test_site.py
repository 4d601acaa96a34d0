"""Tests for site structure and slug uniqueness."""

import datetime
from pathlib import Path

from quire.core.renderer import RenderedPage
from quire.core.site import Site, SiteBuilder
from quire.core.types import Slug
from quire.errors import DuplicateSlugError


def _page(
    slug: str,
    path: str | None = None,
    date: datetime.date | None = None,
    terms: dict[str, list[str]] | None = None,
) -> RenderedPage:
    return RenderedPage(
        slug=Slug(slug),
        html_body="",
        layout="default",
        html=f"<p>{slug}</p>",
        title=slug,
        path=Path(path) if path is not None else None,
        date=date,
        terms=terms or {},
    )


class TestSiteBuilder:
    """Tests for SiteBuilder."""

    def test__unique_slugs__all_accepted(self) -> None:
        """Distinct slugs are all kept in order."""
        builder = SiteBuilder()

        assert builder.add_page(_page("a", "a.md"))
        assert builder.add_page(_page("b", "b.md"))

        site = builder.build()
        assert [p.slug for p in site.pages] == ["a", "b"]
        assert builder.conflicts == []

    def test__duplicate_slug__first_wins(self) -> None:
        """The first page for a slug owns it; later ones are rejected."""
        builder = SiteBuilder()
        first = _page("paging", "a.md")

        assert builder.add_page(first)
        assert not builder.add_page(_page("paging", "b.md"))

        site = builder.build()
        assert len(site) == 1
        assert site.get_page("paging") is first

    def test__duplicate_slug__conflict_names_all_paths(self) -> None:
        """Conflicts list the owner first, then every later claimant."""
        builder = SiteBuilder()
        builder.add_page(_page("paging", "a.md"))
        builder.add_page(_page("paging", "b.md"))
        builder.add_page(_page("paging", "c.md"))

        conflicts = builder.conflicts

        assert len(conflicts) == 1
        assert isinstance(conflicts[0], DuplicateSlugError)
        assert conflicts[0].slug == "paging"
        assert conflicts[0].paths == [Path("a.md"), Path("b.md"), Path("c.md")]
        assert "a.md, b.md, c.md" in str(conflicts[0])

    def test__same_output_file__conflict(self) -> None:
        """Slugs that publish the same file are duplicates."""
        builder = SiteBuilder()

        assert builder.add_page(_page("guide", "a.md"))
        assert not builder.add_page(_page("guide/index.html", "b.md"))
        assert not builder.add_generated(_page("guide/index.html"))

        conflicts = builder.conflicts
        assert len(conflicts) == 1
        assert conflicts[0].slug == "guide"
        assert conflicts[0].paths == [Path("a.md"), Path("b.md")]

    def test__generated_page__never_displaces_document(self) -> None:
        """Derived pages are dropped when the slug is taken."""
        builder = SiteBuilder()
        builder.add_page(_page("tags", "tags.md"))

        assert not builder.add_generated(_page("tags"))
        assert builder.add_generated(_page("categories"))
        assert builder.conflicts == []
        assert builder.build().get_page("tags").path == Path("tags.md")


class TestSite:
    """Tests for Site lookups and ordering."""

    def test__get_page__accepts_urls(self) -> None:
        """Look pages up by slug or URL form."""
        site = Site([_page("guides/java", "java.md")])

        assert site.get_page("/guides/java/") is not None
        assert site.has_slug("guides/java")
        assert site.get_page("missing") is None

    def test__chronological__newest_first_undated_last(self) -> None:
        """Order document pages by date, undated ones last by slug."""
        site = Site(
            [
                _page("old", "old.md", datetime.date(2019, 1, 1)),
                _page("b-undated", "b.md"),
                _page("new", "new.md", datetime.date(2021, 6, 1)),
                _page("a-undated", "a.md"),
                _page("generated"),
            ],
        )

        assert [p.slug for p in site.chronological()] == ["new", "old", "a-undated", "b-undated"]

    def test__terms__grouped_and_sorted(self) -> None:
        """Group pages by term, terms sorted case-insensitively."""
        site = Site(
            [
                _page("a", "a.md", datetime.date(2020, 1, 1), {"tags": ["spring", "Java"]}),
                _page("b", "b.md", datetime.date(2021, 1, 1), {"tags": ["java", "spring"]}),
            ],
        )

        terms = site.terms("tags")

        assert list(terms) == ["Java", "java", "spring"]
        assert [p.slug for p in terms["spring"]] == ["b", "a"]
        assert site.terms("categories") == {}
