"""Tests for derived listing pages."""

import datetime
from pathlib import Path

import pytest
from quire.config import SiteConfig
from quire.core.layouts import LayoutEngine
from quire.core.listing import (
    build_feed,
    build_home_pages,
    build_taxonomy_pages,
    paginate,
    term_slugs,
)
from quire.core.renderer import RenderedPage
from quire.core.site import Site
from quire.core.types import Slug


@pytest.fixture
def layouts() -> LayoutEngine:
    return LayoutEngine(SiteConfig(title="Blog", base_url="https://example.com"))


def _site(count: int) -> Site:
    return Site(
        [
            RenderedPage(
                slug=Slug(f"post-{i}"),
                html_body="",
                layout="default",
                html="",
                title=f"Post {i}",
                path=Path(f"post-{i}.md"),
                date=datetime.date(2020, 1, i + 1),
                terms={"tags": ["Java"] if i % 2 else ["Spring Boot"]},
            )
            for i in range(count)
        ],
    )


class TestPaginate:
    """Tests for paginate()."""

    def test__items__split_into_chunks(self) -> None:
        assert paginate([1, 2, 3, 4, 5], 2) == [[1, 2], [3, 4], [5]]

    def test__no_items__no_chunks(self) -> None:
        assert paginate([], 6) == []


class TestBuildHomePages:
    """Tests for build_home_pages()."""

    def test__many_posts__paginated(self, layouts: LayoutEngine) -> None:
        """First page at the root, later pages under /page/N/."""
        pages = build_home_pages(_site(7), layouts, 3, title="Blog")

        assert [p.slug for p in pages] == ["", "page/2", "page/3"]
        assert all(p.path is None for p in pages)
        assert "Post 6" in pages[0].html
        assert "Post 0" in pages[2].html
        assert 'href="https://example.com/page/2/"' in pages[0].html
        assert 'href="https://example.com/"' in pages[1].html
        assert "Page 2 of 3" in pages[1].html

    def test__empty_site__no_pages(self, layouts: LayoutEngine) -> None:
        """An empty site has no listing pages."""
        assert build_home_pages(Site([]), layouts, 6) == []


class TestBuildTaxonomyPages:
    """Tests for build_taxonomy_pages()."""

    def test__terms__index_and_term_pages(self, layouts: LayoutEngine) -> None:
        """Render a terms index plus one page per term."""
        pages = build_taxonomy_pages(_site(3), layouts, {"tag": "tags", "category": "categories"})

        assert [p.slug for p in pages] == ["tags", "tags/java", "tags/spring-boot"]
        assert "Java</a> (1)" in pages[0].html
        assert "Spring Boot</a> (2)" in pages[0].html
        assert "Post 2" in pages[2].html
        assert "<title>Tag: Spring Boot | Blog</title>" in pages[2].html

    def test__terms_slugifying_alike__get_distinct_pages(self, layouts: LayoutEngine) -> None:
        """Terms like "C#" and "C++" both get a page of their own."""
        site = Site(
            [
                RenderedPage(
                    slug=Slug(name),
                    html_body="",
                    layout="default",
                    html="",
                    title=name,
                    path=Path(f"{name}.md"),
                    terms={"categories": [term]},
                )
                for name, term in (("sharp", "C#"), ("plus", "C++"))
            ],
        )

        pages = build_taxonomy_pages(site, layouts, {"category": "categories"})

        assert [p.slug for p in pages] == ["categories", "categories/c", "categories/c-1"]
        assert 'href="https://example.com/categories/c-1/">C++</a>' in pages[0].html
        assert "sharp" in pages[1].html
        assert "plus" in pages[2].html


class TestTermSlugs:
    """Tests for term_slugs()."""

    def test__distinct_terms__plain_slugs(self) -> None:
        assert term_slugs(["Java", "Spring Boot"]) == {"Java": "java", "Spring Boot": "spring-boot"}

    def test__colliding_terms__numbered(self) -> None:
        """Later terms with a taken slug get numbered suffixes."""
        assert term_slugs(["C", "C#", "C++", "c-1"]) == {
            "C": "c",
            "C#": "c-1",
            "C++": "c-2",
            "c-1": "c-1-1",
        }


class TestBuildFeed:
    """Tests for build_feed()."""

    def test__feed__lists_newest_items(self, layouts: LayoutEngine) -> None:
        """Render an RSS document limited to the newest pages."""
        feed = build_feed(_site(4), layouts, size=2)

        assert feed.slug == "index.xml"
        assert feed.output_path == Path("index.xml")
        assert feed.html.startswith('<?xml version="1.0" encoding="utf-8"?>')
        assert feed.html.count("<item>") == 2
        assert "<title>Post 3</title>" in feed.html
        assert "<link>https://example.com/post-3/</link>" in feed.html
        assert "Post 0" not in feed.html
