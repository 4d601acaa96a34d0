"""Tests for redirect rules."""

from pathlib import Path

import pytest
from quire.config import Redirect, SiteConfig
from quire.core.layouts import LayoutEngine
from quire.core.redirects import build_redirect_pages, collect_redirects, format_redirects_file
from quire.core.renderer import RenderedPage
from quire.core.site import Site
from quire.core.types import Slug


@pytest.fixture
def layouts() -> LayoutEngine:
    return LayoutEngine(SiteConfig(base_url="https://example.com"))


class TestCollectRedirects:
    """Tests for collect_redirects()."""

    def test__aliases__appended_after_configured(self) -> None:
        """Page aliases become rules to the page URL."""
        page = RenderedPage(
            slug=Slug("spring-boot-paging"),
            html_body="",
            layout="default",
            html="",
            title="Paging",
            path=Path("paging.md"),
            aliases=["/paging-old/", "/feed.xml"],
        )
        configured = [Redirect(source="/feed.xml", target="/index.xml")]

        rules = collect_redirects(configured, Site([page]))

        assert rules == [
            Redirect(source="/feed.xml", target="/index.xml"),
            Redirect(source="/paging-old", target="/spring-boot-paging/"),
        ]


class TestFormatRedirectsFile:
    """Tests for format_redirects_file()."""

    def test__rules__netlify_syntax(self) -> None:
        """Write one rule per line with forced rules marked."""
        rules = [
            Redirect(source="/feed.xml", target="/index.xml", status=301, force=True),
            Redirect(source="/blog/*", target="/:splat", status=302),
        ]

        assert format_redirects_file(rules) == (
            "/feed.xml  /index.xml  301!\n/blog/*  /:splat  302\n"
        )

    def test__no_rules__empty(self) -> None:
        assert format_redirects_file([]) == ""


class TestBuildRedirectPages:
    """Tests for build_redirect_pages()."""

    def test__internal_source__gets_stub(self, layouts: LayoutEngine) -> None:
        """Render a meta refresh page at the source slug."""
        rules = [Redirect(source="/paging-old", target="/spring-boot-paging/")]

        pages = build_redirect_pages(rules, layouts)

        assert [p.slug for p in pages] == ["paging-old"]
        assert 'content="0; url=https://example.com/spring-boot-paging/"' in pages[0].html

    @pytest.mark.parametrize(
        "rule",
        [
            Redirect(source="/blog/*", target="/:splat"),
            Redirect(source="/posts/:year", target="/archive"),
            Redirect(source="/feed.xml", target="/index.xml"),
            Redirect(source="/", target="/home"),
            Redirect(source="/gone", target="/", status=410),
            Redirect(source="https://old.example.com/*", target="/"),
        ],
    )
    def test__non_stub_rules__skipped(self, layouts: LayoutEngine, rule: Redirect) -> None:
        """Wildcards, files, the root and non-redirect statuses get no stub."""
        assert build_redirect_pages([rule], layouts) == []
