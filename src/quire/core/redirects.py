"""Redirect rules.

Rules come from ``[[redirects]]`` in the config and from ``aliases`` in page
front matter. They are published as a Netlify ``_redirects`` file and, for
site-internal sources, as meta-refresh stub pages.
"""

from quire.config import Redirect
from quire.core.document import normalize_slug
from quire.core.layouts import LayoutEngine
from quire.core.renderer import RenderedPage
from quire.core.site import Site
from quire.core.types import Slug

REDIRECTS_FILENAME = "_redirects"
STUB_STATUSES = (301, 302, 307, 308)


def collect_redirects(configured: list[Redirect], site: Site) -> list[Redirect]:
    """Merge configured redirects with page aliases.

    Configured rules come first; an alias whose source is already configured
    is dropped.
    """
    rules = list(configured)
    seen = {rule.source for rule in rules}
    for page in site.pages:
        for alias in page.aliases:
            source = "/" + normalize_slug(alias)
            if source in seen:
                continue
            seen.add(source)
            rules.append(Redirect(source=source, target=page.url))
    return rules


def format_redirects_file(rules: list[Redirect]) -> str:
    """Render rules in Netlify ``_redirects`` syntax."""
    lines = [
        f"{rule.source}  {rule.target}  {rule.status}{'!' if rule.force else ''}"
        for rule in rules
    ]
    return "\n".join(lines) + "\n" if lines else ""


def build_redirect_pages(rules: list[Redirect], layouts: LayoutEngine) -> list[RenderedPage]:
    """Render meta-refresh stubs for site-internal redirect sources."""
    pages: list[RenderedPage] = []
    for rule in rules:
        if not rule.source.startswith("/") or rule.status not in STUB_STATUSES:
            continue
        if "*" in rule.source or ":" in rule.source:
            continue
        slug = Slug(normalize_slug(rule.source))
        if not slug or "." in slug.rsplit("/", 1)[-1]:
            continue
        html = layouts.render("redirect", {"target": rule.target, "page": {"slug": slug}})
        pages.append(
            RenderedPage(slug=slug, html_body="", layout="redirect", html=html, title=rule.target),
        )
    return pages
