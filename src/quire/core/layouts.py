"""Layout templates.

Layouts are Jinja2 templates looked up by name, first in the project's
layouts directory and then among the layouts bundled with Quire. The
``absolute_url`` filter prefixes the site base URL; ``opengraph`` and
``teaser`` wrap image names with the ``site.image_formats`` prefixes and
suffixes.
"""

import logging
from pathlib import Path
from typing import Any

from jinja2 import (
    Environment,
    FileSystemLoader,
    TemplateError,
    TemplateNotFound,
    select_autoescape,
)

from quire.assets import get_builtin_layouts_dir
from quire.config import SiteConfig
from quire.errors import RenderError

logger = logging.getLogger(__name__)

DEFAULT_LAYOUT = "default"


def absolute_url(value: object, base_url: str) -> str:
    """Join a site-relative URL with the site base URL."""
    text = str(value)
    if "://" in text:
        return text
    base = base_url.rstrip("/")
    return f"{base}/{text.lstrip('/')}"


def wrap_image(value: object, prefix: str, suffix: str) -> str:
    """Surround an image URL with a prefix and suffix."""
    return f"{prefix}{value}{suffix}"


def template_name(layout: str) -> str:
    """Map a layout name to a template file name."""
    return layout if "." in layout else f"{layout}.html"


class LayoutEngine:
    """Renders named layouts with a page context."""

    def __init__(self, site: SiteConfig, layouts_dir: Path | None = None) -> None:
        """Initialize layout engine.

        Args:
            site: Site configuration exposed to layouts as ``site``
            layouts_dir: Project layouts directory, searched before built-ins
        """
        self._site = site
        self._layouts_dir = layouts_dir

        search_path: list[Path] = []
        if layouts_dir is not None:
            if layouts_dir.is_dir():
                search_path.append(layouts_dir)
            else:
                logger.warning(f"Layouts directory not found: {layouts_dir}")
        search_path.append(get_builtin_layouts_dir())

        self._env = Environment(
            loader=FileSystemLoader([str(p) for p in search_path]),
            autoescape=select_autoescape(["html", "xml"]),
            keep_trailing_newline=True,
        )
        image_formats = site.image_formats
        self._env.filters["absolute_url"] = lambda v: absolute_url(v, site.base_url)
        self._env.filters["opengraph"] = lambda v: wrap_image(
            v,
            image_formats.get("opengraph_prefix", ""),
            image_formats.get("opengraph_suffix", ""),
        )
        self._env.filters["teaser"] = lambda v: wrap_image(
            v,
            image_formats.get("teaser_prefix", ""),
            image_formats.get("teaser_suffix", ""),
        )
        self._env.globals["site"] = self.site_context()

    def site_context(self) -> dict[str, Any]:
        """Site values available to every layout."""
        return {
            "title": self._site.title,
            "base_url": self._site.base_url,
            "language_code": self._site.language_code,
            "image_formats": dict(self._site.image_formats),
        }

    def has_layout(self, layout: str) -> bool:
        """Check whether a layout can be loaded."""
        try:
            self._env.get_template(template_name(layout))
        except TemplateNotFound:
            return False
        return True

    def render(self, layout: str, context: dict[str, Any]) -> str:
        """Render a layout.

        Args:
            layout: Layout name (e.g., "default" or "rss.xml")
            context: Template variables

        Returns:
            Rendered output

        Raises:
            RenderError: If the layout doesn't exist or fails to render
        """
        name = template_name(layout)
        try:
            template = self._env.get_template(name)
        except TemplateNotFound as e:
            raise RenderError(f"layout '{layout}' not found") from e
        except TemplateError as e:
            raise RenderError(f"layout '{layout}' is invalid: {e}") from e

        try:
            return template.render(**context)
        except TemplateError as e:
            raise RenderError(f"layout '{layout}' failed to render: {e}") from e
