"""Site build orchestration.

Runs the Load -> Parse -> Render pipeline over every source document,
finalizes the slug registry, derives listing pages and writes the result.
Per-document failures are collected in the BuildReport instead of aborting
the run; only an unusable content root stops a build outright.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from quire.config import Config, Redirect
from quire.core.cache import FileCache
from quire.core.document import Document
from quire.core.layouts import LayoutEngine
from quire.core.listing import build_feed, build_home_pages, build_taxonomy_pages
from quire.core.loader import ContentLoader, SourceFile
from quire.core.markdown import MarkdownConverter
from quire.core.redirects import (
    REDIRECTS_FILENAME,
    build_redirect_pages,
    collect_redirects,
    format_redirects_file,
)
from quire.core.renderer import PageRenderer, RenderedPage
from quire.core.site import Site, SiteBuilder
from quire.core.writer import OutputWriter
from quire.errors import (
    DocumentError,
    DuplicateSlugError,
    MalformedFrontMatterError,
    QuireError,
    RenderError,
)

logger = logging.getLogger(__name__)


@dataclass
class BuildReport:
    """Outcome of a build run."""

    processed: int = 0
    rendered: int = 0
    skipped: int = 0
    failed: int = 0
    generated: int = 0
    written: int = 0
    static_files: int = 0
    errors: list[QuireError] = field(default_factory=list)
    pages: list[RenderedPage] = field(default_factory=list)
    site: Site | None = None

    @property
    def ok(self) -> bool:
        """True when no document failed and no slug was contested."""
        return not self.errors

    @property
    def duplicates(self) -> list[DuplicateSlugError]:
        return [e for e in self.errors if isinstance(e, DuplicateSlugError)]

    def summary(self) -> str:
        """One-line human readable summary."""
        return (
            f"{self.processed} documents processed: "
            f"{self.rendered} rendered, {self.skipped} skipped, {self.failed} failed"
        )


class SiteBuild:
    """A single build of the site described by a Config."""

    def __init__(self, config: Config, *, strict: bool = False, clean: bool = False) -> None:
        """Initialize build.

        Args:
            config: Application configuration
            strict: Fail the whole build on any per-document error or duplicate slug
            clean: Drop cached conversions and empty the output directory
                before writing
        """
        self._config = config
        self._strict = strict
        self._clean = clean

        build = config.build
        self._loader = ContentLoader(build.source_dir)
        self._cache = FileCache(build.cache_dir) if build.cache_enabled else None
        self._layouts = LayoutEngine(config.site, build.layouts_dir)
        self._renderer = PageRenderer(
            self._layouts,
            self._cache,
            converter=MarkdownConverter(
                unsafe=config.markup.unsafe,
                extract_title=config.markup.extract_title,
            ),
            summary_length=config.site.summary_length,
            taxonomies=config.taxonomies,
        )
        self._writer = OutputWriter(build.output_dir)

    @property
    def config(self) -> Config:
        return self._config

    def run(self) -> BuildReport:
        """Build the site.

        Returns:
            BuildReport describing what was rendered, skipped and failed

        Raises:
            FileNotFoundError: If the content directory doesn't exist
            NotADirectoryError: If the content path is not a directory
            QuireError: In strict mode, the first duplicate slug or document
                error; nothing is written in that case
        """
        report = BuildReport()
        builder = SiteBuilder()

        sources = self._loader.sources()
        logger.info(f"Building site from {self._loader.source_dir}")

        if self._clean and self._cache is not None:
            logger.info(f"Clearing conversion cache {self._cache.cache_dir}")
            self._cache.clear()

        for source in sources:
            report.processed += 1
            page = self._process(source, report)
            if page is None:
                continue
            if builder.add_page(page):
                report.rendered += 1
            else:
                report.skipped += 1

        unreadable = len(self._loader.skipped)
        report.processed += unreadable
        report.skipped += unreadable

        for conflict in builder.conflicts:
            logger.warning(f"{conflict}; keeping {conflict.paths[0]}")
            report.errors.append(conflict)

        rules: list[Redirect] = []
        document_site = builder.build()
        if len(document_site):
            rules = self._add_derived_pages(document_site, builder, report)

        if self._strict and report.errors:
            duplicates = report.duplicates
            raise duplicates[0] if duplicates else report.errors[0]

        site = builder.build()
        report.site = site
        report.pages = [page for page in site.pages if page.path is not None]

        self._write(site, rules, report)
        logger.info(report.summary())
        return report

    def _process(self, source: SourceFile, report: BuildReport) -> RenderedPage | None:
        """Parse and render one source, recording recoverable failures."""
        try:
            document = Document.from_source(source)
        except MalformedFrontMatterError as e:
            self._record_failure(e, report)
            return None

        if document.draft and not self._config.build.drafts:
            logger.info(f"Skipping draft {document.path}")
            report.skipped += 1
            return None

        try:
            return self._renderer.render(document)
        except RenderError as e:
            self._record_failure(e, report)
            return None

    def _record_failure(self, error: DocumentError, report: BuildReport) -> None:
        logger.warning(f"Skipping {error}")
        report.failed += 1
        report.errors.append(error)

    def _add_derived_pages(
        self,
        site: Site,
        builder: SiteBuilder,
        report: BuildReport,
    ) -> list[Redirect]:
        """Add listing, taxonomy, feed and redirect pages to the builder.

        Returns:
            Redirect rules to publish
        """
        derived: list[RenderedPage] = []
        rules = collect_redirects(self._config.redirects, site)
        try:
            derived.extend(
                build_home_pages(
                    site,
                    self._layouts,
                    self._config.site.paginate,
                    title=self._config.site.title,
                ),
            )
            derived.extend(build_taxonomy_pages(site, self._layouts, self._config.taxonomies))
            derived.append(build_feed(site, self._layouts))
            derived.extend(build_redirect_pages(rules, self._layouts))
        except RenderError as e:
            logger.warning(f"Skipping derived pages: {e}")
            report.errors.append(e)

        for page in derived:
            if builder.add_generated(page):
                report.generated += 1
            elif page.slug:
                logger.warning(f"Derived page /{page.slug} skipped: slug already taken")

        return rules

    def _write(self, site: Site, rules: list[Redirect], report: BuildReport) -> None:
        """Write every accepted page and auxiliary file."""
        self._writer.prepare(clean=self._clean)

        for page in site.pages:
            self._writer.write_page(page)
            report.written += 1

        if rules:
            self._writer.write_file(Path(REDIRECTS_FILENAME), format_redirects_file(rules))

        static_dir = self._config.build.static_dir
        if static_dir is not None:
            report.static_files = self._writer.copy_static(static_dir)
