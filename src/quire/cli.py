"""CLI interface for Quire.

Command-line tool for building a static site from Markdown content.
"""

import logging
import sys
from pathlib import Path

import click

from quire.config import Config
from quire.core.build import BuildReport, SiteBuild
from quire.errors import DuplicateSlugError, QuireError

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _configure_logging(verbose: bool) -> None:
    """Send log records to stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )


def _load_config(config_path: Path | None) -> Config:
    """Load configuration or exit with an error."""
    try:
        return Config.load(config_path)
    except (FileNotFoundError, ValueError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)


@click.group()
@click.version_option(package_name="quire")
def cli() -> None:
    """Quire - build static sites from Markdown content."""


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path, dir_okay=False),
    default=None,
    help="Path to configuration file (default: auto-discover quire.toml)",
)
@click.option(
    "--input",
    "-i",
    "input_dir",
    type=click.Path(path_type=Path),
    default=None,
    help="Content directory (overrides config)",
)
@click.option(
    "--output",
    "-o",
    "output_dir",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Output directory (overrides config)",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Fail on any document error or duplicate slug; nothing is written",
)
@click.option(
    "--clean",
    is_flag=True,
    help="Clear the conversion cache and empty the output directory before writing",
)
@click.option(
    "--drafts",
    is_flag=True,
    help="Include documents marked as draft",
)
@click.option(
    "--base-url",
    default=None,
    help="Site base URL (overrides config)",
)
@click.option(
    "--cache/--no-cache",
    default=None,
    help="Enable/disable the conversion cache (overrides config, default: enabled)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output",
)
def build(
    config_path: Path | None,
    input_dir: Path | None,
    output_dir: Path | None,
    strict: bool,
    clean: bool,
    drafts: bool,
    base_url: str | None,
    cache: bool | None,
    verbose: bool,
) -> None:
    """Build the site."""
    _configure_logging(verbose)
    config = _load_config(config_path).with_overrides(
        source_dir=input_dir,
        output_dir=output_dir,
        cache_enabled=cache,
        drafts=drafts or None,
        base_url=base_url,
    )

    click.echo(f"Source directory: {config.build.source_dir}")
    click.echo(f"Output directory: {config.build.output_dir}")

    try:
        report = SiteBuild(config, strict=strict, clean=clean).run()
    except OSError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)
    except DuplicateSlugError as e:
        click.echo(click.style(f"Build failed: {e}", fg="red"), err=True)
        sys.exit(1)
    except QuireError as e:
        click.echo(click.style(f"Build failed (strict mode): {e}", fg="red"), err=True)
        sys.exit(1)

    _print_summary(report)


def _print_summary(report: BuildReport) -> None:
    """Print the build summary and any collected errors.

    Args:
        report: BuildReport from the finished build
    """
    if report.errors:
        click.echo(
            click.style(f"\n{len(report.errors)} problem(s):", fg="yellow", bold=True),
            err=True,
        )
        for error in report.errors:
            click.echo(f"  - {error}", err=True)

    color = "green" if report.ok else "yellow"
    click.echo(click.style(f"\n{report.summary()}", fg=color, bold=True))
    click.echo(f"Pages written: {report.written} ({report.generated} generated)")
    if report.static_files:
        click.echo(f"Static files copied: {report.static_files}")


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path, dir_okay=False),
    default=None,
    help="Path to configuration file (default: auto-discover quire.toml)",
)
@click.option(
    "--input",
    "-i",
    "input_dir",
    type=click.Path(path_type=Path),
    default=None,
    help="Content directory (overrides config)",
)
@click.option(
    "--output",
    "-o",
    "output_dir",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Output directory (overrides config)",
)
@click.option(
    "--host",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@click.option(
    "--drafts",
    is_flag=True,
    help="Include documents marked as draft",
)
@click.option(
    "--live-reload/--no-live-reload",
    default=None,
    help="Enable/disable live reload (overrides config, default: enabled)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output",
)
def serve(
    config_path: Path | None,
    input_dir: Path | None,
    output_dir: Path | None,
    host: str | None,
    port: int | None,
    drafts: bool,
    live_reload: bool | None,
    verbose: bool,
) -> None:
    """Build the site and serve it with live reload."""
    from quire.server import run_server

    _configure_logging(verbose)
    config = _load_config(config_path).with_overrides(
        source_dir=input_dir,
        output_dir=output_dir,
        drafts=drafts or None,
        host=host,
        port=port,
        live_reload_enabled=live_reload,
    )
    # Links in the preview must point at the preview server
    config = config.with_overrides(base_url=f"http://{config.server.host}:{config.server.port}")

    def rebuild() -> None:
        report = SiteBuild(config).run()
        click.echo(report.summary())

    try:
        rebuild()
    except OSError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    click.echo(f"Serving {config.build.output_dir} on http://{config.server.host}:{config.server.port}")
    if config.live_reload.enabled:
        click.echo("Live reload: enabled")
    else:
        click.echo("Live reload: disabled")

    run_server(config, rebuild=rebuild)


if __name__ == "__main__":
    cli()
