"""Shared test fixtures."""

from pathlib import Path

import pytest
from quire.config import (
    DEFAULT_TAXONOMIES,
    BuildConfig,
    Config,
    LiveReloadConfig,
    MarkupConfig,
    ServerConfig,
    SiteConfig,
)


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    """Create an empty content directory."""
    content = tmp_path / "content"
    content.mkdir(exist_ok=True)
    return content


@pytest.fixture
def test_config(tmp_path: Path, content_dir: Path) -> Config:
    """Create a test configuration with tmp_path directories.

    Live reload is disabled and the cache lives under tmp_path.
    """
    return Config(
        build=BuildConfig(
            source_dir=content_dir,
            output_dir=tmp_path / "public",
            cache_dir=tmp_path / ".cache",
        ),
        site=SiteConfig(title="Test Site", base_url="https://example.com"),
        markup=MarkupConfig(),
        taxonomies=dict(DEFAULT_TAXONOMIES),
        redirects=[],
        server=ServerConfig(),
        live_reload=LiveReloadConfig(enabled=False),
    )


def write_doc(content_dir: Path, name: str, text: str) -> Path:
    """Write a markdown document below the content directory."""
    path = content_dir / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def make_doc(content_dir: Path):
    """Factory writing documents into the content directory."""

    def _make(name: str, text: str) -> Path:
        return write_doc(content_dir, name, text)

    return _make
