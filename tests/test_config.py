"""Tests for configuration loading."""

from pathlib import Path
from unittest.mock import patch

import pytest
from quire.config import (
    DEFAULT_TAXONOMIES,
    BuildConfig,
    Config,
    LiveReloadConfig,
    MarkupConfig,
    Redirect,
    ServerConfig,
    SiteConfig,
)


class TestConfigLoad:
    """Tests for Config.load()."""

    def test__explicit_path__loads_config(self, tmp_path: Path) -> None:
        """Load config from explicit path."""
        config_file = tmp_path / "quire.toml"
        config_file.write_text("""
[build]
source_dir = "src/content"
output_dir = "dist"
cache_dir = ".quire-cache"
static_dir = "static"
layouts_dir = "layouts"
cache_enabled = false
drafts = true

[site]
title = "Reflectoring"
base_url = "https://reflectoring.io"
language_code = "en-gb"
summary_length = 30
paginate = 10

[site.image_formats]
opengraph_prefix = "/images/og/"
opengraph_suffix = ".jpg"

[markup]
unsafe = false
extract_title = false

[taxonomies]
tag = "tags"

[[redirects]]
from = "/feed.xml"
to = "/index.xml"
status = 301
force = true

[server]
host = "0.0.0.0"
port = 3000

[live_reload]
enabled = false
watch_patterns = ["**/*.md"]
""")

        config = Config.load(config_file)

        assert config.build.source_dir == tmp_path / "src/content"
        assert config.build.output_dir == tmp_path / "dist"
        assert config.build.cache_dir == tmp_path / ".quire-cache"
        assert config.build.static_dir == tmp_path / "static"
        assert config.build.layouts_dir == tmp_path / "layouts"
        assert config.build.cache_enabled is False
        assert config.build.drafts is True
        assert config.site.title == "Reflectoring"
        assert config.site.base_url == "https://reflectoring.io"
        assert config.site.language_code == "en-gb"
        assert config.site.summary_length == 30
        assert config.site.paginate == 10
        assert config.site.image_formats == {
            "opengraph_prefix": "/images/og/",
            "opengraph_suffix": ".jpg",
        }
        assert config.markup == MarkupConfig(unsafe=False, extract_title=False)
        assert config.taxonomies == {"tag": "tags"}
        assert config.redirects == [
            Redirect(source="/feed.xml", target="/index.xml", status=301, force=True),
        ]
        assert config.server.host == "0.0.0.0"
        assert config.server.port == 3000
        assert config.live_reload.enabled is False
        assert config.live_reload.watch_patterns == ["**/*.md"]
        assert config.config_path == config_file

    def test__minimal_config__uses_defaults(self, tmp_path: Path) -> None:
        """Load minimal config with defaults relative to config file."""
        config_file = tmp_path / "quire.toml"
        config_file.write_text("")

        config = Config.load(config_file)

        assert config.build.source_dir == tmp_path / "content"
        assert config.build.output_dir == tmp_path / "public"
        assert config.build.cache_dir == tmp_path / ".cache"
        assert config.build.cache_enabled is True
        assert config.build.static_dir is None
        assert config.build.drafts is False
        assert config.site == SiteConfig()
        assert config.markup == MarkupConfig()
        assert config.taxonomies == DEFAULT_TAXONOMIES
        assert config.redirects == []
        assert config.server == ServerConfig()
        assert config.live_reload == LiveReloadConfig()

    def test__missing_explicit_path__raises(self, tmp_path: Path) -> None:
        """Raise FileNotFoundError for a missing explicit config file."""
        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            Config.load(tmp_path / "missing.toml")

    def test__no_config_file__returns_defaults(self, tmp_path: Path) -> None:
        """Fall back to defaults when no config file is discovered."""
        with patch.object(Config, "_discover_config", return_value=None):
            config = Config.load()

        assert config.build == BuildConfig()
        assert config.config_path is None

    def test__discovers_config_in_parent(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Find quire.toml in a parent directory."""
        config_file = tmp_path / "quire.toml"
        config_file.write_text('[site]\ntitle = "Found"\n')
        nested = tmp_path / "content" / "posts"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        config = Config.load()

        assert config.config_path == config_file
        assert config.site.title == "Found"


class TestConfigValidation:
    """Tests for invalid configuration values."""

    @pytest.mark.parametrize(
        ("content", "message"),
        [
            ("build = 1", "build section must be a dictionary"),
            ('[build]\nsource_dir = 1', "build.source_dir must be a string"),
            ('[build]\ndrafts = "yes"', "build.drafts must be a boolean"),
            ('[site]\npaginate = 0', "site.paginate must be a positive integer"),
            ('[site]\npaginate = true', "site.paginate must be a positive integer"),
            ('[site]\nsummary_length = false', "site.summary_length"),
            ('[[redirects]]\nfrom = "/a"\nto = "/b"\nstatus = true', "redirects.status must be an integer"),
            ('[server]\nport = true', "server.port must be an integer"),
            ('[site]\nsummary_length = -1', "site.summary_length"),
            ('[markup]\nunsafe = "no"', "markup.unsafe must be a boolean"),
            ('[taxonomies]\ntag = ""', "taxonomies.tag must be a non-empty string"),
            ('[[redirects]]\nfrom = "/a"', "require string 'from' and 'to'"),
            ('[server]\nport = "80"', "server.port must be an integer"),
            ('[live_reload]\nwatch_patterns = "*.md"', "watch_patterns must be a list"),
        ],
    )
    def test__invalid_value__raises_value_error(
        self,
        tmp_path: Path,
        content: str,
        message: str,
    ) -> None:
        """Reject wrongly typed configuration values."""
        config_file = tmp_path / "quire.toml"
        config_file.write_text(content)

        with pytest.raises(ValueError, match=message):
            Config.load(config_file)

    def test__invalid_toml__raises_value_error(self, tmp_path: Path) -> None:
        """Report TOML syntax errors as ValueError."""
        config_file = tmp_path / "quire.toml"
        config_file.write_text("[build\n")

        with pytest.raises(ValueError, match="Invalid TOML"):
            Config.load(config_file)


class TestWithOverrides:
    """Tests for Config.with_overrides()."""

    def test__overrides__replace_only_given_values(self, test_config: Config) -> None:
        """Apply non-None overrides and keep the rest."""
        config = test_config.with_overrides(
            source_dir=Path("/other/content"),
            drafts=True,
            base_url="http://127.0.0.1:9000",
            port=9000,
        )

        assert config.build.source_dir == Path("/other/content")
        assert config.build.output_dir == test_config.build.output_dir
        assert config.build.drafts is True
        assert config.site.base_url == "http://127.0.0.1:9000"
        assert config.site.title == test_config.site.title
        assert config.server.port == 9000
        assert config.server.host == test_config.server.host

    def test__no_overrides__leaves_original_untouched(self, test_config: Config) -> None:
        """Return an equal config and never mutate the original."""
        config = test_config.with_overrides(cache_enabled=False, live_reload_enabled=True)

        assert test_config.build.cache_enabled is True
        assert test_config.live_reload.enabled is False
        assert config.build.cache_enabled is False
        assert config.live_reload.enabled is True
        assert test_config.with_overrides() == test_config
