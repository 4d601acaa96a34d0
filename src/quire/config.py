"""Configuration management for Quire.

Supports TOML configuration format with auto-discovery.
"""

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

CONFIG_FILENAME = "quire.toml"

DEFAULT_TAXONOMIES = {"author": "authors", "category": "categories", "tag": "tags"}


@dataclass
class BuildConfig:
    """Build input/output configuration."""

    source_dir: Path = field(default_factory=lambda: Path("content"))
    output_dir: Path = field(default_factory=lambda: Path("public"))
    cache_dir: Path = field(default_factory=lambda: Path(".cache"))
    cache_enabled: bool = True
    static_dir: Path | None = None
    layouts_dir: Path | None = None
    drafts: bool = False


@dataclass
class SiteConfig:
    """Site-wide values exposed to layouts."""

    title: str = ""
    base_url: str = "http://localhost:8080"
    language_code: str = "en-us"
    summary_length: int = 20
    paginate: int = 6
    image_formats: dict[str, str] = field(default_factory=dict)


@dataclass
class MarkupConfig:
    """Markdown conversion options."""

    unsafe: bool = True
    extract_title: bool = True


@dataclass
class Redirect:
    """A single redirect rule."""

    source: str
    target: str
    status: int = 301
    force: bool = False


@dataclass
class ServerConfig:
    """Preview server configuration."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class LiveReloadConfig:
    """Live reload configuration."""

    enabled: bool = True
    watch_patterns: list[str] | None = None


@dataclass
class Config:
    """Application configuration."""

    build: BuildConfig
    site: SiteConfig
    markup: MarkupConfig
    taxonomies: dict[str, str]
    redirects: list[Redirect]
    server: ServerConfig
    live_reload: LiveReloadConfig
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Config":
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for quire.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls._default()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents.

        Returns:
            Path to config file or None if not found
        """
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _default(cls) -> "Config":
        """Create config with all defaults."""
        return cls(
            build=BuildConfig(),
            site=SiteConfig(),
            markup=MarkupConfig(),
            taxonomies=dict(DEFAULT_TAXONOMIES),
            redirects=[],
            server=ServerConfig(),
            live_reload=LiveReloadConfig(),
        )

    @classmethod
    def _load_from_file(cls, path: Path) -> "Config":
        """Load configuration from a specific file.

        Args:
            path: Path to TOML configuration file

        Returns:
            Config instance

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid TOML in {path}: {e}") from e

        config_dir = path.parent

        return cls(
            build=cls._parse_build(data.get("build"), config_dir),
            site=cls._parse_site(data.get("site")),
            markup=cls._parse_markup(data.get("markup")),
            taxonomies=cls._parse_taxonomies(data.get("taxonomies")),
            redirects=cls._parse_redirects(data.get("redirects")),
            server=cls._parse_server(data.get("server")),
            live_reload=cls._parse_live_reload(data.get("live_reload")),
            config_path=path,
        )

    @classmethod
    def _parse_build(cls, data: object, config_dir: Path) -> BuildConfig:
        """Parse build configuration section.

        Args:
            data: Raw build section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            BuildConfig instance
        """
        if data is None:
            return BuildConfig(
                source_dir=config_dir / "content",
                output_dir=config_dir / "public",
                cache_dir=config_dir / ".cache",
            )

        if not isinstance(data, dict):
            raise ValueError("build section must be a dictionary")

        paths: dict[str, Path] = {}
        for key, default in (
            ("source_dir", "content"),
            ("output_dir", "public"),
            ("cache_dir", ".cache"),
        ):
            value = data.get(key, default)
            if not isinstance(value, str):
                raise ValueError(f"build.{key} must be a string")
            paths[key] = config_dir / value

        optional: dict[str, Path | None] = {}
        for key in ("static_dir", "layouts_dir"):
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"build.{key} must be a string")
            optional[key] = config_dir / value if value is not None else None

        cache_enabled = data.get("cache_enabled", True)
        if not isinstance(cache_enabled, bool):
            raise ValueError("build.cache_enabled must be a boolean")

        drafts = data.get("drafts", False)
        if not isinstance(drafts, bool):
            raise ValueError("build.drafts must be a boolean")

        return BuildConfig(
            source_dir=paths["source_dir"],
            output_dir=paths["output_dir"],
            cache_dir=paths["cache_dir"],
            cache_enabled=cache_enabled,
            static_dir=optional["static_dir"],
            layouts_dir=optional["layouts_dir"],
            drafts=drafts,
        )

    @classmethod
    def _parse_site(cls, data: object) -> SiteConfig:
        """Parse site configuration section."""
        if data is None:
            return SiteConfig()

        if not isinstance(data, dict):
            raise ValueError("site section must be a dictionary")

        strings: dict[str, str] = {}
        for key, default in (
            ("title", ""),
            ("base_url", "http://localhost:8080"),
            ("language_code", "en-us"),
        ):
            value = data.get(key, default)
            if not isinstance(value, str):
                raise ValueError(f"site.{key} must be a string")
            strings[key] = value

        summary_length = data.get("summary_length", 20)
        if (
            isinstance(summary_length, bool)
            or not isinstance(summary_length, int)
            or summary_length < 0
        ):
            raise ValueError("site.summary_length must be a non-negative integer")

        paginate = data.get("paginate", 6)
        if isinstance(paginate, bool) or not isinstance(paginate, int) or paginate < 1:
            raise ValueError("site.paginate must be a positive integer")

        image_formats = data.get("image_formats", {})
        if not isinstance(image_formats, dict):
            raise ValueError("site.image_formats must be a dictionary")
        for key, value in image_formats.items():
            if not isinstance(value, str):
                raise ValueError(f"site.image_formats.{key} must be a string")

        return SiteConfig(
            title=strings["title"],
            base_url=strings["base_url"],
            language_code=strings["language_code"],
            summary_length=summary_length,
            paginate=paginate,
            image_formats=dict(image_formats),
        )

    @classmethod
    def _parse_markup(cls, data: object) -> MarkupConfig:
        """Parse markup configuration section."""
        if data is None:
            return MarkupConfig()

        if not isinstance(data, dict):
            raise ValueError("markup section must be a dictionary")

        unsafe = data.get("unsafe", True)
        if not isinstance(unsafe, bool):
            raise ValueError("markup.unsafe must be a boolean")

        extract_title = data.get("extract_title", True)
        if not isinstance(extract_title, bool):
            raise ValueError("markup.extract_title must be a boolean")

        return MarkupConfig(unsafe=unsafe, extract_title=extract_title)

    @classmethod
    def _parse_taxonomies(cls, data: object) -> dict[str, str]:
        """Parse taxonomies section (singular name -> front matter key)."""
        if data is None:
            return dict(DEFAULT_TAXONOMIES)

        if not isinstance(data, dict):
            raise ValueError("taxonomies section must be a dictionary")

        for key, value in data.items():
            if not isinstance(value, str) or not value:
                raise ValueError(f"taxonomies.{key} must be a non-empty string")

        return dict(data)

    @classmethod
    def _parse_redirects(cls, data: object) -> list[Redirect]:
        """Parse [[redirects]] array of tables."""
        if data is None:
            return []

        if not isinstance(data, list):
            raise ValueError("redirects must be an array of tables")

        redirects: list[Redirect] = []
        for item in data:
            if not isinstance(item, dict):
                raise ValueError("redirects entries must be tables")

            source = item.get("from")
            target = item.get("to")
            if not isinstance(source, str) or not isinstance(target, str):
                raise ValueError("redirects entries require string 'from' and 'to'")

            status = item.get("status", 301)
            if isinstance(status, bool) or not isinstance(status, int):
                raise ValueError("redirects.status must be an integer")

            force = item.get("force", False)
            if not isinstance(force, bool):
                raise ValueError("redirects.force must be a boolean")

            redirects.append(
                Redirect(source=source, target=target, status=status, force=force),
            )

        return redirects

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
        """Parse server configuration section."""
        if data is None:
            return ServerConfig()

        if not isinstance(data, dict):
            raise ValueError("server section must be a dictionary")

        host = data.get("host", "127.0.0.1")
        if not isinstance(host, str):
            raise ValueError("server.host must be a string")

        port = data.get("port", 8080)
        if isinstance(port, bool) or not isinstance(port, int):
            raise ValueError("server.port must be an integer")

        return ServerConfig(host=host, port=port)

    @classmethod
    def _parse_live_reload(cls, data: object) -> LiveReloadConfig:
        """Parse live_reload configuration section."""
        if data is None:
            return LiveReloadConfig()

        if not isinstance(data, dict):
            raise ValueError("live_reload section must be a dictionary")

        enabled = data.get("enabled", True)
        if not isinstance(enabled, bool):
            raise ValueError("live_reload.enabled must be a boolean")

        watch_patterns_raw = data.get("watch_patterns")
        watch_patterns: list[str] | None = None
        if watch_patterns_raw is not None:
            if not isinstance(watch_patterns_raw, list):
                raise ValueError("live_reload.watch_patterns must be a list")
            watch_patterns = []
            for item in watch_patterns_raw:
                if not isinstance(item, str):
                    raise ValueError("live_reload.watch_patterns items must be strings")
                watch_patterns.append(item)

        return LiveReloadConfig(enabled=enabled, watch_patterns=watch_patterns)

    def with_overrides(
        self,
        *,
        source_dir: Path | None = None,
        output_dir: Path | None = None,
        cache_enabled: bool | None = None,
        drafts: bool | None = None,
        base_url: str | None = None,
        host: str | None = None,
        port: int | None = None,
        live_reload_enabled: bool | None = None,
    ) -> "Config":
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.

        Args:
            source_dir: Override build.source_dir
            output_dir: Override build.output_dir
            cache_enabled: Override build.cache_enabled
            drafts: Override build.drafts
            base_url: Override site.base_url
            host: Override server.host
            port: Override server.port
            live_reload_enabled: Override live_reload.enabled

        Returns:
            New Config instance with overrides applied
        """
        build_changes: dict[str, object] = {}
        if source_dir is not None:
            build_changes["source_dir"] = source_dir
        if output_dir is not None:
            build_changes["output_dir"] = output_dir
        if cache_enabled is not None:
            build_changes["cache_enabled"] = cache_enabled
        if drafts is not None:
            build_changes["drafts"] = drafts
        build = replace(self.build, **build_changes) if build_changes else self.build

        site = self.site
        if base_url is not None:
            site = replace(self.site, base_url=base_url)

        server = self.server
        if host is not None or port is not None:
            server = replace(
                self.server,
                host=host if host is not None else self.server.host,
                port=port if port is not None else self.server.port,
            )

        live_reload = self.live_reload
        if live_reload_enabled is not None:
            live_reload = replace(self.live_reload, enabled=live_reload_enabled)

        return replace(
            self,
            build=build,
            site=site,
            server=server,
            live_reload=live_reload,
        )
