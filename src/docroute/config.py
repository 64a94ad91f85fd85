"""Configuration management for Docroute.

Supports TOML configuration format with auto-discovery.
"""

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

CONFIG_FILENAME = "docroute.toml"


@dataclass(frozen=True)
class SiteConfig:
    """Site identity configuration."""

    title: str = "Documentation"
    tagline: str | None = None
    url: str = "http://localhost:8080"
    base_url: str = "/"

    @property
    def site_url(self) -> str:
        """Absolute site URL with base path, without trailing slash."""
        return self.url.rstrip("/") + self.base_url.rstrip("/")


@dataclass(frozen=True)
class ServerConfig:
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass(frozen=True)
class DocsConfig:
    """Documentation sources configuration."""

    source_dir: Path = field(default_factory=lambda: Path("docs"))
    sidebar_file: Path = field(default_factory=lambda: Path("sidebars.json"))
    route_base_path: str = "/"
    build_dir: Path = field(default_factory=lambda: Path(".docroute"))


@dataclass(frozen=True)
class ResourcesConfig:
    """Reserved resource generation configuration."""

    llms_txt: bool = True
    markdown_zip: bool = True


@dataclass(frozen=True)
class LiveReloadConfig:
    """Live reload configuration."""

    enabled: bool = True
    watch_patterns: list[str] | None = None


@dataclass(frozen=True)
class Config:
    """Application configuration.

    Read-only once loaded; passed explicitly to every consumer.
    """

    site: SiteConfig
    server: ServerConfig
    docs: DocsConfig
    resources: ResourcesConfig
    live_reload: LiveReloadConfig
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Config":
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for docroute.toml in current directory and parents.

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
        """Search for config file in current directory and parents."""
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
        return cls(
            site=SiteConfig(),
            server=ServerConfig(),
            docs=DocsConfig(),
            resources=ResourcesConfig(),
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
            site=cls._parse_site(data.get("site")),
            server=cls._parse_server(data.get("server")),
            docs=cls._parse_docs(data.get("docs"), config_dir),
            resources=cls._parse_resources(data.get("resources")),
            live_reload=cls._parse_live_reload(data.get("live_reload")),
            config_path=path,
        )

    @classmethod
    def _parse_site(cls, data: object) -> SiteConfig:
        if data is None:
            return SiteConfig()

        if not isinstance(data, dict):
            raise ValueError("site section must be a dictionary")

        title = data.get("title", "Documentation")
        if not isinstance(title, str):
            raise ValueError("site.title must be a string")

        tagline = data.get("tagline")
        if tagline is not None and not isinstance(tagline, str):
            raise ValueError("site.tagline must be a string")

        url = data.get("url", "http://localhost:8080")
        if not isinstance(url, str):
            raise ValueError("site.url must be a string")

        base_url = data.get("base_url", "/")
        if not isinstance(base_url, str) or not base_url.startswith("/"):
            raise ValueError("site.base_url must be a string starting with '/'")

        return SiteConfig(title=title, tagline=tagline, url=url, base_url=base_url)

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
        if data is None:
            return ServerConfig()

        if not isinstance(data, dict):
            raise ValueError("server section must be a dictionary")

        host = data.get("host", "127.0.0.1")
        if not isinstance(host, str):
            raise ValueError("server.host must be a string")

        port = data.get("port", 8080)
        if not isinstance(port, int) or isinstance(port, bool):
            raise ValueError("server.port must be an integer")

        return ServerConfig(host=host, port=port)

    @classmethod
    def _parse_docs(cls, data: object, config_dir: Path) -> DocsConfig:
        """Parse docs configuration section.

        Args:
            data: Raw docs section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            DocsConfig instance
        """
        if data is None:
            data = {}

        if not isinstance(data, dict):
            raise ValueError("docs section must be a dictionary")

        source_dir = data.get("source_dir", "docs")
        if not isinstance(source_dir, str):
            raise ValueError("docs.source_dir must be a string")

        sidebar_file = data.get("sidebar_file", "sidebars.json")
        if not isinstance(sidebar_file, str):
            raise ValueError("docs.sidebar_file must be a string")

        route_base_path = data.get("route_base_path", "/")
        if not isinstance(route_base_path, str) or not route_base_path.startswith("/"):
            raise ValueError("docs.route_base_path must be a string starting with '/'")

        build_dir = data.get("build_dir", ".docroute")
        if not isinstance(build_dir, str):
            raise ValueError("docs.build_dir must be a string")

        return DocsConfig(
            source_dir=config_dir / source_dir,
            sidebar_file=config_dir / sidebar_file,
            route_base_path=route_base_path,
            build_dir=config_dir / build_dir,
        )

    @classmethod
    def _parse_resources(cls, data: object) -> ResourcesConfig:
        if data is None:
            return ResourcesConfig()

        if not isinstance(data, dict):
            raise ValueError("resources section must be a dictionary")

        llms_txt = data.get("llms_txt", True)
        if not isinstance(llms_txt, bool):
            raise ValueError("resources.llms_txt must be a boolean")

        markdown_zip = data.get("markdown_zip", True)
        if not isinstance(markdown_zip, bool):
            raise ValueError("resources.markdown_zip must be a boolean")

        return ResourcesConfig(llms_txt=llms_txt, markdown_zip=markdown_zip)

    @classmethod
    def _parse_live_reload(cls, data: object) -> LiveReloadConfig:
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
        host: str | None = None,
        port: int | None = None,
        source_dir: Path | None = None,
        sidebar_file: Path | None = None,
        build_dir: Path | None = None,
        live_reload_enabled: bool | None = None,
    ) -> "Config":
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.

        Returns:
            New Config instance with overrides applied
        """
        server = self.server
        if host is not None or port is not None:
            server = replace(
                self.server,
                host=host if host is not None else self.server.host,
                port=port if port is not None else self.server.port,
            )

        docs = self.docs
        if source_dir is not None or sidebar_file is not None or build_dir is not None:
            docs = replace(
                self.docs,
                source_dir=source_dir if source_dir is not None else self.docs.source_dir,
                sidebar_file=sidebar_file if sidebar_file is not None else self.docs.sidebar_file,
                build_dir=build_dir if build_dir is not None else self.docs.build_dir,
            )

        live_reload = self.live_reload
        if live_reload_enabled is not None:
            live_reload = replace(self.live_reload, enabled=live_reload_enabled)

        return replace(self, server=server, docs=docs, live_reload=live_reload)
