"""Configuration management for Docpages.

Supports TOML configuration format with auto-discovery.
"""

import tomllib
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path

CONFIG_FILENAME = "docpages.toml"


class ContentSource(Enum):
    """Where a collection's page content is read from."""

    LOCAL = "local"
    REMOTE = "remote"


@dataclass
class SiteConfig:
    """Site identity used in page heads and edit links."""

    name: str = "Consul by HashiCorp"
    product: str = "consul"
    resource_url: str = "https://github.com/hashicorp/consul/blob/master/website/"


@dataclass
class ContentConfig:
    """Content layout on disk."""

    root_dir: Path = field(default_factory=lambda: Path("."))
    content_root: str = "content"
    partials_dir: Path = field(default_factory=lambda: Path("partials"))
    extension: str = ".mdx"


@dataclass
class RemoteConfig:
    """Remote content repository."""

    base_url: str = "https://raw.githubusercontent.com/hashicorp/consul/stable-website/website/pages"
    require_success: bool = True


@dataclass
class BuildConfig:
    """Static build output."""

    output_dir: Path = field(default_factory=lambda: Path("out"))
    concurrency: int = 8


@dataclass
class ServerConfig:
    """Development server configuration."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class LiveReloadConfig:
    """Live reload configuration."""

    enabled: bool = True
    watch_patterns: list[str] | None = None


@dataclass
class CollectionConfig:
    """One content collection (docs, intro, api-docs)."""

    name: str
    content_dir: str
    url_prefix: str
    category: str
    source: ContentSource = ContentSource.LOCAL
    remote_path: str | None = None
    navigation: Path | None = None
    files: Path | None = None
    frontmatter: Path | None = None

    @property
    def remote_prefix(self) -> str:
        """Path prefix below the remote base URL."""
        return self.remote_path if self.remote_path is not None else self.content_dir


def default_collections(root_dir: Path) -> dict[str, CollectionConfig]:
    """Return the built-in docs, intro and api-docs collections.

    Args:
        root_dir: Project root for navigation file paths

    Returns:
        Collections by name
    """
    return {
        "docs": CollectionConfig(
            name="docs",
            content_dir="docs",
            url_prefix="docs",
            category="docs",
            source=ContentSource.REMOTE,
            remote_path="docs",
            navigation=root_dir / "data" / "docs-navigation.json",
        ),
        "intro": CollectionConfig(
            name="intro",
            content_dir="intro",
            url_prefix="intro",
            category="intro",
            source=ContentSource.LOCAL,
            navigation=root_dir / "data" / "intro-navigation.json",
        ),
        "api-docs": CollectionConfig(
            name="api-docs",
            content_dir="api-docs",
            url_prefix="new-api-docs",
            category="api-docs",
            source=ContentSource.REMOTE,
            remote_path="api-docs",
            navigation=root_dir / "data" / "api-navigation.json",
        ),
    }


@dataclass
class Config:
    """Application configuration."""

    site: SiteConfig
    content: ContentConfig
    remote: RemoteConfig
    build: BuildConfig
    server: ServerConfig
    live_reload: LiveReloadConfig
    collections: dict[str, CollectionConfig]
    config_path: Path | None = None

    @property
    def partials_dir(self) -> Path:
        """Directory that @include paths resolve against."""
        return self.content.root_dir / self.content.partials_dir

    def content_prefix(self, collection: CollectionConfig) -> str:
        """Project-relative content prefix of a collection (e.g., "content/docs")."""
        return "/".join(p for p in (self.content.content_root.strip("/"), collection.content_dir) if p)

    def content_dir(self, collection: CollectionConfig) -> Path:
        """Filesystem directory holding a collection's content files."""
        return self.content.root_dir / self.content_prefix(collection)

    def get_collection(self, name: str) -> CollectionConfig:
        """Get a collection by name.

        Raises:
            KeyError: If no collection has this name
        """
        try:
            return self.collections[name]
        except KeyError:
            known = ", ".join(sorted(self.collections))
            raise KeyError(f"Unknown collection {name!r} (known: {known})") from None

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Config":
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for docpages.toml in current directory and parents.

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
            return cls.default()

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
    def default(cls, root_dir: Path | None = None) -> "Config":
        """Create config with all defaults.

        Args:
            root_dir: Project root (default: current directory)

        Returns:
            Config instance with default values
        """
        root = root_dir if root_dir is not None else Path(".")
        return cls(
            site=SiteConfig(),
            content=ContentConfig(root_dir=root),
            remote=RemoteConfig(),
            build=BuildConfig(output_dir=root / "out"),
            server=ServerConfig(),
            live_reload=LiveReloadConfig(),
            collections=default_collections(root),
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
            data = tomllib.load(f)

        if not isinstance(data, dict):
            raise ValueError("Configuration must be a dictionary")

        config_dir = path.parent

        site = cls._parse_site(data.get("site"))
        content = cls._parse_content(data.get("content"), config_dir)
        remote = cls._parse_remote(data.get("remote"))
        build = cls._parse_build(data.get("build"), content.root_dir)
        server = cls._parse_server(data.get("server"))
        live_reload = cls._parse_live_reload(data.get("live_reload"))
        collections = cls._parse_collections(data.get("collections"), content.root_dir)

        return cls(
            site=site,
            content=content,
            remote=remote,
            build=build,
            server=server,
            live_reload=live_reload,
            collections=collections,
            config_path=path,
        )

    @classmethod
    def _parse_site(cls, data: object) -> SiteConfig:
        """Parse site configuration section."""
        if data is None:
            return SiteConfig()

        if not isinstance(data, dict):
            raise ValueError("site section must be a dictionary")

        defaults = SiteConfig()
        return SiteConfig(
            name=_get_str(data, "site", "name", defaults.name),
            product=_get_str(data, "site", "product", defaults.product),
            resource_url=_get_str(data, "site", "resource_url", defaults.resource_url),
        )

    @classmethod
    def _parse_content(cls, data: object, config_dir: Path) -> ContentConfig:
        """Parse content configuration section.

        Args:
            data: Raw content section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            ContentConfig instance
        """
        if data is None:
            return ContentConfig(root_dir=config_dir)

        if not isinstance(data, dict):
            raise ValueError("content section must be a dictionary")

        root_dir = config_dir / _get_str(data, "content", "root_dir", ".")
        content_root = _get_str(data, "content", "content_root", "content")
        partials_dir = Path(_get_str(data, "content", "partials_dir", "partials"))

        extension = _get_str(data, "content", "extension", ".mdx")
        if not extension.startswith("."):
            raise ValueError("content.extension must start with a dot")

        return ContentConfig(
            root_dir=root_dir,
            content_root=content_root,
            partials_dir=partials_dir,
            extension=extension,
        )

    @classmethod
    def _parse_remote(cls, data: object) -> RemoteConfig:
        """Parse remote configuration section."""
        if data is None:
            return RemoteConfig()

        if not isinstance(data, dict):
            raise ValueError("remote section must be a dictionary")

        base_url = _get_str(data, "remote", "base_url", RemoteConfig().base_url)

        require_success = data.get("require_success", True)
        if not isinstance(require_success, bool):
            raise ValueError("remote.require_success must be a boolean")

        return RemoteConfig(base_url=base_url, require_success=require_success)

    @classmethod
    def _parse_build(cls, data: object, root_dir: Path) -> BuildConfig:
        """Parse build configuration section.

        Args:
            data: Raw build section data
            root_dir: Project root (for relative paths)

        Returns:
            BuildConfig instance
        """
        if data is None:
            return BuildConfig(output_dir=root_dir / "out")

        if not isinstance(data, dict):
            raise ValueError("build section must be a dictionary")

        output_dir = _get_str(data, "build", "output_dir", "out")

        concurrency = data.get("concurrency", 8)
        if not isinstance(concurrency, int) or isinstance(concurrency, bool) or concurrency < 1:
            raise ValueError("build.concurrency must be a positive integer")

        return BuildConfig(output_dir=root_dir / output_dir, concurrency=concurrency)

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
        if not isinstance(port, int):
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

    @classmethod
    def _parse_collections(cls, data: object, root_dir: Path) -> dict[str, CollectionConfig]:
        """Parse collections section.

        Each [collections.<name>] table defines one collection. Without the
        section the built-in docs, intro and api-docs collections are used.

        Args:
            data: Raw collections section data
            root_dir: Project root (for relative paths)

        Returns:
            Collections by name
        """
        if data is None:
            return default_collections(root_dir)

        if not isinstance(data, dict):
            raise ValueError("collections section must be a dictionary")

        collections: dict[str, CollectionConfig] = {}
        for name, section in data.items():
            if not isinstance(section, dict):
                raise ValueError(f"collections.{name} must be a dictionary")
            collections[name] = cls._parse_collection(name, section, root_dir)
        return collections

    @classmethod
    def _parse_collection(cls, name: str, data: dict, root_dir: Path) -> CollectionConfig:
        """Parse a single collection table."""
        key = f"collections.{name}"

        content_dir = _get_str(data, key, "content_dir", name)
        url_prefix = _get_str(data, key, "url_prefix", content_dir)
        category = _get_str(data, key, "category", name)

        source_raw = _get_str(data, key, "source", ContentSource.LOCAL.value)
        try:
            source = ContentSource(source_raw)
        except ValueError:
            raise ValueError(f"{key}.source must be 'local' or 'remote'") from None

        remote_path = _get_optional_str(data, key, "remote_path")
        navigation = _get_optional_str(data, key, "navigation")
        files = _get_optional_str(data, key, "files")
        frontmatter = _get_optional_str(data, key, "frontmatter")

        return CollectionConfig(
            name=name,
            content_dir=content_dir,
            url_prefix=url_prefix,
            category=category,
            source=source,
            remote_path=remote_path,
            navigation=root_dir / navigation if navigation is not None else None,
            files=root_dir / files if files is not None else None,
            frontmatter=root_dir / frontmatter if frontmatter is not None else None,
        )

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        output_dir: Path | None = None,
        live_reload_enabled: bool | None = None,
        force_local: bool = False,
    ) -> "Config":
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. This follows
        the immutable pattern - the original Config is not modified.

        Args:
            host: Override server.host
            port: Override server.port
            output_dir: Override build.output_dir
            live_reload_enabled: Override live_reload.enabled
            force_local: Read every collection from the local project tree

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

        build = self.build
        if output_dir is not None:
            build = replace(self.build, output_dir=output_dir)

        live_reload = self.live_reload
        if live_reload_enabled is not None:
            live_reload = replace(self.live_reload, enabled=live_reload_enabled)

        collections = self.collections
        if force_local:
            collections = {
                name: replace(collection, source=ContentSource.LOCAL)
                for name, collection in self.collections.items()
            }

        return replace(
            self,
            server=server,
            build=build,
            live_reload=live_reload,
            collections=collections,
        )


def _get_str(data: dict, section: str, key: str, default: str) -> str:
    value = data.get(key, default)
    if not isinstance(value, str):
        raise ValueError(f"{section}.{key} must be a string")
    return value


def _get_optional_str(data: dict, section: str, key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"{section}.{key} must be a string")
    return value
