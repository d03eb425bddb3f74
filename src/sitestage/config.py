"""Configuration management for Sitestage.

Supports TOML configuration format with auto-discovery.
"""

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

from sitestage.core.address import normalize_site_url
from sitestage.core.site import DuplicatePolicy

CONFIG_FILENAME = "sitestage.toml"

DUPLICATE_POLICIES = ("replace", "error")


@dataclass
class SiteConfig:
    """Site configuration."""

    url: str = "/"
    title: str = "Documentation"


@dataclass
class BuildConfig:
    """Build configuration."""

    source_dir: Path = field(default_factory=lambda: Path("docs"))
    build_dir: Path = field(default_factory=lambda: Path(".build"))
    output_dir: Path = field(default_factory=lambda: Path("dist"))
    template_dir: Path | None = None
    jobs: int = 1
    on_duplicate: DuplicatePolicy = "replace"


@dataclass
class Config:
    """Application configuration."""

    site: SiteConfig
    build: BuildConfig
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Config":
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for sitestage.toml in current directory and parents.

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
        return cls(site=SiteConfig(), build=BuildConfig())

    @classmethod
    def _load_from_file(cls, path: Path) -> "Config":
        """Load configuration from a specific file.

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid configuration file {path}: {e}") from e

        config_dir = path.parent

        return cls(
            site=cls._parse_site(data.get("site")),
            build=cls._parse_build(data.get("build"), config_dir),
            config_path=path,
        )

    @classmethod
    def _parse_site(cls, data: object) -> SiteConfig:
        """Parse site configuration section.

        Args:
            data: Raw site section data

        Returns:
            SiteConfig instance
        """
        if data is None:
            return SiteConfig()

        if not isinstance(data, dict):
            raise ValueError("site section must be a dictionary")

        url = data.get("url", "/")
        if not isinstance(url, str):
            raise ValueError("site.url must be a string")

        title = data.get("title", "Documentation")
        if not isinstance(title, str):
            raise ValueError("site.title must be a string")

        return SiteConfig(url=normalize_site_url(url), title=title)

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
                source_dir=config_dir / "docs",
                build_dir=config_dir / ".build",
                output_dir=config_dir / "dist",
            )

        if not isinstance(data, dict):
            raise ValueError("build section must be a dictionary")

        dirs: dict[str, Path] = {}
        for key, default in (
            ("source_dir", "docs"),
            ("build_dir", ".build"),
            ("output_dir", "dist"),
        ):
            value = data.get(key, default)
            if not isinstance(value, str):
                raise ValueError(f"build.{key} must be a string")
            dirs[key] = config_dir / value

        template_dir = data.get("template_dir")
        if template_dir is not None and not isinstance(template_dir, str):
            raise ValueError("build.template_dir must be a string")

        jobs = data.get("jobs", 1)
        if not isinstance(jobs, int) or isinstance(jobs, bool) or jobs < 1:
            raise ValueError("build.jobs must be a positive integer")

        on_duplicate = data.get("on_duplicate", "replace")
        if on_duplicate not in DUPLICATE_POLICIES:
            raise ValueError(
                f"build.on_duplicate must be one of: {', '.join(DUPLICATE_POLICIES)}"
            )

        return BuildConfig(
            source_dir=dirs["source_dir"],
            build_dir=dirs["build_dir"],
            output_dir=dirs["output_dir"],
            template_dir=config_dir / template_dir if template_dir else None,
            jobs=jobs,
            on_duplicate=on_duplicate,
        )

    def with_overrides(
        self,
        *,
        site_url: str | None = None,
        source_dir: Path | None = None,
        build_dir: Path | None = None,
        output_dir: Path | None = None,
        jobs: int | None = None,
        strict: bool | None = None,
    ) -> "Config":
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.

        Args:
            site_url: Override site.url
            source_dir: Override build.source_dir
            build_dir: Override build.build_dir
            output_dir: Override build.output_dir
            jobs: Override build.jobs
            strict: Override build.on_duplicate ("error" when True)

        Returns:
            New Config instance with overrides applied
        """
        site = self.site
        if site_url is not None:
            site = replace(self.site, url=normalize_site_url(site_url))

        build = self.build
        overrides: dict[str, object] = {}
        if source_dir is not None:
            overrides["source_dir"] = source_dir
        if build_dir is not None:
            overrides["build_dir"] = build_dir
        if output_dir is not None:
            overrides["output_dir"] = output_dir
        if jobs is not None:
            overrides["jobs"] = jobs
        if strict is not None:
            overrides["on_duplicate"] = "error" if strict else "replace"
        if overrides:
            build = replace(self.build, **overrides)

        return replace(self, site=site, build=build)
