"""Shared test fixtures."""

import json
from collections.abc import Callable
from pathlib import Path

import pytest
from sitestage.config import BuildConfig, Config, SiteConfig
from sitestage.core.address import resolve_address
from sitestage.core.pages import CompiledPage
from sitestage.core.site import Page, SiteTree, SiteTreeBuilder

PageFactory = Callable[..., Page]

# Source-relative paths of the example site, in discovery order
EXAMPLE_PAGES = {
    "index": "Home",
    "intro": "Introduction",
    "guide/index": "Guide",
    "guide/setup": "Setup",
    "guide/setup/step1": "Step 1",
}


@pytest.fixture
def make_page(tmp_path: Path) -> PageFactory:
    """Create a Page from a relative path as discovery would."""

    def factory(
        relative_path: str,
        title: str | None = None,
        site_url: str = "/",
    ) -> Page:
        compiled = CompiledPage(
            relative_path=relative_path,
            title=title,
            artifact=tmp_path / ".build" / f"{relative_path}.json",
        )
        return Page.from_compiled(compiled, resolve_address(relative_path), site_url)

    return factory


@pytest.fixture
def example_tree(make_page: PageFactory) -> SiteTree:
    """Site tree of the example pages."""
    builder = SiteTreeBuilder()
    for relative_path, title in EXAMPLE_PAGES.items():
        builder.add_page(make_page(relative_path, title))
    return builder.build()


@pytest.fixture
def write_artifacts() -> Callable[[Path, dict[str, str | None]], None]:
    """Write compiled page artifacts with a generated body."""

    def writer(build_dir: Path, pages: dict[str, str | None]) -> None:
        for relative_path, title in pages.items():
            artifact = build_dir / f"{relative_path}.json"
            artifact.parent.mkdir(parents=True, exist_ok=True)
            body = f"<p>Body of {relative_path}</p>"
            artifact.write_text(json.dumps({"title": title, "body": body}))

    return writer


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Create a test configuration with tmp_path directories."""
    source_dir = tmp_path / "docs"
    source_dir.mkdir(exist_ok=True)

    return Config(
        site=SiteConfig(),
        build=BuildConfig(
            source_dir=source_dir,
            build_dir=tmp_path / ".build",
            output_dir=tmp_path / "dist",
        ),
    )
