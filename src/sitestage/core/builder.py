"""Site assembly.

Runs the build in two phases. Discovery reads every compiled page and
closes the site tree; only then are pages rendered and written, since a
page's navigation can reference pages discovered after it.
"""

import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass
from pathlib import Path

from sitestage.core.address import normalize_site_url, resolve_address
from sitestage.core.navigation import build_navigation
from sitestage.core.pages import ArtifactBodyRenderer, BodyRenderer, discover_pages
from sitestage.core.site import DuplicatePolicy, Page, SiteTree, SiteTreeBuilder
from sitestage.core.templates import PageContext, TemplateRenderer

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Result of assembling a site."""

    written: list[Path]
    tree: SiteTree


class SiteAssembler:
    """Assembles compiled pages into a static site."""

    def __init__(
        self,
        build_dir: Path,
        output_dir: Path,
        *,
        site_url: str = "/",
        site_title: str = "Documentation",
        templates: TemplateRenderer | None = None,
        body_renderer: BodyRenderer | None = None,
        on_duplicate: DuplicatePolicy = "replace",
        jobs: int = 1,
    ) -> None:
        """Initialize assembler.

        Args:
            build_dir: Directory containing compiled pages
            output_dir: Root directory for rendered documents
            site_url: Base path the site is served under
            site_title: Site name shown in the page header
            templates: Template renderer, defaults to the bundled template
            body_renderer: Body render capability, defaults to reading artifacts
            on_duplicate: Policy for pages resolving to the same address
            jobs: Number of render workers, 1 renders sequentially
        """
        if jobs < 1:
            raise ValueError(f"jobs must be at least 1, got {jobs}")
        self._build_dir = build_dir
        self._output_dir = output_dir
        self._site_url = normalize_site_url(site_url)
        self._site_title = site_title
        self._templates = templates or TemplateRenderer()
        self._body_renderer = body_renderer or ArtifactBodyRenderer()
        self._on_duplicate = on_duplicate
        self._jobs = jobs

    @property
    def site_url(self) -> str:
        return self._site_url

    def build(self) -> BuildResult:
        """Discover all pages, then render and write each of them."""
        tree = self.discover()
        written = self.render_all(tree)
        return BuildResult(written=written, tree=tree)

    def discover(self) -> SiteTree:
        """Read compiled pages and build the site tree.

        Raises:
            DuplicateAddressError: If two pages share an address and the
                policy is "error"
        """
        builder = SiteTreeBuilder(on_duplicate=self._on_duplicate)
        for compiled in discover_pages(self._build_dir):
            address = resolve_address(compiled.relative_path)
            builder.add_page(Page.from_compiled(compiled, address, self._site_url))
        tree = builder.build()
        logger.info(f"Discovered {len(tree)} pages in {self._build_dir}")
        return tree

    def render_all(self, tree: SiteTree) -> list[Path]:
        """Render and write every page of a closed site tree.

        The first failure aborts the build. Documents already written are
        left in place.

        Returns:
            Paths of written documents
        """
        pages = tree.pages
        if self._jobs == 1 or len(pages) <= 1:
            return [self.write_page(tree, page) for page in pages]

        with ThreadPoolExecutor(max_workers=self._jobs) as executor:
            futures = [executor.submit(self.write_page, tree, page) for page in pages]
            done, not_done = wait(futures, return_when=FIRST_EXCEPTION)
            for future in not_done:
                future.cancel()
            for future in futures:
                if future in done:
                    error = future.exception()
                    if error is not None:
                        raise error
        return [future.result() for future in futures]

    def render_page(self, tree: SiteTree, page: Page) -> str:
        """Render the full HTML document of a page."""
        context = PageContext(
            title=page.title,
            current=page,
            breadcrumb=tree.get_breadcrumbs(page),
            navigation=build_navigation(tree, page),
            section_root=tree.get_section_root(page),
            body=self._body_renderer.render(page.source),
            site_url=self._site_url,
            site_title=self._site_title,
        )
        return self._templates.render(context)

    def write_page(self, tree: SiteTree, page: Page) -> Path:
        """Render a page and write it below the output directory."""
        document = self.render_page(tree, page)
        out_path = self._output_dir / page.output_path
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(document, encoding="utf-8")
        logger.debug(f"Wrote {page.output_url} -> {out_path}")
        return out_path
