"""Page template merging.

Wraps rendered page bodies in the site page skeleton using Jinja2. The
default template ships with the package; a template directory from the
configuration takes precedence over it.
"""

from dataclasses import dataclass
from pathlib import Path

from jinja2 import (
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    PackageLoader,
    StrictUndefined,
    select_autoescape,
)

from sitestage.core.navigation import NavItem
from sitestage.core.site import Page

PAGE_TEMPLATE = "page.html"


@dataclass(frozen=True)
class PageContext:
    """Values available to the page template."""

    title: str
    current: Page
    breadcrumb: list[Page | None]
    navigation: list[NavItem]
    section_root: Page | None
    body: str
    site_url: str
    site_title: str = "Documentation"

    def __post_init__(self) -> None:
        for name in ("title", "body", "site_url", "site_title"):
            if not isinstance(getattr(self, name), str):
                raise TypeError(f"PageContext.{name} must be a string")
        if not isinstance(self.current, Page):
            raise TypeError("PageContext.current must be a Page")
        if any(item is not None and not isinstance(item, Page) for item in self.breadcrumb):
            raise TypeError("PageContext.breadcrumb items must be Page or None")
        if any(not isinstance(item, NavItem) for item in self.navigation):
            raise TypeError("PageContext.navigation items must be NavItem")
        if self.section_root is not None and not isinstance(self.section_root, Page):
            raise TypeError("PageContext.section_root must be a Page or None")


class TemplateRenderer:
    """Renders full HTML documents from page contexts."""

    def __init__(self, template_dir: Path | None = None) -> None:
        """Initialize template environment.

        Args:
            template_dir: Directory with a page.html overriding the bundled one
        """
        loaders = [PackageLoader("sitestage", "templates")]
        if template_dir is not None:
            loaders.insert(0, FileSystemLoader(template_dir))

        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(["html"]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )
        self._template = self.env.get_template(PAGE_TEMPLATE)

    def render(self, context: PageContext) -> str:
        """Render a complete HTML document."""
        return self._template.render(
            title=context.title,
            current=context.current,
            breadcrumb=context.breadcrumb,
            navigation=context.navigation,
            section_root=context.section_root,
            body=context.body,
            site_url=context.site_url,
            site_title=context.site_title,
        )
