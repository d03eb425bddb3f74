"""Navigation menu builder.

Builds the section-scoped menu shown beside a page. Navigation is a view
layer over the site tree: the root page lists top-level sections, every
other page lists the two tiers below its own section.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypedDict

from sitestage.core.site import Page, SiteTree
from sitestage.core.types import URLPath


class NavItemDict(TypedDict, total=False):
    """Dictionary representation of a navigation item."""

    title: str
    path: str | None
    children: list[NavItemDict]


@dataclass
class NavItem:
    """Navigation menu entry.

    An item without a page groups its children and has no link.
    """

    title: str
    page: Page | None = None
    children: list[NavItem] = field(default_factory=list)

    @property
    def url(self) -> URLPath | None:
        return self.page.output_url if self.page else None

    @property
    def is_group(self) -> bool:
        return self.page is None

    def to_dict(self) -> NavItemDict:
        """Convert to dictionary for JSON serialization."""
        result: NavItemDict = {"title": self.title, "path": self.url}
        if self.children:
            result["children"] = [child.to_dict() for child in self.children]
        return result


def build_navigation(tree: SiteTree, page: Page) -> list[NavItem]:
    """Build the navigation menu for a page.

    Args:
        tree: Complete site tree
        page: Page the menu is shown on

    Returns:
        Top-level sections for the root page, otherwise the children of the
        page's section with their own children nested one level deep
    """
    if not page.address:
        return [
            _build_nav_item(tree, segment, node_id)
            for segment, node_id in tree.root.children.items()
        ]

    section = tree.node(tree.root.children[page.address[0]])
    return [
        _build_nav_item(tree, segment, node_id, depth=1)
        for segment, node_id in section.children.items()
    ]


def _build_nav_item(
    tree: SiteTree,
    segment: str,
    node_id: int,
    depth: int = 0,
) -> NavItem:
    """Build NavItem from node, nesting at most `depth` levels of children."""
    node = tree.node(node_id)
    page = tree.occupant(node)
    children = []
    if depth > 0:
        children = [
            _build_nav_item(tree, child_segment, child_id, depth - 1)
            for child_segment, child_id in node.children.items()
        ]
    return NavItem(
        title=page.title if page else _title_from_segment(segment),
        page=page,
        children=children,
    )


def _title_from_segment(segment: str) -> str:
    """Derive group label from a path segment (e.g., "setup-guide" -> "Setup Guide")."""
    return segment.replace("-", " ").replace("_", " ").title()
