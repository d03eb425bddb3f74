"""Site tree for the page hierarchy.

Pages are inserted into a prefix tree keyed by address segment. The tree
is stored as a flat arena of nodes indexed by integer id, so a built
SiteTree can be shared read-only between render workers. Navigation is
built from the tree separately for UI presentation.
"""

import logging
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Literal

from sitestage.core.address import output_path, output_url
from sitestage.core.pages import CompiledPage
from sitestage.core.types import Address, URLPath

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Untitled"
ROOT_ID = 0

DuplicatePolicy = Literal["replace", "error"]


@dataclass(frozen=True)
class Page:
    """Publishable page data."""

    address: Address
    title: str
    output_path: PurePosixPath
    output_url: URLPath
    source: CompiledPage

    @classmethod
    def from_compiled(
        cls,
        compiled: CompiledPage,
        address: Address,
        site_url: str = "/",
    ) -> "Page":
        """Create page for a compiled record at the given address."""
        return cls(
            address=address,
            title=compiled.title or DEFAULT_TITLE,
            output_path=output_path(address),
            output_url=output_url(address, site_url),
            source=compiled,
        )


@dataclass
class Node:
    """Tree position, occupied by a page or only grouping its children."""

    children: dict[str, int] = field(default_factory=dict)
    occupant: int | None = None


class DuplicateAddressError(ValueError):
    """Two compiled pages resolve to the same address."""

    def __init__(self, address: Address, existing: Page, duplicate: Page) -> None:
        self.address = address
        self.existing = existing
        self.duplicate = duplicate
        where = "/".join(address) or "<root>"
        super().__init__(
            f"Pages {existing.source.relative_path!r} and "
            f"{duplicate.source.relative_path!r} both resolve to {where!r}"
        )


class SiteTree:
    """Prefix tree of pages with address lookups and ancestor walks.

    Ancestor lookups are O(d) where d is the address depth.
    """

    __slots__ = ("_nodes", "_pages")

    def __init__(self, nodes: list[Node], pages: list[Page]) -> None:
        """Initialize site tree.

        Args:
            nodes: Node arena, node 0 is the root
            pages: Pages referenced by node occupants
        """
        self._nodes = nodes
        self._pages = pages

    def __len__(self) -> int:
        return len(self.pages)

    @property
    def pages(self) -> list[Page]:
        """Pages reachable in the tree, in discovery order."""
        occupied = {n.occupant for n in self._nodes if n.occupant is not None}
        return [page for idx, page in enumerate(self._pages) if idx in occupied]

    @property
    def root(self) -> Node:
        return self._nodes[ROOT_ID]

    def node(self, node_id: int) -> Node:
        return self._nodes[node_id]

    def occupant(self, node: Node) -> Page | None:
        """Get page located exactly at a node."""
        if node.occupant is None:
            return None
        return self._pages[node.occupant]

    def get_page(self, address: Address) -> Page | None:
        """Get page by address.

        Returns:
            Page if found, None if the address is unknown or only groups pages
        """
        node_id = self._find(address)
        if node_id is None:
            return None
        return self.occupant(self._nodes[node_id])

    def get_children(self, address: Address) -> list[Node]:
        """Get child nodes of an address in insertion order."""
        node_id = self._find(address)
        if node_id is None:
            return []
        return [self._nodes[i] for i in self._nodes[node_id].children.values()]

    def get_ancestors(self, address: Address) -> list[Page | None]:
        """Walk the tree from the root along an address.

        Returns:
            One slot per prefix length 1..N holding the page at that prefix,
            or None where the prefix only groups pages. The last slot is the
            page at the full address.

        Raises:
            AssertionError: If a segment of the address is not in the tree
        """
        ancestors: list[Page | None] = []
        current = self._nodes[ROOT_ID]
        for depth, segment in enumerate(address):
            child_id = current.children.get(segment)
            if child_id is None:
                raise AssertionError(
                    f"Site tree has no node for {address[: depth + 1]!r}"
                )
            current = self._nodes[child_id]
            ancestors.append(self.occupant(current))
        return ancestors

    def get_breadcrumbs(self, page: Page) -> list[Page | None]:
        """Build breadcrumbs for a page.

        Returns proper ancestors in root-to-parent order. The current page
        is not included.
        """
        return self.get_ancestors(page.address)[:-1]

    def get_section_root(self, page: Page) -> Page | None:
        """Get the page heading the section of a page, None for the root page."""
        ancestors = self.get_ancestors(page.address)
        return ancestors[0] if ancestors else None

    def _find(self, address: Address) -> int | None:
        node_id = ROOT_ID
        for segment in address:
            child_id = self._nodes[node_id].children.get(segment)
            if child_id is None:
                return None
            node_id = child_id
        return node_id


class SiteTreeBuilder:
    """Builder for constructing SiteTree instances."""

    def __init__(self, on_duplicate: DuplicatePolicy = "replace") -> None:
        """Initialize builder.

        Args:
            on_duplicate: "replace" keeps the later page at a duplicate
                address, "error" raises DuplicateAddressError
        """
        if on_duplicate not in ("replace", "error"):
            raise ValueError(f"Unknown duplicate address policy: {on_duplicate}")
        self._on_duplicate = on_duplicate
        self._nodes: list[Node] = [Node()]
        self._pages: list[Page] = []

    def add_page(self, page: Page) -> int:
        """Insert a page, creating intermediate nodes as needed.

        Args:
            page: Page to insert

        Returns:
            Index of the added page

        Raises:
            DuplicateAddressError: If the address is taken and the policy is "error"
        """
        existing = self._occupant_at(page.address)
        if existing is not None:
            if self._on_duplicate == "error":
                raise DuplicateAddressError(page.address, existing, page)
            logger.warning(
                f"Page {page.source.relative_path!r} replaces "
                f"{existing.source.relative_path!r} at {page.output_url}"
            )

        node = self._nodes[ROOT_ID]
        for segment in page.address:
            child_id = node.children.get(segment)
            if child_id is None:
                child_id = len(self._nodes)
                self._nodes.append(Node())
                node.children[segment] = child_id
            node = self._nodes[child_id]

        idx = len(self._pages)
        self._pages.append(page)
        node.occupant = idx
        return idx

    def build(self) -> SiteTree:
        """Build the SiteTree instance.

        The tree gets its own copy of the nodes, later add_page calls don't
        change it.
        """
        nodes = [Node(dict(n.children), n.occupant) for n in self._nodes]
        return SiteTree(nodes=nodes, pages=list(self._pages))

    def _occupant_at(self, address: Address) -> Page | None:
        node = self._nodes[ROOT_ID]
        for segment in address:
            child_id = node.children.get(segment)
            if child_id is None:
                return None
            node = self._nodes[child_id]
        if node.occupant is None:
            return None
        return self._pages[node.occupant]
