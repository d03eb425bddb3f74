"""Tests for SiteTree class."""

from pathlib import PurePosixPath

import pytest
from sitestage.core.site import (
    DEFAULT_TITLE,
    DuplicateAddressError,
    SiteTree,
    SiteTreeBuilder,
)

from tests.conftest import EXAMPLE_PAGES, PageFactory


class TestPage:
    """Tests for Page creation."""

    def test__from_compiled__derives_outputs(self, make_page: PageFactory) -> None:
        """Derive address, output path and URL from source path."""
        page = make_page("guide/setup", "Setup", site_url="/docs/")

        assert page.address == ("guide", "setup")
        assert page.title == "Setup"
        assert page.output_path == PurePosixPath("guide/setup/index.html")
        assert page.output_url == "/docs/guide/setup/"

    def test__from_compiled__missing_title__uses_fallback(
        self, make_page: PageFactory
    ) -> None:
        """Fall back to default label without title."""
        page = make_page("intro")

        assert page.title == DEFAULT_TITLE


class TestSiteTreeBuilder:
    """Tests for SiteTreeBuilder class."""

    def test__add_page__returns_index(self, make_page: PageFactory) -> None:
        """Add page returns its index."""
        builder = SiteTreeBuilder()

        idx1 = builder.add_page(make_page("a"))
        idx2 = builder.add_page(make_page("b"))

        assert idx1 == 0
        assert idx2 == 1

    def test__add_page__creates_intermediate_nodes(self, make_page: PageFactory) -> None:
        """Create grouping nodes for missing prefixes."""
        builder = SiteTreeBuilder()
        builder.add_page(make_page("domain/sub/page", "Deep"))
        tree = builder.build()

        assert tree.get_page(("domain",)) is None
        assert tree.get_page(("domain", "sub")) is None
        assert len(tree.get_children(("domain",))) == 1
        page = tree.get_page(("domain", "sub", "page"))
        assert page is not None
        assert page.title == "Deep"

    def test__add_page__one_node_per_prefix(self, make_page: PageFactory) -> None:
        """Pages sharing a prefix share its node."""
        builder = SiteTreeBuilder()
        builder.add_page(make_page("guide/a"))
        builder.add_page(make_page("guide/b"))
        tree = builder.build()

        assert list(tree.root.children) == ["guide"]
        assert len(tree.get_children(("guide",))) == 2

    def test__add_page__duplicate__replaces(self, make_page: PageFactory) -> None:
        """Later page wins at a duplicate address by default."""
        builder = SiteTreeBuilder()
        builder.add_page(make_page("guide/index", "First"))
        builder.add_page(make_page("guide", "Second"))
        tree = builder.build()

        page = tree.get_page(("guide",))

        assert page is not None
        assert page.title == "Second"
        assert [p.title for p in tree.pages] == ["Second"]

    def test__add_page__duplicate__logs_warning(
        self, make_page: PageFactory, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Warn when a page replaces another."""
        builder = SiteTreeBuilder()
        builder.add_page(make_page("guide/index"))

        with caplog.at_level("WARNING", logger="sitestage.core.site"):
            builder.add_page(make_page("guide"))

        assert "replaces" in caplog.text

    def test__add_page__duplicate__strict__raises(self, make_page: PageFactory) -> None:
        """Raise DuplicateAddressError with the error policy."""
        builder = SiteTreeBuilder(on_duplicate="error")
        first = make_page("guide/index", "First")
        builder.add_page(first)

        with pytest.raises(DuplicateAddressError) as exc_info:
            builder.add_page(make_page("guide", "Second"))

        assert exc_info.value.address == ("guide",)
        assert exc_info.value.existing is first
        assert "guide/index" in str(exc_info.value)

    def test__add_page__duplicate__strict__leaves_tree_unchanged(
        self, make_page: PageFactory
    ) -> None:
        """Rejected duplicate adds no nodes."""
        builder = SiteTreeBuilder(on_duplicate="error")
        builder.add_page(make_page("guide/index"))
        before = builder.build()

        with pytest.raises(DuplicateAddressError):
            builder.add_page(make_page("guide"))

        after = builder.build()
        assert after.root.children == before.root.children
        assert len(after) == len(before) == 1

    def test__build__tree_is_closed(self, make_page: PageFactory) -> None:
        """Pages added after build() do not change the built tree."""
        builder = SiteTreeBuilder()
        builder.add_page(make_page("guide/index", "Guide"))
        tree = builder.build()

        builder.add_page(make_page("guide/setup", "Setup"))
        builder.add_page(make_page("intro", "Intro"))

        assert len(tree) == 1
        assert list(tree.root.children) == ["guide"]
        assert tree.get_children(("guide",)) == []
        assert tree.get_page(("guide", "setup")) is None

    def test__init__unknown_policy__raises(self) -> None:
        """Reject unknown duplicate policies."""
        with pytest.raises(ValueError, match="Unknown duplicate"):
            SiteTreeBuilder(on_duplicate="ignore")  # type: ignore[arg-type]

    def test__build__empty__root_only(self) -> None:
        """Empty site has a bare root."""
        tree = SiteTreeBuilder().build()

        assert len(tree) == 0
        assert tree.pages == []
        assert tree.root.children == {}
        assert tree.get_page(()) is None


class TestSiteTree:
    """Tests for SiteTree lookups and ancestor walks."""

    def test__get_page__returns_page(self, example_tree: SiteTree) -> None:
        """Get page by address."""
        page = example_tree.get_page(("guide", "setup"))

        assert page is not None
        assert page.title == "Setup"

    def test__get_page__root(self, example_tree: SiteTree) -> None:
        """Root page occupies the root node."""
        page = example_tree.get_page(())

        assert page is not None
        assert page.title == "Home"

    def test__get_page__not_found__returns_none(self, example_tree: SiteTree) -> None:
        """Return None when address is unknown."""
        assert example_tree.get_page(("nonexistent",)) is None

    def test__get_children__insertion_order(self, example_tree: SiteTree) -> None:
        """Children keep first insertion order."""
        assert list(example_tree.root.children) == ["intro", "guide"]

    def test__get_children__not_found__returns_empty(self, example_tree: SiteTree) -> None:
        """Return empty list when address is unknown."""
        assert example_tree.get_children(("nonexistent",)) == []

    def test__pages__discovery_order(self, example_tree: SiteTree) -> None:
        """Pages are listed in discovery order."""
        assert [p.title for p in example_tree.pages] == list(EXAMPLE_PAGES.values())

    def test__get_ancestors__ends_at_page(self, example_tree: SiteTree) -> None:
        """Walk yields one slot per segment ending at the page itself."""
        for page in example_tree.pages:
            ancestors = example_tree.get_ancestors(page.address)

            assert len(ancestors) == len(page.address)
            if page.address:
                last = ancestors[-1]
                assert last is not None
                assert last.address == page.address

    def test__get_ancestors__grouping_prefix__none(self, make_page: PageFactory) -> None:
        """Prefixes without a page yield None slots."""
        builder = SiteTreeBuilder()
        builder.add_page(make_page("domain/page"))
        tree = builder.build()

        ancestors = tree.get_ancestors(("domain", "page"))

        assert ancestors[0] is None
        assert ancestors[1] is not None

    def test__get_ancestors__missing_node__asserts(self, example_tree: SiteTree) -> None:
        """Unknown segment is an internal consistency failure."""
        with pytest.raises(AssertionError):
            example_tree.get_ancestors(("guide", "missing"))

    def test__get_breadcrumbs__root__empty(self, example_tree: SiteTree) -> None:
        """Root page has no breadcrumbs and no section root."""
        root = example_tree.get_page(())
        assert root is not None

        assert example_tree.get_breadcrumbs(root) == []
        assert example_tree.get_section_root(root) is None

    def test__get_breadcrumbs__section_page__empty(self, example_tree: SiteTree) -> None:
        """Top-level page has no proper ancestors."""
        guide = example_tree.get_page(("guide",))
        assert guide is not None

        assert example_tree.get_breadcrumbs(guide) == []
        assert example_tree.get_section_root(guide) is guide

    def test__get_breadcrumbs__nested_page__returns_ancestors(
        self, example_tree: SiteTree
    ) -> None:
        """Return proper ancestors in root-to-parent order."""
        step = example_tree.get_page(("guide", "setup", "step1"))
        assert step is not None

        breadcrumbs = example_tree.get_breadcrumbs(step)

        assert [p.title if p else None for p in breadcrumbs] == ["Guide", "Setup"]
        section_root = example_tree.get_section_root(step)
        assert section_root is not None
        assert section_root.title == "Guide"
