"""Tests for route compilation and lookup."""

from collections.abc import Callable

import pytest
from docroute.core.documents import DocumentCatalog
from docroute.core.errors import DanglingReferenceError, DuplicateRouteError
from docroute.core.nodes import parse_sidebars
from docroute.core.routes import (
    CATCH_ALL_PATH,
    NOT_FOUND_COMPONENT_ID,
    Resource,
    RouteTable,
    compile_routes,
    compute_component_id,
)
from docroute.core.types import URLPath

CatalogFactory = Callable[..., DocumentCatalog]

GUIDES_SIDEBAR = {
    "docs": [
        "intro",
        {"type": "category", "label": "Guides", "items": ["guides/a", "guides/b"]},
    ]
}


def _compile(data: object, catalog: DocumentCatalog, **kwargs: object) -> RouteTable:
    return compile_routes(parse_sidebars(data, catalog), catalog, **kwargs)  # type: ignore[arg-type]


class TestCompileRoutes:
    """Tests for compile_routes()."""

    def test__guides_example__compiles_paths(self, make_catalog: CatalogFactory) -> None:
        """Intro plus a category of two guides compiles to three routes."""
        catalog = make_catalog("intro", "guides/a", "guides/b")

        table = _compile(GUIDES_SIDEBAR, catalog)

        assert table.paths() == ["/intro", "/guides/a", "/guides/b"]

    def test__entries__exact_with_sidebar_id(self, make_catalog: CatalogFactory) -> None:
        catalog = make_catalog("intro", "guides/a", "guides/b")

        table = _compile(GUIDES_SIDEBAR, catalog)

        entry = table.resolve("/guides/a")
        assert entry.exact is True
        assert entry.sidebar_id == "docs"
        assert entry.kind == "doc"
        assert entry.doc_id == "guides/a"
        assert entry.title == "A"

    def test__catch_all__is_last(self, make_catalog: CatalogFactory) -> None:
        """Catch-all entry is appended last with fixed component id."""
        catalog = make_catalog("intro", "guides/a", "guides/b")

        table = _compile(GUIDES_SIDEBAR, catalog)

        entries = list(table)
        assert len(table) == 4
        assert entries[-1].path == CATCH_ALL_PATH
        assert entries[-1].exact is False
        assert entries[-1].component_id == NOT_FOUND_COMPONENT_ID
        assert table.catch_all is entries[-1]

    def test__bijection_between_doc_ids_and_paths(self, make_catalog: CatalogFactory) -> None:
        """Every doc id maps to one path and every path to one doc id."""
        catalog = make_catalog("intro", "guides/a", "guides/b", "unlisted")

        table = _compile(GUIDES_SIDEBAR, catalog)

        doc_entries = [entry for entry in table if entry.doc_id is not None]
        assert len({entry.doc_id for entry in doc_entries}) == len(doc_entries) == 4
        assert len({entry.path for entry in doc_entries}) == 4
        for doc in catalog:
            entry = table.by_doc_id(doc.id)
            assert entry is not None
            assert table.resolve(entry.path).doc_id == doc.id

    def test__category_linked_doc__gets_route(self, make_catalog: CatalogFactory) -> None:
        catalog = make_catalog("guides/index", "guides/a")

        table = _compile(
            {
                "docs": [
                    {
                        "type": "category",
                        "label": "Guides",
                        "link": {"type": "doc", "id": "guides/index"},
                        "items": ["guides/a"],
                    }
                ]
            },
            catalog,
        )

        entry = table.resolve("/guides/")
        assert entry.kind == "category"
        assert entry.doc_id == "guides/index"
        assert entry.path == "/guides"

    def test__category_without_link__has_no_route(self, make_catalog: CatalogFactory) -> None:
        catalog = make_catalog("intro", "guides/a", "guides/b")

        table = _compile(GUIDES_SIDEBAR, catalog)

        assert table.resolve("/guides").path == CATCH_ALL_PATH

    def test__unlisted_documents__routed_without_sidebar(
        self, make_catalog: CatalogFactory
    ) -> None:
        """Documents absent from every sidebar stay reachable by URL."""
        catalog = make_catalog("intro", "guides/a", "guides/b", "zeta", "alpha")

        table = _compile(GUIDES_SIDEBAR, catalog)

        assert table.paths()[3:] == ["/alpha", "/zeta"]
        entry = table.resolve("/zeta")
        assert entry.kind == "doc"
        assert entry.sidebar_id is None

    def test__slug_collision_with_linked_doc__raises(
        self, make_catalog: CatalogFactory
    ) -> None:
        """A doc id and a category's linked doc that both land on /start collide."""
        catalog = make_catalog("start", "welcome/overview", slugs={"welcome/overview": "/start"})

        with pytest.raises(DuplicateRouteError) as exc_info:
            _compile(
                {
                    "docs": [
                        "start",
                        {
                            "type": "category",
                            "label": "Welcome",
                            "link": {"type": "doc", "id": "welcome/overview"},
                            "items": [],
                        },
                    ]
                },
                catalog,
            )

        error = exc_info.value
        assert error.path == "/start"
        assert error.position_a == ("docs", "start")
        assert error.position_b == ("docs", "Welcome")
        assert "docs > start" in str(error)
        assert "docs > Welcome" in str(error)

    def test__trailing_slash_collision__raises(self, make_catalog: CatalogFactory) -> None:
        """Paths equal after normalization collide."""
        catalog = make_catalog("guides/index", "other", slugs={"other": "/guides/"})

        with pytest.raises(DuplicateRouteError):
            _compile({"docs": ["guides/index", "other"]}, catalog)

    def test__unlisted_collision__raises(self, make_catalog: CatalogFactory) -> None:
        catalog = make_catalog("intro", "legacy", slugs={"legacy": "/intro"})

        with pytest.raises(DuplicateRouteError) as exc_info:
            _compile({"docs": ["intro"]}, catalog)

        assert exc_info.value.position_b == ("(unlisted)", "legacy")

    def test__resource_collision__raises(self, make_catalog: CatalogFactory) -> None:
        catalog = make_catalog("llms.txt")

        with pytest.raises(DuplicateRouteError):
            _compile(
                {"docs": ["llms.txt"]},
                catalog,
                resources=[Resource(path=URLPath("/llms.txt"), title="llms.txt")],
            )

    def test__resources__registered_after_documents(
        self, make_catalog: CatalogFactory
    ) -> None:
        catalog = make_catalog("intro")

        table = _compile(
            {"docs": ["intro"]},
            catalog,
            resources=[Resource(path=URLPath("/llms.txt"), title="llms.txt")],
        )

        assert table.paths() == ["/intro", "/llms.txt"]
        assert table.resolve("/llms.txt").kind == "resource"

    def test__route_base_path__prefixes_documents(self, make_catalog: CatalogFactory) -> None:
        catalog = make_catalog("intro")

        table = _compile({"docs": ["intro"]}, catalog, route_base_path="/docs")

        assert table.paths() == ["/docs/intro"]

    def test__internal_link__must_resolve(self, make_catalog: CatalogFactory) -> None:
        """Internal link to a path without a route fails the build."""
        catalog = make_catalog("intro")

        with pytest.raises(DanglingReferenceError) as exc_info:
            _compile(
                {"docs": ["intro", {"type": "link", "label": "Gone", "href": "/gone"}]},
                catalog,
            )

        assert exc_info.value.target == "/gone"
        assert exc_info.value.position == ("docs", "Gone")

    def test__internal_link__resolves_with_fragment(self, make_catalog: CatalogFactory) -> None:
        catalog = make_catalog("intro")

        table = _compile(
            {"docs": ["intro", {"type": "link", "label": "Intro", "href": "/intro/#top"}]},
            catalog,
        )

        assert "/intro" in table

    def test__internal_link__may_target_unlisted_doc(self, make_catalog: CatalogFactory) -> None:
        catalog = make_catalog("intro", "extra")

        table = _compile(
            {"docs": ["intro", {"type": "link", "label": "Extra", "href": "/extra"}]},
            catalog,
        )

        assert table.resolve("/extra").sidebar_id is None

    def test__component_ids__stable_across_builds(self, make_catalog: CatalogFactory) -> None:
        """Identical input yields identical component ids."""
        first = _compile(GUIDES_SIDEBAR, make_catalog("intro", "guides/a", "guides/b"))
        second = _compile(GUIDES_SIDEBAR, make_catalog("intro", "guides/a", "guides/b"))

        assert first.to_dict() == second.to_dict()

    def test__component_ids__independent_of_order(self, make_catalog: CatalogFactory) -> None:
        """Reordering the sidebar does not change any route's component id."""
        catalog = make_catalog("intro", "guides/a", "guides/b")
        reordered = {"docs": ["guides/b", "guides/a", "intro"]}

        first = _compile(GUIDES_SIDEBAR, catalog)
        second = _compile(reordered, catalog)

        for path in first.paths():
            assert first.resolve(path).component_id == second.resolve(path).component_id


class TestComputeComponentId:
    """Tests for compute_component_id()."""

    def test__deterministic(self) -> None:
        assert compute_component_id("/intro", "v1") == compute_component_id("/intro", "v1")

    def test__changes_with_version(self) -> None:
        assert compute_component_id("/intro", "v1") != compute_component_id("/intro", "v2")

    def test__changes_with_path(self) -> None:
        assert compute_component_id("/a", "v1") != compute_component_id("/b", "v1")

    def test__length(self) -> None:
        assert len(compute_component_id("/intro", "v1")) == 12


class TestRouteTableResolve:
    """Tests for RouteTable.resolve()."""

    @pytest.fixture
    def table(self, make_catalog: CatalogFactory) -> RouteTable:
        catalog = make_catalog("intro", "guides/a", "guides/b")
        return _compile(GUIDES_SIDEBAR, catalog)

    def test__exact_match(self, table: RouteTable) -> None:
        assert table.resolve("/guides/b").doc_id == "guides/b"

    @pytest.mark.parametrize("path", ["guides/a", "/guides/a/", "//guides//a", "/guides/%61"])
    def test__normalizes_request(self, table: RouteTable, path: str) -> None:
        """Request paths are normalized the same way as compiled paths."""
        assert table.resolve(path).doc_id == "guides/a"

    def test__missing__returns_catch_all(self, table: RouteTable) -> None:
        entry = table.resolve("/missing/path")

        assert entry.is_catch_all
        assert entry.component_id == NOT_FOUND_COMPONENT_ID

    def test__root_without_root_doc__returns_catch_all(self, table: RouteTable) -> None:
        assert table.resolve("/").is_catch_all

    def test__root_with_index_doc__returns_root_entry(
        self, make_catalog: CatalogFactory
    ) -> None:
        catalog = make_catalog("index", "intro")

        table = _compile({"docs": ["index", "intro"]}, catalog)

        entry = table.resolve("/")
        assert entry.doc_id == "index"
        assert entry.path == "/"

    def test__get__returns_none_for_missing(self, table: RouteTable) -> None:
        assert table.get("/missing") is None
        assert table.get("/intro/") is not None

    def test__to_dict__serializes_entries(self, table: RouteTable) -> None:
        data = table.to_dict()

        assert data[0]["path"] == "/intro"
        assert data[0]["sidebarId"] == "docs"
        assert data[-1] == {
            "path": "*",
            "componentId": "not-found",
            "exact": False,
            "sidebarId": None,
            "kind": "not_found",
            "docId": None,
            "title": None,
        }
