"""Route compilation and lookup.

Compiles validated sidebars plus the document universe into a flat,
collision-free route table. The table is immutable once built; the
dispatcher only ever reads it through ``resolve``.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Literal, TypedDict, assert_never

from docroute.core.documents import DocumentCatalog
from docroute.core.errors import DanglingReferenceError, DuplicateRouteError, Position
from docroute.core.nodes import Category, Doc, Link, Sidebar
from docroute.core.paths import doc_path, normalize_path, split_href
from docroute.core.types import DocId, URLPath

logger = logging.getLogger(__name__)

RouteKind = Literal["doc", "category", "resource", "not_found"]

CATCH_ALL_PATH = URLPath("*")
NOT_FOUND_COMPONENT_ID = "not-found"

# Length of the hex digest used as component id
COMPONENT_ID_LENGTH = 12


class RouteEntryDict(TypedDict):
    """Dictionary representation of a route entry."""

    path: str
    componentId: str
    exact: bool
    sidebarId: str | None
    kind: str
    docId: str | None
    title: str | None


@dataclass(frozen=True)
class RouteEntry:
    """Compiled route bound to a page unit."""

    path: URLPath
    component_id: str
    exact: bool
    sidebar_id: str | None
    kind: RouteKind
    doc_id: DocId | None = None
    title: str | None = None

    @property
    def is_catch_all(self) -> bool:
        return self.kind == "not_found"

    def to_dict(self) -> RouteEntryDict:
        """Convert to dictionary for JSON serialization."""
        return {
            "path": self.path,
            "componentId": self.component_id,
            "exact": self.exact,
            "sidebarId": self.sidebar_id,
            "kind": self.kind,
            "docId": self.doc_id,
            "title": self.title,
        }


@dataclass(frozen=True)
class Resource:
    """Reserved machine-readable resource served alongside documents."""

    path: URLPath
    title: str
    version: str = ""


CATCH_ALL = RouteEntry(
    path=CATCH_ALL_PATH,
    component_id=NOT_FOUND_COMPONENT_ID,
    exact=False,
    sidebar_id=None,
    kind="not_found",
)


def compute_component_id(path: str, version: str) -> str:
    """Compute a stable component id for a route.

    Depends only on the route's own path and content version, never on the
    position of the route in the table.

    Args:
        path: Normalized route path
        version: Content version marker

    Returns:
        Hex digest prefix
    """
    content = f"{path}:{version}"
    return hashlib.sha256(content.encode("utf-8")).hexdigest()[:COMPONENT_ID_LENGTH]


class RouteTable:
    """Immutable route table with exact-path lookup.

    Entries keep compilation order; the catch-all entry is always last.
    """

    __slots__ = ("_by_doc_id", "_entries", "_path_index")

    def __init__(self, entries: Iterable[RouteEntry]) -> None:
        """Initialize route table.

        Args:
            entries: Compiled entries without the catch-all; it is appended here
        """
        self._entries = (*entries, CATCH_ALL)
        self._path_index = {
            entry.path: entry for entry in self._entries if not entry.is_catch_all
        }
        self._by_doc_id = {
            entry.doc_id: entry for entry in self._entries if entry.doc_id is not None
        }

    def resolve(self, request_path: str) -> RouteEntry:
        """Resolve a request path to its route.

        Never fails: returns the exact match after normalization, or the
        catch-all entry.

        Args:
            request_path: Requested path (e.g., "/guides/a/", "guides//a")

        Returns:
            Matching RouteEntry, or the catch-all entry
        """
        return self._path_index.get(normalize_path(request_path), CATCH_ALL)

    def get(self, path: str) -> RouteEntry | None:
        """Get route by path, None if no declared route matches."""
        return self._path_index.get(normalize_path(path))

    def by_doc_id(self, doc_id: str) -> RouteEntry | None:
        """Get the route owning a document id."""
        return self._by_doc_id.get(DocId(doc_id))

    def paths(self) -> list[URLPath]:
        """Declared paths in table order, catch-all excluded."""
        return list(self._path_index)

    @property
    def catch_all(self) -> RouteEntry:
        return self._entries[-1]

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and normalize_path(path) in self._path_index

    def __iter__(self) -> Iterator[RouteEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def to_dict(self) -> list[RouteEntryDict]:
        """Convert to list of dictionaries for JSON serialization."""
        return [entry.to_dict() for entry in self._entries]


class RouteCompiler:
    """Compiles sidebars and documents into a RouteTable.

    Traverses each sidebar in pre-order, registering a route per Doc and per
    category linked doc, then registers documents absent from every sidebar,
    then reserved resources. Any collision aborts compilation.
    """

    def __init__(
        self,
        documents: DocumentCatalog,
        *,
        route_base_path: str = "/",
        resources: Iterable[Resource] = (),
    ) -> None:
        """Initialize compiler.

        Args:
            documents: Universe of authored documents
            route_base_path: Path prefix for document routes
            resources: Reserved resources to register after documents
        """
        self._documents = documents
        self._route_base_path = route_base_path
        self._resources = tuple(resources)
        self._entries: dict[URLPath, RouteEntry] = {}
        self._positions: dict[URLPath, Position] = {}

    def compile(self, sidebars: Iterable[Sidebar]) -> RouteTable:
        """Compile the route table.

        Args:
            sidebars: Validated sidebars

        Returns:
            Complete RouteTable

        Raises:
            DuplicateRouteError: If two declarations normalize to the same path
            DanglingReferenceError: If an internal link target has no route
        """
        self._entries = {}
        self._positions = {}
        sidebars = tuple(sidebars)
        listed: set[DocId] = set()
        links: list[Link] = []

        for sidebar in sidebars:
            for node in sidebar.walk():
                if isinstance(node, Doc):
                    self._add_doc(node.id, node.position, sidebar.id, "doc")
                    listed.add(node.id)
                elif isinstance(node, Category):
                    if node.linked_doc is not None:
                        self._add_doc(node.linked_doc.id, node.position, sidebar.id, "category")
                        listed.add(node.linked_doc.id)
                elif isinstance(node, Link):
                    if not node.external:
                        links.append(node)
                else:
                    assert_never(node)

        for document in self._documents:
            if document.id not in listed:
                self._add_doc(document.id, ("(unlisted)", document.id), None, "doc")

        for resource in self._resources:
            path = normalize_path(resource.path)
            self._add(
                RouteEntry(
                    path=path,
                    component_id=compute_component_id(path, resource.version),
                    exact=True,
                    sidebar_id=None,
                    kind="resource",
                    title=resource.title,
                ),
                ("(resource)", resource.title),
            )

        for link in links:
            target = normalize_path(split_href(link.href))
            if target not in self._entries:
                raise DanglingReferenceError(link.position, link.href)

        logger.info(
            "Compiled %d routes (%d unlisted documents)",
            len(self._entries),
            len(self._documents) - len(listed),
        )
        return RouteTable(self._entries.values())

    def _add_doc(
        self,
        doc_id: DocId,
        position: Position,
        sidebar_id: str | None,
        kind: RouteKind,
    ) -> None:
        document = self._documents.get(doc_id)
        if document is None:
            raise DanglingReferenceError(position, doc_id)

        path = doc_path(doc_id, slug=document.slug, route_base_path=self._route_base_path)
        self._add(
            RouteEntry(
                path=path,
                component_id=compute_component_id(path, document.version),
                exact=True,
                sidebar_id=sidebar_id,
                kind=kind,
                doc_id=doc_id,
                title=document.title,
            ),
            position,
        )

    def _add(self, entry: RouteEntry, position: Position) -> None:
        existing = self._positions.get(entry.path)
        if existing is not None:
            raise DuplicateRouteError(entry.path, existing, position)
        self._entries[entry.path] = entry
        self._positions[entry.path] = position
        logger.debug("Registered route %s -> %s", entry.path, entry.component_id)


def compile_routes(
    sidebars: Iterable[Sidebar],
    documents: DocumentCatalog,
    *,
    route_base_path: str = "/",
    resources: Iterable[Resource] = (),
) -> RouteTable:
    """Compile sidebars and documents into a RouteTable."""
    compiler = RouteCompiler(documents, route_base_path=route_base_path, resources=resources)
    return compiler.compile(sidebars)
