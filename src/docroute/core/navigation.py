"""Navigation tree projection.

Projects a sidebar onto its route table for UI presentation: resolved paths,
parent links, collapse state and prev/next pagination. Nodes live in a flat
list with parent/children relationships tracked by indices, so the parent
relation never owns anything.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal, TypedDict, assert_never

from docroute.core.errors import format_position
from docroute.core.nodes import Category, Doc, Link, Node, Sidebar
from docroute.core.paths import normalize_path
from docroute.core.routes import RouteTable
from docroute.core.types import DocId, URLPath

logger = logging.getLogger(__name__)

NavKind = Literal["doc", "category", "link"]


class NavItemDict(TypedDict, total=False):
    """Dictionary representation of a navigation item."""

    type: str
    label: str
    path: str
    href: str
    collapsed: bool
    children: list[NavItemDict]


class NavigationTreeDict(TypedDict):
    """Dictionary representation of a navigation tree."""

    sidebarId: str
    items: list[NavItemDict]


@dataclass(frozen=True)
class NavNode:
    """Navigation node data."""

    kind: NavKind
    label: str
    path: URLPath | None = None
    href: str | None = None
    collapsed: bool = False
    doc_id: DocId | None = None
    dead: bool = False


@dataclass(frozen=True)
class BreadcrumbItem:
    """Breadcrumb navigation item."""

    title: str
    path: str | None

    def to_dict(self) -> dict[str, str | None]:
        """Convert to dictionary for JSON serialization."""
        return {"title": self.title, "path": self.path}


@dataclass(frozen=True)
class PaginationItem:
    """Previous/next page link."""

    title: str
    path: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for JSON serialization."""
        return {"title": self.title, "path": self.path}


class NavigationTree:
    """Navigation tree for one sidebar with efficient path lookups.

    Provides O(1) path lookups, O(d) breadcrumb building where d is the node
    depth, and O(1) prev/next lookups over the linear document sequence.
    """

    __slots__ = (
        "_children",
        "_home_path",
        "_nodes",
        "_parents",
        "_path_index",
        "_roots",
        "_sequence",
        "_sequence_index",
        "_sidebar_id",
    )

    def __init__(
        self,
        sidebar_id: str,
        nodes: list[NavNode],
        children: list[list[int]],
        parents: list[int | None],
        roots: list[int],
        sequence: list[int],
        *,
        home_path: URLPath | None = URLPath("/"),
    ) -> None:
        """Initialize navigation tree.

        Args:
            sidebar_id: Owning sidebar id
            nodes: Flat list of all nodes in pre-order
            children: Children indices for each node
            parents: Parent index for each node (None for roots)
            roots: Indices of top-level nodes
            sequence: Node indices in prev/next order
            home_path: Target of the Home breadcrumb, None if the site has no root page
        """
        self._sidebar_id = sidebar_id
        self._home_path = home_path
        self._nodes = nodes
        self._children = children
        self._parents = parents
        self._roots = roots
        self._sequence = sequence
        self._path_index = {
            node.path: i for i, node in enumerate(nodes) if node.path is not None
        }
        self._sequence_index = {node_idx: pos for pos, node_idx in enumerate(sequence)}

    @property
    def sidebar_id(self) -> str:
        return self._sidebar_id

    def get_node(self, path: str) -> NavNode | None:
        """Get node by path.

        Args:
            path: Page path (e.g., "guides/a" or "/guides/a/")

        Returns:
            NavNode if found, None otherwise
        """
        idx = self._path_index.get(normalize_path(path))
        if idx is None:
            return None
        return self._nodes[idx]

    def get_children(self, path: str) -> list[NavNode]:
        """Get children of a node, empty if not found or no children."""
        idx = self._path_index.get(normalize_path(path))
        if idx is None:
            return []
        return [self._nodes[i] for i in self._children[idx]]

    def get_parent(self, path: str) -> NavNode | None:
        """Get the parent node of a page, None for top-level or unknown pages."""
        idx = self._path_index.get(normalize_path(path))
        if idx is None:
            return None
        parent = self._parents[idx]
        return None if parent is None else self._nodes[parent]

    def get_root_nodes(self) -> list[NavNode]:
        """Get top-level nodes."""
        return [self._nodes[i] for i in self._roots]

    def get_breadcrumbs(self, path: str) -> list[BreadcrumbItem]:
        """Build breadcrumbs for a given path.

        Returns breadcrumbs starting with "Home", followed by ancestor
        categories. The current page is not included. Path-less categories
        appear with ``path=None``, and so does Home when there is no root page.

        Note:
            For unknown paths, returns [Home] to provide minimal navigation
            in UI even when the page isn't part of this sidebar.

        Args:
            path: Page path

        Returns:
            List of BreadcrumbItem for ancestor navigation
        """
        home = BreadcrumbItem(title="Home", path=self._home_path)
        idx = self._path_index.get(normalize_path(path))
        if idx is None:
            return [home]

        ancestors: list[NavNode] = []
        current = self._parents[idx]
        while current is not None:
            ancestors.append(self._nodes[current])
            current = self._parents[current]

        ancestors.reverse()
        return [home] + [BreadcrumbItem(title=node.label, path=node.path) for node in ancestors]

    def get_pagination(self, path: str) -> tuple[PaginationItem | None, PaginationItem | None]:
        """Get previous and next pages for a path.

        Args:
            path: Page path

        Returns:
            Tuple of (prev, next); either is None at the sequence ends or for
            paths outside the sequence
        """
        idx = self._path_index.get(normalize_path(path))
        pos = None if idx is None else self._sequence_index.get(idx)
        if pos is None:
            return None, None

        prev_item = self._pagination_item(pos - 1) if pos > 0 else None
        next_item = self._pagination_item(pos + 1) if pos + 1 < len(self._sequence) else None
        return prev_item, next_item

    def sequence(self) -> list[NavNode]:
        """Nodes in prev/next order."""
        return [self._nodes[i] for i in self._sequence]

    def to_dict(self) -> NavigationTreeDict:
        """Convert to dictionary for JSON serialization."""
        return {
            "sidebarId": self._sidebar_id,
            "items": [self._item_dict(i) for i in self._roots],
        }

    def _pagination_item(self, pos: int) -> PaginationItem:
        node = self._nodes[self._sequence[pos]]
        assert node.path is not None
        return PaginationItem(title=node.label, path=node.path)

    def _item_dict(self, idx: int) -> NavItemDict:
        node = self._nodes[idx]
        result: NavItemDict = {"type": node.kind, "label": node.label}
        if node.path is not None:
            result["path"] = node.path
        if node.href is not None:
            result["href"] = node.href
        if node.kind == "category":
            result["collapsed"] = node.collapsed
            result["children"] = [self._item_dict(i) for i in self._children[idx]]
        return result


class NavigationTreeBuilder:
    """Builder for constructing NavigationTree instances."""

    def __init__(self, sidebar_id: str, *, home_path: URLPath | None = URLPath("/")) -> None:
        self._sidebar_id = sidebar_id
        self._home_path = home_path
        self._nodes: list[NavNode] = []
        self._children: list[list[int]] = []
        self._parents: list[int | None] = []
        self._roots: list[int] = []

    def add_node(self, node: NavNode, parent_idx: int | None = None) -> int:
        """Add a node to the tree.

        Args:
            node: Node data
            parent_idx: Index of parent node, None for top level

        Returns:
            Index of the added node
        """
        idx = len(self._nodes)
        self._nodes.append(node)
        self._children.append([])
        self._parents.append(parent_idx)

        if parent_idx is None:
            self._roots.append(idx)
        else:
            self._children[parent_idx].append(idx)

        return idx

    def mark_dead(self, idx: int) -> None:
        """Flag a category that has no reachable path."""
        node = self._nodes[idx]
        self._nodes[idx] = NavNode(
            kind=node.kind,
            label=node.label,
            path=node.path,
            href=node.href,
            collapsed=node.collapsed,
            doc_id=node.doc_id,
            dead=True,
        )

    def build(self) -> NavigationTree:
        """Build the NavigationTree, computing the prev/next sequence."""
        sequence: list[int] = []
        for root in self._roots:
            self._flatten(root, sequence)
        return NavigationTree(
            sidebar_id=self._sidebar_id,
            nodes=self._nodes,
            children=self._children,
            parents=self._parents,
            roots=self._roots,
            sequence=sequence,
            home_path=self._home_path,
        )

    def _flatten(self, idx: int, sequence: list[int]) -> None:
        node = self._nodes[idx]
        if node.dead or node.kind == "link":
            return
        if node.path is not None:
            sequence.append(idx)
        for child in self._children[idx]:
            self._flatten(child, sequence)


class NavigationProjector:
    """Projects validated sidebars onto a route table."""

    def __init__(self, routes: RouteTable) -> None:
        self._routes = routes

    def project(self, sidebar: Sidebar) -> NavigationTree:
        """Build the navigation tree for one sidebar."""
        home = self._routes.get("/")
        builder = NavigationTreeBuilder(
            sidebar.id, home_path=home.path if home is not None else None
        )
        for node in sidebar.items:
            self._add(builder, node, None)
        return builder.build()

    def _add(self, builder: NavigationTreeBuilder, node: Node, parent_idx: int | None) -> bool:
        """Add a node and its subtree.

        Returns:
            True if the node or a descendant resolves to a path
        """
        if isinstance(node, Doc):
            path = self._path_for(node.id)
            builder.add_node(
                NavNode(kind="doc", label=node.display_label, path=path, doc_id=node.id),
                parent_idx,
            )
            return path is not None
        if isinstance(node, Category):
            linked = node.linked_doc
            path = self._path_for(linked.id) if linked is not None else None
            idx = builder.add_node(
                NavNode(
                    kind="category",
                    label=node.label,
                    path=path,
                    collapsed=node.collapsed,
                    doc_id=linked.id if linked is not None else None,
                ),
                parent_idx,
            )
            reachable = path is not None
            for child in node.children:
                reachable = self._add(builder, child, idx) or reachable
            if not reachable:
                # Empty categories are already reported by the parser
                if not node.is_empty:
                    logger.warning(
                        "Category %s has no reachable page", format_position(node.position)
                    )
                builder.mark_dead(idx)
            return reachable
        if isinstance(node, Link):
            builder.add_node(
                NavNode(kind="link", label=node.label, href=node.href),
                parent_idx,
            )
            return False
        assert_never(node)

    def _path_for(self, doc_id: DocId) -> URLPath | None:
        entry = self._routes.by_doc_id(doc_id)
        return None if entry is None else entry.path


def project_navigation(
    sidebars: Iterable[Sidebar],
    routes: RouteTable,
) -> dict[str, NavigationTree]:
    """Build one navigation tree per sidebar, keyed by sidebar id."""
    projector = NavigationProjector(routes)
    return {sidebar.id: projector.project(sidebar) for sidebar in sidebars}
