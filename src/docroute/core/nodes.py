"""Sidebar node model and declaration parsing.

A sidebar is an ordered forest of nodes. Each node is exactly one of Doc,
Category or Link; consumers dispatch over the closed ``Node`` union and end
with ``assert_never`` so that a new node kind fails type checking everywhere
it needs handling.
"""

from __future__ import annotations

import json
import logging
import tomllib
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import assert_never

import yaml

from docroute.core.documents import Document, DocumentCatalog
from docroute.core.errors import (
    DanglingLinkedDocError,
    DanglingReferenceError,
    DuplicateDocIdError,
    MalformedExternalLinkError,
    Position,
    StructuralError,
    format_position,
)
from docroute.core.paths import has_scheme, is_valid_external_url
from docroute.core.types import DocId

logger = logging.getLogger(__name__)

NODE_TYPES = ("doc", "category", "link")


@dataclass(frozen=True)
class Doc:
    """Reference to an authored document; resolves to exactly one path."""

    id: DocId
    title: str
    source_ref: Path
    position: Position
    label: str | None = None

    @property
    def display_label(self) -> str:
        return self.label or self.title


@dataclass(frozen=True)
class Category:
    """Grouping node, routable only through its linked doc."""

    label: str
    position: Position
    collapsed: bool = True
    children: tuple[Node, ...] = ()
    linked_doc: Doc | None = None

    @property
    def is_empty(self) -> bool:
        """Category with no children and no linked doc."""
        return not self.children and self.linked_doc is None


@dataclass(frozen=True)
class Link:
    """Link without an owned route."""

    label: str
    href: str
    external: bool
    position: Position


Node = Doc | Category | Link


@dataclass(frozen=True)
class Sidebar:
    """Named, ordered forest of nodes."""

    id: str
    items: tuple[Node, ...] = field(default_factory=tuple)

    def walk(self) -> Iterator[Node]:
        """Iterate nodes in pre-order, declaration order preserved."""
        return _walk(self.items)


def _walk(nodes: tuple[Node, ...]) -> Iterator[Node]:
    for node in nodes:
        yield node
        if isinstance(node, Category):
            yield from _walk(node.children)


def iter_docs(sidebar: Sidebar) -> Iterator[Doc]:
    """Iterate every Doc reachable in a sidebar, linked docs included, in pre-order."""
    for node in sidebar.walk():
        if isinstance(node, Doc):
            yield node
        elif isinstance(node, Category):
            if node.linked_doc is not None:
                yield node.linked_doc
        elif isinstance(node, Link):
            continue
        else:
            assert_never(node)


def load_sidebar_file(path: Path) -> object:
    """Read a sidebar declaration file.

    Supports JSON, TOML and YAML, selected by file suffix.

    Raises:
        FileNotFoundError: If the file doesn't exist
        StructuralError: If the suffix is unsupported or the file can't be parsed
    """
    if not path.exists():
        raise FileNotFoundError(f"Sidebar file not found: {path}")

    position = (path.name,)
    suffix = path.suffix.lower()
    try:
        if suffix == ".json":
            return json.loads(path.read_text(encoding="utf-8"))
        if suffix == ".toml":
            with path.open("rb") as f:
                return tomllib.load(f)
        if suffix in (".yaml", ".yml"):
            return yaml.safe_load(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, tomllib.TOMLDecodeError, yaml.YAMLError) as e:
        raise StructuralError(position, f"cannot parse sidebar file: {e}") from e

    raise StructuralError(position, f"unsupported sidebar file format '{suffix}'")


class SidebarParser:
    """Validates raw sidebar declarations against the document catalog.

    Parsing is pure: the same input always yields the same nodes or the same
    error. Doc ids must be unique across all sidebars parsed by one instance.
    """

    def __init__(self, documents: DocumentCatalog) -> None:
        self._documents = documents
        self._seen: dict[str, Position] = {}

    def parse(self, data: object) -> list[Sidebar]:
        """Parse all sidebars.

        Args:
            data: Mapping of sidebar id to forest (list of items)

        Returns:
            Sidebars in declaration order

        Raises:
            StructuralError: If a declaration is malformed
            DanglingReferenceError: If a doc reference is unknown
            MalformedExternalLinkError: If an external href is invalid
        """
        if not isinstance(data, Mapping):
            raise StructuralError((), "sidebars must be a mapping of sidebar id to items")

        sidebars: list[Sidebar] = []
        for sidebar_id, items in data.items():
            if not isinstance(sidebar_id, str) or not sidebar_id:
                raise StructuralError((), "sidebar id must be a non-empty string")
            position = (sidebar_id,)
            if not isinstance(items, list):
                raise StructuralError(position, "sidebar items must be a list")
            sidebars.append(Sidebar(id=sidebar_id, items=self._parse_items(items, position)))
        return sidebars

    def _parse_items(self, items: list[object], parent: Position) -> tuple[Node, ...]:
        return tuple(self._parse_item(item, parent, i) for i, item in enumerate(items))

    def _parse_item(self, item: object, parent: Position, index: int) -> Node:
        if isinstance(item, str):
            return self._parse_doc_ref(item, None, (*parent, item))

        if not isinstance(item, Mapping):
            raise StructuralError(
                (*parent, f"[{index}]"),
                "item must be a doc id string or an object with a 'type'",
            )

        node_type = item.get("type")
        label = item.get("label")
        position = (*parent, label if isinstance(label, str) and label else f"[{index}]")

        if node_type == "doc":
            doc_id = _require_str(item, "id", position)
            return self._parse_doc_ref(doc_id, _optional_str(item, "label", position), position)
        if node_type == "category":
            return self._parse_category(item, position)
        if node_type == "link":
            return self._parse_link(item, position)
        raise StructuralError(
            position,
            f"unknown node type {node_type!r} (expected one of {', '.join(NODE_TYPES)})",
        )

    def _parse_doc_ref(self, doc_id: str, label: str | None, position: Position) -> Doc:
        document = self._documents.get(doc_id)
        if document is None:
            raise DanglingReferenceError(position, doc_id)
        self._claim(doc_id, position)
        return _make_doc(document, position, label)

    def _parse_category(self, item: Mapping[str, object], position: Position) -> Category:
        label = _require_str(item, "label", position)

        collapsed = item.get("collapsed", True)
        if not isinstance(collapsed, bool):
            raise StructuralError(position, "'collapsed' must be a boolean")

        linked_doc: Doc | None = None
        link = item.get("link")
        if link is not None:
            if not isinstance(link, Mapping) or link.get("type") != "doc":
                raise StructuralError(position, "category 'link' must be {type: 'doc', id: ...}")
            doc_id = _require_str(link, "id", position)
            document = self._documents.get(doc_id)
            if document is None:
                raise DanglingLinkedDocError(position, label, doc_id)
            self._claim(doc_id, position)
            linked_doc = _make_doc(document, position, label)

        items = item.get("items", [])
        if not isinstance(items, list):
            raise StructuralError(position, "category 'items' must be a list")

        category = Category(
            label=label,
            position=position,
            collapsed=collapsed,
            children=self._parse_items(items, position),
            linked_doc=linked_doc,
        )
        if category.is_empty:
            logger.warning(
                "Category %s has no items and no linked doc; it contributes no routes",
                format_position(position),
            )
        return category

    def _parse_link(self, item: Mapping[str, object], position: Position) -> Link:
        label = _require_str(item, "label", position)
        href = _require_str(item, "href", position)

        external = item.get("external")
        if external is None:
            external = has_scheme(href)
        elif not isinstance(external, bool):
            raise StructuralError(position, "'external' must be a boolean")

        if external and not is_valid_external_url(href):
            raise MalformedExternalLinkError(position, href)
        if not external and has_scheme(href):
            raise StructuralError(position, f"internal link '{href}' must be a site path")

        return Link(label=label, href=href, external=external, position=position)

    def _claim(self, doc_id: str, position: Position) -> None:
        first = self._seen.get(doc_id)
        if first is not None:
            raise DuplicateDocIdError(doc_id, first, position)
        self._seen[doc_id] = position


def parse_sidebars(data: object, documents: DocumentCatalog) -> list[Sidebar]:
    """Parse sidebar declarations into validated node forests."""
    return SidebarParser(documents).parse(data)


def _make_doc(document: Document, position: Position, label: str | None) -> Doc:
    return Doc(
        id=document.id,
        title=document.title,
        source_ref=document.source_path,
        position=position,
        label=label or document.sidebar_label,
    )


def _require_str(item: Mapping[str, object], key: str, position: Position) -> str:
    value = item.get(key)
    if not isinstance(value, str) or not value:
        raise StructuralError(position, f"'{key}' must be a non-empty string")
    return value


def _optional_str(item: Mapping[str, object], key: str, position: Position) -> str | None:
    value = item.get(key)
    if value is not None and not isinstance(value, str):
        raise StructuralError(position, f"'{key}' must be a string")
    return value
