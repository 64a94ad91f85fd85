"""Build-time error taxonomy.

Every error here aborts the build. Positions are tuples of labels from the
sidebar root (sidebar id first) down to the offending node.
"""

Position = tuple[str, ...]


def format_position(position: Position) -> str:
    """Render a position as a label path (e.g., "docsSidebar > Guides > [2]")."""
    return " > ".join(position) if position else "<root>"


class BuildError(ValueError):
    """Base class for fatal build errors."""


class StructuralError(BuildError):
    """Malformed sidebar declaration or document."""

    def __init__(self, position: Position, message: str) -> None:
        self.position = position
        self.message = message
        super().__init__(f"{format_position(position)}: {message}")


class DuplicateDocIdError(StructuralError):
    """The same document id is referenced twice across the sidebars."""

    def __init__(self, doc_id: str, first: Position, second: Position) -> None:
        self.doc_id = doc_id
        self.first = first
        self.second = second
        super().__init__(
            second,
            f"duplicate doc id '{doc_id}' (first declared at {format_position(first)})",
        )


class DuplicateRouteError(BuildError):
    """Two declarations normalize to the same URL path."""

    def __init__(self, path: str, position_a: Position, position_b: Position) -> None:
        self.path = path
        self.position_a = position_a
        self.position_b = position_b
        super().__init__(
            f"duplicate route '{path}' declared at {format_position(position_a)} "
            f"and {format_position(position_b)}"
        )


class DanglingReferenceError(BuildError):
    """A doc reference or internal link target does not exist."""

    def __init__(self, position: Position, target: str) -> None:
        self.position = position
        self.target = target
        super().__init__(f"{format_position(position)}: unresolved reference '{target}'")


class DanglingLinkedDocError(DanglingReferenceError):
    """A category's linked doc does not exist."""

    def __init__(self, position: Position, category_label: str, missing_doc_id: str) -> None:
        self.category_label = category_label
        self.missing_doc_id = missing_doc_id
        super().__init__(position, missing_doc_id)
        self.args = (
            f"{format_position(position)}: category '{category_label}' links "
            f"missing doc '{missing_doc_id}'",
        )


class MalformedExternalLinkError(BuildError):
    """An external link's href is not a valid absolute URL."""

    def __init__(self, position: Position, href: str) -> None:
        self.position = position
        self.href = href
        super().__init__(f"{format_position(position)}: malformed external link '{href}'")
