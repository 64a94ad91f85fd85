"""Authored document discovery.

Scans the content directory for markdown files and extracts the metadata the
route compiler needs: id, title, optional slug and a content version marker.
"""

import hashlib
import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

import yaml

from docroute.core.errors import StructuralError
from docroute.core.types import DocId

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIXES = (".md", ".mdx")

_H1_RE = re.compile(r"^#\s+(.+?)\s*$", re.MULTILINE)
_FRONT_MATTER_RE = re.compile(r"\A---\s*\n(.*?)\n---\s*(?:\n|\Z)", re.DOTALL)


@dataclass(frozen=True)
class Document:
    """Authored document.

    Attributes:
        id: Document id relative to the content directory
        title: Display title
        source_path: Source file path relative to the content directory
        version: Content version marker (digest of the source bytes)
        slug: Optional URL path override
        sidebar_label: Optional label used in navigation instead of title
    """

    id: DocId
    title: str
    source_path: Path
    version: str
    slug: str | None = None
    sidebar_label: str | None = None


class DocumentCatalog:
    """Documents indexed by id, in sorted id order."""

    __slots__ = ("_documents", "_source_dir")

    def __init__(self, documents: list[Document], source_dir: Path | None = None) -> None:
        self._documents = {doc.id: doc for doc in sorted(documents, key=lambda d: d.id)}
        self._source_dir = source_dir

    @property
    def source_dir(self) -> Path | None:
        """Content directory the documents were loaded from."""
        return self._source_dir

    def get(self, doc_id: str) -> Document | None:
        return self._documents.get(DocId(doc_id))

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self._documents

    def __iter__(self) -> Iterator[Document]:
        return iter(self._documents.values())

    def __len__(self) -> int:
        return len(self._documents)

    def resolve_source_path(self, doc_id: str) -> Path | None:
        """Resolve a document id to its absolute source file path."""
        doc = self.get(doc_id)
        if doc is None or self._source_dir is None:
            return None
        return self._source_dir / doc.source_path


class DocumentLoader:
    """Loads the document universe from a content directory.

    Skips hidden entries and entries starting with an underscore (partials).
    """

    def __init__(self, source_dir: Path) -> None:
        self._source_dir = source_dir

    @property
    def source_dir(self) -> Path:
        return self._source_dir

    def load(self) -> DocumentCatalog:
        """Load all documents.

        Returns:
            DocumentCatalog, empty if the directory doesn't exist

        Raises:
            StructuralError: If a file is not UTF-8 or its front matter is malformed
        """
        if not self._source_dir.exists():
            logger.warning("Content directory %s does not exist", self._source_dir)
            return DocumentCatalog([], self._source_dir)

        documents: list[Document] = []
        for file_path in sorted(self._source_dir.rglob("*")):
            if not file_path.is_file() or file_path.suffix not in MARKDOWN_SUFFIXES:
                continue
            relative = file_path.relative_to(self._source_dir)
            if any(part.startswith((".", "_")) for part in relative.parts):
                continue
            documents.append(self._load_document(relative))

        logger.debug("Loaded %d documents from %s", len(documents), self._source_dir)
        return DocumentCatalog(documents, self._source_dir)

    def _load_document(self, relative: Path) -> Document:
        raw = (self._source_dir / relative).read_bytes()
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise StructuralError((relative.as_posix(),), "not valid UTF-8") from e
        front_matter, body = parse_front_matter(text, relative)

        doc_id = relative.with_suffix("").as_posix()
        custom_id = _optional_str(front_matter, "id", relative)
        if custom_id is not None:
            parent = relative.parent.as_posix()
            doc_id = custom_id if parent == "." else f"{parent}/{custom_id}"

        title = _optional_str(front_matter, "title", relative)
        if title is None:
            title = extract_title(body) or _title_from_filename(relative.stem)

        return Document(
            id=DocId(doc_id),
            title=title,
            source_path=relative,
            version=hashlib.sha256(raw).hexdigest(),
            slug=_optional_str(front_matter, "slug", relative),
            sidebar_label=_optional_str(front_matter, "sidebar_label", relative),
        )


def parse_front_matter(text: str, source: Path) -> tuple[dict[str, object], str]:
    """Split YAML front matter from a markdown document.

    Args:
        text: Full document text
        source: Source path, used in error messages

    Returns:
        Tuple of (front matter mapping, remaining body)

    Raises:
        StructuralError: If the front matter is not a YAML mapping
    """
    match = _FRONT_MATTER_RE.match(text)
    if match is None:
        return {}, text

    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        raise StructuralError((source.as_posix(),), f"invalid front matter: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise StructuralError((source.as_posix(),), "front matter must be a mapping")
    return data, text[match.end() :]


def extract_title(body: str) -> str | None:
    """Extract title from the first H1 heading."""
    match = _H1_RE.search(body)
    return match.group(1) if match else None


def _optional_str(data: dict[str, object], key: str, source: Path) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise StructuralError((source.as_posix(),), f"front matter '{key}' must be a string")
    return value


def _title_from_filename(stem: str) -> str:
    """Convert "setup-guide" to "Setup Guide"."""
    return stem.replace("-", " ").replace("_", " ").title()
