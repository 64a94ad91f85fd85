"""Reserved machine-readable resources.

``llms.txt`` lists every document with its absolute URL for language model
consumers; ``markdown.zip`` bundles the raw markdown sources. Both are
generated from a finished build and served at fixed paths.
"""

import hashlib
import io
import zipfile
from collections.abc import Mapping

from docroute.core.documents import DocumentCatalog
from docroute.core.navigation import NavigationTree
from docroute.core.routes import Resource, RouteTable
from docroute.core.types import URLPath

LLMS_TXT_PATH = URLPath("/llms.txt")
MARKDOWN_ZIP_PATH = URLPath("/markdown.zip")

# Fixed timestamp keeps the archive byte-identical across builds
_ZIP_DATE_TIME = (1980, 1, 1, 0, 0, 0)

RESOURCE_MEDIA_TYPES: dict[str, str] = {
    LLMS_TXT_PATH: "text/plain",
    MARKDOWN_ZIP_PATH: "application/zip",
}


def catalog_version(documents: DocumentCatalog, *extra: str) -> str:
    """Digest of every document's id, source path and content version.

    Args:
        documents: Document catalog
        *extra: Additional inputs the derived resource depends on

    Returns:
        Hex digest
    """
    digest = hashlib.sha256()
    for doc in documents:
        digest.update(f"{doc.id}\0{doc.source_path.as_posix()}\0{doc.version}\n".encode())
    for part in extra:
        digest.update(f"{part}\n".encode())
    return digest.hexdigest()


def reserved_resources(
    documents: DocumentCatalog,
    *,
    llms_txt: bool = True,
    markdown_zip: bool = True,
    llms_context: str = "",
) -> list[Resource]:
    """Resources to register in the route table.

    Each resource is versioned by the content it is generated from, so its
    component id changes whenever that content does.

    Args:
        documents: Document catalog the resources are generated from
        llms_txt: Register /llms.txt
        markdown_zip: Register /markdown.zip
        llms_context: Serialized site identity and sidebar declarations
    """
    resources: list[Resource] = []
    if llms_txt:
        resources.append(
            Resource(
                path=LLMS_TXT_PATH,
                title="llms.txt",
                version=catalog_version(documents, llms_context),
            )
        )
    if markdown_zip:
        resources.append(
            Resource(
                path=MARKDOWN_ZIP_PATH,
                title="markdown.zip",
                version=catalog_version(documents),
            )
        )
    return resources


def render_llms_txt(
    *,
    title: str,
    tagline: str | None,
    site_url: str,
    routes: RouteTable,
    navigation: Mapping[str, NavigationTree],
) -> str:
    """Render the llms.txt index.

    Args:
        title: Site title
        tagline: Optional one-line site description
        site_url: Absolute site URL including base path (e.g., "https://example.com")
        routes: Compiled route table
        navigation: Navigation trees keyed by sidebar id

    Returns:
        llms.txt content
    """
    base = site_url.rstrip("/")
    lines = [f"# {title}", ""]
    if tagline:
        lines += [f"> {tagline}", ""]

    for sidebar_id, tree in navigation.items():
        lines.append(f"## {sidebar_id}")
        lines.append("")
        for node in tree.sequence():
            lines.append(f"- [{node.label}]({base}{node.path})")
        lines.append("")

    unlisted = [
        entry for entry in routes if entry.kind == "doc" and entry.sidebar_id is None
    ]
    if unlisted:
        lines += ["## Optional", ""]
        for entry in unlisted:
            lines.append(f"- [{entry.title}]({base}{entry.path})")
        lines.append("")

    return "\n".join(lines)


def build_markdown_zip(documents: DocumentCatalog) -> bytes:
    """Bundle document sources into a zip archive.

    Entries are named after the source path and written in sorted order with a
    fixed timestamp.

    Raises:
        FileNotFoundError: If the catalog has no source directory
    """
    source_dir = documents.source_dir
    if source_dir is None:
        raise FileNotFoundError("Document catalog has no source directory")

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for doc in sorted(documents, key=lambda d: d.source_path.as_posix()):
            info = zipfile.ZipInfo(doc.source_path.as_posix(), date_time=_ZIP_DATE_TIME)
            info.compress_type = zipfile.ZIP_DEFLATED
            archive.writestr(info, (source_dir / doc.source_path).read_bytes())
    return buffer.getvalue()
