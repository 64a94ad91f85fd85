"""URL path helpers.

Normalization is shared by the route compiler and the dispatcher so that
compiled paths and request paths compare equal.
"""

import re
from urllib.parse import unquote, urlsplit

from docroute.core.types import URLPath

_SLASHES_RE = re.compile(r"/{2,}")

EXTERNAL_SCHEMES = frozenset({"http", "https"})


def normalize_path(path: str) -> URLPath:
    """Canonicalize a URL path for comparison.

    Percent-decodes the path (re-escaping a literal "%" so that decoding is
    never applied twice), ensures a leading slash, collapses duplicate
    slashes and strips the trailing slash except for the root path.

    Args:
        path: Raw path (e.g., "guides//backup/", "/caf%C3%A9")

    Returns:
        Normalized path (e.g., "/guides/backup", "/café")
    """
    decoded = unquote(path).replace("%", "%25")
    collapsed = _SLASHES_RE.sub("/", f"/{decoded}")
    if len(collapsed) > 1:
        collapsed = collapsed.rstrip("/") or "/"
    return URLPath(collapsed)


def doc_path(doc_id: str, *, slug: str | None = None, route_base_path: str = "/") -> URLPath:
    """Compute the normalized URL path of a document.

    A trailing "index" segment maps to its directory. An absolute slug
    replaces the whole id, a relative slug replaces the last segment.

    Args:
        doc_id: Document id (e.g., "deployment/index")
        slug: Optional slug override from front matter
        route_base_path: Path prefix for all documents

    Returns:
        Normalized URL path (e.g., "/deployment")
    """
    if slug is not None:
        if slug.startswith("/"):
            relative = slug
        else:
            parent, _, _ = doc_id.rpartition("/")
            relative = f"{parent}/{slug}" if parent else slug
    else:
        relative = doc_id
        if relative == "index":
            relative = ""
        elif relative.endswith("/index"):
            relative = relative.removesuffix("index")
    return normalize_path(f"{route_base_path}/{relative}")


def split_href(href: str) -> str:
    """Strip query string and fragment from an internal href."""
    parts = urlsplit(href)
    return parts.path


def has_scheme(href: str) -> bool:
    """Check whether an href names a URL scheme (e.g., "https:", "mailto:")."""
    return bool(urlsplit(href).scheme)


def is_valid_external_url(href: str) -> bool:
    """Check that an href is a syntactically valid absolute URL.

    Accepts http(s) URLs with a host and mailto links with an address.
    """
    try:
        parts = urlsplit(href)
    except ValueError:
        return False
    if parts.scheme == "mailto":
        return "@" in parts.path
    if parts.scheme not in EXTERNAL_SCHEMES:
        return False
    return bool(parts.hostname) and not any(c.isspace() for c in href)
