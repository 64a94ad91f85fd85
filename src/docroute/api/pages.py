"""Pages API endpoint.

Resolves a path through the route table and returns the bound page unit as
JSON: metadata, breadcrumbs, prev/next links and markdown source.
"""

from datetime import UTC, datetime
from email.utils import formatdate
from hashlib import md5
from time import mktime
from typing import Any

from aiohttp import web

from docroute.app_keys import state_key
from docroute.core.build import BuildResult
from docroute.core.routes import NOT_FOUND_COMPONENT_ID, RouteEntry

PAGES_PREFIX = "/api/pages"


def create_pages_routes() -> list[web.RouteDef]:
    return [
        web.get(f"{PAGES_PREFIX}/{{path:.*}}", get_page),
    ]


async def get_page(request: web.Request) -> web.Response:
    # match_info is already percent-decoded; resolve() decodes on its own
    path = request.rel_url.raw_path.removeprefix(PAGES_PREFIX)
    result = request.app[state_key].current
    entry = result.routes.resolve(path)

    if entry.kind not in ("doc", "category"):
        return not_found_response(path)

    return page_response(request, result, entry)


def page_response(request: web.Request, result: BuildResult, entry: RouteEntry) -> web.Response:
    """Render a page unit response with conditional request support."""
    assert entry.doc_id is not None
    source_path = result.documents.resolve_source_path(entry.doc_id)
    if source_path is None or not source_path.exists():
        return not_found_response(entry.path)

    source = source_path.read_text(encoding="utf-8")
    document = result.documents.get(entry.doc_id)
    assert document is not None

    etag = f'"{entry.component_id}"'
    if request.headers.get("If-None-Match") == etag:
        return web.Response(status=304)

    last_modified = datetime.fromtimestamp(source_path.stat().st_mtime, tz=UTC)

    return web.json_response(
        build_page_payload(result, entry, source, last_modified),
        headers={
            "ETag": etag,
            "Last-Modified": formatdate(mktime(last_modified.timetuple()), usegmt=True),
            "Cache-Control": "private, max-age=60",
        },
    )


def build_page_payload(
    result: BuildResult,
    entry: RouteEntry,
    source: str,
    last_modified: datetime,
) -> dict[str, Any]:
    """Assemble the JSON payload of a page unit."""
    tree = result.navigation_for(entry)
    if tree is None:
        home = result.routes.get("/")
        breadcrumbs = [{"title": "Home", "path": home.path if home is not None else None}]
        prev_item = next_item = None
    else:
        breadcrumbs = [b.to_dict() for b in tree.get_breadcrumbs(entry.path)]
        prev_item, next_item = tree.get_pagination(entry.path)

    return {
        "meta": {
            "title": entry.title,
            "path": entry.path,
            "docId": entry.doc_id,
            "componentId": entry.component_id,
            "sidebarId": entry.sidebar_id,
            "lastModified": last_modified.isoformat(),
        },
        "breadcrumbs": breadcrumbs,
        "pagination": {
            "prev": prev_item.to_dict() if prev_item else None,
            "next": next_item.to_dict() if next_item else None,
        },
        "source": source,
    }


def not_found_response(path: str) -> web.Response:
    """Catch-all response; never a redirect."""
    return web.json_response(
        {"error": "Page not found", "path": path, "componentId": NOT_FOUND_COMPONENT_ID},
        status=404,
    )


def compute_etag(content: bytes) -> str:
    # First 16 hex chars (64 bits) are enough for cache validation
    content_hash = md5(content, usedforsecurity=False).hexdigest()[:16]
    return f'"{content_hash}"'
