"""aiohttp server for Docroute.

Application factory and route registration. Every non-API request is
dispatched through the compiled route table: page units and reserved
resources for declared paths, the catch-all not-found unit otherwise.
"""

import logging

from aiohttp import web

from docroute.api.config import create_config_routes
from docroute.api.navigation import create_navigation_routes
from docroute.api.pages import (
    compute_etag,
    create_pages_routes,
    not_found_response,
    page_response,
)
from docroute.api.routes import create_route_table_routes
from docroute.app_keys import live_reload_enabled_key, state_key
from docroute.config import Config
from docroute.core.build import BuildResult, SiteState, build_site
from docroute.core.resources import (
    LLMS_TXT_PATH,
    MARKDOWN_ZIP_PATH,
    RESOURCE_MEDIA_TYPES,
    build_markdown_zip,
    render_llms_txt,
)
from docroute.core.routes import RouteEntry

logger = logging.getLogger(__name__)


async def dispatch(request: web.Request) -> web.StreamResponse:
    """Resolve the request path through the route table.

    Route resolution never fails: unmatched paths get the catch-all 404.
    """
    # match_info is already percent-decoded; resolve() decodes on its own
    path = request.rel_url.raw_path
    result = request.app[state_key].current
    entry = result.routes.resolve(path)

    if entry.kind == "resource":
        return _resource_response(request, result, entry)
    if entry.kind == "not_found":
        return not_found_response(path)
    return page_response(request, result, entry)


def _resource_response(
    request: web.Request,
    result: BuildResult,
    entry: RouteEntry,
) -> web.Response:
    site = result.config.site
    if entry.path == LLMS_TXT_PATH:
        body = render_llms_txt(
            title=site.title,
            tagline=site.tagline,
            site_url=site.site_url,
            routes=result.routes,
            navigation=result.navigation,
        ).encode("utf-8")
    elif entry.path == MARKDOWN_ZIP_PATH:
        body = build_markdown_zip(result.documents)
    else:
        return not_found_response(entry.path)

    etag = compute_etag(body)
    if request.headers.get("If-None-Match") == etag:
        return web.Response(status=304)

    return web.Response(
        body=body,
        content_type=RESOURCE_MEDIA_TYPES[entry.path],
        charset="utf-8" if entry.path == LLMS_TXT_PATH else None,
        headers={"ETag": etag},
    )


def create_app(config: Config, *, result: BuildResult | None = None) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration
        result: Prebuilt site; built from config when omitted

    Returns:
        Configured aiohttp application

    Raises:
        BuildError: If the initial build fails
    """
    app = web.Application()

    state = SiteState(result if result is not None else build_site(config))
    app[state_key] = state
    app[live_reload_enabled_key] = config.live_reload.enabled

    # API routes (must be registered first to take precedence over the dispatcher)
    app.router.add_routes(create_route_table_routes())
    app.router.add_routes(create_navigation_routes())
    app.router.add_routes(create_config_routes())
    app.router.add_routes(create_pages_routes())

    if config.live_reload.enabled:
        from docroute.live import LiveReloadManager
        from docroute.live.reload import create_live_reload_routes

        manager = LiveReloadManager(
            config.docs.source_dir,
            state,
            watch_patterns=config.live_reload.watch_patterns,
            extra_paths=[config.docs.sidebar_file],
        )
        app["live_reload_manager"] = manager
        app.router.add_routes(create_live_reload_routes(manager))
        app.on_startup.append(_start_live_reload)
        app.on_cleanup.append(_stop_live_reload)

    # Dispatcher - must be last to catch all non-API routes
    app.router.add_get("/{path:.*}", dispatch)

    return app


async def _start_live_reload(app: web.Application) -> None:
    """Start live reload on application startup."""
    from docroute.live import LiveReloadManager

    manager: LiveReloadManager = app["live_reload_manager"]
    await manager.start()


async def _stop_live_reload(app: web.Application) -> None:
    """Stop live reload on application cleanup."""
    from docroute.live import LiveReloadManager

    manager: LiveReloadManager = app["live_reload_manager"]
    await manager.stop()


def run_server(config: Config) -> None:
    """Run the server.

    Args:
        config: Application configuration
    """
    app = create_app(config)
    logger.info("Serving on http://%s:%d", config.server.host, config.server.port)
    web.run_app(app, host=config.server.host, port=config.server.port)
