"""Config API endpoint."""

from aiohttp import web

from docroute.app_keys import live_reload_enabled_key, state_key


def create_config_routes() -> list[web.RouteDef]:
    return [web.get("/api/config", get_config)]


async def get_config(request: web.Request) -> web.Response:
    site = request.app[state_key].current.config.site
    return web.json_response(
        {
            "title": site.title,
            "tagline": site.tagline,
            "url": site.url,
            "baseUrl": site.base_url,
            "liveReloadEnabled": request.app[live_reload_enabled_key],
        }
    )
