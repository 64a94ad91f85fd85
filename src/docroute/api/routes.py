"""Route table API endpoint."""

from aiohttp import web

from docroute.app_keys import state_key


def create_route_table_routes() -> list[web.RouteDef]:
    return [web.get("/api/routes", get_routes)]


async def get_routes(request: web.Request) -> web.Response:
    routes = request.app[state_key].current.routes
    return web.json_response({"routes": routes.to_dict()})
