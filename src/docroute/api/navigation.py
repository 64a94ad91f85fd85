"""Navigation API endpoints.

Provides all navigation trees and a single sidebar's tree.
"""

from aiohttp import web

from docroute.app_keys import state_key


def create_navigation_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/navigation", get_navigation),
        web.get("/api/navigation/{sidebar_id}", get_sidebar_navigation),
    ]


async def get_navigation(request: web.Request) -> web.Response:
    navigation = request.app[state_key].current.navigation
    return web.json_response(
        {"sidebars": [tree.to_dict() for tree in navigation.values()]},
    )


async def get_sidebar_navigation(request: web.Request) -> web.Response:
    sidebar_id = request.match_info["sidebar_id"]
    tree = request.app[state_key].current.navigation.get(sidebar_id)
    if tree is None:
        return web.json_response(
            {"error": "Sidebar not found", "sidebarId": sidebar_id},
            status=404,
        )
    return web.json_response(tree.to_dict())
