"""Navigation API endpoint.

Returns the sidebar tree of a collection.
"""

from aiohttp import web

from docpages.api.pages import error_response
from docpages.app_keys import site_loader_key
from docpages.core.errors import DocpagesError


def create_navigation_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/navigation/{collection}", get_navigation),
    ]


async def get_navigation(request: web.Request) -> web.Response:
    name = request.match_info["collection"]
    site_loader = request.app[site_loader_key]

    try:
        context = await site_loader.load()
    except DocpagesError as e:
        return error_response(e, name)

    collection = context.collections.get(name)
    if collection is None:
        return web.json_response(
            {"error": "Collection not found", "collection": name},
            status=404,
        )

    navigation = collection.navigation
    return web.json_response(
        {
            "category": navigation.category,
            "items": [item.to_dict() for item in navigation.items],
        }
    )
