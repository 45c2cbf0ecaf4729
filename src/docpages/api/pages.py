"""Pages API endpoint.

Generates a page on demand and returns its composed props as JSON.
"""

import json
from functools import partial
from hashlib import md5

from aiohttp import web

from docpages.app_keys import site_loader_key
from docpages.core.errors import ContentNotFoundError, DocpagesError, FetchError

_dumps = partial(json.dumps, ensure_ascii=False, default=str)


def create_pages_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/pages/{collection}/{slug:.*}", get_page),
    ]


async def get_page(request: web.Request) -> web.Response:
    name = request.match_info["collection"]
    slug_path = request.match_info["slug"].strip("/")
    loader = request.app[site_loader_key]

    try:
        generator = await loader.generator()
    except DocpagesError as e:
        return error_response(e, slug_path)

    collection = generator.context.collections.get(name)
    if collection is None:
        return web.json_response(
            {"error": "Collection not found", "collection": name},
            status=404,
        )

    slug = tuple(slug_path.split("/"))
    if not collection.has_slug(slug):
        return web.json_response(
            {"error": "Page not found", "path": slug_path},
            status=404,
        )

    try:
        page = await generator.generate(name, slug)
    except DocpagesError as e:
        return error_response(e, slug_path)

    body = _dumps(page.to_dict())
    etag = _compute_etag(body)

    if request.headers.get("If-None-Match") == etag:
        return web.Response(status=304)

    return web.Response(
        text=body,
        content_type="application/json",
        headers={
            "ETag": etag,
            "Cache-Control": "private, max-age=60",
        },
    )


def error_response(error: DocpagesError, path: str) -> web.Response:
    """Map a generation error to a JSON error response."""
    if isinstance(error, ContentNotFoundError):
        status, message = 404, "Page not found"
    elif isinstance(error, FetchError):
        status, message = 502, "Failed to fetch content"
    else:
        status, message = 500, "Failed to render page"
    return web.json_response(
        {"error": message, "path": path, "detail": str(error)},
        status=status,
    )


def _compute_etag(content: str) -> str:
    # First 16 hex chars (64 bits) are enough for cache validation
    content_hash = md5(content.encode("utf-8"), usedforsecurity=False).hexdigest()[:16]
    return f'"{content_hash}"'
