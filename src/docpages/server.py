"""aiohttp server for docpages.

Application factory and route registration for the development server.
Pages are generated on request, so content edits show up without a rebuild.
"""

from aiohttp import web

from docpages.api.navigation import create_navigation_routes
from docpages.api.pages import create_pages_routes
from docpages.app_keys import live_reload_enabled_key, site_loader_key
from docpages.assets import get_static_dir
from docpages.config import Config
from docpages.core.errors import ContentNotFoundError, DocpagesError, FetchError
from docpages.core.layout import STATIC_URL, render_layout
from docpages.core.site_loader import SiteLoader
from docpages.live import LiveReloadManager
from docpages.live.reload import create_live_reload_routes, create_url_resolver

live_reload_manager_key = web.AppKey("live_reload_manager", LiveReloadManager)


async def page_handler(request: web.Request) -> web.Response:
    """Render a page URL into the layout shell.

    Unknown URLs get a 404, mirroring the pre-rendered site where only
    enumerated pages exist.
    """
    url = "/" + request.match_info["path"].strip("/")
    site_loader = request.app[site_loader_key]

    try:
        generator = await site_loader.generator()
    except DocpagesError as e:
        raise web.HTTPInternalServerError(text=f"Failed to load site: {e}") from e

    resolved = generator.context.resolve_url(url)
    if resolved is None:
        raise web.HTTPNotFound(text=f"Page not found: {url}")
    collection, slug = resolved

    try:
        page = await generator.generate(collection.name, slug)
    except ContentNotFoundError as e:
        raise web.HTTPNotFound(text=str(e)) from e
    except FetchError as e:
        raise web.HTTPBadGateway(text=str(e)) from e
    except DocpagesError as e:
        raise web.HTTPInternalServerError(text=str(e)) from e

    html = render_layout(page, live_reload=request.app[live_reload_enabled_key])
    return web.Response(text=html, content_type="text/html")


def create_app(config: Config) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration

    Returns:
        Configured aiohttp application
    """
    app = web.Application()

    site_loader = SiteLoader(config)

    app[site_loader_key] = site_loader
    app[live_reload_enabled_key] = config.live_reload.enabled
    app.on_startup.append(_start_site_loader)
    app.on_cleanup.append(_stop_site_loader)

    # API routes (must be registered first to take precedence over page routes)
    app.router.add_routes(create_pages_routes())
    app.router.add_routes(create_navigation_routes())

    # Live reload WebSocket endpoint
    if config.live_reload.enabled:
        manager = LiveReloadManager(
            [config.content.root_dir / config.content.content_root, config.partials_dir],
            create_url_resolver(config),
            watch_patterns=config.live_reload.watch_patterns,
            on_change=site_loader.invalidate,
        )
        app[live_reload_manager_key] = manager
        app.router.add_routes(create_live_reload_routes(manager))
        app.on_startup.append(_start_live_reload)
        app.on_cleanup.append(_stop_live_reload)

    app.router.add_static(STATIC_URL, get_static_dir())

    # Page fallback - must be last to catch all non-API routes
    app.router.add_get("/{path:.*}", page_handler)

    return app


async def _start_site_loader(app: web.Application) -> None:
    await app[site_loader_key].start()


async def _stop_site_loader(app: web.Application) -> None:
    await app[site_loader_key].close()


async def _start_live_reload(app: web.Application) -> None:
    """Start live reload on application startup."""
    await app[live_reload_manager_key].start()


async def _stop_live_reload(app: web.Application) -> None:
    """Stop live reload on application cleanup."""
    await app[live_reload_manager_key].stop()


def run_server(config: Config) -> None:
    """Run the server.

    Args:
        config: Application configuration
    """
    app = create_app(config)
    web.run_app(app, host=config.server.host, port=config.server.port)
