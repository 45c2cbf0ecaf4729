"""Layout shell rendering.

Wraps a composed page in the shared documentation layout: head metadata,
sidebar navigation, content and the "edit this page" link.
"""

from jinja2 import Environment, PackageLoader, select_autoescape

from docpages.core.composer import ComposedPage

STATIC_URL = "/_static"

_environment = Environment(
    loader=PackageLoader("docpages", "templates"),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def _in_section(current: str, path: str) -> bool:
    """Check whether a page URL lies in the section of a category path.

    Categories backed by an index page ("/docs/install/index") cover their
    sibling pages ("/docs/install/overview").
    """
    if not path:
        return False
    section = path.removesuffix("/index")
    return current == path or current.startswith(f"{section}/")


_environment.tests["in_section"] = _in_section


def render_layout(
    page: ComposedPage,
    *,
    live_reload: bool = False,
    template: str = "page.html",
) -> str:
    """Render the full HTML document for a page.

    Args:
        page: Composed page
        live_reload: Include the live reload client script
        template: Template name in the package templates directory

    Returns:
        HTML document
    """
    return _environment.get_template(template).render(
        page=page,
        static_url=STATIC_URL,
        live_reload=live_reload,
    )
