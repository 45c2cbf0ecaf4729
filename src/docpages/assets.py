"""Asset discovery for bundled layout assets.

Locates the stylesheet and scripts shipped inside the docpages package.
"""

from importlib.resources import files
from pathlib import Path


def get_static_dir() -> Path:
    """Return path to bundled static assets.

    Returns:
        Path to the static directory containing layout assets.

    Raises:
        FileNotFoundError: If static assets are not bundled.
    """
    static = files("docpages").joinpath("static")
    if not static.is_dir():
        msg = "Bundled static assets not found. Reinstall docpages with 'pip install -e .'."
        raise FileNotFoundError(msg)
    return Path(str(static))
