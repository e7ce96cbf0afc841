"""
Packaged UI assets.

Assets are addressed by their path relative to this package, e.g.
"assets/templates/index.html" or "assets/css/style.css".
"""

from collections.abc import Callable
from pathlib import Path

# name -> bytes, raises FileNotFoundError for unknown names
AssetLoader = Callable[[str], bytes]

WEB_ROOT = Path(__file__).resolve().parent
ASSET_ROOT = WEB_ROOT / "assets"


def load_asset(name: str) -> bytes:
    """
    Read a packaged asset.

    Raises:
        FileNotFoundError: If no asset has that name, or the name falls outside
            the assets directory
    """
    path = (WEB_ROOT / name).resolve()
    if not path.is_relative_to(ASSET_ROOT) or not path.is_file():
        raise FileNotFoundError(name)
    return path.read_bytes()
