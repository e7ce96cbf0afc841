"""
Browser UI: static assets and the index page.
"""

from mailhog_server.web.loader import AssetLoader, load_asset
from mailhog_server.web.routes import create_web_router, inject_before

__all__ = ["AssetLoader", "create_web_router", "inject_before", "load_asset"]
