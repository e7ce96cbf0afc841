"""
Browser UI routes.

Serves the UI under the configured web path:
- {web_path}/ renders index.html inside layout.html
- {web_path}/css/custom.css and {web_path}/js/custom.js serve the theme
- {web_path}/images|css|js|fonts/{file} serve packaged static assets
"""

import mimetypes

from fastapi import APIRouter
from fastapi.responses import HTMLResponse, Response
from jinja2 import Environment, FunctionLoader, Template, TemplateError
from markupsafe import Markup

from mailhog_server.bootstrap import Config
from mailhog_server.errors import FatalConfigError
from mailhog_server.logging import get_logger
from mailhog_server.web.loader import AssetLoader
from mailhog_server.web.theme import CUSTOM_CSS, CUSTOM_JS

logger = get_logger(__name__)

STATIC_DIRS = ("images", "css", "js", "fonts")

CUSTOM_CSS_LINK = '    <link rel="stylesheet" href="css/custom.css">\n'
CUSTOM_JS_SCRIPT = '    <script src="js/custom.js"></script>\n'


def inject_before(page: str, marker: str, insertion: str) -> str:
    """
    Insert text before the last occurrence of marker (case-insensitive).

    The page is returned unchanged when it already contains the insertion
    or has no marker.
    """
    if insertion in page:
        return page
    idx = page.lower().rfind(marker.lower())
    if idx == -1:
        return page
    return page[:idx] + insertion + page[idx:]


def _template_environment(asset: AssetLoader) -> Environment:
    def source(name: str) -> str | None:
        try:
            return asset(f"assets/templates/{name}").decode("utf-8")
        except FileNotFoundError:
            return None

    # [: :] keeps {{ }} free for the client-side templates
    return Environment(
        loader=FunctionLoader(source),
        variable_start_string="[:",
        variable_end_string=":]",
        block_start_string="[%",
        block_end_string="%]",
        comment_start_string="[#",
        comment_end_string="#]",
        autoescape=True,
    )


def _load_template(env: Environment, name: str) -> Template:
    try:
        return env.get_template(name)
    except TemplateError as e:
        raise FatalConfigError(f"[UI] Error loading {name}: {e}") from e


def create_web_router(config: Config, asset: AssetLoader) -> APIRouter:
    """
    Create the UI router.

    Templates are loaded eagerly so a broken UI fails at startup.

    Raises:
        FatalConfigError: If index.html or layout.html cannot be loaded
    """
    env = _template_environment(asset)
    index = _load_template(env, "index.html")
    layout = _load_template(env, "layout.html")

    router = APIRouter(prefix=config.web_path, tags=["UI"])

    def static_bytes(content_type: str, data: bytes):
        async def handler() -> Response:
            return Response(content=data, media_type=content_type)

        return handler

    def static(directory: str):
        async def handler(file: str) -> Response:
            name = f"assets/{directory}/{file}"
            try:
                data = asset(name)
            except FileNotFoundError:
                logger.info("[UI] File not found: %s", name)
                return Response(status_code=404)
            content_type = mimetypes.guess_type(file)[0] or "application/octet-stream"
            return Response(content=data, media_type=content_type)

        return handler

    async def index_page() -> Response:
        data = {
            "config": config,
            "page": "Browse",
            "api_host": config.api_host,
        }
        try:
            data["content"] = Markup(index.render(**data))
            page = layout.render(**data)
        except TemplateError as e:
            logger.error("[UI] Error executing template: %s", e)
            return Response(status_code=500)

        page = inject_before(page, "</head>", CUSTOM_CSS_LINK)
        page = inject_before(page, "</body>", CUSTOM_JS_SCRIPT)
        return HTMLResponse(page)

    router.add_api_route(
        "/css/custom.css",
        static_bytes("text/css; charset=utf-8", CUSTOM_CSS.encode("utf-8")),
        methods=["GET"],
        include_in_schema=False,
    )
    router.add_api_route(
        "/js/custom.js",
        static_bytes("application/javascript; charset=utf-8", CUSTOM_JS.encode("utf-8")),
        methods=["GET"],
        include_in_schema=False,
    )
    for directory in STATIC_DIRS:
        router.add_api_route(
            f"/{directory}/{{file:path}}",
            static(directory),
            methods=["GET"],
            include_in_schema=False,
            name=f"ui_{directory}",
        )
    router.add_api_route("/", index_page, methods=["GET"], include_in_schema=False)

    logger.info("Serving UI under http://%s%s/", config.ui_bind_addr, config.web_path)
    return router
