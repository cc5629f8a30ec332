"""aiohttp server for Opusview.

Application factory and route registration for standalone server mode.
"""

import httpx
from aiohttp import web

from opusview.api.opus import create_opus_routes
from opusview.app_keys import (
    http_client_key,
    page_config_key,
    renderer_key,
    server_config_key,
    verbose_key,
)
from opusview.bilibili.client import BilibiliClient, create_http_client
from opusview.config import Config
from opusview.core.renderer import OpusRenderer


def create_app(
    config: Config,
    *,
    verbose: bool = False,
    http_client: httpx.AsyncClient | None = None,
) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration
        verbose: Log render warnings for each served opus
        http_client: httpx client for upstream requests. A client is created
                     from the bilibili configuration when omitted. Either way
                     it is closed on application cleanup.

    Returns:
        Configured aiohttp application
    """
    app = web.Application()

    client = http_client or create_http_client(config.bilibili)
    renderer = OpusRenderer(config.render, BilibiliClient(client, config.bilibili))

    app[renderer_key] = renderer
    app[http_client_key] = client
    app[page_config_key] = config.page
    app[server_config_key] = config.server
    app[verbose_key] = verbose

    app.router.add_routes(create_opus_routes())
    app.on_cleanup.append(_close_http_client)

    return app


async def _close_http_client(app: web.Application) -> None:
    """Close the upstream client on application cleanup."""
    await app[http_client_key].aclose()


def run_server(config: Config, *, verbose: bool = False) -> None:
    """Run the server.

    Args:
        config: Application configuration
        verbose: Log render warnings for each served opus
    """
    app = create_app(config, verbose=verbose)
    web.run_app(app, host=config.server.host, port=config.server.port)
