"""Application keys for type-safe app configuration access."""

import httpx
from aiohttp import web

from opusview.config import PageConfig, ServerConfig
from opusview.core.renderer import OpusRenderer

renderer_key = web.AppKey("renderer", OpusRenderer)
page_config_key = web.AppKey("page_config", PageConfig)
server_config_key = web.AppKey("server_config", ServerConfig)
http_client_key = web.AppKey("http_client", httpx.AsyncClient)
verbose_key = web.AppKey("verbose", bool)
