"""Opus endpoints.

Serve rendered opus documents as JSON (metadata plus HTML fragment) or as a
standalone HTML page.
"""

import logging
from hashlib import md5

import httpx
from aiohttp import web

from opusview.app_keys import page_config_key, renderer_key, server_config_key, verbose_key
from opusview.core.renderer import RenderResult
from opusview.page import render_page

logger = logging.getLogger(__name__)

MISSING_CONTENT = "Module content not found, check opus id and cookie settings"


def create_opus_routes() -> list[web.RouteDef]:
    return [
        web.get(r"/api/opus/{opus_id:\d+}", get_opus),
        web.get(r"/opus/{opus_id:\d+}", get_opus_page),
        web.get("/", get_default_page),
    ]


async def get_opus(request: web.Request) -> web.Response:
    opus_id = request.match_info["opus_id"]

    try:
        result = await _render(request, opus_id)
    except httpx.HTTPError as e:
        return web.json_response(
            {"error": "Upstream request failed", "id": opus_id, "detail": str(e)},
            status=502,
        )

    if result is None:
        return web.json_response(
            {"error": MISSING_CONTENT, "id": opus_id},
            status=404,
        )

    etag = _compute_etag(result.html)

    if_none_match = request.headers.get("If-None-Match")
    if if_none_match == etag:
        return web.Response(status=304, headers={"ETag": etag})

    meta = result.document.to_meta()
    meta["id"] = meta["id"] or opus_id

    return web.json_response(
        {"meta": meta, "content": result.html},
        headers={
            "ETag": etag,
            "Cache-Control": "private, max-age=60",
        },
    )


async def get_opus_page(request: web.Request) -> web.Response:
    return await _page_response(request, request.match_info["opus_id"])


async def get_default_page(request: web.Request) -> web.Response:
    opus_id = request.app[server_config_key].default_opus_id
    if not opus_id:
        raise web.HTTPNotFound(text="No default opus configured, open /opus/{id}")
    return await _page_response(request, opus_id)


async def _page_response(request: web.Request, opus_id: str) -> web.Response:
    try:
        result = await _render(request, opus_id)
    except httpx.HTTPError as e:
        raise web.HTTPBadGateway(text=f"Upstream request failed: {e}") from e

    if result is None:
        raise web.HTTPNotFound(text=MISSING_CONTENT)

    page = render_page(result.html, request.app[page_config_key], title=result.title)
    return web.Response(text=page, content_type="text/html", charset="utf-8")


async def _render(request: web.Request, opus_id: str) -> RenderResult | None:
    renderer = request.app[renderer_key]
    try:
        result = await renderer.render(opus_id)
    except httpx.HTTPError as e:
        logger.error(f"Opus {opus_id}: upstream request failed: {e}")
        raise

    if result is None:
        logger.error(f"Opus {opus_id}: {MISSING_CONTENT}")
        return None

    if request.app[verbose_key]:
        for warning in result.warnings:
            logger.warning(f"Opus {opus_id}: {warning}")

    return result


def _compute_etag(content: str) -> str:
    content_hash = md5(content.encode("utf-8"), usedforsecurity=False).hexdigest()[:16]
    return f'"{content_hash}"'
