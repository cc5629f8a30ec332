"""Bilibili API client for Opusview.

This module provides an async HTTP client for the Bilibili web API.
Requests carry the browser user agent and the session cookie from the
configuration, and responses are decoded JSON envelopes.
"""

import logging
from typing import Any

import httpx

from opusview.bilibili.types import OpusDetailResponse
from opusview.config import BilibiliConfig

logger = logging.getLogger(__name__)


def create_http_client(config: BilibiliConfig) -> httpx.AsyncClient:
    """Create the shared httpx client.

    Args:
        config: Upstream API configuration

    Returns:
        httpx AsyncClient with the configured timeout
    """
    return httpx.AsyncClient(timeout=config.timeout, follow_redirects=True)


class BilibiliClient:
    """Async HTTP client for the Bilibili web API."""

    def __init__(self, client: httpx.AsyncClient, config: BilibiliConfig):
        """Initialize Bilibili client.

        Args:
            client: httpx AsyncClient, owned by the caller
            config: Upstream API configuration (URL, cookie, user agent)
        """
        self.client = client
        self.config = config

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "User-Agent": self.config.user_agent,
        }
        if self.config.cookie:
            headers["Cookie"] = self.config.cookie
        return headers

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
    ) -> Any:
        """Send a request and decode the JSON response.

        Args:
            method: HTTP method
            url: Absolute request URL
            params: Optional query parameters
            json: Optional JSON body

        Returns:
            Decoded JSON response

        Raises:
            httpx.HTTPError: If request fails
        """
        logger.debug(f"{method} {url} params={params}")
        response = await self.client.request(
            method,
            url,
            params=params,
            json=json,
            headers=self._headers(),
        )
        if response.status_code >= 400:
            logger.error(f"Error response: {response.text}")
        response.raise_for_status()
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Non-JSON response from {url}: {response.text[:200]}")
            raise httpx.DecodingError(f"Invalid JSON response from {url}", request=response.request) from e

    async def get(self, url: str, params: dict[str, str] | None = None) -> Any:
        return await self.request("GET", url, params=params)

    async def post(self, url: str, data: Any) -> Any:
        return await self.request("POST", url, json=data)

    async def put(self, url: str, data: Any) -> Any:
        return await self.request("PUT", url, json=data)

    async def delete(self, url: str, data: Any) -> Any:
        return await self.request("DELETE", url, json=data)

    async def fetch_opus(self, opus_id: str) -> OpusDetailResponse:
        """Get the detail of an opus.

        Args:
            opus_id: Opus ID (e.g., "1133181564352462851")

        Returns:
            Response envelope with the opus item

        Raises:
            httpx.HTTPError: If request fails
        """
        params = {"id": opus_id}
        if self.config.features:
            params["features"] = ",".join(self.config.features)

        logger.info(f"Fetching opus {opus_id}")
        data: OpusDetailResponse = await self.get(self.config.api_url, params=params)
        if isinstance(data, dict) and data.get("code") not in (0, None):
            logger.warning(f"Opus {opus_id}: API code {data.get('code')}: {data.get('message')}")
        return data
