"""Jellyfin API authentication and client helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import httpx

from .. import __version__
from ..config import DEFAULT_SERVER_PLACEHOLDER, GlobalConfig
from ..services import JellyfinService


@dataclass
class JellyfinClientSettings:
    base_url: str
    api_key: str
    user_id: str
    timeout_seconds: float


class JellyfinClientFactory:
    """Factory for building authenticated Jellyfin clients."""

    def __init__(self, global_config: GlobalConfig) -> None:
        server = global_config.server
        unset = {"", DEFAULT_SERVER_PLACEHOLDER}
        if server.api_key in unset or server.user_id in unset:
            raise RuntimeError(
                "Server credentials are not configured. Update config.yml with a real api_key and user_id."
            )

        self.settings = JellyfinClientSettings(
            base_url=server.url,
            api_key=server.api_key,
            user_id=server.user_id,
            timeout_seconds=server.timeout_seconds,
        )

    def get_client(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
        """Return an ``httpx.AsyncClient`` carrying the server token.

        Requests are not retried; a failed call surfaces as a ``CatalogError``.
        """

        return httpx.AsyncClient(
            base_url=self.settings.base_url,
            headers={
                "X-Emby-Token": self.settings.api_key,
                "Accept": "application/json",
                "User-Agent": f"homeshelf/{__version__}",
            },
            timeout=self.settings.timeout_seconds,
            transport=transport,
        )

    def get_service(self, client: httpx.AsyncClient) -> JellyfinService:
        return JellyfinService(client, self.settings.user_id)
