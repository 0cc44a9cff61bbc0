"""Thin async wrapper around the Jellyfin HTTP API."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from ..backdrop import ImageRequest
from ..models import Genre, ItemQuery, MediaItem


class CatalogError(RuntimeError):
    """Raised when the media server cannot satisfy a catalog request."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _unwrap_items(payload: Any) -> List[Dict[str, Any]]:
    """Accept either a bare list or a ``{"Items": [...]}`` result wrapper."""

    if isinstance(payload, list):
        items = payload
    elif isinstance(payload, dict):
        items = payload.get("Items") or []
    else:
        raise CatalogError(f"Unexpected payload type: {type(payload).__name__}")
    if not isinstance(items, list):
        raise CatalogError("Expected a list of items in server response")
    return [entry for entry in items if isinstance(entry, dict)]


class JellyfinService:
    """Catalog implementation backed by a Jellyfin server."""

    def __init__(self, client: httpx.AsyncClient, user_id: str) -> None:
        self.client = client
        self.user_id = user_id

    async def _get_json(self, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        try:
            response = await self.client.get(path, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise CatalogError(f"GET {path} returned HTTP {status}", status_code=status) from exc
        except httpx.RequestError as exc:
            raise CatalogError(f"GET {path} failed: {exc}") from exc
        except ValueError as exc:
            raise CatalogError(f"GET {path} returned invalid JSON") from exc

    # ------------------------------------------------------------------
    # Catalog fetches
    # ------------------------------------------------------------------
    async def fetch_items(self, query: ItemQuery) -> List[MediaItem]:
        payload = await self._get_json(f"Users/{self.user_id}/Items", query.to_params())
        return self._parse(payload, MediaItem)

    async def fetch_latest(self, query: ItemQuery) -> List[MediaItem]:
        payload = await self._get_json(f"Users/{self.user_id}/Items/Latest", query.to_params())
        return self._parse(payload, MediaItem)

    async def fetch_genres(self, query: ItemQuery) -> List[Genre]:
        params = {"userId": self.user_id, **query.to_params()}
        payload = await self._get_json("Genres", params)
        return self._parse(payload, Genre)

    @staticmethod
    def _parse(payload: Any, model):
        try:
            return [model.model_validate(entry) for entry in _unwrap_items(payload)]
        except ValidationError as exc:
            raise CatalogError(f"Malformed {model.__name__} in server response") from exc

    # ------------------------------------------------------------------
    # Image urls
    # ------------------------------------------------------------------
    def build_image_url(self, item_id: str, request: ImageRequest) -> str:
        path = f"Items/{item_id}/Images/{request.image_type.value}"
        if request.index is not None:
            path += f"/{request.index}"
        params = {"tag": request.tag, **request.options.to_params()}
        url = self.client.base_url.join(path).copy_merge_params(params)
        return str(url)
