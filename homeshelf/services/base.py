"""Capability the selection code consumes from a media server."""

from __future__ import annotations

from typing import List, Protocol

from ..backdrop import ImageRequest
from ..models import Genre, ItemQuery, MediaItem


class Catalog(Protocol):
    """Read-only catalog access plus image url construction."""

    async def fetch_items(self, query: ItemQuery) -> List[MediaItem]:
        ...

    async def fetch_latest(self, query: ItemQuery) -> List[MediaItem]:
        ...

    async def fetch_genres(self, query: ItemQuery) -> List[Genre]:
        ...

    def build_image_url(self, item_id: str, request: ImageRequest) -> str:
        ...
