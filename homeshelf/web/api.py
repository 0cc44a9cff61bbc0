"""FastAPI application exposing the home layout to a rendering frontend."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from pydantic import BaseModel

from .. import __version__
from ..app_context import AppContext, determine_paths, load_context
from ..auth import JellyfinClientFactory
from ..config import ConfigError, HomeSettings
from ..home import load_home
from ..logging import get_logger
from ..models import DisplayGroup, ItemQuery, MediaItem
from ..services import Catalog, CatalogError

app = FastAPI(title="Homeshelf API", version=__version__)

logger = get_logger("homeshelf.web")


class SlidePayload(BaseModel):
    id: str
    name: Optional[str] = None
    overview: Optional[str] = None
    label: str
    featured: bool
    backdrop_url: Optional[str] = None


class GroupPayload(BaseModel):
    label: str
    kind: str
    items: List[Dict[str, Any]]
    query: Optional[ItemQuery] = None


class HomePayload(BaseModel):
    day: int
    slides: List[SlidePayload]
    groups: List[GroupPayload]
    errors: Dict[str, str]


class ItemsPayload(BaseModel):
    items: List[Dict[str, Any]]


def _resolve_config_dir(override: Optional[str]) -> Optional[Path]:
    if override:
        return Path(override).expanduser()
    env_value = os.getenv("HOMESHELF_CONFIG_DIR")
    if env_value:
        return Path(env_value).expanduser()
    return None


def get_app_context(config_dir: Optional[str] = Query(default=None)) -> AppContext:
    try:
        return load_context(determine_paths(_resolve_config_dir(config_dir)))
    except ConfigError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def get_settings(context: AppContext = Depends(get_app_context)) -> HomeSettings:
    return context.global_config.home


async def get_catalog(context: AppContext = Depends(get_app_context)) -> AsyncIterator[Catalog]:
    try:
        factory = JellyfinClientFactory(context.global_config)
    except RuntimeError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    async with factory.get_client() as client:
        yield factory.get_service(client)


def _item_payload(item: MediaItem) -> Dict[str, Any]:
    return item.model_dump(by_alias=True, exclude_none=True)


def _group_payload(group: DisplayGroup) -> GroupPayload:
    return GroupPayload(
        label=group.label,
        kind=group.kind,
        items=[_item_payload(item) for item in group.items],
        query=group.query,
    )


@app.get("/home", response_model=HomePayload)
async def home(
    day: Optional[int] = Query(default=None, ge=0),
    catalog: Catalog = Depends(get_catalog),
    settings: HomeSettings = Depends(get_settings),
):
    layout = await load_home(catalog, settings, logger=logger, day=day)
    slides = [
        SlidePayload(
            id=slide.item.id,
            name=slide.item.name,
            overview=slide.item.overview,
            label=slide.label,
            featured=slide.featured,
            backdrop_url=slide.backdrop_url,
        )
        for slide in layout.carousel.slides
    ]
    return HomePayload(
        day=layout.day,
        slides=slides,
        groups=[_group_payload(group) for group in layout.rows.groups],
        errors=layout.errors,
    )


@app.post("/groups/items", response_model=ItemsPayload)
async def group_items(query: ItemQuery, catalog: Catalog = Depends(get_catalog)):
    try:
        items = await catalog.fetch_items(query)
    except CatalogError as exc:
        logger.error("web.group_items_failed", error=str(exc), status=exc.status_code)
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return ItemsPayload(items=[_item_payload(item) for item in items])
