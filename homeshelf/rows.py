"""Labeled home rows: editorially featured rows and rotating genre rows."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from structlog.stdlib import BoundLogger

from .config import HomeSettings
from .logging import get_logger
from .models import DisplayGroup, Genre, ItemQuery, MediaItem
from .rotation import day_bucket, pick_window
from .services.base import Catalog
from .tags import row_label

MAX_FEATURED_ROWS = 6
MAX_FEATURED_ITEMS_PER_ROW = 16
MAX_GENRE_ROWS = 4
GENRE_ITEMS_PER_ROW = 16

GENRE_IMAGE_TYPES = ["Primary", "Backdrop", "Thumb"]


@dataclass
class BranchResult:
    name: str
    groups: List[DisplayGroup] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class RowSelection:
    """Rows from both branches; each branch reports its own failure."""

    featured: BranchResult
    genres: BranchResult

    @property
    def groups(self) -> List[DisplayGroup]:
        return self.featured.groups + self.genres.groups

    @property
    def errors(self) -> Dict[str, str]:
        return {branch.name: branch.error for branch in (self.featured, self.genres) if branch.error}


def bucket_by_row_label(items: Iterable[MediaItem]) -> Dict[str, List[MediaItem]]:
    """Group items by their ``row:`` label, keeping first-seen label order."""

    buckets: Dict[str, List[MediaItem]] = {}
    for item in items:
        buckets.setdefault(row_label(item.tags), []).append(item)
    return buckets


def select_featured_rows(
    items: Iterable[MediaItem],
    max_rows: int = MAX_FEATURED_ROWS,
    max_items_per_row: int = MAX_FEATURED_ITEMS_PER_ROW,
    day: Optional[int] = None,
) -> List[DisplayGroup]:
    buckets = bucket_by_row_label(items)
    groups = []
    for label in pick_window(list(buckets), max_rows, day):
        row_items = buckets[label][:max_items_per_row]
        if not row_items:
            continue
        groups.append(DisplayGroup(label=label, kind="featured", items=tuple(row_items)))
    return groups


def genre_query(genre: Genre, settings: HomeSettings) -> ItemQuery:
    genre_rows = settings.genre_rows
    return ItemQuery(
        genre_ids=[genre.id],
        include_item_types=settings.include_item_types,
        limit=genre_rows.items_per_row,
        sort_by=genre_rows.sort_by,
        fields=genre_rows.fields,
        image_type_limit=1,
        enable_image_types=GENRE_IMAGE_TYPES,
        recursive=True,
    )


def select_genre_rows(
    genres: Iterable[Genre],
    settings: HomeSettings,
    day: Optional[int] = None,
) -> List[DisplayGroup]:
    """Pick today's genres; their items are fetched only when a group is loaded.

    Incomplete genres still occupy their slot in the window and are skipped afterwards.
    """

    return [
        DisplayGroup(label=genre.name, kind="genre", query=genre_query(genre, settings))
        for genre in pick_window(list(genres), settings.genre_rows.max_rows, day)
        if genre.is_complete
    ]


async def _featured_branch(catalog: Catalog, settings: HomeSettings, day: int) -> List[DisplayGroup]:
    featured = settings.featured_rows
    items = await catalog.fetch_items(
        ItemQuery(
            tags=[featured.tag],
            include_item_types=settings.include_item_types,
            limit=featured.pool_limit,
            fields=featured.fields,
            recursive=True,
        )
    )
    return select_featured_rows(items, featured.max_rows, featured.max_items_per_row, day)


async def _genre_branch(catalog: Catalog, settings: HomeSettings, day: int) -> List[DisplayGroup]:
    genres = await catalog.fetch_genres(ItemQuery(include_item_types=settings.include_item_types))
    return select_genre_rows(genres, settings, day)


async def load_rows(
    catalog: Catalog,
    settings: HomeSettings,
    logger: Optional[BoundLogger] = None,
    day: Optional[int] = None,
) -> RowSelection:
    """Build featured and genre rows concurrently.

    Both branches always complete; a failing branch is logged and reported
    on its own ``BranchResult`` with no groups.
    """

    logger = logger or get_logger("homeshelf.rows")
    if day is None:
        day = day_bucket()

    results = await asyncio.gather(
        _featured_branch(catalog, settings, day),
        _genre_branch(catalog, settings, day),
        return_exceptions=True,
    )

    branches = []
    for name, result in zip(("featured", "genres"), results):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            error = str(result) or type(result).__name__
            logger.error("rows.branch_failed", branch=name, error=error)
            branches.append(BranchResult(name=name, error=error))
        else:
            logger.info("rows.branch_selected", branch=name, rows=len(result), day=day)
            branches.append(BranchResult(name=name, groups=result))

    return RowSelection(featured=branches[0], genres=branches[1])
