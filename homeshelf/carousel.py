"""Hero carousel: featured and latest items merged into one capped sequence."""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

from structlog.stdlib import BoundLogger

from .backdrop import ImageUrlBuilder, ScaleOptions, resolve_backdrop_url
from .config import HomeSettings
from .logging import get_logger
from .models import CarouselSelection, ItemQuery, MediaItem
from .services.base import Catalog
from .tags import carousel_label

MAX_SLIDES = 10


@dataclass(frozen=True)
class CarouselSlide:
    item: MediaItem
    label: str
    featured: bool
    backdrop_url: Optional[str] = None


@dataclass
class CarouselResult:
    """Outcome of one carousel load, including any source that failed."""

    selection: CarouselSelection
    slides: List[CarouselSlide] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)


def aggregate(
    featured: Iterable[MediaItem],
    latest: Iterable[MediaItem],
    max_total: int = MAX_SLIDES,
) -> CarouselSelection:
    """Merge featured then latest items, dropping duplicates and id-less entries.

    Featured items are all kept; latest items only fill the remaining room up
    to ``max_total``. Input order is preserved.
    """

    seen: Set[str] = set()
    merged: List[MediaItem] = []
    featured_ids: Set[str] = set()

    for item in featured:
        if item.id and item.id not in seen:
            seen.add(item.id)
            featured_ids.add(item.id)
            merged.append(item)

    for item in latest:
        if len(merged) >= max_total:
            break
        if item.id and item.id not in seen:
            seen.add(item.id)
            merged.append(item)

    return CarouselSelection(items=tuple(merged), featured_ids=frozenset(featured_ids))


def build_slides(
    selection: CarouselSelection,
    images: ImageUrlBuilder,
    settings: HomeSettings,
    rng: Optional[random.Random] = None,
) -> List[CarouselSlide]:
    carousel = settings.carousel
    options = ScaleOptions(max_width=carousel.backdrop_max_width)
    slides = []
    for item in selection.items:
        featured = selection.is_featured(item)
        slides.append(
            CarouselSlide(
                item=item,
                label=carousel_label(item.tags, featured, carousel.latest_label),
                featured=featured,
                backdrop_url=resolve_backdrop_url(images, item, options, carousel.backdrop_index, rng),
            )
        )
    return slides


def carousel_queries(settings: HomeSettings) -> Tuple[ItemQuery, ItemQuery]:
    """Return the featured-pool and latest-pool queries."""

    carousel = settings.carousel
    featured = ItemQuery(
        tags=[carousel.featured_tag],
        include_item_types=settings.include_item_types,
        limit=carousel.max_slides,
        fields=carousel.fields,
        recursive=True,
    )
    latest = ItemQuery(
        include_item_types=settings.include_item_types,
        limit=carousel.max_slides,
        fields=carousel.fields,
    )
    return featured, latest


async def load_carousel(
    catalog: Catalog,
    settings: HomeSettings,
    logger: Optional[BoundLogger] = None,
    rng: Optional[random.Random] = None,
) -> CarouselResult:
    """Fetch both pools concurrently and merge them.

    A failed pool is logged and contributes no items; the other pool is used as is.
    """

    logger = logger or get_logger("homeshelf.carousel")
    featured_query, latest_query = carousel_queries(settings)

    results = await asyncio.gather(
        catalog.fetch_items(featured_query),
        catalog.fetch_latest(latest_query),
        return_exceptions=True,
    )

    pools: Dict[str, List[MediaItem]] = {}
    errors: Dict[str, str] = {}
    for name, result in zip(("featured", "latest"), results):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            errors[name] = str(result) or type(result).__name__
            logger.error("carousel.source_failed", source=name, error=errors[name])
            pools[name] = []
        else:
            pools[name] = list(result)

    selection = aggregate(pools["featured"], pools["latest"], settings.carousel.max_slides)
    logger.info(
        "carousel.selected",
        count=len(selection.items),
        featured=len(selection.featured_ids),
        failed_sources=sorted(errors),
    )
    slides = build_slides(selection, catalog, settings, rng)
    return CarouselResult(selection=selection, slides=slides, errors=errors)
