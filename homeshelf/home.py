"""Assemble the complete home screen from the carousel and row selectors."""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from typing import Dict, Optional

from structlog.stdlib import BoundLogger

from .carousel import CarouselResult, load_carousel
from .config import HomeSettings
from .logging import get_logger
from .rotation import day_bucket
from .rows import RowSelection, load_rows
from .services.base import Catalog


@dataclass
class HomeLayout:
    day: int
    carousel: CarouselResult
    rows: RowSelection

    @property
    def errors(self) -> Dict[str, str]:
        errors = {f"carousel.{name}": error for name, error in self.carousel.errors.items()}
        errors.update({f"rows.{name}": error for name, error in self.rows.errors.items()})
        return errors


async def load_home(
    catalog: Catalog,
    settings: HomeSettings,
    logger: Optional[BoundLogger] = None,
    day: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> HomeLayout:
    logger = logger or get_logger("homeshelf.home")
    if day is None:
        day = day_bucket()

    carousel, rows = await asyncio.gather(
        load_carousel(catalog, settings, logger=logger.bind(section="carousel"), rng=rng),
        load_rows(catalog, settings, logger=logger.bind(section="rows"), day=day),
    )
    layout = HomeLayout(day=day, carousel=carousel, rows=rows)
    logger.info(
        "home.loaded",
        day=day,
        slides=len(carousel.slides),
        rows=len(rows.groups),
        errors=sorted(layout.errors),
    )
    return layout
