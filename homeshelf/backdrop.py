"""Backdrop image selection with item, parent and primary-image fallbacks."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Literal, Optional, Protocol, Sequence, Union

from .models import MediaItem

IndexPolicy = Union[Literal["random"], int, None]


class ImageType(str, Enum):
    BACKDROP = "Backdrop"
    PRIMARY = "Primary"


@dataclass(frozen=True)
class ScaleOptions:
    """Optional sizing hints forwarded to the image endpoint."""

    max_width: Optional[int] = None
    width: Optional[int] = None
    max_height: Optional[int] = None
    height: Optional[int] = None
    fill_width: Optional[int] = None
    fill_height: Optional[int] = None
    quality: Optional[int] = None

    def to_params(self) -> Dict[str, str]:
        params = {
            "maxWidth": self.max_width,
            "width": self.width,
            "maxHeight": self.max_height,
            "height": self.height,
            "fillWidth": self.fill_width,
            "fillHeight": self.fill_height,
            "quality": self.quality,
        }
        return {key: str(value) for key, value in params.items() if value is not None}


@dataclass(frozen=True)
class ImageRequest:
    image_type: ImageType
    tag: str
    index: Optional[int] = None
    options: ScaleOptions = field(default_factory=ScaleOptions)


class ImageUrlBuilder(Protocol):
    def build_image_url(self, item_id: str, request: ImageRequest) -> str:
        ...


def backdrop_index(count: int, policy: IndexPolicy = None, rng: Optional[random.Random] = None) -> int:
    """Pick a backdrop index among ``count`` images.

    ``"random"`` draws uniformly from ``[0, count - 1]``, an integer is a
    preferred index clamped into range, anything else selects the first image.
    """

    if count <= 0:
        return 0
    if policy == "random" or policy is True:
        return (rng or random).randint(0, count - 1)
    if isinstance(policy, int) and not isinstance(policy, bool):
        return min(max(0, policy), count - 1)
    return 0


def _backdrop_request(
    tags: Sequence[str],
    options: ScaleOptions,
    policy: IndexPolicy,
    rng: Optional[random.Random],
) -> ImageRequest:
    index = backdrop_index(len(tags), policy, rng)
    return ImageRequest(image_type=ImageType.BACKDROP, tag=tags[index], index=index, options=options)


def resolve_backdrop_url(
    images: ImageUrlBuilder,
    item: MediaItem,
    options: Optional[ScaleOptions] = None,
    policy: IndexPolicy = None,
    rng: Optional[random.Random] = None,
) -> Optional[str]:
    """Return the url of the best background image for ``item``.

    The item's own backdrops win over its parent's backdrops, which win over
    the item's primary image. ``None`` means no usable image exists.
    """

    options = options or ScaleOptions()

    if item.id and item.backdrop_image_tags:
        request = _backdrop_request(item.backdrop_image_tags, options, policy, rng)
        return images.build_image_url(item.id, request)

    if item.parent_backdrop_item_id and item.parent_backdrop_image_tags:
        request = _backdrop_request(item.parent_backdrop_image_tags, options, policy, rng)
        return images.build_image_url(item.parent_backdrop_item_id, request)

    primary_tag = item.primary_image_tag
    if item.id and primary_tag:
        request = ImageRequest(image_type=ImageType.PRIMARY, tag=primary_tag, options=options)
        return images.build_image_url(item.id, request)

    return None
