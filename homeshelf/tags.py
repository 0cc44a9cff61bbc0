"""Parsing of tag-encoded labels such as ``row:Staff Picks``."""

from __future__ import annotations

from typing import Iterable, Optional

ROW_LABEL_PREFIX = "row:"
CAROUSEL_LABEL_PREFIX = "carousel:"
DEFAULT_FEATURED_LABEL = "Featured"
DEFAULT_LATEST_LABEL = "Latest Media"


def parse_prefixed_label(tags: Optional[Iterable[str]], prefix: str) -> Optional[str]:
    """Return the label of the first tag starting with ``prefix``.

    The remainder is stripped; a tag with nothing after the prefix yields ``None``.
    """

    for tag in tags or ():
        if isinstance(tag, str) and tag.startswith(prefix):
            label = tag[len(prefix):].strip()
            return label or None
    return None


def row_label(tags: Optional[Iterable[str]]) -> str:
    return parse_prefixed_label(tags, ROW_LABEL_PREFIX) or DEFAULT_FEATURED_LABEL


def carousel_label(
    tags: Optional[Iterable[str]],
    is_featured: bool,
    latest_label: str = DEFAULT_LATEST_LABEL,
) -> str:
    label = parse_prefixed_label(tags, CAROUSEL_LABEL_PREFIX)
    if label:
        return label
    return DEFAULT_FEATURED_LABEL if is_featured else latest_label
