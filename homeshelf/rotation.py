"""Day-keyed sliding windows used to rotate rows without randomness."""

from __future__ import annotations

import time
from typing import List, Optional, Sequence, TypeVar

T = TypeVar("T")

DAY_MS = 24 * 60 * 60 * 1000


def day_bucket(epoch_ms: Optional[int] = None) -> int:
    """Number of whole days since the Unix epoch.

    Buckets are UTC-epoch aligned, so the rotation flips at 00:00 UTC
    regardless of the local timezone.
    """

    if epoch_ms is None:
        epoch_ms = int(time.time() * 1000)
    return epoch_ms // DAY_MS


def pick_window(candidates: Sequence[T], count: int, day: Optional[int] = None) -> List[T]:
    """Return ``count`` contiguous candidates starting at a day-derived offset.

    The window is stable for a whole day and visits every candidate within
    ``len(candidates) - count + 1`` consecutive days.
    """

    if len(candidates) <= count:
        return list(candidates)
    if count <= 0:
        return []
    if day is None:
        day = day_bucket()
    span = len(candidates) - count + 1
    start = day % span
    return list(candidates[start:start + count])
