"""Media server access for Homeshelf."""

from .base import Catalog
from .jellyfin_client import CatalogError, JellyfinService

__all__ = [
    "Catalog",
    "CatalogError",
    "JellyfinService",
]
