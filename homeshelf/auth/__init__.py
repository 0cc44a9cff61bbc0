"""Authentication helpers for Homeshelf."""

from .jellyfin import JellyfinClientFactory, JellyfinClientSettings

__all__ = [
    "JellyfinClientFactory",
    "JellyfinClientSettings",
]
