"""Home screen selection for Jellyfin-compatible media servers."""

__version__ = "0.1.0"
