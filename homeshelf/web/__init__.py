"""HTTP interface for Homeshelf."""
